"""HireDesk authentication backend."""
