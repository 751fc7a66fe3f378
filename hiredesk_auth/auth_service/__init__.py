"""
auth_service package

This package contains the core backend logic for the authentication service.
It includes:

- FastAPI application (`main.py`) and routers (`routes/`)
- SQLAlchemy models, database integration and the credential store
  (`models.py`, `db.py`, `store.py`)
- Password hashing and JWT logic (`auth.py`)
- The auth service orchestrating register/login/refresh/logout (`service.py`)
- Pydantic schemas (`schemas.py`) and settings (`config.py`)
"""
