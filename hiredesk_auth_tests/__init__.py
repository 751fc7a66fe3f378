"""
Tests for the auth_service package.

Every test module runs against a throwaway SQLite database configured in
`conftest.py` before the application is imported:

- registration, login and the refresh-token lifecycle (`test_auth.py`, `test_refresh.py`)
- token issuance/verification and password hashing (`test_tokens.py`)
- profile, password reset/change and upload counters (`test_profile.py`, `test_password_reset.py`, `test_uploads.py`)
- configuration, health checks, event logging and the dev monitor
"""
