"""
Auth service: register / login / refresh / logout / verify-token /
password reset / profile / upload counters.

The service owns transaction boundaries: each public operation commits
its own changes or raises one of the errors from `errors.py`.
"""
import logging
import re
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import (
    InvalidToken,
    TokenManager,
    hash_password,
    hash_refresh_token,
    validate_new_password,
    verify_password,
)
from .config import Settings
from .errors import Conflict, NotFound, Unauthorized, ValidationError
from .models import User
from .store import CredentialStore

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_NAME_LENGTH = 255

# Profile fields a user may change through update_profile
PROFILE_UPDATABLE_FIELDS = frozenset({"name"})

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"

# Verified against when the email is unknown, so both login failures cost one hash check
_DUMMY_HASH = hash_password("hiredesk-timing-equalizer")


def _missing(*values: Any) -> bool:
    return any(not isinstance(v, str) or not v.strip() for v in values)


class AuthService:
    def __init__(self, db: Session, settings: Settings, tokens: TokenManager):
        self.db = db
        self.settings = settings
        self.tokens = tokens
        self.store = CredentialStore(db)

    # ---------------- helpers ----------------

    def _check_password_policy(self, password: str) -> None:
        problem = validate_new_password(password, self.settings.PASSWORD_MIN_LENGTH)
        if problem:
            raise ValidationError("Validation error", problem)

    def _issue_session(self, user: User) -> Tuple[str, str]:
        """Issue an access token and a refresh token, superseding the stored one."""
        access_token = self.tokens.issue_access(user.id, user.email)
        refresh_token, expires_at = self.tokens.issue_refresh(user.id, user.email)
        self.store.store_refresh_token(user.id, hash_refresh_token(refresh_token), expires_at)
        return access_token, refresh_token

    # ---------------- session lifecycle ----------------

    def register(self, name: str, email: str, company_name: str, password: str) -> Tuple[User, str, str]:
        if _missing(name, email, company_name, password):
            raise ValidationError(
                "Validation Error", "Name, email, password, and company_name are required"
            )
        self._check_password_policy(password)

        if self.store.get_user_by_email(email):
            raise Conflict("User already exists", "A user with this email already exists")

        try:
            user = self.store.create_user(
                name=name,
                email=email,
                company_name=company_name,
                password_hash=hash_password(password),
            )
            access_token, refresh_token = self._issue_session(user)
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent registration of the same email
            self.db.rollback()
            raise Conflict("User already exists", "A user with this email already exists") from exc

        self.db.refresh(user)
        logger.info("User registered: user_id=%s", user.id)
        return user, access_token, refresh_token

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, else None."""
        user = self.store.get_user_by_email(email)
        if not user:
            verify_password(password, _DUMMY_HASH)
            return None
        if not verify_password(password, user.password):
            return None
        return user

    def login(self, email: str, password: str) -> Tuple[User, str, str]:
        if _missing(email, password):
            raise ValidationError("Validation Error", "Email and password are required")

        user = self.authenticate(email, password)
        if not user:
            raise Unauthorized(INVALID_CREDENTIALS, "Invalid email or password")

        access_token, refresh_token = self._issue_session(user)
        self.db.commit()
        logger.info("Login successful: user_id=%s", user.id)
        return user, access_token, refresh_token

    def lookup_credential_owner(self, email: str) -> Optional[User]:
        """User behind an email, used to attribute failed logins in the audit log."""
        if _missing(email):
            return None
        return self.store.get_user_by_email(email)

    def refresh(self, refresh_token: Optional[str]) -> Tuple[User, str, str]:
        """
        Exchange a refresh token for a new access token, rotating the refresh token.

        The swap of the stored token is a single conditional UPDATE, so a token
        presented twice (even by racing requests) is accepted once.

        Raises:
            Unauthorized: "Refresh token required" when absent, "Invalid refresh token"
                on any signature, expiry, store or ownership mismatch
        """
        if not refresh_token:
            raise Unauthorized("Refresh token required", "No refresh token provided")

        try:
            decoded = self.tokens.verify_signature(refresh_token)
        except InvalidToken as exc:
            raise Unauthorized(INVALID_REFRESH_TOKEN, "Refresh token is invalid or expired") from exc

        try:
            user_id = int(decoded.get("userId"))
        except (TypeError, ValueError) as exc:
            raise Unauthorized(INVALID_REFRESH_TOKEN, "Refresh token is invalid or expired") from exc

        user = self.store.get_user_by_id(user_id)
        if not user:
            raise Unauthorized(INVALID_REFRESH_TOKEN, "User not found")

        access_token = self.tokens.issue_access(user.id, user.email)
        new_refresh_token, expires_at = self.tokens.issue_refresh(user.id, user.email)
        rotated = self.store.rotate_refresh_token(
            user.id,
            hash_refresh_token(refresh_token),
            hash_refresh_token(new_refresh_token),
            expires_at,
        )
        if not rotated:
            # The presented token is no longer the live one for this user
            self.db.rollback()
            raise Unauthorized(INVALID_REFRESH_TOKEN, "Refresh token is not the current token")
        self.db.commit()
        logger.info("Refresh token rotated: user_id=%s", user.id)
        return user, access_token, new_refresh_token

    def logout(self, refresh_token: Optional[str]) -> Optional[int]:
        """
        Invalidate the stored refresh token matching the cookie, if any.

        Never raises: store errors are logged and the logout still succeeds.
        Returns the id of the user whose token was revoked.
        """
        if not refresh_token:
            return None
        try:
            user_id = self.store.revoke_refresh_token_by_hash(hash_refresh_token(refresh_token))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Error clearing refresh token from database")
            return None
        if user_id is not None:
            logger.info("Logout: refresh token revoked for user_id=%s", user_id)
        return user_id

    def verify_token(self, token: Any) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        if not isinstance(token, str) or not token.strip():
            raise ValidationError("Token is required", "VALIDATION_ERROR")
        try:
            decoded = self.tokens.verify_access(token)
        except InvalidToken as exc:
            raise Unauthorized("Invalid or expired token", "TOKEN_VERIFICATION_FAILED") from exc
        return decoded, self.tokens.token_info()

    # ---------------- passwords ----------------

    def reset_password(self, email: str, new_password: str) -> User:
        if _missing(email, new_password):
            raise ValidationError("Validation Error", "Email and new password are required")
        self._check_password_policy(new_password)

        user = self.store.get_user_by_email(email)
        if not user:
            raise NotFound("User not found", "No user found with this email address")

        self.store.update_password(user, hash_password(new_password))
        # Force re-login everywhere
        self.store.revoke_refresh_tokens(user.id)
        self.db.commit()
        logger.info("Password reset: user_id=%s", user.id)
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str, confirm_password: str) -> User:
        if _missing(current_password, new_password, confirm_password):
            raise ValidationError("Validation error", "All password fields are required")
        if new_password != confirm_password:
            raise ValidationError("Validation error", "New password and confirm password do not match")
        self._check_password_policy(new_password)

        user = self.get_user(user_id)
        if not verify_password(current_password, user.password):
            raise ValidationError("Invalid current password", "Current password is incorrect")

        self.store.update_password(user, hash_password(new_password))
        self.store.revoke_refresh_tokens(user.id)
        self.db.commit()
        logger.info("Password changed: user_id=%s", user.id)
        return user

    # ---------------- profile ----------------

    def get_user(self, user_id: int) -> User:
        user = self.store.get_user_by_id(user_id)
        if not user:
            raise NotFound("User not found", "User account not found")
        return user

    def update_profile(self, user_id: int, fields: Dict[str, Any]) -> User:
        """
        Apply a partial profile update. Only keys in PROFILE_UPDATABLE_FIELDS
        are considered; anything else is ignored.
        """
        user = self.get_user(user_id)
        changes = {k: v for k, v in (fields or {}).items() if k in PROFILE_UPDATABLE_FIELDS}

        if "name" in changes:
            name = changes["name"]
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("Validation error", "Name must be a non-empty string")
            name = name.strip()
            if len(name) > MAX_NAME_LENGTH:
                raise ValidationError("Validation error", "Name must be less than 255 characters")
            self.store.update_name(user, name)

        if changes:
            self.db.commit()
            self.db.refresh(user)
            logger.info("Profile updated: user_id=%s fields=%s", user.id, sorted(changes))
        return user

    # ---------------- upload counters ----------------

    def _check_email(self, email: Any) -> str:
        if _missing(email):
            raise ValidationError("Email is required", "VALIDATION_ERROR")
        if not EMAIL_RE.match(email):
            raise ValidationError("Invalid email format", "VALIDATION_ERROR")
        return email

    def _upload_stats(self, user: User, files_uploaded: int) -> Dict[str, Any]:
        limit = self.settings.UPLOAD_LIMIT
        return {
            "email": user.email,
            "name": user.name,
            "totalUploads": files_uploaded,
            "limit": limit,
            "remaining": max(0, limit - files_uploaded),
            "percentage": min(100.0, files_uploaded / limit * 100) if limit > 0 else 100.0,
            "canUpload": files_uploaded < limit,
        }

    def increment_upload(self, email: str) -> Dict[str, Any]:
        email = self._check_email(email)
        files_uploaded = self.store.increment_uploads(email)
        if files_uploaded is None:
            self.db.rollback()
            raise NotFound("User not found", "USER_NOT_FOUND")
        self.db.commit()

        user = self.store.get_user_by_email(email)
        logger.info("Upload counted: user_id=%s files_uploaded=%s", user.id, files_uploaded)
        return self._upload_stats(user, files_uploaded)

    def get_upload_stats(self, email: str) -> Dict[str, Any]:
        email = self._check_email(email)
        user = self.store.get_user_by_email(email)
        if not user:
            raise NotFound("User not found", "USER_NOT_FOUND")
        return self._upload_stats(user, user.files_uploaded or 0)
