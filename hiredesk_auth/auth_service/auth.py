"""
Password hashing and JWT issuance/verification.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
import hashlib
import uuid

import jwt
from passlib.context import CryptContext

from .config import JWT_ALGORITHM, Settings, settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# pbkdf2_sha256 avoids the external bcrypt backend; rounds are the work factor
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=settings.PASSWORD_HASH_ROUNDS,
)


class InvalidToken(Exception):
    """Raised when a token is malformed, wrongly signed, expired or of the wrong type."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plaintext password against a stored hash.

    Returns False on mismatch. Raises ValueError only when the stored hash
    is not a recognizable hash string.
    """
    return pwd_context.verify(plain_password, hashed_password)


def validate_new_password(password: str, min_length: Optional[int] = None) -> Optional[str]:
    """Return an error message if the password violates the length policy, else None."""
    min_length = min_length or settings.PASSWORD_MIN_LENGTH
    if len(password) < min_length:
        return f"New password must be at least {min_length} characters long"
    return None


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest of a raw refresh token; only the digest is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenManager:
    """Issues and verifies access and refresh tokens, each class with its own secret."""

    def __init__(self, config: Settings):
        self.access_secret = config.JWT_ACCESS_SECRET
        self.refresh_secret = config.JWT_REFRESH_SECRET
        self.access_ttl = config.access_token_ttl
        self.refresh_ttl = config.refresh_token_ttl
        self.access_expires_in = config.JWT_ACCESS_EXPIRES_IN

    def _encode(self, claims: dict, secret: str, ttl: timedelta, now: Optional[datetime] = None) -> Tuple[str, datetime]:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + ttl
        payload = {
            **claims,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM), expires_at

    def _decode(self, token: str, secret: str, expected_type: str) -> dict:
        if not isinstance(token, str) or not token:
            raise InvalidToken("Token is missing")
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidToken("Token expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidToken(f"Invalid token: {exc}") from exc

        if decoded.get("type") != expected_type:
            raise InvalidToken("Wrong token type")
        return decoded

    def issue_access(self, user_id: int, email: str, now: Optional[datetime] = None) -> str:
        claims = {"userId": str(user_id), "email": email, "type": ACCESS_TOKEN_TYPE}
        token, _ = self._encode(claims, self.access_secret, self.access_ttl, now)
        return token

    def issue_refresh(self, user_id: int, email: str, now: Optional[datetime] = None) -> Tuple[str, datetime]:
        """
        Issue a refresh token.

        Returns:
            Tuple of (token, expires_at) with expires_at as an aware UTC datetime
        """
        claims = {
            "userId": str(user_id),
            "email": email,
            "type": REFRESH_TOKEN_TYPE,
            # unique per issue, so two tokens minted in the same second differ
            "jti": uuid.uuid4().hex,
        }
        return self._encode(claims, self.refresh_secret, self.refresh_ttl, now)

    def verify_access(self, token: str) -> dict:
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def verify_signature(self, refresh_token: str) -> dict:
        """Signature, expiry and type check of a refresh token. Does not consult the store."""
        return self._decode(refresh_token, self.refresh_secret, REFRESH_TOKEN_TYPE)

    def token_info(self) -> dict:
        return {
            "algorithm": JWT_ALGORITHM,
            "expiresIn": self.access_expires_in,
            "secretLength": len(self.access_secret),
        }


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of an `Authorization: Bearer <token>` header, or None."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None
