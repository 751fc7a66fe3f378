"""
FastAPI dependencies: settings, token manager, auth service and the
bearer-token guard for protected routes.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .auth import InvalidToken, TokenManager, extract_bearer_token
from .config import Settings, get_settings
from .db import get_db
from .errors import Unauthorized
from .models import User
from .service import AuthService


def get_token_manager(config: Settings = Depends(get_settings)) -> TokenManager:
    return TokenManager(config)


def get_auth_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
    tokens: TokenManager = Depends(get_token_manager),
) -> AuthService:
    return AuthService(db, config, tokens)


def get_current_user(
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> User:
    token = extract_bearer_token(authorization)
    if not token:
        raise Unauthorized("Authentication Required", "Access token is required")

    try:
        data = tokens.verify_access(token)
        user_id = int(data.get("userId"))
    except (InvalidToken, TypeError, ValueError) as exc:
        raise Unauthorized("Authentication Failed", "Invalid or expired token") from exc

    user = db.get(User, user_id)
    if not user:
        raise Unauthorized("Authentication Failed", "User not found")
    return user
