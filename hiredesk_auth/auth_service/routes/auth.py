"""
Authentication router.

- POST /api/auth/register
- POST /api/auth/login
- POST /api/auth/refresh
- POST /api/auth/logout
- POST /api/auth/verify-token
- GET  /api/auth/jwt-info
- GET  /api/auth/profile
- PUT  /api/auth/update-profile
- POST /api/auth/change-password
- POST /api/auth/reset-password

The access token travels in the JSON body and the Authorization header;
the refresh token only ever travels in an HttpOnly cookie.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from ..config import Settings, get_settings
from ..dependencies import get_auth_service, get_current_user, get_token_manager
from ..auth import TokenManager
from ..errors import Unauthorized
from ..models import User
from ..schemas import (
    ApiResponse,
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateProfileRequest,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from ..service import AuthService
from ..utils.event_logger import log_auth_event

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _set_refresh_cookie(response: Response, token: str, config: Settings) -> None:
    response.set_cookie(
        key=config.REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.is_production,
        samesite=config.REFRESH_COOKIE_SAMESITE,
        max_age=int(config.refresh_token_ttl.total_seconds()),
        path=config.REFRESH_COOKIE_PATH,
    )


def _clear_refresh_cookie(response: Response, config: Settings) -> None:
    response.delete_cookie(
        key=config.REFRESH_COOKIE_NAME,
        httponly=True,
        secure=config.is_production,
        samesite=config.REFRESH_COOKIE_SAMESITE,
        path=config.REFRESH_COOKIE_PATH,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    config: Settings = Depends(get_settings),
):
    user, access_token, refresh_token = service.register(
        payload.name, payload.email, payload.company_name, payload.password
    )
    _set_refresh_cookie(response, refresh_token, config)
    log_auth_event("register", user, request, service.db)

    return {
        "success": True,
        "message": "User registered successfully",
        "data": {"accessToken": access_token, "user": user.to_public_dict()},
    }


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    config: Settings = Depends(get_settings),
):
    try:
        user, access_token, refresh_token = service.login(payload.email, payload.password)
    except Unauthorized:
        # Record the failure against the account if there is one; the response stays generic
        owner = service.lookup_credential_owner(payload.email)
        if owner:
            log_auth_event("login_failure", owner, request, service.db)
        raise

    _set_refresh_cookie(response, refresh_token, config)
    log_auth_event("login_success", user, request, service.db)

    return {
        "success": True,
        "message": "Login successful",
        "data": {"accessToken": access_token, "user": user.to_public_dict()},
    }


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    config: Settings = Depends(get_settings),
):
    token = request.cookies.get(config.REFRESH_COOKIE_NAME)
    user, access_token, new_refresh_token = service.refresh(token)

    _set_refresh_cookie(response, new_refresh_token, config)
    log_auth_event("token_refresh", user, request, service.db)

    return {
        "success": True,
        "message": "Token refreshed successfully",
        "data": {"accessToken": access_token},
    }


@router.post("/logout", response_model=ApiResponse)
def logout(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    config: Settings = Depends(get_settings),
):
    user_id = service.logout(request.cookies.get(config.REFRESH_COOKIE_NAME))
    if user_id is not None:
        user = service.store.get_user_by_id(user_id)
        if user:
            log_auth_event("logout", user, request, service.db)

    _clear_refresh_cookie(response, config)
    return {"success": True, "message": "Logged out successfully"}


@router.post("/verify-token", response_model=VerifyTokenResponse)
def verify_token(
    payload: Optional[VerifyTokenRequest] = None,
    service: AuthService = Depends(get_auth_service),
):
    """
    Verify an access token without touching the user store.
    Meant for other services that share the access secret.
    """
    decoded, token_info = service.verify_token(payload.token if payload else None)
    return {"success": True, "message": "Token is valid", "decoded": decoded, "tokenInfo": token_info}


@router.get("/jwt-info", response_model=ApiResponse)
def jwt_info(
    tokens: TokenManager = Depends(get_token_manager),
    config: Settings = Depends(get_settings),
):
    """Token configuration for integrators. Exposes lengths and lifetimes, never secret material."""
    info = tokens.token_info()
    return {
        "success": True,
        "message": "JWT configuration information",
        "data": {
            "algorithm": info["algorithm"],
            "accessTokenExpiry": config.JWT_ACCESS_EXPIRES_IN,
            "refreshTokenExpiry": config.JWT_REFRESH_EXPIRES_IN,
            "secretLength": info["secretLength"],
            "environment": config.ENVIRONMENT,
            "timestamp": datetime.utcnow().isoformat(),
        },
    }


@router.get("/profile", response_model=ProfileResponse)
def get_profile(user: User = Depends(get_current_user)):
    return {
        "success": True,
        "message": "Profile retrieved successfully",
        "data": user.to_public_dict(),
    }


@router.put("/update-profile", response_model=ProfileResponse)
def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    updated = service.update_profile(user.id, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": updated.to_public_dict(),
    }


@router.post("/change-password", response_model=ApiResponse)
def change_password(
    payload: ChangePasswordRequest,
    request: Request,
    response: Response,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    config: Settings = Depends(get_settings),
):
    service.change_password(user.id, payload.currentPassword, payload.newPassword, payload.confirmPassword)
    log_auth_event("password_change", user, request, service.db)
    _clear_refresh_cookie(response, config)
    return {
        "success": True,
        "message": "Password changed successfully",
        "data": {"message": "Password has been changed. You have been logged out from other devices."},
    }


@router.post("/reset-password", response_model=ApiResponse)
def reset_password(
    payload: ResetPasswordRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    user = service.reset_password(payload.email, payload.newPassword)
    log_auth_event("password_reset", user, request, service.db)
    return {
        "success": True,
        "message": "Password reset successfully",
        "data": {"message": "Password has been reset. Please login with your new password."},
    }
