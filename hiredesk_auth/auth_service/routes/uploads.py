"""
Upload counter endpoints.

The counter only ever goes up; increments are single UPDATE statements so
parallel uploads by the same user are all counted.
"""
from typing import Optional

from fastapi import APIRouter, Depends

from ..dependencies import get_auth_service, get_current_user
from ..errors import ValidationError
from ..models import User
from ..schemas import IncrementUploadRequest, UploadStatsResponse
from ..service import AuthService

router = APIRouter(prefix="/api/auth", tags=["uploads"])


@router.get("/user-uploads/{email}", response_model=UploadStatsResponse)
def get_user_uploads(
    email: str,
    _caller: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """Upload count of any user by email, for services holding a valid access token."""
    stats = service.get_upload_stats(email)
    return {"success": True, "message": "Upload statistics retrieved successfully", "data": stats}


@router.post("/increment-upload", response_model=UploadStatsResponse)
def increment_upload(
    payload: Optional[IncrementUploadRequest] = None,
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """Count one upload for the authenticated user."""
    if payload is not None and payload.email and payload.email != user.email:
        raise ValidationError("Validation error", "Email does not match the authenticated user")

    stats = service.increment_upload(user.email)
    return {"success": True, "message": "Upload count incremented successfully", "data": stats}


@router.get("/upload-stats", response_model=UploadStatsResponse)
def get_upload_stats(
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    stats = service.get_upload_stats(user.email)
    return {"success": True, "message": "Upload statistics retrieved successfully", "data": stats}
