from pydantic import BaseModel, ConfigDict

from typing import Any, Dict, Optional


# Request bodies. Fields are optional so the service can answer missing
# values with its own validation messages.

class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    company_name: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyTokenRequest(BaseModel):
    # Any: a non-string token is reported as "Token is required", not a schema error
    token: Any = None


class ResetPasswordRequest(BaseModel):
    email: Optional[str] = None
    newPassword: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None
    confirmPassword: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    # Unknown keys are accepted and later ignored by the service
    model_config = ConfigDict(extra="allow")

    name: Any = None


class IncrementUploadRequest(BaseModel):
    email: Optional[str] = None


# Responses

class UserOut(BaseModel):
    id: str
    name: str
    email: str
    company_name: str
    filesUploaded: int
    createdAt: Optional[str] = None


class AuthData(BaseModel):
    accessToken: str
    user: UserOut


class TokenData(BaseModel):
    accessToken: str


class UploadStats(BaseModel):
    email: str
    name: str
    totalUploads: int
    limit: int
    remaining: int
    percentage: float
    canUpload: bool


class ApiResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Any] = None


class AuthResponse(ApiResponse):
    data: AuthData


class TokenResponse(ApiResponse):
    data: TokenData


class ProfileResponse(ApiResponse):
    data: UserOut


class UploadStatsResponse(ApiResponse):
    data: UploadStats


class VerifyTokenResponse(BaseModel):
    success: bool = True
    message: str = "Token is valid"
    decoded: Dict[str, Any]
    tokenInfo: Dict[str, Any]
