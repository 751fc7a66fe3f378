"""
Error taxonomy and the JSON error envelope.

Every failure leaves the service as `{"success": false, "message": ..., "error": ...}`.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AuthServiceError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_error = "ERROR"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error or self.default_error


class ValidationError(AuthServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_error = "VALIDATION_ERROR"


class Unauthorized(AuthServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_error = "UNAUTHORIZED"


class NotFound(AuthServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_error = "NOT_FOUND"


class Conflict(AuthServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_error = "CONFLICT"


def error_response(message: str, status_code: int, error: Optional[str] = None, headers: Optional[dict] = None) -> JSONResponse:
    payload = {"success": False, "message": message}
    if error:
        payload["error"] = error
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append(f"{'.'.join(loc) or 'body'}: {err.get('msg')}")
    return "; ".join(fields) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthServiceError)
    async def handle_auth_error(request: Request, exc: AuthServiceError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return error_response(exc.message, exc.status_code, exc.error, headers=headers)

    # Missing or ill-typed body fields are a 400, not FastAPI's default 422
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return error_response("Validation Error", status.HTTP_400_BAD_REQUEST, _describe_validation_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(detail, exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return error_response(
            "Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR"
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return error_response(
            "Internal Server Error", status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
        )
