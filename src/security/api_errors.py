"""
Unified API Error Response System.

Every error leaves the API in one envelope:
    {error, code, message, status_code, timestamp, request_id, path, details}

Staffing domain errors are translated here and nowhere else; see
STAFFING_ERROR_CODES for the mapping.

Usage:
    from security.api_errors import APIError, ErrorCode

    raise APIError(ErrorCode.AUTH_INVALID_CREDENTIALS, "Invalid credentials.")
"""

from __future__ import annotations

import logging
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.logging_config import request_id_var
from staffing.errors import (
    CapacityExceeded,
    Forbidden,
    InvalidReference,
    NotFound,
    StaffingError,
    StoreFailure,
    Unauthorized,
    ValidationError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR CODES
# =============================================================================


class ErrorCode(str, Enum):
    """
    Standardized error codes for API responses.

    Categories:
    - AUTH_*: Authentication/Authorization errors (401, 403)
    - VALIDATION_*: Input validation errors (400, 422)
    - RESOURCE_*: Resource-related errors (404, 409)
    - SERVER_*: Server-side errors (500, 503)
    - BUSINESS_*: Business logic errors (400)
    """

    # Authentication & Authorization (401, 403)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_INSUFFICIENT_PERMISSIONS = "AUTH_INSUFFICIENT_PERMISSIONS"

    # Validation Errors (400, 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"

    # Resource Errors (404, 405, 409)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    RESOURCE_METHOD_NOT_ALLOWED = "RESOURCE_METHOD_NOT_ALLOWED"

    # Server Errors (500, 503)
    SERVER_INTERNAL_ERROR = "SERVER_INTERNAL_ERROR"
    SERVER_DATABASE_ERROR = "SERVER_DATABASE_ERROR"
    SERVER_UNAVAILABLE = "SERVER_UNAVAILABLE"

    # Business Logic Errors (400)
    BUSINESS_LIMIT_EXCEEDED = "BUSINESS_LIMIT_EXCEEDED"


# =============================================================================
# ERROR CODE TO HTTP STATUS MAPPING
# =============================================================================

ERROR_CODE_STATUS_MAP: Dict[ErrorCode, int] = {
    # Auth errors
    ErrorCode.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.AUTH_INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS: status.HTTP_403_FORBIDDEN,

    # Validation errors
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,

    # Resource errors
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESOURCE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.RESOURCE_METHOD_NOT_ALLOWED: status.HTTP_405_METHOD_NOT_ALLOWED,

    # Server errors
    ErrorCode.SERVER_INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVER_DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SERVER_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,

    # Business errors
    ErrorCode.BUSINESS_LIMIT_EXCEEDED: status.HTTP_400_BAD_REQUEST,
}


# Staffing domain error -> API error code. Looked up along the exception's MRO.
STAFFING_ERROR_CODES: Dict[Type[StaffingError], ErrorCode] = {
    InvalidReference: ErrorCode.VALIDATION_INVALID_FORMAT,
    NotFound: ErrorCode.RESOURCE_NOT_FOUND,
    ValidationError: ErrorCode.VALIDATION_ERROR,
    CapacityExceeded: ErrorCode.BUSINESS_LIMIT_EXCEEDED,
    Unauthorized: ErrorCode.AUTH_REQUIRED,
    Forbidden: ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS,
    StoreFailure: ErrorCode.SERVER_DATABASE_ERROR,
}


def code_for_staffing_error(exc: StaffingError) -> ErrorCode:
    for cls in type(exc).__mro__:
        if cls in STAFFING_ERROR_CODES:
            return STAFFING_ERROR_CODES[cls]
    return ErrorCode.SERVER_INTERNAL_ERROR


# =============================================================================
# ERROR RESPONSE MODELS
# =============================================================================


class FieldError(BaseModel):
    """Individual field validation error."""
    field: str = Field(..., description="Field name that caused the error")
    message: str = Field(..., description="Error message for this field")
    code: str = Field(default="invalid", description="Error code for this field")


class ErrorResponse(BaseModel):
    """
    Standardized API error response.

    All API errors return this format for consistent client handling.
    """
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "error": True,
            "code": "BUSINESS_LIMIT_EXCEEDED",
            "message": "Cannot assign: allocation (50%) + existing (60%) exceeds engineer's max capacity (100%).",
            "status_code": 400,
            "timestamp": "2025-07-01T12:00:00+00:00",
            "request_id": "550e8400-e29b-41d4-a716-446655440000",
            "path": "/api/assignments",
            "details": {"attempted": 50, "existing": 60, "max_capacity": 100},
        }
    })

    error: bool = Field(default=True, description="Always true for errors")
    code: str = Field(..., description="Error code from ErrorCode enum")
    message: str = Field(..., description="Human-readable error message")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    request_id: str = Field(..., description="Unique request identifier for tracking")
    path: Optional[str] = Field(None, description="Request path that caused the error")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    field_errors: Optional[List[FieldError]] = Field(None, description="Field-specific validation errors")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# API ERROR EXCEPTION
# =============================================================================


class APIError(Exception):
    """
    Custom exception for API errors.

    Raise this exception anywhere in the web layer to return a standardized
    error response.

    Usage:
        raise APIError(
            code=ErrorCode.AUTH_INVALID_CREDENTIALS,
            message="Invalid credentials.",
        )
    """

    def __init__(
        self,
        code: Union[ErrorCode, str],
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        field_errors: Optional[List[Dict[str, str]]] = None,
        headers: Optional[Dict[str, str]] = None,
        log_error: bool = True,
    ):
        self.code = code if isinstance(code, ErrorCode) else ErrorCode(code)
        self.message = message
        self.status_code = status_code or ERROR_CODE_STATUS_MAP.get(
            self.code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        self.details = details
        self.field_errors = field_errors
        self.headers = headers or {}
        self.log_error = log_error
        super().__init__(message)

    @classmethod
    def from_staffing_error(cls, exc: StaffingError) -> "APIError":
        """Translate a staffing domain error into its API form."""
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        return cls(
            code=code_for_staffing_error(exc),
            message=exc.message,
            details=exc.details,
            headers=headers,
        )

    def to_response(self, request_id: str, path: Optional[str] = None) -> ErrorResponse:
        """Convert to ErrorResponse model."""
        field_error_models = None
        if self.field_errors:
            field_error_models = [
                FieldError(
                    field=fe.get("field", "unknown"),
                    message=fe.get("message", "Invalid value"),
                    code=fe.get("code", "invalid"),
                )
                for fe in self.field_errors
            ]

        return ErrorResponse(
            error=True,
            code=self.code.value,
            message=self.message,
            status_code=self.status_code,
            timestamp=_now(),
            request_id=request_id,
            path=path,
            details=self.details,
            field_errors=field_error_models,
        )


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def get_request_id(request: Request) -> str:
    """Get or generate request ID for tracking."""
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = request.headers.get("X-Request-ID")
    if not request_id:
        request_id = str(uuid.uuid4())
    return request_id


def _api_error_response(request: Request, exc: APIError) -> JSONResponse:
    request_id = get_request_id(request)

    if exc.log_error:
        log_level = logging.WARNING if exc.status_code < 500 else logging.ERROR
        logger.log(
            log_level,
            f"[{request_id}] APIError: {exc.code.value} - {exc.message}",
            extra={
                "request_id": request_id,
                "error_code": exc.code.value,
                "status_code": exc.status_code,
                "path": request.url.path,
                "method": request.method,
                "details": exc.details,
            }
        )

    response = exc.to_response(request_id, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
        headers={"X-Request-ID": request_id, **exc.headers},
    )


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Call this in your app initialization:
        from security.api_errors import register_exception_handlers
        register_exception_handlers(app)
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Handle custom APIError exceptions."""
        return _api_error_response(request, exc)

    @app.exception_handler(StaffingError)
    async def staffing_error_handler(request: Request, exc: StaffingError) -> JSONResponse:
        """Handle staffing domain errors via STAFFING_ERROR_CODES."""
        return _api_error_response(request, APIError.from_staffing_error(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """
        Handle database errors that escaped the unit of work.

        SECURITY: The driver message is logged, never returned.
        """
        request_id = get_request_id(request)
        logger.error(
            f"[{request_id}] Database error: {type(exc).__name__}: {exc}",
            extra={"request_id": request_id, "path": request.url.path, "method": request.method},
            exc_info=True,
        )
        api_error = APIError(
            code=ErrorCode.SERVER_DATABASE_ERROR,
            message="A database error occurred. Please try again later.",
            details={"support": f"Reference ID: {request_id}"},
            log_error=False,
        )
        return _api_error_response(request, api_error)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle Pydantic validation errors."""
        request_id = get_request_id(request)

        field_errors = []
        for error in exc.errors():
            field_path = ".".join(str(loc) for loc in error["loc"] if loc != "body")
            field_errors.append({
                "field": field_path or "body",
                "message": error["msg"],
                "code": error["type"],
            })

        logger.warning(
            f"[{request_id}] Validation error: {len(field_errors)} field(s)",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "field_errors": field_errors,
            }
        )

        response = ErrorResponse(
            error=True,
            code=ErrorCode.VALIDATION_ERROR.value,
            message="Request validation failed",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            timestamp=_now(),
            request_id=request_id,
            path=request.url.path,
            field_errors=[
                FieldError(field=fe["field"], message=fe["message"], code=fe["code"])
                for fe in field_errors
            ],
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle standard HTTP exceptions (unknown routes, wrong methods)."""
        request_id = get_request_id(request)

        status_to_code = {
            400: ErrorCode.VALIDATION_ERROR,
            401: ErrorCode.AUTH_REQUIRED,
            403: ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS,
            404: ErrorCode.RESOURCE_NOT_FOUND,
            405: ErrorCode.RESOURCE_METHOD_NOT_ALLOWED,
            409: ErrorCode.RESOURCE_CONFLICT,
            503: ErrorCode.SERVER_UNAVAILABLE,
        }

        error_code = status_to_code.get(exc.status_code, ErrorCode.SERVER_INTERNAL_ERROR)

        logger.warning(
            f"[{request_id}] HTTP {exc.status_code}: {exc.detail}",
            extra={
                "request_id": request_id,
                "status_code": exc.status_code,
                "path": request.url.path,
                "method": request.method,
            }
        )

        response = ErrorResponse(
            error=True,
            code=error_code.value,
            message=str(exc.detail) if exc.detail else "An error occurred",
            status_code=exc.status_code,
            timestamp=_now(),
            request_id=request_id,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id, **(exc.headers or {})}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global catch-all exception handler.

        SECURITY: Never expose internal error details to clients.
        """
        request_id = get_request_id(request)

        logger.error(
            f"[{request_id}] Unhandled exception: {type(exc).__name__}: {str(exc)}",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc(),
            },
            exc_info=True
        )

        response = ErrorResponse(
            error=True,
            code=ErrorCode.SERVER_INTERNAL_ERROR.value,
            message="An unexpected error occurred. Please try again later.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            timestamp=_now(),
            request_id=request_id,
            path=request.url.path,
            details={"support": f"Reference ID: {request_id}"},
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=response.model_dump(),
            headers={"X-Request-ID": request_id}
        )


# =============================================================================
# REQUEST ID MIDDLEWARE
# =============================================================================


class RequestIDMiddleware:
    """
    Middleware to add request ID to all requests.

    The ID is taken from an incoming X-Request-ID header or generated, stored
    in request.state and request_id_var for log correlation, and echoed on
    the response.
    """

    def __init__(self, app: FastAPI):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(b"x-request-id", b"").decode() or str(uuid.uuid4())

        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id
        token = request_id_var.set(request_id)

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                response_headers = [
                    (name, value) for name, value in message.get("headers", [])
                    if name.lower() != b"x-request-id"
                ]
                response_headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = response_headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            request_id_var.reset(token)
