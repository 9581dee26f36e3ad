"""
Security module for the staffing service.

Provides the standardized API error envelope, the mapping from staffing
domain errors onto it, and request ID propagation.
"""

from .api_errors import (
    APIError,
    ErrorCode,
    ErrorResponse,
    RequestIDMiddleware,
    register_exception_handlers,
)

__all__ = [
    "APIError",
    "ErrorCode",
    "ErrorResponse",
    "RequestIDMiddleware",
    "register_exception_handlers",
]
