"""
Services Module - cross-cutting infrastructure for the staffing service.

- logging_config: structured logging with request correlation
"""

from .logging_config import configure_logging, request_id_var, user_id_var

__all__ = [
    "configure_logging",
    "request_id_var",
    "user_id_var",
]
