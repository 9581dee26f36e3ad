"""
Staffing Domain Errors.

Every rejection raised by the capacity engine and its resolvers is one of
these types. The web layer maps them onto HTTP responses in
security.api_errors; nothing in between reinterprets them.
"""

from typing import Any, Dict, Optional


class StaffingError(Exception):
    """Base class for all staffing domain errors."""

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details: Optional[Dict[str, Any]] = details or None
        super().__init__(message)


class InvalidReference(StaffingError):
    """An entity identifier is malformed."""


class NotFound(StaffingError):
    """A referenced entity does not exist."""


class ValidationError(StaffingError):
    """Input violates a field-level rule (e.g. end date before start date)."""


class CapacityExceeded(StaffingError):
    """Accepting the allocation would over-commit the engineer."""

    def __init__(self, attempted: int, existing: int, max_capacity: int):
        self.attempted = attempted
        self.existing = existing
        self.max_capacity = max_capacity
        super().__init__(
            f"Cannot assign: allocation ({attempted}%) + existing ({existing}%) "
            f"exceeds engineer's max capacity ({max_capacity}%).",
            attempted=attempted,
            existing=existing,
            max_capacity=max_capacity,
        )


class Unauthorized(StaffingError):
    """The caller is not authenticated."""


class Forbidden(StaffingError):
    """The caller's role does not allow the operation."""


class StoreFailure(StaffingError):
    """The persistence collaborator failed."""
