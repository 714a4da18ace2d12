"""Application error hierarchy.

Every error raised by the services derives from AppError and carries the HTTP
status the API boundary responds with. Operational errors are expected
outcomes (bad input, missing plan, no quota); non-operational errors are
infrastructure faults (provider down, database write failed).
"""

from typing import Any


class AppError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, status_code: int, is_operational: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_operational = is_operational


class ValidationError(AppError):
    """Caller input is malformed."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message, 400)
        self.details = details


class PlanRejectedError(ValidationError):
    """The model judged the plan impossible to generate (fake place, unrealistic scope)."""

    def __init__(self, message: str, error_type: str) -> None:
        super().__init__(message, details={"error_type": error_type})
        self.error_type = error_type


class ForbiddenError(AppError):
    """Authenticated user lacks access to the resource."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Requested plan, profile, day or item does not exist."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, 404)


class ConflictError(AppError):
    """Operation is not allowed in the plan's current status."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class QuotaExceededError(AppError):
    """User has no plan generations remaining."""

    def __init__(self, message: str = "You have no plan generations remaining.") -> None:
        super().__init__(message, 403)


class ExternalServiceError(AppError):
    """LLM provider or network failure."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message, 502, is_operational=False)
        self.original_error = original_error


class SchemaViolationError(ExternalServiceError):
    """Provider answered, but the payload does not match the expected structure."""


class DatabaseError(AppError):
    """Persistence layer failure."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message, 500, is_operational=False)
        self.original_error = original_error
