"""Error payload rendering for presentation adapters."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .normalize import exception_to_error
from .types import ErrorCategory

_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
}


class ErrorResponse(BaseModel):
    """Serializable error body returned to callers of the CRUD surface."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: datetime
    code: int
    internal_code: str | None = None
    exception: str | None = None
    message: str | None = None
    validation_errors: list[str] | None = Field(default=None)


def status_for(exc: Exception) -> int:
    """Return the conventional HTTP status for one exception."""
    detail = exception_to_error(exc)
    return _STATUS_BY_CATEGORY.get(detail.category, 500)


def build_error_response(
    exc: Exception,
    status_code: int | None = None,
    *,
    now: datetime | None = None,
) -> ErrorResponse:
    """Build an error body from one exception and optional explicit status."""
    detail = exception_to_error(exc)
    message: str | None = detail.message
    validation_errors: list[str] | None = None

    if isinstance(exc, PydanticValidationError):
        validation_errors = [
            f"{exc.title} - {'.'.join(str(part) for part in item['loc'])} {item['msg']}"
            for item in exc.errors()
        ]
        message = None

    return ErrorResponse(
        timestamp=now or datetime.now(UTC),
        code=status_code if status_code is not None else status_for(exc),
        internal_code=detail.code,
        exception=type(exc).__name__,
        message=message,
        validation_errors=validation_errors,
    )
