"""Exception normalization utilities for shared error contracts."""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from . import codes
from .exceptions import RecordError
from .factories import dependency_error, internal_error, not_found_error, validation_error
from .types import ErrorDetail


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Normalize a Python exception into a shared ``ErrorDetail``.

    Taxonomy exceptions already carry their detail. Everything else maps
    conservatively by built-in exception type.
    """
    if isinstance(exc, RecordError):
        return exc.detail

    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, PydanticValidationError):
        return validation_error(
            f"{exc.error_count()} validation error(s) for {exc.title}",
            code=codes.INVALID_ARGUMENT,
            metadata=metadata,
        )

    if isinstance(exc, ValueError):
        return validation_error(str(exc), code=codes.INVALID_ARGUMENT, metadata=metadata)

    if isinstance(exc, KeyError):
        return not_found_error(str(exc), code=codes.RESOURCE_NOT_FOUND, metadata=metadata)

    if isinstance(exc, TimeoutError):
        return dependency_error(
            str(exc) or "dependency timeout",
            code=codes.DEPENDENCY_TIMEOUT,
            retryable=True,
            metadata=metadata,
        )

    if isinstance(exc, ConnectionError):
        return dependency_error(
            str(exc) or "dependency unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    return internal_error(
        str(exc) or "unexpected exception",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
