"""Factory helpers producing ``ErrorDetail`` values for each category."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def _detail(
    category: ErrorCategory,
    message: str,
    code: str,
    retryable: bool,
    metadata: Mapping[str, str] | None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata=_meta(metadata),
    )


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Malformed input or a violated operation rule; never retryable."""
    return _detail(ErrorCategory.VALIDATION, message, code, False, metadata)


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Lookup by key found nothing."""
    return _detail(ErrorCategory.NOT_FOUND, message, code, False, metadata)


def conflict_error(
    message: str,
    *,
    code: str = codes.CONFLICT,
    retryable: bool = False,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Write collided with stored state.

    Version conflicts are retryable after a re-read; uniqueness collisions
    are not.
    """
    return _detail(ErrorCategory.CONFLICT, message, code, retryable, metadata)


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """A collaborator (database, resolved data) failed or was unavailable."""
    return _detail(ErrorCategory.DEPENDENCY, message, code, retryable, metadata)


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    return _detail(ErrorCategory.INTERNAL, message, code, False, metadata)


def _meta(metadata: Mapping[str, str] | None) -> dict[str, str]:
    return dict(metadata) if metadata else {}
