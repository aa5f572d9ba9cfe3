"""Typed exception taxonomy for record persistence orchestration.

Each exception carries a structured ``ErrorDetail`` so presentation adapters
can render it without inspecting exception types, plus the entity descriptor,
key and offending field when they are known.
"""

from __future__ import annotations

from typing import Mapping

from . import codes
from .factories import (
    conflict_error,
    dependency_error,
    internal_error,
    not_found_error,
    validation_error,
)
from .types import ErrorDetail


class RecordError(Exception):
    """Base class for every failure raised by the orchestration layers."""

    default_code = codes.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        descriptor: str | None = None,
        key: object | None = None,
        field: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.descriptor = descriptor
        self.key = key
        self.field = field
        self.detail = self._build_detail(
            message,
            code=code or self.default_code,
            metadata=_context_metadata(descriptor=descriptor, key=key, field=field),
        )

    def _build_detail(
        self, message: str, *, code: str, metadata: Mapping[str, str]
    ) -> ErrorDetail:
        return internal_error(message, code=code, metadata=metadata)


class ValidationError(RecordError):
    """Transfer object is malformed or violates an operation rule."""

    default_code = codes.VALIDATION_ERROR

    def _build_detail(
        self, message: str, *, code: str, metadata: Mapping[str, str]
    ) -> ErrorDetail:
        return validation_error(message, code=code, metadata=metadata)


class NotFoundError(RecordError):
    """Lookup by key yielded nothing."""

    default_code = codes.NOT_FOUND

    def _build_detail(
        self, message: str, *, code: str, metadata: Mapping[str, str]
    ) -> ErrorDetail:
        return not_found_error(message, code=code, metadata=metadata)


class ResolutionError(RecordError):
    """Auxiliary data required for assembly could not be resolved."""

    default_code = codes.RESOLUTION_FAILURE

    def _build_detail(
        self, message: str, *, code: str, metadata: Mapping[str, str]
    ) -> ErrorDetail:
        return dependency_error(message, code=code, retryable=False, metadata=metadata)


class DependencyNotFoundError(ResolutionError, NotFoundError):
    """Resolution map has no value under the requested key."""

    default_code = codes.DEPENDENCY_NOT_FOUND


class TypeMismatchError(ResolutionError):
    """Resolution map value exists but is not of the expected type."""

    default_code = codes.TYPE_MISMATCH


class ConcurrencyConflictError(RecordError):
    """Stored version no longer matches the version the writer read."""

    default_code = codes.CONCURRENCY_CONFLICT

    def __init__(
        self,
        message: str,
        *,
        descriptor: str | None = None,
        key: object | None = None,
        read_version: int | None = None,
        stored_version: int | None = None,
    ) -> None:
        self.read_version = read_version
        self.stored_version = stored_version
        super().__init__(message, descriptor=descriptor, key=key, field="version_lock")

    def _build_detail(
        self, message: str, *, code: str, metadata: Mapping[str, str]
    ) -> ErrorDetail:
        enriched = dict(metadata)
        if self.read_version is not None:
            enriched["read_version"] = str(self.read_version)
        if self.stored_version is not None:
            enriched["stored_version"] = str(self.stored_version)
        return conflict_error(message, code=code, retryable=True, metadata=enriched)


class PersistenceError(RecordError):
    """Database rejected or failed a write.

    ``cause`` is the normalized database failure; its code, category and
    retryability carry over to ``detail``.
    """

    default_code = codes.DEPENDENCY_FAILURE

    def __init__(
        self,
        message: str,
        *,
        cause: ErrorDetail,
        descriptor: str | None = None,
        key: object | None = None,
    ) -> None:
        self.cause = cause
        super().__init__(message, descriptor=descriptor, key=key, code=cause.code)

    def _build_detail(
        self, message: str, *, code: str, metadata: Mapping[str, str]
    ) -> ErrorDetail:
        return ErrorDetail(
            code=code,
            message=message,
            category=self.cause.category,
            retryable=self.cause.retryable,
            metadata={**self.cause.metadata, **metadata},
        )


class DuplicateRecordError(PersistenceError):
    """Write collided with a uniqueness constraint."""


class ProjectionError(RecordError):
    """Minified view could not be constructed from its source."""

    default_code = codes.PROJECTION_FAILURE


class AssemblyError(RecordError):
    """Record construction from a transfer object failed."""

    default_code = codes.ASSEMBLY_FAILURE


def _context_metadata(
    *, descriptor: str | None, key: object | None, field: str | None
) -> dict[str, str]:
    """Collect non-empty context values into error metadata."""
    metadata: dict[str, str] = {}
    if descriptor:
        metadata["descriptor"] = descriptor
    if key is not None:
        metadata["key"] = str(key)
    if field:
        metadata["field"] = field
    return metadata
