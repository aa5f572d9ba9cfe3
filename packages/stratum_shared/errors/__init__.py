"""Public shared error API for Stratum services."""

from . import codes
from .exceptions import (
    AssemblyError,
    ConcurrencyConflictError,
    DependencyNotFoundError,
    DuplicateRecordError,
    NotFoundError,
    PersistenceError,
    ProjectionError,
    RecordError,
    ResolutionError,
    TypeMismatchError,
    ValidationError,
)
from .factories import (
    conflict_error,
    dependency_error,
    internal_error,
    not_found_error,
    validation_error,
)
from .normalize import exception_to_error
from .response import ErrorResponse, build_error_response, status_for
from .types import ErrorCategory, ErrorDetail

__all__ = [
    "AssemblyError",
    "ConcurrencyConflictError",
    "DependencyNotFoundError",
    "DuplicateRecordError",
    "ErrorCategory",
    "ErrorDetail",
    "ErrorResponse",
    "NotFoundError",
    "PersistenceError",
    "ProjectionError",
    "RecordError",
    "ResolutionError",
    "TypeMismatchError",
    "ValidationError",
    "build_error_response",
    "codes",
    "conflict_error",
    "dependency_error",
    "exception_to_error",
    "internal_error",
    "not_found_error",
    "status_for",
    "validation_error",
]
