"""Error shape carried by every record persistence failure.

``ErrorDetail`` is what taxonomy exceptions expose as ``exc.detail`` and what
``build_error_response`` renders; ``ErrorCategory`` decides the HTTP status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorCategory(str, Enum):
    """Failure class of a record operation, independent of the record type."""

    UNSPECIFIED = "unspecified"
    # Rejected transfer object or operation rule; 400.
    VALIDATION = "validation"
    # Version conflict or uniqueness collision; 409.
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    # Database or resolved-data failure; 500.
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """Machine-readable failure: stable ``code``, caller-facing ``message``.

    ``metadata`` holds string context such as the entity descriptor, the
    record key and the offending field.
    """

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)
