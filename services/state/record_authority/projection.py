"""Declarative field mapping from a transfer object to its minified view."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from packages.stratum_shared.errors import ProjectionError

S = TypeVar("S", bound=BaseModel)
M = TypeVar("M", bound=BaseModel)


class FieldProjection(Generic[S, M]):
    """Copy an explicit set of same-named fields from ``source`` into ``target``.

    The field table is checked when the projection is built: every field must
    exist on both models and every required target field must be covered.
    Target-only fields keep their declared defaults.
    """

    def __init__(
        self, source: type[S], target: type[M], fields: Iterable[str]
    ) -> None:
        self.source = source
        self.target = target
        self.fields: tuple[str, ...] = tuple(fields)
        self.validate()

    @classmethod
    def shared(cls, source: type[S], target: type[M]) -> "FieldProjection[S, M]":
        """Project every field declared on both models, in target order."""
        source_fields = source.model_fields
        return cls(
            source,
            target,
            (name for name in target.model_fields if name in source_fields),
        )

    def validate(self) -> None:
        """Raise ``ProjectionError`` when the field table cannot work."""
        problems: list[str] = []
        if len(set(self.fields)) != len(self.fields):
            problems.append("duplicate field names")
        source_fields = self.source.model_fields
        target_fields = self.target.model_fields
        for name in self.fields:
            if name not in source_fields:
                problems.append(f"{name!r} missing on {self.source.__qualname__}")
            if name not in target_fields:
                problems.append(f"{name!r} missing on {self.target.__qualname__}")
        for name, info in target_fields.items():
            if info.is_required() and name not in self.fields:
                problems.append(
                    f"required {self.target.__qualname__}.{name} is not projected"
                )
        if problems:
            raise ProjectionError(
                f"invalid projection {self.source.__qualname__} -> "
                f"{self.target.__qualname__}: {'; '.join(problems)}"
            )

    def values(self, value: S) -> dict[str, Any]:
        """Return the projected field values of one source instance."""
        return {name: getattr(value, name) for name in self.fields}

    def project(self, value: S) -> M:
        """Build the minified view of one source instance."""
        if not isinstance(value, self.source):
            raise ProjectionError(
                f"cannot project {type(value).__qualname__}; "
                f"expected {self.source.__qualname__}"
            )
        try:
            return self.target(**self.values(value))
        except (PydanticValidationError, TypeError, ValueError) as exc:
            raise ProjectionError(
                f"error obtaining minified version of "
                f"{type(value).__qualname__} representation"
            ) from exc
