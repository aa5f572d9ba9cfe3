"""Type-checked, string-keyed container of auxiliary records for assembly.

Dependency resolution builds one map per incoming transfer object and hands it
to the assembler, which pulls values back out by key and expected type. This
keeps assemblers free of data-access calls. Maps live for one request batch
inside one transaction and are never shared.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, TypeVar

from packages.stratum_shared.errors import DependencyNotFoundError, TypeMismatchError

T = TypeVar("T")


class ResolutionMap:
    """Mapping from string key to exactly one value of a known type."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    @classmethod
    def of(cls, key: str, value: object) -> "ResolutionMap":
        """Build a map holding one entry."""
        resolved = cls()
        resolved.put(key, value)
        return resolved

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, object]]) -> "ResolutionMap":
        """Build a map from ``(key, value)`` pairs; later keys overwrite earlier."""
        resolved = cls()
        for key, value in pairs:
            resolved.put(key, value)
        return resolved

    def put(self, key: str, value: object) -> None:
        """Associate ``value`` with ``key``, replacing any previous value."""
        if not isinstance(key, str) or not key.strip():
            raise ValueError("resolution key must be a non-empty string")
        if value is None:
            raise ValueError(f"resolution value for {key!r} must not be None")
        self._values[key] = value

    def get(self, key: str, expected_type: type[T]) -> T:
        """Return the value under ``key`` checked against ``expected_type``.

        Raises:
            DependencyNotFoundError: no value is stored under ``key``.
            TypeMismatchError: the stored value is not an ``expected_type``.
        """
        if key not in self._values:
            raise DependencyNotFoundError(
                f"no object found with the key: {key}", field=key
            )
        return self._checked(key, expected_type)

    def find(self, key: str, expected_type: type[T]) -> T | None:
        """Return the type-checked value under ``key`` or ``None`` when absent."""
        if key not in self._values:
            return None
        return self._checked(key, expected_type)

    def keys(self) -> list[str]:
        return list(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"ResolutionMap({sorted(self._values)!r})"

    def _checked(self, key: str, expected_type: type[T]) -> T:
        value = self._values[key]
        if not isinstance(value, expected_type):
            raise TypeMismatchError(
                f"the type requested {expected_type.__qualname__!r} does not match "
                f"the type of the object found {type(value).__qualname__!r} "
                f"with the key {key!r}",
                field=key,
            )
        return value
