"""Context propagation for structured logging.

Orchestrated operations bind the entity descriptor, operation name and record
key here once; every log line emitted while the operation runs then carries
them. Backed by ``contextvars`` so concurrent requests never see each other's
fields.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

from . import fields

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar(
    "stratum_log_context", default={}
)


def get_context() -> dict[str, str]:
    """Return a shallow copy of the current logging context."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind stringified values into the current context, skipping ``None``."""
    if not values:
        return
    current = _LOG_CONTEXT.get().copy()
    current.update(
        {str(key): str(value) for key, value in values.items() if value is not None}
    )
    _LOG_CONTEXT.set(current)


def clear_context(*keys: str) -> None:
    """Clear selected keys, or everything when no key is given."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    current = _LOG_CONTEXT.get().copy()
    for key in keys:
        current.pop(key, None)
    _LOG_CONTEXT.set(current)


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind values for the duration of a block, then restore prior context."""
    token = _LOG_CONTEXT.set(_LOG_CONTEXT.get().copy())
    try:
        bind_context(**dict(values))
        yield
    finally:
        _LOG_CONTEXT.reset(token)


@contextmanager
def record_context(
    *, descriptor: str, operation: str, key: object | None = None
) -> Iterator[None]:
    """Bind the standard record-operation fields for one block."""
    with log_context(
        {
            fields.DESCRIPTOR: descriptor,
            fields.OPERATION: operation,
            fields.RECORD_KEY: key,
        }
    ):
        yield
