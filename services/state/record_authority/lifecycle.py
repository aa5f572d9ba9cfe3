"""Lifecycle stamping applied to versioned records before each write.

These are called by the orchestrator (and by soft deletion in the repository)
at fixed pipeline points; records never stamp themselves.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TypeVar

from services.state.record_authority.record import (
    DEFAULT_ACTIVE,
    DEFAULT_MODIFIED_BY,
    DEFAULT_VERSION_LOCK,
    VersionedRecord,
)

TRecord = TypeVar("TRecord", bound=VersionedRecord)

_TICK = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def prepare_for_create(
    record: TRecord,
    *,
    now: datetime,
    default_modified_by: int = DEFAULT_MODIFIED_BY,
) -> TRecord:
    """Stamp a transient record for its first persist."""
    timestamp = _require_aware(now)
    record.active = DEFAULT_ACTIVE
    record.version_lock = DEFAULT_VERSION_LOCK
    record.created_at = timestamp
    record.modified_at = timestamp
    if record.modified_by is None:
        record.modified_by = default_modified_by
    return record


def prepare_for_update(
    record: TRecord,
    *,
    now: datetime,
    default_modified_by: int = DEFAULT_MODIFIED_BY,
) -> TRecord:
    """Stamp a record for a subsequent write.

    ``active`` and ``created_at`` are left as they are. ``modified_at`` always
    moves forward, by one microsecond when the clock has not advanced.
    """
    timestamp = _require_aware(now)
    previous = record.modified_at
    if previous is not None and timestamp <= previous:
        timestamp = previous + _TICK
    record.modified_at = timestamp
    if record.modified_by is None:
        record.modified_by = default_modified_by
    return record


def _require_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("lifecycle timestamps must be timezone-aware")
    return value.astimezone(UTC)
