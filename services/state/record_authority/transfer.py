"""Wire-facing transfer object base and metadata helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from packages.stratum_shared.errors import ValidationError
from services.state.record_authority.record import VersionedRecord

K = TypeVar("K")

COMMON_DTO_FIELDS = (
    "version_lock",
    "active",
    "created_at",
    "modified_at",
    "modified_by",
)


class TransferObject(BaseModel, Generic[K]):
    """Immutable transfer object carrying a record's key and metadata.

    Instances are hashable and key the per-batch resolution mapping, so
    subclasses must declare hashable field types (tuples, not lists).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: K | None = None
    version_lock: int | None = Field(default=None, ge=0)
    active: bool = True
    created_at: str | None = None
    modified_at: str | None = None
    modified_by: int | None = Field(default=None, ge=0)


def format_instant(value: datetime | None) -> str | None:
    """Render an aware datetime as an ISO-8601 UTC instant with ``Z`` suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_instant(value: str | None, *, field: str) -> datetime | None:
    """Parse an ISO-8601 timestamp into aware UTC; blank values yield ``None``."""
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValidationError(
            f"{field} is not an ISO-8601 timestamp: {value!r}", field=field
        ) from exc
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def common_dto_fields(record: VersionedRecord) -> dict[str, Any]:
    """Return record metadata as transfer-object constructor keywords."""
    values: dict[str, Any] = {
        name: getattr(record, name) for name in COMMON_DTO_FIELDS
    }
    values["id"] = getattr(record, "id", None)
    if values["active"] is None:
        values["active"] = True
    for name in ("created_at", "modified_at"):
        values[name] = format_instant(values[name])
    return values


def copy_common_fields_to_record(
    dto: TransferObject[Any], record: VersionedRecord
) -> VersionedRecord:
    """Copy round-tripped metadata from a transfer object onto a record.

    Timestamps are copied only when present and non-blank; the version and
    actor are copied when set. Lifecycle stamping and the update path decide
    which of these values survive.
    """
    created_at = parse_instant(dto.created_at, field="created_at")
    if created_at is not None:
        record.created_at = created_at
    modified_at = parse_instant(dto.modified_at, field="modified_at")
    if modified_at is not None:
        record.modified_at = modified_at
    if dto.version_lock is not None:
        record.version_lock = dto.version_lock
    if dto.modified_by is not None:
        record.modified_by = dto.modified_by
    return record
