"""Data-layer exports for Record Authority."""

from services.state.record_authority.data.repository import (
    RecordRepository,
    SqlRecordRepository,
)
from services.state.record_authority.data.runtime import RecordSqlRuntime

__all__ = ["RecordRepository", "RecordSqlRuntime", "SqlRecordRepository"]
