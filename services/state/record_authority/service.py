"""Authoritative in-process Python API for Record Authority."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from packages.stratum_shared.config import StratumSettings
from services.state.record_authority.lifecycle import utc_now
from services.state.record_authority.transfer import TransferObject

if TYPE_CHECKING:
    from services.state.record_authority.data import RecordSqlRuntime

D = TypeVar("D", bound=TransferObject)
K = TypeVar("K")
M = TypeVar("M", bound=BaseModel)


class RecordService(ABC, Generic[D, K]):
    """Public CRUD surface for one versioned record type."""

    @abstractmethod
    def find_all(self) -> list[D]:
        """Return every stored record ordered by key."""

    @abstractmethod
    def find_by_id(self, key: K) -> D:
        """Return one record or raise ``NotFoundError``."""

    @abstractmethod
    def save(self, dto: D) -> D:
        """Create one record from a transfer object with no identifier."""

    @abstractmethod
    def update(self, dto: D) -> D:
        """Update one record under optimistic-lock control."""

    @abstractmethod
    def save_all(self, dtos: Sequence[D]) -> list[D]:
        """Create a batch of records atomically."""

    @abstractmethod
    def update_all(self, dtos: Sequence[D]) -> list[D]:
        """Update a batch of records atomically."""

    @abstractmethod
    def delete_by_id(self, key: K) -> None:
        """Delete one record by key."""

    @abstractmethod
    def delete_by_ids(self, keys: Iterable[K]) -> None:
        """Delete every listed record in one transaction."""


class MinifiedRecordService(RecordService[D, K], Generic[D, K, M]):
    """``RecordService`` that can also answer with minified views."""

    @abstractmethod
    def find_all_minified(self) -> list[M]:
        """Return the minified view of every stored record."""

    @abstractmethod
    def find_by_id_minified(self, key: K) -> M:
        """Return one minified record or raise ``NotFoundError``."""

    @abstractmethod
    def save_minified(self, dto: D) -> M:
        """Create one record and answer with its minified view."""

    @abstractmethod
    def update_minified(self, dto: D) -> M:
        """Update one record and answer with its minified view."""

    @abstractmethod
    def save_all_minified(self, dtos: Sequence[D]) -> list[M]:
        """Create a batch of records and answer with their minified views."""

    @abstractmethod
    def update_all_minified(self, dtos: Sequence[D]) -> list[M]:
        """Update a batch of records and answer with their minified views."""


def build_record_service(
    service_class: type[RecordService[D, K]],
    *,
    settings: StratumSettings,
    model: type[Any],
    assembler: Any,
    descriptor: str | None = None,
    runtime: RecordSqlRuntime | None = None,
    now_provider: Callable[[], datetime] = utc_now,
) -> RecordService[D, K]:
    """Build one record service from typed settings and owned SQL resources.

    ``runtime`` lets several record services share one engine; when omitted a
    runtime is built from ``components.substrate.sql``. ``now_provider`` stamps
    both orchestrated writes and repository soft deletes.
    """
    from services.state.record_authority.config import (
        resolve_record_authority_settings,
    )
    from services.state.record_authority.data import (
        RecordSqlRuntime,
        SqlRecordRepository,
    )

    service_settings = resolve_record_authority_settings(settings)
    runtime = runtime or RecordSqlRuntime.from_settings(settings)
    return service_class(
        repository=SqlRecordRepository.from_settings(
            model,
            service_settings,
            descriptor=descriptor,
            now_provider=now_provider,
        ),
        assembler=assembler,
        transactions=runtime.transactions,
        descriptor=descriptor,
        settings=service_settings,
        now_provider=now_provider,
    )
