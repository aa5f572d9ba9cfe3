"""Version-checked SQLAlchemy storage for versioned records."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Generic, Protocol, TypeVar

from sqlalchemy import inspect, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from packages.stratum_shared.errors import (
    ConcurrencyConflictError,
    DuplicateRecordError,
    NotFoundError,
    PersistenceError,
)
from packages.stratum_shared.logging import fields, get_logger, log_context
from resources.substrates.sql.errors import normalize_sql_error
from services.state.record_authority import messages
from services.state.record_authority.config import RecordAuthoritySettings
from services.state.record_authority.lifecycle import prepare_for_update, utc_now
from services.state.record_authority.record import DEFAULT_MODIFIED_BY, VersionedRecord

E = TypeVar("E", bound=VersionedRecord)
K = TypeVar("K")

_LOGGER = get_logger(__name__)


class RecordRepository(Protocol[E, K]):
    """Storage primitive for one record type, bound to the caller's session."""

    def find_all(self, session: Session) -> list[E]:
        """Return every stored record ordered by primary key."""

    def find_by_id(self, session: Session, key: K) -> E | None:
        """Return the stored record for ``key`` or ``None``."""

    def save(self, session: Session, record: E) -> E:
        """Insert one stamped transient record and flush to assign its key."""

    def save_and_flush(self, session: Session, record: E) -> E:
        """Version-check, write and flush one record over its stored row."""

    def save_all(self, session: Session, records: Sequence[E]) -> list[E]:
        """Insert stamped transient records and flush once."""

    def save_all_and_flush(self, session: Session, records: Sequence[E]) -> list[E]:
        """Version-check and write records over their stored rows, flush once."""

    def delete_by_id(self, session: Session, key: K) -> None:
        """Delete one record; absent keys are ignored."""

    def delete_all_by_id(self, session: Session, keys: Iterable[K]) -> None:
        """Delete every listed record; absent keys are ignored."""


class SqlRecordRepository(Generic[E, K]):
    """``RecordRepository`` over one mapped ``VersionedRecord`` class.

    Updates compare the incoming ``version_lock`` with the stored one before
    writing, then rely on the mapper's version guard for writers racing in
    other transactions. Either rejection raises ``ConcurrencyConflictError``.
    """

    def __init__(
        self,
        model: type[E],
        *,
        descriptor: str | None = None,
        soft_delete: bool = False,
        default_modified_by: int = DEFAULT_MODIFIED_BY,
        now_provider: Callable[[], datetime] = utc_now,
    ) -> None:
        self._model = model
        self._descriptor = descriptor or model.__qualname__
        self._soft_delete = soft_delete
        self._default_modified_by = default_modified_by
        self._now = now_provider
        self._mapper = inspect(model)
        self._order_by = tuple(self._mapper.primary_key)

    @classmethod
    def from_settings(
        cls,
        model: type[E],
        settings: RecordAuthoritySettings,
        *,
        descriptor: str | None = None,
        now_provider: Callable[[], datetime] = utc_now,
    ) -> "SqlRecordRepository[E, K]":
        """Build a repository honoring the service's delete and actor settings."""
        return cls(
            model,
            descriptor=descriptor,
            soft_delete=settings.soft_delete,
            default_modified_by=settings.default_modified_by,
            now_provider=now_provider,
        )

    @property
    def model(self) -> type[E]:
        return self._model

    def find_all(self, session: Session) -> list[E]:
        return list(session.scalars(select(self._model).order_by(*self._order_by)))

    def find_by_id(self, session: Session, key: K) -> E | None:
        return session.get(self._model, key)

    def save(self, session: Session, record: E) -> E:
        session.add(record)
        self._flush(session, record)
        return record

    def save_and_flush(self, session: Session, record: E) -> E:
        merged = self._merge_checked(session, record)
        self._flush(session, merged)
        return merged

    def save_all(self, session: Session, records: Sequence[E]) -> list[E]:
        session.add_all(records)
        self._flush(session, None)
        return list(records)

    def save_all_and_flush(self, session: Session, records: Sequence[E]) -> list[E]:
        merged = [self._merge_checked(session, record) for record in records]
        self._flush(session, None)
        return merged

    def delete_by_id(self, session: Session, key: K) -> None:
        self._delete(session, key)
        self._flush(session, None)

    def delete_all_by_id(self, session: Session, keys: Iterable[K]) -> None:
        for key in keys:
            self._delete(session, key)
        self._flush(session, None)

    def _delete(self, session: Session, key: K) -> None:
        stored = session.get(self._model, key)
        if stored is None:
            _LOGGER.debug("Delete skipped for absent %s %s", self._descriptor, key)
            return
        if not self._soft_delete:
            session.delete(stored)
            return
        stored.active = False
        prepare_for_update(
            stored, now=self._now(), default_modified_by=self._default_modified_by
        )
        stored.version_lock = stored.version_lock + 1

    def _merge_checked(self, session: Session, record: E) -> E:
        """Merge ``record`` onto its stored row after an explicit version check."""
        identity = self._identity(record)
        stored = None if identity is None else session.get(self._model, identity)
        if stored is None:
            raise NotFoundError(
                messages.entity_not_found(self._descriptor),
                descriptor=self._descriptor,
                key=identity,
            )

        stored_version = stored.version_lock
        read_version = record.version_lock
        if read_version is None:
            record.version_lock = stored_version
        elif read_version != stored_version:
            with log_context(
                {
                    fields.RECORD_KEY: identity,
                    fields.READ_VERSION: read_version,
                    fields.STORED_VERSION: stored_version,
                }
            ):
                _LOGGER.info("Version conflict on %s", self._descriptor)
            raise ConcurrencyConflictError(
                messages.version_conflict(
                    self._descriptor, identity, read_version, stored_version
                ),
                descriptor=self._descriptor,
                key=identity,
                read_version=read_version,
                stored_version=stored_version,
            )

        merged = session.merge(record)
        merged.version_lock = stored_version + 1
        return merged

    def _identity(self, record: E) -> object | None:
        """Return the ``session.get`` identity, or ``None`` before assignment."""
        key = self._mapper.primary_key_from_instance(record)
        if all(part is None for part in key):
            return None
        return key[0] if len(key) == 1 else tuple(key)

    def _flush(self, session: Session, record: E | None) -> None:
        """Flush pending writes, translating database failures into record errors."""
        key = None if record is None else self._identity(record)
        try:
            session.flush()
        except StaleDataError as exc:
            raise ConcurrencyConflictError(
                f"{self._descriptor} entity was modified by another writer",
                descriptor=self._descriptor,
                key=key,
            ) from exc
        except IntegrityError as exc:
            _LOGGER.info("Constraint violation on %s: %s", self._descriptor, exc.orig)
            raise DuplicateRecordError(
                messages.entity_already_exists(self._descriptor),
                cause=normalize_sql_error(exc),
                descriptor=self._descriptor,
                key=key,
            ) from exc
        except DBAPIError as exc:
            raise PersistenceError(
                messages.entity_not_written(self._descriptor),
                cause=normalize_sql_error(exc),
                descriptor=self._descriptor,
                key=key,
            ) from exc
