"""Generic Record Authority orchestrators over the SQL substrate."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from packages.stratum_shared.errors import NotFoundError, ValidationError
from packages.stratum_shared.logging import (
    fields,
    get_logger,
    log_context,
    public_api_logged,
    record_context,
)
from resources.substrates.sql import TransactionManager
from services.state.record_authority import messages
from services.state.record_authority.assembler import Assembler, MinifiableAssembler
from services.state.record_authority.component import SERVICE_COMPONENT_ID
from services.state.record_authority.config import RecordAuthoritySettings
from services.state.record_authority.data.repository import RecordRepository
from services.state.record_authority.lifecycle import (
    prepare_for_create,
    prepare_for_update,
    utc_now,
)
from services.state.record_authority.record import VersionedRecord
from services.state.record_authority.resolution import ResolutionMap
from services.state.record_authority.service import (
    MinifiedRecordService,
    RecordService,
)
from services.state.record_authority.transfer import TransferObject

E = TypeVar("E", bound=VersionedRecord)
K = TypeVar("K")
D = TypeVar("D", bound=TransferObject)
M = TypeVar("M", bound=BaseModel)
A = TypeVar("A", bound=Assembler)
MA = TypeVar("MA", bound=MinifiableAssembler)
R = TypeVar("R")

_LOGGER = get_logger(__name__)


class BasicRecordService(RecordService[D, K], Generic[E, K, D, A]):
    """Validate, resolve, assemble, stamp and write records in one transaction.

    Subclasses customize three hooks: ``resolve_dependencies`` looks up the
    auxiliary records assembly needs, ``validate_create`` and
    ``validate_update`` reject malformed transfer objects before any
    transaction opens. Every operation commits or rolls back as a whole.
    """

    def __init__(
        self,
        *,
        repository: RecordRepository[E, K],
        assembler: A,
        transactions: TransactionManager,
        descriptor: str | None = None,
        settings: RecordAuthoritySettings | None = None,
        now_provider: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._assembler = assembler
        self._transactions = transactions
        self._settings = settings or RecordAuthoritySettings()
        self._now = now_provider
        self._descriptor = descriptor or self._fallback_descriptor()

    @property
    def descriptor(self) -> str:
        return self._descriptor

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def find_all(self) -> list[D]:
        with self._operation("find_all"):
            return self._transactions.execute(
                lambda session: self._assembler.build_dtos_from_entities(
                    self._repository.find_all(session)
                )
            )

    @public_api_logged(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("key",)
    )
    def find_by_id(self, key: K) -> D:
        with self._operation("find_by_id", key=key):
            return self._transactions.execute(
                lambda session: self._assembler.build_dto_from_entity(
                    self._load(session, key)
                )
            )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def save(self, dto: D) -> D:
        return self._create(
            "save", [dto], lambda saved: self._assembler.build_dto_from_entity(saved[0])
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def update(self, dto: D) -> D:
        return self._update(
            "update",
            [dto],
            lambda saved: self._assembler.build_dto_from_entity(saved[0]),
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def save_all(self, dtos: Sequence[D]) -> list[D]:
        return self._create(
            "save_all", list(dtos), self._assembler.build_dtos_from_entities
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def update_all(self, dtos: Sequence[D]) -> list[D]:
        return self._update(
            "update_all", list(dtos), self._assembler.build_dtos_from_entities
        )

    @public_api_logged(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("key",)
    )
    def delete_by_id(self, key: K) -> None:
        with self._operation("delete_by_id", key=key):
            self._transactions.execute(
                lambda session: self._repository.delete_by_id(session, key)
            )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def delete_by_ids(self, keys: Iterable[K]) -> None:
        targets = list(keys)
        with self._operation("delete_by_ids", batch_size=len(targets)):
            self._transactions.execute(
                lambda session: self._repository.delete_all_by_id(session, targets)
            )

    def resolve_dependencies(
        self, session: Session, dtos: Sequence[D]
    ) -> Mapping[D, ResolutionMap] | None:
        """Return one resolution map per transfer object, or ``None``.

        Runs inside the operation's transaction, so lookups through
        ``session`` see the same state the write will. ``None`` means the
        record type needs no auxiliary data; a transfer object missing from
        the returned mapping is assembled with no map.
        """
        return None

    def validate_create(self, dtos: Sequence[D]) -> None:
        """Reject creation payloads that already carry an identifier."""
        for dto in dtos:
            if dto.id is not None:
                raise ValidationError(
                    messages.identifier_must_be_null(self._descriptor),
                    descriptor=self._descriptor,
                    key=dto.id,
                    field="id",
                )

    def validate_update(self, dtos: Sequence[D]) -> None:
        """Reject update payloads without an identifier or read version."""
        for dto in dtos:
            if dto.id is None:
                raise ValidationError(
                    messages.identifier_must_not_be_null(self._descriptor),
                    descriptor=self._descriptor,
                    field="id",
                )
            if self._settings.require_version_on_update and dto.version_lock is None:
                raise ValidationError(
                    messages.version_must_not_be_null(self._descriptor),
                    descriptor=self._descriptor,
                    key=dto.id,
                    field="version_lock",
                )

    def _create(
        self, operation: str, dtos: list[D], respond: Callable[[list[E]], R]
    ) -> R:
        with self._operation(operation, batch_size=len(dtos)):
            self.validate_create(dtos)

            def handler(session: Session) -> R:
                records = self._assemble(session, dtos)
                now = self._now()
                for record in records:
                    prepare_for_create(
                        record,
                        now=now,
                        default_modified_by=self._settings.default_modified_by,
                    )
                if len(records) == 1:
                    saved = [self._repository.save(session, records[0])]
                else:
                    saved = self._repository.save_all(session, records)
                _LOGGER.debug("Created %d %s record(s)", len(saved), self._descriptor)
                return respond(saved)

            return self._transactions.execute(handler)

    def _update(
        self, operation: str, dtos: list[D], respond: Callable[[list[E]], R]
    ) -> R:
        with self._operation(operation, batch_size=len(dtos)):
            self.validate_update(dtos)
            self._reject_duplicate_keys(dtos)

            def handler(session: Session) -> R:
                incoming = self._assemble(session, dtos)
                now = self._now()
                for dto, record in zip(dtos, incoming):
                    previous = self._load(session, dto.id)
                    self._assembler.copy_common_fields(previous, record)
                    prepare_for_update(
                        record,
                        now=now,
                        default_modified_by=self._settings.default_modified_by,
                    )
                if len(incoming) == 1:
                    saved = [self._repository.save_and_flush(session, incoming[0])]
                else:
                    saved = self._repository.save_all_and_flush(session, incoming)
                _LOGGER.debug("Updated %d %s record(s)", len(saved), self._descriptor)
                return respond(saved)

            return self._transactions.execute(handler)

    def _assemble(self, session: Session, dtos: Sequence[D]) -> list[E]:
        resolved = self.resolve_dependencies(session, dtos)
        return [
            self._assembler.assemble_entity(
                dto, None if resolved is None else resolved.get(dto)
            )
            for dto in dtos
        ]

    def _load(self, session: Session, key: K) -> E:
        record = self._repository.find_by_id(session, key)
        if record is None:
            raise NotFoundError(
                messages.entity_not_found(self._descriptor),
                descriptor=self._descriptor,
                key=key,
            )
        return record

    def _reject_duplicate_keys(self, dtos: Sequence[D]) -> None:
        for key, count in Counter(dto.id for dto in dtos).items():
            if count > 1:
                raise ValidationError(
                    messages.duplicate_identifier(self._descriptor, key),
                    descriptor=self._descriptor,
                    key=key,
                    field="id",
                )

    @contextmanager
    def _operation(
        self, operation: str, *, key: K | None = None, batch_size: int | None = None
    ) -> Iterator[None]:
        with record_context(
            descriptor=self._descriptor, operation=operation, key=key
        ), log_context({fields.BATCH_SIZE: batch_size}):
            yield

    def _fallback_descriptor(self) -> str:
        model = getattr(self._repository, "model", None)
        name = model.__name__ if model is not None else type(self).__name__
        _LOGGER.warning(
            "No descriptor configured for %s; messages will use %r",
            type(self).__name__,
            name,
        )
        return name


class MinifiableRecordService(
    BasicRecordService[E, K, D, MA],
    MinifiedRecordService[D, K, M],
    Generic[E, K, D, M, MA],
):
    """``BasicRecordService`` that can also answer with minified views."""

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def find_all_minified(self) -> list[M]:
        with self._operation("find_all_minified"):
            return self._transactions.execute(
                lambda session: self._assembler.build_min_dtos_from_entities(
                    self._repository.find_all(session)
                )
            )

    @public_api_logged(
        logger=_LOGGER, component_id=SERVICE_COMPONENT_ID, id_fields=("key",)
    )
    def find_by_id_minified(self, key: K) -> M:
        with self._operation("find_by_id_minified", key=key):
            return self._transactions.execute(
                lambda session: self._assembler.build_min_dto_from_entity(
                    self._load(session, key)
                )
            )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def save_minified(self, dto: D) -> M:
        return self._create(
            "save_minified",
            [dto],
            lambda saved: self._assembler.build_min_dto_from_entity(saved[0]),
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def update_minified(self, dto: D) -> M:
        return self._update(
            "update_minified",
            [dto],
            lambda saved: self._assembler.build_min_dto_from_entity(saved[0]),
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def save_all_minified(self, dtos: Sequence[D]) -> list[M]:
        return self._create(
            "save_all_minified",
            list(dtos),
            self._assembler.build_min_dtos_from_entities,
        )

    @public_api_logged(logger=_LOGGER, component_id=SERVICE_COMPONENT_ID)
    def update_all_minified(self, dtos: Sequence[D]) -> list[M]:
        return self._update(
            "update_all_minified",
            list(dtos),
            self._assembler.build_min_dtos_from_entities,
        )
