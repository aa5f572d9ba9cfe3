"""Bidirectional mapping between versioned records and transfer objects."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Generic, TypeVar

from pydantic import BaseModel

from packages.stratum_shared.errors import AssemblyError, RecordError
from services.state.record_authority.projection import FieldProjection
from services.state.record_authority.record import VersionedRecord
from services.state.record_authority.resolution import ResolutionMap
from services.state.record_authority.transfer import TransferObject

E = TypeVar("E", bound=VersionedRecord)
D = TypeVar("D", bound=TransferObject)
M = TypeVar("M", bound=BaseModel)


class Assembler(ABC, Generic[E, D]):
    """Build records from transfer objects and transfer objects from records."""

    @abstractmethod
    def build_entity_from_dto(self, dto: D, resolved: ResolutionMap | None) -> E:
        """Build a record from one transfer object and its resolved dependencies.

        Dependencies must be read through ``resolved``; a missing or mistyped
        entry surfaces as the map's own ``ResolutionError``.
        """

    @abstractmethod
    def build_dto_from_entity(self, entity: E) -> D:
        """Project one record into its transfer object."""

    def assemble_entity(self, dto: D, resolved: ResolutionMap | None) -> E:
        """Run ``build_entity_from_dto`` with failures mapped onto the taxonomy."""
        try:
            return self.build_entity_from_dto(dto, resolved)
        except RecordError:
            raise
        except Exception as exc:
            raise AssemblyError(
                f"could not assemble {type(dto).__qualname__}: {exc}",
                key=dto.id,
            ) from exc

    def build_dtos_from_entities(self, entities: Iterable[E]) -> list[D]:
        return [self.build_dto_from_entity(entity) for entity in entities]

    def copy_common_fields(self, previous: E, incoming: E) -> E:
        """Carry ``active``, ``created_at`` and ``modified_at`` over from ``previous``.

        Stops an update payload from resurrecting a soft-deleted record,
        forging a creation date or rewinding the audit trail.
        """
        incoming.active = previous.active
        incoming.created_at = previous.created_at
        incoming.modified_at = previous.modified_at
        return incoming


class MinifiableAssembler(Assembler[E, D], Generic[E, D, M]):
    """Assembler that can also produce a minified view ``M``."""

    projection: FieldProjection[D, M]

    def build_projection(self, source: E | D) -> M:
        """Project a record or transfer object into the minified view."""
        if isinstance(source, VersionedRecord):
            return self.build_min_dto_from_entity(source)
        return self.build_min_dto_from_dto(source)

    def build_min_dto_from_dto(self, dto: D) -> M:
        return self.projection.project(dto)

    def build_min_dto_from_entity(self, entity: E) -> M:
        return self.projection.project(self.build_dto_from_entity(entity))

    def build_min_dtos_from_entities(self, entities: Iterable[E]) -> list[M]:
        return [self.build_min_dto_from_entity(entity) for entity in entities]
