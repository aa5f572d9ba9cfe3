"""Record, transfer and assembler types shared by Record Authority tests."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict
from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from packages.stratum_shared.errors import ValidationError
from services.state.record_authority.assembler import Assembler, MinifiableAssembler
from services.state.record_authority.implementation import (
    BasicRecordService,
    MinifiableRecordService,
)
from services.state.record_authority.projection import FieldProjection
from services.state.record_authority.record import VersionedRecord
from services.state.record_authority.resolution import ResolutionMap
from services.state.record_authority.transfer import (
    TransferObject,
    common_dto_fields,
    copy_common_fields_to_record,
)

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
T1 = T0 + timedelta(minutes=5)


class Base(DeclarativeBase):
    """Declarative base for test record tables."""


class Category(VersionedRecord, Base):
    __tablename__ = "category"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Item(VersionedRecord, Base):
    __tablename__ = "item"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    category: Mapped[Category] = relationship()


class Tag(VersionedRecord, Base):
    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class Membership(VersionedRecord, Base):
    """Record keyed by a composite primary key."""

    __tablename__ = "membership"

    team_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False
    )
    member_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)


class CategoryDto(TransferObject[int]):
    name: str


class ItemDto(TransferObject[int]):
    name: str
    category_id: int


class TagDto(TransferObject[int]):
    name: str


class ItemSummary(BaseModel):
    """Minified item view; ``label`` has no counterpart on ``ItemDto``."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str
    version_lock: int | None = None
    label: str = ""


class CategoryAssembler(Assembler[Category, CategoryDto]):
    def build_entity_from_dto(
        self, dto: CategoryDto, resolved: ResolutionMap | None
    ) -> Category:
        record = Category(id=dto.id, name=dto.name)
        copy_common_fields_to_record(dto, record)
        return record

    def build_dto_from_entity(self, entity: Category) -> CategoryDto:
        return CategoryDto(name=entity.name, **common_dto_fields(entity))


class TagAssembler(Assembler[Tag, TagDto]):
    def build_entity_from_dto(
        self, dto: TagDto, resolved: ResolutionMap | None
    ) -> Tag:
        record = Tag(id=dto.id, name=dto.name)
        copy_common_fields_to_record(dto, record)
        return record

    def build_dto_from_entity(self, entity: Tag) -> TagDto:
        return TagDto(name=entity.name, **common_dto_fields(entity))


class ItemAssembler(MinifiableAssembler[Item, ItemDto, ItemSummary]):
    projection = FieldProjection(ItemDto, ItemSummary, ("id", "name", "version_lock"))

    def build_entity_from_dto(
        self, dto: ItemDto, resolved: ResolutionMap | None
    ) -> Item:
        category = (resolved or ResolutionMap()).get("category", Category)
        record = Item(id=dto.id, name=dto.name, category=category)
        copy_common_fields_to_record(dto, record)
        return record

    def build_dto_from_entity(self, entity: Item) -> ItemDto:
        return ItemDto(
            name=entity.name,
            category_id=entity.category_id,
            **common_dto_fields(entity),
        )


class CategoryService(
    BasicRecordService[Category, int, CategoryDto, CategoryAssembler]
):
    pass


class TagService(BasicRecordService[Tag, int, TagDto, TagAssembler]):
    pass


class ItemService(
    MinifiableRecordService[Item, int, ItemDto, ItemSummary, ItemAssembler]
):
    """Item orchestrator resolving each item's category in the transaction."""

    def resolve_dependencies(
        self, session: Session, dtos: Sequence[ItemDto]
    ) -> Mapping[ItemDto, ResolutionMap]:
        resolved: dict[ItemDto, ResolutionMap] = {}
        for dto in dtos:
            category = session.get(Category, dto.category_id)
            resolved[dto] = (
                ResolutionMap()
                if category is None
                else ResolutionMap.of("category", category)
            )
        return resolved

    def validate_create(self, dtos: Sequence[ItemDto]) -> None:
        super().validate_create(dtos)
        for dto in dtos:
            if not dto.name.strip():
                raise ValidationError(
                    "item name must not be blank",
                    descriptor=self.descriptor,
                    field="name",
                )


class SteppingClock:
    """Settable UTC clock passed as ``now_provider``."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now
