"""Versioned record shape shared by every persisted entity type.

Concrete records combine ``VersionedRecord`` with a declarative base and
declare their own ``id`` primary key::

    class Base(DeclarativeBase):
        pass

    class Widget(VersionedRecord, Base):
        __tablename__ = "widget"
        id: Mapped[int] = mapped_column(primary_key=True)
        name: Mapped[str]

``version_lock`` doubles as the mapper's version counter with
application-managed values, so every UPDATE also carries a
``WHERE version_lock = <read version>`` guard.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, Integer
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator

DEFAULT_VERSION_LOCK = 1
DEFAULT_ACTIVE = True
DEFAULT_MODIFIED_BY = 0


class UtcDateTime(TypeDecorator[datetime]):
    """Timezone-aware UTC timestamp column.

    Binds reject naive values; loads normalize to aware UTC, including engines
    such as SQLite that drop the offset on storage.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime cannot be stored in a UTC column")
        return value.astimezone(UTC)

    def process_result_value(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class VersionedRecord:
    """Declarative mixin with optimistic-lock version, soft-delete flag and audit fields."""

    version_lock: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False)
    modified_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False)
    modified_by: Mapped[int] = mapped_column(BigInteger, nullable=False)

    @declared_attr.directive
    def __table_args__(cls) -> tuple[Any, ...]:
        return (
            CheckConstraint(
                "version_lock > 0", name=f"ck_{cls.__tablename__}_version_positive"
            ),
            CheckConstraint(
                "modified_by >= 0", name=f"ck_{cls.__tablename__}_modified_by_nonneg"
            ),
        )

    @declared_attr.directive
    def __mapper_args__(cls) -> dict[str, Any]:
        return {
            "version_id_col": cls.__table__.c.version_lock,
            "version_id_generator": False,
        }

    def __repr__(self) -> str:
        key = getattr(self, "id", None)
        return (
            f"<{type(self).__name__} id={key!r} version_lock={self.version_lock!r} "
            f"active={self.active!r}>"
        )
