"""Tests for the version-checked SQL record repository."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text, update
from sqlalchemy.orm import Session, sessionmaker

from packages.stratum_shared.errors import (
    ConcurrencyConflictError,
    DuplicateRecordError,
    NotFoundError,
    PersistenceError,
    codes,
)
from resources.substrates.sql import (
    SqlSettings,
    create_session_factory,
    create_sql_engine,
)
from services.state.record_authority.config import RecordAuthoritySettings
from services.state.record_authority.data import SqlRecordRepository
from services.state.record_authority.lifecycle import prepare_for_create
from services.state.record_authority.tests.helpers import (
    T0,
    T1,
    Base,
    Category,
    Membership,
    Tag,
)


def _seed(factory: sessionmaker[Session], *names: str) -> list[int]:
    """Insert committed categories and return their keys."""
    repository = SqlRecordRepository(Category)
    with factory() as session:
        saved = repository.save_all(
            session,
            [prepare_for_create(Category(name=name), now=T0) for name in names],
        )
        session.commit()
        return [record.id for record in saved]


def test_save_assigns_key_and_find_all_orders_by_key(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    keys = _seed(sqlite_session_factory, "b", "a", "c")
    repository = SqlRecordRepository(Category)

    with sqlite_session_factory() as session:
        found = repository.find_all(session)

    assert [record.id for record in found] == sorted(keys)
    assert [record.name for record in found] == ["b", "a", "c"]


def test_save_and_flush_bumps_version(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    (key,) = _seed(sqlite_session_factory, "a")
    repository = SqlRecordRepository(Category)

    with sqlite_session_factory() as session:
        incoming = Category(
            id=key,
            name="b",
            version_lock=1,
            active=True,
            created_at=T0,
            modified_at=T1,
            modified_by=0,
        )
        merged = repository.save_and_flush(session, incoming)
        session.commit()

    assert merged.version_lock == 2
    with sqlite_session_factory() as session:
        stored = repository.find_by_id(session, key)
        assert stored is not None
        assert stored.name == "b"
        assert stored.version_lock == 2


def test_save_and_flush_rejects_stale_version(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    (key,) = _seed(sqlite_session_factory, "a")
    repository = SqlRecordRepository(Category, descriptor="Category")

    with sqlite_session_factory() as session:
        with pytest.raises(ConcurrencyConflictError) as excinfo:
            repository.save_and_flush(
                session, Category(id=key, name="b", version_lock=3)
            )

    error = excinfo.value
    assert error.read_version == 3
    assert error.stored_version == 1
    assert error.descriptor == "Category"
    assert error.detail.retryable is True


def test_save_and_flush_fills_missing_version_from_stored_row(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    (key,) = _seed(sqlite_session_factory, "a")
    repository = SqlRecordRepository(Category)

    with sqlite_session_factory() as session:
        merged = repository.save_and_flush(session, Category(id=key, name="b"))

    assert merged.version_lock == 2
    assert merged.created_at == T0


def test_save_and_flush_of_absent_key_raises_not_found(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    repository = SqlRecordRepository(Category, descriptor="Category")

    with sqlite_session_factory() as session:
        with pytest.raises(NotFoundError, match="Category entity was not found"):
            repository.save_and_flush(
                session, Category(id=404, name="x", version_lock=1)
            )


def test_concurrent_writer_is_detected_by_version_guard(tmp_path: Path) -> None:
    """A row changed after it was read fails the WHERE version guard."""
    engine = create_sql_engine(
        SqlSettings(url=f"sqlite+pysqlite:///{tmp_path / 'race.db'}")
    )
    Base.metadata.create_all(engine)
    factory = create_session_factory(engine)
    (key,) = _seed(factory, "a")
    repository = SqlRecordRepository(Category)

    try:
        with factory() as session:
            assert repository.find_by_id(session, key) is not None

            with engine.begin() as other:
                other.execute(
                    update(Category.__table__)
                    .where(Category.__table__.c.id == key)
                    .values(version_lock=2, name="other")
                )

            with pytest.raises(ConcurrencyConflictError):
                repository.save_and_flush(
                    session, Category(id=key, name="b", version_lock=1)
                )
            session.rollback()

        with factory() as session:
            stored = repository.find_by_id(session, key)
            assert stored is not None
            assert stored.name == "other"
    finally:
        engine.dispose()


def test_hard_delete_removes_rows_and_ignores_absent_keys(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    keys = _seed(sqlite_session_factory, "a", "b")
    repository = SqlRecordRepository(Category)

    with sqlite_session_factory() as session:
        repository.delete_all_by_id(session, [keys[0], 999])
        repository.delete_by_id(session, 1000)
        session.commit()

    with sqlite_session_factory() as session:
        assert [record.id for record in repository.find_all(session)] == [keys[1]]


def test_soft_delete_marks_rows_inactive(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    (key,) = _seed(sqlite_session_factory, "a")
    repository = SqlRecordRepository.from_settings(
        Category,
        RecordAuthoritySettings(soft_delete=True, default_modified_by=5),
        now_provider=lambda: T1,
    )

    with sqlite_session_factory() as session:
        repository.delete_by_id(session, key)
        session.commit()

    with sqlite_session_factory() as session:
        stored = repository.find_by_id(session, key)
        assert stored is not None
        assert stored.active is False
        assert stored.version_lock == 2
        assert stored.modified_at == T1
        assert stored.created_at == T0


def test_unique_collision_raises_duplicate_record(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    repository = SqlRecordRepository(Tag, descriptor="Tag")
    with sqlite_session_factory() as session:
        repository.save(session, prepare_for_create(Tag(name="x"), now=T0))
        session.commit()

    with sqlite_session_factory() as session:
        with pytest.raises(DuplicateRecordError) as excinfo:
            repository.save(session, prepare_for_create(Tag(name="x"), now=T0))

    assert excinfo.value.detail.code == codes.ALREADY_EXISTS
    assert excinfo.value.key is None
    assert excinfo.value.__cause__ is not None


def test_driver_failure_raises_persistence_error(
    sqlite_session_factory: sessionmaker[Session],
) -> None:
    repository = SqlRecordRepository(Tag, descriptor="Tag")

    with sqlite_session_factory() as session:
        session.execute(text("DROP TABLE tag"))
        with pytest.raises(
            PersistenceError, match="Tag entity could not be written"
        ):
            repository.save(session, prepare_for_create(Tag(name="x"), now=T0))


def test_composite_key_is_reported_whole(tmp_path: Path) -> None:
    engine = create_sql_engine(
        SqlSettings(url=f"sqlite+pysqlite:///{tmp_path / 'members.db'}")
    )
    Base.metadata.create_all(engine)
    factory = create_session_factory(engine)
    repository = SqlRecordRepository(Membership, descriptor="Membership")
    with factory() as session:
        repository.save(
            session,
            prepare_for_create(
                Membership(team_id=1, member_id=2, role="a"), now=T0
            ),
        )
        session.commit()

    try:
        with factory() as session:
            with pytest.raises(NotFoundError) as missing:
                repository.save_and_flush(
                    session, Membership(team_id=1, member_id=3, role="b")
                )
        assert missing.value.key == (1, 3)

        with factory() as session:
            assert repository.find_by_id(session, (1, 2)) is not None

            with engine.begin() as other:
                other.execute(
                    update(Membership.__table__)
                    .where(Membership.__table__.c.member_id == 2)
                    .values(version_lock=2)
                )

            with pytest.raises(ConcurrencyConflictError) as lost:
                repository.save_and_flush(
                    session,
                    Membership(team_id=1, member_id=2, role="b", version_lock=1),
                )
            session.rollback()
        assert lost.value.key == (1, 2)
    finally:
        engine.dispose()
