"""Shared fixtures for Record Authority tests."""

from __future__ import annotations

from typing import Iterator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.sql import (
    SessionTransactionManager,
    SqlSettings,
    create_session_factory,
    create_sql_engine,
)
from services.state.record_authority.data import SqlRecordRepository
from services.state.record_authority.tests.helpers import (
    Base,
    Category,
    CategoryAssembler,
    CategoryService,
    Item,
    ItemAssembler,
    ItemService,
    SteppingClock,
    Tag,
    TagAssembler,
    TagService,
)


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    """Return an in-memory SQLite engine with the test tables created."""
    engine = create_sql_engine(SqlSettings())
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def sqlite_session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(sqlite_engine)


@pytest.fixture()
def transactions(
    sqlite_session_factory: sessionmaker[Session],
) -> SessionTransactionManager:
    return SessionTransactionManager(sqlite_session_factory)


@pytest.fixture()
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture()
def category_service(
    transactions: SessionTransactionManager, clock: SteppingClock
) -> CategoryService:
    return CategoryService(
        repository=SqlRecordRepository(Category, descriptor="Category"),
        assembler=CategoryAssembler(),
        transactions=transactions,
        descriptor="Category",
        now_provider=clock,
    )


@pytest.fixture()
def item_service(
    transactions: SessionTransactionManager, clock: SteppingClock
) -> ItemService:
    return ItemService(
        repository=SqlRecordRepository(Item, descriptor="Item"),
        assembler=ItemAssembler(),
        transactions=transactions,
        descriptor="Item",
        now_provider=clock,
    )


@pytest.fixture()
def tag_service(
    transactions: SessionTransactionManager, clock: SteppingClock
) -> TagService:
    return TagService(
        repository=SqlRecordRepository(Tag, descriptor="Tag"),
        assembler=TagAssembler(),
        transactions=transactions,
        descriptor="Tag",
        now_provider=clock,
    )
