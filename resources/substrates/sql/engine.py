"""SQLAlchemy engine construction for the shared SQL substrate."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from resources.substrates.sql.config import SqlSettings


def create_sql_engine(config: SqlSettings) -> Engine:
    """Construct a configured SQLAlchemy engine.

    SQLite URLs skip pool sizing; in-memory SQLite shares one connection so
    every session sees the same database.
    """
    kwargs: dict[str, Any] = {"echo": config.echo}
    if config.is_sqlite:
        if ":memory:" in config.url or config.url.rstrip("/").endswith("sqlite:"):
            kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
        return create_engine(config.url, **kwargs)

    return create_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_pre_ping=config.pool_pre_ping,
        **kwargs,
    )
