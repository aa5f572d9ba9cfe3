"""Session lifecycle helpers for shared SQL substrate access."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from packages.stratum_shared.logging import get_logger

_LOGGER = get_logger(__name__)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the provided SQLAlchemy engine.

    Objects stay readable after commit so response projections can be built
    from records returned by a finished transaction.
    """
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield one session; commit when the block succeeds, roll back otherwise."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception as exc:
        _LOGGER.debug(
            "Rolling back transaction after %s", type(exc).__name__
        )
        session.rollback()
        raise
    finally:
        session.close()
