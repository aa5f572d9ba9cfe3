"""Health-check utilities for the shared SQL substrate."""

from __future__ import annotations

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from packages.stratum_shared.logging import get_logger

_LOGGER = get_logger(__name__)


def ping(engine: Engine) -> bool:
    """Return ``True`` when the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        _LOGGER.warning("SQL substrate ping failed: %s", type(exc).__name__)
        return False
    return True
