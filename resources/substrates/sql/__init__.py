"""Shared SQL substrate primitives for Stratum services."""

from resources.substrates.sql.component import RESOURCE_COMPONENT_ID
from resources.substrates.sql.config import SqlSettings, resolve_sql_settings
from resources.substrates.sql.engine import create_sql_engine
from resources.substrates.sql.errors import normalize_sql_error
from resources.substrates.sql.health import ping
from resources.substrates.sql.session import (
    create_session_factory,
    transactional_session,
)
from resources.substrates.sql.transaction import (
    SessionTransactionManager,
    TransactionManager,
)

__all__ = [
    "RESOURCE_COMPONENT_ID",
    "SessionTransactionManager",
    "SqlSettings",
    "TransactionManager",
    "create_session_factory",
    "create_sql_engine",
    "normalize_sql_error",
    "ping",
    "resolve_sql_settings",
    "transactional_session",
]
