"""Record Authority SQL runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine, MetaData
from sqlalchemy.orm import Session, sessionmaker

from packages.stratum_shared.config import StratumSettings
from resources.substrates.sql import (
    SessionTransactionManager,
    create_session_factory,
    create_sql_engine,
    ping,
    resolve_sql_settings,
)


@dataclass(frozen=True)
class RecordSqlRuntime:
    """Engine, session factory and transaction manager for record services."""

    engine: Engine
    session_factory: sessionmaker[Session]
    transactions: SessionTransactionManager

    @classmethod
    def from_settings(cls, settings: StratumSettings) -> "RecordSqlRuntime":
        """Build the runtime from ``components.substrate.sql``."""
        engine = create_sql_engine(resolve_sql_settings(settings))
        session_factory = create_session_factory(engine)
        return cls(
            engine=engine,
            session_factory=session_factory,
            transactions=SessionTransactionManager(session_factory),
        )

    def create_schema(self, metadata: MetaData) -> None:
        """Create every table of ``metadata`` that does not exist yet."""
        metadata.create_all(self.engine)

    def is_healthy(self) -> bool:
        return ping(self.engine)
