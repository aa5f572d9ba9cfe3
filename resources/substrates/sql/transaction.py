"""Transaction boundary used by record orchestration."""

from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.sql.session import transactional_session

T = TypeVar("T")


class TransactionManager(Protocol):
    """Run one unit of work inside a single commit-or-rollback boundary."""

    def execute(self, handler: Callable[[Session], T]) -> T:
        """Run ``handler`` with the transaction's session and return its result."""


class SessionTransactionManager:
    """``TransactionManager`` opening one SQLAlchemy session per call."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def execute(self, handler: Callable[[Session], T]) -> T:
        """Run ``handler`` in a fresh transaction; any exception rolls it back."""
        with transactional_session(self._session_factory) as session:
            return handler(session)
