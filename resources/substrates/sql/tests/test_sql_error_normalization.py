"""Tests for SQL exception normalization into shared error taxonomy."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError
from sqlalchemy.orm.exc import StaleDataError

from packages.stratum_shared.errors import codes
from resources.substrates.sql.errors import normalize_sql_error


def test_stale_data_maps_to_retryable_concurrency_conflict() -> None:
    error = normalize_sql_error(StaleDataError("expected to update 1 row(s); 0 were matched"))

    assert error.category.value == "conflict"
    assert error.code == codes.CONCURRENCY_CONFLICT
    assert error.retryable is True


def test_integrity_error_maps_to_already_exists() -> None:
    error = normalize_sql_error(
        IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: notes.id"))
    )

    assert error.category.value == "conflict"
    assert error.code == codes.ALREADY_EXISTS
    assert error.metadata["exception_type"] == "IntegrityError"


def test_unique_violation_text_maps_to_already_exists() -> None:
    class UniqueViolation(Exception):
        """Synthetic driver unique-violation exception."""

    error = normalize_sql_error(UniqueViolation("duplicate key value violates unique constraint"))

    assert error.code == codes.ALREADY_EXISTS


def test_operational_errors_map_to_retryable_dependency() -> None:
    error = normalize_sql_error(OperationalError("SELECT 1", {}, Exception("database is locked")))

    assert error.category.value == "dependency"
    assert error.code == codes.DEPENDENCY_UNAVAILABLE
    assert error.retryable is True


def test_programming_errors_map_to_non_retryable_dependency() -> None:
    error = normalize_sql_error(ProgrammingError("SELEC 1", {}, Exception("syntax error")))

    assert error.category.value == "dependency"
    assert error.retryable is False


def test_unknown_exception_maps_to_internal() -> None:
    error = normalize_sql_error(RuntimeError("boom"))

    assert error.category.value == "internal"
    assert error.code == codes.UNEXPECTED_EXCEPTION
