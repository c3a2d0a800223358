"""Tests for Postgres exception normalization into shared error taxonomy."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError

from packages.serverhub_shared.errors import codes
from resources.substrates.postgres.errors import normalize_postgres_error


def test_integrity_error_maps_to_conflict() -> None:
    error = normalize_postgres_error(
        IntegrityError("INSERT", {}, Exception("duplicate key value"))
    )

    assert error.category.value == "conflict"
    assert error.code == codes.ALREADY_EXISTS


def test_operational_error_maps_to_retryable_dependency() -> None:
    error = normalize_postgres_error(
        OperationalError("SELECT 1", {}, Exception("connection refused"))
    )

    assert error.category.value == "dependency"
    assert error.retryable is True


def test_programming_error_maps_to_non_retryable_dependency() -> None:
    error = normalize_postgres_error(
        ProgrammingError("SELEC 1", {}, Exception("syntax error"))
    )

    assert error.code == codes.DEPENDENCY_FAILURE
    assert error.retryable is False


def test_unknown_exception_maps_to_internal() -> None:
    error = normalize_postgres_error(RuntimeError("boom"))

    assert error.category.value == "internal"
    assert error.code == codes.UNEXPECTED_EXCEPTION
