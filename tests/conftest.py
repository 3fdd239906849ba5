"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from datetime import timedelta

import pytest
import structlog
from click.testing import CliRunner
from sqlalchemy import create_engine

from darwin.database import SQLAlchemyDriver
from darwin.models import Migration, MigrationRecord


class ScriptedDriver:
    """In-memory driver that records every call.

    Records come back from ``all()`` newest first so callers that trust
    driver ordering get caught. Scripts listed in ``fail_on`` raise.
    """

    def __init__(self, records: list[MigrationRecord] | None = None) -> None:
        self.records: list[MigrationRecord] = list(records or [])
        self.executed: list[str] = []
        self.created = 0
        self.fail_on: set[str] = set()
        self.fail_all: Exception | None = None
        self.fail_insert: Exception | None = None

    def create(self) -> None:
        self.created += 1

    def all(self) -> list[MigrationRecord]:
        if self.fail_all is not None:
            raise self.fail_all
        return sorted(self.records, key=lambda r: r.version, reverse=True)

    def insert(self, record: MigrationRecord) -> None:
        if self.fail_insert is not None:
            raise self.fail_insert
        if any(r.version == record.version for r in self.records):
            raise ValueError(f"duplicate version {record.version}")
        self.records.append(record)

    def exec(self, script: str) -> timedelta:
        if script in self.fail_on:
            raise RuntimeError(f"script failed: {script.strip()}")
        self.executed.append(script)
        return timedelta(milliseconds=5)


def make_record(migration: Migration, checksum: str | None = None) -> MigrationRecord:
    """Build a record as if the migration had been applied."""
    from darwin.models import utcnow

    return MigrationRecord(
        version=migration.version,
        description=migration.description,
        checksum=checksum if checksum is not None else migration.checksum,
        applied_at=utcnow(),
        execution_time=timedelta(milliseconds=1),
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging so CLI tests don't leak handlers into later tests."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scripted_driver() -> ScriptedDriver:
    """Provide an empty in-memory driver."""
    return ScriptedDriver()


@pytest.fixture
def engine(tmp_path):
    """Create a SQLite engine on a temp file (no tables yet)."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def driver(engine) -> SQLAlchemyDriver:
    """Provide a SQLAlchemy driver on the temp database."""
    return SQLAlchemyDriver(engine)


@pytest.fixture
def migrations() -> list[Migration]:
    """A small valid migration set, out of version order."""
    return [
        Migration(version=2.0, description="add posts", script="CREATE TABLE posts (id INTEGER);\n"),
        Migration(version=1.0, description="create users", script="CREATE TABLE users (id INTEGER);\n"),
        Migration(version=1.1, description="", script="ALTER TABLE users ADD COLUMN name TEXT;\n"),
    ]
