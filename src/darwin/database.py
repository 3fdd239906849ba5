"""SQLAlchemy implementation of the Driver capability.

Uses SQLAlchemy Core (not ORM) so the bookkeeping table is portable
across every dialect SQLAlchemy supports.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    event,
    inspect,
    select,
)
from sqlalchemy.engine import Engine, make_url

from darwin.config import Config
from darwin.logging import get_logger
from darwin.models import MigrationRecord

log = get_logger("database")


# =============================================================================
# Bookkeeping Table
# =============================================================================


def migrations_table(name: str, metadata: MetaData | None = None) -> Table:
    """Build the bookkeeping table definition.

    Args:
        name: Table name.
        metadata: MetaData to attach the table to. A fresh one by default.

    Returns:
        SQLAlchemy Table.
    """
    return Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("version", Float(precision=53), nullable=False, unique=True),
        Column("description", String(255), nullable=False),
        Column("checksum", String(32), nullable=False),
        Column("applied_at", DateTime(timezone=True), nullable=False),
        Column("execution_time", Float, nullable=False),  # seconds
    )


# =============================================================================
# Driver
# =============================================================================


class SQLAlchemyDriver:
    """Driver backed by a SQLAlchemy engine.

    Attributes:
        engine: SQLAlchemy Engine for the target database.
        table: Bookkeeping table.
    """

    def __init__(self, engine: Engine, table_name: str = "darwin_migrations") -> None:
        self.engine = engine
        self.table = migrations_table(table_name)

    def create(self) -> None:
        """Create the bookkeeping table if it doesn't exist."""
        self.table.create(self.engine, checkfirst=True)

    def all(self) -> list[MigrationRecord]:
        """Fetch every applied record, ordered by version.

        Returns an empty list if the bookkeeping table doesn't exist yet.
        """
        with self.engine.connect() as conn:
            if not inspect(conn).has_table(self.table.name):
                return []
            rows = conn.execute(select(self.table).order_by(self.table.c.version)).fetchall()

        return [
            MigrationRecord(
                version=row.version,
                description=row.description,
                checksum=row.checksum,
                applied_at=_as_utc(row.applied_at),
                execution_time=timedelta(seconds=row.execution_time),
            )
            for row in rows
        ]

    def insert(self, record: MigrationRecord) -> None:
        """Insert one record.

        Raises:
            sqlalchemy.exc.IntegrityError: If the version is already recorded.
        """
        description = record.description
        limit = self.table.c.description.type.length
        if len(description) > limit:
            log.warning(
                "description_truncated",
                version=record.version,
                length=len(description),
                limit=limit,
            )
            description = description[:limit]

        with self.engine.begin() as conn:
            conn.execute(
                self.table.insert().values(
                    version=record.version,
                    description=description,
                    checksum=record.checksum,
                    applied_at=record.applied_at,
                    execution_time=record.execution_time.total_seconds(),
                )
            )

    def exec(self, script: str) -> timedelta:
        """Run a script and time it.

        SQLite scripts may hold several statements. Other dialects receive
        the script as a single DBAPI call.
        """
        start = time.perf_counter()

        if self.engine.dialect.name == "sqlite":
            raw = self.engine.raw_connection()
            try:
                raw.driver_connection.executescript(script)
                raw.commit()
            finally:
                raw.close()
        else:
            with self.engine.begin() as conn:
                conn.exec_driver_sql(script)

        return timedelta(seconds=time.perf_counter() - start)


# =============================================================================
# Helper Functions
# =============================================================================


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def get_engine(config: Config) -> Engine:
    """Create SQLAlchemy engine from config.

    Args:
        config: Application configuration.

    Returns:
        SQLAlchemy Engine instance.
    """
    url = make_url(config.database.url)

    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        # Ensure data directory exists
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=config.database.echo)

    if url.get_backend_name() == "sqlite":
        event.listen(engine, "connect", _sqlite_pragmas)

    log.debug("engine_created", url=url.render_as_string(hide_password=True))
    return engine


def get_driver(config: Config, engine: Engine | None = None) -> SQLAlchemyDriver:
    """Build the driver for the configured database."""
    return SQLAlchemyDriver(engine or get_engine(config), table_name=config.database.table)


def _sqlite_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
