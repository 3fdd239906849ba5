"""Driver capability consumed by the migration core.

A driver stores applied history and executes scripts against one target
database. The core never talks to a database any other way.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Protocol, runtime_checkable

from darwin.models import MigrationRecord


@runtime_checkable
class Driver(Protocol):
    """Storage and execution operations against a target database.

    Implementations must raise on failure rather than returning partial
    results. Ordering of ``all()`` is never relied upon by callers.
    """

    def create(self) -> None:
        """Ensure the bookkeeping table exists. Must be idempotent."""
        ...

    def all(self) -> list[MigrationRecord]:
        """Return every applied record."""
        ...

    def insert(self, record: MigrationRecord) -> None:
        """Append one record. Must raise if the version already exists."""
        ...

    def exec(self, script: str) -> timedelta:
        """Execute a script and return the wall time it took."""
        ...
