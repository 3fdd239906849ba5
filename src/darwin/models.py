"""Pydantic models for Darwin entities.

Migrations live only in memory; records are the durable rows of the
bookkeeping table in the target database.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict


# =============================================================================
# Enums
# =============================================================================


class Status(str, Enum):
    """Status of a migration relative to the applied history."""

    IGNORED = "IGNORED"
    APPLIED = "APPLIED"
    PENDING = "PENDING"
    ERROR = "ERROR"


# =============================================================================
# Helper Functions
# =============================================================================


def utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# Core Entity Models
# =============================================================================


class Migration(BaseModel):
    """One versioned migration script.

    Identity is the version. The checksum is recomputed from the script
    on every access and never stored on the object.
    """

    model_config = ConfigDict(frozen=True)

    version: float
    description: str = ""
    script: str = ""

    @property
    def checksum(self) -> str:
        """Hex MD5 of the script text."""
        return hashlib.md5(self.script.encode("utf-8")).hexdigest()


class MigrationRecord(BaseModel):
    """A row of applied history in the bookkeeping table."""

    model_config = ConfigDict(from_attributes=True)

    version: float
    description: str
    checksum: str
    applied_at: datetime
    execution_time: timedelta


class MigrationInfo(BaseModel):
    """Read-only view of a migration and its computed status."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: Status
    error: Exception | None = None
    migration: Migration


# =============================================================================
# Sorting Helpers
# =============================================================================


def by_version[T: (Migration, MigrationRecord)](items: list[T], reverse: bool = False) -> list[T]:
    """Return a new list sorted by version.

    The sort is stable so equal versions keep their original order.
    """
    return sorted(items, key=lambda item: item.version, reverse=reverse)
