"""Consistency checks for a migration set against applied history.

Applied history is append-only: once a migration has been recorded it
may never be removed or edited. Any violation is reported, never
repaired.
"""

from __future__ import annotations

from darwin.driver import Driver
from darwin.models import Migration, MigrationRecord, by_version


def validate(driver: Driver, migrations: list[Migration]) -> None:
    """Validate migrations structurally and against recorded history.

    Checks run in order and stop at the first failure: illegal version,
    duplicate version, removed migration, checksum drift. The caller's
    list is not reordered.

    Args:
        driver: Driver for the target database.
        migrations: The full migration set.

    Raises:
        IllegalVersionError: A version is negative.
        DuplicateVersionError: Two migrations share a version.
        RemovedMigrationError: An applied version is missing from the set.
        InvalidChecksumError: An applied migration's script changed.
        Exception: Anything raised by ``driver.all()``, unchanged.
    """
    ordered = by_version(migrations)

    for migration in ordered:
        if migration.version < 0:
            raise IllegalVersionError(migration.version)

    seen: set[float] = set()
    for migration in ordered:
        if migration.version in seen:
            raise DuplicateVersionError(migration.version)
        seen.add(migration.version)

    applied = by_version(driver.all())

    version = find_removed(applied, ordered)
    if version is not None:
        raise RemovedMigrationError(version)

    version = find_checksum_mismatch(applied, ordered)
    if version is not None:
        raise InvalidChecksumError(version)


def find_removed(applied: list[MigrationRecord], migrations: list[Migration]) -> float | None:
    """First applied version with no migration in the set, if any."""
    defined = {migration.version for migration in migrations}
    for record in applied:
        if record.version not in defined:
            return record.version
    return None


def find_checksum_mismatch(
    applied: list[MigrationRecord], migrations: list[Migration]
) -> float | None:
    """First migration whose checksum differs from its record, if any."""
    recorded = {record.version: record.checksum for record in applied}
    for migration in migrations:
        checksum = recorded.get(migration.version)
        if checksum is not None and checksum != migration.checksum:
            return migration.version
    return None


# =============================================================================
# Custom Exceptions
# =============================================================================


class MigrationValidationError(Exception):
    """Base class for inconsistencies between migrations and history."""

    def __init__(self, version: float, message: str) -> None:
        super().__init__(message)
        self.version = version


class IllegalVersionError(MigrationValidationError):
    """A migration has a negative version number."""

    def __init__(self, version: float) -> None:
        super().__init__(version, f"Illegal migration version number {version}")


class DuplicateVersionError(MigrationValidationError):
    """Multiple migrations have the same version number."""

    def __init__(self, version: float) -> None:
        super().__init__(version, f"Multiple migrations have the version number {version}")


class RemovedMigrationError(MigrationValidationError):
    """An applied migration is no longer in the migration set."""

    def __init__(self, version: float) -> None:
        super().__init__(version, f"Migration {version} was applied but has been removed")


class InvalidChecksumError(MigrationValidationError):
    """An applied migration was edited after it ran."""

    def __init__(self, version: float) -> None:
        super().__init__(version, f"Invalid checksum for migration {version}")
