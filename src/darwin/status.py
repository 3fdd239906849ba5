"""Per-migration status reporting. Read-only; never validates."""

from __future__ import annotations

from darwin.driver import Driver
from darwin.models import Migration, MigrationInfo, MigrationRecord, Status, by_version


def info(driver: Driver, migrations: list[Migration]) -> list[MigrationInfo]:
    """Compute the status of every migration, in the order given.

    A migration is PENDING above the highest applied version, APPLIED if
    a record has its version, and IGNORED otherwise. With no history at
    all every migration is PENDING.

    Args:
        driver: Driver for the target database.
        migrations: Migrations to report on.

    Returns:
        One MigrationInfo per migration, in input order.
    """
    records = by_version(driver.all(), reverse=True)

    return [
        MigrationInfo(status=get_status(records, migration), migration=migration)
        for migration in migrations
    ]


def get_status(records: list[MigrationRecord], migration: Migration) -> Status:
    """Status of one migration given records sorted newest first."""
    if not records:
        return Status.PENDING

    last = records[0]
    if migration.version > last.version:
        return Status.PENDING

    if any(record.version == migration.version for record in records):
        return Status.APPLIED

    return Status.IGNORED
