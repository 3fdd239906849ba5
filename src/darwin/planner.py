"""Planning of outstanding migrations.

Uses a high-water mark rather than a set difference: only migrations
above the highest applied version are ever planned. A never-applied
version below the mark stays unapplied (reported as IGNORED by the
status reporter).
"""

from __future__ import annotations

from darwin.driver import Driver
from darwin.models import Migration, by_version


def plan(driver: Driver, migrations: list[Migration]) -> list[Migration]:
    """Select the migrations still to run, ascending by version.

    Args:
        driver: Driver for the target database.
        migrations: The full migration set, in any order.

    Returns:
        Migrations above the high-water mark, sorted ascending.
    """
    records = driver.all()

    if not records:
        return by_version(migrations)

    last = max(record.version for record in records)
    return by_version([m for m in migrations if m.version > last])
