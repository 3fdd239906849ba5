"""Migration runner for Darwin.

Applies planned migrations one at a time: execute the script, then
record it. Nothing spans migrations transactionally, so a failure at
migration N leaves 1..N-1 applied and recorded and N unrecorded. Running
again resumes at N.
"""

from __future__ import annotations

import threading

from darwin import planner, status, validator
from darwin.driver import Driver
from darwin.logging import get_logger
from darwin.models import Migration, MigrationInfo, MigrationRecord, utcnow

log = get_logger("runner")


class Migrator:
    """Applies migrations to one target database.

    Create one Migrator per target database and share it; concurrent
    ``migrate`` calls on the same instance run one after another.
    ``validate``, ``plan`` and ``info`` only read history and are not
    serialized. There is no cross-process locking.

    Attributes:
        driver: Driver for the target database.
    """

    def __init__(self, driver: Driver) -> None:
        self.driver = driver
        self._lock = threading.Lock()

    def validate(self, migrations: list[Migration]) -> None:
        """Check migrations against recorded history. See ``validator.validate``."""
        validator.validate(self.driver, migrations)

    def plan(self, migrations: list[Migration]) -> list[Migration]:
        """Migrations that ``migrate`` would apply next."""
        return planner.plan(self.driver, migrations)

    def info(self, migrations: list[Migration]) -> list[MigrationInfo]:
        """Status of each migration. See ``status.info``."""
        return status.info(self.driver, migrations)

    def migrate(self, migrations: list[Migration]) -> list[MigrationRecord]:
        """Apply every pending migration.

        Args:
            migrations: The full migration set, in any order.

        Returns:
            Records inserted by this call, in apply order.

        Raises:
            MigrationValidationError: The set is inconsistent with history.
                No script runs in that case.
            Exception: Any driver failure, unchanged. Migrations applied
                before the failure stay recorded.
        """
        with self._lock:
            self.driver.create()
            validator.validate(self.driver, migrations)
            planned = planner.plan(self.driver, migrations)

            applied: list[MigrationRecord] = []

            for migration in planned:
                log.info(
                    "applying_migration",
                    version=migration.version,
                    description=migration.description,
                )

                try:
                    elapsed = self.driver.exec(migration.script)
                    record = MigrationRecord(
                        version=migration.version,
                        description=migration.description,
                        checksum=migration.checksum,
                        applied_at=utcnow(),
                        execution_time=elapsed,
                    )
                    self.driver.insert(record)
                except Exception as e:
                    log.error("migration_failed", version=migration.version, error=str(e))
                    raise

                applied.append(record)
                log.info(
                    "migration_applied",
                    version=migration.version,
                    execution_time=elapsed.total_seconds(),
                )

            if applied:
                log.info("migrations_complete", count=len(applied))
            else:
                log.info("no_pending_migrations")

            return applied
