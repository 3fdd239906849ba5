"""Darwin - forward-only, checksum-verified database migrations."""

from darwin.models import Migration, MigrationInfo, MigrationRecord, Status
from darwin.parser import parse_migrations, parse_migrations_dir
from darwin.planner import plan
from darwin.runner import Migrator
from darwin.status import info
from darwin.validator import validate

__version__ = "0.1.0"

__all__ = [
    "Migration",
    "MigrationInfo",
    "MigrationRecord",
    "Migrator",
    "Status",
    "info",
    "parse_migrations",
    "parse_migrations_dir",
    "plan",
    "validate",
]
