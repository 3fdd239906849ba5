"""Parsing of migration script text into Migration entities.

A migration file is plain text split into blocks by marker lines:

    -- Version: 1.0
    -- Description: create users
    CREATE TABLE users (...);

Markers are matched case-insensitively with at most one space removed,
so ``--version: 1.0`` and ``-- VERSION: 1.0`` both start a block. Text
before the first version marker is discarded. Every other line is part
of the current block's script and is kept with a trailing newline.
"""

from __future__ import annotations

import math
from pathlib import Path

from darwin.logging import get_logger
from darwin.models import Migration

log = get_logger("parser")

VERSION_MARKER = "--version:"
DESCRIPTION_MARKER = "--description:"


def parse_migrations(text: str) -> list[Migration]:
    """Parse a text blob into migrations in file order.

    Args:
        text: Raw migration text.

    Returns:
        Migrations in the order their blocks appear (not sorted).

    Raises:
        MigrationParseError: If a version marker has a non-numeric payload.
            Nothing is returned for the input in that case.
    """
    migrations: list[Migration] = []

    version: float | None = None
    description = ""
    script: list[str] = []

    for lineno, line in enumerate(_split_lines(text), start=1):
        normalized = line.lower().replace(" ", "", 1)

        if normalized.startswith(VERSION_MARKER):
            if version is not None:
                migrations.append(
                    Migration(version=version, description=description, script="".join(script))
                )
            version = _parse_version(_marker_payload(line), lineno)
            description = ""
            script = []
        elif normalized.startswith(DESCRIPTION_MARKER):
            description = _marker_payload(line)
        else:
            script.append(line + "\n")

    if version is not None:
        migrations.append(
            Migration(version=version, description=description, script="".join(script))
        )

    return migrations


def parse_migrations_dir(directory: Path | str, pattern: str = "*.sql") -> list[Migration]:
    """Parse every migration file in a directory.

    Files are read in file-name order and their migrations concatenated.

    Args:
        directory: Directory holding migration files.
        pattern: Glob pattern selecting migration files.

    Returns:
        All migrations from all matching files.

    Raises:
        FileNotFoundError: If the directory doesn't exist.
        MigrationParseError: If any file fails to parse.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Migrations directory not found: {directory}")

    migrations: list[Migration] = []
    for path in sorted(directory.glob(pattern), key=lambda p: p.name):
        if not path.is_file():
            continue
        try:
            migrations.extend(parse_migrations(path.read_text(encoding="utf-8")))
        except MigrationParseError as e:
            e.path = path
            raise

    log.debug("migrations_parsed", directory=str(directory), count=len(migrations))
    return migrations


def _split_lines(text: str) -> list[str]:
    """Split on newlines only, dropping a trailing carriage return per line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _marker_payload(line: str) -> str:
    """Text after the marker's colon."""
    return line.split(":", 1)[1].strip()


def _parse_version(payload: str, lineno: int) -> float:
    try:
        version = float(payload)
    except ValueError:
        version = math.nan

    if not math.isfinite(version):
        log.error("migration_parse_failed", line=lineno, payload=payload)
        raise MigrationParseError(f"Invalid migration version {payload!r}", line=lineno)

    return version


# =============================================================================
# Custom Exceptions
# =============================================================================


class MigrationParseError(ValueError):
    """Raised when migration text has a malformed version marker."""

    def __init__(self, message: str, line: int, path: Path | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.path = path

    def __str__(self) -> str:
        location = f"{self.path}:{self.line}" if self.path else f"line {self.line}"
        return f"{self.args[0]} ({location})"
