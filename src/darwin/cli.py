"""Command-line interface for Darwin."""

from pathlib import Path

import click

from darwin import __version__
from darwin.config import Config
from darwin.logging import get_logger, setup_logging

log = get_logger("cli")


@click.group()
@click.option(
    "-c",
    "--config-file",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to configuration file.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Set logging level (overrides config).",
)
@click.option(
    "--log-json/--no-log-json",
    default=None,
    help="Output logs as JSON or human-readable format (overrides config).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    log_level: str | None,
    log_json: bool | None,
) -> None:
    """Darwin - forward-only database migrations.

    Applies versioned SQL scripts in order and records each one,
    with its checksum, in the target database.
    """
    ctx.ensure_object(dict)

    config = Config.load_or_default(config_file)
    ctx.obj["config"] = config
    ctx.obj["config_file"] = config_file

    # CLI overrides config
    effective_log_level = log_level or config.log_level
    effective_log_json = log_json if log_json is not None else config.log_json

    setup_logging(json_output=effective_log_json, level=effective_log_level)


def target_options(f):
    """Per-command overrides of the database and migrations location."""
    f = click.option(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (overrides config).",
    )(f)
    f = click.option(
        "--migrations-dir",
        type=click.Path(path_type=Path),
        default=None,
        help="Directory of migration files (overrides config).",
    )(f)
    return f


def _load(ctx: click.Context, database_url: str | None, migrations_dir: Path | None):
    """Build a Migrator and parse the migration set for a command."""
    from darwin.database import get_driver
    from darwin.parser import MigrationParseError, parse_migrations_dir
    from darwin.runner import Migrator

    config: Config = ctx.obj["config"]
    updates = {}
    if database_url:
        updates["database"] = config.database.model_copy(update={"url": database_url})
    if migrations_dir:
        updates["migrations"] = config.migrations.model_copy(update={"directory": migrations_dir})
    if updates:
        config = config.model_copy(update=updates)

    try:
        migrations = parse_migrations_dir(config.migrations.directory, config.migrations.pattern)
    except (FileNotFoundError, MigrationParseError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    try:
        driver = get_driver(config)
    except Exception as e:
        click.echo(f"Database error: {e}", err=True)
        raise SystemExit(1)

    return Migrator(driver), migrations


@cli.command()
def version() -> None:
    """Print version information."""
    click.echo(f"darwin {__version__}")


@cli.command()
@target_options
@click.pass_context
def migrate(ctx: click.Context, database_url: str | None, migrations_dir: Path | None) -> None:
    """Apply pending migrations."""
    from darwin.validator import MigrationValidationError

    migrator, migrations = _load(ctx, database_url, migrations_dir)
    log.info("migrate_command_invoked", migrations=len(migrations))

    try:
        applied = migrator.migrate(migrations)
    except MigrationValidationError as e:
        click.echo(f"Validation failed: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        click.echo(f"Migration failed: {e}", err=True)
        raise SystemExit(1)

    if not applied:
        click.echo("No pending migrations")
        return

    for record in applied:
        click.echo(f"  {record.version:g}: {record.description}")
    click.echo(f"Applied {len(applied)} migration(s)")


@cli.command()
@target_options
@click.pass_context
def validate(ctx: click.Context, database_url: str | None, migrations_dir: Path | None) -> None:
    """Check migrations against the applied history."""
    from darwin.validator import MigrationValidationError

    migrator, migrations = _load(ctx, database_url, migrations_dir)

    try:
        migrator.validate(migrations)
    except MigrationValidationError as e:
        click.echo(f"Validation failed: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        click.echo(f"Database error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Migrations valid: {len(migrations)}")


@cli.command()
@target_options
@click.pass_context
def info(ctx: click.Context, database_url: str | None, migrations_dir: Path | None) -> None:
    """Show the status of every migration."""
    migrator, migrations = _load(ctx, database_url, migrations_dir)

    try:
        infos = migrator.info(migrations)
    except Exception as e:
        click.echo(f"Database error: {e}", err=True)
        raise SystemExit(1)

    if not infos:
        click.echo("No migrations found")
        return

    for item in infos:
        m = item.migration
        click.echo(f"{m.version:<10g} {item.status.value:<8} {m.description}")


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command(name="check")
@click.option(
    "-c",
    "--config-file",
    type=click.Path(exists=True, path_type=Path),
    default="darwin.yaml",
    help="Path to configuration file.",
)
def config_check(config_file: Path) -> None:
    """Validate configuration file."""
    try:
        cfg = Config.load(config_file)
        click.echo(f"Configuration valid: {config_file}")
        click.echo(f"  Database: {cfg.database.url}")
        click.echo(f"  Table: {cfg.database.table}")
        click.echo(f"  Migrations: {cfg.migrations.directory}/{cfg.migrations.pattern}")
        click.echo(f"  Log level: {cfg.log_level}")
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)
