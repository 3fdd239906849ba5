"""Configuration loading and validation for Darwin."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DatabaseConfig(BaseModel):
    """Target database configuration."""

    url: str = "sqlite:///darwin.db"
    table: str = "darwin_migrations"
    echo: bool = False

    @field_validator("table")
    @classmethod
    def validate_table(cls, v: str) -> str:
        """Validate the bookkeeping table name is a plain SQL identifier."""
        if not _IDENTIFIER.match(v):
            raise ValueError(f"table must be a plain SQL identifier, got: {v!r}")
        return v


class MigrationsConfig(BaseModel):
    """Where migration scripts are read from."""

    directory: Path = Path("migrations")
    pattern: str = "*.sql"


class Config(BaseModel):
    """Root configuration for Darwin."""

    log_level: str = "INFO"
    log_json: bool = False

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    migrations: MigrationsConfig = Field(default_factory=MigrationsConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is valid."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @classmethod
    def load(cls, config_path: Path | str = Path("darwin.yaml")) -> "Config":
        """Load configuration from YAML file with env var overlay.

        Args:
            config_path: Path to YAML configuration file.

        Returns:
            Validated Config instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config is invalid.
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}

        return cls.model_validate(_apply_env_overrides(yaml_config))

    @classmethod
    def load_or_default(cls, config_path: Path | str | None = None) -> "Config":
        """Load configuration, falling back to defaults if file not found.

        Environment overrides apply to the defaults as well.

        Args:
            config_path: Optional path to YAML configuration file.

        Returns:
            Config instance (from file or defaults).
        """
        if config_path is None:
            for path in [Path("darwin.yaml"), Path("darwin.yml")]:
                if path.exists():
                    return cls.load(path)
            return cls.model_validate(_apply_env_overrides({}))

        try:
            return cls.load(config_path)
        except FileNotFoundError:
            return cls.model_validate(_apply_env_overrides({}))


def _apply_env_overrides(raw: dict) -> dict:
    """Overlay DARWIN_* environment variables onto raw config data."""
    if "DARWIN_DATABASE_URL" in os.environ:
        raw.setdefault("database", {})["url"] = os.environ["DARWIN_DATABASE_URL"]
    if "DARWIN_MIGRATIONS_DIR" in os.environ:
        raw.setdefault("migrations", {})["directory"] = os.environ["DARWIN_MIGRATIONS_DIR"]
    if "DARWIN_LOG_LEVEL" in os.environ:
        raw["log_level"] = os.environ["DARWIN_LOG_LEVEL"]
    if "DARWIN_LOG_JSON" in os.environ:
        raw["log_json"] = os.environ["DARWIN_LOG_JSON"].lower() == "true"
    return raw
