"""
Configuration management for fraiseql-synth.

Loads and validates configuration from fraiseql-synth.toml files using Pydantic.
Generation settings can also come from ``FRAISEQL_SYNTH_*`` environment variables.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fraiseql_synth.dialects import DialectKind
from fraiseql_synth.engine import DEFAULT_BATCH_SIZE
from fraiseql_synth.generators.registry import LATEST_VERSION
from fraiseql_synth.planner import DEFAULT_COUNT

CONFIG_FILE_NAME = "fraiseql-synth.toml"


class DatabaseConfig(BaseSettings):
    """Where rows are written and which schema is introspected."""

    url: str = Field(
        default="postgresql://localhost/postgres",
        description="Connection URL of the database to seed",
    )
    schema_name: str = Field(
        default="public",
        alias="schema",
        description="Schema to introspect and seed",
    )
    dialect: DialectKind = Field(
        default=DialectKind.POSTGRESQL, description="Target database dialect"
    )

    model_config = SettingsConfigDict(env_prefix="FRAISEQL_SYNTH_DATABASE_", populate_by_name=True)


class GenerationConfig(BaseSettings):
    """Generation settings."""

    count: int = Field(default=DEFAULT_COUNT, ge=0, description="Default rows per table")
    seed: int = Field(default=0, description="Seed for the whole run")
    version: int = Field(
        default=LATEST_VERSION, description="Generator API version to reproduce"
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE, gt=0, description="Requested rows per insert"
    )

    model_config = SettingsConfigDict(env_prefix="FRAISEQL_SYNTH_")

    @field_validator("version")
    @classmethod
    def _check_version(cls, value: int) -> int:
        if not 1 <= value <= LATEST_VERSION:
            raise ValueError(f"version must be between 1 and {LATEST_VERSION}")
        return value


class Config(BaseSettings):
    """Main configuration for fraiseql-synth."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    refinements_file: Optional[str] = Field(
        default=None, description="YAML file with table refinements"
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> Config:
        """
        Read a fraiseql-synth.toml file.

        A relative ``refinements_file`` is resolved against the file's directory.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If a setting fails validation
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        # Relative refinement paths are relative to the config file
        refinements_file = data.get("refinements_file")
        if refinements_file and not Path(refinements_file).is_absolute():
            data["refinements_file"] = str(config_path.parent / refinements_file)

        return cls(**data)

    @classmethod
    def find_and_load(cls, start_dir: Optional[Path] = None) -> Config:
        """
        Load the nearest fraiseql-synth.toml in ``start_dir`` (default: cwd)
        or one of its parents.

        Raises:
            FileNotFoundError: If no directory up to the root has one
        """
        start = Path(start_dir or Path.cwd()).resolve()
        for directory in (start, *start.parents):
            candidate = directory / CONFIG_FILE_NAME
            if candidate.is_file():
                return cls.from_toml(candidate)

        raise FileNotFoundError(
            f"No {CONFIG_FILE_NAME} found in {start} or any parent directory. "
            f"Create one or pass --url."
        )

    def to_toml(self, path: Path | str) -> None:
        """Write the settings out in the layout ``from_toml`` reads."""
        refinements_line = (
            f'refinements_file = "{self.refinements_file}"\n' if self.refinements_file else ""
        )
        toml_content = f"""# fraiseql-synth configuration
{refinements_line}
[database]
url = "{self.database.url}"
schema = "{self.database.schema_name}"
dialect = "{self.database.dialect.value}"

[generation]
count = {self.generation.count}
seed = {self.generation.seed}
version = {self.generation.version}
batch_size = {self.generation.batch_size}
"""
        Path(path).write_text(toml_content)
