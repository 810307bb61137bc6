"""CLI commands for fraiseql-synth."""

import json
import logging
import sys

import click
import psycopg

from fraiseql_synth.builder import SeedBuilder
from fraiseql_synth.config import Config
from fraiseql_synth.exceptions import FraiseQLSynthError
from fraiseql_synth.planner import describe_plan
from fraiseql_synth.refinements import load_refinements

CLI_ERRORS = (FraiseQLSynthError, FileNotFoundError, psycopg.Error)


def _load_config(config_path: str | None, url: str | None, schema: str | None) -> Config:
    if config_path:
        config = Config.from_toml(config_path)
    else:
        try:
            config = Config.find_and_load()
        except FileNotFoundError:
            config = Config()

    if url:
        config.database.url = url
    if schema:
        config.database.schema_name = schema
    return config


def _load_builder(config: Config) -> SeedBuilder:
    """Connect to the configured database and introspect its schema."""
    conn = psycopg.connect(config.database.url)
    click.get_current_context().call_on_close(conn.close)
    return SeedBuilder.from_connection(
        conn, config.database.schema_name, dialect=config.database.dialect
    )


def _configure(
    builder: SeedBuilder,
    config: Config,
    count: int | None = None,
    seed: int | None = None,
    version: int | None = None,
    refinements: str | None = None,
) -> SeedBuilder:
    builder.options(
        count=count if count is not None else config.generation.count,
        seed=seed if seed is not None else config.generation.seed,
        version=version if version is not None else config.generation.version,
        batch_size=config.generation.batch_size,
    )
    refinements_file = refinements or config.refinements_file
    if refinements_file:
        builder.refine_all(load_refinements(refinements_file))
    return builder


@click.group()
@click.version_option(package_name="fraiseql-synth")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to fraiseql-synth.toml (default: search upwards from cwd)",
)
@click.option("--url", help="PostgreSQL connection URL (overrides config)")
@click.option("--schema", help="Schema to seed (overrides config)")
@click.option("--verbose", "-v", is_flag=True, help="Log every batch")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    url: str | None,
    schema: str | None,
    verbose: bool,
) -> None:
    """fraiseql-synth - Deterministic synthetic data for relational schemas."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        ctx.obj = _load_config(config_path, url, schema)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--count", type=int, help="Default rows per table")
@click.option("--version", "api_version", type=int, help="Generator API version")
@click.option("--refinements", type=click.Path(exists=True, dir_okay=False), help="Refinements YAML")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def plan(
    config: Config,
    count: int | None,
    api_version: int | None,
    refinements: str | None,
    output_json: bool,
) -> None:
    """Show fill order and the generator chosen for every column."""
    try:
        builder = _configure(
            _load_builder(config), config, count=count, version=api_version, refinements=refinements
        )
        description = describe_plan(builder.plan())
    except CLI_ERRORS as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(description, indent=2))
        return

    default_count = count if count is not None else config.generation.count
    for entry in description:
        rows = entry["count"] if entry["count"] is not None else default_count
        click.echo(f"{entry['table']} ({rows} rows)")
        for column, kind in entry["columns"].items():
            click.echo(f"  {column}: {kind}")


@cli.command()
@click.option("--count", type=int, help="Default rows per table")
@click.option("--seed", "seed_value", type=int, help="Seed for the whole run")
@click.option("--version", "api_version", type=int, help="Generator API version")
@click.option("--refinements", type=click.Path(exists=True, dir_okay=False), help="Refinements YAML")
@click.option("--reset", is_flag=True, help="Truncate tables before seeding")
@click.option("--dry-run", is_flag=True, help="Print rows as JSON instead of inserting")
@click.pass_obj
def seed(
    config: Config,
    count: int | None,
    seed_value: int | None,
    api_version: int | None,
    refinements: str | None,
    reset: bool,
    dry_run: bool,
) -> None:
    """Generate rows for every table and insert them."""
    try:
        builder = _configure(
            _load_builder(config),
            config,
            count=count,
            seed=seed_value,
            version=api_version,
            refinements=refinements,
        )

        if dry_run:
            seeds = builder.generate()
            data = {
                table: [row.to_dict() for row in seeds[table]] for table in seeds.table_names()
            }
            click.echo(json.dumps(data, indent=2, default=str))
            return

        if reset:
            builder.reset()
        inserted = builder.execute()
    except CLI_ERRORS as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for table, rows in inserted.items():
        click.echo(f"✓ {table}: {rows} rows")


@cli.command()
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_obj
def reset(config: Config, yes: bool) -> None:
    """Truncate every table of the schema."""
    if not yes:
        click.confirm(
            f"Truncate all tables in schema '{config.database.schema_name}'?", abort=True
        )

    try:
        _load_builder(config).reset()
    except CLI_ERRORS as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Reset schema '{config.database.schema_name}'")


if __name__ == "__main__":
    cli()
