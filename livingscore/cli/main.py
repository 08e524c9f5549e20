"""Top-level CLI entry point for Living Score."""

from __future__ import annotations

import logging

import click

from livingscore import __version__


@click.group()
@click.version_option(version=__version__, prog_name="livingscore")
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    envvar="LIVINGSCORE_CONFIG",
    help="Path to livingscore.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Living Score -- time-decayed community signals for places."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Register sub-commands
from livingscore.cli.catalog_cmd import catalog_group  # noqa: E402
from livingscore.cli.config_cmd import config_group  # noqa: E402
from livingscore.cli.place_cmd import event_group, place_group  # noqa: E402

cli.add_command(catalog_group, "catalog")
cli.add_command(config_group, "config")
cli.add_command(event_group, "event")
cli.add_command(place_group, "place")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the local signal database and apply migrations."""
    from livingscore.config.loader import load_config, resolve_path
    from livingscore.storage.database import Database
    from livingscore.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))
    db_path = resolve_path(config.backend.database.path)
    click.echo(f"  Database: {db_path}")

    with Database(db_path) as db:
        version = ensure_schema(db)
        click.echo(f"  Schema version: {version}")

    click.echo("\nLiving Score initialized.")
    click.echo("Next steps:")
    click.echo("  1. Run: livingscore seed fixtures.yaml  (load signals and reviews)")
    click.echo("  2. Run: livingscore place signals <place_id>")


@cli.command()
@click.argument("fixture", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def seed(ctx: click.Context, fixture: str) -> None:
    """Load signal definitions and reviews from a YAML fixture."""
    from livingscore.config.loader import load_config, resolve_path
    from livingscore.data.fixtures import seed_from_file
    from livingscore.storage.database import Database
    from livingscore.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))
    with Database(resolve_path(config.backend.database.path)) as db:
        ensure_schema(db)
        counts = seed_from_file(db, fixture)

    click.echo(
        f"Seeded {counts['signals']} signals, {counts['reviews']} reviews, "
        f"{counts['legacy_signals']} legacy signals, {counts['event_reviews']} event reviews"
    )


def main() -> None:
    cli(obj={})
