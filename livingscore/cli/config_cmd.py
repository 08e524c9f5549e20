"""Config CLI commands: show, validate."""

from __future__ import annotations

import json

import click

from livingscore.exceptions import ConfigError


@click.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration."""
    from livingscore.config.loader import load_config

    config = load_config(ctx.obj.get("config_path"))
    click.echo(json.dumps(config.model_dump(), indent=2, default=str))


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate livingscore.yaml against the schema."""
    from livingscore.config.loader import load_config

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None

    click.echo("Config is valid.")
    click.echo(f"  Version: {config.version}")
    click.echo(f"  Backend: {config.backend.kind}")
    if config.backend.kind == "rest":
        click.echo(f"  REST url: {config.backend.rest.url}")
    else:
        click.echo(f"  Database: {config.backend.database.path}")
    click.echo(
        f"  Decay window: {config.scoring.max_age_days}d, "
        f"ghost below {config.scoring.ghost_threshold}"
    )
