"""CLI commands: livingscore catalog ..."""

from __future__ import annotations

import json

import click

from livingscore.config.defaults import CATEGORY_TITLES


@click.group("catalog")
def catalog_group() -> None:
    """Inspect signal definitions."""
    pass


@catalog_group.command("list")
@click.option("--place-category", default=None, help="Place type, e.g. restaurant")
@click.option("--subcategory", default=None, help="Place subcategory, e.g. roller_coaster")
@click.option("--events", is_flag=True, help="List event signals instead")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def catalog_list(
    ctx: click.Context,
    place_category: str | None,
    subcategory: str | None,
    events: bool,
    as_json: bool,
) -> None:
    """List signals grouped by category.

    With --place-category, only the signal set a reviewer of that type of
    place would see.
    """
    from livingscore.cli.place_cmd import _service

    service = _service(ctx)
    if events:
        grouped = service.fetch_event_signal_choices()
    elif place_category or subcategory:
        grouped = service.fetch_available_signals(place_category, subcategory)
    else:
        service.catalog.load(service.source)
        grouped = service.catalog.by_category()

    if as_json:
        payload = {c.value: [d.to_dict() for d in items] for c, items in grouped.items()}
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for category, items in grouped.items():
        click.echo(f"\n{CATEGORY_TITLES[category.value]} ({len(items)}):")
        for definition in items:
            click.echo(f"  {definition.icon or '-'} {definition.label:28s} {definition.id}")
