"""CLI commands: livingscore place ... / livingscore event ..."""

from __future__ import annotations

import json

import click

from livingscore.config.defaults import CATEGORY_TITLES
from livingscore.engine.models import Category, PlaceSignals, SignalAggregate

_MEDAL_TITLES = {
    "vibe_check": "Vibe Check",
    "speed_demon": "Speed Demon",
    "hidden_gem": "Hidden Gem",
}


def _service(ctx: click.Context):
    from livingscore.config.loader import load_config
    from livingscore.data.source import build_source
    from livingscore.engine.service import SignalService

    config = load_config(ctx.obj.get("config_path"))
    return SignalService(build_source(config), config=config)


def _format_signal(signal: SignalAggregate) -> str:
    taps = "tap" if signal.review_count == 1 else "taps"
    ghost = "  (fading)" if signal.is_ghost else ""
    return (
        f"  {signal.icon or '-'} {signal.label:28s} {signal.current_score:7.2f}"
        f"  {signal.review_count} {taps}{ghost}"
    )


def _echo_signals(result: PlaceSignals) -> None:
    if result.medals:
        click.echo("Medals: " + ", ".join(_MEDAL_TITLES[m.value] for m in result.medals))
    for category in Category:
        click.echo(f"\n{CATEGORY_TITLES[category.value]}:")
        bucket = result.bucket(category)
        if not bucket:
            click.echo("  Be the first to tap!")
        for signal in bucket:
            click.echo(_format_signal(signal))


# ---------------------------------------------------------------------------
# place
# ---------------------------------------------------------------------------

@click.group("place")
def place_group() -> None:
    """Living Score for places."""
    pass


@place_group.command("signals")
@click.argument("place_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def place_signals(ctx: click.Context, place_id: str, as_json: bool) -> None:
    """Show Living Score buckets and medals for a place."""
    result = _service(ctx).fetch_place_signals(place_id)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    click.echo(f"Community signals for {place_id}")
    click.echo("=" * 40)
    _echo_signals(result)


@place_group.command("top")
@click.argument("place_id")
@click.option("--limit", "-n", type=int, default=None, help="Number of signals")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def place_top(ctx: click.Context, place_id: str, limit: int | None, as_json: bool) -> None:
    """Show the top signals for a place across all categories."""
    signals = _service(ctx).get_top_signals(place_id, limit=limit)
    if as_json:
        click.echo(json.dumps([s.to_dict() for s in signals], indent=2, ensure_ascii=False))
        return
    if not signals:
        click.echo("No signals yet.")
    for signal in signals:
        click.echo(_format_signal(signal))


@place_group.command("thermometer")
@click.argument("place_ids", nargs=-1, required=True)
@click.option("--months", "-m", type=int, default=None, help="Window in months")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def place_thermometer(
    ctx: click.Context, place_ids: tuple[str, ...], months: int | None, as_json: bool,
) -> None:
    """Recent positive vs. heads-up tap volume for one or more places."""
    service = _service(ctx)
    if len(place_ids) == 1:
        readings = {place_ids[0]: service.fetch_place_thermometer(place_ids[0], months=months)}
    else:
        readings = service.fetch_places_thermometer(list(place_ids), months=months)

    if as_json:
        click.echo(json.dumps(readings, indent=2))
        return
    for place_id, reading in readings.items():
        click.echo(
            f"  {place_id:24s} +{reading['positive_taps']:<5d} -{reading['negative_taps']}"
        )


# ---------------------------------------------------------------------------
# event
# ---------------------------------------------------------------------------

@click.group("event")
def event_group() -> None:
    """Signals for events (no time decay)."""
    pass


@event_group.command("signals")
@click.argument("event_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def event_signals(ctx: click.Context, event_id: str, as_json: bool) -> None:
    """Show signal buckets for an event."""
    result = _service(ctx).fetch_event_signals(event_id)
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    click.echo(f"Signals for event {event_id}")
    click.echo("=" * 40)
    _echo_signals(result)
