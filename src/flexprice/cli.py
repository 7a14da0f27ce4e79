"""Command-line interface for dynamic tariff analysis."""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analysis import summary
from .analysis.alignment import build_index, energy_for_slot
from .analysis.comparison import compare
from .analysis.windows import recommend_windows
from .collectors import tariff_api
from .collectors.load_profile import LoadProfileError, load_profile_from_file
from .config import DEFAULT_TARIFF_TYPE, DEFAULT_UNIT, ConfigError, get_baseline_rate, load_appliances_from_yaml
from .models import TariffSlot
from .tariffs import build_slots
from .timestamps import parse_timestamp

console = Console()


def _parse_datetime_option(ctx, param, value):
    if value is None:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise click.BadParameter(f"could not parse {value!r} as a date/time")
    return parsed


def _default_range(start: datetime | None, end: datetime | None) -> tuple[datetime, datetime]:
    """Default to today 00:00 local time through the next 24 hours."""
    if start is None:
        start = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    if end is None:
        end = start + timedelta(days=1)
    return start, end


def format_range(start: datetime, end: datetime) -> str:
    return f"{start:%a %d.%m.} {start:%H:%M} – {end:%H:%M}"


def tariff_options(func):
    """Options shared by commands that need tariff slots."""
    options = [
        click.option("--start", callback=_parse_datetime_option, help="Range start (ISO or D.M.YYYY H:MM), default today 00:00"),
        click.option("--end", callback=_parse_datetime_option, help="Range end, default start + 24h"),
        click.option("--tariff-type", default=DEFAULT_TARIFF_TYPE, show_default=True, help="Tariff type (integrated, grid, grid_usage, electricity)"),
        click.option("--demo", is_flag=True, help="Use synthetic demo prices instead of the API"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_slots(start, end, tariff_type: str, demo: bool) -> list[TariffSlot]:
    """Fetch (or generate) tariff records and normalize them into slots."""
    start, end = _default_range(start, end)
    if demo:
        records = tariff_api.build_demo_data(base=start)
    else:
        records = tariff_api.fetch_tariffs(start, end, tariff_type)
    return build_slots(records, tariff_type)


def _get_slots_or_exit(ctx, start, end, tariff_type, demo) -> list[TariffSlot]:
    try:
        slots = load_slots(start, end, tariff_type, demo)
    except tariff_api.TariffApiError as e:
        console.print(f"[red]Price request failed: {e}[/red]")
        console.print("[dim]Use --demo to work with synthetic prices[/dim]")
        ctx.exit(1)

    if not slots:
        console.print("[yellow]No prices found for the selected range/tariff type[/yellow]")
        ctx.exit(1)

    return slots


def print_slots_table(slots: list[TariffSlot], index: dict[int, float] | None = None) -> None:
    table = Table(title="Dynamic prices")
    table.add_column("Time", style="cyan")
    table.add_column("Price", justify="right")
    if index is not None:
        table.add_column("Load (kWh)", justify="right")

    cheapest = min(slot.price for slot in slots)
    for slot in slots:
        price = f"{slot.price:.4f} {slot.unit}"
        if slot.price == cheapest:
            price = f"[green]{price}[/green]"
        row = [format_range(slot.start, slot.end), price]
        if index is not None:
            energy = energy_for_slot(index, slot)
            row.append(f"{energy:.3f}" if energy is not None else "[dim]–[/dim]")
        table.add_row(*row)

    console.print(table)


def print_recommendations(recommendations) -> None:
    if not recommendations:
        console.print("[yellow]No recommendations available[/yellow]")
        return

    table = Table(title="Cheapest windows")
    table.add_column("Appliance", style="cyan")
    table.add_column("Window")
    table.add_column("Avg price", justify="right")
    table.add_column("Description", style="dim")

    for appliance, window in recommendations:
        table.add_row(
            appliance.name,
            format_range(window.start, window.end),
            f"{window.average_price:.4f} {window.unit}",
            appliance.description,
        )

    console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, verbose):
    """Dynamic tariff analysis - cheapest usage windows and cost comparison."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@cli.command()
@tariff_options
@click.option("--appliances", "appliances_path", type=click.Path(exists=True), help="Path to appliances.yaml")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def prices(ctx, start, end, tariff_type, demo, appliances_path, as_json):
    """Show dynamic prices and the cheapest window per appliance."""
    try:
        appliances = load_appliances_from_yaml(Path(appliances_path) if appliances_path else None)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        ctx.exit(1)

    slots = _get_slots_or_exit(ctx, start, end, tariff_type, demo)
    recommendations = recommend_windows(slots, appliances)

    if as_json:
        click.echo(json.dumps({
            "slots": summary.get_slots_summary(slots),
            "recommendations": summary.get_recommendations_summary(recommendations),
        }, indent=2))
        return

    print_recommendations(recommendations)
    print_slots_table(slots)


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def profile(ctx, file_path, as_json):
    """Inspect a load-profile export (CSV/TSV, kWh or kW)."""
    try:
        load_profile = load_profile_from_file(Path(file_path))
    except LoadProfileError as e:
        console.print(f"[red]Could not read load profile: {e}[/red]")
        ctx.exit(1)

    data = summary.get_profile_summary(load_profile)
    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        console.print(summary.format_profile_summary_text(data))


@cli.command("compare")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@tariff_options
@click.option("--baseline-rate", type=float, help="Flat comparison rate per kWh (or set FLEXPRICE_BASELINE_RATE)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def compare_cmd(ctx, file_path, start, end, tariff_type, demo, baseline_rate, as_json):
    """Compare a load profile's cost on the dynamic tariff against a flat rate."""
    if baseline_rate is None:
        try:
            baseline_rate = get_baseline_rate()
        except ConfigError as e:
            console.print(f"[red]Error: {e}[/red]")
            ctx.exit(1)

    slots = _get_slots_or_exit(ctx, start, end, tariff_type, demo)

    try:
        load_profile = load_profile_from_file(Path(file_path))
    except LoadProfileError as e:
        console.print(f"[red]Could not read load profile: {e}[/red]")
        if not as_json:
            print_slots_table(slots)
        ctx.exit(1)

    index = build_index(load_profile.samples)
    result = compare(slots, index, baseline_rate)
    unit = slots[0].unit if slots else DEFAULT_UNIT
    data = summary.get_comparison_summary(result, baseline_rate, unit)

    if as_json:
        data["profile"] = summary.get_profile_summary(load_profile)
        click.echo(json.dumps(data, indent=2))
        return

    print_slots_table(slots, index)
    console.print(summary.format_profile_summary_text(summary.get_profile_summary(load_profile)))
    console.print()
    if result.has_coverage:
        console.print(summary.format_comparison_summary_text(data))
    else:
        console.print(f"[yellow]{summary.format_comparison_summary_text(data)}[/yellow]")


if __name__ == "__main__":
    cli()
