"""CLI interface using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from quake_intel import __version__
from quake_intel.aggregation import AggregationEngine
from quake_intel.config import QuakeIntelConfig
from quake_intel.errors import QuakeIntelError
from quake_intel.exporters import export_json, to_jsonable
from quake_intel.fetchers.usgs import FeedClient
from quake_intel.models import ComparisonResult, TopResult
from quake_intel.query import QueryEngine

app = typer.Typer(
    name="quake-intel",
    help="Real-time earthquake intelligence from the USGS feeds.",
    add_completion=False,
)
console = Console()

OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Write the JSON result to this file."),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"quake-intel {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
) -> None:
    """Earthquake Intel: search, rank, compare and assess seismic activity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )


def build_engines(config: QuakeIntelConfig | None = None) -> tuple[QueryEngine, AggregationEngine]:
    """Create both engines around one shared feed client."""
    config = config or QuakeIntelConfig()
    client = FeedClient(config)
    return (
        QueryEngine(client, max_workers=config.max_concurrency),
        AggregationEngine(client, max_workers=config.max_concurrency),
    )


def _emit(result: Any, output: Path | None) -> None:
    if output is not None:
        export_json(result, output)
        console.print(f"JSON written to [bold]{output}[/bold]")
    else:
        console.print_json(data=to_jsonable(result))


def _run(operation: Any, *args: Any, **kwargs: Any) -> Any:
    try:
        return operation(*args, **kwargs)
    except QuakeIntelError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {exc.message}")
        raise typer.Exit(code=1) from None


def parse_region(text: str) -> dict[str, Any]:
    """Parse ``NAME:LAT:LON[:RADIUS_KM]`` into compare input."""
    parts = text.split(":")
    if len(parts) not in (3, 4):
        raise typer.BadParameter(f"Expected NAME:LAT:LON[:RADIUS_KM], got {text!r}")
    try:
        region: dict[str, Any] = {
            "name": parts[0],
            "latitude": float(parts[1]),
            "longitude": float(parts[2]),
        }
        if len(parts) == 4:
            region["radius_km"] = float(parts[3])
    except ValueError:
        raise typer.BadParameter(f"Non-numeric coordinate in {text!r}") from None
    return region


def _top_table(result: TopResult) -> Table:
    table = Table(title=f"Top earthquakes ({result.period}, by {result.rank_by})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Mag", justify="right", style="red")
    table.add_column("Sig", justify="right")
    table.add_column("Place", style="bold")
    table.add_column("Time (UTC)")
    for ranked in result.top_earthquakes:
        q = ranked.quake
        table.add_row(
            str(ranked.rank),
            f"{q.magnitude:.1f}" if q.magnitude is not None else "-",
            str(q.significance) if q.significance is not None else "-",
            q.place or "-",
            q.occurred_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def _compare_table(result: ComparisonResult) -> Table:
    table = Table(title=f"Regional comparison (past {result.period_days} days)")
    table.add_column("Region", style="bold")
    table.add_column("Quakes", justify="right")
    table.add_column("Avg", justify="right")
    table.add_column("Max", justify="right", style="red")
    table.add_column("M4+", justify="right")
    table.add_column("M5+", justify="right")
    for c in result.comparison:
        table.add_row(
            c.region.name,
            str(c.stats.total_quakes),
            f"{c.stats.average_magnitude:.2f}",
            f"{c.stats.max_magnitude:.1f}",
            str(c.stats.quakes_above_4),
            str(c.stats.quakes_above_5),
        )
    return table


@app.command()
def overview(output: OutputOption = None) -> None:
    """Recent significant activity worldwide."""
    queries, _ = build_engines()
    _emit(_run(queries.overview), output)


@app.command()
def lookup(
    event_id: Annotated[str, typer.Argument(help="USGS event id, e.g. us6000s5ba.")],
    output: OutputOption = None,
) -> None:
    """Full details for one event."""
    queries, _ = build_engines()
    _emit(_run(queries.lookup, event_id), output)


@app.command()
def search(
    latitude: Annotated[float, typer.Option("--lat", help="Centre latitude.")],
    longitude: Annotated[float, typer.Option("--lon", help="Centre longitude.")],
    radius_km: Annotated[float, typer.Option("--radius", "-r", help="Radius in km.")] = 500.0,
    min_magnitude: Annotated[
        float, typer.Option("--min-magnitude", "-m", help="Minimum magnitude."),
    ] = 2.5,
    max_magnitude: Annotated[
        float | None, typer.Option("--max-magnitude", help="Maximum magnitude."),
    ] = None,
    days_back: Annotated[int, typer.Option("--days", "-d", help="Days of history.")] = 7,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max results.")] = 20,
    output: OutputOption = None,
) -> None:
    """Search quakes around a point."""
    queries, _ = build_engines()
    result = _run(
        queries.search,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius_km,
        min_magnitude=min_magnitude,
        max_magnitude=max_magnitude,
        days_back=days_back,
        limit=limit,
    )
    _emit(result, output)


@app.command()
def nearby(
    latitude: Annotated[float, typer.Option("--lat", help="Centre latitude.")],
    longitude: Annotated[float, typer.Option("--lon", help="Centre longitude.")],
    radius_km: Annotated[float, typer.Option("--radius", "-r", help="Radius in km.")] = 250.0,
    min_magnitude: Annotated[
        float, typer.Option("--min-magnitude", "-m", help="Minimum magnitude."),
    ] = 2.5,
    period: Annotated[str, typer.Option("--period", "-p", help="day, week or month.")] = "week",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max results.")] = 20,
    output: OutputOption = None,
) -> None:
    """Quakes near a point, nearest first."""
    queries, _ = build_engines()
    result = _run(
        queries.nearby,
        latitude=latitude,
        longitude=longitude,
        radius_km=radius_km,
        min_magnitude=min_magnitude,
        period=period,
        limit=limit,
    )
    _emit(result, output)


@app.command()
def top(
    period: Annotated[str, typer.Option("--period", "-p", help="day, week or month.")] = "week",
    rank_by: Annotated[
        str, typer.Option("--rank-by", help="magnitude or significance."),
    ] = "magnitude",
    min_magnitude: Annotated[
        float, typer.Option("--min-magnitude", "-m", help="Minimum magnitude."),
    ] = 4.5,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Number of results.")] = 10,
    output: OutputOption = None,
) -> None:
    """Top earthquakes of a period."""
    queries, _ = build_engines()
    result = _run(
        queries.top, period=period, rank_by=rank_by, min_magnitude=min_magnitude, limit=limit,
    )
    if output is not None:
        _emit(result, output)
    else:
        console.print(_top_table(result))


@app.command()
def magnitude(
    tier: Annotated[
        str, typer.Option("--tier", "-t", help="significant, 4.5, 2.5, 1.0 or all."),
    ] = "4.5",
    timeframe: Annotated[
        str, typer.Option("--timeframe", help="hour, day, week or month."),
    ] = "day",
    limit: Annotated[int, typer.Option("--limit", "-n", help="Max results.")] = 20,
    output: OutputOption = None,
) -> None:
    """Raw feed for a magnitude tier."""
    queries, _ = build_engines()
    _emit(_run(queries.by_magnitude_tier, tier=tier, timeframe=timeframe, limit=limit), output)


@app.command()
def compare(
    region: Annotated[
        list[str],
        typer.Option("--region", help="NAME:LAT:LON[:RADIUS_KM], repeat 2-5 times."),
    ],
    min_magnitude: Annotated[
        float, typer.Option("--min-magnitude", "-m", help="Minimum magnitude."),
    ] = 2.5,
    output: OutputOption = None,
) -> None:
    """Compare the past week of activity across regions."""
    regions = [parse_region(r) for r in region]
    _, aggregations = build_engines()
    result = _run(aggregations.compare, regions, min_magnitude=min_magnitude)
    if output is not None:
        _emit(result, output)
        return
    console.print(_compare_table(result))
    console.print(
        f"Most active: [bold]{result.most_active}[/bold]  "
        f"Least active: [bold]{result.least_active}[/bold]"
    )


@app.command()
def regional(
    name: Annotated[str, typer.Option("--name", help="Label for the region.")],
    lat_min: Annotated[float, typer.Option("--lat-min")],
    lat_max: Annotated[float, typer.Option("--lat-max")],
    lon_min: Annotated[float, typer.Option("--lon-min")],
    lon_max: Annotated[float, typer.Option("--lon-max")],
    tier: Annotated[str, typer.Option("--tier", "-t", help="Feed tier.")] = "all",
    output: OutputOption = None,
) -> None:
    """Activity report for a bounding box (lon-min > lon-max crosses 180)."""
    _, aggregations = build_engines()
    result = _run(
        aggregations.regional_report,
        name=name,
        lat_min=lat_min,
        lat_max=lat_max,
        lon_min=lon_min,
        lon_max=lon_max,
        tier=tier,
    )
    _emit(result, output)


@app.command()
def report(
    latitude: Annotated[float, typer.Option("--lat", help="Location latitude.")],
    longitude: Annotated[float, typer.Option("--lon", help="Location longitude.")],
    name: Annotated[str | None, typer.Option("--name", help="Location name.")] = None,
    output: OutputOption = None,
) -> None:
    """Seismic risk report for a location."""
    _, aggregations = build_engines()
    result = _run(
        aggregations.location_report, latitude=latitude, longitude=longitude, location_name=name,
    )
    level_style = {
        "high": "red", "elevated": "dark_orange", "moderate": "yellow", "low": "green",
    }[result.risk.level]
    console.print(
        f"Risk for [bold]{result.name}[/bold]: "
        f"[{level_style}]{result.risk.level}[/{level_style}] (score {result.risk.score})"
    )
    _emit(result, output)
