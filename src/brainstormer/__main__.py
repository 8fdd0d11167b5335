"""CLI entry point for Brainstormer."""

from __future__ import annotations

import asyncio
import json
import logging
import random
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from brainstormer import __version__
from brainstormer.config import Settings
from brainstormer.directory import bucket_by_initial, paginate, resolve_bucket
from brainstormer.reel.ensemble import Ensemble
from brainstormer.reel.models import Item
from brainstormer.reel.scheduler import AsyncioFrameScheduler
from brainstormer.sources.categories import CategoryConfigError, CategoryRegistry
from brainstormer.sources.loader import LoadHealth, LoadResult, SourceLoader

console = Console()

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]

HEALTH_STYLES = {
    LoadHealth.OK: "green",
    LoadHealth.DEGRADED: "yellow",
    LoadHealth.FAILED: "red",
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_registry(ctx: click.Context) -> CategoryRegistry:
    settings: Settings = ctx.obj["settings"]
    try:
        return CategoryRegistry.load(ctx.obj["categories_path"], data_base=settings.data_base)
    except (FileNotFoundError, CategoryConfigError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


async def _load_all(registry: CategoryRegistry, settings: Settings) -> LoadResult:
    async with SourceLoader.from_settings(settings) as loader:
        return await loader.load_all(registry.descriptors)


def _print_report(result: LoadResult) -> None:
    table = Table(title="Catalog load")
    table.add_column("Category", style="cyan")
    table.add_column("Health")
    table.add_column("Items", justify="right")
    table.add_column("Source / error", style="dim")

    for key, report in result.reports.items():
        color = HEALTH_STYLES[report.health]
        detail = report.error or report.source or "built-in defaults"
        table.add_row(
            key,
            f"[{color}]{report.health.value}[/{color}]",
            str(report.item_count),
            detail,
        )
    console.print(table)
    color = HEALTH_STYLES[result.health]
    console.print(f"[{color}]{result.status_line()}[/{color}]")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(), help="Settings YAML file")
@click.option("--categories", "categories_path", type=click.Path(), help="categories.yaml path")
@click.option(
    "--log-level",
    default="warning",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Log level",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, categories_path: str | None, log_level: str):
    """Brainstormer - spin category reels into a concept."""
    _configure_logging(log_level)
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = Settings.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    ctx.obj["categories_path"] = categories_path


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def categories(ctx: click.Context, as_json: bool):
    """List categories and their candidate sources, in fetch order."""
    registry = _load_registry(ctx)

    if as_json:
        click.echo(json.dumps([d.to_dict() for d in registry.descriptors], indent=2))
        return

    for descriptor in registry.descriptors:
        lines = "\n".join(
            f"{i}. {location}" for i, location in enumerate(descriptor.source_files, 1)
        )
        console.print(
            Panel(lines, title=f"[bold]{descriptor.title}[/bold] ({descriptor.key})")
        )


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def load(ctx: click.Context, as_json: bool):
    """Fetch every category and report which source was used."""
    registry = _load_registry(ctx)
    result = asyncio.run(_load_all(registry, ctx.obj["settings"]))

    if as_json:
        payload = {
            "health": result.health.value,
            "reports": [r.to_dict() for r in result.reports.values()],
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        _print_report(result)

    if result.health == LoadHealth.FAILED:
        sys.exit(1)


def _parse_speed(settings: Settings, speed: str) -> float:
    """Preset name or a plain number."""
    if speed in settings.speed_presets:
        return settings.speed(speed)
    try:
        return float(speed)
    except ValueError:
        return settings.speed(speed)  # raises with the list of presets


async def _spin_and_commit(
    registry: CategoryRegistry,
    settings: Settings,
    speed: float,
    seconds: float,
    seed: int | None,
) -> tuple[LoadResult, dict[str, Item]]:
    result = await _load_all(registry, settings)
    scheduler = AsyncioFrameScheduler(settings.frame_interval)
    ensemble = Ensemble.from_load_result(
        result,
        registry.descriptors,
        scheduler,
        settings,
        rng=random.Random(seed),
    )
    ensemble.reroll(speed)
    await asyncio.sleep(seconds)
    ensemble.stop_all()
    ensemble.lock_all()
    return result, ensemble.commit_picks()


@cli.command()
@click.option(
    "--speed",
    "-s",
    default="spin",
    help="Speed preset (slow/spin/fast) or a positive number",
)
@click.option("--seconds", default=1.5, type=float, help="How long the reels spin")
@click.option("--seed", type=int, default=None, help="Seed for starting positions")
@click.option("--json", "as_json", is_flag=True, help="Output the Pick-set as JSON")
@click.pass_context
def spin(ctx: click.Context, speed: str, seconds: float, seed: int | None, as_json: bool):
    """Spin every reel headlessly, lock, and print the Pick-set."""
    settings: Settings = ctx.obj["settings"]
    registry = _load_registry(ctx)

    try:
        speed_value = _parse_speed(settings, speed)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    if speed_value <= 0:
        console.print("[red]Error: speed must be positive[/red]")
        sys.exit(1)

    result, picks = asyncio.run(
        _spin_and_commit(registry, settings, speed_value, seconds, seed)
    )

    if as_json:
        click.echo(
            json.dumps(
                {key: item.to_dict() for key, item in picks.items()},
                indent=2,
                ensure_ascii=False,
            )
        )
        return

    if result.health != LoadHealth.OK:
        color = HEALTH_STYLES[result.health]
        console.print(f"[{color}]{result.status_line()}[/{color}]")

    table = Table(title="Pick-set")
    table.add_column("Category", style="cyan")
    table.add_column("Pick", style="bold")
    table.add_column("Description", style="dim")
    for key, item in picks.items():
        descriptor = registry.get(key)
        table.add_row(descriptor.title if descriptor else key, item.label, item.description or "")
    console.print(table)


@cli.command()
@click.argument("category")
@click.option("--bucket", "-b", default="A-E", help="Letter bucket (A-E ... U-Z, ALL)")
@click.option("--page", "-p", default=1, help="Page number (1-based)")
@click.option("--size", default=10, help="Entries per page")
@click.pass_context
def directory(ctx: click.Context, category: str, bucket: str, page: int, size: int):
    """Browse one category alphabetically."""
    registry = _load_registry(ctx)
    descriptor = registry.get(category)
    if descriptor is None:
        console.print(f"[red]Error: unknown category '{category}'[/red]")
        console.print(f"[dim]Known categories: {', '.join(registry.categories)}[/dim]")
        sys.exit(1)

    try:
        bucket_name = resolve_bucket(bucket)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    result = asyncio.run(_load_all(_single(registry, descriptor.key), ctx.obj["settings"]))
    catalog = result.catalogs.get(descriptor.key)
    if catalog is None:
        console.print(f"[red]{result.status_line()}[/red]")
        sys.exit(1)

    buckets = bucket_by_initial(catalog)
    current = paginate(buckets[bucket_name], page - 1, size, bucket=bucket_name)

    for item in current.items:
        console.print(f"[bold]{item.label}[/bold]")
        if item.description:
            console.print(f"  [dim]{item.description}[/dim]")
    console.print(f"\n[cyan]{current.label}[/cyan]")


def _single(registry: CategoryRegistry, key: str) -> CategoryRegistry:
    return CategoryRegistry(
        categories={key: registry.categories[key]},
        mirrors=registry.mirrors,
        path=registry.path,
    )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
