"""CLI commands for tab-shepherd."""

from pathlib import Path

import click

_json_file = click.Path(exists=True, dir_okay=False, path_type=Path)


def _load_config():
    """Load config and wire file logging; config errors become a usage error."""
    from tab_shepherd.config import Config
    from tab_shepherd.logging import configure

    try:
        config = Config.load()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    configure(config)
    return config


def _load_tabs(path: Path):
    import json

    from tab_shepherd.models import InvalidInputError
    from tab_shepherd.platform import JsonFileTabSource

    try:
        return JsonFileTabSource(path).query_tabs()
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}") from e
    except InvalidInputError as e:
        raise click.ClickException(f"{path}: {e}") from e


def _load_snapshot(path: Path):
    import json

    from tab_shepherd.models import InvalidInputError, ResourceSnapshot
    from tab_shepherd.platform import load_json

    try:
        return ResourceSnapshot.from_dict(load_json(path))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}") from e
    except InvalidInputError as e:
        raise click.ClickException(f"{path}: {e}") from e


@click.group()
@click.version_option()
def main() -> None:
    """Keep browser tabs categorized, deduplicated and under control."""
    pass


@main.command()
@click.argument("tabs_json", type=_json_file)
@click.option("--format", "-f", "fmt", type=click.Choice(["table", "json"]), default="table")
def classify(tabs_json: Path, fmt: str) -> None:
    """Group tabs by category, marking duplicates."""
    import json

    from tab_shepherd.classifier import TabClassifier
    from tab_shepherd.formatting import truncate
    from tab_shepherd.rules import category_icon

    config = _load_config()
    tabs = _load_tabs(tabs_json)
    grouped = TabClassifier(config.categories).classify_all(tabs)

    if fmt == "json":
        data = {name: [t.to_dict() for t in members] for name, members in grouped.items()}
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    if not grouped:
        click.echo("No tabs.")
        return
    for name, members in grouped.items():
        click.echo(f"{category_icon(name, config.categories)} {name} ({len(members)})")
        for member in members:
            marker = " [dup]" if member.is_duplicate else ""
            click.echo(f"  {member.id:>6}  {truncate(member.tab.title, 60)}{marker}")


@main.command()
@click.argument("tabs_json", type=_json_file)
def duplicates(tabs_json: Path) -> None:
    """List tabs that share a normalized URL."""
    from tab_shepherd.dedup import duplicate_groups, unique_tabs

    _load_config()
    tabs = _load_tabs(tabs_json)
    groups = duplicate_groups(tabs)
    if not groups:
        click.echo("No duplicate tabs.")
        return

    total = sum(len(ids) for ids in groups.values())
    click.echo(f"{total} duplicate tabs in {len(groups)} groups")
    for url, ids in groups.items():
        click.echo(f"  {url}: {', '.join(str(i) for i in ids)}")
    click.echo(f"Closing extra copies leaves {len(unique_tabs(tabs))} of {len(tabs)} tabs")


@main.command()
@click.argument("tabs_json", type=_json_file)
@click.argument("access_json", type=_json_file)
@click.option("--days", "-d", type=float, default=None, help="Override old-tab threshold")
@click.option("--now", "now_ms", type=int, default=None, help="Current time in epoch ms")
def old(tabs_json: Path, access_json: Path, days: float | None, now_ms: int | None) -> None:
    """List tabs not accessed for a number of days."""
    import time

    from tab_shepherd.formatting import format_tab_age, truncate
    from tab_shepherd.platform import load_json
    from tab_shepherd.staleness import AccessTimeStore, find_old_tabs

    config = _load_config()
    tabs = _load_tabs(tabs_json)

    raw = load_json(access_json)
    if not isinstance(raw, dict):
        raise click.ClickException(f"{access_json} must map tab ids to timestamps")
    try:
        store = AccessTimeStore({int(k): int(v) for k, v in raw.items()})
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"{access_json}: {e}") from e

    threshold = days if days is not None else config.old_tabs.threshold_days
    now = now_ms if now_ms is not None else int(time.time() * 1000)
    old_ids = find_old_tabs(tabs, store.access_times(), threshold, now)

    if not old_ids:
        click.echo(f"No tabs older than {threshold:g} days.")
        return

    by_id = {t.id: t for t in tabs}
    click.echo(f"{len(old_ids)} tabs older than {threshold:g} days")
    for tab_id in old_ids:
        age = format_tab_age(store.get(tab_id), now_ms=now)
        click.echo(f"  {tab_id:>6}  {age:<14} {truncate(by_id[tab_id].title, 50)}")


@main.command()
@click.argument("tabs_json", type=_json_file)
@click.option("--snapshot", "-s", "snapshot_json", type=_json_file, default=None)
@click.option("--format", "-f", "fmt", type=click.Choice(["table", "json"]), default="table")
def report(tabs_json: Path, snapshot_json: Path | None, fmt: str) -> None:
    """Show chaos level, performance tier and recommendations."""
    import json

    from tab_shepherd.formatting import display_domain, format_memory, truncate
    from tab_shepherd.performance import has_optimizations, optimization_count
    from tab_shepherd.platform import StaticTabSource, host_system_snapshot
    from tab_shepherd.session import ShepherdSession
    from tab_shepherd.staleness import AccessTimeStore

    config = _load_config()
    session = ShepherdSession(config, StaticTabSource(_load_tabs(tabs_json)), AccessTimeStore())
    view = session.refresh()
    optimizable = (
        optimization_count(view.total, view.heavy_tab_count)
        if has_optimizations(view.total, view.heavy_tab_count)
        else 0
    )

    aggregate = None
    system = None
    heavy = []
    loads = {}
    if snapshot_json is not None:
        snapshot = _load_snapshot(snapshot_json)
        aggregate = session.ingest(snapshot)
        system = snapshot.system if snapshot.system.total_memory_mb else host_system_snapshot()
        heavy = session.heavy_tabs()
        loads = {
            name: load for name, load in session.category_loads().items() if load.sampled_count
        }

    if fmt == "json":
        data = view.to_dict()
        data["optimizableTabs"] = optimizable
        data["resources"] = aggregate.to_dict() if aggregate else None
        data["system"] = system.to_dict() if system else None
        data["heavyTabs"] = [s.to_dict() for s in heavy]
        data["categoryLoads"] = {name: load.to_dict() for name, load in loads.items()}
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    level = view.chaos_level
    click.echo(f"Tabs: {view.total} ({view.loaded_tab_count} loaded, {view.heavy_tab_count} heavy)")
    click.echo(f"Chaos level: {level.name} ({level.percentage}%) - {level.message}")
    click.echo(f"Performance: {view.score.emoji} {view.score.tier} - {view.score.detail}")
    click.echo(f"Duplicates: {len(view.duplicate_ids)}")
    if optimizable:
        click.echo(f"Optimize: about {optimizable} tabs could be closed or suspended")

    if aggregate is not None:
        click.echo()
        memory = format_memory(aggregate.total_memory_mb)
        click.echo(
            f"Memory: {memory} ({aggregate.memory_load_percent:.0f}% load, {aggregate.mode.value})"
        )
        click.echo(f"Average CPU: {aggregate.average_cpu_percent:.1f}%")
        if system is not None and system.total_memory_mb:
            click.echo(
                f"System: {format_memory(system.available_mb)} free of "
                f"{format_memory(system.total_memory_mb)} ({system.used_percent:.0f}% used)"
            )

        if heavy:
            by_id = {t.id: t for t in view.tabs}
            click.echo()
            click.echo("Heavy tabs:")
            for sample in heavy:
                tab = by_id.get(sample.tab_id)
                where = display_domain(tab.url) if tab else "Unknown"
                title = truncate(tab.title, 40) if tab else ""
                click.echo(
                    f"  {format_memory(sample.memory_mb):>7} {sample.cpu_percent:5.1f}%  "
                    f"{where}  {title}"
                )

        if loads:
            click.echo()
            click.echo("By category:")
            for name, load in loads.items():
                click.echo(
                    f"  {name}: {format_memory(load.memory_mb)} "
                    f"({load.sampled_count}/{load.tab_count} tabs sampled)"
                )

    click.echo()
    click.echo("Recommendations:")
    for rec in view.recommendations:
        click.echo(f"  {rec.icon} [{rec.priority}] {rec.text}")


@main.command()
@click.argument("tabs_json", type=_json_file)
@click.argument("snapshot_json", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--interval", "-i", type=float, default=None, help="Seconds between fetches")
@click.option("--count", "-n", type=int, default=None, help="Stop after N fetches")
def watch(tabs_json: Path, snapshot_json: Path, interval: float | None, count: int | None) -> None:
    """Poll a snapshot file and print a report for each delivery."""
    import asyncio

    from tab_shepherd import logging as console
    from tab_shepherd.platform import JsonFileMonitor, JsonFileTabSource, RetryingMonitor
    from tab_shepherd.session import ShepherdSession
    from tab_shepherd.staleness import AccessTimeStore

    config = _load_config()
    if interval is not None:
        if interval <= 0:
            raise click.BadParameter("must be > 0", param_hint="--interval")
        config.monitor.scan_interval = interval

    mon = config.monitor
    monitor = RetryingMonitor(
        JsonFileMonitor(snapshot_json),
        initial_delay=mon.retry_initial_delay,
        max_delay=mon.retry_max_delay,
        multiplier=mon.retry_multiplier,
        max_attempts=mon.max_attempts,
        timeout=mon.fetch_timeout,
        on_retry=console.fetch_retry,
        on_give_up=console.fetch_gave_up,
    )
    session = ShepherdSession(config, JsonFileTabSource(tabs_json), AccessTimeStore(), monitor)

    def on_event(kind: str, payload) -> None:
        if kind == "resources" and session.view is not None:
            console.snapshot_received(payload, session.view.score)

    session.subscribe(on_event)
    console.watch_started(str(snapshot_json), mon.scan_interval)

    try:
        ingested = asyncio.run(session.poll(count=count))
    except KeyboardInterrupt:
        ingested = 0
    console.watch_stopped(ingested)


@main.command()
def levels() -> None:
    """Show the chaos level table."""
    config = _load_config()
    for level in config.chaos_levels:
        upper = "+" if level.range_max is None else f"-{level.range_max}"
        click.echo(f"{level.name:<12} {level.range_min}{upper:<5} {level.message}")


@main.group()
def config() -> None:
    """Manage configuration."""
    pass


@config.command("show")
def config_show() -> None:
    """Display current configuration."""
    from tab_shepherd.config import Config

    try:
        cfg = Config.load()
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Config file: {cfg.config_path}")
    click.echo(f"Exists: {cfg.config_path.exists()}")
    click.echo()
    click.echo("[performance]")
    click.echo(f"  heavy_total_tabs = {cfg.performance.heavy_total_tabs}")
    click.echo(f"  heavy_heavy_tabs = {cfg.performance.heavy_heavy_tabs}")
    click.echo(f"  medium_total_tabs = {cfg.performance.medium_total_tabs}")
    click.echo(f"  medium_heavy_tabs = {cfg.performance.medium_heavy_tabs}")
    click.echo(f"  medium_loaded_ratio = {cfg.performance.medium_loaded_ratio}")
    click.echo(f"  heavy_domains = {len(cfg.performance.heavy_domains)} domains")
    click.echo()
    click.echo("[resources]")
    click.echo(f"  memory_baseline_mb = {cfg.resources.memory_baseline_mb}")
    click.echo()
    click.echo("[old_tabs]")
    click.echo(f"  threshold_days = {cfg.old_tabs.threshold_days}")
    click.echo()
    click.echo("[monitor]")
    click.echo(f"  scan_interval = {cfg.monitor.scan_interval}")
    click.echo(f"  max_attempts = {cfg.monitor.max_attempts}")
    click.echo()
    click.echo(f"Categories: {len(cfg.categories)}, chaos levels: {len(cfg.chaos_levels)}")


@config.command("reset")
@click.confirmation_option(prompt="Reset config to defaults?")
def config_reset() -> None:
    """Reset configuration to defaults."""
    from tab_shepherd.config import Config

    cfg = Config()
    cfg.save()
    click.echo(f"Config reset to defaults at {cfg.config_path}")
