"""Console and file logging.

Two outputs, kept apart:

- Human-facing lines go through a Rich console: a timestamp, a level tag, an
  optional icon and the message. The watch loop uses the helpers at the bottom
  of the console section rather than formatting its own lines.
- Machine-facing events go through structlog and land in the rotating JSON
  Lines file under the state directory. Nothing structlog emits reaches the
  terminal.
"""

from __future__ import annotations

import logging
import logging.handlers
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from rich.console import Console

if TYPE_CHECKING:
    from tab_shepherd.config import Config
    from tab_shepherd.models import AggregateReport, PerformanceScore

_console = Console(highlight=False)


class Icon:
    """Markup snippets placed between the level tag and the message."""

    OK = "[bold green]✓[/]"
    FAIL = "[bold red]✗[/]"
    WATCH = "👀"
    RETRY = "[yellow]↻[/]"
    SNAPSHOT = "[magenta]◆[/]"


# Escaped brackets so Rich prints the tag literally.
_TAGS = {
    "info": "[bright_blue]\\[info][/]",
    "warn": "[yellow]\\[warn][/]",
    "error": "[bold red]\\[err][/] ",
}

_TIER_COLORS = {
    "light": "green",
    "medium": "bright_yellow",
    "heavy": "bright_red",
}


# ─────────────────────────────────────────────────────────────────────────────
# Console
# ─────────────────────────────────────────────────────────────────────────────


def _emit(level: str, msg: str, icon: str) -> None:
    stamp = datetime.now().strftime("%H:%M:%S")
    parts = [f"[dim]{stamp}[/]", _TAGS.get(level, f"[{level}]")]
    if icon:
        parts.append(icon)
    parts.append(msg)
    _console.print(" ".join(parts))


def info(msg: str, icon: str = "") -> None:
    _emit("info", msg, icon)


def warn(msg: str, icon: str = "") -> None:
    _emit("warn", msg, icon)


def error(msg: str, icon: str = "") -> None:
    _emit("error", msg, icon)


def tier_color(tier: str) -> str:
    """Rich color for a performance tier; white for anything unknown."""
    return _TIER_COLORS.get(tier, "white")


def watch_started(path: str, interval: float) -> None:
    info(f"Watching [cyan]{path}[/] every {interval:g}s", Icon.WATCH)


def watch_stopped(scans: int) -> None:
    noun = "snapshot" if scans == 1 else "snapshots"
    info(f"Watch stopped after {scans} {noun}", Icon.OK)


def snapshot_received(report: AggregateReport, score: PerformanceScore) -> None:
    """One line per ingested snapshot: tier, loaded tabs, memory and cpu."""
    tier = f"[{tier_color(score.tier)}]{score.tier}[/]"
    tabs = f"[cyan]{report.loaded_tab_count}/{report.total_tab_count}[/] loaded"
    memory = f"{report.total_memory_mb:.0f}MB ({report.memory_load_percent:.0f}%)"
    cpu = f"cpu {report.average_cpu_percent:.1f}%"
    info(f"{tier} {tabs}, {memory}, {cpu} [dim]{report.mode.value}[/]", Icon.SNAPSHOT)


def fetch_retry(attempt: int, delay: float, error_msg: str) -> None:
    warn(f"Fetch attempt {attempt} failed: {error_msg} [dim](retry in {delay:g}s)[/]", Icon.RETRY)


def fetch_gave_up(error_msg: str) -> None:
    error(f"Snapshot unavailable: {error_msg}", Icon.FAIL)


# ─────────────────────────────────────────────────────────────────────────────
# Structlog
# ─────────────────────────────────────────────────────────────────────────────


def _tag_source(source: str) -> structlog.types.Processor:
    def processor(
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> structlog.types.EventDict:
        event_dict.setdefault("source", source)
        return event_dict

    return processor


def _shared_processors(source: str) -> list[structlog.types.Processor]:
    """Processors applied to both structlog events and plain stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=False, key="ts"),
        structlog.processors.add_log_level,
        _tag_source(source),
    ]


def _json_file_handler(config: Config, source: str) -> logging.Handler:
    config.state_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        config.log_path,
        maxBytes=config.logging.log_max_bytes,
        backupCount=config.logging.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                *_shared_processors(source),
                structlog.processors.format_exc_info,
            ],
        )
    )
    return handler


def configure(config: Config, source: str = "cli") -> None:
    """Route structlog events to the rotating JSON Lines log file.

    Replaces any handlers already on the stdlib root logger, so calling it
    again (for instance with a different config) moves output to the new file.
    Events below INFO are dropped.

    Args:
        config: Supplies the state directory, log path and rotation limits
        source: Stored as the "source" field of every event
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_json_file_handler(config, source))
    root.setLevel(logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(source),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
