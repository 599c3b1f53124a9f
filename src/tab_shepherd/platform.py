# src/tab_shepherd/platform.py

"""Capabilities supplied by the hosting platform.

The core never talks to a browser directly. It is handed a tab source, an
access-time store and a snapshot monitor; this module defines those
interfaces plus file-backed and static implementations used by the CLI and
tests.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import psutil
import structlog

from tab_shepherd.models import ResourceSnapshot, SystemSnapshot, Tab, coerce_tabs

log = structlog.get_logger()


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one snapshot fetch. Exactly one of snapshot/error is set."""

    ok: bool
    snapshot: ResourceSnapshot | None = None
    error: str | None = None

    @classmethod
    def success(cls, snapshot: ResourceSnapshot) -> FetchResult:
        return cls(ok=True, snapshot=snapshot)

    @classmethod
    def failure(cls, error: str) -> FetchResult:
        return cls(ok=False, error=error)


class PlatformTabSource(Protocol):
    def query_tabs(self) -> Sequence[Tab]: ...


class PlatformStorage(Protocol):
    def access_times(self) -> Mapping[int, int]: ...


class SnapshotMonitor(Protocol):
    async def fetch_snapshot(self) -> FetchResult: ...


# ─────────────────────────────────────────────────────────────────────────────
# Tab sources
# ─────────────────────────────────────────────────────────────────────────────


class StaticTabSource:
    """Tab source over a fixed list, replaceable with set_tabs()."""

    def __init__(self, tabs: Sequence[Tab] = ()) -> None:
        self._tabs = list(tabs)

    def set_tabs(self, tabs: Sequence[Tab]) -> None:
        self._tabs = list(tabs)

    def query_tabs(self) -> list[Tab]:
        return list(self._tabs)


def load_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class JsonFileTabSource:
    """Reads the tab list from a JSON file on every query.

    The file holds either a list of tab records or {"tabs": [...]}.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def query_tabs(self) -> list[Tab]:
        data = load_json(self.path)
        if isinstance(data, Mapping):
            data = data.get("tabs", [])
        return coerce_tabs(data)


# ─────────────────────────────────────────────────────────────────────────────
# Snapshot monitors
# ─────────────────────────────────────────────────────────────────────────────


class JsonFileMonitor:
    """Snapshot monitor backed by a JSON file rewritten by an external sampler."""

    def __init__(self, path: Path) -> None:
        self.path = path

    async def fetch_snapshot(self) -> FetchResult:
        try:
            data = await asyncio.to_thread(load_json, self.path)
        except FileNotFoundError:
            return FetchResult.failure(f"Snapshot file not found: {self.path}")
        except (OSError, ValueError) as e:
            # ValueError covers bad JSON and undecodable bytes
            return FetchResult.failure(f"Cannot read snapshot {self.path}: {e}")
        try:
            snapshot = ResourceSnapshot.from_dict(data)
        except (TypeError, ValueError, OverflowError) as e:
            return FetchResult.failure(f"Malformed snapshot {self.path}: {e}")
        return FetchResult.success(snapshot)


class RetryingMonitor:
    """Wraps a monitor with a per-attempt timeout and exponential backoff.

    Delays grow from initial_delay by multiplier up to max_delay. After
    max_attempts failed attempts the last failure is returned. on_retry and
    on_give_up let a caller surface progress without owning the retry loop.
    """

    def __init__(
        self,
        inner: SnapshotMonitor,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        multiplier: float = 2.0,
        max_attempts: int = 3,
        timeout: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_retry: Callable[[int, float, str], None] | None = None,
        on_give_up: Callable[[str], None] | None = None,
    ) -> None:
        self.inner = inner
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.max_attempts = max(max_attempts, 1)
        self.timeout = timeout
        self._sleep = sleep
        self.on_retry = on_retry
        self.on_give_up = on_give_up

    async def _attempt(self) -> FetchResult:
        try:
            return await asyncio.wait_for(self.inner.fetch_snapshot(), timeout=self.timeout)
        except TimeoutError:
            return FetchResult.failure(f"Snapshot fetch timed out after {self.timeout:.1f}s")

    async def fetch_snapshot(self) -> FetchResult:
        delay = self.initial_delay
        result = FetchResult.failure("No attempt made")
        for attempt in range(1, self.max_attempts + 1):
            result = await self._attempt()
            if result.ok:
                if attempt > 1:
                    log.info("snapshot_fetch_recovered", attempt=attempt)
                return result

            log.warning(
                "snapshot_fetch_failed",
                attempt=attempt,
                max_attempts=self.max_attempts,
                error=result.error,
            )
            if attempt == self.max_attempts:
                break
            if self.on_retry is not None:
                self.on_retry(attempt, delay, result.error or "")
            await self._sleep(delay)
            delay = min(delay * self.multiplier, self.max_delay)

        if self.on_give_up is not None:
            self.on_give_up(result.error or "unknown error")
        return result


def host_system_snapshot() -> SystemSnapshot:
    """Read system memory figures for the local machine."""
    mem = psutil.virtual_memory()
    mb = 1024 * 1024
    return SystemSnapshot(
        total_memory_mb=mem.total / mb,
        used_percent=mem.percent,
        available_mb=mem.available / mb,
    )
