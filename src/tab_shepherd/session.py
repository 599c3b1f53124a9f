# src/tab_shepherd/session.py

"""Session object tying the core to the platform capabilities.

A session is built explicitly from a Config and the three capabilities
(tab source, access-time storage, snapshot monitor). It recomputes the tab
view on demand, keeps the latest resource report, and fans both out to
subscribed listeners.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from tab_shepherd import performance
from tab_shepherd.chaos import level_for
from tab_shepherd.classifier import TabClassifier, TabStatistics
from tab_shepherd.config import Config
from tab_shepherd.dedup import duplicate_groups, find_duplicates
from tab_shepherd.models import (
    AggregateReport,
    CategorizedTab,
    CategoryLoad,
    ChaosLevel,
    PerformanceScore,
    Recommendation,
    ResourceSample,
    ResourceSnapshot,
    Tab,
    coerce_tabs,
)
from tab_shepherd.platform import PlatformStorage, PlatformTabSource, SnapshotMonitor
from tab_shepherd.resources import ResourceAggregator, heavy_samples
from tab_shepherd.staleness import find_old_tabs

log = structlog.get_logger()

Listener = Callable[[str, Any], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TabView:
    """Everything derived from one tab list."""

    tabs: list[Tab]
    categorized: dict[str, list[CategorizedTab]]
    duplicate_ids: set[int]
    duplicate_groups: dict[str, list[int]]
    old_tab_ids: list[int]
    chaos_level: ChaosLevel
    heavy_tab_count: int
    loaded_tab_count: int
    score: PerformanceScore
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.tabs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "categories": {
                name: [t.to_dict() for t in members] for name, members in self.categorized.items()
            },
            "duplicates": sorted(self.duplicate_ids),
            "duplicateGroups": self.duplicate_groups,
            "oldTabs": self.old_tab_ids,
            "chaosLevel": self.chaos_level.to_dict(),
            "heavyTabCount": self.heavy_tab_count,
            "loadedTabCount": self.loaded_tab_count,
            "performance": {
                "tier": self.score.tier,
                "detail": self.score.detail,
                "emoji": self.score.emoji,
            },
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


class ShepherdSession:
    """Derived tab and resource views over injected platform capabilities."""

    def __init__(
        self,
        config: Config,
        tab_source: PlatformTabSource,
        storage: PlatformStorage,
        monitor: SnapshotMonitor | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.config = config
        self.tab_source = tab_source
        self.storage = storage
        self.monitor = monitor
        self.classifier = TabClassifier(config.categories)
        self.thresholds = config.performance.thresholds()
        self.aggregator = ResourceAggregator(config.resources.memory_baseline_mb)
        self._clock = clock
        self._listeners: list[Listener] = []
        self._view: TabView | None = None
        self._report: AggregateReport | None = None
        self._shutdown_event = asyncio.Event()

    @property
    def view(self) -> TabView | None:
        return self._view

    @property
    def report(self) -> AggregateReport | None:
        return self._report

    # ─────────────────────────────────────────────────────────────────────
    # Observers
    # ─────────────────────────────────────────────────────────────────────

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it.

        Listeners are called as callback(kind, payload) with kind "tabs"
        (payload TabView) or "resources" (payload AggregateReport).
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, kind: str, payload: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(kind, payload)
            except Exception:
                log.exception("listener_failed", kind=kind)

    # ─────────────────────────────────────────────────────────────────────
    # Views
    # ─────────────────────────────────────────────────────────────────────

    def refresh(self) -> TabView:
        """Recompute the tab view from the current tab list."""
        tabs = coerce_tabs(list(self.tab_source.query_tabs()))
        heavy = performance.heavy_tab_count(tabs, self.thresholds.heavy_domains)
        loaded = performance.loaded_tab_count(tabs)
        ratio = performance.loaded_ratio(tabs)

        view = TabView(
            tabs=tabs,
            categorized=self.classifier.classify_all(tabs),
            duplicate_ids=find_duplicates(tabs),
            duplicate_groups=duplicate_groups(tabs),
            old_tab_ids=find_old_tabs(
                tabs,
                self.storage.access_times(),
                self.config.old_tabs.threshold_days,
                self._clock(),
            ),
            chaos_level=level_for(len(tabs), self.config.chaos_levels),
            heavy_tab_count=heavy,
            loaded_tab_count=loaded,
            score=performance.score(len(tabs), heavy, ratio, self.thresholds),
            recommendations=performance.recommendations(len(tabs), heavy, loaded, self.thresholds),
        )
        self._view = view
        log.debug(
            "tabs_refreshed",
            total=view.total,
            duplicates=len(view.duplicate_ids),
            old=len(view.old_tab_ids),
            tier=view.score.tier,
        )
        self._notify("tabs", view)
        return view

    def statistics(self) -> TabStatistics:
        tabs = self._view.tabs if self._view else coerce_tabs(list(self.tab_source.query_tabs()))
        return self.classifier.statistics(tabs, self.config.chaos_levels)

    def ingest(self, snapshot: ResourceSnapshot) -> AggregateReport:
        """Take a new snapshot and return the report for the current tabs.

        A stale snapshot is dropped and the current report is returned
        without notifying listeners.
        """
        view = self._view or self.refresh()
        accepted = self.aggregator.ingest(snapshot)
        if not accepted and self._report is not None:
            return self._report

        report = self.aggregator.report(view.tabs)
        self._report = report
        self._notify("resources", report)
        return report

    def heavy_tabs(self) -> list[ResourceSample]:
        """Samples worth surfacing in a detailed view."""
        res = self.config.resources
        tabs = self._view.tabs if self._view else []
        return heavy_samples(
            list(self.aggregator.samples().values()),
            tabs,
            memory_mb=res.heavy_tab_memory_mb,
            cpu_percent=res.heavy_tab_cpu_percent,
            fallback=res.top_tabs_fallback,
        )

    def category_loads(self) -> dict[str, CategoryLoad]:
        view = self._view or self.refresh()
        return self.aggregator.category_loads(view.categorized)

    # ─────────────────────────────────────────────────────────────────────
    # Polling
    # ─────────────────────────────────────────────────────────────────────

    def stop(self) -> None:
        """Ask a running poll() to return after its current cycle."""
        self._shutdown_event.set()

    async def poll(self, count: int | None = None) -> int:
        """Fetch, ingest and notify every scan_interval seconds.

        Runs until stop() is called or `count` cycles have completed. A failed
        fetch, or a tab list that cannot be read, is logged and leaves the
        previous view and report current.

        Returns:
            Number of snapshots ingested.
        """
        if self.monitor is None:
            raise RuntimeError("poll() needs a snapshot monitor")

        interval = self.config.monitor.scan_interval
        cycles = 0
        ingested = 0
        self._shutdown_event.clear()
        log.info("poll_started", interval=interval, count=count)

        while not self._shutdown_event.is_set():
            result = await self.monitor.fetch_snapshot()
            if result.ok and result.snapshot is not None:
                try:
                    self.refresh()
                except (OSError, ValueError, TypeError) as e:
                    # Tab list unreadable this cycle (e.g. file mid-rewrite)
                    log.warning("tabs_unavailable", error=str(e))
                else:
                    self.ingest(result.snapshot)
                    ingested += 1
            else:
                log.warning("snapshot_unavailable", error=result.error)

            cycles += 1
            if count is not None and cycles >= count:
                break
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=interval)
            except TimeoutError:
                pass  # Normal timeout, next cycle

        log.info("poll_stopped", cycles=cycles, ingested=ingested)
        return ingested
