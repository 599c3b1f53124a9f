# src/tab_shepherd/resources.py
"""Resource aggregation over per-tab samples of mixed precision.

Reports are recomputed from a complete snapshot every time; nothing is
accumulated across snapshots, so a dropped or late delivery is corrected by
the next one.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from tab_shepherd.models import (
    AggregateReport,
    CategorizedTab,
    CategoryLoad,
    ResourceSample,
    ResourceSnapshot,
    SampleMode,
    Tab,
)

log = structlog.get_logger()

# Assumed total system memory used as the reference for memory load
DEFAULT_MEMORY_BASELINE_MB = 8192

# Per-sample impact thresholds, descending (score +3/+2/+1)
PRECISE_MEMORY_THRESHOLDS = (300, 150, 75)
HEURISTIC_MEMORY_THRESHOLDS = (200, 100, 50)
CPU_THRESHOLDS = (10, 5, 1)


def effective_memory(sample: ResourceSample) -> float:
    """Memory to count for a sample: measured for precise, estimated otherwise."""
    return sample.memory_mb


def effective_cpu(sample: ResourceSample) -> float:
    return sample.cpu_percent


def aggregate(
    samples: Sequence[ResourceSample],
    tabs: Sequence[Tab],
    memory_baseline_mb: float = DEFAULT_MEMORY_BASELINE_MB,
) -> AggregateReport:
    """Build the system-wide report for one snapshot.

    Totals cover sampled tabs only; tab counts come from the tab list, so a tab
    with no sample yet is counted as open but adds nothing to the totals.

    Args:
        samples: Latest sample per tab.
        tabs: Current tab list.
        memory_baseline_mb: Memory treated as 100% load.
    """
    loaded = sum(1 for t in tabs if t.is_loaded)
    if not samples:
        return AggregateReport.empty(loaded_tab_count=loaded, total_tab_count=len(tabs))

    total_memory = sum(effective_memory(s) for s in samples)
    total_cpu = sum(effective_cpu(s) for s in samples)
    any_precise = any(s.mode is SampleMode.PRECISE for s in samples)

    if memory_baseline_mb > 0:
        load = min(total_memory / memory_baseline_mb * 100, 100.0)
    else:
        load = 0.0

    return AggregateReport(
        total_memory_mb=total_memory,
        average_cpu_percent=total_cpu / len(samples),
        loaded_tab_count=loaded,
        total_tab_count=len(tabs),
        mode=SampleMode.PRECISE if any_precise else SampleMode.HEURISTIC,
        memory_load_percent=load,
    )


def category_loads(
    samples: Mapping[int, ResourceSample],
    categorized: Mapping[str, Sequence[CategorizedTab]],
) -> dict[str, CategoryLoad]:
    """Sum memory and CPU per category.

    Every category in categorized gets an entry, with zero totals when none of
    its tabs has a sample.
    """
    loads: dict[str, CategoryLoad] = {}
    for category, members in categorized.items():
        load = CategoryLoad(tab_count=len(members))
        for member in members:
            sample = samples.get(member.id)
            if sample is None:
                continue
            load.sampled_count += 1
            load.memory_mb += effective_memory(sample)
            load.cpu_percent += effective_cpu(sample)
        loads[category] = load
    return loads


def sample_impact(sample: ResourceSample, tab: Tab | None = None) -> str:
    """Classify one sample as light, medium or heavy.

    Memory thresholds are stricter for heuristic samples because estimates
    run low. Audible and active tabs get a small bump.
    """
    thresholds = (
        PRECISE_MEMORY_THRESHOLDS
        if sample.mode is SampleMode.PRECISE
        else HEURISTIC_MEMORY_THRESHOLDS
    )
    score = 0.0
    memory = effective_memory(sample)
    cpu = effective_cpu(sample)

    for points, limit in zip((3, 2, 1), thresholds):
        if memory > limit:
            score += points
            break
    for points, limit in zip((3, 2, 1), CPU_THRESHOLDS):
        if cpu > limit:
            score += points
            break

    if tab is not None:
        if tab.audible:
            score += 1
        if tab.active:
            score += 0.5

    if score >= 5:
        return "heavy"
    if score >= 3:
        return "medium"
    return "light"


def heavy_samples(
    samples: Sequence[ResourceSample],
    tabs: Sequence[Tab] = (),
    memory_mb: float = 100,
    cpu_percent: float = 5,
    fallback: int = 5,
) -> list[ResourceSample]:
    """Samples worth surfacing, highest memory first.

    A sample qualifies when its impact is heavy, it exceeds memory_mb or
    cpu_percent, or its tab is audible. If nothing qualifies, the top
    `fallback` samples by memory are returned instead.
    """
    by_id = {t.id: t for t in tabs}
    heavy = [
        s
        for s in samples
        if effective_memory(s) > memory_mb
        or effective_cpu(s) > cpu_percent
        or sample_impact(s, by_id.get(s.tab_id)) == "heavy"
        or (s.tab_id in by_id and by_id[s.tab_id].audible)
    ]
    ranked = heavy if heavy else list(samples)
    ranked.sort(key=effective_memory, reverse=True)
    return ranked if heavy else ranked[:fallback]


class ResourceAggregator:
    """Holds the latest resource snapshot and derives reports from it."""

    def __init__(self, memory_baseline_mb: float = DEFAULT_MEMORY_BASELINE_MB) -> None:
        self.memory_baseline_mb = memory_baseline_mb
        self._snapshot: ResourceSnapshot | None = None

    @property
    def snapshot(self) -> ResourceSnapshot | None:
        return self._snapshot

    def ingest(self, snapshot: ResourceSnapshot) -> bool:
        """Replace the held snapshot. Returns False if the delivery was stale.

        A snapshot stamped older than the one already held is ignored; equal or
        unstamped snapshots replace it.
        """
        current = self._snapshot
        if (
            current is not None
            and snapshot.last_update_ms
            and snapshot.last_update_ms < current.last_update_ms
        ):
            log.info(
                "snapshot_stale",
                received=snapshot.last_update_ms,
                held=current.last_update_ms,
            )
            return False
        self._snapshot = snapshot
        log.debug(
            "snapshot_ingested",
            scan=snapshot.scan_count,
            samples=len(snapshot.tab_resources),
        )
        return True

    def samples(self) -> Mapping[int, ResourceSample]:
        return self._snapshot.tab_resources if self._snapshot else {}

    def report(self, tabs: Sequence[Tab]) -> AggregateReport:
        return aggregate(list(self.samples().values()), tabs, self.memory_baseline_mb)

    def category_loads(
        self, categorized: Mapping[str, Sequence[CategorizedTab]]
    ) -> dict[str, CategoryLoad]:
        return category_loads(self.samples(), categorized)
