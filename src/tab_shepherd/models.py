"""Data schema for tabs, rules, resource samples and derived reports.

All records are plain dataclasses. Records that come from the platform
(tabs, samples, snapshots) are frozen: this package reads them and derives
new records, it never mutates its inputs.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse


class InvalidInputError(TypeError):
    """Input violates the basic shape contract (e.g. a non-list tab list)."""


class TabStatus(str, Enum):
    LOADING = "loading"
    COMPLETE = "complete"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "TabStatus":
        """Map a platform status string to a TabStatus, defaulting to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class SampleMode(str, Enum):
    """How a resource sample was obtained."""

    PRECISE = "precise"  # Measured by the platform process API
    HEURISTIC = "heuristic"  # Estimated by the monitor's fallback model


# ─────────────────────────────────────────────────────────────────────────────
# Tabs
# ─────────────────────────────────────────────────────────────────────────────


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Tab:
    """One open browser tab as reported by the platform."""

    id: int
    url: str = ""
    title: str = ""
    window_id: int = 0
    active: bool = False
    discarded: bool = False
    status: TabStatus = TabStatus.UNKNOWN
    favicon: str | None = None
    audible: bool = False

    @property
    def hostname(self) -> str | None:
        """Lower-cased hostname of the tab URL, or None when it has none."""
        try:
            return urlparse(self.url).hostname
        except ValueError:
            return None

    @property
    def is_loaded(self) -> bool:
        """A tab is loaded when it is neither discarded nor still loading."""
        return not self.discarded and self.status is not TabStatus.LOADING

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the platform's field names."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "windowId": self.window_id,
            "active": self.active,
            "discarded": self.discarded,
            "status": self.status.value,
            "favIconUrl": self.favicon,
            "audible": self.audible,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Tab":
        """Build a Tab from a platform tab record.

        Missing, null or non-string url/title become empty strings so that
        classification can treat them uniformly.

        Raises:
            InvalidInputError: If data is not a mapping or has no integer id.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Tab record must be a mapping, got {type(data).__name__}")
        tab_id = data.get("id")
        if isinstance(tab_id, bool) or not isinstance(tab_id, int):
            raise InvalidInputError(f"Tab record needs an integer id, got {tab_id!r}")
        return cls(
            id=tab_id,
            url=_text(data.get("url")),
            title=_text(data.get("title")),
            window_id=data.get("windowId", data.get("window_id", 0)) or 0,
            active=bool(data.get("active", False)),
            discarded=bool(data.get("discarded", False)),
            status=TabStatus.parse(data.get("status")),
            favicon=data.get("favIconUrl", data.get("favicon")),
            audible=bool(data.get("audible", False)),
        )


def coerce_tabs(tabs: object) -> list[Tab]:
    """Return tabs as a list of Tab, accepting Tab objects or platform dicts.

    Raises:
        InvalidInputError: If tabs is not a list/tuple, or an element is neither
            a Tab nor a mapping.
    """
    if not isinstance(tabs, (list, tuple)):
        raise InvalidInputError(f"Expected a list of tabs, got {type(tabs).__name__}")
    return [t if isinstance(t, Tab) else Tab.from_dict(t) for t in tabs]


@dataclass(frozen=True)
class CategoryRule:
    """One entry of the ordered category table."""

    name: str
    icon: str
    color: str
    keywords: tuple[str, ...] = ()
    patterns: tuple[re.Pattern[str], ...] = ()

    def matches(self, url: str, title: str) -> bool:
        """True if any keyword is a substring of url/title, or any pattern matches.

        Keyword matching is case-insensitive; url and title are lower-cased here.
        """
        url = url.lower()
        title = title.lower()
        for keyword in self.keywords:
            kw = keyword.lower()
            if kw in url or kw in title:
                return True
        return any(p.search(url) or p.search(title) for p in self.patterns)


@dataclass(frozen=True)
class CategorizedTab:
    """A tab annotated with its category and duplicate flag."""

    tab: Tab
    category: str
    is_duplicate: bool

    @property
    def id(self) -> int:
        return self.tab.id

    def to_dict(self) -> dict[str, Any]:
        data = self.tab.to_dict()
        data["category"] = self.category
        data["isDuplicate"] = self.is_duplicate
        return data


@dataclass(frozen=True)
class ChaosLevel:
    """Severity tier for a total open-tab count. range_max None means unbounded."""

    name: str
    range_min: int
    range_max: int | None
    message: str
    color: str
    percentage: int

    def contains(self, count: int) -> bool:
        if count < self.range_min:
            return False
        return self.range_max is None or count <= self.range_max

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "range": [self.range_min, self.range_max],
            "message": self.message,
            "color": self.color,
            "percentage": self.percentage,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Resources
# ─────────────────────────────────────────────────────────────────────────────


def _non_negative(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


@dataclass(frozen=True)
class ResourceSample:
    """Most recent resource reading for one tab.

    memory_mb/cpu_percent hold the measured values for precise samples and the
    monitor's estimates for heuristic ones.
    """

    tab_id: int
    mode: SampleMode
    memory_mb: float
    cpu_percent: float
    timestamp_ms: int = 0

    @classmethod
    def from_dict(cls, tab_id: int, data: Mapping[str, Any]) -> "ResourceSample":
        """Build a sample from a monitor record.

        Accepts both the flat shape ({"mode", "memoryMB", ...}) and the nested
        shape where values live under "resources". Precise samples read
        memoryMB/cpuPercent, heuristic ones memoryEstimateMB/cpuEstimatePercent;
        either falls back to the other field name when its own is absent.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Sample for tab {tab_id} must be a mapping")
        resources = data.get("resources")
        values: Mapping[str, Any] = resources if isinstance(resources, Mapping) else data
        mode = SampleMode.PRECISE if data.get("mode") == "precise" else SampleMode.HEURISTIC

        if mode is SampleMode.PRECISE:
            memory = values.get("memoryMB", values.get("memoryEstimateMB"))
            cpu = values.get("cpuPercent", values.get("cpuEstimatePercent"))
        else:
            memory = values.get("memoryEstimateMB", values.get("memoryMB"))
            cpu = values.get("cpuEstimatePercent", values.get("cpuPercent"))

        timestamp = data.get("timestampMs", data.get("scanTime", data.get("timestamp", 0)))
        return cls(
            tab_id=tab_id,
            mode=mode,
            memory_mb=_non_negative(memory),
            cpu_percent=_non_negative(cpu),
            timestamp_ms=int(_non_negative(timestamp)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tabId": self.tab_id,
            "mode": self.mode.value,
            "memoryMB": self.memory_mb,
            "cpuPercent": self.cpu_percent,
            "timestampMs": self.timestamp_ms,
        }


@dataclass(frozen=True)
class SystemSnapshot:
    """System memory figures supplied by the monitor."""

    total_memory_mb: float = 0.0
    used_percent: float = 0.0
    available_mb: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "SystemSnapshot":
        """Read either the flat shape or the platform's {"memory": {...}} block."""
        if not isinstance(data, Mapping):
            return cls()
        memory = data.get("memory")
        values: Mapping[str, Any] = memory if isinstance(memory, Mapping) else data
        return cls(
            total_memory_mb=_non_negative(values.get("totalMemoryMB", values.get("totalMB"))),
            used_percent=_non_negative(values.get("usedPercent")),
            available_mb=_non_negative(values.get("availableMB")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalMemoryMB": self.total_memory_mb,
            "usedPercent": self.used_percent,
            "availableMB": self.available_mb,
        }


@dataclass(frozen=True)
class ResourceSnapshot:
    """One complete delivery from the resource monitor."""

    tab_resources: Mapping[int, ResourceSample] = field(default_factory=dict)
    system: SystemSnapshot = field(default_factory=SystemSnapshot)
    last_update_ms: int = 0
    scan_count: int = 0

    @property
    def samples(self) -> list[ResourceSample]:
        return list(self.tab_resources.values())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResourceSnapshot":
        """Build a snapshot from the monitor's JSON shape.

        Tab ids arrive as object keys (strings); keys that are not integers are
        skipped. A later record for the same tab id replaces an earlier one.

        Raises:
            InvalidInputError: If data or its tabResources block is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError(f"Snapshot must be a mapping, got {type(data).__name__}")
        raw = data.get("tabResources") or {}
        if not isinstance(raw, Mapping):
            raise InvalidInputError("Snapshot tabResources must be a mapping")

        tab_resources: dict[int, ResourceSample] = {}
        for key, record in raw.items():
            try:
                tab_id = int(key)
            except (TypeError, ValueError):
                continue
            tab_resources[tab_id] = ResourceSample.from_dict(tab_id, record)

        return cls(
            tab_resources=tab_resources,
            system=SystemSnapshot.from_dict(data.get("systemResources")),
            last_update_ms=int(_non_negative(data.get("lastUpdate", data.get("lastUpdateMs")))),
            scan_count=int(_non_negative(data.get("scanCount"))),
        )


@dataclass(frozen=True)
class AggregateReport:
    """System-wide load indicators derived from one snapshot."""

    total_memory_mb: float
    average_cpu_percent: float
    loaded_tab_count: int
    total_tab_count: int
    mode: SampleMode
    memory_load_percent: float

    @classmethod
    def empty(cls, loaded_tab_count: int = 0, total_tab_count: int = 0) -> "AggregateReport":
        return cls(
            total_memory_mb=0.0,
            average_cpu_percent=0.0,
            loaded_tab_count=loaded_tab_count,
            total_tab_count=total_tab_count,
            mode=SampleMode.HEURISTIC,
            memory_load_percent=0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalMemoryMB": self.total_memory_mb,
            "averageCpuPercent": self.average_cpu_percent,
            "loadedTabCount": self.loaded_tab_count,
            "totalTabCount": self.total_tab_count,
            "mode": self.mode.value,
            "memoryLoadPercent": self.memory_load_percent,
        }


@dataclass
class CategoryLoad:
    """Resource totals for the tabs of one category."""

    tab_count: int = 0
    sampled_count: int = 0
    memory_mb: float = 0.0
    cpu_percent: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tabCount": self.tab_count,
            "sampledCount": self.sampled_count,
            "memoryMB": self.memory_mb,
            "cpuPercent": self.cpu_percent,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Performance
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PerformanceScore:
    """Qualitative browser impact tier."""

    tier: str  # light/medium/heavy
    detail: str
    emoji: str


@dataclass(frozen=True)
class Recommendation:
    """One suggested action. Advisory only; acting on it is the caller's job."""

    priority: str  # high/medium/low/info
    icon: str
    text: str
    action: str

    def to_dict(self) -> dict[str, str]:
        return {
            "priority": self.priority,
            "icon": self.icon,
            "text": self.text,
            "action": self.action,
        }
