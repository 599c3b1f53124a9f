"""Shared test fixtures for tab-shepherd."""

import json
from pathlib import Path
from typing import Any

import pytest

from tab_shepherd.models import (
    ResourceSample,
    ResourceSnapshot,
    SampleMode,
    SystemSnapshot,
    Tab,
    TabStatus,
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temp dir so config and log files never touch the real one."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


def make_tab(
    tab_id: int = 1,
    url: str = "https://example.com/",
    title: str = "Example",
    window_id: int = 1,
    active: bool = False,
    discarded: bool = False,
    status: TabStatus = TabStatus.COMPLETE,
    favicon: str | None = None,
    audible: bool = False,
) -> Tab:
    """Create a Tab for testing. Defaults to a loaded, inactive tab."""
    return Tab(
        id=tab_id,
        url=url,
        title=title,
        window_id=window_id,
        active=active,
        discarded=discarded,
        status=status,
        favicon=favicon,
        audible=audible,
    )


def make_tabs(count: int, url: str = "https://example.com/page/{i}", **kwargs: Any) -> list[Tab]:
    """Create `count` distinct tabs with ids 1..count."""
    return [
        make_tab(tab_id=i, url=url.format(i=i), title=f"Page {i}", **kwargs)
        for i in range(1, count + 1)
    ]


def make_sample(
    tab_id: int = 1,
    memory_mb: float = 50.0,
    cpu_percent: float = 1.0,
    mode: SampleMode = SampleMode.PRECISE,
    timestamp_ms: int = 0,
) -> ResourceSample:
    """Create a ResourceSample for testing."""
    return ResourceSample(
        tab_id=tab_id,
        mode=mode,
        memory_mb=memory_mb,
        cpu_percent=cpu_percent,
        timestamp_ms=timestamp_ms,
    )


def make_snapshot(
    *samples: ResourceSample,
    last_update_ms: int = 0,
    scan_count: int = 1,
    system: SystemSnapshot | None = None,
) -> ResourceSnapshot:
    """Create a ResourceSnapshot holding the given samples."""
    return ResourceSnapshot(
        tab_resources={s.tab_id: s for s in samples},
        system=system or SystemSnapshot(),
        last_update_ms=last_update_ms,
        scan_count=scan_count,
    )


def write_json(path: Path, data: Any) -> Path:
    """Write data as JSON and return the path."""
    path.write_text(json.dumps(data))
    return path
