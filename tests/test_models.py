"""Tests for the data schema."""

import math

import pytest

from tab_shepherd.models import (
    AggregateReport,
    CategorizedTab,
    ChaosLevel,
    InvalidInputError,
    ResourceSample,
    ResourceSnapshot,
    SampleMode,
    SystemSnapshot,
    Tab,
    TabStatus,
    coerce_tabs,
)
from tests.conftest import make_tab


class TestTabFromDict:
    """Tests for Tab.from_dict."""

    def test_platform_record(self) -> None:
        """camelCase platform fields map onto Tab attributes."""
        tab = Tab.from_dict(
            {
                "id": 7,
                "url": "https://github.com/a",
                "title": "Repo",
                "windowId": 3,
                "active": True,
                "discarded": False,
                "status": "complete",
                "favIconUrl": "https://github.com/favicon.ico",
                "audible": True,
            }
        )
        assert tab.id == 7
        assert tab.window_id == 3
        assert tab.active is True
        assert tab.status is TabStatus.COMPLETE
        assert tab.favicon == "https://github.com/favicon.ico"
        assert tab.audible is True

    def test_missing_url_and_title_become_empty(self) -> None:
        """Null or absent url/title are normalized to empty strings."""
        tab = Tab.from_dict({"id": 1, "url": None})
        assert tab.url == ""
        assert tab.title == ""

    def test_non_string_url_and_title_become_empty(self) -> None:
        tab = Tab.from_dict({"id": 1, "url": 123, "title": ["x"]})
        assert tab.url == ""
        assert tab.title == ""

    def test_unknown_status(self) -> None:
        """Unrecognized status strings map to UNKNOWN."""
        assert Tab.from_dict({"id": 1, "status": "unloaded"}).status is TabStatus.UNKNOWN
        assert Tab.from_dict({"id": 1}).status is TabStatus.UNKNOWN

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            Tab.from_dict(["id", 1])  # type: ignore[arg-type]

    def test_id_required(self) -> None:
        """A record without an integer id is a shape violation."""
        with pytest.raises(InvalidInputError):
            Tab.from_dict({"url": "https://a.com"})
        with pytest.raises(InvalidInputError):
            Tab.from_dict({"id": True})

    def test_to_dict_uses_platform_names(self) -> None:
        data = make_tab(tab_id=2, window_id=9).to_dict()
        assert data["windowId"] == 9
        assert "favIconUrl" in data
        assert data["status"] == "complete"

    def test_invalid_input_is_type_error(self) -> None:
        """InvalidInputError can be caught as a TypeError."""
        assert issubclass(InvalidInputError, TypeError)


class TestTabProperties:
    def test_hostname_lowercased(self) -> None:
        assert make_tab(url="https://WWW.YouTube.com/watch").hostname == "www.youtube.com"

    def test_hostname_none_for_garbage(self) -> None:
        assert make_tab(url="not a url").hostname is None
        assert make_tab(url="").hostname is None

    def test_hostname_none_for_bad_ipv6(self) -> None:
        """URLs the parser rejects yield None rather than raising."""
        assert make_tab(url="http://[::1/").hostname is None

    def test_is_loaded(self) -> None:
        """Loaded means not discarded and not still loading."""
        assert make_tab(status=TabStatus.COMPLETE).is_loaded
        assert make_tab(status=TabStatus.UNKNOWN).is_loaded
        assert not make_tab(status=TabStatus.LOADING).is_loaded
        assert not make_tab(discarded=True).is_loaded


class TestCoerceTabs:
    def test_accepts_mixed_tabs_and_dicts(self) -> None:
        tabs = coerce_tabs([make_tab(tab_id=1), {"id": 2, "url": "https://b.com"}])
        assert [t.id for t in tabs] == [1, 2]
        assert all(isinstance(t, Tab) for t in tabs)

    def test_rejects_non_list(self) -> None:
        with pytest.raises(InvalidInputError):
            coerce_tabs({"id": 1})
        with pytest.raises(InvalidInputError):
            coerce_tabs(None)

    def test_rejects_bad_element(self) -> None:
        with pytest.raises(InvalidInputError):
            coerce_tabs([42])


class TestCategorizedTab:
    def test_to_dict_adds_derived_fields(self) -> None:
        """Output is the tab record plus category and isDuplicate."""
        data = CategorizedTab(make_tab(tab_id=5), "Development", True).to_dict()
        assert data["id"] == 5
        assert data["category"] == "Development"
        assert data["isDuplicate"] is True


class TestChaosLevel:
    def test_contains_inclusive(self) -> None:
        level = ChaosLevel("good", 11, 20, "", "", 40)
        assert level.contains(11)
        assert level.contains(20)
        assert not level.contains(10)
        assert not level.contains(21)

    def test_unbounded(self) -> None:
        level = ChaosLevel("apocalyptic", 51, None, "", "", 100)
        assert level.contains(10_000)


class TestResourceSample:
    """Tests for ResourceSample.from_dict."""

    def test_precise_reads_measured_fields(self) -> None:
        sample = ResourceSample.from_dict(
            3,
            {
                "mode": "precise",
                "memoryMB": 120,
                "cpuPercent": 4.5,
                "memoryEstimateMB": 999,
                "timestampMs": 1000,
            },
        )
        assert sample.mode is SampleMode.PRECISE
        assert sample.memory_mb == 120
        assert sample.cpu_percent == 4.5
        assert sample.timestamp_ms == 1000

    def test_heuristic_reads_estimates(self) -> None:
        sample = ResourceSample.from_dict(
            3, {"mode": "heuristic", "memoryEstimateMB": 80, "cpuEstimatePercent": 2}
        )
        assert sample.mode is SampleMode.HEURISTIC
        assert sample.memory_mb == 80
        assert sample.cpu_percent == 2

    def test_falls_back_to_other_field(self) -> None:
        """A precise record carrying only estimates still yields numbers."""
        sample = ResourceSample.from_dict(1, {"mode": "precise", "memoryEstimateMB": 60})
        assert sample.memory_mb == 60
        assert sample.cpu_percent == 0

    def test_nested_resources_block(self) -> None:
        sample = ResourceSample.from_dict(
            1, {"mode": "precise", "resources": {"memoryMB": 42, "cpuPercent": 1}}
        )
        assert sample.memory_mb == 42

    def test_negative_and_nan_clamped(self) -> None:
        """Negative or non-numeric values never produce negative totals."""
        sample = ResourceSample.from_dict(
            1, {"mode": "precise", "memoryMB": -5, "cpuPercent": math.nan}
        )
        assert sample.memory_mb == 0
        assert sample.cpu_percent == 0

    def test_infinite_values_clamped(self) -> None:
        sample = ResourceSample.from_dict(
            1,
            {"mode": "precise", "memoryMB": math.inf, "cpuPercent": 10**400, "timestamp": math.inf},
        )
        assert sample.memory_mb == 0
        assert sample.cpu_percent == 0
        assert sample.timestamp_ms == 0

    def test_garbage_values(self) -> None:
        sample = ResourceSample.from_dict(1, {"memoryEstimateMB": "lots", "timestamp": "x"})
        assert sample.memory_mb == 0
        assert sample.timestamp_ms == 0

    def test_unknown_mode_is_heuristic(self) -> None:
        assert ResourceSample.from_dict(1, {}).mode is SampleMode.HEURISTIC


class TestResourceSnapshot:
    def test_from_dict(self) -> None:
        snapshot = ResourceSnapshot.from_dict(
            {
                "tabResources": {
                    "1": {"mode": "precise", "memoryMB": 100},
                    "2": {"mode": "heuristic", "memoryEstimateMB": 50},
                    "bogus": {"mode": "precise", "memoryMB": 1},
                },
                "systemResources": {
                    "memory": {"totalMB": 16384, "usedPercent": 55, "availableMB": 7000}
                },
                "lastUpdate": 12345,
                "scanCount": 4,
            }
        )
        assert set(snapshot.tab_resources) == {1, 2}
        assert snapshot.tab_resources[2].mode is SampleMode.HEURISTIC
        assert snapshot.system.total_memory_mb == 16384
        assert snapshot.system.used_percent == 55
        assert snapshot.last_update_ms == 12345
        assert snapshot.scan_count == 4
        assert len(snapshot.samples) == 2

    def test_empty(self) -> None:
        snapshot = ResourceSnapshot.from_dict({})
        assert snapshot.tab_resources == {}
        assert snapshot.system == SystemSnapshot()

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            ResourceSnapshot.from_dict([])  # type: ignore[arg-type]

    def test_tab_resources_must_be_mapping(self) -> None:
        with pytest.raises(InvalidInputError):
            ResourceSnapshot.from_dict({"tabResources": [1, 2]})


class TestSystemSnapshot:
    def test_flat_shape(self) -> None:
        system = SystemSnapshot.from_dict({"totalMemoryMB": 8192, "availableMB": 1024})
        assert system.total_memory_mb == 8192
        assert system.available_mb == 1024

    def test_non_mapping_gives_defaults(self) -> None:
        assert SystemSnapshot.from_dict(None) == SystemSnapshot()


class TestAggregateReport:
    def test_empty(self) -> None:
        report = AggregateReport.empty(loaded_tab_count=2, total_tab_count=3)
        assert report.total_memory_mb == 0
        assert report.average_cpu_percent == 0
        assert report.mode is SampleMode.HEURISTIC
        assert report.to_dict()["totalTabCount"] == 3
