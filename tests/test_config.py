"""Tests for configuration system."""

from pathlib import Path

import pytest

from tab_shepherd.chaos import DEFAULT_CHAOS_LEVELS
from tab_shepherd.config import (
    Config,
    MonitorConfig,
    OldTabsConfig,
    PerformanceConfig,
    ResourcesConfig,
)
from tab_shepherd.performance import DEFAULT_HEAVY_DOMAINS
from tab_shepherd.rules import DEFAULT_RULES


def test_performance_config_defaults():
    """PerformanceConfig has correct defaults."""
    config = PerformanceConfig()
    assert config.heavy_total_tabs == 50
    assert config.heavy_heavy_tabs == 5
    assert config.medium_total_tabs == 25
    assert config.medium_heavy_tabs == 2
    assert config.medium_loaded_ratio == 0.7
    assert config.max_recommendations == 3
    assert set(config.heavy_domains) == DEFAULT_HEAVY_DOMAINS


def test_thresholds_from_config():
    """thresholds() builds an immutable, lower-cased domain set."""
    config = PerformanceConfig(heavy_domains=["YouTube.com"])
    thresholds = config.thresholds()
    assert thresholds.heavy_domains == frozenset({"youtube.com"})
    assert thresholds.heavy_total_tabs == 50


def test_other_section_defaults():
    assert ResourcesConfig().memory_baseline_mb == 8192
    assert OldTabsConfig().threshold_days == 7
    monitor = MonitorConfig()
    assert monitor.scan_interval == 5.0
    assert monitor.retry_initial_delay == 1.0
    assert monitor.retry_max_delay == 30.0
    assert monitor.retry_multiplier == 2.0


def test_full_config_defaults():
    config = Config()
    assert config.chaos_levels == DEFAULT_CHAOS_LEVELS
    assert config.categories == DEFAULT_RULES
    assert config.logging.log_backup_count == 3


def test_config_paths(isolated_home: Path):
    """Config provides correct paths under the home directory."""
    config = Config()
    assert config.config_dir == isolated_home / ".config" / "tab-shepherd"
    assert config.config_path.name == "config.toml"
    assert config.log_path == isolated_home / ".local" / "state" / "tab-shepherd" / "shepherd.log"


def test_load_missing_file_returns_defaults(tmp_path: Path):
    config = Config.load(tmp_path / "nope.toml")
    assert config == Config()


def test_save_and_load_round_trip(tmp_path: Path):
    path = tmp_path / "config.toml"
    config = Config()
    config.performance.heavy_total_tabs = 80
    config.old_tabs.threshold_days = 14
    config.monitor.scan_interval = 2.5
    config.save(path)

    loaded = Config.load(path)
    assert loaded.performance.heavy_total_tabs == 80
    assert loaded.old_tabs.threshold_days == 14
    assert loaded.monitor.scan_interval == 2.5
    assert loaded.chaos_levels == DEFAULT_CHAOS_LEVELS
    assert loaded.categories == DEFAULT_RULES


def test_default_save_omits_tables(tmp_path: Path):
    """Built-in chaos and category tables are not written out."""
    path = tmp_path / "config.toml"
    Config().save(path)
    text = path.read_text()
    assert "[performance]" in text
    assert "chaos_levels" not in text
    assert "categories" not in text


def test_partial_file_uses_defaults(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[old_tabs]\nthreshold_days = 3\n")
    config = Config.load(path)
    assert config.old_tabs.threshold_days == 3
    assert config.performance.heavy_total_tabs == 50
    assert config.monitor.max_attempts == 3


def test_parse_error(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[performance\nheavy_total_tabs = ")
    with pytest.raises(ValueError, match="Failed to parse config file"):
        Config.load(path)


@pytest.mark.parametrize(
    ("section", "body", "key"),
    [
        ("performance", "heavy_total_tabs = -1", "heavy_total_tabs"),
        ("performance", "max_recommendations = 0", "max_recommendations"),
        ("performance", "heavy_domains = 'youtube.com'", "heavy_domains"),
        ("resources", "memory_baseline_mb = -5", "memory_baseline_mb"),
        ("old_tabs", "threshold_days = -1", "threshold_days"),
        ("monitor", "scan_interval = 0", "scan_interval"),
        ("monitor", "max_attempts = 0", "max_attempts"),
        ("monitor", "retry_multiplier = 0.5", "retry_multiplier"),
    ],
)
def test_invalid_values(tmp_path: Path, section: str, body: str, key: str):
    path = tmp_path / "config.toml"
    path.write_text(f"[{section}]\n{body}\n")
    with pytest.raises(ValueError, match=key):
        Config.load(path)


def test_custom_chaos_levels(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[[chaos_levels]]\nname = 'calm'\nmin = 0\nmax = 4\npercentage = 50\n\n"
        "[[chaos_levels]]\nname = 'busy'\nmin = 5\npercentage = 100\n"
    )
    config = Config.load(path)
    assert [level.name for level in config.chaos_levels] == ["calm", "busy"]
    assert config.chaos_levels[1].range_max is None


def test_chaos_levels_must_start_at_zero(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[[chaos_levels]]\nname = 'x'\nmin = 3\n")
    with pytest.raises(ValueError, match="start at 0"):
        Config.load(path)


def test_chaos_level_missing_field(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[[chaos_levels]]\nname = 'x'\n")
    with pytest.raises(ValueError, match="chaos_levels"):
        Config.load(path)


def test_custom_categories_round_trip(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[[categories]]\nname = 'Work'\nicon = '💼'\nkeywords = ['jira']\n"
        "patterns = ['confluence']\n",
        encoding="utf-8",
    )
    config = Config.load(path)
    assert [r.name for r in config.categories] == ["Work"]
    assert config.categories[0].matches("https://x.atlassian.net/Confluence", "")

    saved = tmp_path / "saved.toml"
    config.save(saved)
    assert [r.name for r in Config.load(saved).categories] == ["Work"]


def test_invalid_category_pattern(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[[categories]]\nname = 'Bad'\npatterns = ['(']\n")
    with pytest.raises(ValueError, match="Invalid pattern"):
        Config.load(path)


def test_duplicate_category_names(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[[categories]]\nname = 'A'\n\n[[categories]]\nname = 'A'\n")
    with pytest.raises(ValueError, match="unique"):
        Config.load(path)
