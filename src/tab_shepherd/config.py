"""Configuration system for tab-shepherd."""

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

from tab_shepherd.chaos import DEFAULT_CHAOS_LEVELS, validate_levels
from tab_shepherd.models import CategoryRule, ChaosLevel
from tab_shepherd.performance import DEFAULT_HEAVY_DOMAINS, PerformanceThresholds
from tab_shepherd.rules import DEFAULT_RULES, build_rule, rule_to_table


@dataclass
class PerformanceConfig:
    """Impact tier thresholds. Each tier applies when a value is strictly above."""

    heavy_total_tabs: int = 50
    heavy_heavy_tabs: int = 5
    medium_total_tabs: int = 25
    medium_heavy_tabs: int = 2
    medium_loaded_ratio: float = 0.7
    max_recommendations: int = 3
    heavy_domains: list[str] = field(default_factory=lambda: sorted(DEFAULT_HEAVY_DOMAINS))

    def thresholds(self) -> PerformanceThresholds:
        return PerformanceThresholds(
            heavy_total_tabs=self.heavy_total_tabs,
            heavy_heavy_tabs=self.heavy_heavy_tabs,
            medium_total_tabs=self.medium_total_tabs,
            medium_heavy_tabs=self.medium_heavy_tabs,
            medium_loaded_ratio=self.medium_loaded_ratio,
            max_recommendations=self.max_recommendations,
            heavy_domains=frozenset(d.lower() for d in self.heavy_domains),
        )


@dataclass
class ResourcesConfig:
    """Resource report configuration."""

    memory_baseline_mb: int = 8192  # Memory treated as 100% load
    heavy_tab_memory_mb: int = 100  # Tabs above this are listed as heavy
    heavy_tab_cpu_percent: float = 5.0
    top_tabs_fallback: int = 5  # Tabs to list when none is heavy


@dataclass
class OldTabsConfig:
    threshold_days: float = 7


@dataclass
class MonitorConfig:
    """Snapshot polling configuration."""

    scan_interval: float = 5.0  # Seconds between snapshot fetches
    fetch_timeout: float = 2.0  # Per-attempt timeout (seconds)
    retry_initial_delay: float = 1.0  # Initial retry delay (seconds)
    retry_max_delay: float = 30.0  # Max retry delay (seconds)
    retry_multiplier: float = 2.0  # Exponential backoff multiplier
    max_attempts: int = 3  # Attempts per fetch before giving up


@dataclass
class LoggingConfig:
    log_max_bytes: int = 5 * 1024 * 1024  # Rotate shepherd.log at 5 MiB
    log_backup_count: int = 3  # Rotated files kept


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


def _level_to_table(level: ChaosLevel) -> tomlkit.items.Table:
    table = tomlkit.table()
    table.add("name", level.name)
    table.add("min", level.range_min)
    if level.range_max is not None:
        table.add("max", level.range_max)
    table.add("message", level.message)
    table.add("color", level.color)
    table.add("percentage", level.percentage)
    return table


@dataclass
class Config:
    """Main configuration container."""

    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    resources: ResourcesConfig = field(default_factory=ResourcesConfig)
    old_tabs: OldTabsConfig = field(default_factory=OldTabsConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    chaos_levels: tuple[ChaosLevel, ...] = DEFAULT_CHAOS_LEVELS
    categories: tuple[CategoryRule, ...] = DEFAULT_RULES

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "tab-shepherd"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs and other expendable persistent state."""
        return Path.home() / ".local" / "state" / "tab-shepherd"

    @property
    def log_path(self) -> Path:
        return self.state_dir / "shepherd.log"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file.

        The chaos table and category rules are written only when they differ
        from the built-in tables, so a default config stays short.
        """
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ["performance", "resources", "old_tabs", "monitor", "logging"]:
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        if self.chaos_levels != DEFAULT_CHAOS_LEVELS:
            levels = tomlkit.aot()
            for level in self.chaos_levels:
                levels.append(_level_to_table(level))
            doc.add("chaos_levels", levels)

        default_tables = [rule_to_table(r) for r in DEFAULT_RULES]
        rule_tables = [rule_to_table(r) for r in self.categories]
        if rule_tables != default_tables:
            categories = tomlkit.aot()
            for table in rule_tables:
                item = tomlkit.table()
                item.update(table)
                categories.append(item)
            doc.add("categories", categories)

        path.write_text(tomlkit.dumps(doc), encoding="utf-8")

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML. A missing file or key falls back to Config().

        Raises:
            ValueError: If the file cannot be parsed or holds an invalid value.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path, encoding="utf-8") as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        log_data = data.get("logging", {})
        log_defaults = defaults.logging
        _require_non_negative("logging", log_data)

        return cls(
            performance=_load_performance_config(data.get("performance", {})),
            resources=_load_resources_config(data.get("resources", {})),
            old_tabs=_load_old_tabs_config(data.get("old_tabs", {})),
            monitor=_load_monitor_config(data.get("monitor", {})),
            logging=LoggingConfig(
                log_max_bytes=log_data.get("log_max_bytes", log_defaults.log_max_bytes),
                log_backup_count=log_data.get("log_backup_count", log_defaults.log_backup_count),
            ),
            chaos_levels=_load_chaos_levels(data.get("chaos_levels")),
            categories=_load_categories(data.get("categories")),
        )


def _require_non_negative(section: str, values: dict[str, float]) -> None:
    for key, value in values.items():
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
            raise ValueError(f"{section}.{key} must be a number >= 0, got {value!r}")


def _load_performance_config(data: dict) -> PerformanceConfig:
    """Load performance config from TOML data, using dataclass defaults for missing fields."""
    defaults = PerformanceConfig()
    numbers = {
        name: data.get(name, getattr(defaults, name))
        for name in (
            "heavy_total_tabs",
            "heavy_heavy_tabs",
            "medium_total_tabs",
            "medium_heavy_tabs",
            "medium_loaded_ratio",
            "max_recommendations",
        )
    }
    _require_non_negative("performance", numbers)
    if numbers["max_recommendations"] < 1:
        raise ValueError(
            f"performance.max_recommendations must be >= 1, got {numbers['max_recommendations']}"
        )

    heavy_domains = data.get("heavy_domains", defaults.heavy_domains)
    if not isinstance(heavy_domains, list) or not all(isinstance(d, str) for d in heavy_domains):
        raise ValueError("performance.heavy_domains must be a list of hostnames")

    return PerformanceConfig(**numbers, heavy_domains=list(heavy_domains))


def _load_resources_config(data: dict) -> ResourcesConfig:
    defaults = ResourcesConfig()
    values = {f.name: data.get(f.name, getattr(defaults, f.name)) for f in fields(defaults)}
    _require_non_negative("resources", values)
    return ResourcesConfig(**values)


def _load_old_tabs_config(data: dict) -> OldTabsConfig:
    threshold_days = data.get("threshold_days", OldTabsConfig().threshold_days)
    _require_non_negative("old_tabs", {"threshold_days": threshold_days})
    return OldTabsConfig(threshold_days=threshold_days)


def _load_monitor_config(data: dict) -> MonitorConfig:
    """Load monitor config from TOML data."""
    defaults = MonitorConfig()
    values = {f.name: data.get(f.name, getattr(defaults, f.name)) for f in fields(defaults)}
    _require_non_negative("monitor", values)

    if values["scan_interval"] <= 0:
        raise ValueError(f"monitor.scan_interval must be > 0, got {values['scan_interval']}")
    if values["max_attempts"] < 1:
        raise ValueError(f"monitor.max_attempts must be >= 1, got {values['max_attempts']}")
    if values["retry_multiplier"] < 1:
        raise ValueError(
            f"monitor.retry_multiplier must be >= 1, got {values['retry_multiplier']}"
        )
    return MonitorConfig(**values)


def _load_chaos_levels(data: list | None) -> tuple[ChaosLevel, ...]:
    """Build the chaos table from [[chaos_levels]], or the built-in table if absent."""
    if data is None:
        return DEFAULT_CHAOS_LEVELS
    try:
        levels = tuple(
            ChaosLevel(
                name=str(item["name"]),
                range_min=int(item["min"]),
                range_max=int(item["max"]) if "max" in item else None,
                message=str(item.get("message", "")),
                color=str(item.get("color", "")),
                percentage=int(item.get("percentage", 0)),
            )
            for item in data
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid chaos_levels entry: {e}") from e
    validate_levels(levels)
    return levels


def _load_categories(data: list | None) -> tuple[CategoryRule, ...]:
    if data is None:
        return DEFAULT_RULES
    rules = tuple(build_rule(item) for item in data)
    names = [r.name for r in rules]
    if len(set(names)) != len(names):
        raise ValueError("categories must have unique names")
    return rules
