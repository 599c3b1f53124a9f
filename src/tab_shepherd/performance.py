"""Qualitative browser impact score and advisory recommendations."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from tab_shepherd.models import PerformanceScore, Recommendation, Tab

# Known resource-intensive sites (video, design tools, feeds, IDEs)
DEFAULT_HEAVY_DOMAINS: frozenset[str] = frozenset(
    {
        "youtube.com",
        "netflix.com",
        "figma.com",
        "canva.com",
        "docs.google.com",
        "sheets.google.com",
        "slides.google.com",
        "facebook.com",
        "instagram.com",
        "twitter.com",
        "x.com",
        "discord.com",
        "twitch.tv",
        "spotify.com",
        "soundcloud.com",
        "github.com",
        "gitlab.com",
        "codesandbox.io",
        "replit.com",
    }
)

# Recommendation triggers
CLOSE_TABS_ABOVE = 50
CLOSE_TABS_FRACTION = 0.3
SUSPEND_HEAVY_ABOVE = 3
SUSPEND_LOADED_RATIO = 0.8
SUSPEND_LOADED_MIN_TABS = 20
SUSPEND_LOADED_FRACTION = 0.4
BOOKMARK_ABOVE = 30

# Optimize-button heuristics
OPTIMIZE_TABS_ABOVE = 10
OPTIMIZE_HEAVY_ABOVE = 1
OPTIMIZE_SPARE_TABS = 25
OPTIMIZE_MAX = 10

_TIER_EMOJI = {"heavy": "🔴", "medium": "🟡", "light": "🟢"}
_TIER_DETAIL = {
    "heavy": "System impact: High",
    "medium": "System impact: Moderate",
    "light": "System impact: Minimal",
}


@dataclass(frozen=True)
class PerformanceThresholds:
    """Tier boundaries. A tier applies when a value is strictly above its limit."""

    heavy_total_tabs: int = 50
    heavy_heavy_tabs: int = 5
    medium_total_tabs: int = 25
    medium_heavy_tabs: int = 2
    medium_loaded_ratio: float = 0.7
    max_recommendations: int = 3
    heavy_domains: frozenset[str] = field(default_factory=lambda: DEFAULT_HEAVY_DOMAINS)


DEFAULT_THRESHOLDS = PerformanceThresholds()


def heavy_tab_count(
    tabs: Sequence[Tab], heavy_domains: Iterable[str] = DEFAULT_HEAVY_DOMAINS
) -> int:
    """Count tabs whose hostname is exactly one of heavy_domains.

    Tabs whose URL has no parsable hostname are never heavy.
    """
    domains = heavy_domains if isinstance(heavy_domains, (set, frozenset)) else set(heavy_domains)
    return sum(1 for tab in tabs if tab.hostname is not None and tab.hostname in domains)


def loaded_tab_count(tabs: Sequence[Tab]) -> int:
    return sum(1 for tab in tabs if tab.is_loaded)


def loaded_ratio(tabs: Sequence[Tab]) -> float:
    """Fraction of tabs that are loaded; 0.0 for an empty list."""
    if not tabs:
        return 0.0
    return loaded_tab_count(tabs) / len(tabs)


def score(
    total_tabs: int,
    heavy_count: int,
    ratio: float,
    thresholds: PerformanceThresholds = DEFAULT_THRESHOLDS,
) -> PerformanceScore:
    """Rate browser load as light, medium or heavy.

    The heavy check runs first, so a tab list that meets both the heavy and the
    medium conditions is heavy.
    """
    if total_tabs > thresholds.heavy_total_tabs or heavy_count > thresholds.heavy_heavy_tabs:
        tier = "heavy"
    elif (
        total_tabs > thresholds.medium_total_tabs
        or heavy_count > thresholds.medium_heavy_tabs
        or ratio > thresholds.medium_loaded_ratio
    ):
        tier = "medium"
    else:
        tier = "light"
    return PerformanceScore(tier=tier, detail=_TIER_DETAIL[tier], emoji=_TIER_EMOJI[tier])


def recommendations(
    total_tabs: int,
    heavy_count: int,
    loaded_tabs: int,
    thresholds: PerformanceThresholds = DEFAULT_THRESHOLDS,
) -> list[Recommendation]:
    """Suggest actions, most urgent first.

    Returns at most thresholds.max_recommendations entries. When nothing
    triggers, a single informational "optimized" entry is returned.
    """
    ratio = loaded_tabs / total_tabs if total_tabs else 0.0
    recs: list[Recommendation] = []

    if total_tabs > CLOSE_TABS_ABOVE:
        recs.append(
            Recommendation(
                priority="high",
                icon="🔥",
                text=f"Close {int(total_tabs * CLOSE_TABS_FRACTION)} tabs to improve performance",
                action="close_tabs",
            )
        )
    if heavy_count > SUSPEND_HEAVY_ABOVE:
        recs.append(
            Recommendation(
                priority="medium",
                icon="⚡",
                text=f"Suspend {heavy_count} resource-heavy tabs",
                action="suspend_heavy",
            )
        )
    if ratio > SUSPEND_LOADED_RATIO and total_tabs > SUSPEND_LOADED_MIN_TABS:
        recs.append(
            Recommendation(
                priority="medium",
                icon="💤",
                text=f"{int(loaded_tabs * SUSPEND_LOADED_FRACTION)} tabs could be suspended",
                action="suspend_loaded",
            )
        )
    if total_tabs > BOOKMARK_ABOVE:
        recs.append(
            Recommendation(
                priority="low",
                icon="📚",
                text="Bookmark frequently visited tabs for quick access",
                action="bookmark",
            )
        )

    if not recs:
        recs.append(
            Recommendation(
                priority="info",
                icon="✨",
                text="Your tab usage looks optimized!",
                action="none",
            )
        )
    return recs[: max(thresholds.max_recommendations, 1)]


def has_optimizations(total_tabs: int, heavy_count: int) -> bool:
    """Whether the optimize action has anything to offer."""
    return total_tabs > OPTIMIZE_TABS_ABOVE or heavy_count > OPTIMIZE_HEAVY_ABOVE


def optimization_count(total_tabs: int, heavy_count: int) -> int:
    """Estimated number of tabs an optimize pass would touch, capped at 10."""
    spare = max(0, total_tabs - OPTIMIZE_SPARE_TABS)
    return min(heavy_count + int(spare * CLOSE_TABS_FRACTION), OPTIMIZE_MAX)
