"""Tab categorization against an ordered rule table."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from tab_shepherd.chaos import DEFAULT_CHAOS_LEVELS, level_for
from tab_shepherd.dedup import find_duplicates
from tab_shepherd.models import CategorizedTab, CategoryRule, ChaosLevel, Tab, coerce_tabs
from tab_shepherd.rules import DEFAULT_RULES, UNCATEGORIZED

log = structlog.get_logger()


def classify(tab: Tab, rules: Sequence[CategoryRule] = DEFAULT_RULES) -> str:
    """Return the name of the first rule matching the tab's url or title.

    Tabs without a url or title are Uncategorized, as are tabs no rule matches.
    """
    if not tab.url or not tab.title:
        return UNCATEGORIZED
    for rule in rules:
        if rule.matches(tab.url, tab.title):
            return rule.name
    return UNCATEGORIZED


def classify_all(
    tabs: Sequence[Tab], rules: Sequence[CategoryRule] = DEFAULT_RULES
) -> dict[str, list[CategorizedTab]]:
    """Group tabs by category, flagging duplicates.

    Only categories with at least one tab appear in the result. Keys are in order
    of first appearance, tabs keep their input order within a category.

    Raises:
        InvalidInputError: If tabs is not a list of tabs.
    """
    tab_list = coerce_tabs(tabs)
    duplicates = find_duplicates(tab_list)

    grouped: dict[str, list[CategorizedTab]] = {}
    for tab in tab_list:
        category = classify(tab, rules)
        grouped.setdefault(category, []).append(
            CategorizedTab(tab=tab, category=category, is_duplicate=tab.id in duplicates)
        )

    log.debug(
        "tabs_classified",
        tabs=len(tab_list),
        categories=len(grouped),
        duplicates=len(duplicates),
    )
    return grouped


@dataclass
class CategoryBreakdown:
    count: int
    percentage: int
    duplicates: int


@dataclass
class TabStatistics:
    """Summary counts for a tab list."""

    total: int
    duplicates: int
    categories: int
    chaos_level: ChaosLevel
    breakdown: dict[str, CategoryBreakdown] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "duplicates": self.duplicates,
            "categories": self.categories,
            "chaosLevel": self.chaos_level.to_dict(),
            "categoryBreakdown": {
                name: {"count": b.count, "percentage": b.percentage, "duplicates": b.duplicates}
                for name, b in self.breakdown.items()
            },
        }


def tab_statistics(
    tabs: Sequence[Tab],
    rules: Sequence[CategoryRule] = DEFAULT_RULES,
    levels: Sequence[ChaosLevel] = DEFAULT_CHAOS_LEVELS,
) -> TabStatistics:
    """Compute totals, duplicate count, chaos level and per-category breakdown."""
    grouped = classify_all(tabs, rules)
    total = len(tabs)
    breakdown = {
        name: CategoryBreakdown(
            count=len(members),
            percentage=int(len(members) / total * 100 + 0.5) if total else 0,
            duplicates=sum(1 for m in members if m.is_duplicate),
        )
        for name, members in grouped.items()
    }
    return TabStatistics(
        total=total,
        duplicates=sum(b.duplicates for b in breakdown.values()),
        categories=len(grouped),
        chaos_level=level_for(total, levels),
        breakdown=breakdown,
    )


class TabClassifier:
    """Classifier bound to one rule table.

    Construct one per rule table; instances share no state.
    """

    def __init__(self, rules: Sequence[CategoryRule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def classify(self, tab: Tab) -> str:
        return classify(tab, self.rules)

    def classify_all(self, tabs: Sequence[Tab]) -> dict[str, list[CategorizedTab]]:
        return classify_all(tabs, self.rules)

    def statistics(
        self, tabs: Sequence[Tab], levels: Sequence[ChaosLevel] = DEFAULT_CHAOS_LEVELS
    ) -> TabStatistics:
        return tab_statistics(tabs, self.rules, levels)
