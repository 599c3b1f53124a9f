"""Chaos level table: maps the number of open tabs to a severity tier."""

from collections.abc import Sequence

from tab_shepherd.models import ChaosLevel, InvalidInputError

DEFAULT_CHAOS_LEVELS: tuple[ChaosLevel, ...] = (
    ChaosLevel("excellent", 0, 10, "Looking sharp! 🌟", "#10B981", 20),
    ChaosLevel("good", 11, 20, "Getting busy 📈", "#3B82F6", 40),
    ChaosLevel("busy", 21, 35, "Tab collector detected 📚", "#F59E0B", 60),
    ChaosLevel("chaotic", 36, 50, "Approaching chaos 🌪️", "#F97316", 80),
    ChaosLevel("apocalyptic", 51, None, "Tab apocalypse! 🔥", "#EF4444", 100),
)


def level_for(
    tab_count: int, levels: Sequence[ChaosLevel] = DEFAULT_CHAOS_LEVELS
) -> ChaosLevel:
    """Return the first level whose inclusive range contains tab_count.

    A table with gaps falls back to its last (most severe) entry instead of
    failing. Negative counts are treated as 0.

    Raises:
        InvalidInputError: If levels is empty.
    """
    if not levels:
        raise InvalidInputError("Chaos level table must not be empty")
    count = max(tab_count, 0)
    for level in levels:
        if level.contains(count):
            return level
    return levels[-1]


def validate_levels(levels: Sequence[ChaosLevel]) -> None:
    """Check that levels partition the non-negative integers in order.

    Raises:
        ValueError: If the table is empty, does not start at 0, has a gap or an
            overlap between neighbours, or its last entry is bounded.
    """
    if not levels:
        raise ValueError("Chaos level table must not be empty")
    if levels[0].range_min != 0:
        raise ValueError(f"First chaos level must start at 0, got {levels[0].range_min}")

    for prev, level in zip(levels, levels[1:]):
        if prev.range_max is None:
            raise ValueError(f"Chaos level {prev.name!r} is unbounded but is not the last entry")
        if level.range_min != prev.range_max + 1:
            raise ValueError(
                f"Chaos levels {prev.name!r} and {level.name!r} must be contiguous "
                f"({prev.range_max} -> {level.range_min})"
            )

    for level in levels:
        if level.range_max is not None and level.range_max < level.range_min:
            raise ValueError(f"Chaos level {level.name!r} has max below min")
    if levels[-1].range_max is not None:
        raise ValueError(f"Last chaos level {levels[-1].name!r} must be unbounded")
