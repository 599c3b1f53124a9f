"""Tests for the chaos level table."""

import pytest

from tab_shepherd.chaos import DEFAULT_CHAOS_LEVELS, level_for, validate_levels
from tab_shepherd.models import ChaosLevel, InvalidInputError


@pytest.mark.parametrize(
    ("count", "expected"),
    [
        (0, "excellent"),
        (10, "excellent"),
        (11, "good"),
        (20, "good"),
        (21, "busy"),
        (35, "busy"),
        (36, "chaotic"),
        (50, "chaotic"),
        (51, "apocalyptic"),
        (5000, "apocalyptic"),
    ],
)
def test_level_boundaries(count: int, expected: str) -> None:
    """Ranges are inclusive on both ends."""
    assert level_for(count).name == expected


def test_negative_count_treated_as_zero() -> None:
    assert level_for(-3).name == "excellent"


def test_level_percentages() -> None:
    assert [level.percentage for level in DEFAULT_CHAOS_LEVELS] == [20, 40, 60, 80, 100]


def test_gap_falls_back_to_last_entry() -> None:
    """A table with a gap never fails; unmatched counts get the last level."""
    levels = (
        ChaosLevel("low", 0, 5, "", "", 10),
        ChaosLevel("high", 10, None, "", "", 100),
    )
    assert level_for(7, levels).name == "high"


def test_empty_table_rejected() -> None:
    with pytest.raises(InvalidInputError, match="must not be empty"):
        level_for(3, ())


def test_default_table_is_valid() -> None:
    validate_levels(DEFAULT_CHAOS_LEVELS)


class TestValidateLevels:
    """Tests for validate_levels."""

    def test_empty(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            validate_levels(())

    def test_must_start_at_zero(self) -> None:
        with pytest.raises(ValueError, match="start at 0"):
            validate_levels((ChaosLevel("a", 1, None, "", "", 100),))

    def test_gap(self) -> None:
        levels = (ChaosLevel("a", 0, 5, "", "", 50), ChaosLevel("b", 7, None, "", "", 100))
        with pytest.raises(ValueError, match="contiguous"):
            validate_levels(levels)

    def test_overlap(self) -> None:
        levels = (ChaosLevel("a", 0, 5, "", "", 50), ChaosLevel("b", 5, None, "", "", 100))
        with pytest.raises(ValueError, match="contiguous"):
            validate_levels(levels)

    def test_bounded_last(self) -> None:
        levels = (ChaosLevel("a", 0, 5, "", "", 50), ChaosLevel("b", 6, 9, "", "", 100))
        with pytest.raises(ValueError, match="unbounded"):
            validate_levels(levels)

    def test_unbounded_in_middle(self) -> None:
        levels = (ChaosLevel("a", 0, None, "", "", 50), ChaosLevel("b", 6, None, "", "", 100))
        with pytest.raises(ValueError, match="not the last"):
            validate_levels(levels)

    def test_max_below_min(self) -> None:
        levels = (ChaosLevel("a", 0, -1, "", "", 50), ChaosLevel("b", 0, None, "", "", 100))
        with pytest.raises(ValueError, match="max below min"):
            validate_levels(levels)
