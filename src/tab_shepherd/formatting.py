"""Formatting utilities for consistent CLI output."""

import time
from urllib.parse import urlparse

_SECOND_MS = 1000
_MINUTE_MS = 60 * _SECOND_MS
_HOUR_MS = 60 * _MINUTE_MS
_DAY_MS = 24 * _HOUR_MS
_WEEK_MS = 7 * _DAY_MS
_MONTH_MS = 30 * _DAY_MS


def format_tab_age(timestamp_ms: int | None, *, now_ms: int | None = None) -> str:
    """Format how long ago a tab was opened or last accessed.

    Args:
        timestamp_ms: Event time in epoch milliseconds, or None/0 if unknown
        now_ms: Current time (defaults to time.time())

    Returns:
        Relative age string:
        - Under 30s: "Just opened"
        - Under a week: "42s ago", "5m ago", "3h ago", "2d ago"
        - Older: "1 week ago", "3 weeks ago", "1 month ago", "4 months ago"
        - Missing timestamp: "Unknown"; timestamp after now: "Future tab?"
    """
    if not timestamp_ms:
        return "Unknown"
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    diff = now_ms - timestamp_ms
    if diff < 0:
        return "Future tab?"
    if diff < 30 * _SECOND_MS:
        return "Just opened"
    if diff < _MINUTE_MS:
        return f"{diff // _SECOND_MS}s ago"
    if diff < _HOUR_MS:
        return f"{diff // _MINUTE_MS}m ago"
    if diff < _DAY_MS:
        return f"{diff // _HOUR_MS}h ago"
    if diff < _WEEK_MS:
        return f"{diff // _DAY_MS}d ago"

    weeks = diff // _WEEK_MS
    if weeks == 1:
        return "1 week ago"
    if weeks < 4:
        return f"{weeks} weeks ago"

    months = diff // _MONTH_MS
    if months == 1:
        return "1 month ago"
    return f"{months} months ago"


def format_memory(memory_mb: float) -> str:
    """Format a memory figure: "512MB" below 1GB, "1.5GB" above."""
    if memory_mb >= 1024:
        return f"{memory_mb / 1024:.1f}GB"
    return f"{memory_mb:.0f}MB"


def display_domain(url: str) -> str:
    """Hostname without a leading "www.", or "Unknown" if the URL has none."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return "Unknown"
    if not host:
        return "Unknown"
    return host.removeprefix("www.")


def truncate(text: str, max_length: int) -> str:
    """Shorten text to max_length characters plus "...", "Unknown" if empty."""
    if not text:
        return "Unknown"
    return text[:max_length] + "..." if len(text) > max_length else text
