"""Duplicate tab detection by normalized URL."""

from collections.abc import Sequence
from urllib.parse import urlparse

import structlog

from tab_shepherd.models import Tab

log = structlog.get_logger()

# Browser-internal and local schemes; tabs on these are never duplicates.
_UNCHECKED_PREFIXES = (
    "chrome://",
    "chrome-extension://",
    "chrome-search://",
    "chrome-devtools://",
    "about:",
    "moz-extension://",
    "safari-extension://",
    "data:",
    "blob:",
    "javascript:",
    "file://",
)


def is_checkable_url(url: object) -> bool:
    """True if a tab with this url takes part in duplicate detection.

    Empty or non-string urls and browser-internal pages (new tab, settings,
    extensions, data: and blob: urls, local files) are skipped.
    """
    if not url or not isinstance(url, str):
        return False
    return not url.lower().startswith(_UNCHECKED_PREFIXES)


def normalize_url(url: str) -> str:
    """Reduce a URL to scheme://host/path for duplicate comparison.

    Query string, fragment and port are dropped, and a single trailing slash is
    stripped from the path. Scheme and host come back lower-cased. Input that
    cannot be parsed as an absolute URL is returned unchanged.

    Examples:
        https://x.com/a?utm=1  -> https://x.com/a
        https://X.com/a/#top   -> https://x.com/a
        not a url              -> not a url
    """
    try:
        parts = urlparse(url)
        hostname = parts.hostname or ""
    except (ValueError, TypeError, AttributeError):
        log.debug("url_normalize_failed", url=url)
        return url
    if not parts.scheme:
        return url

    path = parts.path
    if path.endswith("/"):
        path = path[:-1]
    return f"{parts.scheme}://{hostname}{path}"


def duplicate_groups(tabs: Sequence[Tab]) -> dict[str, list[int]]:
    """Map each normalized URL open in two or more tabs to its tab ids.

    Ids keep input order within a group.
    """
    groups: dict[str, list[int]] = {}
    for tab in tabs:
        if not is_checkable_url(tab.url):
            continue
        groups.setdefault(normalize_url(tab.url), []).append(tab.id)
    return {url: ids for url, ids in groups.items() if len(ids) > 1}


def find_duplicates(tabs: Sequence[Tab]) -> set[int]:
    """Return the ids of every tab that shares its normalized URL with another tab.

    Both members of a pair are reported, and all members of an n-way group, so
    the result does not depend on input order.
    """
    first_seen: dict[str, int] = {}
    duplicates: set[int] = set()
    for tab in tabs:
        if not is_checkable_url(tab.url):
            continue
        key = normalize_url(tab.url)
        if key in first_seen:
            duplicates.add(first_seen[key])
            duplicates.add(tab.id)
        else:
            first_seen[key] = tab.id
    return duplicates


def unique_tabs(tabs: Sequence[Tab]) -> list[Tab]:
    """Keep the first tab for each normalized URL, preserving order.

    Tabs whose url is not checkable are always kept.
    """
    seen: set[str] = set()
    unique: list[Tab] = []
    for tab in tabs:
        if not is_checkable_url(tab.url):
            unique.append(tab)
            continue
        key = normalize_url(tab.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(tab)
    return unique
