"""Old tab detection from recorded last-access times."""

from collections.abc import Iterable, Mapping, Sequence

import structlog

from tab_shepherd.models import Tab

log = structlog.get_logger()

DAY_MS = 86_400_000


def find_old_tabs(
    tabs: Sequence[Tab],
    access_times: Mapping[int, int],
    threshold_days: float,
    now_ms: int,
) -> list[int]:
    """Return ids of tabs last accessed more than threshold_days before now_ms.

    A tab without a recorded access time is never old. Ids keep input order.
    """
    threshold_ms = threshold_days * DAY_MS
    old: list[int] = []
    for tab in tabs:
        accessed = access_times.get(tab.id)
        if accessed is None:
            continue
        if now_ms - accessed > threshold_ms:
            old.append(tab.id)
    return old


class AccessTimeStore:
    """In-memory last-access times keyed by tab id.

    The platform event handler calls touch() on tab create/activate and
    forget() on tab close; prune() drops entries for tabs that are gone.
    """

    def __init__(self, initial: Mapping[int, int] | None = None) -> None:
        self._times: dict[int, int] = dict(initial or {})

    def __len__(self) -> int:
        return len(self._times)

    def __contains__(self, tab_id: object) -> bool:
        return tab_id in self._times

    def get(self, tab_id: int) -> int | None:
        return self._times.get(tab_id)

    def touch(self, tab_id: int, timestamp_ms: int) -> None:
        """Record an access (upsert)."""
        self._times[tab_id] = timestamp_ms

    def forget(self, tab_id: int) -> None:
        """Remove a closed tab. Unknown ids are ignored."""
        self._times.pop(tab_id, None)

    def prune(self, open_tab_ids: Iterable[int]) -> int:
        """Drop entries for tabs that are no longer open; return how many."""
        keep = set(open_tab_ids)
        stale = [tab_id for tab_id in self._times if tab_id not in keep]
        for tab_id in stale:
            del self._times[tab_id]
        if stale:
            log.info("access_times_pruned", removed=len(stale), remaining=len(self._times))
        return len(stale)

    def access_times(self) -> dict[int, int]:
        """Copy of the current access-time map."""
        return dict(self._times)
