"""
PublicDashboard List Session Cache — Per-session snapshot of ordered dashboard ids.

Paginated list views read pages out of one snapshot so that page 2 shows
the same ordering as page 1 even if another operator changed the set in
between. The snapshot is dropped after every mutation made through the
session and rebuilt on the next list view.

Backends:
- ListSessionCache:       held in memory on the admin session object
- RedisListSessionCache:  stored in the Redis session store, keyed by session id
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from publicdashboard.dashboards.store import DashboardRecord, DashboardStore
from publicdashboard.engine.cache import RedisCache

logger = logging.getLogger("publicdashboard.dashboards.list_cache")


class ListSessionCache:
    """In-memory snapshot of the position-ordered id list for one session."""

    def __init__(self, store: DashboardStore, ordered_ids: Optional[Iterable[int]] = None):
        self._store = store
        self._ordered_ids: List[int] = list(ordered_ids or [])

    def get_ordered_ids(self, force_refresh: bool = False) -> List[int]:
        """
        Return the snapshot, re-querying the store when forced or empty.

        Callers pass ``force_refresh=True`` for a fresh (non-paginated) visit.
        """
        cached = self._load()
        if force_refresh or not cached:
            cached = self._store.list_ids_ordered_by_position()
            self._save(cached)
            logger.debug(f"List snapshot refreshed: {len(cached)} dashboards")
        return list(cached)

    def invalidate(self) -> None:
        self._clear()

    def resolve_records(self, ids: Sequence[int]) -> List[DashboardRecord]:
        """
        Fetch records for ``ids`` and return them in exactly that order.

        Ids no longer present in the store are dropped; records for ids not
        asked for are never returned.
        """
        rank: Dict[int, int] = {}
        for i, record_id in enumerate(ids):
            rank.setdefault(record_id, i)
        if not rank:
            return []
        records = [r for r in self._store.find_by_ids(list(rank)) if r.id in rank]
        return sorted(records, key=lambda r: rank[r.id])

    @property
    def ordered_ids(self) -> List[int]:
        """Current snapshot without touching the store (empty when invalidated)."""
        return list(self._load())

    @property
    def is_empty(self) -> bool:
        return not self._load()

    # ── Backend hooks ──

    def _load(self) -> List[int]:
        return self._ordered_ids

    def _save(self, ids: List[int]) -> None:
        self._ordered_ids = list(ids)

    def _clear(self) -> None:
        self._ordered_ids = []


class RedisListSessionCache(ListSessionCache):
    """
    Snapshot kept in the Redis session store under ``list:{session_id}``.

    For deployments where successive requests of one session may land on
    different worker processes. An unavailable Redis reads as an empty
    snapshot, which falls back to querying the store.
    """

    def __init__(
        self,
        store: DashboardStore,
        cache: RedisCache,
        session_id: str,
        ttl: Optional[int] = None,
    ):
        super().__init__(store)
        self._cache = cache
        self._key = f"list:{session_id}"
        self._ttl = ttl
        # Set when a clear did not reach Redis; the stored snapshot is then ignored
        self._invalidated = False

    def _load(self) -> List[int]:
        if self._invalidated:
            return []
        value = self._cache.get_json(self._key)
        if not isinstance(value, list):
            return []
        return [int(v) for v in value]

    def _save(self, ids: List[int]) -> None:
        if self._cache.set_json(self._key, list(ids), ttl=self._ttl):
            self._invalidated = False
        else:
            logger.debug(f"List snapshot not cached for {self._key}")

    def _clear(self) -> None:
        if not self._cache.delete(self._key):
            logger.warning(f"List snapshot {self._key} not cleared in Redis; re-querying until rewritten")
            self._invalidated = True
