"""
PublicDashboard Reorder Engine — Move a dashboard one slot up or down.

A move exchanges the ``position`` values of the target and its immediate
neighbour in the position-ordered list. No other record is touched, and
both updates are handed to the store in a single call so a transactional
store applies them atomically.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from publicdashboard.dashboards.store import DashboardStore

logger = logging.getLogger("publicdashboard.dashboards.reorder")

UP = -1
DOWN = 1


class ReorderEngine:
    """
    Swap-with-neighbour reordering over a DashboardStore.

    Args:
        store:         Dashboard store.
        on_reordered:  Called after a successful swap (the admin session
                       passes its list-cache invalidation here).
    """

    def __init__(
        self,
        store: DashboardStore,
        on_reordered: Optional[Callable[[], None]] = None,
    ):
        self._store = store
        self._on_reordered = on_reordered

    def move_up(self, target_id: int) -> bool:
        """Move one slot earlier. Returns False for unknown ids or the first record."""
        return self._move(target_id, UP)

    def move_down(self, target_id: int) -> bool:
        """Move one slot later. Returns False for unknown ids or the last record."""
        return self._move(target_id, DOWN)

    def _move(self, target_id: int, direction: int) -> bool:
        records = self._store.list_all_ordered_by_position()
        index = next((i for i, r in enumerate(records) if r.id == target_id), None)
        if index is None:
            logger.debug(f"Move ignored: dashboard {target_id} not found")
            return False

        neighbour_index = index + direction
        if not 0 <= neighbour_index < len(records):
            logger.debug(f"Move ignored: dashboard {target_id} already at the boundary")
            return False

        target = records[index]
        neighbour = records[neighbour_index]
        target.position, neighbour.position = neighbour.position, target.position
        self._store.update(neighbour, target)

        logger.info(
            f"Dashboard {target.id} moved {'up' if direction == UP else 'down'}: "
            f"position {neighbour.position} -> {target.position}, "
            f"dashboard {neighbour.id} took {neighbour.position}"
        )
        if self._on_reordered is not None:
            self._on_reordered()
        return True
