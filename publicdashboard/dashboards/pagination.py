"""
PublicDashboard Pagination — Page slicing over the session's id snapshot.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union


@dataclass
class Page:
    """One page of ids plus the numbers a pager control needs."""

    ids: List[int]
    page_index: int
    items_per_page: int
    total: int
    page_count: int
    options: List[int] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.page_index > 1

    @property
    def has_next(self) -> bool:
        return self.page_index < self.page_count

    @property
    def first_item(self) -> int:
        """1-based rank of the first item on the page (0 when empty)."""
        if self.total == 0:
            return 0
        return (self.page_index - 1) * self.items_per_page + 1

    @property
    def last_item(self) -> int:
        return self.first_item + len(self.ids) - 1 if self.ids else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_index": self.page_index,
            "items_per_page": self.items_per_page,
            "total": self.total,
            "page_count": self.page_count,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
            "first_item": self.first_item,
            "last_item": self.last_item,
        }


def parse_int(value: Union[str, int, None], default: int) -> int:
    """Lenient integer parse for request parameters."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def paginate(
    ids: Sequence[int],
    page_index: Union[str, int, None] = 1,
    items_per_page: Union[str, int, None] = 10,
    options: Optional[List[int]] = None,
) -> Page:
    """
    Slice ``ids`` into a page. Out-of-range page indexes clamp to the
    nearest valid page; a non-positive page size falls back to 10.
    """
    per_page = parse_int(items_per_page, 10)
    if per_page < 1:
        per_page = 10
    total = len(ids)
    page_count = max(1, math.ceil(total / per_page))
    index = min(max(parse_int(page_index, 1), 1), page_count)
    start = (index - 1) * per_page
    return Page(
        ids=list(ids[start:start + per_page]),
        page_index=index,
        items_per_page=per_page,
        total=total,
        page_count=page_count,
        options=list(options or []),
    )
