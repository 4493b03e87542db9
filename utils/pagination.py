"""In-memory pagination over an already fetched result set."""
import math
from dataclasses import dataclass
from typing import Any, Sequence


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    per_page: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.total else 0

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "pages": self.pages,
            "has_prev": self.has_prev,
            "has_next": self.has_next,
        }


def paginate(items: Sequence[Any], page: Any = 1, per_page: int = 10) -> Page:
    """Slice ``items`` for the requested 1-based page, clamping out-of-range pages."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    per_page = max(1, int(per_page))
    total = len(items)
    last_page = max(1, math.ceil(total / per_page))
    page = min(max(page, 1), last_page)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total=total)
