"""Page request parsing and the pagination envelope."""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from ..constants import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT


def _parse_int(value: Union[str, int, None]) -> int:
    # Leading-digit parse; garbage and zero fall back to the default
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip()
    sign = 1
    if text[:1] in ("-", "+"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for ch in text:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_query(cls, page: Union[str, int, None] = None, limit: Union[str, int, None] = None) -> "PageRequest":
        """Clamp raw query values into range. Out-of-range input is never rejected."""
        current_page = max(1, _parse_int(page) or DEFAULT_PAGE)
        current_limit = min(max(1, _parse_int(limit) or DEFAULT_LIMIT), MAX_LIMIT)
        return cls(page=current_page, limit=current_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: List[Any]
    total: int
    request: PageRequest

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.limit)

    @property
    def has_next(self) -> bool:
        return self.request.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.request.page > 1

    def envelope(self, data: Optional[List[Any]] = None) -> Dict[str, Any]:
        """``{data, pagination}`` with ``data`` defaulting to the raw items."""
        return {
            "data": self.items if data is None else data,
            "pagination": {
                "currentPage": self.request.page,
                "totalPages": self.total_pages,
                "totalItems": self.total,
                "limit": self.request.limit,
                "hasNextPage": self.has_next,
                "hasPrevPage": self.has_prev,
            },
        }
