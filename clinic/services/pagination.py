"""Page/limit handling shared by every list endpoint."""
import math
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.orm import Query

from ..core.config import settings
from ..core.errors import ValidationError


@dataclass
class Page:
    items: List[Any]
    current: int
    pages: int
    total: int

    @property
    def pagination(self) -> dict:
        return {"current": self.current, "pages": self.pages, "total": self.total}


def normalize_paging(page: Optional[int], limit: Optional[int]):
    page = 1 if page is None else page
    limit = settings.DEFAULT_PAGE_SIZE if limit is None else limit
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if limit < 1:
        raise ValidationError("limit must be 1 or greater")
    return page, min(limit, settings.MAX_PAGE_SIZE)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def paginate(query: Query, page: Optional[int], limit: Optional[int]) -> Page:
    """
    Apply offset/limit to an already ordered query.
    The query's ordering must end in a unique key so pages never overlap.
    """
    page, limit = normalize_paging(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(items=items, current=page, pages=page_count(total, limit), total=total)


def like_term(search: str) -> str:
    """ILIKE pattern for a case-insensitive substring match."""
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
