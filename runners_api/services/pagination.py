"""Offset pagination over SQLAlchemy queries."""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Query

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_PAGE = 1_000_000


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def paginate(query: Query, params: PageParams) -> tuple[list[Any], int]:
    """
    Return (rows for the requested page, total matching rows).

    total is counted without ordering/offset so it is identical for every page;
    a page past the end yields an empty list.
    """
    total = query.order_by(None).count()
    rows = query.offset(params.offset).limit(params.page_size).all()
    return rows, total
