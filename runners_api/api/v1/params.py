"""Shared path and query parameters."""

from typing import Annotated

from fastapi import Path, Query

from runners_api.models.base import MAX_ID
from runners_api.services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE, PageParams

# Out-of-range ids are rejected as 400 before they reach SQL.
RecordId = Annotated[int, Path(ge=1, le=MAX_ID)]


def get_page_params(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
) -> PageParams:
    return PageParams(page=page, page_size=page_size)
