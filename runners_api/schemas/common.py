"""Shared schema building blocks: camelCase base model, page envelope, error envelope."""

import re
from datetime import datetime
from typing import Annotated, Any, Generic, Iterable, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from runners_api.core.timeutil import as_utc

T = TypeVar("T")

# Letters, spaces, hyphens, apostrophes and periods.
NAME_PATTERN = re.compile(r"^[A-Za-z\s\-'.]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-().]{7,20}$")

# SQLite returns naive datetimes; every outgoing timestamp is UTC-aware.
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base for API schemas: camelCase on the wire, snake_case in Python, reads ORM attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(CamelModel, Generic[T]):
    """List envelope. total counts every matching row, independent of page/pageSize."""

    data: list[T]
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    total: int = Field(..., ge=0)


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: ErrorDetail


class OkResponse(CamelModel):
    ok: bool = True
    message: str | None = None


def one_of(value: str, allowed: Iterable[str]) -> str:
    """Return the allow-listed spelling of value (case-insensitive match) or raise ValueError."""
    allowed = tuple(allowed)
    lookup = {a.lower(): a for a in allowed}
    key = value.strip().lower() if isinstance(value, str) else value
    if key not in lookup:
        raise ValueError(f"Value must be one of: {', '.join(allowed)}")
    return lookup[key]


def clean_name(value: str | None) -> str | None:
    """Strip a person name and check it against NAME_PATTERN."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Name must not be empty")
    if not NAME_PATTERN.match(value):
        raise ValueError("Name can only contain letters, spaces, hyphens, apostrophes, and periods")
    return value


def clean_phone(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if not PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number format")
    return value


def build_page(schema: type[BaseModel], rows: list[Any], total: int, page: int, page_size: int) -> Page:
    """Wrap ORM rows (or dicts) in the list envelope."""
    return Page[schema](
        data=[schema.model_validate(row) for row in rows],
        page=page,
        page_size=page_size,
        total=total,
    )
