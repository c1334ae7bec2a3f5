"""SQLAlchemy declarative Base and shared column helpers."""

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import DeclarativeBase

from runners_api.core.timeutil import utcnow

# Largest value an Integer primary key holds on PostgreSQL.
MAX_ID = 2**31 - 1


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def created_at_column() -> Column:
    return Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)


def updated_at_column() -> Column:
    return Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)
