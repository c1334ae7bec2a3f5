"""SQLAlchemy engine, session factory and the per-request session dependency."""

from collections.abc import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from runners_api.core.config import settings

_IN_MEMORY_SQLITE = ("sqlite://", "sqlite:///:memory:")


def engine_options(url: str) -> dict:
    """Dialect-specific create_engine keyword arguments."""
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url in _IN_MEMORY_SQLITE:
        # Each new connection would open a separate, empty database.
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    """One session per request, closed after the response."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def check_db_connected(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return False
    return True
