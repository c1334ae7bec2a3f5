"""Liveness route: reports environment and whether the database answers."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from runners_api.core.config import settings
from runners_api.core.database import check_db_connected, get_db
from runners_api.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Anonymous. status is 'degraded' while the database is unreachable."""
    if check_db_connected(db):
        return HealthResponse(status="ok", environment=settings.APP_ENV, database="connected")
    return HealthResponse(status="degraded", environment=settings.APP_ENV, database="disconnected")
