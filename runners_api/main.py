"""Runners registry ASGI app: middleware, exception handlers and the /api/v1 router."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runners_api.api.v1 import router as v1_router
from runners_api.core.config import settings
from runners_api.core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)

app = FastAPI(
    title="Runners Registry API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# "*" is only honoured in dev; production must list its origins.
origins = [o for o in settings.cors_origins if settings.APP_ENV == "dev" or o != "*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Service name and the versioned API prefix."""
    return {"message": "Runners Registry API", "api": settings.API_V1_PREFIX}
