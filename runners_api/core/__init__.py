"""Core application modules: config, database, security, errors."""

from runners_api.core.config import Settings, get_settings, settings
from runners_api.core.database import SessionLocal, engine, get_db

__all__ = ["Settings", "SessionLocal", "engine", "get_db", "get_settings", "settings"]
