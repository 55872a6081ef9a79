"""
Database package public API.

This makes `from app.db import get_db, Base, engine, etc.` work
and keeps imports consistent across models and services.
"""

from .session import (
    engine,
    AsyncSessionLocal,
    Base,
    get_db,
    init_db,
    close_db,
)

__all__ = [
    "engine",
    "AsyncSessionLocal",
    "Base",
    "get_db",
    "init_db",
    "close_db",
]
