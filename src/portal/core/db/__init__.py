"""Database utilities - engine and session."""

from src.portal.core.db.engine import dispose_engine, get_engine, init_db
from src.portal.core.db.session import get_session

__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "init_db",
]
