"""Database package."""
from .database import (
    build_engine,
    engine,
    init_db,
    session_scope,
)

__all__ = [
    "build_engine",
    "engine",
    "init_db",
    "session_scope",
]
