"""Database engine, sessions and models."""

from .connection import (
    Base,
    async_session_maker,
    build_engine,
    build_session_factory,
    close_db,
    engine,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "engine",
    "async_session_maker",
    "build_engine",
    "build_session_factory",
    "get_db",
    "init_db",
    "close_db",
]
