"""Database layer - engine, session scope and declarative base."""

from factory_kernel.db.base import Base, TimestampedBase
from factory_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    make_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "TimestampedBase",
    "create_tables",
    "drop_tables",
    "init_engine_from_url",
    "make_session_factory",
    "session_scope",
]
