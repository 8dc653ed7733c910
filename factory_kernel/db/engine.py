"""
Module: factory_kernel.db.engine
Responsibility: SQLAlchemy engine construction, session factories and the
    transactional scope used by the SQL blob store.
Architecture position: Kernel > DB.  May import db/base.py and the ORM
    models; MUST NOT import from domain/, engines, services or config.

Invariants enforced:
    - No module-level engine: every engine is created for, and owned by, the
      store that uses it.
    - In-memory SQLite URLs share one connection (StaticPool) so every
      session sees the same database.
    - session_scope() commits on success and rolls back on any exception.

Failure modes:
    - sqlalchemy.exc.ArgumentError for malformed URLs.
    - OperationalError when the database file cannot be opened.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from factory_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the blob store database.

    SQLite URLs get ``check_same_thread=False``; ``:memory:`` databases
    additionally use a StaticPool so the data outlives a single connection.
    """
    url = make_url(database_url)
    kwargs: dict = {"echo": echo, "future": True}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    logger.info(
        "engine_initialized",
        extra={"dialect": url.get_backend_name(), "echo": echo},
    )
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Postconditions: on normal exit the session is committed and closed; on
    exception it is rolled back, closed and the exception re-raised.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine) -> None:
    """Create every table registered on Base.metadata."""
    from factory_kernel.db.base import Base
    import factory_kernel.models  # noqa: F401  -- registers ORM tables

    Base.metadata.create_all(engine)


def drop_tables(engine: Engine) -> None:
    """Drop all tables. Primarily for testing."""
    from factory_kernel.db.base import Base
    import factory_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine)
