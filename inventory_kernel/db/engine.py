"""
Module: inventory_kernel.db.engine
Responsibility: The process-wide SQLAlchemy engine and session factory for
    the stock ledger and billing tables, plus table create/drop helpers.
Architecture position: Kernel > DB.  May import from db/base.py.
    create_tables() also imports the model registry so that every table is
    known to Base.metadata.  MUST NOT import services/, selectors/ or
    outer layers.

Backends:
    - PostgreSQL (psycopg2): pooled connections, READ COMMITTED, row locks
      on product stock and sequence counters.
    - SQLite: tests, seed script and local tooling.  ``sqlite://`` shares
      one in-memory connection across sessions (StaticPool); a file
      database waits up to 30s on the database-level write lock.

Failure modes:
    - RuntimeError from get_engine/get_session/get_session_factory before
      init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from inventory_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")
_SQLITE_CONNECT_ARGS = {"check_same_thread": False, "timeout": 30}

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _sqlite_engine(database_url: str, echo: bool) -> Engine:
    if database_url in _IN_MEMORY_URLS:
        return create_engine(
            database_url,
            echo=echo,
            connect_args=_SQLITE_CONNECT_ARGS,
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, connect_args=_SQLITE_CONNECT_ARGS)


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the engine and session factory, replacing any earlier ones.

    The pool_* arguments apply to PostgreSQL only; they come from the
    ``database`` section of the loaded InventoryConfig.
    """
    global _engine, _SessionFactory

    if database_url.startswith("sqlite"):
        _engine = _sqlite_engine(database_url, echo)
    else:
        _engine = create_engine(
            database_url,
            echo=echo,
            poolclass=QueuePool,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            isolation_level="READ COMMITTED",
        )

    # Services hand back ORM rows after commit; keep them loaded
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={
            "dialect": _engine.dialect.name,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "echo": echo,
        },
    )
    return _engine


def _not_initialized() -> RuntimeError:
    return RuntimeError("Engine not initialized. Call init_engine_from_url() first.")


def get_engine() -> Engine:
    if _engine is None:
        raise _not_initialized()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory for worker threads that each need their own session."""
    if _SessionFactory is None:
        raise _not_initialized()
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Commit on clean exit, roll back and re-raise on error, always close.

        with session_scope() as session:
            StockLedgerService(session).apply_movement(...)
    """
    session = get_session()
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables(engine: Engine | None = None) -> None:
    from inventory_kernel.db.base import Base
    import inventory_kernel.models  # noqa: F401  -- registers every table

    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("tables_created", extra={"table_count": len(Base.metadata.tables)})


def drop_tables(engine: Engine | None = None) -> None:
    """Drop every table.  Tests and the seed script only."""
    from inventory_kernel.db.base import Base

    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose the pool and forget the engine (test teardown)."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()
