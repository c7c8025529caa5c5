"""
PublicDashboard Database Session Management.

Single entry point for database initialisation plus a transactional
context manager. Uses the global EngineRegistry.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session, sessionmaker

from publicdashboard.db.base import Base, engine_registry

logger = logging.getLogger("publicdashboard.db.session")

ENGINE_NAME = "publicdashboard"


def init_db(
    db_url: str,
    create_tables: bool = False,
    pool_size: int = 10,
    max_overflow: int = 20,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
    pool_pre_ping: bool = True,
) -> sessionmaker:
    """
    Register the dashboard database engine and return its session factory.

    Args:
        db_url:        SQLAlchemy URL (postgresql://..., sqlite:///...).
        create_tables: Run Base.metadata.create_all(). Use for ``init`` and tests.

    Returns:
        A ``sessionmaker`` bound to the engine, with expire_on_commit disabled.
    """
    # Importing the models registers their tables on Base.metadata
    from publicdashboard.db import models  # noqa: F401

    engine = engine_registry.register(
        ENGINE_NAME,
        db_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
        pool_pre_ping=pool_pre_ping,
    )
    if create_tables:
        Base.metadata.create_all(engine)
        logger.info("Dashboard tables created")

    return engine_registry.get_session_factory(ENGINE_NAME)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager with commit on success and rollback on error.

    Usage:
        with session_scope(factory) as session:
            session.add(record)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def close_db() -> None:
    """Dispose the dashboard engine. Used during shutdown and in tests."""
    engine_registry.dispose(ENGINE_NAME)
