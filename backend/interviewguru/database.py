"""
Database engine, session factory, and FastAPI dependency.
"""

import logging
import time
from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

# SQLite needs check_same_thread=False; other DBs don't.
_connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    _connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
)

# Rows are returned to the API after commit, so keep their loaded state.
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def init_db(bind: Engine = engine) -> None:
    """Create any missing tables. There are no migrations."""
    from . import models  # noqa: F401  registers the tables on Base

    start = time.time()
    Base.metadata.create_all(bind=bind)
    logger.info("Database setup completed in %.2fs", time.time() - start)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; closing it rolls back anything uncommitted."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
