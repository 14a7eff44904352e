"""Engine and session factory.

The engine is created on first use so importing the app never needs a live
database driver.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from lifepilot.core.config import settings

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, future=True)


@lru_cache
def get_engine() -> Engine:
    logger.info("Creating database engine")
    return create_engine(settings.database_url, pool_pre_ping=True, future=True)


def new_session() -> Session:
    if SessionLocal.kw.get("bind") is None:
        SessionLocal.configure(bind=get_engine())
    return SessionLocal()


def init_db() -> None:
    """Create missing tables (development and single-node deployments)."""
    from lifepilot.db import Base

    Base.metadata.create_all(bind=get_engine())
