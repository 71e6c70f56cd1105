"""SQLAlchemy engine factory and declarative base.

Used only when DATABASE_URL is configured; otherwise the app runs on the
in-memory store and nothing here creates an engine.

Engine operations are synchronous and short, so the engine is the plain
(sync) SQLAlchemy engine: PostgreSQL via psycopg in deployment, SQLite
for local runs and tests.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


def _is_sqlite_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        if _is_sqlite_memory(url):
            # One shared connection, otherwise every session sees its own
            # empty in-memory database.
            engine = create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                url, echo=echo, connect_args={"check_same_thread": False}
            )
    else:
        engine = create_engine(
            url,
            echo=echo,  # log SQL in dev only
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
        )
    logger.info("Database engine created: %s", engine.url)
    return engine
