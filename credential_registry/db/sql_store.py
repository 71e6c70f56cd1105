"""SQL-backed Store.

Every unit of work is one database transaction on its own Session.  A
clean exit commits (or rolls back, for read-only work); an exception
rolls back everything the repos flushed.

On PostgreSQL, SELECT ... FOR UPDATE serialises writers per record and
per id counter.  SQLite drops FOR UPDATE, and an in-memory database runs
every Session on one shared connection, so there the store admits one
unit of work at a time.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType

from sqlalchemy import Engine, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from credential_registry.db.engine import Base
from credential_registry.db.tables import RecordCounterRow
from credential_registry.models.domain import Domain
from credential_registry.repos.sql_issuer_repo import SqlIssuerRepo
from credential_registry.repos.sql_pending_index_repo import SqlPendingIndexRepo
from credential_registry.repos.sql_record_repo import SqlRecordRepo
from credential_registry.repos.sql_user_repo import SqlUserProfileRepo

logger = logging.getLogger(__name__)


class SqlStore:
    kind = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self._lock: threading.RLock | None = (
            threading.RLock() if engine.dialect.name == "sqlite" else None
        )

    @property
    def serialized(self) -> bool:
        return self._lock is not None

    def begin(self, *, read_only: bool = False) -> SqlUnitOfWork:
        return SqlUnitOfWork(self._sessions(), read_only=read_only, lock=self._lock)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._lock is None:
            yield
            return
        with self._lock:
            yield

    def ping(self) -> bool:
        try:
            with self._exclusive(), self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("Database ping failed", exc_info=True)
            return False
        return True

    def create_schema(self) -> None:
        """Create missing tables and seed one id counter per domain.

        Deployments run alembic migrations instead; this serves local runs
        and tests on SQLite.
        """
        with self._exclusive():
            Base.metadata.create_all(self.engine)
            with self._sessions.begin() as session:
                existing = set(session.scalars(select(RecordCounterRow.domain)))
                for domain in Domain:
                    if domain.value not in existing:
                        session.add(RecordCounterRow(domain=domain.value, last_id=0))
        logger.info("Database schema ready")

    def dispose(self) -> None:
        self.engine.dispose()


class SqlUnitOfWork:
    def __init__(
        self,
        session: Session,
        *,
        read_only: bool,
        lock: threading.RLock | None = None,
    ) -> None:
        self._session = session
        self._read_only = read_only
        self._lock = lock
        self.users = SqlUserProfileRepo(session)
        self.issuers = SqlIssuerRepo(session)
        self.records = SqlRecordRepo(session)
        self.pending = SqlPendingIndexRepo(session)

    def __enter__(self) -> SqlUnitOfWork:
        if self._lock is not None:
            self._lock.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None and not self._read_only:
                self._session.commit()
            else:
                self._session.rollback()
                if exc_type is not None:
                    logger.debug("Unit of work rolled back: %s", exc_type.__name__)
        finally:
            try:
                self._session.close()
            finally:
                if self._lock is not None:
                    self._lock.release()
