"""Unit of work: the transactional boundary around every engine operation.

Each boundary operation opens exactly one unit of work::

    with store.begin() as uow:
        record = uow.records.get_for_update(domain, record_id)
        ...
        uow.records.update(new_record)
        uow.pending.add(domain, record.issuer, record.id)

Leaving the block normally commits; leaving it with an exception rolls
back every repo touched inside it.  The in-memory store gets this from a
single re-entrant lock plus a snapshot taken on entry; the SQL store
(credential_registry.db.sql_store) gets it from a database transaction.
"""

from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import Protocol

from credential_registry.repos.issuer_repo import InMemoryIssuerRepo, IssuerRepo
from credential_registry.repos.pending_index_repo import (
    InMemoryPendingIndexRepo,
    PendingIndexRepo,
)
from credential_registry.repos.record_repo import InMemoryRecordRepo, RecordRepo
from credential_registry.repos.user_repo import InMemoryUserProfileRepo, UserProfileRepo

logger = logging.getLogger(__name__)


class UnitOfWork(Protocol):
    users: UserProfileRepo
    issuers: IssuerRepo
    records: RecordRepo
    pending: PendingIndexRepo

    def __enter__(self) -> UnitOfWork: ...
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


class Store(Protocol):
    kind: str

    def begin(self, *, read_only: bool = False) -> UnitOfWork: ...
    def ping(self) -> bool: ...


class InMemoryStore:
    """Process-local store: a map of repos behind one mutex."""

    kind = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.users = InMemoryUserProfileRepo()
        self.issuers = InMemoryIssuerRepo()
        self.records = InMemoryRecordRepo()
        self.pending = InMemoryPendingIndexRepo()

    def begin(self, *, read_only: bool = False) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self, read_only=read_only)

    def ping(self) -> bool:
        return True

    def clear(self) -> None:
        with self._lock:
            self.users = InMemoryUserProfileRepo()
            self.issuers = InMemoryIssuerRepo()
            self.records = InMemoryRecordRepo()
            self.pending = InMemoryPendingIndexRepo()


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore, *, read_only: bool) -> None:
        self._store = store
        self._read_only = read_only
        self._snapshots: list[object] | None = None

    @property
    def users(self) -> InMemoryUserProfileRepo:
        return self._store.users

    @property
    def issuers(self) -> InMemoryIssuerRepo:
        return self._store.issuers

    @property
    def records(self) -> InMemoryRecordRepo:
        return self._store.records

    @property
    def pending(self) -> InMemoryPendingIndexRepo:
        return self._store.pending

    def _repos(
        self,
    ) -> tuple[
        InMemoryUserProfileRepo,
        InMemoryIssuerRepo,
        InMemoryRecordRepo,
        InMemoryPendingIndexRepo,
    ]:
        return (self.users, self.issuers, self.records, self.pending)

    def __enter__(self) -> InMemoryUnitOfWork:
        self._store._lock.acquire()
        if not self._read_only:
            self._snapshots = [repo.snapshot() for repo in self._repos()]
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is not None and self._snapshots is not None:
                for repo, snapshot in zip(self._repos(), self._snapshots, strict=True):
                    repo.restore(snapshot)  # type: ignore[arg-type]
                logger.debug("Unit of work rolled back: %s", exc_type.__name__)
        finally:
            self._snapshots = None
            self._store._lock.release()
