"""SQLAlchemy implementation of PendingIndexRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from credential_registry.db.tables import PendingVerificationRow
from credential_registry.models.domain import Domain


class SqlPendingIndexRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, domain: Domain, issuer: str, record_id: int) -> None:
        key = (domain.value, record_id)
        if self._session.get(PendingVerificationRow, key) is not None:
            raise ValueError("record already pending")
        self._session.add(
            PendingVerificationRow(domain=domain.value, record_id=record_id, issuer=issuer)
        )
        self._session.flush()

    def remove(self, domain: Domain, issuer: str, record_id: int) -> None:
        row = self._session.get(PendingVerificationRow, (domain.value, record_id))
        if row is None or row.issuer != issuer:
            raise KeyError("record not pending")
        self._session.delete(row)
        self._session.flush()

    def list_ids(self, domain: Domain, issuer: str) -> list[int]:
        stmt = (
            select(PendingVerificationRow.record_id)
            .where(
                PendingVerificationRow.domain == domain.value,
                PendingVerificationRow.issuer == issuer,
            )
            .order_by(PendingVerificationRow.record_id)
        )
        return list(self._session.scalars(stmt))

    def entries(self, domain: Domain) -> dict[str, set[int]]:
        stmt = select(PendingVerificationRow).where(
            PendingVerificationRow.domain == domain.value
        )
        result: dict[str, set[int]] = {}
        for row in self._session.scalars(stmt):
            result.setdefault(row.issuer, set()).add(row.record_id)
        return result
