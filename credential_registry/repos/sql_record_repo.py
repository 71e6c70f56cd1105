"""SQLAlchemy implementation of RecordRepo.

Row locks (SELECT ... FOR UPDATE) serialize id allocation per domain and
transitions per record on PostgreSQL.  SQLite ignores FOR UPDATE and
serializes writers on its database lock instead.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from credential_registry.db.tables import CredentialRecordRow, RecordCounterRow
from credential_registry.models.domain import Domain
from credential_registry.models.payloads import payload_from_dict, payload_to_dict
from credential_registry.models.record import CredentialRecord, VerificationState


class SqlRecordRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def next_id(self, domain: Domain) -> int:
        stmt = (
            select(RecordCounterRow)
            .where(RecordCounterRow.domain == domain.value)
            .with_for_update()
        )
        counter = self._session.scalars(stmt).one_or_none()
        if counter is None:
            counter = RecordCounterRow(domain=domain.value, last_id=0)
            self._session.add(counter)
        counter.last_id += 1
        self._session.flush()
        return counter.last_id

    def add(self, record: CredentialRecord) -> None:
        key = (record.domain.value, record.id)
        if self._session.get(CredentialRecordRow, key) is not None:
            raise ValueError("record id already in use")
        self._session.add(
            CredentialRecordRow(
                domain=record.domain.value,
                id=record.id,
                subject=record.subject,
                issuer=record.issuer,
                payload=payload_to_dict(record.payload),
                document_ref=record.document_ref,
                state=record.state.value,
                rejection_reason=record.rejection_reason,
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
        )
        self._session.flush()

    def get(self, domain: Domain, record_id: int) -> CredentialRecord | None:
        row = self._session.get(CredentialRecordRow, (domain.value, record_id))
        if row is None:
            return None
        return _row_to_record(row)

    def get_for_update(self, domain: Domain, record_id: int) -> CredentialRecord | None:
        stmt = (
            select(CredentialRecordRow)
            .where(
                CredentialRecordRow.domain == domain.value,
                CredentialRecordRow.id == record_id,
            )
            .with_for_update()
        )
        row = self._session.scalars(stmt).one_or_none()
        if row is None:
            return None
        return _row_to_record(row)

    def update(self, record: CredentialRecord) -> None:
        row = self._session.get(CredentialRecordRow, (record.domain.value, record.id))
        if row is None:
            raise KeyError("record not found")
        # payload and document_ref are immutable; only workflow fields move
        row.state = record.state.value
        row.rejection_reason = record.rejection_reason
        row.updated_at = record.updated_at
        self._session.flush()

    def list_by_subject(self, domain: Domain, subject: str) -> list[CredentialRecord]:
        stmt = (
            select(CredentialRecordRow)
            .where(
                CredentialRecordRow.domain == domain.value,
                CredentialRecordRow.subject == subject,
            )
            .order_by(CredentialRecordRow.id)
        )
        return [_row_to_record(r) for r in self._session.scalars(stmt)]

    def list_by_domain(self, domain: Domain) -> list[CredentialRecord]:
        stmt = (
            select(CredentialRecordRow)
            .where(CredentialRecordRow.domain == domain.value)
            .order_by(CredentialRecordRow.id)
        )
        return [_row_to_record(r) for r in self._session.scalars(stmt)]

    def count(self, domain: Domain) -> int:
        stmt = (
            select(func.count())
            .select_from(CredentialRecordRow)
            .where(CredentialRecordRow.domain == domain.value)
        )
        return self._session.scalar(stmt) or 0


def _row_to_record(row: CredentialRecordRow) -> CredentialRecord:
    domain = Domain(row.domain)
    return CredentialRecord(
        id=row.id,
        domain=domain,
        subject=row.subject,
        issuer=row.issuer,
        payload=payload_from_dict(domain, row.payload),
        document_ref=row.document_ref,
        state=VerificationState(row.state),
        rejection_reason=row.rejection_reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
