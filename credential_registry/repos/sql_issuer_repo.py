"""SQLAlchemy implementation of IssuerRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from credential_registry.db.tables import IssuerRegistrationRow
from credential_registry.models.domain import Domain
from credential_registry.models.issuer import IssuerRegistration


class SqlIssuerRepo:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, domain: Domain, principal: str) -> IssuerRegistration | None:
        row = self._session.get(IssuerRegistrationRow, (domain.value, principal))
        if row is None:
            return None
        return _row_to_registration(row)

    def add(self, registration: IssuerRegistration) -> None:
        key = (registration.domain.value, registration.principal)
        if self._session.get(IssuerRegistrationRow, key) is not None:
            raise ValueError("issuer already registered in domain")
        self._session.add(
            IssuerRegistrationRow(
                domain=registration.domain.value,
                principal=registration.principal,
                org_name=registration.org_name,
                registration_ref=registration.registration_ref,
                org_metadata=dict(registration.org_metadata),
                registered_at=registration.registered_at,
            )
        )
        self._session.flush()

    def list_by_domain(self, domain: Domain) -> list[IssuerRegistration]:
        stmt = (
            select(IssuerRegistrationRow)
            .where(IssuerRegistrationRow.domain == domain.value)
            .order_by(
                IssuerRegistrationRow.registered_at, IssuerRegistrationRow.principal
            )
        )
        return [_row_to_registration(r) for r in self._session.scalars(stmt)]


def _row_to_registration(row: IssuerRegistrationRow) -> IssuerRegistration:
    return IssuerRegistration(
        domain=Domain(row.domain),
        principal=row.principal,
        org_name=row.org_name,
        registration_ref=row.registration_ref,
        org_metadata=dict(row.org_metadata or {}),
        registered_at=row.registered_at,
    )
