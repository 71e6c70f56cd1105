from __future__ import annotations

from typing import Protocol

from credential_registry.models.domain import Domain
from credential_registry.models.issuer import IssuerRegistration


class IssuerRepo(Protocol):
    def get(self, domain: Domain, principal: str) -> IssuerRegistration | None: ...
    def add(self, registration: IssuerRegistration) -> None: ...
    def list_by_domain(self, domain: Domain) -> list[IssuerRegistration]: ...


class InMemoryIssuerRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[Domain, str], IssuerRegistration] = {}

    def get(self, domain: Domain, principal: str) -> IssuerRegistration | None:
        return self._store.get((domain, principal))

    def add(self, registration: IssuerRegistration) -> None:
        key = (registration.domain, registration.principal)
        if key in self._store:
            raise ValueError("issuer already registered in domain")
        self._store[key] = registration

    def list_by_domain(self, domain: Domain) -> list[IssuerRegistration]:
        return [r for r in self._store.values() if r.domain == domain]

    def snapshot(self) -> dict[tuple[Domain, str], IssuerRegistration]:
        return dict(self._store)

    def restore(self, snapshot: dict[tuple[Domain, str], IssuerRegistration]) -> None:
        self._store = snapshot
