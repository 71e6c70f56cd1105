from __future__ import annotations

from typing import Protocol

from credential_registry.models.domain import Domain


class PendingIndexRepo(Protocol):
    def add(self, domain: Domain, issuer: str, record_id: int) -> None: ...
    def remove(self, domain: Domain, issuer: str, record_id: int) -> None: ...
    def list_ids(self, domain: Domain, issuer: str) -> list[int]: ...
    def entries(self, domain: Domain) -> dict[str, set[int]]: ...


class InMemoryPendingIndexRepo:
    """Per-(domain, issuer) set of record ids awaiting a decision.

    Derived data: ``add`` of a present id and ``remove`` of an absent one
    both raise, so a caller that would make the index diverge from the
    record states aborts its unit of work instead.
    """

    def __init__(self) -> None:
        self._index: dict[tuple[Domain, str], set[int]] = {}

    def add(self, domain: Domain, issuer: str, record_id: int) -> None:
        ids = self._index.setdefault((domain, issuer), set())
        if record_id in ids:
            raise ValueError("record already pending")
        ids.add(record_id)

    def remove(self, domain: Domain, issuer: str, record_id: int) -> None:
        ids = self._index.get((domain, issuer))
        if ids is None or record_id not in ids:
            raise KeyError("record not pending")
        ids.remove(record_id)
        if not ids:
            del self._index[(domain, issuer)]

    def list_ids(self, domain: Domain, issuer: str) -> list[int]:
        return sorted(self._index.get((domain, issuer), ()))

    def entries(self, domain: Domain) -> dict[str, set[int]]:
        return {
            issuer: set(ids)
            for (d, issuer), ids in self._index.items()
            if d == domain
        }

    def snapshot(self) -> dict[tuple[Domain, str], set[int]]:
        return {k: set(v) for k, v in self._index.items()}

    def restore(self, snapshot: dict[tuple[Domain, str], set[int]]) -> None:
        self._index = snapshot
