from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from credential_registry.models.domain import Domain
from credential_registry.models.record import CredentialRecord


class RecordRepo(Protocol):
    def next_id(self, domain: Domain) -> int: ...
    def add(self, record: CredentialRecord) -> None: ...
    def get(self, domain: Domain, record_id: int) -> CredentialRecord | None: ...
    def get_for_update(
        self, domain: Domain, record_id: int
    ) -> CredentialRecord | None: ...
    def update(self, record: CredentialRecord) -> None: ...
    def list_by_subject(self, domain: Domain, subject: str) -> list[CredentialRecord]: ...
    def list_by_domain(self, domain: Domain) -> list[CredentialRecord]: ...
    def count(self, domain: Domain) -> int: ...


@dataclass
class _RecordTables:
    records: dict[tuple[Domain, int], CredentialRecord] = field(default_factory=dict)
    counters: dict[Domain, int] = field(default_factory=dict)
    by_subject: dict[tuple[Domain, str], list[int]] = field(default_factory=dict)
    by_domain: dict[Domain, list[int]] = field(default_factory=dict)

    def copy(self) -> _RecordTables:
        return _RecordTables(
            records=dict(self.records),
            counters=dict(self.counters),
            by_subject={k: list(v) for k, v in self.by_subject.items()},
            by_domain={k: list(v) for k, v in self.by_domain.items()},
        )


class InMemoryRecordRepo:
    """Primary record store plus its two secondary indexes.

    ``by_subject`` answers "records of subject X"; ``by_domain`` keeps every
    id of a domain in allocation order so the Admin listing does not have
    to fan out over subjects.
    """

    def __init__(self) -> None:
        self._t = _RecordTables()

    def next_id(self, domain: Domain) -> int:
        next_value = self._t.counters.get(domain, 0) + 1
        self._t.counters[domain] = next_value
        return next_value

    def add(self, record: CredentialRecord) -> None:
        key = (record.domain, record.id)
        if key in self._t.records:
            raise ValueError("record id already in use")
        self._t.records[key] = record
        self._t.by_subject.setdefault((record.domain, record.subject), []).append(
            record.id
        )
        self._t.by_domain.setdefault(record.domain, []).append(record.id)

    def get(self, domain: Domain, record_id: int) -> CredentialRecord | None:
        return self._t.records.get((domain, record_id))

    def get_for_update(self, domain: Domain, record_id: int) -> CredentialRecord | None:
        # The store lock already serializes writers.
        return self.get(domain, record_id)

    def update(self, record: CredentialRecord) -> None:
        key = (record.domain, record.id)
        if key not in self._t.records:
            raise KeyError("record not found")
        self._t.records[key] = record

    def list_by_subject(self, domain: Domain, subject: str) -> list[CredentialRecord]:
        ids = self._t.by_subject.get((domain, subject), [])
        return [self._t.records[(domain, i)] for i in ids]

    def list_by_domain(self, domain: Domain) -> list[CredentialRecord]:
        ids = self._t.by_domain.get(domain, [])
        return [self._t.records[(domain, i)] for i in ids]

    def count(self, domain: Domain) -> int:
        return len(self._t.by_domain.get(domain, []))

    def snapshot(self) -> _RecordTables:
        return self._t.copy()

    def restore(self, snapshot: _RecordTables) -> None:
        self._t = snapshot
