"""Cross-domain read models for the presentation layer."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

from credential_registry.core.policy import Operation, authorize, load_actor, permits
from credential_registry.models.domain import Domain
from credential_registry.models.record import CredentialRecord, VerificationState
from credential_registry.models.user import Role
from credential_registry.repos.unit_of_work import Store

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecordCounts:
    total: int = 0
    unverified: int = 0
    pending: int = 0
    verified: int = 0
    rejected: int = 0

    @staticmethod
    def of(records: list[CredentialRecord]) -> RecordCounts:
        by_state = Counter(r.state for r in records)
        return RecordCounts(
            total=len(records),
            unverified=by_state[VerificationState.UNVERIFIED],
            pending=by_state[VerificationState.PENDING],
            verified=by_state[VerificationState.VERIFIED],
            rejected=by_state[VerificationState.REJECTED],
        )


class AggregationService:
    def __init__(self, store: Store) -> None:
        self._store = store

    def list_all_subject_principals(self) -> list[str]:
        with self._store.begin(read_only=True) as uow:
            return [p.principal for p in uow.users.list_by_role(Role.SUBJECT)]

    def list_all_records_across_subjects(
        self, actor: str, domain: Domain
    ) -> list[CredentialRecord]:
        """Admin view of every record in ``domain``, in id order.

        Served from the per-domain index rather than by visiting every
        subject, so the cost follows the number of records.
        """
        with self._store.begin(read_only=True) as uow:
            authorize(
                Operation.LIST_ALL_RECORDS, load_actor(uow.users, actor), domain=domain
            )
            return uow.records.list_by_domain(domain)

    def subject_summary(self, actor: str, subject: str) -> dict[Domain, RecordCounts]:
        """Per-domain record counts for a subject's dashboard.

        Counts only what ``actor`` could read through list_records_of_subject,
        and fails the same way when ``actor`` may read none of them.
        """
        summary: dict[Domain, RecordCounts] = {}
        with self._store.begin(read_only=True) as uow:
            caller = load_actor(uow.users, actor)
            for domain in Domain:
                readable = [
                    r
                    for r in uow.records.list_by_subject(domain, subject)
                    if permits(
                        Operation.READ_RECORD,
                        caller,
                        domain=domain,
                        subject=r.subject,
                        issuer=r.issuer,
                    )
                ]
                summary[domain] = RecordCounts.of(readable)
        if not any(counts.total for counts in summary.values()):
            authorize(Operation.READ_RECORD, caller, subject=subject)
        return summary

    def check_pending_index(self, actor: str, domain: Domain) -> list[str]:
        """Compare the pending index with the record states.

        Returns one message per divergence; an empty list means the index
        holds exactly the pending records, grouped by their issuer.
        """
        with self._store.begin(read_only=True) as uow:
            authorize(
                Operation.LIST_ALL_RECORDS, load_actor(uow.users, actor), domain=domain
            )
            expected: dict[str, set[int]] = {}
            for record in uow.records.list_by_domain(domain):
                if record.state == VerificationState.PENDING:
                    expected.setdefault(record.issuer, set()).add(record.id)
            actual = uow.pending.entries(domain)

        problems: list[str] = []
        for issuer in sorted(expected.keys() | actual.keys()):
            want = expected.get(issuer, set())
            have = actual.get(issuer, set())
            for record_id in sorted(want - have):
                problems.append(f"{domain}/{record_id} pending but not indexed for {issuer}")
            for record_id in sorted(have - want):
                problems.append(f"{domain}/{record_id} indexed for {issuer} but not pending")
        if problems:
            logger.error("Pending index diverged domain=%s: %s", domain, problems)
        return problems
