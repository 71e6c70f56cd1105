"""Verification Workflow Engine, one instance per domain.

    unverified --request(subject)--> pending_verification --approve(issuer)--> verified
         ^                                  |
         |                        reject(issuer, reason)
    rejected <------------------------------+
       (the subject may request again from rejected; verified is absorbing)

Each transition writes the record and the issuer's pending index in one
unit of work, so no reader ever sees a pending record missing from the
index or an index entry for a record that is no longer pending.
"""

from __future__ import annotations

import logging

from credential_registry.core.clock import Clock, epoch_now
from credential_registry.core.errors import InvalidStateError, RecordNotFoundError
from credential_registry.core.metrics import (
    PENDING_VERIFICATIONS,
    VERIFICATION_TRANSITIONS,
)
from credential_registry.core.policy import Operation, authorize, load_actor
from credential_registry.models.domain import Domain
from credential_registry.models.record import (
    REQUESTABLE_STATES,
    CredentialRecord,
    VerificationState,
)
from credential_registry.repos.unit_of_work import Store, UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


class VerificationWorkflow:
    def __init__(self, store: Store, domain: Domain, *, clock: Clock = epoch_now) -> None:
        self._store = store
        self.domain = domain
        self._clock = clock

    def _locked_record(self, uow: UnitOfWork, record_id: int) -> CredentialRecord:
        record = uow.records.get_for_update(self.domain, record_id)
        if record is None:
            raise RecordNotFoundError(f"{self.domain} record {record_id} not found")
        return record

    def request_verification(self, actor: str, record_id: int) -> CredentialRecord:
        with self._store.begin() as uow:
            record = self._locked_record(uow, record_id)
            authorize(
                Operation.REQUEST_VERIFICATION,
                load_actor(uow.users, actor),
                domain=self.domain,
                subject=record.subject,
                issuer=record.issuer,
            )
            if record.state not in REQUESTABLE_STATES:
                raise InvalidStateError(
                    f"cannot request verification of a {record.state} record"
                )
            updated = record.transition(VerificationState.PENDING, now=self._clock())
            uow.records.update(updated)
            uow.pending.add(self.domain, record.issuer, record.id)

        VERIFICATION_TRANSITIONS.labels(
            domain=self.domain.value, transition="requested"
        ).inc()
        PENDING_VERIFICATIONS.labels(domain=self.domain.value).inc()
        logger.info(
            "Verification requested domain=%s id=%d subject=%s issuer=%s",
            self.domain,
            record.id,
            actor,
            record.issuer,
            extra={"actor": actor, "domain": self.domain.value, "record_id": record.id},
        )
        return updated

    def approve_verification(self, actor: str, record_id: int) -> CredentialRecord:
        return self._decide(actor, record_id, VerificationState.VERIFIED, None)

    def reject_verification(
        self, actor: str, record_id: int, reason: str | None = None
    ) -> CredentialRecord:
        reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        return self._decide(actor, record_id, VerificationState.REJECTED, reason)

    def _decide(
        self,
        actor: str,
        record_id: int,
        outcome: VerificationState,
        reason: str | None,
    ) -> CredentialRecord:
        with self._store.begin() as uow:
            record = self._locked_record(uow, record_id)
            authorize(
                Operation.DECIDE_VERIFICATION,
                load_actor(uow.users, actor),
                domain=self.domain,
                subject=record.subject,
                issuer=record.issuer,
            )
            if record.state != VerificationState.PENDING:
                verb = "approve" if outcome == VerificationState.VERIFIED else "reject"
                raise InvalidStateError(f"cannot {verb} a {record.state} record")
            updated = record.transition(
                outcome, now=self._clock(), rejection_reason=reason
            )
            uow.records.update(updated)
            uow.pending.remove(self.domain, record.issuer, record.id)

        transition = "approved" if outcome == VerificationState.VERIFIED else "rejected"
        VERIFICATION_TRANSITIONS.labels(
            domain=self.domain.value, transition=transition
        ).inc()
        PENDING_VERIFICATIONS.labels(domain=self.domain.value).dec()
        logger.info(
            "Verification %s domain=%s id=%d issuer=%s reason=%s",
            transition,
            self.domain,
            record.id,
            actor,
            reason,
            extra={"actor": actor, "domain": self.domain.value, "record_id": record.id},
        )
        return updated

    def list_pending_for_issuer(
        self, actor: str, issuer: str | None = None
    ) -> list[CredentialRecord]:
        """Records awaiting ``issuer``'s decision, oldest id first.

        An issuer lists its own queue; an Admin may name any issuer.
        """
        issuer = issuer or actor
        with self._store.begin(read_only=True) as uow:
            authorize(
                Operation.LIST_PENDING,
                load_actor(uow.users, actor),
                domain=self.domain,
                target=issuer,
            )
            pending: list[CredentialRecord] = []
            for record_id in uow.pending.list_ids(self.domain, issuer):
                record = uow.records.get(self.domain, record_id)
                if record is None:
                    raise RuntimeError(
                        f"pending index references missing record {record_id}"
                    )
                pending.append(record)
        return pending

    def sync_pending_gauge(self) -> int:
        """Set the pending gauge from the stored index and return the count.

        Transitions only move the gauge by one, so a process that starts
        over an existing database seeds it here first.
        """
        with self._store.begin(read_only=True) as uow:
            count = sum(len(ids) for ids in uow.pending.entries(self.domain).values())
        PENDING_VERIFICATIONS.labels(domain=self.domain.value).set(count)
        return count

    def pending_count(self, actor: str, issuer: str | None = None) -> int:
        issuer = issuer or actor
        with self._store.begin(read_only=True) as uow:
            authorize(
                Operation.LIST_PENDING,
                load_actor(uow.users, actor),
                domain=self.domain,
                target=issuer,
            )
            return len(uow.pending.list_ids(self.domain, issuer))
