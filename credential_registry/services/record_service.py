"""Credential Record Store, one instance per domain.

Records are authored by a registered issuer about an active subject and
start out ``unverified``.  Payload and document reference never change
after creation; only the verification workflow moves the state.
"""

from __future__ import annotations

import logging

from credential_registry.core.clock import Clock, epoch_now, utc_date
from credential_registry.core.errors import (
    InvalidPayloadError,
    NotRegisteredError,
    RecordNotFoundError,
    UnauthorizedError,
)
from credential_registry.core.metrics import RECORDS_CREATED
from credential_registry.core.policy import Operation, authorize, load_actor, permits
from credential_registry.models.domain import Domain
from credential_registry.models.payloads import PAYLOAD_TYPES, Payload
from credential_registry.models.record import CredentialRecord
from credential_registry.models.user import Role
from credential_registry.repos.unit_of_work import Store

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, store: Store, domain: Domain, *, clock: Clock = epoch_now) -> None:
        self._store = store
        self.domain = domain
        self._clock = clock

    def create_record(
        self,
        actor: str,
        subject: str,
        payload: Payload,
        document_ref: str | None = None,
    ) -> CredentialRecord:
        now = self._clock()
        with self._store.begin() as uow:
            authorize(
                Operation.CREATE_RECORD,
                load_actor(uow.users, actor),
                domain=self.domain,
                registered_issuer=uow.issuers.get(self.domain, actor) is not None,
            )

            subject_profile = uow.users.get(subject)
            if subject_profile is None:
                raise NotRegisteredError(f"subject {subject!r} is not registered")
            if subject_profile.role != Role.SUBJECT:
                raise UnauthorizedError(
                    f"principal {subject!r} has role {subject_profile.role}, not subject"
                )
            if not subject_profile.active:
                raise UnauthorizedError(f"subject {subject!r} is deactivated")

            expected = PAYLOAD_TYPES[self.domain]
            if not isinstance(payload, expected):
                raise InvalidPayloadError(
                    "payload", f"{self.domain} records take {expected.__name__}"
                )
            payload.validate(utc_date(now))

            # Allocation and insert share this unit of work: a failure
            # after next_id() rolls the counter back with the insert.
            record = CredentialRecord.new(
                id=uow.records.next_id(self.domain),
                domain=self.domain,
                subject=subject,
                issuer=actor,
                payload=payload,
                document_ref=(document_ref or "").strip() or None,
                now=now,
            )
            uow.records.add(record)

        RECORDS_CREATED.labels(domain=self.domain.value).inc()
        logger.info(
            "Created %s record id=%d issuer=%s subject=%s",
            self.domain,
            record.id,
            actor,
            subject,
            extra={"actor": actor, "domain": self.domain.value, "record_id": record.id},
        )
        return record

    def get_record(self, actor: str, record_id: int) -> CredentialRecord:
        with self._store.begin(read_only=True) as uow:
            record = uow.records.get(self.domain, record_id)
            if record is None:
                raise RecordNotFoundError(f"{self.domain} record {record_id} not found")
            authorize(
                Operation.READ_RECORD,
                load_actor(uow.users, actor),
                domain=self.domain,
                subject=record.subject,
                issuer=record.issuer,
            )
        return record

    def list_records_of_subject(self, actor: str, subject: str) -> list[CredentialRecord]:
        """Records about ``subject`` that ``actor`` may read.

        The subject and Admins see everything; an issuer sees what it
        authored.  Anyone else, or an issuer with no record about
        ``subject``, gets UnauthorizedError.
        """
        with self._store.begin(read_only=True) as uow:
            caller = load_actor(uow.users, actor)
            records = uow.records.list_by_subject(self.domain, subject)
        readable = [
            r
            for r in records
            if permits(
                Operation.READ_RECORD,
                caller,
                domain=self.domain,
                subject=r.subject,
                issuer=r.issuer,
            )
        ]
        if not readable:
            authorize(
                Operation.READ_RECORD, caller, domain=self.domain, subject=subject
            )
        return readable

    def count(self) -> int:
        with self._store.begin(read_only=True) as uow:
            return uow.records.count(self.domain)
