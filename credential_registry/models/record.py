from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from credential_registry.models.domain import Domain
from credential_registry.models.payloads import Payload


class VerificationState(StrEnum):
    UNVERIFIED = "unverified"
    PENDING = "pending_verification"
    VERIFIED = "verified"  # absorbing
    REJECTED = "rejected"


# States from which the subject may ask for verification.
REQUESTABLE_STATES = frozenset({VerificationState.UNVERIFIED, VerificationState.REJECTED})


@dataclass(frozen=True, slots=True)
class CredentialRecord:
    id: int
    domain: Domain
    subject: str
    issuer: str
    payload: Payload
    document_ref: str | None = None
    state: VerificationState = VerificationState.UNVERIFIED
    rejection_reason: str | None = None
    created_at: int = 0
    updated_at: int = 0

    @staticmethod
    def new(
        *,
        id: int,
        domain: Domain,
        subject: str,
        issuer: str,
        payload: Payload,
        document_ref: str | None,
        now: int,
    ) -> CredentialRecord:
        return CredentialRecord(
            id=id,
            domain=domain,
            subject=subject,
            issuer=issuer,
            payload=payload,
            document_ref=document_ref,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_verified(self) -> bool:
        return self.state == VerificationState.VERIFIED

    def transition(
        self,
        state: VerificationState,
        *,
        now: int,
        rejection_reason: str | None = None,
    ) -> CredentialRecord:
        # Only the latest rejection reason is kept; any other state clears it.
        return replace(
            self,
            state=state,
            rejection_reason=rejection_reason,
            updated_at=now,
        )
