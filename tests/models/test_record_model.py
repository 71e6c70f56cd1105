from __future__ import annotations

from credential_registry.models.domain import Domain
from credential_registry.models.record import (
    REQUESTABLE_STATES,
    CredentialRecord,
    VerificationState,
)
from credential_registry.models.user import Role
from tests.conftest import degree


def _record() -> CredentialRecord:
    return CredentialRecord.new(
        id=1,
        domain=Domain.EDUCATION,
        subject="alice",
        issuer="acme-university",
        payload=degree(),
        document_ref=None,
        now=100,
    )


def test_new_record_starts_unverified() -> None:
    record = _record()
    assert record.state == VerificationState.UNVERIFIED
    assert record.created_at == record.updated_at == 100
    assert record.rejection_reason is None
    assert record.is_verified is False


def test_transition_keeps_identity_and_payload() -> None:
    record = _record()
    moved = record.transition(VerificationState.PENDING, now=200)
    assert moved.state == VerificationState.PENDING
    assert (moved.id, moved.payload, moved.created_at) == (1, record.payload, 100)
    assert moved.updated_at == 200
    assert record.state == VerificationState.UNVERIFIED


def test_transition_out_of_rejected_clears_reason() -> None:
    rejected = _record().transition(
        VerificationState.REJECTED, now=200, rejection_reason="date mismatch"
    )
    assert rejected.rejection_reason == "date mismatch"
    again = rejected.transition(VerificationState.PENDING, now=300)
    assert again.rejection_reason is None


def test_requestable_states() -> None:
    assert REQUESTABLE_STATES == {VerificationState.UNVERIFIED, VerificationState.REJECTED}


def test_domain_issuer_roles() -> None:
    assert Domain.EDUCATION.issuer_role == Role.INSTITUTION
    assert Domain.CERTIFICATION.issuer_role == Role.CERTIFIER
    assert Domain.EMPLOYMENT.issuer_role == Role.EMPLOYER
    assert Domain.ACHIEVEMENT.issuer_role == Role.ORGANIZER
