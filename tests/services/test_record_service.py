from __future__ import annotations

from datetime import date

import pytest
from prometheus_client import REGISTRY

from credential_registry.core.errors import (
    InvalidPayloadError,
    NotRegisteredError,
    RecordNotFoundError,
    RoleMismatchError,
    UnauthorizedError,
)
from credential_registry.models.domain import Domain
from credential_registry.models.payloads import CertificationPayload
from credential_registry.models.record import VerificationState
from credential_registry.models.user import Role
from credential_registry.services.registry import CredentialRegistry
from tests.conftest import (
    ADMIN,
    FIXED_NOW,
    ISSUER,
    SUBJECT,
    degree,
    enroll,
    make_issuer,
)

EDU = Domain.EDUCATION


def test_create_record_starts_unverified(education: CredentialRegistry) -> None:
    record = education.records[EDU].create_record(
        ISSUER, SUBJECT, degree(), document_ref="  sha256:abc  "
    )
    assert record.id == 1
    assert record.domain == EDU
    assert record.subject == SUBJECT
    assert record.issuer == ISSUER
    assert record.state == VerificationState.UNVERIFIED
    assert record.document_ref == "sha256:abc"
    assert record.created_at == FIXED_NOW


def test_ids_are_sequential_per_domain(education: CredentialRegistry) -> None:
    make_issuer(education, Domain.CERTIFICATION, "certco", "CertCo")
    store = education.records[EDU]
    assert [store.create_record(ISSUER, SUBJECT, degree()).id for _ in range(3)] == [1, 2, 3]

    cert = education.records[Domain.CERTIFICATION].create_record(
        "certco", SUBJECT, CertificationPayload(name="CKA", issue_date=date(2025, 3, 1))
    )
    assert cert.id == 1


def test_blank_document_ref_stored_as_absent(education: CredentialRegistry) -> None:
    record = education.records[EDU].create_record(ISSUER, SUBJECT, degree(), "   ")
    assert record.document_ref is None


def test_unregistered_issuer_cannot_create(engine: CredentialRegistry) -> None:
    enroll(engine, SUBJECT, Role.SUBJECT)
    enroll(engine, "acme", Role.INSTITUTION)  # role but no ledger entry
    with pytest.raises(NotRegisteredError):
        engine.records[EDU].create_record("acme", SUBJECT, degree())
    assert engine.records[EDU].count() == 0


def test_issuer_of_other_domain_cannot_create(education: CredentialRegistry) -> None:
    make_issuer(education, Domain.CERTIFICATION, "certco", "CertCo")
    with pytest.raises(NotRegisteredError):
        education.records[EDU].create_record("certco", SUBJECT, degree())
    with pytest.raises(RoleMismatchError):
        education.issuers[EDU].register_issuer("certco", "CertCo", "REG-X")


def test_deactivated_issuer_cannot_create(education: CredentialRegistry) -> None:
    education.identity.deactivate(ADMIN, ISSUER)
    with pytest.raises(UnauthorizedError):
        education.records[EDU].create_record(ISSUER, SUBJECT, degree())


def test_subject_must_be_registered(education: CredentialRegistry) -> None:
    with pytest.raises(NotRegisteredError):
        education.records[EDU].create_record(ISSUER, "ghost", degree())
    assert education.records[EDU].count() == 0


def test_subject_must_be_active_subject(education: CredentialRegistry) -> None:
    enroll(education, "bob", Role.SUBJECT)
    education.identity.deactivate(ADMIN, "bob")
    with pytest.raises(UnauthorizedError):
        education.records[EDU].create_record(ISSUER, "bob", degree())
    with pytest.raises(UnauthorizedError):
        education.records[EDU].create_record(ISSUER, ADMIN, degree())


def test_invalid_payload_persists_nothing(education: CredentialRegistry) -> None:
    store = education.records[EDU]
    with pytest.raises(InvalidPayloadError) as exc:
        store.create_record(ISSUER, SUBJECT, degree(end_date=date(2019, 1, 1)))
    assert exc.value.field == "end_date"
    assert store.count() == 0

    # the failed attempt did not burn an id
    assert store.create_record(ISSUER, SUBJECT, degree()).id == 1


def test_payload_type_must_match_domain(education: CredentialRegistry) -> None:
    with pytest.raises(InvalidPayloadError) as exc:
        education.records[EDU].create_record(
            ISSUER, SUBJECT, CertificationPayload(name="CKA", issue_date=date(2025, 3, 1))
        )
    assert exc.value.field == "payload"


def test_create_counts_metric(education: CredentialRegistry) -> None:
    labels = {"domain": "education"}
    before = REGISTRY.get_sample_value("credential_records_created_total", labels) or 0.0
    education.records[EDU].create_record(ISSUER, SUBJECT, degree())
    with pytest.raises(NotRegisteredError):
        education.records[EDU].create_record(ISSUER, "ghost", degree())
    after = REGISTRY.get_sample_value("credential_records_created_total", labels) or 0.0
    assert after - before == 1


# ---- reads ----


def test_get_record_visibility(education: CredentialRegistry) -> None:
    make_issuer(education, EDU, "other-uni", "Other U")
    enroll(education, "bob", Role.SUBJECT)
    record = education.records[EDU].create_record(ISSUER, SUBJECT, degree())
    store = education.records[EDU]

    for reader in (SUBJECT, ISSUER, ADMIN):
        assert store.get_record(reader, record.id) == record
    for outsider in ("bob", "other-uni", "ghost"):
        with pytest.raises(UnauthorizedError):
            store.get_record(outsider, record.id)


def test_get_missing_record(education: CredentialRegistry) -> None:
    with pytest.raises(RecordNotFoundError):
        education.records[EDU].get_record(ADMIN, 99)


def test_list_records_of_subject_filters_per_reader(education: CredentialRegistry) -> None:
    make_issuer(education, EDU, "other-uni", "Other U")
    enroll(education, "bob", Role.SUBJECT)
    store = education.records[EDU]
    mine = store.create_record(ISSUER, SUBJECT, degree())
    theirs = store.create_record("other-uni", SUBJECT, degree(degree="MSc"))
    store.create_record(ISSUER, "bob", degree())

    assert store.list_records_of_subject(SUBJECT, SUBJECT) == [mine, theirs]
    assert store.list_records_of_subject(ADMIN, SUBJECT) == [mine, theirs]
    assert store.list_records_of_subject(ISSUER, SUBJECT) == [mine]
    assert store.list_records_of_subject("other-uni", SUBJECT) == [theirs]
    assert store.list_records_of_subject(ADMIN, "nobody") == []


@pytest.mark.parametrize("outsider", ["bob", "ghost", "other-uni"])
def test_list_records_of_subject_rejects_outsiders(
    education: CredentialRegistry, outsider: str
) -> None:
    enroll(education, "bob", Role.SUBJECT)
    make_issuer(education, EDU, "other-uni", "Other U")
    education.records[EDU].create_record(ISSUER, SUBJECT, degree())

    with pytest.raises(UnauthorizedError):
        education.records[EDU].list_records_of_subject(outsider, SUBJECT)


def test_subject_lists_own_empty_history(education: CredentialRegistry) -> None:
    assert education.records[EDU].list_records_of_subject(SUBJECT, SUBJECT) == []


def test_deactivated_parties_keep_read_access(education: CredentialRegistry) -> None:
    store = education.records[EDU]
    record = store.create_record(ISSUER, SUBJECT, degree())
    education.identity.deactivate(ADMIN, SUBJECT)
    education.identity.deactivate(ADMIN, ISSUER)

    for reader in (SUBJECT, ISSUER):
        assert store.get_record(reader, record.id) == record
        assert store.list_records_of_subject(reader, SUBJECT) == [record]
