from __future__ import annotations

from datetime import date

import pytest

from credential_registry.core.errors import UnauthorizedError
from credential_registry.models.domain import Domain
from credential_registry.models.payloads import EmploymentPayload
from credential_registry.models.user import Role
from credential_registry.services.aggregation_service import RecordCounts
from credential_registry.services.registry import CredentialRegistry
from tests.conftest import ADMIN, ISSUER, SUBJECT, degree, enroll, make_issuer

EDU = Domain.EDUCATION


def test_subject_principals(education: CredentialRegistry) -> None:
    enroll(education, "bob", Role.SUBJECT)
    assert sorted(education.aggregation.list_all_subject_principals()) == ["alice", "bob"]


def test_all_records_in_id_order_across_subjects(education: CredentialRegistry) -> None:
    enroll(education, "bob", Role.SUBJECT)
    store = education.records[EDU]
    store.create_record(ISSUER, "bob", degree())
    store.create_record(ISSUER, SUBJECT, degree())
    store.create_record(ISSUER, "bob", degree(degree="MSc"))

    records = education.aggregation.list_all_records_across_subjects(ADMIN, EDU)
    assert [(r.id, r.subject) for r in records] == [(1, "bob"), (2, "alice"), (3, "bob")]
    assert education.aggregation.list_all_records_across_subjects(ADMIN, Domain.EMPLOYMENT) == []


@pytest.mark.parametrize("actor", [SUBJECT, ISSUER, "ghost"])
def test_all_records_is_admin_only(education: CredentialRegistry, actor: str) -> None:
    with pytest.raises(UnauthorizedError):
        education.aggregation.list_all_records_across_subjects(actor, EDU)


def test_subject_summary(education: CredentialRegistry) -> None:
    make_issuer(education, Domain.EMPLOYMENT, "globex", "Globex")
    store, flow = education.records[EDU], education.workflows[EDU]
    first = store.create_record(ISSUER, SUBJECT, degree()).id
    second = store.create_record(ISSUER, SUBJECT, degree(degree="MSc")).id
    store.create_record(ISSUER, SUBJECT, degree(degree="PhD"))
    flow.request_verification(SUBJECT, first)
    flow.approve_verification(ISSUER, first)
    flow.request_verification(SUBJECT, second)
    education.records[Domain.EMPLOYMENT].create_record(
        "globex", SUBJECT, EmploymentPayload(position="Engineer", start_date=date(2024, 2, 1))
    )

    summary = education.aggregation.subject_summary(SUBJECT, SUBJECT)
    assert summary[EDU] == RecordCounts(total=3, unverified=1, pending=1, verified=1, rejected=0)
    assert summary[Domain.EMPLOYMENT] == RecordCounts(total=1, unverified=1)
    assert summary[Domain.ACHIEVEMENT] == RecordCounts()

    # an issuer only counts what it authored
    issuer_view = education.aggregation.subject_summary("globex", SUBJECT)
    assert issuer_view[EDU].total == 0
    assert issuer_view[Domain.EMPLOYMENT].total == 1


def test_subject_summary_rejects_outsiders(education: CredentialRegistry) -> None:
    enroll(education, "bob", Role.SUBJECT)
    education.records[EDU].create_record(ISSUER, SUBJECT, degree())

    with pytest.raises(UnauthorizedError):
        education.aggregation.subject_summary("bob", SUBJECT)
    assert education.aggregation.subject_summary(ADMIN, SUBJECT)[EDU].total == 1
    assert education.aggregation.subject_summary("bob", "bob")[EDU].total == 0


def test_check_pending_index_detects_divergence(education: CredentialRegistry) -> None:
    rid = education.records[EDU].create_record(ISSUER, SUBJECT, degree()).id
    education.workflows[EDU].request_verification(SUBJECT, rid)
    assert education.aggregation.check_pending_index(ADMIN, EDU) == []

    # corrupt the index behind the engine's back
    education.store.pending.remove(EDU, ISSUER, rid)  # type: ignore[attr-defined]
    education.store.pending.add(EDU, ISSUER, 99)  # type: ignore[attr-defined]

    problems = education.aggregation.check_pending_index(ADMIN, EDU)
    assert problems == [
        "education/1 pending but not indexed for acme-university",
        "education/99 indexed for acme-university but not pending",
    ]
