"""Credential record endpoints, one set per domain.

- POST /v1/{domain}/records                      issuer creates a record
- GET  /v1/{domain}/records                      every record in the domain (Admin)
- GET  /v1/{domain}/records/{id}                 one record (subject, issuer, Admin)
- GET  /v1/{domain}/subjects/{subject}/records   a subject's records, filtered
                                                 to what the caller may read

The request body carries the payload as a JSON object; its shape depends
on the domain and is checked by the matching *PayloadIn model below.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ValidationError

from credential_registry.api.dependencies import (
    Principal,
    Registry,
    get_record_store,
)
from credential_registry.core.clock import epoch_now, utc_date
from credential_registry.core.errors import InvalidPayloadError
from credential_registry.models.domain import Domain
from credential_registry.models.payloads import (
    AchievementCategory,
    AchievementPayload,
    CertificationPayload,
    EducationLevel,
    EducationPayload,
    EmploymentPayload,
    Payload,
    payload_to_dict,
)
from credential_registry.models.record import CredentialRecord, VerificationState
from credential_registry.services.record_service import RecordStore

router = APIRouter(prefix="/v1/{domain}", tags=["records"])

Records = Annotated[RecordStore, Depends(get_record_store)]


# ---------------------------------------------------------------------------
# Payload input models
# ---------------------------------------------------------------------------


class EducationPayloadIn(BaseModel):
    degree: str
    start_date: date
    end_date: date
    field_of_study: str = ""
    level: EducationLevel | None = None
    credential_id: str | None = None

    def to_payload(self) -> EducationPayload:
        return EducationPayload(**self.model_dump())


class CertificationPayloadIn(BaseModel):
    name: str
    issue_date: date
    expiration_date: date | None = None
    credential_id: str | None = None
    credential_url: str | None = None

    def to_payload(self) -> CertificationPayload:
        return CertificationPayload(**self.model_dump())


class EmploymentPayloadIn(BaseModel):
    position: str
    start_date: date
    end_date: date | None = None
    location: str = ""
    description: str = ""

    def to_payload(self) -> EmploymentPayload:
        return EmploymentPayload(**self.model_dump())


class AchievementPayloadIn(BaseModel):
    title: str
    category: AchievementCategory
    event_date: date
    description: str = ""
    proof_url: str | None = None

    def to_payload(self) -> AchievementPayload:
        return AchievementPayload(**self.model_dump())


PAYLOAD_MODELS: dict[Domain, type[BaseModel]] = {
    Domain.EDUCATION: EducationPayloadIn,
    Domain.CERTIFICATION: CertificationPayloadIn,
    Domain.EMPLOYMENT: EmploymentPayloadIn,
    Domain.ACHIEVEMENT: AchievementPayloadIn,
}


def parse_payload(domain: Domain, raw: dict[str, Any]) -> Payload:
    """Build the domain's payload dataclass, or raise InvalidPayloadError."""
    try:
        model = PAYLOAD_MODELS[domain].model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "payload"
        raise InvalidPayloadError(field, first["msg"]) from None
    return model.to_payload()  # type: ignore[attr-defined]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class RecordCreateIn(BaseModel):
    subject: str
    payload: dict[str, Any]
    document_ref: str | None = None


class RecordOut(BaseModel):
    id: int
    domain: Domain
    subject: str
    issuer: str
    issuer_org_name: str | None
    payload: dict[str, Any]
    document_ref: str | None
    state: VerificationState
    rejection_reason: str | None
    created_at: int
    updated_at: int
    expired: bool | None = None  # certification only


def issuer_org_names(reg: Registry, domain: Domain) -> dict[str, str]:
    return {r.principal: r.org_name for r in reg.issuers[domain].list_issuers()}


def to_record_out(record: CredentialRecord, org_names: dict[str, str]) -> RecordOut:
    expired = None
    if isinstance(record.payload, CertificationPayload):
        expired = record.payload.is_expired(utc_date(epoch_now()))
    return RecordOut(
        id=record.id,
        domain=record.domain,
        subject=record.subject,
        issuer=record.issuer,
        issuer_org_name=org_names.get(record.issuer),
        payload=payload_to_dict(record.payload),
        document_ref=record.document_ref,
        state=record.state,
        rejection_reason=record.rejection_reason,
        created_at=record.created_at,
        updated_at=record.updated_at,
        expired=expired,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/records", response_model=RecordOut, status_code=status.HTTP_201_CREATED)
def create_record(
    domain: Domain,
    body: RecordCreateIn,
    actor: Principal,
    records: Records,
    reg: Registry,
) -> RecordOut:
    payload = parse_payload(domain, body.payload)
    record = records.create_record(
        actor, body.subject, payload, document_ref=body.document_ref
    )
    return to_record_out(record, issuer_org_names(reg, domain))


@router.get("/records", response_model=list[RecordOut])
def list_all_records(domain: Domain, actor: Principal, reg: Registry) -> list[RecordOut]:
    found = reg.aggregation.list_all_records_across_subjects(actor, domain)
    names = issuer_org_names(reg, domain)
    return [to_record_out(r, names) for r in found]


@router.get("/records/{record_id}", response_model=RecordOut)
def get_record(
    domain: Domain,
    record_id: int,
    actor: Principal,
    records: Records,
    reg: Registry,
) -> RecordOut:
    record = records.get_record(actor, record_id)
    return to_record_out(record, issuer_org_names(reg, domain))


@router.get("/subjects/{subject}/records", response_model=list[RecordOut])
def list_subject_records(
    domain: Domain,
    subject: str,
    actor: Principal,
    records: Records,
    reg: Registry,
) -> list[RecordOut]:
    found = records.list_records_of_subject(actor, subject)
    names = issuer_org_names(reg, domain)
    return [to_record_out(r, names) for r in found]
