"""Verification workflow endpoints, one set per domain.

- POST /v1/{domain}/records/{id}/request-verification   subject asks
- POST /v1/{domain}/records/{id}/approve                issuer approves
- POST /v1/{domain}/records/{id}/reject                 issuer rejects
- GET  /v1/{domain}/pending[?issuer=]                   issuer queue
- GET  /v1/{domain}/pending/count[?issuer=]             queue size
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel

from credential_registry.api.dependencies import Principal, Registry, get_workflow
from credential_registry.api.records import RecordOut, issuer_org_names, to_record_out
from credential_registry.models.domain import Domain
from credential_registry.services.workflow_service import VerificationWorkflow

router = APIRouter(prefix="/v1/{domain}", tags=["verification"])

Workflow = Annotated[VerificationWorkflow, Depends(get_workflow)]


class RejectIn(BaseModel):
    reason: str | None = None


class PendingCountOut(BaseModel):
    domain: Domain
    issuer: str
    count: int


@router.post("/records/{record_id}/request-verification", response_model=RecordOut)
def request_verification(
    domain: Domain,
    record_id: int,
    actor: Principal,
    workflow: Workflow,
    reg: Registry,
) -> RecordOut:
    record = workflow.request_verification(actor, record_id)
    return to_record_out(record, issuer_org_names(reg, domain))


@router.post("/records/{record_id}/approve", response_model=RecordOut)
def approve_verification(
    domain: Domain,
    record_id: int,
    actor: Principal,
    workflow: Workflow,
    reg: Registry,
) -> RecordOut:
    record = workflow.approve_verification(actor, record_id)
    return to_record_out(record, issuer_org_names(reg, domain))


@router.post("/records/{record_id}/reject", response_model=RecordOut)
def reject_verification(
    domain: Domain,
    record_id: int,
    actor: Principal,
    workflow: Workflow,
    reg: Registry,
    body: Annotated[RejectIn | None, Body()] = None,
) -> RecordOut:
    reason = body.reason if body is not None else None
    record = workflow.reject_verification(actor, record_id, reason)
    return to_record_out(record, issuer_org_names(reg, domain))


@router.get("/pending", response_model=list[RecordOut])
def list_pending(
    domain: Domain,
    actor: Principal,
    workflow: Workflow,
    reg: Registry,
    issuer: str | None = None,
) -> list[RecordOut]:
    pending = workflow.list_pending_for_issuer(actor, issuer)
    names = issuer_org_names(reg, domain)
    return [to_record_out(r, names) for r in pending]


@router.get("/pending/count", response_model=PendingCountOut)
def pending_count(
    domain: Domain,
    actor: Principal,
    workflow: Workflow,
    issuer: str | None = None,
) -> PendingCountOut:
    count = workflow.pending_count(actor, issuer)
    return PendingCountOut(domain=domain, issuer=issuer or actor, count=count)
