"""Cross-domain subject views.

- GET /v1/subjects                      every registered subject principal
- GET /v1/subjects/{subject}/summary    per-domain record counts
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from credential_registry.api.dependencies import Principal, Registry
from credential_registry.models.domain import Domain

router = APIRouter(prefix="/v1/subjects", tags=["subjects"])


class RecordCountsOut(BaseModel):
    total: int
    unverified: int
    pending: int
    verified: int
    rejected: int


class SubjectSummaryOut(BaseModel):
    subject: str
    domains: dict[Domain, RecordCountsOut]
    total: int
    verified: int


@router.get("", response_model=list[str])
def list_subjects(_actor: Principal, reg: Registry) -> list[str]:
    return reg.aggregation.list_all_subject_principals()


@router.get("/{subject}/summary", response_model=SubjectSummaryOut)
def subject_summary(subject: str, actor: Principal, reg: Registry) -> SubjectSummaryOut:
    summary = reg.aggregation.subject_summary(actor, subject)
    domains = {
        domain: RecordCountsOut(
            total=c.total,
            unverified=c.unverified,
            pending=c.pending,
            verified=c.verified,
            rejected=c.rejected,
        )
        for domain, c in summary.items()
    }
    return SubjectSummaryOut(
        subject=subject,
        domains=domains,
        total=sum(c.total for c in summary.values()),
        verified=sum(c.verified for c in summary.values()),
    )
