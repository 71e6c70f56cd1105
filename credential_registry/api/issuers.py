"""Issuer registration endpoints, one set per domain.

- POST /v1/{domain}/issuers              the caller registers itself
- GET  /v1/{domain}/issuers              all registered issuers
- GET  /v1/{domain}/issuers/{principal}  one registration (404 if none)
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from credential_registry.api.dependencies import Principal, get_issuer_ledger
from credential_registry.models.domain import Domain
from credential_registry.models.issuer import IssuerRegistration
from credential_registry.services.issuer_service import IssuerLedger

router = APIRouter(prefix="/v1/{domain}/issuers", tags=["issuers"])

Ledger = Annotated[IssuerLedger, Depends(get_issuer_ledger)]


class IssuerRegisterIn(BaseModel):
    org_name: str
    registration_ref: str
    org_metadata: dict[str, str] = Field(default_factory=dict)


class IssuerOut(BaseModel):
    domain: Domain
    principal: str
    org_name: str
    registration_ref: str
    org_metadata: dict[str, str]
    registered_at: int

    @classmethod
    def of(cls, registration: IssuerRegistration) -> IssuerOut:
        return cls(
            domain=registration.domain,
            principal=registration.principal,
            org_name=registration.org_name,
            registration_ref=registration.registration_ref,
            org_metadata=dict(registration.org_metadata),
            registered_at=registration.registered_at,
        )


@router.post("", response_model=IssuerOut, status_code=status.HTTP_201_CREATED)
def register_issuer(body: IssuerRegisterIn, actor: Principal, ledger: Ledger) -> IssuerOut:
    registration = ledger.register_issuer(
        actor,
        body.org_name,
        body.registration_ref,
        org_metadata=body.org_metadata,
    )
    return IssuerOut.of(registration)


@router.get("", response_model=list[IssuerOut])
def list_issuers(ledger: Ledger) -> list[IssuerOut]:
    return [IssuerOut.of(r) for r in ledger.list_issuers()]


@router.get("/{principal}", response_model=IssuerOut)
def get_issuer(principal: str, ledger: Ledger) -> IssuerOut:
    return IssuerOut.of(ledger.get_registration(principal))
