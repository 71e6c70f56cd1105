"""Shared FastAPI dependencies.

``require_principal`` authenticates the caller and returns its principal
string.  Authorization happens in the engine, which resolves the
principal's role and status from the identity registry.
"""

from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from credential_registry.core.config import SETTINGS
from credential_registry.models.domain import Domain
from credential_registry.services import token_service
from credential_registry.services.issuer_service import IssuerLedger
from credential_registry.services.record_service import RecordStore
from credential_registry.services.registry import (
    CredentialRegistry,
    build_registry,
    create_store,
)
from credential_registry.services.workflow_service import VerificationWorkflow

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token", auto_error=True)

# Module-level singleton, shared by every router and by main's lifespan.
registry: CredentialRegistry = build_registry(create_store(SETTINGS))


def get_registry() -> CredentialRegistry:
    return registry


def require_principal(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> str:
    """Validate the bearer token and return its ``sub`` claim."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = str(claims["sub"]).strip()
    if not principal:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.debug("Token validated for principal=%s", principal)
    return principal


Principal = Annotated[str, Depends(require_principal)]
Registry = Annotated[CredentialRegistry, Depends(get_registry)]


def get_issuer_ledger(domain: Domain, reg: Registry) -> IssuerLedger:
    return reg.issuers[domain]


def get_record_store(domain: Domain, reg: Registry) -> RecordStore:
    return reg.records[domain]


def get_workflow(domain: Domain, reg: Registry) -> VerificationWorkflow:
    return reg.workflows[domain]
