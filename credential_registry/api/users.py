"""Identity & role endpoints.

- POST  /v1/users                        register a profile (Admin)
- GET   /v1/users                        principals (Admin; ?role= for anyone)
- GET   /v1/users/stats                  per-role head count (Admin)
- PATCH /v1/users/me                     self-service profile edit
- GET   /v1/users/{principal}            public profile
- GET   /v1/users/{principal}/role       public role lookup
- POST  /v1/users/{principal}/deactivate (Admin)
- POST  /v1/users/{principal}/reactivate (Admin)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel

from credential_registry.api.dependencies import Principal, Registry
from credential_registry.models.user import Role, UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/users", tags=["users"])


class UserOut(BaseModel):
    principal: str
    role: Role
    display_name: str
    organization_name: str | None
    email: str | None
    active: bool
    registered_at: int
    updated_at: int

    @classmethod
    def of(cls, profile: UserProfile) -> UserOut:
        return cls(
            principal=profile.principal,
            role=profile.role,
            display_name=profile.display_name,
            organization_name=profile.organization_name,
            email=profile.email,
            active=profile.active,
            registered_at=profile.registered_at,
            updated_at=profile.updated_at,
        )


class UserCreateIn(BaseModel):
    principal: str
    role: str
    display_name: str
    organization_name: str | None = None
    email: str | None = None


class ProfileUpdateIn(BaseModel):
    display_name: str | None = None
    organization_name: str | None = None
    email: str | None = None


class RoleOut(BaseModel):
    principal: str
    role: Role


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(body: UserCreateIn, actor: Principal, reg: Registry) -> UserOut:
    profile = reg.identity.register_user(
        actor,
        body.principal,
        body.role,
        body.display_name,
        organization_name=body.organization_name,
        email=body.email,
    )
    return UserOut.of(profile)


@router.get("", response_model=list[str])
def list_users(actor: Principal, reg: Registry, role: Role | None = None) -> list[str]:
    if role is not None:
        return reg.identity.list_by_role(role)
    return reg.identity.list_all(actor)


@router.get("/stats")
def user_stats(actor: Principal, reg: Registry) -> dict[str, int]:
    return reg.identity.role_counts(actor)


@router.patch("/me", response_model=UserOut)
def update_own_profile(body: ProfileUpdateIn, actor: Principal, reg: Registry) -> UserOut:
    profile = reg.identity.update_profile(
        actor,
        display_name=body.display_name,
        organization_name=body.organization_name,
        email=body.email,
    )
    return UserOut.of(profile)


@router.get("/{principal}", response_model=UserOut)
def get_profile(principal: str, reg: Registry) -> UserOut:
    return UserOut.of(reg.identity.get_profile(principal))


@router.get("/{principal}/role", response_model=RoleOut)
def get_role(principal: str, reg: Registry) -> RoleOut:
    return RoleOut(principal=principal, role=reg.identity.get_role(principal))


@router.post("/{principal}/deactivate", response_model=UserOut)
def deactivate_user(principal: str, actor: Principal, reg: Registry) -> UserOut:
    return UserOut.of(reg.identity.deactivate(actor, principal))


@router.post("/{principal}/reactivate", response_model=UserOut)
def reactivate_user(principal: str, actor: Principal, reg: Registry) -> UserOut:
    return UserOut.of(reg.identity.reactivate(actor, principal))
