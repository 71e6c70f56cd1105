from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum


class Role(StrEnum):
    ADMIN = "admin"
    SUBJECT = "subject"
    INSTITUTION = "institution"
    CERTIFIER = "certifier"
    EMPLOYER = "employer"
    ORGANIZER = "organizer"


@dataclass(frozen=True, slots=True)
class UserProfile:
    principal: str
    role: Role  # immutable after registration
    display_name: str
    organization_name: str | None = None
    email: str | None = None
    active: bool = True
    registered_at: int = 0
    updated_at: int = 0

    @staticmethod
    def new(
        *,
        principal: str,
        role: Role,
        display_name: str,
        organization_name: str | None = None,
        email: str | None = None,
        now: int,
    ) -> UserProfile:
        return UserProfile(
            principal=principal,
            role=role,
            display_name=display_name,
            organization_name=organization_name,
            email=email,
            active=True,
            registered_at=now,
            updated_at=now,
        )

    def with_active(self, active: bool, *, now: int) -> UserProfile:
        return replace(self, active=active, updated_at=now)

    def with_details(
        self,
        *,
        display_name: str,
        organization_name: str | None,
        email: str | None,
        now: int,
    ) -> UserProfile:
        return replace(
            self,
            display_name=display_name,
            organization_name=organization_name,
            email=email,
            updated_at=now,
        )
