from __future__ import annotations

from enum import StrEnum

from credential_registry.models.user import Role


class Domain(StrEnum):
    EDUCATION = "education"
    CERTIFICATION = "certification"
    EMPLOYMENT = "employment"
    ACHIEVEMENT = "achievement"

    @property
    def issuer_role(self) -> Role:
        return ISSUER_ROLES[self]


ISSUER_ROLES: dict[Domain, Role] = {
    Domain.EDUCATION: Role.INSTITUTION,
    Domain.CERTIFICATION: Role.CERTIFIER,
    Domain.EMPLOYMENT: Role.EMPLOYER,
    Domain.ACHIEVEMENT: Role.ORGANIZER,
}
