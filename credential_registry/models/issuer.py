from __future__ import annotations

from dataclasses import dataclass, field

from credential_registry.models.domain import Domain


@dataclass(frozen=True, slots=True)
class IssuerRegistration:
    """Accredited-issuer record for one principal in one domain.

    Supplied by the issuer itself and immutable once written; its
    ``org_name`` is shown next to every record the issuer authors.
    """

    domain: Domain
    principal: str
    org_name: str
    registration_ref: str
    org_metadata: dict[str, str] = field(default_factory=dict)
    registered_at: int = 0
