"""Issuer Registration Ledger, one instance per domain.

Holding the domain's issuer role is necessary but not sufficient to author
records: the role-holder must also register here, supplying the
organization identity that is shown on every record it issues.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from credential_registry.core.clock import Clock, epoch_now
from credential_registry.core.errors import (
    AlreadyRegisteredIssuerError,
    InvalidPayloadError,
    NotRegisteredError,
)
from credential_registry.core.policy import Operation, authorize, load_actor
from credential_registry.models.domain import Domain
from credential_registry.models.issuer import IssuerRegistration
from credential_registry.repos.unit_of_work import Store

logger = logging.getLogger(__name__)


def _require(field: str, value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidPayloadError(field, "must be non-empty")
    return value


class IssuerLedger:
    def __init__(self, store: Store, domain: Domain, *, clock: Clock = epoch_now) -> None:
        self._store = store
        self.domain = domain
        self._clock = clock

    def register_issuer(
        self,
        actor: str,
        org_name: str,
        registration_ref: str,
        org_metadata: Mapping[str, str] | None = None,
    ) -> IssuerRegistration:
        with self._store.begin() as uow:
            authorize(
                Operation.REGISTER_ISSUER,
                load_actor(uow.users, actor),
                domain=self.domain,
            )
            if uow.issuers.get(self.domain, actor) is not None:
                logger.warning(
                    "Rejected duplicate issuer registration principal=%s domain=%s",
                    actor,
                    self.domain,
                )
                raise AlreadyRegisteredIssuerError(
                    f"principal {actor!r} is already a registered {self.domain} issuer"
                )
            registration = IssuerRegistration(
                domain=self.domain,
                principal=actor,
                org_name=_require("org_name", org_name),
                registration_ref=_require("registration_ref", registration_ref),
                org_metadata={str(k): str(v) for k, v in (org_metadata or {}).items()},
                registered_at=self._clock(),
            )
            uow.issuers.add(registration)

        logger.info(
            "Registered %s issuer principal=%s org=%s ref=%s",
            self.domain,
            actor,
            registration.org_name,
            registration.registration_ref,
            extra={"actor": actor, "domain": self.domain.value},
        )
        return registration

    def is_registered_issuer(self, principal: str) -> bool:
        with self._store.begin(read_only=True) as uow:
            return uow.issuers.get(self.domain, principal) is not None

    def get_registration(self, principal: str) -> IssuerRegistration:
        with self._store.begin(read_only=True) as uow:
            registration = uow.issuers.get(self.domain, principal)
        if registration is None:
            raise NotRegisteredError(
                f"principal {principal!r} is not a registered {self.domain} issuer"
            )
        return registration

    def list_issuers(self) -> list[IssuerRegistration]:
        with self._store.begin(read_only=True) as uow:
            return uow.issuers.list_by_domain(self.domain)
