"""Central authorization policy.

Every engine operation is listed once in POLICY with the rule that gates
it.  Services call ``authorize()`` before touching state; no service
compares roles on its own.  The four domains share one table: rules that
depend on the domain (issuer role, issuer registration) are resolved from
the domain passed in at call time.

Evaluation order, first failure wins:

  1. actor has a profile                      -> Unauthorized
  2. actor is active (write operations only)  -> Unauthorized
  3. Admin override, where the rule allows it
  4. actor role in the rule's roles           -> Unauthorized
  5. actor role is the domain's issuer role   -> RoleMismatch
  6. actor registered as issuer in the domain -> NotRegistered
  7. relationship to the record or target     -> Unauthorized
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from credential_registry.core.errors import (
    NotRegisteredError,
    RegistryError,
    RoleMismatchError,
    UnauthorizedError,
)
from credential_registry.core.metrics import AUTHZ_DENIALS
from credential_registry.models.domain import Domain
from credential_registry.models.principal import Actor
from credential_registry.models.user import Role
from credential_registry.repos.user_repo import UserProfileRepo

logger = logging.getLogger(__name__)


class Operation(StrEnum):
    REGISTER_USER = "register_user"
    SET_USER_ACTIVE = "set_user_active"
    LIST_USERS = "list_users"
    UPDATE_OWN_PROFILE = "update_own_profile"
    REGISTER_ISSUER = "register_issuer"
    CREATE_RECORD = "create_record"
    READ_RECORD = "read_record"
    REQUEST_VERIFICATION = "request_verification"
    DECIDE_VERIFICATION = "decide_verification"
    LIST_PENDING = "list_pending"
    LIST_ALL_RECORDS = "list_all_records"


class Relationship(StrEnum):
    NONE = "none"
    SELF = "self"  # actor is the target principal
    SUBJECT = "subject"  # actor is the record's subject
    ISSUER = "issuer"  # actor is the record's issuer
    PARTY = "party"  # subject or issuer


@dataclass(frozen=True, slots=True)
class Rule:
    write: bool
    roles: frozenset[Role] = frozenset()  # empty = any registered role
    domain_issuer_role: bool = False
    registered_issuer: bool = False
    relationship: Relationship = Relationship.NONE
    admin_override: bool = False


_ADMIN_ONLY = frozenset({Role.ADMIN})

POLICY: Mapping[Operation, Rule] = MappingProxyType(
    {
        Operation.REGISTER_USER: Rule(write=True, roles=_ADMIN_ONLY),
        Operation.SET_USER_ACTIVE: Rule(write=True, roles=_ADMIN_ONLY),
        Operation.LIST_USERS: Rule(write=False, roles=_ADMIN_ONLY),
        Operation.UPDATE_OWN_PROFILE: Rule(write=True),
        Operation.REGISTER_ISSUER: Rule(write=True, domain_issuer_role=True),
        Operation.CREATE_RECORD: Rule(write=True, registered_issuer=True),
        Operation.READ_RECORD: Rule(
            write=False, relationship=Relationship.PARTY, admin_override=True
        ),
        Operation.REQUEST_VERIFICATION: Rule(
            write=True, relationship=Relationship.SUBJECT
        ),
        Operation.DECIDE_VERIFICATION: Rule(
            write=True, relationship=Relationship.ISSUER
        ),
        Operation.LIST_PENDING: Rule(
            write=False, relationship=Relationship.SELF, admin_override=True
        ),
        Operation.LIST_ALL_RECORDS: Rule(write=False, roles=_ADMIN_ONLY),
    }
)


def load_actor(users: UserProfileRepo, principal: str) -> Actor:
    """Resolve an authenticated principal to its registry-backed Actor."""
    profile = users.get(principal)
    if profile is None:
        return Actor(principal=principal)
    return Actor.from_profile(profile)


def _relationship_holds(
    relationship: Relationship,
    actor: Actor,
    *,
    subject: str | None,
    issuer: str | None,
    target: str | None,
) -> bool:
    me = actor.principal
    if relationship == Relationship.NONE:
        return True
    if relationship == Relationship.SELF:
        return target == me
    if relationship == Relationship.SUBJECT:
        return subject == me
    if relationship == Relationship.ISSUER:
        return issuer == me
    return me in (subject, issuer)


def _evaluate(
    operation: Operation,
    actor: Actor,
    *,
    domain: Domain | None,
    subject: str | None,
    issuer: str | None,
    target: str | None,
    registered_issuer: bool,
) -> RegistryError | None:
    rule = POLICY[operation]

    if not actor.is_registered:
        return UnauthorizedError(f"principal {actor.principal!r} is not registered")
    if rule.write and not actor.active:
        return UnauthorizedError(f"principal {actor.principal!r} is deactivated")
    if rule.admin_override and actor.is_admin():
        return None
    if rule.roles and not actor.has_any_role(rule.roles):
        required = "|".join(sorted(rule.roles))
        return UnauthorizedError(f"{operation} requires role {required}")
    if rule.domain_issuer_role:
        if domain is None:
            raise ValueError(f"{operation} needs a domain")
        if not actor.has_role(domain.issuer_role):
            return RoleMismatchError(
                f"{domain} issuers must have role {domain.issuer_role} "
                f"(actor has {actor.role})"
            )
    if rule.registered_issuer and not registered_issuer:
        return NotRegisteredError(
            f"principal {actor.principal!r} is not a registered {domain} issuer"
        )
    if not _relationship_holds(
        rule.relationship, actor, subject=subject, issuer=issuer, target=target
    ):
        return UnauthorizedError(
            f"{operation} requires the actor to be the {rule.relationship}"
        )
    return None


def authorize(
    operation: Operation,
    actor: Actor,
    *,
    domain: Domain | None = None,
    subject: str | None = None,
    issuer: str | None = None,
    target: str | None = None,
    registered_issuer: bool = False,
) -> None:
    """Raise the first violated precondition of ``operation`` for ``actor``."""
    error = _evaluate(
        operation,
        actor,
        domain=domain,
        subject=subject,
        issuer=issuer,
        target=target,
        registered_issuer=registered_issuer,
    )
    if error is None:
        return
    AUTHZ_DENIALS.labels(operation=operation.value, kind=error.kind).inc()
    logger.warning(
        "Access denied: actor=%s role=%s op=%s domain=%s reason=%s",
        actor.principal,
        actor.role,
        operation,
        domain,
        error.message,
        extra={"actor": actor.principal, "domain": domain},
    )
    raise error


def permits(
    operation: Operation,
    actor: Actor,
    *,
    domain: Domain | None = None,
    subject: str | None = None,
    issuer: str | None = None,
    target: str | None = None,
    registered_issuer: bool = False,
) -> bool:
    """Non-raising variant of authorize() for filtering listings."""
    return (
        _evaluate(
            operation,
            actor,
            domain=domain,
            subject=subject,
            issuer=issuer,
            target=target,
            registered_issuer=registered_issuer,
        )
        is None
    )
