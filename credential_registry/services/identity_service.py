"""Identity & Role Registry.

Sole source of truth for "who can act as what".  Profiles are created by
an Admin (or once, by the bootstrap), toggled active/inactive by an Admin,
and edited by their owner for the non-role fields.  Nothing is ever
deleted and the role never changes.
"""

from __future__ import annotations

import logging

from credential_registry.core.clock import Clock, epoch_now
from credential_registry.core.errors import (
    AlreadyRegisteredError,
    InvalidPayloadError,
    InvalidStateError,
    NotRegisteredError,
)
from credential_registry.core.policy import Operation, authorize, load_actor
from credential_registry.models.user import Role, UserProfile
from credential_registry.repos.unit_of_work import Store

logger = logging.getLogger(__name__)


def clean_principal(principal: str, field: str = "principal") -> str:
    principal = (principal or "").strip()
    if not principal:
        raise InvalidPayloadError(field, "must be non-empty")
    return principal


def _clean_name(display_name: str) -> str:
    display_name = (display_name or "").strip()
    if not display_name:
        raise InvalidPayloadError("display_name", "must be non-empty")
    return display_name


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def _normalize_email(email: str | None) -> str | None:
    email = _optional_text(email)
    if email is None:
        return None
    email = email.lower()
    if "@" not in email:
        raise InvalidPayloadError("email", "must be an email address")
    return email


def _parse_role(role: Role | str) -> Role:
    try:
        return Role(role)
    except ValueError:
        raise InvalidPayloadError("role", f"unknown role {role!r}") from None


class IdentityRegistry:
    def __init__(self, store: Store, *, clock: Clock = epoch_now) -> None:
        self._store = store
        self._clock = clock

    # --- writes ---

    def bootstrap_admin(self, principal: str, display_name: str) -> UserProfile:
        """Create the first Admin.  Only possible while no Admin exists."""
        principal = clean_principal(principal)
        display_name = _clean_name(display_name)
        with self._store.begin() as uow:
            if uow.users.list_by_role(Role.ADMIN):
                raise AlreadyRegisteredError("an admin is already registered")
            if uow.users.get(principal) is not None:
                raise AlreadyRegisteredError(
                    f"principal {principal!r} is already registered"
                )
            profile = UserProfile.new(
                principal=principal,
                role=Role.ADMIN,
                display_name=display_name,
                now=self._clock(),
            )
            uow.users.add(profile)
        logger.info("Bootstrapped admin principal=%s", principal)
        return profile

    def register_user(
        self,
        actor: str,
        principal: str,
        role: Role | str,
        display_name: str,
        organization_name: str | None = None,
        email: str | None = None,
    ) -> UserProfile:
        with self._store.begin() as uow:
            authorize(Operation.REGISTER_USER, load_actor(uow.users, actor))

            principal = clean_principal(principal)
            role = _parse_role(role)
            display_name = _clean_name(display_name)
            email = _normalize_email(email)

            if uow.users.get(principal) is not None:
                logger.warning("Rejected duplicate registration principal=%s", principal)
                raise AlreadyRegisteredError(
                    f"principal {principal!r} is already registered"
                )
            profile = UserProfile.new(
                principal=principal,
                role=role,
                display_name=display_name,
                organization_name=_optional_text(organization_name),
                email=email,
                now=self._clock(),
            )
            uow.users.add(profile)

        logger.info(
            "Registered user principal=%s role=%s by=%s",
            principal,
            role,
            actor,
            extra={"actor": actor},
        )
        return profile

    def deactivate(self, actor: str, principal: str) -> UserProfile:
        return self._set_active(actor, principal, active=False)

    def reactivate(self, actor: str, principal: str) -> UserProfile:
        return self._set_active(actor, principal, active=True)

    def _set_active(self, actor: str, principal: str, *, active: bool) -> UserProfile:
        with self._store.begin() as uow:
            authorize(Operation.SET_USER_ACTIVE, load_actor(uow.users, actor))
            profile = uow.users.get(principal)
            if profile is None:
                raise NotRegisteredError(f"principal {principal!r} is not registered")
            if profile.active == active:
                # Already in the target state: silent success.
                return profile
            if not active and profile.role == Role.ADMIN:
                others = [
                    p
                    for p in uow.users.list_by_role(Role.ADMIN)
                    if p.active and p.principal != principal
                ]
                if not others:
                    raise InvalidStateError(
                        f"cannot deactivate {principal!r}, the last active admin"
                    )
            updated = profile.with_active(active, now=self._clock())
            uow.users.update(updated)

        logger.info(
            "%s user principal=%s by=%s",
            "Reactivated" if active else "Deactivated",
            principal,
            actor,
            extra={"actor": actor},
        )
        return updated

    def update_profile(
        self,
        actor: str,
        *,
        display_name: str | None = None,
        organization_name: str | None = None,
        email: str | None = None,
    ) -> UserProfile:
        """Self-service edit of the non-role fields.

        ``None`` leaves a field unchanged; an empty string clears the
        optional ones.
        """
        with self._store.begin() as uow:
            authorize(
                Operation.UPDATE_OWN_PROFILE,
                load_actor(uow.users, actor),
                target=actor,
            )
            profile = uow.users.get(actor)
            assert profile is not None  # authorize() rejects unregistered actors
            updated = profile.with_details(
                display_name=(
                    profile.display_name
                    if display_name is None
                    else _clean_name(display_name)
                ),
                organization_name=(
                    profile.organization_name
                    if organization_name is None
                    else _optional_text(organization_name)
                ),
                email=profile.email if email is None else _normalize_email(email),
                now=self._clock(),
            )
            uow.users.update(updated)
        logger.info("Updated profile principal=%s", actor, extra={"actor": actor})
        return updated

    # --- reads ---

    def get_profile(self, principal: str) -> UserProfile:
        with self._store.begin(read_only=True) as uow:
            profile = uow.users.get(principal)
        if profile is None:
            raise NotRegisteredError(f"principal {principal!r} is not registered")
        return profile

    def get_role(self, principal: str) -> Role:
        return self.get_profile(principal).role

    def list_by_role(self, role: Role) -> list[str]:
        with self._store.begin(read_only=True) as uow:
            return [p.principal for p in uow.users.list_by_role(role)]

    def list_all(self, actor: str) -> list[str]:
        return [p.principal for p in self.list_profiles(actor)]

    def list_profiles(self, actor: str, role: Role | None = None) -> list[UserProfile]:
        with self._store.begin(read_only=True) as uow:
            authorize(Operation.LIST_USERS, load_actor(uow.users, actor))
            if role is None:
                return uow.users.list_all()
            return uow.users.list_by_role(role)

    def role_counts(self, actor: str) -> dict[str, int]:
        """Per-role head count plus ``total``, for the admin dashboard."""
        with self._store.begin(read_only=True) as uow:
            authorize(Operation.LIST_USERS, load_actor(uow.users, actor))
            counts = uow.users.count_by_role()
        result = {role.value: n for role, n in counts.items()}
        result["total"] = sum(counts.values())
        return result
