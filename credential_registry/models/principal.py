from __future__ import annotations

from dataclasses import dataclass

from credential_registry.models.user import Role, UserProfile


@dataclass(frozen=True, slots=True)
class Actor:
    """The caller of an engine operation, resolved against the registry.

    The transport layer authenticates the principal; the role and active
    flag always come from the stored profile, never from the token.
    An unregistered principal resolves to an Actor with ``role=None``.
    """

    principal: str
    role: Role | None = None
    active: bool = False

    @staticmethod
    def from_profile(profile: UserProfile) -> Actor:
        return Actor(
            principal=profile.principal,
            role=profile.role,
            active=profile.active,
        )

    @property
    def is_registered(self) -> bool:
        return self.role is not None

    def has_role(self, role: Role) -> bool:
        return self.role == role

    def has_any_role(self, roles: frozenset[Role]) -> bool:
        return self.role in roles

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
