from __future__ import annotations

from typing import Protocol

from credential_registry.models.user import Role, UserProfile


class UserProfileRepo(Protocol):
    def get(self, principal: str) -> UserProfile | None: ...
    def add(self, profile: UserProfile) -> None: ...
    def update(self, profile: UserProfile) -> None: ...
    def list_all(self) -> list[UserProfile]: ...
    def list_by_role(self, role: Role) -> list[UserProfile]: ...
    def count_by_role(self) -> dict[Role, int]: ...


class InMemoryUserProfileRepo:
    def __init__(self) -> None:
        # Insertion order doubles as registration order.
        self._by_principal: dict[str, UserProfile] = {}

    def get(self, principal: str) -> UserProfile | None:
        return self._by_principal.get(principal)

    def add(self, profile: UserProfile) -> None:
        if profile.principal in self._by_principal:
            raise ValueError("principal already registered")
        self._by_principal[profile.principal] = profile

    def update(self, profile: UserProfile) -> None:
        if profile.principal not in self._by_principal:
            raise KeyError("profile not found")
        self._by_principal[profile.principal] = profile

    def list_all(self) -> list[UserProfile]:
        return list(self._by_principal.values())

    def list_by_role(self, role: Role) -> list[UserProfile]:
        return [p for p in self._by_principal.values() if p.role == role]

    def count_by_role(self) -> dict[Role, int]:
        counts = dict.fromkeys(Role, 0)
        for profile in self._by_principal.values():
            counts[profile.role] += 1
        return counts

    def snapshot(self) -> dict[str, UserProfile]:
        return dict(self._by_principal)

    def restore(self, snapshot: dict[str, UserProfile]) -> None:
        self._by_principal = snapshot
