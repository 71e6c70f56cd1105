"""SQLAlchemy implementation of UserProfileRepo."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from credential_registry.db.tables import UserProfileRow
from credential_registry.models.user import Role, UserProfile


class SqlUserProfileRepo:
    """Satisfies the UserProfileRepo Protocol on a unit-of-work session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, principal: str) -> UserProfile | None:
        row = self._session.get(UserProfileRow, principal)
        if row is None:
            return None
        return _row_to_profile(row)

    def add(self, profile: UserProfile) -> None:
        if self._session.get(UserProfileRow, profile.principal) is not None:
            raise ValueError("principal already registered")
        self._session.add(
            UserProfileRow(
                principal=profile.principal,
                role=profile.role.value,
                display_name=profile.display_name,
                organization_name=profile.organization_name,
                email=profile.email,
                active=profile.active,
                registered_at=profile.registered_at,
                updated_at=profile.updated_at,
            )
        )
        self._session.flush()

    def update(self, profile: UserProfile) -> None:
        row = self._session.get(UserProfileRow, profile.principal)
        if row is None:
            raise KeyError("profile not found")
        # role is immutable and never written back
        row.display_name = profile.display_name
        row.organization_name = profile.organization_name
        row.email = profile.email
        row.active = profile.active
        row.updated_at = profile.updated_at
        self._session.flush()

    def list_all(self) -> list[UserProfile]:
        stmt = select(UserProfileRow).order_by(
            UserProfileRow.registered_at, UserProfileRow.principal
        )
        return [_row_to_profile(r) for r in self._session.scalars(stmt)]

    def list_by_role(self, role: Role) -> list[UserProfile]:
        stmt = (
            select(UserProfileRow)
            .where(UserProfileRow.role == role.value)
            .order_by(UserProfileRow.registered_at, UserProfileRow.principal)
        )
        return [_row_to_profile(r) for r in self._session.scalars(stmt)]

    def count_by_role(self) -> dict[Role, int]:
        counts = dict.fromkeys(Role, 0)
        stmt = select(UserProfileRow.role, func.count()).group_by(UserProfileRow.role)
        for role, n in self._session.execute(stmt):
            counts[Role(role)] = n
        return counts


def _row_to_profile(row: UserProfileRow) -> UserProfile:
    return UserProfile(
        principal=row.principal,
        role=Role(row.role),
        display_name=row.display_name,
        organization_name=row.organization_name,
        email=row.email,
        active=row.active,
        registered_at=row.registered_at,
        updated_at=row.updated_at,
    )
