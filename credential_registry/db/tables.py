"""SQLAlchemy table definitions.

These map to the frozen dataclass models in credential_registry/models/.
The models stay as-is; these tables are the persistence layer and the
sql_* repos convert between rows and dataclasses.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from credential_registry.db.engine import Base


class UserProfileRow(Base):
    __tablename__ = "user_profiles"

    principal: Mapped[str] = mapped_column(String(256), primary_key=True)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, index=True
    )  # admin|subject|institution|certifier|employer|organizer
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    organization_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class IssuerRegistrationRow(Base):
    __tablename__ = "issuer_registrations"

    domain: Mapped[str] = mapped_column(String(32), primary_key=True)
    principal: Mapped[str] = mapped_column(String(256), primary_key=True)
    org_name: Mapped[str] = mapped_column(String(255), nullable=False)
    registration_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    org_metadata: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class RecordCounterRow(Base):
    """Last id handed out per domain; locked while allocating."""

    __tablename__ = "record_counters"

    domain: Mapped[str] = mapped_column(String(32), primary_key=True)
    last_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CredentialRecordRow(Base):
    __tablename__ = "credential_records"
    __table_args__ = (
        Index("ix_credential_records_domain_subject", "domain", "subject"),
    )

    domain: Mapped[str] = mapped_column(String(32), primary_key=True)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    subject: Mapped[str] = mapped_column(String(256), nullable=False)
    issuer: Mapped[str] = mapped_column(String(256), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    document_ref: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str] = mapped_column(
        String(32), nullable=False, default="unverified"
    )  # unverified|pending_verification|verified|rejected
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class PendingVerificationRow(Base):
    __tablename__ = "pending_verifications"
    __table_args__ = (
        ForeignKeyConstraint(
            ["domain", "record_id"],
            ["credential_records.domain", "credential_records.id"],
        ),
        Index("ix_pending_verifications_domain_issuer", "domain", "issuer"),
    )

    domain: Mapped[str] = mapped_column(String(32), primary_key=True)
    record_id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=False
    )
    issuer: Mapped[str] = mapped_column(String(256), nullable=False)
