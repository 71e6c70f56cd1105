"""create registry tables

Revision ID: 3b9e1c4d7a20
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c4d7a20"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

DOMAINS = ("education", "certification", "employment", "achievement")


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("principal", sa.String(length=256), primary_key=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("organization_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("registered_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    )
    op.create_index("ix_user_profiles_role", "user_profiles", ["role"])

    op.create_table(
        "issuer_registrations",
        sa.Column("domain", sa.String(length=32), primary_key=True),
        sa.Column("principal", sa.String(length=256), primary_key=True),
        sa.Column("org_name", sa.String(length=255), nullable=False),
        sa.Column("registration_ref", sa.String(length=255), nullable=False),
        sa.Column("org_metadata", sa.JSON(), nullable=False),
        sa.Column("registered_at", sa.BigInteger(), nullable=False),
    )

    counters = op.create_table(
        "record_counters",
        sa.Column("domain", sa.String(length=32), primary_key=True),
        sa.Column("last_id", sa.Integer(), nullable=False),
    )
    op.bulk_insert(counters, [{"domain": d, "last_id": 0} for d in DOMAINS])

    op.create_table(
        "credential_records",
        sa.Column("domain", sa.String(length=32), primary_key=True),
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("subject", sa.String(length=256), nullable=False),
        sa.Column("issuer", sa.String(length=256), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("document_ref", sa.Text(), nullable=True),
        sa.Column("state", sa.String(length=32), nullable=False),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("updated_at", sa.BigInteger(), nullable=False),
    )
    op.create_index(
        "ix_credential_records_domain_subject",
        "credential_records",
        ["domain", "subject"],
    )

    op.create_table(
        "pending_verifications",
        sa.Column("domain", sa.String(length=32), primary_key=True),
        sa.Column("record_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("issuer", sa.String(length=256), nullable=False),
        sa.ForeignKeyConstraint(
            ["domain", "record_id"],
            ["credential_records.domain", "credential_records.id"],
        ),
    )
    op.create_index(
        "ix_pending_verifications_domain_issuer",
        "pending_verifications",
        ["domain", "issuer"],
    )


def downgrade() -> None:
    op.drop_index("ix_pending_verifications_domain_issuer", "pending_verifications")
    op.drop_table("pending_verifications")
    op.drop_index("ix_credential_records_domain_subject", "credential_records")
    op.drop_table("credential_records")
    op.drop_table("record_counters")
    op.drop_table("issuer_registrations")
    op.drop_index("ix_user_profiles_role", "user_profiles")
    op.drop_table("user_profiles")
