"""Inventory schema with trigram search indexes.

Revision ID: 0001_inventory_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_inventory_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

# (index name, table, expression) for every field the global search matches on
TRIGRAM_INDEXES = [
    ("idx_organization_name_trgm", "organization", "name"),
    ("idx_application_name_trgm", "application", "name"),
    ("idx_device_name_trgm", "device", "name"),
    ("idx_device_dev_eui_trgm", "device", "encode(dev_eui, 'hex')"),
    ("idx_gateway_name_trgm", "gateway", "name"),
    ("idx_gateway_mac_trgm", "gateway", "encode(mac, 'hex')"),
]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")

    op.create_table(
        "organization",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False, unique=True),
        sa.Column("display_name", sa.Text(), nullable=False, server_default=""),
        sa.Column("can_have_gateways", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "user",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("username", sa.Text(), nullable=False, unique=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "organization_user",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("organization_id", sa.BigInteger(), sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_user"),
    )
    op.create_index("idx_organization_user_organization_id", "organization_user", ["organization_id"])
    op.create_index("idx_organization_user_user_id", "organization_user", ["user_id"])

    op.create_table(
        "service_profile",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("organization_id", sa.BigInteger(), sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "application",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("organization_id", sa.BigInteger(), sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("service_profile_id", sa.BigInteger(), sa.ForeignKey("service_profile.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_application_organization_id", "application", ["organization_id"])

    op.create_table(
        "device",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("dev_eui", sa.LargeBinary(8), nullable=False, unique=True),
        sa.Column("application_id", sa.BigInteger(), sa.ForeignKey("application.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("idx_device_application_id", "device", ["application_id"])

    op.create_table(
        "gateway",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("mac", sa.LargeBinary(8), nullable=False, unique=True),
        sa.Column("organization_id", sa.BigInteger(), sa.ForeignKey("organization.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("idx_gateway_organization_id", "gateway", ["organization_id"])

    for name, table, expression in TRIGRAM_INDEXES:
        op.execute(f"CREATE INDEX {name} ON {table} USING gin (({expression}) gin_trgm_ops)")


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for name, _, _ in reversed(TRIGRAM_INDEXES):
        op.execute(f"DROP INDEX IF EXISTS {name}")

    op.drop_table("gateway")
    op.drop_table("device")
    op.drop_table("application")
    op.drop_table("service_profile")
    op.drop_table("organization_user")
    op.drop_table("user")
    op.drop_table("organization")
    # pg_trgm is left installed; other schemas may use it
