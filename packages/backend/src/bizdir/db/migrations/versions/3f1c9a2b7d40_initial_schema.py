"""Initial schema: principals, shops, pages

Three principal tables (users, agents, operators), three shop tables
(shops, legacy_shops, agent_shops) and CMS pages.

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 09:12:04.118230
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=True)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True))
    return cols


def upgrade() -> None:
    # ─── Principals ──────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_table(
        "agents",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("agent_code", sa.String(50), nullable=False, unique=True),
        sa.Column("panel_text", sa.String(500), nullable=False, server_default=""),
        sa.Column("panel_text_color", sa.String(10), nullable=False, server_default="black"),
        sa.Column("total_shops", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_earnings", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "operators",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("operator_code", sa.String(50), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # ─── Shops ───────────────────────────────────────────
    op.create_table(
        "agent_shops",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("agent_id", sa.Uuid(), sa.ForeignKey("agents.id"), nullable=False),
        sa.Column("shop_name", sa.String(200), nullable=False),
        sa.Column("owner_name", sa.String(100), nullable=False),
        sa.Column("mobile", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("pincode", sa.String(6), nullable=False),
        sa.Column("area", sa.String(100), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=False, server_default=""),
        sa.Column("additional_photos", sa.JSON(), nullable=False),
        sa.Column("shop_url", sa.String(120), nullable=False, unique=True),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("payment_status", sa.String(10), nullable=False, server_default="PENDING"),
        sa.Column("payment_mode", sa.String(10), nullable=False, server_default="NONE"),
        sa.Column("receipt_no", sa.String(50), nullable=False, server_default=""),
        sa.Column("amount", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("plan_type", sa.String(20), nullable=False, server_default="BASIC"),
        sa.Column("agent_commission", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("visitor_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(updated=False),
    )
    op.create_index("ix_agent_shops_agent_id", "agent_shops", ["agent_id"])
    op.create_index("ix_agent_shops_payment_status", "agent_shops", ["payment_status"])
    op.create_index("ix_agent_shops_created_at", "agent_shops", ["created_at"])

    op.create_table(
        "shops",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("shop_name", sa.String(200), nullable=False),
        sa.Column("owner_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("mobile", sa.String(20), nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False, server_default=""),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("pincode", sa.String(6), nullable=False, server_default=""),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("payment_status", sa.String(10), nullable=False, server_default="PENDING"),
        sa.Column("amount", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("plan_type", sa.String(20), nullable=False, server_default="BASIC"),
        sa.Column("priority_rank", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("placements", sa.JSON(), nullable=False),
        sa.Column("last_payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("visitor_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(updated=False),
    )
    op.create_table(
        "legacy_shops",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("pincode", sa.String(6), nullable=False, server_default=""),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(updated=False),
    )

    # ─── Content ─────────────────────────────────────────
    op.create_table(
        "pages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False, unique=True),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("seo_title", sa.String(200), nullable=True),
        sa.Column("seo_description", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("design_settings", sa.JSON(), nullable=False),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table("pages")
    op.drop_table("legacy_shops")
    op.drop_table("shops")
    op.drop_index("ix_agent_shops_created_at", table_name="agent_shops")
    op.drop_index("ix_agent_shops_payment_status", table_name="agent_shops")
    op.drop_index("ix_agent_shops_agent_id", table_name="agent_shops")
    op.drop_table("agent_shops")
    op.drop_table("operators")
    op.drop_table("agents")
    op.drop_table("users")
