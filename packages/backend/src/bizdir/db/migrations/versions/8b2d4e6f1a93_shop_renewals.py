"""Shop renewals: parked expired listings and the renewal ledger

Revision ID: 8b2d4e6f1a93
Revises: 3f1c9a2b7d40
Create Date: 2026-10-19 16:40:51.502114
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2d4e6f1a93'
down_revision: Union[str, None] = '3f1c9a2b7d40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "renew_shops",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("shop_name", sa.String(200), nullable=False),
        sa.Column("owner_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("mobile", sa.String(20), nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False, server_default=""),
        sa.Column("pincode", sa.String(6), nullable=False, server_default=""),
        sa.Column("address", sa.String(500), nullable=False, server_default=""),
        sa.Column("district", sa.String(100), nullable=True),
        sa.Column("plan_type", sa.String(20), nullable=False, server_default="BASIC"),
        sa.Column("amount", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("visitor_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("original_shop_id", sa.Uuid(), nullable=True, unique=True),
        sa.Column(
            "original_agent_shop_id",
            sa.Uuid(),
            sa.ForeignKey("agent_shops.id"),
            nullable=True,
            unique=True,
        ),
        sa.Column("expired_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_renew_shops_expired_date", "renew_shops", ["expired_date"])

    op.create_table(
        "renewal_payments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("shop_name", sa.String(200), nullable=False),
        sa.Column("owner_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("mobile", sa.String(20), nullable=False, server_default=""),
        sa.Column("agent_id", sa.Uuid(), sa.ForeignKey("agents.id"), nullable=True),
        sa.Column("agent_name", sa.String(100), nullable=False, server_default=""),
        sa.Column("agent_code", sa.String(50), nullable=False, server_default=""),
        sa.Column("renewal_amount", sa.Integer(), nullable=False),
        sa.Column("renewal_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("receipt_no", sa.String(50), nullable=False),
        sa.Column("payment_mode", sa.String(10), nullable=False, server_default="CASH"),
        sa.Column("original_shop_id", sa.Uuid(), nullable=True),
        sa.Column("original_agent_shop_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_renewal_payments_agent_id", "renewal_payments", ["agent_id"])
    op.create_index(
        "ix_renewal_payments_renewal_date", "renewal_payments", ["renewal_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_renewal_payments_renewal_date", table_name="renewal_payments")
    op.drop_index("ix_renewal_payments_agent_id", table_name="renewal_payments")
    op.drop_table("renewal_payments")
    op.drop_index("ix_renew_shops_expired_date", table_name="renew_shops")
    op.drop_table("renew_shops")
