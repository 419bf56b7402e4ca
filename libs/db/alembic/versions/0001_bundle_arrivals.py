# ruff: noqa: I001
"""Bundle arrivals ledger table.

Revision ID: 0001_bundle_arrivals
Revises: None
Create Date: 2025-10-02
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_bundle_arrivals"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_INDEXED_COLUMNS = ("date", "lorry_type", "party_name", "account_type", "status")


def upgrade() -> None:
    op.create_table(
        "bundle_arrivals",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("lorry_type", sa.String(100), nullable=False),
        sa.Column("lorry_no", sa.String(50), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("party_name", sa.String(200), nullable=False),
        sa.Column("account_type", sa.String(1), nullable=False),
        sa.Column("bundle", sa.String(100), nullable=False),
        sa.Column("invoice_no", sa.String(100), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("phone_no", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("''")),
        sa.Column("itemtype", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "account_type in ('S','T','R')", name="ck_bundle_arrivals_account_type"
        ),
        sa.CheckConstraint("status in ('','OPEN','PENDING')", name="ck_bundle_arrivals_status"),
        sa.CheckConstraint("amount >= 0", name="ck_bundle_arrivals_amount"),
    )
    for col in _INDEXED_COLUMNS:
        op.create_index(f"idx_bundle_arrivals_{col}", "bundle_arrivals", [col])


def downgrade() -> None:
    for col in reversed(_INDEXED_COLUMNS):
        op.drop_index(f"idx_bundle_arrivals_{col}", table_name="bundle_arrivals")
    op.drop_table("bundle_arrivals")
