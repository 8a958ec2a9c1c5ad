"""initial billing schema

Revision ID: 3f1a9c2b7d40
Revises:
Create Date: 2026-10-19 10:12:31.508214

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1a9c2b7d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("mobile", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(120)),
        sa.Column("address", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("customer_mobile", sa.String(20), sa.ForeignKey("customers.mobile")),
        sa.Column("invoice_no", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(20), nullable=False, server_default="white"),
        sa.Column("issued_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("cgst_pct", sa.Numeric(5, 2), server_default="0"),
        sa.Column("sgst_pct", sa.Numeric(5, 2), server_default="0"),
        sa.Column("cgst_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("sgst_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("gross_total", sa.Numeric(12, 2), server_default="0"),
        sa.Column("old_total", sa.Numeric(12, 2), server_default="0"),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("snapshot", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("color", "invoice_no", name="uq_invoices_color_number"),
    )
    op.create_index("ix_invoices_customer_mobile", "invoices", ["customer_mobile"])
    op.create_index("ix_invoices_color", "invoices", ["color"])
    op.create_index("ix_invoices_issued_at", "invoices", ["issued_at"])

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("invoice_id", sa.String(36), sa.ForeignKey("invoices.id", ondelete="CASCADE")),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(200)),
        sa.Column("karat", sa.String(10)),
        sa.Column("gross", sa.Numeric(10, 3)),
        sa.Column("stone", sa.Numeric(10, 3)),
        sa.Column("net", sa.Numeric(10, 3)),
        sa.Column("rate", sa.Numeric(12, 2)),
        sa.Column("making_mode", sa.String(10)),
        sa.Column("making_value", sa.Numeric(12, 2)),
        sa.Column("hallmark", sa.Numeric(12, 2)),
        sa.Column("stone_cost", sa.Numeric(12, 2)),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    op.create_table(
        "invoice_old_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("invoice_id", sa.String(36), sa.ForeignKey("invoices.id", ondelete="CASCADE")),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(200)),
        sa.Column("weight", sa.Numeric(10, 3)),
        sa.Column("wastage", sa.Numeric(10, 3)),
        sa.Column("rate", sa.Numeric(12, 2)),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_invoice_old_items_invoice_id", "invoice_old_items", ["invoice_id"])

    op.create_table(
        "invoice_misc_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("invoice_id", sa.String(36), sa.ForeignKey("invoices.id", ondelete="CASCADE")),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(200)),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_invoice_misc_items_invoice_id", "invoice_misc_items", ["invoice_id"])

    op.create_table(
        "invoice_counters",
        sa.Column("color", sa.String(20), primary_key=True),
        sa.Column("last_no", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "rates",
        sa.Column("karat", sa.String(10), primary_key=True),
        sa.Column("rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade() -> None:
    op.drop_table("rates")
    op.drop_table("invoice_counters")
    op.drop_index("ix_invoice_misc_items_invoice_id", table_name="invoice_misc_items")
    op.drop_table("invoice_misc_items")
    op.drop_index("ix_invoice_old_items_invoice_id", table_name="invoice_old_items")
    op.drop_table("invoice_old_items")
    op.drop_index("ix_invoice_items_invoice_id", table_name="invoice_items")
    op.drop_table("invoice_items")
    op.drop_index("ix_invoices_issued_at", table_name="invoices")
    op.drop_index("ix_invoices_color", table_name="invoices")
    op.drop_index("ix_invoices_customer_mobile", table_name="invoices")
    op.drop_table("invoices")
    op.drop_table("customers")
