"""create leases, invoices, invoice items and rent installments tables

Revision ID: 003
Revises: 002
Create Date: 2026-03-03 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "leases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("unit_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("plan_months", sa.Integer(), nullable=False),
        sa.Column("billing_mode", sa.String(10), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("rent_cents", sa.Integer(), nullable=False),
        sa.Column("security_deposit_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("paid_through_date", sa.Date(), nullable=True),
        sa.Column("terminated_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"]),
        sa.CheckConstraint("plan_months IN (3, 6, 12)", name="ck_leases_plan_months"),
        sa.CheckConstraint("billing_mode IN ('term', 'monthly')", name="ck_leases_billing_mode"),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'expired', 'terminated')",
            name="ck_leases_status",
        ),
        sa.CheckConstraint("end_date > start_date", name="ck_leases_end_after_start"),
        sa.CheckConstraint("rent_cents > 0", name="ck_leases_rent_positive"),
        sa.CheckConstraint("security_deposit_cents >= 0", name="ck_leases_deposit_non_negative"),
        sa.CheckConstraint(
            "paid_through_date IS NULL OR paid_through_date <= end_date",
            name="ck_leases_paid_through_within_term",
        ),
    )
    op.create_index("ix_leases_property_id", "leases", ["property_id"], unique=False)
    op.create_index("ix_leases_unit_id", "leases", ["unit_id"], unique=False)
    op.create_index("ix_leases_tenant_id", "leases", ["tenant_id"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=True),
        sa.Column("unit_id", sa.Uuid(), nullable=True),
        sa.Column("lease_id", sa.Uuid(), nullable=True),
        sa.Column("invoice_number", sa.String(40), nullable=False),
        sa.Column("invoice_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("amount_paid_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("issued_on", sa.Date(), nullable=False),
        sa.Column("due_on", sa.Date(), nullable=False),
        sa.Column("billing_period", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("voided_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"]),
        sa.UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
        sa.CheckConstraint(
            "invoice_type IN ('rent', 'water', 'electricity', 'service_charge', 'penalty', 'other')",
            name="ck_invoices_invoice_type",
        ),
        sa.CheckConstraint(
            "status IN ('draft', 'issued', 'partial', 'paid', 'overdue', 'void')",
            name="ck_invoices_status",
        ),
        # Balance invariant: 0 <= amount_paid <= amount
        sa.CheckConstraint("amount_cents > 0", name="ck_invoices_amount_positive"),
        sa.CheckConstraint(
            "amount_paid_cents >= 0 AND amount_paid_cents <= amount_cents",
            name="ck_invoices_amount_paid_range",
        ),
        sa.CheckConstraint("due_on >= issued_on", name="ck_invoices_due_after_issue"),
    )
    op.create_index("ix_invoices_property_id", "invoices", ["property_id"], unique=False)
    op.create_index("ix_invoices_tenant_id", "invoices", ["tenant_id"], unique=False)
    op.create_index("ix_invoices_lease_id", "invoices", ["lease_id"], unique=False)
    # One live invoice per unit, billing period and type; voided invoices free the slot
    op.create_index(
        "uq_invoices_active_billing_period",
        "invoices",
        ["property_id", "unit_id", "billing_period", "invoice_type"],
        unique=True,
        sqlite_where=sa.text("status != 'void' AND billing_period IS NOT NULL"),
        postgresql_where=sa.text("status != 'void' AND billing_period IS NOT NULL"),
    )

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("invoice_id", sa.Uuid(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"]),
        sa.CheckConstraint("quantity > 0", name="ck_invoice_items_quantity_positive"),
        sa.CheckConstraint("unit_price_cents > 0", name="ck_invoice_items_unit_price_positive"),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"], unique=False)

    op.create_table(
        "rent_installments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("lease_id", sa.Uuid(), nullable=False),
        sa.Column("invoice_id", sa.Uuid(), nullable=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("amount_paid_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"]),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"]),
        sa.UniqueConstraint("invoice_id", name="uq_rent_installments_invoice_id"),
        sa.UniqueConstraint("lease_id", "sequence", name="uq_rent_installments_lease_sequence"),
        sa.CheckConstraint(
            "status IN ('pending', 'partial', 'paid', 'overdue')",
            name="ck_rent_installments_status",
        ),
        sa.CheckConstraint(
            "amount_paid_cents >= 0 AND amount_paid_cents <= amount_cents",
            name="ck_rent_installments_amount_paid_range",
        ),
    )
    op.create_index("ix_rent_installments_lease_id", "rent_installments", ["lease_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_rent_installments_lease_id", table_name="rent_installments")
    op.drop_table("rent_installments")
    op.drop_index("ix_invoice_items_invoice_id", table_name="invoice_items")
    op.drop_table("invoice_items")
    op.drop_index("uq_invoices_active_billing_period", table_name="invoices")
    op.drop_index("ix_invoices_lease_id", table_name="invoices")
    op.drop_index("ix_invoices_tenant_id", table_name="invoices")
    op.drop_index("ix_invoices_property_id", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_leases_tenant_id", table_name="leases")
    op.drop_index("ix_leases_unit_id", table_name="leases")
    op.drop_index("ix_leases_property_id", table_name="leases")
    op.drop_table("leases")
