"""create properties, units and tenants tables

Revision ID: 002
Revises: 001
Create Date: 2026-03-02 10:30:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "properties",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("country", sa.String(120), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_properties_code"),
    )

    op.create_table(
        "units",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("unit_number", sa.String(32), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("monthly_rent_cents", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.UniqueConstraint("property_id", "unit_number", name="uq_units_property_unit_number"),
        sa.CheckConstraint(
            "status IN ('available', 'occupied', 'maintenance', 'unavailable')",
            name="ck_units_status",
        ),
        sa.CheckConstraint(
            "monthly_rent_cents IS NULL OR monthly_rent_cents > 0",
            name="ck_units_monthly_rent_positive",
        ),
    )
    op.create_index("ix_units_property_id", "units", ["property_id"], unique=False)

    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(40), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'archived')",
            name="ck_tenants_status",
        ),
    )
    op.create_index("ix_tenants_property_id", "tenants", ["property_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tenants_property_id", table_name="tenants")
    op.drop_table("tenants")
    op.drop_index("ix_units_property_id", table_name="units")
    op.drop_table("units")
    op.drop_table("properties")
