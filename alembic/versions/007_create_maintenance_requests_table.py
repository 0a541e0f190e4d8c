"""create maintenance requests table

Revision ID: 007
Revises: 006
Create Date: 2026-03-25 14:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("unit_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("requested_at", sa.DateTime(), nullable=False),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        sa.Column("assigned_to", sa.String(255), nullable=True),
        sa.Column("estimated_cost_cents", sa.Integer(), nullable=True),
        sa.Column("actual_cost_cents", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"]),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name="ck_maintenance_requests_priority",
        ),
        sa.CheckConstraint(
            "status IN ('open', 'in_progress', 'resolved', 'closed', 'cancelled')",
            name="ck_maintenance_requests_status",
        ),
        sa.CheckConstraint(
            "estimated_cost_cents IS NULL OR estimated_cost_cents >= 0",
            name="ck_maintenance_requests_estimated_cost",
        ),
        sa.CheckConstraint(
            "actual_cost_cents IS NULL OR actual_cost_cents >= 0",
            name="ck_maintenance_requests_actual_cost",
        ),
    )
    op.create_index(
        "ix_maintenance_requests_property_id", "maintenance_requests", ["property_id"], unique=False
    )
    op.create_index(
        "ix_maintenance_requests_unit_id", "maintenance_requests", ["unit_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_maintenance_requests_unit_id", table_name="maintenance_requests")
    op.drop_index("ix_maintenance_requests_property_id", table_name="maintenance_requests")
    op.drop_table("maintenance_requests")
