"""create meter readings and pump topups tables

Revision ID: 005
Revises: 004
Create Date: 2026-03-04 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "meter_readings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("unit_id", sa.Uuid(), nullable=True),
        sa.Column("meter_type", sa.String(20), nullable=False),
        sa.Column("reading_value", sa.Integer(), nullable=False),
        sa.Column("reading_on", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.CheckConstraint(
            "meter_type IN ('water', 'electricity', 'gas', 'other')",
            name="ck_meter_readings_meter_type",
        ),
        sa.CheckConstraint("reading_value >= 0", name="ck_meter_readings_value_non_negative"),
    )
    op.create_index("ix_meter_readings_property_id", "meter_readings", ["property_id"], unique=False)
    op.create_index(
        "ix_meter_readings_unit_type_date",
        "meter_readings",
        ["unit_id", "meter_type", "reading_on"],
        unique=False,
    )

    op.create_table(
        "pump_topups",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Uuid(), nullable=False),
        sa.Column("topup_on", sa.Date(), nullable=False),
        sa.Column("volume_liters", sa.Integer(), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("vendor_name", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"]),
        sa.CheckConstraint("volume_liters > 0", name="ck_pump_topups_volume_positive"),
        sa.CheckConstraint("amount_cents > 0", name="ck_pump_topups_amount_positive"),
    )
    op.create_index("ix_pump_topups_property_id", "pump_topups", ["property_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_pump_topups_property_id", table_name="pump_topups")
    op.drop_table("pump_topups")
    op.drop_index("ix_meter_readings_unit_type_date", table_name="meter_readings")
    op.drop_index("ix_meter_readings_property_id", table_name="meter_readings")
    op.drop_table("meter_readings")
