"""add activated_at to leases

Revision ID: 006
Revises: 005
Create Date: 2026-03-18 10:30:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("leases", sa.Column("activated_at", sa.DateTime(), nullable=True))
    # Existing non-pending leases are treated as activated when created
    op.execute(
        "UPDATE leases SET activated_at = created_at "
        "WHERE status IN ('active', 'expired', 'terminated')"
    )


def downgrade() -> None:
    with op.batch_alter_table("leases") as batch_op:
        batch_op.drop_column("activated_at")
