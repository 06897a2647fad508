"""add exec_date to exchange_rates_cache

Revision ID: 7e2d5b8c4a90
Revises: 3c1f0a9d2b41
Create Date: 2026-10-13 16:02:37.880412

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7e2d5b8c4a90'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b41'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    with op.batch_alter_table("exchange_rates_cache") as batch_op:
        batch_op.add_column(sa.Column("exec_date", sa.DateTime(timezone=True), nullable=True))


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("exchange_rates_cache") as batch_op:
        batch_op.drop_column("exec_date")
