"""create exchange rate tables

Revision ID: 3c1f0a9d2b41
Revises: 
Create Date: 2026-10-12 09:14:51.204117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from ratecache.models import ExactDecimal


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b41'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "exchange_rates_cache",
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("base_currency", sa.String(length=3), nullable=False),
        sa.PrimaryKeyConstraint("date", "base_currency"),
    )
    op.create_table(
        "exchange_rate_values",
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("base_currency", sa.String(length=3), nullable=False),
        sa.Column("target_currency", sa.String(length=3), nullable=False),
        sa.Column("rate", ExactDecimal(), nullable=False),
        sa.ForeignKeyConstraint(
            ["date", "base_currency"],
            ["exchange_rates_cache.date", "exchange_rates_cache.base_currency"],
            name="fk_exchange_rate_values_cache",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("date", "base_currency", "target_currency"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("exchange_rate_values")
    op.drop_table("exchange_rates_cache")
