"""Add exchange_rates table

Revision ID: exch001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'exch001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'exchange_rates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('currency_code', sa.String(length=4), nullable=False),
        sa.Column('currency_name', sa.String(length=50), nullable=False),
        sa.Column('rate_type', sa.String(length=10), nullable=False),
        sa.Column('base_rate', sa.Numeric(precision=20, scale=10), nullable=True),
        sa.Column('buy_rate', sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column('sell_rate', sa.Numeric(precision=20, scale=10), nullable=False),
        sa.Column('bank_fee', sa.Numeric(precision=10, scale=6), nullable=False),
        sa.Column('platform_fee', sa.Numeric(precision=10, scale=6), nullable=False),
        sa.Column('spread', sa.Numeric(precision=10, scale=6), nullable=False),
        sa.Column('adjustment_formula', sa.String(length=255), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('currency_code'),
    )
    op.create_index(op.f('ix_exchange_rates_id'), 'exchange_rates', ['id'], unique=False)
    op.create_index('idx_rate_type', 'exchange_rates', ['rate_type'], unique=False)
    op.create_index('idx_rate_updates', 'exchange_rates', ['last_updated'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_rate_updates', table_name='exchange_rates')
    op.drop_index('idx_rate_type', table_name='exchange_rates')
    op.drop_index(op.f('ix_exchange_rates_id'), table_name='exchange_rates')
    op.drop_table('exchange_rates')
