"""Add founders and startup shares

Revision ID: add_founders_and_shares
Revises: initial_financials_schema
Create Date: 2026-10-18

This migration adds:
- founders: founder names, contact and stated equity
- startup_shares: total shares, ESOP pool and price per share per startup
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'add_founders_and_shares'
down_revision: Union[str, None] = 'initial_financials_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'founders',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('startup_id', sa.Integer(), sa.ForeignKey('startups.id'), nullable=False, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('shares', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('equity_percentage', sa.Numeric(7, 4), nullable=False, server_default='0'),
        sa.Column('mentor_code', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), index=True),
    )

    op.create_table(
        'startup_shares',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('startup_id', sa.Integer(), sa.ForeignKey('startups.id'), nullable=False, unique=True),
        sa.Column('total_shares', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('esop_reserved_shares', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('price_per_share', sa.Numeric(18, 4), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('startup_shares')
    op.drop_table('founders')
