"""Initial financials schema

Revision ID: initial_financials_schema
Revises:
Create Date: 2026-10-18

This migration adds:
- startups: profile plus cached total_funding
- financial_records: revenue and expense ledger entries
- investment_records: investments backing total_funding
- fundraising_details: fundraising rounds and pitch collateral
- valuation_history: recorded valuations
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'initial_financials_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Startups table
    op.create_table(
        'startups',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('country_of_registration', sa.String(100), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('registration_date', sa.Date(), nullable=True),
        sa.Column('subsidiaries', sa.JSON(), nullable=False),
        sa.Column('international_ops', sa.JSON(), nullable=False),
        sa.Column('total_funding', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )

    # Ledger records table
    op.create_table(
        'financial_records',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('startup_id', sa.Integer(), sa.ForeignKey('startups.id'), nullable=False, index=True),
        sa.Column('record_type', sa.String(10), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('entity', sa.String(200), nullable=False, index=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('vertical', sa.String(100), nullable=False),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('funding_source', sa.String(200), nullable=True),
        sa.Column('cogs', sa.Numeric(18, 2), nullable=True),
        sa.Column('attachment_url', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_financial_records_startup_date', 'financial_records', ['startup_id', 'date'])

    # Investment records table
    op.create_table(
        'investment_records',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('startup_id', sa.Integer(), sa.ForeignKey('startups.id'), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('investor_type', sa.String(50), nullable=False),
        sa.Column('investment_type', sa.String(20), nullable=False),
        sa.Column('investor_name', sa.String(200), nullable=False),
        sa.Column('investor_code', sa.String(50), nullable=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('equity_allocated', sa.Numeric(7, 4), nullable=False, server_default='0'),
        sa.Column('shares', sa.BigInteger(), nullable=True),
        sa.Column('price_per_share', sa.Numeric(18, 4), nullable=True),
        sa.Column('pre_money_valuation', sa.Numeric(18, 2), nullable=True),
        sa.Column('post_money_valuation', sa.Numeric(18, 2), nullable=True),
        sa.Column('proof_url', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )

    # Fundraising details table
    op.create_table(
        'fundraising_details',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('startup_id', sa.Integer(), sa.ForeignKey('startups.id'), nullable=False, index=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('value', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('equity', sa.Numeric(7, 4), nullable=False, server_default='0'),
        sa.Column('domain', sa.String(100), nullable=True),
        sa.Column('stage', sa.String(100), nullable=True),
        sa.Column('validation_requested', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('pitch_deck_url', sa.String(1000), nullable=True),
        sa.Column('pitch_video_url', sa.String(1000), nullable=True),
        sa.Column('business_plan_url', sa.String(1000), nullable=True),
        sa.Column('one_pager_url', sa.String(1000), nullable=True),
        sa.Column('website_url', sa.String(1000), nullable=True),
        sa.Column('linkedin_url', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), index=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )

    # Valuation history table
    op.create_table(
        'valuation_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('startup_id', sa.Integer(), sa.ForeignKey('startups.id'), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('valuation', sa.Numeric(18, 2), nullable=False),
        sa.Column('round_type', sa.String(30), nullable=False),
        sa.Column('investment_amount', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('valuation_history')
    op.drop_table('fundraising_details')
    op.drop_table('investment_records')
    op.drop_index('ix_financial_records_startup_date', table_name='financial_records')
    op.drop_table('financial_records')
    op.drop_table('startups')
