"""buyer_leads_schema

Revision ID: 0001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Opaque unique identifier'),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login email (unique)'),
        sa.Column('full_name', sa.String(length=120), nullable=False, comment='Display name'),
        sa.Column('role', _enum('user_role', 'USER', 'ADMIN'), nullable=False, comment='USER or ADMIN'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    # Create buyers table
    op.create_table(
        'buyers',
        sa.Column('id', sa.String(length=36), nullable=False, comment='Opaque unique identifier'),
        sa.Column('full_name', sa.String(length=80), nullable=False, comment='Full name (2-80 chars)'),
        sa.Column('email', sa.String(length=255), nullable=True, comment='Optional contact email'),
        sa.Column('phone', sa.String(length=15), nullable=False, comment='Phone number, digits only (10-15)'),
        sa.Column('city', _enum('city', 'CHANDIGARH', 'MOHALI', 'ZIRAKPUR', 'PANCHKULA', 'OTHER'), nullable=False),
        sa.Column('property_type', _enum('property_type', 'APARTMENT', 'VILLA', 'PLOT', 'OFFICE', 'RETAIL'), nullable=False),
        sa.Column('bhk', _enum('bhk', 'STUDIO', 'ONE', 'TWO', 'THREE', 'FOUR'), nullable=True, comment='Required for apartments and villas'),
        sa.Column('purpose', _enum('purpose', 'BUY', 'RENT'), nullable=False),
        sa.Column('budget_min', sa.BigInteger(), nullable=True),
        sa.Column('budget_max', sa.BigInteger(), nullable=True),
        sa.Column('timeline', _enum('timeline', 'ZERO_TO_THREE_MONTHS', 'THREE_TO_SIX_MONTHS', 'MORE_THAN_SIX_MONTHS', 'EXPLORING'), nullable=False),
        sa.Column('source', _enum('source', 'WEBSITE', 'REFERRAL', 'WALK_IN', 'CALL', 'OTHER'), nullable=False),
        sa.Column('status', _enum('status', 'NEW', 'QUALIFIED', 'CONTACTED', 'VISITED', 'NEGOTIATION', 'CONVERTED', 'DROPPED'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tags', JSONType, nullable=False, comment='Ordered tag list'),
        sa.Column('owner_id', sa.String(length=36), nullable=False, comment='User who created the lead'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('budget_min IS NULL OR budget_min > 0', name='check_budget_min_positive'),
        sa.CheckConstraint('budget_max IS NULL OR budget_max > 0', name='check_budget_max_positive'),
        sa.CheckConstraint(
            'budget_min IS NULL OR budget_max IS NULL OR budget_max >= budget_min',
            name='check_budget_range'
        ),
    )
    op.create_index('idx_buyers_city', 'buyers', ['city'], unique=False)
    op.create_index('idx_buyers_property_type', 'buyers', ['property_type'], unique=False)
    op.create_index('idx_buyers_status', 'buyers', ['status'], unique=False)
    op.create_index('idx_buyers_timeline', 'buyers', ['timeline'], unique=False)
    op.create_index('idx_buyers_owner_id', 'buyers', ['owner_id'], unique=False)
    op.create_index('idx_buyers_updated_at', 'buyers', ['updated_at'], unique=False)

    # Create buyer_history table (no FK to buyers: entries outlive deleted buyers)
    op.create_table(
        'buyer_history',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('buyer_id', sa.String(length=36), nullable=False, comment='Buyer the entry describes'),
        sa.Column('changed_by', sa.String(length=36), nullable=False, comment='Acting user'),
        sa.Column('action', _enum('history_action', 'created', 'updated', 'imported'), nullable=False),
        sa.Column('diff', JSONType, nullable=False, comment='Field changes ({field: {from, to}}) or full field set'),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['changed_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_buyer_history_buyer_id', 'buyer_history', ['buyer_id'], unique=False)
    op.create_index('idx_buyer_history_changed_at', 'buyer_history', ['changed_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_buyer_history_changed_at', table_name='buyer_history')
    op.drop_index('idx_buyer_history_buyer_id', table_name='buyer_history')
    op.drop_table('buyer_history')

    op.drop_index('idx_buyers_updated_at', table_name='buyers')
    op.drop_index('idx_buyers_owner_id', table_name='buyers')
    op.drop_index('idx_buyers_timeline', table_name='buyers')
    op.drop_index('idx_buyers_status', table_name='buyers')
    op.drop_index('idx_buyers_property_type', table_name='buyers')
    op.drop_index('idx_buyers_city', table_name='buyers')
    op.drop_table('buyers')

    op.drop_table('users')
