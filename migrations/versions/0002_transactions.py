"""Create transactions table: the income/expense ledger

Revision ID: 0002
Revises: 0001
Create Date: 2024-04-06

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0002'
down_revision = '0001'
branch_labels = None
depends_on = None


def upgrade():
    """Create the transactions table."""
    op.create_table(
        'transactions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Text, nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('category', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("type IN ('income', 'expense')", name='ck_transactions_type'),
        sa.CheckConstraint('amount >= 0', name='ck_transactions_amount'),
    )

    # Ledger queries filter one user's rows by tax-year window
    op.create_index('ix_transactions_user_date', 'transactions', ['user_id', 'date'])


def downgrade():
    """Drop the transactions table."""
    op.drop_index('ix_transactions_user_date', table_name='transactions')
    op.drop_table('transactions')
