"""Create profiles table holding each user's tax settings

Revision ID: 0001
Revises:
Create Date: 2024-04-06

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the profiles table."""
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text('gen_random_uuid()')),
        sa.Column('full_name', sa.Text, nullable=True),
        sa.Column('tax_region', sa.Text, nullable=False, server_default='england'),
        sa.Column('employment_status', sa.Text, nullable=False, server_default='self_employed'),
        sa.Column('annual_salary', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "tax_region IN ('england', 'scotland', 'wales')", name='ck_profiles_tax_region'
        ),
        sa.CheckConstraint(
            "employment_status IN ('self_employed', 'employed_self', 'employed')",
            name='ck_profiles_employment_status',
        ),
        sa.CheckConstraint('annual_salary >= 0', name='ck_profiles_annual_salary'),
    )


def downgrade():
    """Drop the profiles table."""
    op.drop_table('profiles')
