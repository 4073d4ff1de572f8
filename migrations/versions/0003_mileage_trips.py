"""Create mileage_trips table for business journeys

Revision ID: 0003
Revises: 0002
Create Date: 2024-04-06

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0003'
down_revision = '0002'
branch_labels = None
depends_on = None


def upgrade():
    """Create the mileage_trips table."""
    op.create_table(
        'mileage_trips',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True,
                  server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('distance', sa.Numeric(10, 2), nullable=False),
        sa.Column('purpose', sa.Text, nullable=False),
        sa.Column('vehicle_type', sa.Text, nullable=False),
        sa.Column('rate', sa.Numeric(6, 4), nullable=False),
        sa.Column('deduction', sa.Numeric(12, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('distance >= 0', name='ck_mileage_trips_distance'),
    )

    # miles_claimed sums one vehicle type per tax year
    op.create_index(
        'ix_mileage_trips_user_vehicle_date', 'mileage_trips', ['user_id', 'vehicle_type', 'date']
    )


def downgrade():
    """Drop the mileage_trips table."""
    op.drop_index('ix_mileage_trips_user_vehicle_date', table_name='mileage_trips')
    op.drop_table('mileage_trips')
