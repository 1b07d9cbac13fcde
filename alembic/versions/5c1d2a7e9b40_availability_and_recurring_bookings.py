"""availability_and_recurring_bookings

Revision ID: 5c1d2a7e9b40
Revises:
Create Date: 2025-11-03 10:12:41.118204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1d2a7e9b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('availability_schedules',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('staff_id', sa.Uuid(), nullable=False),
        sa.Column('weekly_schedule', sa.JSON(), nullable=False),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_to', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_availability_schedules_staff_id'), 'availability_schedules', ['staff_id'], unique=False)

    op.create_table('availability_exceptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('schedule_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('kind', sa.Enum('unavailable', 'custom_hours', name='exception_kind'), nullable=False),
        sa.Column('time_slots', sa.JSON(), nullable=False),
        sa.Column('reason', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['schedule_id'], ['availability_schedules.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_availability_exceptions_schedule_id'), 'availability_exceptions', ['schedule_id'], unique=False)

    op.create_table('availability_overrides',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('schedule_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time_slots', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['schedule_id'], ['availability_schedules.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_availability_overrides_schedule_id'), 'availability_overrides', ['schedule_id'], unique=False)

    op.create_table('recurring_bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('staff_id', sa.Uuid(), nullable=False),
        sa.Column('service_id', sa.Uuid(), nullable=False),
        sa.Column('frequency', sa.Enum('weekly', 'biweekly', 'monthly', name='recurrence_frequency'), nullable=False),
        sa.Column('interval', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=True),
        sa.Column('day_of_month', sa.Integer(), nullable=True),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('time_zone', sa.String(length=64), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('occurrence_limit', sa.Integer(), nullable=True),
        sa.Column('generated_booking_ids', sa.JSON(), nullable=False),
        sa.Column('status', sa.Enum('active', 'paused', 'cancelled', 'completed', name='recurring_status'), nullable=False),
        sa.Column('payment_plan', sa.Enum('per_session', 'monthly_subscription', name='payment_plan'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_recurring_bookings_client_id'), 'recurring_bookings', ['client_id'], unique=False)
    op.create_index(op.f('ix_recurring_bookings_staff_id'), 'recurring_bookings', ['staff_id'], unique=False)
    op.create_index(op.f('ix_recurring_bookings_status'), 'recurring_bookings', ['status'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_recurring_bookings_status'), table_name='recurring_bookings')
    op.drop_index(op.f('ix_recurring_bookings_staff_id'), table_name='recurring_bookings')
    op.drop_index(op.f('ix_recurring_bookings_client_id'), table_name='recurring_bookings')
    op.drop_table('recurring_bookings')
    op.drop_index(op.f('ix_availability_overrides_schedule_id'), table_name='availability_overrides')
    op.drop_table('availability_overrides')
    op.drop_index(op.f('ix_availability_exceptions_schedule_id'), table_name='availability_exceptions')
    op.drop_table('availability_exceptions')
    op.drop_index(op.f('ix_availability_schedules_staff_id'), table_name='availability_schedules')
    op.drop_table('availability_schedules')

    op.execute("DROP TYPE IF EXISTS payment_plan")
    op.execute("DROP TYPE IF EXISTS recurring_status")
    op.execute("DROP TYPE IF EXISTS recurrence_frequency")
    op.execute("DROP TYPE IF EXISTS exception_kind")
