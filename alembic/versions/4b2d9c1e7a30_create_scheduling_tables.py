"""create scheduling tables

Revision ID: 4b2d9c1e7a30
Revises:
Create Date: 2025-11-14 10:12:41.502311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4b2d9c1e7a30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

salon_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='salon_status')
booking_status = sa.Enum('PENDING', 'SCHEDULED', 'COMPLETED', 'CANCELED', name='booking_status')
payment_status = sa.Enum('PENDING', 'SUCCEEDED', 'FAILED', 'REFUNDED', name='payment_status')
notification_status = sa.Enum('UNREAD', 'READ', name='notification_status')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Salons and weekly hours
    op.create_table(
        'salons',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('owner_user_id', sa.Integer, nullable=False, unique=True),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('status', salon_status, nullable=False, server_default='PENDING'),
        *_timestamps()
    )
    op.create_index('ix_salons_owner_user_id', 'salons', ['owner_user_id'])
    op.create_index('ix_salons_status', 'salons', ['status'])

    op.create_table(
        'salon_availability',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('salon_id', sa.Integer, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('weekday', sa.Integer, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('salon_id', 'weekday', name='uq_salon_availability_weekday'),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_salon_availability_weekday'),
        sa.CheckConstraint('end_time > start_time', name='ck_salon_availability_window')
    )
    op.create_index('ix_salon_availability_salon_id', 'salon_availability', ['salon_id'])

    # 2. Stylists, services and what each stylist offers
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('salon_id', sa.Integer, sa.ForeignKey('salons.id'), nullable=False),
        sa.Column('user_id', sa.Integer, nullable=False, unique=True),
        sa.Column('title', sa.String(120), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('reservation_version', sa.Integer, nullable=False, server_default='0'),
        *_timestamps()
    )
    op.create_index('ix_employees_salon_id', 'employees', ['salon_id'])
    op.create_index('ix_employees_user_id', 'employees', ['user_id'])

    op.create_table(
        'services',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('salon_id', sa.Integer, sa.ForeignKey('salons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(160), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps()
    )
    op.create_index('ix_services_salon_id', 'services', ['salon_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    op.create_table(
        'employee_services',
        sa.Column('employee_id', sa.Integer, sa.ForeignKey('employees.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('service_id', sa.Integer, sa.ForeignKey('services.id', ondelete='CASCADE'), primary_key=True)
    )

    # 3. Stylist hours and recurring blocks
    op.create_table(
        'employee_availability',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('employee_id', sa.Integer, sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('weekday', sa.Integer, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('slot_interval_minutes', sa.Integer, nullable=False, server_default='30'),
        *_timestamps(),
        sa.UniqueConstraint('employee_id', 'weekday', name='uq_employee_availability_weekday'),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_employee_availability_weekday'),
        sa.CheckConstraint('end_time > start_time', name='ck_employee_availability_window'),
        sa.CheckConstraint('slot_interval_minutes > 0', name='ck_employee_availability_interval')
    )

    op.create_table(
        'employee_unavailability',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('employee_id', sa.Integer, sa.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
        sa.Column('weekday', sa.Integer, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('slot_interval_minutes', sa.Integer, nullable=False, server_default='30'),
        *_timestamps(),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_employee_unavailability_weekday'),
        sa.CheckConstraint('end_time > start_time', name='ck_employee_unavailability_window')
    )
    op.create_index(
        'idx_eua_emp_weekday_start', 'employee_unavailability', ['employee_id', 'weekday', 'start_time']
    )

    # 4. Bookings and their service lines
    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('salon_id', sa.Integer, sa.ForeignKey('salons.id'), nullable=False),
        sa.Column('customer_user_id', sa.Integer, nullable=False),
        sa.Column('scheduled_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('scheduled_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', booking_status, nullable=False, server_default='SCHEDULED'),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
        sa.Column('canceled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('scheduled_end > scheduled_start', name='ck_bookings_interval')
    )
    op.create_index('idx_bookings_salon_start', 'bookings', ['salon_id', 'scheduled_start'])
    op.create_index('idx_bookings_customer_start', 'bookings', ['customer_user_id', 'scheduled_start'])
    op.create_index('idx_bookings_status_end', 'bookings', ['status', 'scheduled_end'])

    op.create_table(
        'booking_services',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('booking_id', sa.Integer, sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('employee_id', sa.Integer, sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('service_id', sa.Integer, sa.ForeignKey('services.id'), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('ix_booking_services_booking_id', 'booking_services', ['booking_id'])
    op.create_index('idx_bs_employee', 'booking_services', ['employee_id'])

    # 5. Payments and the notification inbox
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('booking_id', sa.Integer, sa.ForeignKey('bookings.id'), nullable=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', payment_status, nullable=False, server_default='PENDING'),
        *_timestamps()
    )
    op.create_index('idx_payments_booking_status', 'payments', ['booking_id', 'status'])

    op.create_table(
        'notifications_inbox',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, nullable=False),
        sa.Column('salon_id', sa.Integer, nullable=True),
        sa.Column('employee_id', sa.Integer, nullable=True),
        sa.Column('booking_id', sa.Integer, nullable=True),
        sa.Column('type_code', sa.String(64), nullable=False),
        sa.Column('status', notification_status, nullable=False, server_default='UNREAD'),
        sa.Column('message', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
    )
    op.create_index('idx_notifications_user_status', 'notifications_inbox', ['user_id', 'status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('notifications_inbox')
    op.drop_table('payments')
    op.drop_table('booking_services')
    op.drop_table('bookings')
    op.drop_table('employee_unavailability')
    op.drop_table('employee_availability')
    op.drop_table('employee_services')
    op.drop_table('services')
    op.drop_table('employees')
    op.drop_table('salon_availability')
    op.drop_table('salons')

    bind = op.get_bind()
    for enum_type in (notification_status, payment_status, booking_status, salon_status):
        enum_type.drop(bind, checkfirst=True)
