"""Create initial schema

Revision ID: 20261001_0001
Revises: 
Create Date: 2026-10-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20261001_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    'roomtype': ('SINGLE', 'DOUBLE', 'TRIPLE', 'DORMITORY'),
    'bedstatus': ('AVAILABLE', 'OCCUPIED', 'MAINTENANCE', 'RESERVED'),
    'tenantstatus': ('ACTIVE', 'NOTICE_PERIOD', 'CHECKED_OUT'),
    'documenttype': ('AADHAAR', 'PAN', 'PASSPORT', 'DRIVING_LICENSE', 'VOTER_ID', 'OTHER'),
    'billstatus': ('DRAFT', 'SENT', 'PARTIAL', 'PAID', 'OVERDUE', 'CANCELLED'),
    'billitemtype': ('RENT', 'ELECTRICITY', 'FOOD', 'LATE_FEE', 'MAINTENANCE', 'OTHER'),
    'paymentmethod': ('CASH', 'UPI', 'BANK_TRANSFER', 'CARD', 'CHEQUE'),
    'paymentstatus': ('PENDING', 'SUCCESS', 'FAILED'),
    'bookingstatus': ('PENDING', 'APPROVED', 'REJECTED', 'CONVERTED'),
    'maintenancestatus': ('OPEN', 'IN_PROGRESS', 'RESOLVED', 'CLOSED'),
    'maintenancepriority': ('LOW', 'MEDIUM', 'HIGH', 'URGENT'),
}

def _has_table(bind, name: str) -> bool:
    try:
        insp = inspect(bind)
        return insp.has_table(name)
    except Exception:
        return False

def upgrade() -> None:
    # ### Create all tables and ENUM types ###
    bind = op.get_bind()
    dialect_name = bind.dialect.name

    # paymentmethod is shared by three tables, so on PostgreSQL the types are
    # created up front and the columns reference them without re-creating.
    if dialect_name == 'postgresql':
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)
        enum = {name: postgresql.ENUM(*values, name=name, create_type=False) for name, values in ENUMS.items()}
    else:
        enum = {name: sa.Enum(*values, name=name) for name, values in ENUMS.items()}

    if not _has_table(bind, 'users'):
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('phone', sa.String(length=20), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('hashed_password', sa.String(length=255), nullable=False),
            sa.Column('role', sa.String(length=20), server_default='TENANT', nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_phone'), 'users', ['phone'], unique=True)

    if not _has_table(bind, 'properties'):
        op.create_table('properties',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('address', sa.String(length=300), nullable=False),
            sa.Column('city', sa.String(length=100), nullable=False),
            sa.Column('state', sa.String(length=100), nullable=False),
            sa.Column('pincode', sa.String(length=10), nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('amenities', sa.JSON(), nullable=False),
            sa.Column('rules', sa.JSON(), nullable=False),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.Column('phone', sa.String(length=20), nullable=True),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('google_maps_link', sa.String(length=500), nullable=True),
            sa.Column('latitude', sa.Float(), nullable=True),
            sa.Column('longitude', sa.Float(), nullable=True),
            sa.Column('website', sa.String(length=500), nullable=True),
            sa.Column('facebook', sa.String(length=500), nullable=True),
            sa.Column('instagram', sa.String(length=500), nullable=True),
            sa.Column('whatsapp', sa.String(length=20), nullable=True),
            sa.Column('breakfast_enabled', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('breakfast_price', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('breakfast_menu', sa.Text(), nullable=True),
            sa.Column('lunch_enabled', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('lunch_price', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('lunch_menu', sa.Text(), nullable=True),
            sa.Column('dinner_enabled', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('dinner_price', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('dinner_menu', sa.Text(), nullable=True),
            sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )

    if not _has_table(bind, 'rooms'):
        op.create_table('rooms',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('property_id', sa.Integer(), nullable=False),
            sa.Column('room_number', sa.String(length=20), nullable=False),
            sa.Column('floor', sa.Integer(), server_default='0', nullable=False),
            sa.Column('room_type', enum['roomtype'], nullable=False),
            sa.Column('has_ac', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('has_attached_bath', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('has_balcony', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('monthly_rent', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('security_deposit', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('daily_price', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('multi_bed_pricing', sa.JSON(), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('amenities', sa.JSON(), nullable=False),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('property_id', 'room_number', name='uq_rooms_property_room_number')
        )
        op.create_index(op.f('ix_rooms_property_id'), 'rooms', ['property_id'], unique=False)

    if not _has_table(bind, 'beds'):
        op.create_table('beds',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('bed_number', sa.String(length=10), nullable=False),
            sa.Column('status', enum['bedstatus'], server_default='AVAILABLE', nullable=False),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('room_id', 'bed_number', name='uq_beds_room_bed_number')
        )
        op.create_index(op.f('ix_beds_room_id'), 'beds', ['room_id'], unique=False)
        op.create_index(op.f('ix_beds_status'), 'beds', ['status'], unique=False)

    if not _has_table(bind, 'tenants'):
        op.create_table('tenants',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('bed_id', sa.Integer(), nullable=True),
            sa.Column('date_of_birth', sa.Date(), nullable=True),
            sa.Column('gender', sa.String(length=20), nullable=True),
            sa.Column('blood_group', sa.String(length=5), nullable=True),
            sa.Column('emergency_name', sa.String(length=200), nullable=True),
            sa.Column('emergency_phone', sa.String(length=20), nullable=True),
            sa.Column('emergency_relation', sa.String(length=50), nullable=True),
            sa.Column('occupation', sa.String(length=20), nullable=True),
            sa.Column('workplace_college', sa.String(length=200), nullable=True),
            sa.Column('work_address', sa.String(length=300), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('check_in_date', sa.Date(), nullable=True),
            sa.Column('expected_checkout', sa.Date(), nullable=True),
            sa.Column('actual_checkout', sa.Date(), nullable=True),
            sa.Column('notice_given_date', sa.Date(), nullable=True),
            sa.Column('notice_period_days', sa.Integer(), server_default='30', nullable=False),
            sa.Column('status', enum['tenantstatus'], server_default='ACTIVE', nullable=False),
            sa.Column('breakfast_subscribed', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('lunch_subscribed', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('dinner_subscribed', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.ForeignKeyConstraint(['bed_id'], ['beds.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id')
        )
        op.create_index(op.f('ix_tenants_id'), 'tenants', ['id'], unique=False)
        op.create_index(op.f('ix_tenants_bed_id'), 'tenants', ['bed_id'], unique=False)
        op.create_index(op.f('ix_tenants_status'), 'tenants', ['status'], unique=False)

    if not _has_table(bind, 'tenant_documents'):
        op.create_table('tenant_documents',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('tenant_id', sa.Integer(), nullable=False),
            sa.Column('document_type', enum['documenttype'], nullable=False),
            sa.Column('document_number', sa.String(length=50), nullable=False),
            sa.Column('file_url', sa.String(length=500), nullable=False),
            sa.Column('file_name', sa.String(length=255), nullable=False),
            sa.Column('is_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('verified_at', sa.DateTime(), nullable=True),
            sa.Column('uploaded_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_tenant_documents_tenant_id'), 'tenant_documents', ['tenant_id'], unique=False)

    if not _has_table(bind, 'bills'):
        op.create_table('bills',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('tenant_id', sa.Integer(), nullable=False),
            sa.Column('created_by_id', sa.Integer(), nullable=True),
            sa.Column('billing_month', sa.Date(), nullable=False),
            sa.Column('due_date', sa.Date(), nullable=False),
            sa.Column('total_amount', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('paid_amount', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('late_fee_applied', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('status', enum['billstatus'], server_default='DRAFT', nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('sent_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['created_by_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('tenant_id', 'billing_month', name='uq_bills_tenant_billing_month')
        )
        op.create_index(op.f('ix_bills_id'), 'bills', ['id'], unique=False)
        op.create_index(op.f('ix_bills_tenant_id'), 'bills', ['tenant_id'], unique=False)
        op.create_index(op.f('ix_bills_billing_month'), 'bills', ['billing_month'], unique=False)
        op.create_index(op.f('ix_bills_due_date'), 'bills', ['due_date'], unique=False)
        op.create_index(op.f('ix_bills_status'), 'bills', ['status'], unique=False)

    if not _has_table(bind, 'bill_line_items'):
        op.create_table('bill_line_items',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('bill_id', sa.Integer(), nullable=False),
            sa.Column('item_type', enum['billitemtype'], nullable=False),
            sa.Column('description', sa.String(length=300), nullable=False),
            sa.Column('quantity', sa.Numeric(precision=10, scale=2), server_default='1', nullable=False),
            sa.Column('unit_price', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_bill_line_items_bill_id'), 'bill_line_items', ['bill_id'], unique=False)

    if not _has_table(bind, 'payments'):
        op.create_table('payments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('bill_id', sa.Integer(), nullable=False),
            sa.Column('tenant_id', sa.Integer(), nullable=False),
            sa.Column('recorded_by_id', sa.Integer(), nullable=True),
            sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('payment_method', enum['paymentmethod'], nullable=False),
            sa.Column('status', enum['paymentstatus'], server_default='SUCCESS', nullable=False),
            sa.Column('transaction_date', sa.Date(), nullable=False),
            sa.Column('reference', sa.String(length=100), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['bill_id'], ['bills.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['recorded_by_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_payments_id'), 'payments', ['id'], unique=False)
        op.create_index(op.f('ix_payments_bill_id'), 'payments', ['bill_id'], unique=False)
        op.create_index(op.f('ix_payments_tenant_id'), 'payments', ['tenant_id'], unique=False)

    if not _has_table(bind, 'electricity_readings'):
        op.create_table('electricity_readings',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('bed_id', sa.Integer(), nullable=False),
            sa.Column('added_to_bill_id', sa.Integer(), nullable=True),
            sa.Column('reading_date', sa.Date(), nullable=False),
            sa.Column('previous_reading', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('current_reading', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('units_consumed', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('rate_per_unit', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('total_amount', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.ForeignKeyConstraint(['bed_id'], ['beds.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['added_to_bill_id'], ['bills.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_electricity_readings_bed_id'), 'electricity_readings', ['bed_id'], unique=False)

    if not _has_table(bind, 'security_deposits'):
        op.create_table('security_deposits',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('tenant_id', sa.Integer(), nullable=False),
            sa.Column('amount_paid', sa.Numeric(precision=10, scale=2), nullable=False),
            sa.Column('paid_date', sa.Date(), nullable=False),
            sa.Column('payment_method', enum['paymentmethod'], nullable=False),
            sa.Column('amount_refunded', sa.Numeric(precision=10, scale=2), server_default='0', nullable=False),
            sa.Column('refund_date', sa.Date(), nullable=True),
            sa.Column('refund_method', enum['paymentmethod'], nullable=True),
            sa.Column('deductions', sa.JSON(), nullable=True),
            sa.Column('status', sa.String(length=30), server_default='held', nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_security_deposits_id'), 'security_deposits', ['id'], unique=False)
        op.create_index(op.f('ix_security_deposits_tenant_id'), 'security_deposits', ['tenant_id'], unique=False)

    if not _has_table(bind, 'bookings'):
        op.create_table('bookings',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('bed_id', sa.Integer(), nullable=True),
            sa.Column('user_id', sa.Integer(), nullable=True),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=True),
            sa.Column('phone', sa.String(length=20), nullable=False),
            sa.Column('requested_checkin', sa.Date(), nullable=False),
            sa.Column('duration_months', sa.Integer(), server_default='1', nullable=False),
            sa.Column('expected_checkout', sa.Date(), nullable=True),
            sa.Column('ac_selected', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('breakfast_selected', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('lunch_selected', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('dinner_selected', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('advance_amount', sa.Numeric(precision=10, scale=2), nullable=True),
            sa.Column('advance_paid', sa.Boolean(), server_default=sa.false(), nullable=False),
            sa.Column('status', enum['bookingstatus'], server_default='PENDING', nullable=False),
            sa.Column('admin_notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['bed_id'], ['beds.id'], ondelete='SET NULL'),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_bookings_id'), 'bookings', ['id'], unique=False)
        op.create_index(op.f('ix_bookings_bed_id'), 'bookings', ['bed_id'], unique=False)
        op.create_index(op.f('ix_bookings_user_id'), 'bookings', ['user_id'], unique=False)
        op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)

    if not _has_table(bind, 'booking_beds'):
        op.create_table('booking_beds',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('booking_id', sa.Integer(), nullable=False),
            sa.Column('bed_id', sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['bed_id'], ['beds.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_booking_beds_booking_id'), 'booking_beds', ['booking_id'], unique=False)
        op.create_index(op.f('ix_booking_beds_bed_id'), 'booking_beds', ['bed_id'], unique=False)

    if not _has_table(bind, 'maintenance_requests'):
        op.create_table('maintenance_requests',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('tenant_id', sa.Integer(), nullable=False),
            sa.Column('room_id', sa.Integer(), nullable=False),
            sa.Column('category', sa.String(length=50), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('images', sa.JSON(), nullable=False),
            sa.Column('priority', enum['maintenancepriority'], server_default='MEDIUM', nullable=False),
            sa.Column('status', enum['maintenancestatus'], server_default='OPEN', nullable=False),
            sa.Column('resolved_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['room_id'], ['rooms.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_maintenance_requests_id'), 'maintenance_requests', ['id'], unique=False)
        op.create_index(op.f('ix_maintenance_requests_tenant_id'), 'maintenance_requests', ['tenant_id'], unique=False)
        op.create_index(op.f('ix_maintenance_requests_room_id'), 'maintenance_requests', ['room_id'], unique=False)
        op.create_index(op.f('ix_maintenance_requests_status'), 'maintenance_requests', ['status'], unique=False)

    if not _has_table(bind, 'testimonials'):
        op.create_table('testimonials',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('property_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('photo', sa.String(length=500), nullable=True),
            sa.Column('testimonial', sa.Text(), nullable=False),
            sa.Column('rating', sa.Integer(), server_default='5', nullable=False),
            sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_testimonials_property_id'), 'testimonials', ['property_id'], unique=False)

    if not _has_table(bind, 'announcements'):
        op.create_table('announcements',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('property_id', sa.Integer(), nullable=True),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_announcements_property_id'), 'announcements', ['property_id'], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    dialect_name = bind.dialect.name
    for table in (
        'announcements', 'testimonials', 'maintenance_requests', 'booking_beds', 'bookings',
        'security_deposits', 'electricity_readings', 'payments', 'bill_line_items', 'bills',
        'tenant_documents', 'tenants', 'beds', 'rooms', 'properties', 'users',
    ):
        op.drop_table(table)

    # Drop ENUM types for PostgreSQL
    if dialect_name == 'postgresql':
        for name in ENUMS:
            sa.Enum(name=name).drop(bind, checkfirst=True)
