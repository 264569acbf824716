"""Create pricing core tables

Revision ID: 001_pricing_core
Revises:
Create Date: 2026-10-18

Tenants, suppliers, the service catalog with its category detail records,
seasonal rates, exchange rates, bookings, booking items and client payments.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '001_pricing_core'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SERVICE_CATEGORIES = ('HOTEL_ROOM', 'TRANSFER', 'VEHICLE_HIRE', 'GUIDE_SERVICE', 'ACTIVITY')


def _tenant_columns():
    return [
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', postgresql.UUID(as_uuid=True), nullable=False),
    ]


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _tenant_fk():
    return sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE')


def upgrade() -> None:
    service_category = postgresql.ENUM(*SERVICE_CATEGORIES, name='service_category_enum', create_type=False)
    booking_status = postgresql.ENUM('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', name='booking_status_enum', create_type=False)
    payment_status = postgresql.ENUM('PENDING', 'COMPLETED', 'FAILED', 'REFUNDED', name='payment_status_enum', create_type=False)

    bind = op.get_bind()
    service_category.create(bind, checkfirst=True)
    booking_status.create(bind, checkfirst=True)
    payment_status.create(bind, checkfirst=True)

    # Tenants
    op.create_table('tenants',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('slug', sa.String(length=100), nullable=False),
        sa.Column('default_markup_pct', sa.DECIMAL(precision=5, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        sa.CheckConstraint('default_markup_pct >= 0', name='ck_tenants_default_markup'),
    )

    # Suppliers
    op.create_table('suppliers',
        *_tenant_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('contact_email', sa.String(length=255), nullable=True),
        sa.Column('contact_phone', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_suppliers_tenant_id', 'suppliers', ['tenant_id'])
    op.create_index('ix_suppliers_name', 'suppliers', ['name'])

    # Service offerings
    op.create_table('service_offerings',
        *_tenant_columns(),
        sa.Column('supplier_id', sa.BigInteger(), nullable=False),
        sa.Column('category', service_category, nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('markup_pct', sa.DECIMAL(precision=5, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['supplier_id'], ['suppliers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('markup_pct >= 0', name='ck_service_offerings_markup'),
    )
    op.create_index('ix_service_offerings_tenant_id', 'service_offerings', ['tenant_id'])
    op.create_index('ix_service_offerings_supplier_id', 'service_offerings', ['supplier_id'])
    op.create_index('ix_service_offerings_category', 'service_offerings', ['category'])

    # Category detail records (one per offering)
    details = {
        'hotel_rooms': [
            sa.Column('hotel_name', sa.String(length=255), nullable=False),
            sa.Column('room_type', sa.String(length=100), nullable=False),
            sa.Column('max_occupancy', sa.Integer(), nullable=True),
        ],
        'transfers': [
            sa.Column('origin_zone', sa.String(length=255), nullable=False),
            sa.Column('dest_zone', sa.String(length=255), nullable=False),
            sa.Column('transfer_type', sa.String(length=50), nullable=True),
            sa.Column('vehicle_class', sa.String(length=50), nullable=True),
        ],
        'vehicles': [
            sa.Column('make', sa.String(length=100), nullable=False),
            sa.Column('model', sa.String(length=100), nullable=False),
            sa.Column('vehicle_class', sa.String(length=50), nullable=True),
            sa.Column('with_driver', sa.Boolean(), server_default='false', nullable=False),
        ],
        'guides': [
            sa.Column('guide_name', sa.String(length=255), nullable=False),
            sa.Column('languages', postgresql.JSONB(), nullable=True),
        ],
        'activities': [
            sa.Column('operator_name', sa.String(length=255), nullable=False),
            sa.Column('activity_type', sa.String(length=100), nullable=True),
            sa.Column('duration_minutes', sa.Integer(), nullable=True),
        ],
    }
    for table, columns in details.items():
        op.create_table(table,
            *_tenant_columns(),
            sa.Column('service_offering_id', sa.BigInteger(), nullable=False),
            *columns,
            *_timestamps(),
            _tenant_fk(),
            sa.ForeignKeyConstraint(['service_offering_id'], ['service_offerings.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('service_offering_id'),
        )
        op.create_index(f'ix_{table}_tenant_id', table, ['tenant_id'])

    # Seasonal rates (category-specific payload)
    op.create_table('seasonal_rates',
        *_tenant_columns(),
        sa.Column('service_offering_id', sa.BigInteger(), nullable=False),
        sa.Column('category', service_category, nullable=False),
        sa.Column('season_from', sa.Date(), nullable=False),
        sa.Column('season_to', sa.Date(), nullable=False),
        sa.Column('payload', postgresql.JSONB(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['service_offering_id'], ['service_offerings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('season_to >= season_from', name='ck_seasonal_rates_window'),
    )
    op.create_index('ix_seasonal_rates_tenant_id', 'seasonal_rates', ['tenant_id'])
    op.create_index('ix_seasonal_rates_service_offering_id', 'seasonal_rates', ['service_offering_id'])
    op.create_index(
        'ix_seasonal_rates_offering_season', 'seasonal_rates',
        ['service_offering_id', 'season_from', 'season_to'],
    )

    # Exchange rates
    op.create_table('exchange_rates',
        *_tenant_columns(),
        sa.Column('from_currency', sa.String(length=3), server_default='TRY', nullable=False),
        sa.Column('to_currency', sa.String(length=3), server_default='EUR', nullable=False),
        sa.Column('rate', sa.DECIMAL(precision=12, scale=6), nullable=False),
        sa.Column('rate_date', sa.Date(), nullable=False),
        sa.Column('source', sa.String(length=50), server_default='manual', nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('rate > 0', name='ck_exchange_rates_positive'),
    )
    op.create_index('ix_exchange_rates_tenant_id', 'exchange_rates', ['tenant_id'])
    op.create_index(
        'ix_exchange_rates_pair_date', 'exchange_rates',
        ['tenant_id', 'from_currency', 'to_currency', 'rate_date'],
    )

    # Bookings
    op.create_table('bookings',
        *_tenant_columns(),
        sa.Column('booking_code', sa.String(length=50), nullable=False),
        sa.Column('client_name', sa.String(length=255), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', booking_status, server_default='PENDING', nullable=False),
        sa.Column('locked_exchange_rate', sa.DECIMAL(precision=12, scale=6), nullable=False),
        sa.Column('total_cost_try', sa.DECIMAL(precision=14, scale=2), server_default='0', nullable=False),
        sa.Column('total_sell_eur', sa.DECIMAL(precision=12, scale=2), server_default='0', nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bookings_tenant_id', 'bookings', ['tenant_id'])
    op.create_index('ix_bookings_booking_code', 'bookings', ['booking_code'])

    # Booking items
    op.create_table('booking_items',
        *_tenant_columns(),
        sa.Column('booking_id', sa.BigInteger(), nullable=False),
        sa.Column('service_offering_id', sa.BigInteger(), nullable=True),
        sa.Column('item_type', sa.String(length=30), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('qty', sa.Integer(), server_default='1', nullable=False),
        sa.Column('unit_cost_try', sa.DECIMAL(precision=14, scale=2), nullable=False),
        sa.Column('unit_price_eur', sa.DECIMAL(precision=12, scale=2), nullable=False),
        sa.Column('pricing_snapshot_json', postgresql.JSONB(), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_offering_id'], ['service_offerings.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_booking_items_tenant_id', 'booking_items', ['tenant_id'])
    op.create_index('ix_booking_items_booking_id', 'booking_items', ['booking_id'])

    # Client payments
    op.create_table('payment_clients',
        *_tenant_columns(),
        sa.Column('booking_id', sa.BigInteger(), nullable=False),
        sa.Column('amount_eur', sa.DECIMAL(precision=12, scale=2), nullable=False),
        sa.Column('method', sa.String(length=30), server_default='BANK_TRANSFER', nullable=True),
        sa.Column('status', payment_status, server_default='PENDING', nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('txn_ref', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount_eur > 0', name='ck_payment_clients_positive'),
    )
    op.create_index('ix_payment_clients_tenant_id', 'payment_clients', ['tenant_id'])
    op.create_index('ix_payment_clients_booking_id', 'payment_clients', ['booking_id'])


def downgrade() -> None:
    for table in (
        'payment_clients',
        'booking_items',
        'bookings',
        'exchange_rates',
        'seasonal_rates',
        'activities',
        'guides',
        'vehicles',
        'transfers',
        'hotel_rooms',
        'service_offerings',
        'suppliers',
        'tenants',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_name in ('payment_status_enum', 'booking_status_enum', 'service_category_enum'):
        postgresql.ENUM(name=enum_name).drop(bind, checkfirst=True)
