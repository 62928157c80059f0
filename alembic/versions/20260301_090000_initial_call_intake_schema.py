"""initial call intake schema: workshops, calls, call_analysis, customers, vehicles, bookings

Revision ID: 20260301_090000
Revises:
Create Date: 2026-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20260301_090000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _now() -> sa.TextClause:
    return sa.text("now()")


def upgrade() -> None:
    """Create the call intake tables"""
    op.create_table(
        'workshops',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('vapi_phone_number', sa.String(20), nullable=False),
        sa.Column('business_hours', postgresql.JSONB, nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index('ix_workshops_vapi_phone_number', 'workshops', ['vapi_phone_number'])

    op.create_table(
        'calls',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('workshop_id', sa.BigInteger, sa.ForeignKey('workshops.id'), nullable=False),
        sa.Column('from_number', sa.String(20), nullable=True),
        sa.Column('to_number', sa.String(20), nullable=True),
        sa.Column('vapi_call_id', sa.String(100), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='initiated'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_seconds', sa.Integer, nullable=True),
        sa.Column('cost_usd', sa.Numeric(10, 4), nullable=True),
        sa.Column('recording_url', sa.Text, nullable=True),
        sa.Column('transcript', sa.Text, nullable=True),
        sa.Column('ended_reason', sa.Text, nullable=True),
    )
    op.create_index('ix_calls_workshop_id_started_at', 'calls', ['workshop_id', 'started_at'])
    op.create_index('ix_calls_vapi_call_id', 'calls', ['vapi_call_id'])

    op.create_table(
        'call_analysis',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('call_id', sa.BigInteger, sa.ForeignKey('calls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('structured_data', postgresql.JSONB, nullable=False),
        sa.Column('customer_name', sa.Text, nullable=True),
        sa.Column('customer_phone', sa.Text, nullable=True),
        sa.Column('customer_email', sa.Text, nullable=True),
        sa.Column('vehicle_make', sa.Text, nullable=True),
        sa.Column('vehicle_model', sa.Text, nullable=True),
        sa.Column('vehicle_year', sa.Integer, nullable=True),
        sa.Column('issue_summary', sa.Text, nullable=True),
        sa.Column('issue_category', sa.Text, nullable=True),
        sa.Column('urgency', sa.Text, nullable=True),
        sa.Column('preferred_date', sa.Text, nullable=True),
        sa.Column('preferred_time', sa.Text, nullable=True),
        sa.Column('booking_confirmed', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('sentiment', sa.Text, nullable=False, server_default='neutral'),
        sa.Column('booking_created', sa.Boolean, nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index('ix_call_analysis_call_id', 'call_analysis', ['call_id'])

    op.create_table(
        'customers',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('workshop_id', sa.BigInteger, sa.ForeignKey('workshops.id'), nullable=False),
        sa.Column('name', sa.Text, nullable=False),
        sa.Column('phone', sa.Text, nullable=True),
        sa.Column('email', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.UniqueConstraint('workshop_id', 'phone', name='uq_customers_workshop_id_phone'),
    )

    op.create_table(
        'vehicles',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('customer_id', sa.BigInteger, sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('make', sa.Text, nullable=False),
        sa.Column('model', sa.Text, nullable=False),
        sa.Column('year', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index('ix_vehicles_customer_id', 'vehicles', ['customer_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column('workshop_id', sa.BigInteger, sa.ForeignKey('workshops.id'), nullable=False),
        sa.Column('customer_id', sa.BigInteger, sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('vehicle_id', sa.BigInteger, sa.ForeignKey('vehicles.id'), nullable=True),
        sa.Column('call_id', sa.BigInteger, sa.ForeignKey('calls.id'), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('issue_summary', sa.Text, nullable=True),
        sa.Column('issue_category', sa.Text, nullable=False, server_default='other'),
        sa.Column('urgency', sa.Text, nullable=False, server_default='normal'),
        sa.Column('status', sa.String(32), nullable=False, server_default='confirmed'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index('ix_bookings_workshop_id_scheduled_at', 'bookings', ['workshop_id', 'scheduled_at'])
    op.create_index('ix_bookings_call_id', 'bookings', ['call_id'])


def downgrade() -> None:
    """Drop the call intake tables"""
    op.drop_index('ix_bookings_call_id', table_name='bookings')
    op.drop_index('ix_bookings_workshop_id_scheduled_at', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_vehicles_customer_id', table_name='vehicles')
    op.drop_table('vehicles')
    op.drop_table('customers')
    op.drop_index('ix_call_analysis_call_id', table_name='call_analysis')
    op.drop_table('call_analysis')
    op.drop_index('ix_calls_vapi_call_id', table_name='calls')
    op.drop_index('ix_calls_workshop_id_started_at', table_name='calls')
    op.drop_table('calls')
    op.drop_index('ix_workshops_vapi_phone_number', table_name='workshops')
    op.drop_table('workshops')
