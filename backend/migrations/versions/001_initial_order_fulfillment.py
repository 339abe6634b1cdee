"""Initial order fulfillment schema

Revision ID: 001_initial_order_fulfillment
Revises:
Create Date: 2026-02-16

Creates the catalog lookups (customers, inventory_items), orders and their
lines, production records, dispatches, payment follow-ups, payment records,
the order activity timeline and the order number counter.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_order_fulfillment'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create all order fulfillment tables."""

    # Catalog lookups
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_customers_id', 'customers', ['id'])

    op.create_table(
        'inventory_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sr_no', sa.Integer(), nullable=True),
        sa.Column('item_name', sa.String(255), nullable=False),
        sa.Column('parent_item_id', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['parent_item_id'], ['inventory_items.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_inventory_items_id', 'inventory_items', ['id'])
    op.create_index('ix_inventory_items_sr_no', 'inventory_items', ['sr_no'])
    op.create_index('ix_inventory_items_parent_item_id', 'inventory_items', ['parent_item_id'])

    # Orders
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('internal_order_number', sa.String(20), nullable=False),
        sa.Column('sales_order_number', sa.String(100), nullable=True),
        sa.Column('cash_discount', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('order_status', sa.String(50), nullable=False, server_default='Pending'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='Pending'),
        sa.Column('partial_payment_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('remaining_payment_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('invoice_number', sa.String(50), nullable=True),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'])
    op.create_index('ix_orders_internal_order_number', 'orders', ['internal_order_number'], unique=True)
    op.create_index('ix_orders_sales_order_number', 'orders', ['sales_order_number'])
    op.create_index('ix_orders_order_status', 'orders', ['order_status'])
    op.create_index('ix_orders_payment_status', 'orders', ['payment_status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])

    op.create_table(
        'order_number_counters',
        sa.Column('prefix', sa.String(10), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('prefix')
    )

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('inventory_item_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['inventory_item_id'], ['inventory_items.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_inventory_item_id', 'order_items', ['inventory_item_id'])

    # Production
    op.create_table(
        'production_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('production_number', sa.Integer(), nullable=False),
        sa.Column('production_type', sa.String(20), nullable=False),
        sa.Column('selected_quantities', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('pdf_file_name', sa.String(255), nullable=True),
        sa.Column('pdf_file_url', sa.String(1024), nullable=True),
        sa.Column('pdf_file_size', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id', 'production_number', name='uq_production_records_order_number')
    )
    op.create_index('ix_production_records_id', 'production_records', ['id'])
    op.create_index('ix_production_records_order_id', 'production_records', ['order_id'])
    op.create_index('ix_production_records_status', 'production_records', ['status'])

    # Dispatch
    op.create_table(
        'dispatches',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('production_record_id', sa.Integer(), nullable=True),
        sa.Column('courier_company_id', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('dispatch_type', sa.String(20), nullable=False),
        sa.Column('dispatch_date', sa.Date(), nullable=False, server_default=sa.text('CURRENT_DATE')),
        sa.Column('shipment_status', sa.String(20), nullable=False, server_default='ready'),
        sa.Column('tracking_id', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['production_record_id'], ['production_records.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_dispatches_id', 'dispatches', ['id'])
    op.create_index('ix_dispatches_order_id', 'dispatches', ['order_id'])
    op.create_index('ix_dispatches_production_record_id', 'dispatches', ['production_record_id'])
    op.create_index('ix_dispatches_dispatch_type', 'dispatches', ['dispatch_type'])
    op.create_index('ix_dispatches_shipment_status', 'dispatches', ['shipment_status'])
    op.create_index('ix_dispatches_created_at', 'dispatches', ['created_at'])

    op.create_table(
        'dispatch_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('dispatch_id', sa.Integer(), nullable=False),
        sa.Column('order_item_id', sa.Integer(), nullable=True),
        sa.Column('inventory_item_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['dispatch_id'], ['dispatches.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['order_item_id'], ['order_items.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['inventory_item_id'], ['inventory_items.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_dispatch_items_id', 'dispatch_items', ['id'])
    op.create_index('ix_dispatch_items_dispatch_id', 'dispatch_items', ['dispatch_id'])
    op.create_index('ix_dispatch_items_order_item_id', 'dispatch_items', ['order_item_id'])

    # Payments
    op.create_table(
        'payment_followups',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('followup_date', sa.Date(), nullable=False),
        sa.Column('payment_received', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payment_followups_id', 'payment_followups', ['id'])
    op.create_index('ix_payment_followups_order_id', 'payment_followups', ['order_id'])
    op.create_index('ix_payment_followups_followup_date', 'payment_followups', ['followup_date'])

    op.create_table(
        'order_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False, server_default=sa.text('CURRENT_DATE')),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_order_payments_amount_positive')
    )
    op.create_index('ix_order_payments_id', 'order_payments', ['id'])
    op.create_index('ix_order_payments_order_id', 'order_payments', ['order_id'])
    op.create_index('ix_order_payments_payment_date', 'order_payments', ['payment_date'])

    # Activity timeline
    op.create_table(
        'order_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('old_value', sa.String(100), nullable=True),
        sa.Column('new_value', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_events_id', 'order_events', ['id'])
    op.create_index('ix_order_events_order_id', 'order_events', ['order_id'])
    op.create_index('ix_order_events_user_id', 'order_events', ['user_id'])
    op.create_index('ix_order_events_event_type', 'order_events', ['event_type'])
    op.create_index('ix_order_events_created_at', 'order_events', ['created_at'])


def downgrade():
    """Drop all order fulfillment tables."""
    op.drop_table('order_events')
    op.drop_table('order_payments')
    op.drop_table('payment_followups')
    op.drop_table('dispatch_items')
    op.drop_table('dispatches')
    op.drop_table('production_records')
    op.drop_table('order_items')
    op.drop_table('order_number_counters')
    op.drop_table('orders')
    op.drop_table('inventory_items')
    op.drop_table('customers')
