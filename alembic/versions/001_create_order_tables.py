"""Create customer, catalog, order, invoice and order sequence tables

Revision ID: 001_order_tables
Revises:
Create Date: 2026-10-19

Money columns are Numeric(12, 2), percentages Numeric(5, 2).

Order numbers are unique (uq_orders_order_number) and allocated from
order_sequences, one row per prefix and YYYYMM period
(uq_order_sequences_period).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_order_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create order engine tables."""

    # ==================== customers ====================
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('uuid', sa.Uuid, unique=True, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('mobile', sa.String(20), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('address_line1', sa.String(255), nullable=True),
        sa.Column('address_line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('pincode', sa.String(10), nullable=True),
        sa.Column('customer_type', sa.String(20), server_default='regular', nullable=False),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('total_orders', sa.Integer, server_default='0', nullable=False),
        sa.Column('total_spent', sa.Numeric(12, 2), server_default='0', nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_customers_name', 'customers', ['name'])
    op.create_index('ix_customers_mobile', 'customers', ['mobile'])

    # ==================== catalog ====================
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('uuid', sa.Uuid, unique=True, nullable=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'services',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('uuid', sa.Uuid, unique=True, nullable=True),
        sa.Column('code', sa.String(50), unique=True, nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('category_id', sa.Integer,
                  sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('rate1', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('rate2', sa.Numeric(12, 2), nullable=True),
        sa.Column('rate3', sa.Numeric(12, 2), nullable=True),
        sa.Column('rate4', sa.Numeric(12, 2), nullable=True),
        sa.Column('rate5', sa.Numeric(12, 2), nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.true(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ==================== orders ====================
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('uuid', sa.Uuid, unique=True, nullable=False),
        sa.Column('order_number', sa.String(30), nullable=False),
        sa.Column('customer_id', sa.Integer,
                  sa.ForeignKey('customers.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('due_date', sa.Date, nullable=True),
        sa.Column('due_time', sa.Time, nullable=True),
        sa.Column('pickup_date', sa.Date, nullable=True),
        sa.Column('delivery_date', sa.Date, nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('priority', sa.String(20), server_default='normal', nullable=False),
        sa.Column('total_quantity', sa.Integer, server_default='0', nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_percentage', sa.Numeric(5, 2), server_default='0', nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('tax_percentage', sa.Numeric(5, 2), server_default='0', nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('advance_paid', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('remaining_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_by', sa.String(64), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
    )
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])
    op.create_index('ix_order_status_created', 'orders', ['status', 'created_at'])
    op.create_index('ix_order_customer_status', 'orders', ['customer_id', 'status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('order_id', sa.Integer,
                  sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Integer, nullable=False),
        sa.Column('service_name', sa.String(200), nullable=False),
        sa.Column('quantity', sa.Integer, server_default='1', nullable=False),
        sa.Column('rate', sa.Numeric(12, 2), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    # ==================== invoices ====================
    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('uuid', sa.Uuid, unique=True, nullable=True),
        sa.Column('order_id', sa.Integer,
                  sa.ForeignKey('orders.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('invoice_number', sa.String(30), unique=True, nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('discount_amount', sa.Numeric(12, 2), server_default='0', nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('pdf_url', sa.String(500), nullable=True),
        sa.Column('is_cancelled', sa.Boolean, server_default=sa.false(), nullable=True),
        sa.Column('invoice_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_invoices_order_id', 'invoices', ['order_id'])

    # ==================== order_sequences ====================
    op.create_table(
        'order_sequences',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('prefix', sa.String(10), server_default='ORD', nullable=False),
        sa.Column('period', sa.String(6), nullable=False, comment='YYYYMM'),
        sa.Column('current_number', sa.Integer, server_default='0', nullable=False),
        sa.Column('padding_length', sa.Integer, server_default='4', nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('prefix', 'period', name='uq_order_sequences_period'),
    )


def downgrade() -> None:
    """Drop order engine tables."""
    op.drop_table('order_sequences')
    op.drop_index('ix_invoices_order_id', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_order_customer_status', table_name='orders')
    op.drop_index('ix_order_status_created', table_name='orders')
    op.drop_index('ix_orders_created_at', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_table('orders')
    op.drop_table('services')
    op.drop_table('categories')
    op.drop_index('ix_customers_mobile', table_name='customers')
    op.drop_index('ix_customers_name', table_name='customers')
    op.drop_table('customers')
