"""Initial cart reminder schema

Revision ID: 5c1d2a7e9b40
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1d2a7e9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create shops table
    op.create_table('shops',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('shop_domain', sa.String(length=255), nullable=False),
    sa.Column('is_active', sa.Boolean(), nullable=False),
    sa.Column('shopify_plan', sa.String(length=100), nullable=True),
    sa.Column('shopify_id', sa.String(length=100), nullable=True),
    sa.Column('installed_at', sa.DateTime(), nullable=False),
    sa.Column('uninstalled_at', sa.DateTime(), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_shops_shop_domain'), 'shops', ['shop_domain'], unique=True)

    # Create carts table
    op.create_table('carts',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('shop_domain', sa.String(length=255), nullable=False),
    sa.Column('cart_id', sa.String(length=255), nullable=False),
    sa.Column('cart_token', sa.String(length=255), nullable=False),
    sa.Column('customer_id', sa.String(length=255), nullable=True),
    sa.Column('customer_first_name', sa.String(length=255), nullable=True),
    sa.Column('customer_last_name', sa.String(length=255), nullable=True),
    sa.Column('customer_email', sa.String(length=255), nullable=True),
    sa.Column('customer_phone', sa.String(length=50), nullable=True),
    sa.Column('cart_data', sa.JSON(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.Column('is_abandoned', sa.Boolean(), nullable=False),
    sa.Column('abandoned_at', sa.DateTime(), nullable=True),
    sa.Column('reminder_sent', sa.Boolean(), nullable=False),
    sa.Column('reminder_sent_at', sa.DateTime(), nullable=True),
    sa.Column('converted', sa.Boolean(), nullable=False),
    sa.Column('converted_at', sa.DateTime(), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('shop_domain', 'cart_id', name='uq_carts_shop_cart')
    )
    op.create_index(op.f('ix_carts_shop_domain'), 'carts', ['shop_domain'], unique=False)
    op.create_index(op.f('ix_carts_cart_id'), 'carts', ['cart_id'], unique=False)
    op.create_index(op.f('ix_carts_cart_token'), 'carts', ['cart_token'], unique=False)
    op.create_index('ix_carts_abandonment_scan', 'carts', ['shop_domain', 'updated_at', 'converted', 'reminder_sent'], unique=False)

    # Create shop_settings table
    op.create_table('shop_settings',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('shop_domain', sa.String(length=255), nullable=False),
    sa.Column('shop_name', sa.String(length=255), nullable=False),
    sa.Column('reminders_enabled', sa.Boolean(), nullable=False),
    sa.Column('hour_threshold', sa.Integer(), nullable=False),
    sa.Column('message_template', sa.Text(), nullable=False),
    sa.Column('ccai_client_id', sa.String(length=255), nullable=False),
    sa.Column('ccai_api_key', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_shop_settings_shop_domain'), 'shop_settings', ['shop_domain'], unique=True)

    # Create sms_history table
    op.create_table('sms_history',
    sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
    sa.Column('shop_domain', sa.String(length=255), nullable=False),
    sa.Column('recipient_first_name', sa.String(length=255), nullable=True),
    sa.Column('recipient_last_name', sa.String(length=255), nullable=True),
    sa.Column('recipient_phone', sa.String(length=50), nullable=False),
    sa.Column('message', sa.Text(), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=True),
    sa.Column('message_id', sa.String(length=255), nullable=True),
    sa.Column('status', sa.Enum('SENT', 'DELIVERED', 'FAILED', 'UNKNOWN', name='smsstatus'), nullable=False),
    sa.Column('error', sa.Text(), nullable=True),
    sa.Column('message_type', sa.Enum('ABANDONED_CART', 'TEST', 'OTHER', name='smsmessagetype'), nullable=False),
    sa.Column('cart_id', sa.String(length=255), nullable=True),
    sa.Column('timestamp', sa.DateTime(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sms_history_shop_domain'), 'sms_history', ['shop_domain'], unique=False)
    op.create_index(op.f('ix_sms_history_timestamp'), 'sms_history', ['timestamp'], unique=False)
    op.create_index('ix_sms_history_shop_timestamp', 'sms_history', ['shop_domain', 'timestamp'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_sms_history_shop_timestamp', table_name='sms_history')
    op.drop_index(op.f('ix_sms_history_timestamp'), table_name='sms_history')
    op.drop_index(op.f('ix_sms_history_shop_domain'), table_name='sms_history')
    op.drop_table('sms_history')
    sa.Enum(name='smsmessagetype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='smsstatus').drop(op.get_bind(), checkfirst=True)

    op.drop_index(op.f('ix_shop_settings_shop_domain'), table_name='shop_settings')
    op.drop_table('shop_settings')

    op.drop_index('ix_carts_abandonment_scan', table_name='carts')
    op.drop_index(op.f('ix_carts_cart_token'), table_name='carts')
    op.drop_index(op.f('ix_carts_cart_id'), table_name='carts')
    op.drop_index(op.f('ix_carts_shop_domain'), table_name='carts')
    op.drop_table('carts')

    op.drop_index(op.f('ix_shops_shop_domain'), table_name='shops')
    op.drop_table('shops')
