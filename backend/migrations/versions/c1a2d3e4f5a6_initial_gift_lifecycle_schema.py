"""initial gift lifecycle schema

Revision ID: c1a2d3e4f5a6
Revises:
Create Date: 2026-10-16 00:00:00.000000

Creates the complete schema:
- accounts, session_tokens: buyers/senders and their bearer sessions
- partners: redeeming merchants (API-key authenticated)
- gift_types: purchasable catalog
- inventory_entries: per-account unit counts (quantity >= 0)
- purchases, purchase_lines: append-only receipts
- gift_transactions: one row per sent unit, issued -> redeemed
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c1a2d3e4f5a6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('device_id', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_accounts_email'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_account', 'session_tokens', ['account_id'])

    op.create_table(
        'partners',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_name', sa.String(length=255), nullable=False),
        sa.Column('owner_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=120), nullable=True),
        sa.Column('business_type', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('api_key_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_partners_email'),
        sa.UniqueConstraint('api_key_hash'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'gift_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('emoji', sa.String(length=16), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('price_cents >= 0', name='ck_gift_types_price_nonnegative'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_gift_types_category_name', 'gift_types', ['category', 'name'])

    # ============================================================================
    # inventory_entries: one row per (account, gift type), never deleted
    # ============================================================================
    op.create_table(
        'inventory_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('gift_type_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.CheckConstraint('quantity >= 0', name='ck_inventory_quantity_nonnegative'),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.ForeignKeyConstraint(['gift_type_id'], ['gift_types.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_id', 'gift_type_id', name='uq_inventory_account_gift'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_inventory_entries_account_id', 'inventory_entries', ['account_id'])

    # ============================================================================
    # purchases / purchase_lines: append-only receipts
    # ============================================================================
    op.create_table(
        'purchases',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['account_id'], ['accounts.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_purchases_account_created', 'purchases', ['account_id', 'created_at'])

    op.create_table(
        'purchase_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('purchase_id', sa.String(length=36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('gift_type_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['purchase_id'], ['purchases.id']),
        sa.ForeignKeyConstraint(['gift_type_id'], ['gift_types.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('purchase_id', 'position', name='uq_purchase_lines_position'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_purchase_lines_purchase_id', 'purchase_lines', ['purchase_id'])

    # ============================================================================
    # gift_transactions: issued -> redeemed, redemption_code unique
    # ============================================================================
    op.create_table(
        'gift_transactions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('receiver_email', sa.String(length=255), nullable=True),
        sa.Column('gift_type_id', sa.Integer(), nullable=False),
        sa.Column('redemption_code', sa.String(length=64), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('redeemed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('partner_id', sa.Integer(), nullable=True),
        sa.CheckConstraint("status IN ('issued', 'redeemed')", name='ck_gift_transactions_status'),
        sa.ForeignKeyConstraint(['sender_id'], ['accounts.id']),
        sa.ForeignKeyConstraint(['gift_type_id'], ['gift_types.id']),
        sa.ForeignKeyConstraint(['partner_id'], ['partners.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('redemption_code', name='uq_gift_transactions_code'),
    )
    op.create_index('ix_gift_transactions_sender_created', 'gift_transactions', ['sender_id', 'created_at'])
    op.create_index('ix_gift_transactions_status', 'gift_transactions', ['status'])
    op.create_index('ix_gift_transactions_partner_id', 'gift_transactions', ['partner_id'])


def downgrade():
    op.drop_table('gift_transactions')
    op.drop_table('purchase_lines')
    op.drop_table('purchases')
    op.drop_table('inventory_entries')
    op.drop_table('gift_types')
    op.drop_table('partners')
    op.drop_table('session_tokens')
    op.drop_table('accounts')
