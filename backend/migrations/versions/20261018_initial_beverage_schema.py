"""Initial beverage ordering schema

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

Creates:
1. users, user_sessions (bearer sessions with login/logout audit)
2. beverages, inventory_transactions (stock and its signed ledger)
3. orders
4. ratings, favorites
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def upgrade():
    # ==========================================================================
    # 1. USERS AND SESSIONS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=120), nullable=False),
        sa.Column('department', sa.String(length=120), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('work_start_time', sa.String(length=5), nullable=True),
        sa.Column('work_end_time', sa.String(length=5), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_username'), ['username'], unique=True)
        batch_op.create_index('ix_users_role_active', ['role', 'is_active'], unique=False)

    op.create_table('user_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('login_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('logout_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('session_duration', sa.Integer(), nullable=True),
        sa.Column('ip_address', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('end_reason', sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('user_sessions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_user_sessions_user_id'), ['user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_user_sessions_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index('ix_user_sessions_user_active', ['user_id', 'is_active'], unique=False)
        batch_op.create_index('ix_user_sessions_login_time', ['login_time'], unique=False)

    # ==========================================================================
    # 2. BEVERAGES
    # ==========================================================================
    op.create_table('beverages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('category', sa.String(length=16), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('min_stock_alert', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('unit_price', sa.Float(), nullable=False, server_default='0'),
        sa.Column('caffeine_level', sa.String(length=16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_beverages_stock_nonnegative'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('beverages', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_beverages_name'), ['name'], unique=False)
        batch_op.create_index('ix_beverages_category_active', ['category', 'is_active'], unique=False)

    # ==========================================================================
    # 3. ORDERS
    # ==========================================================================
    op.create_table('orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=True),
        sa.Column('beverage_id', sa.Integer(), nullable=True),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('cup_size', sa.String(length=8), nullable=False),
        sa.Column('sugar_quantity', sa.String(length=8), nullable=False),
        sa.Column('add_ons', sa.JSON(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('fulfilled_by', sa.Integer(), nullable=True),
        sa.Column('fulfilled_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['employee_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['beverage_id'], ['beverages.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['fulfilled_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_orders_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_beverage_id'), ['beverage_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_order_date'), ['order_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_status'), ['status'], unique=False)
        batch_op.create_index('ix_orders_employee_date_status', ['employee_id', 'order_date', 'status'], unique=False)
        batch_op.create_index('ix_orders_date_status', ['order_date', 'status'], unique=False)

    # ==========================================================================
    # 4. INVENTORY TRANSACTIONS
    # ==========================================================================
    op.create_table('inventory_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('beverage_id', sa.Integer(), nullable=True),
        sa.Column('transaction_type', sa.String(length=32), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('performed_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('quantity <> 0', name='ck_invtx_quantity_nonzero'),
        sa.ForeignKeyConstraint(['beverage_id'], ['beverages.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['performed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('inventory_transactions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_inventory_transactions_beverage_id'), ['beverage_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_inventory_transactions_transaction_type'), ['transaction_type'], unique=False)
        batch_op.create_index(batch_op.f('ix_inventory_transactions_order_id'), ['order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_inventory_transactions_performed_by'), ['performed_by'], unique=False)
        batch_op.create_index('ix_invtx_beverage_created', ['beverage_id', 'created_at'], unique=False)
        batch_op.create_index('ix_invtx_type_created', ['transaction_type', 'created_at'], unique=False)

    # ==========================================================================
    # 5. RATINGS AND FAVORITES
    # ==========================================================================
    op.create_table('ratings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('beverage_id', sa.Integer(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.String(length=500), nullable=True),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_ratings_range'),
        sa.ForeignKeyConstraint(['employee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['beverage_id'], ['beverages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'beverage_id', name='uq_ratings_employee_beverage'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('ratings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ratings_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_ratings_beverage_id'), ['beverage_id'], unique=False)

    op.create_table('favorites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('beverage_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['beverage_id'], ['beverages.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'beverage_id', name='uq_favorites_employee_beverage'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('favorites', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_favorites_employee_id'), ['employee_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_favorites_beverage_id'), ['beverage_id'], unique=False)


def downgrade():
    op.drop_table('favorites')
    op.drop_table('ratings')
    op.drop_table('inventory_transactions')
    op.drop_table('orders')
    op.drop_table('beverages')
    op.drop_table('user_sessions')
    op.drop_table('users')
