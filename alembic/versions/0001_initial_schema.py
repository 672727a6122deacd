"""Initial schema: subscriptions, user settings, notification and AI request logs

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('cost', sa.Numeric(10, 2), nullable=False),
        sa.Column('billing_cycle', sa.String(20), nullable=False),
        sa.Column('next_billing_date', sa.Date, nullable=False),
        sa.Column('category', sa.String(100)),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('payment_method', sa.String(100)),
        sa.Column('icon', sa.String(100)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_subscriptions_user_id', 'subscriptions', ['user_id'])
    op.create_index(
        'ix_subscriptions_user_next_billing',
        'subscriptions',
        ['user_id', 'next_billing_date'],
    )

    op.create_table(
        'user_settings',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('currency', sa.String(3), server_default='USD', nullable=False),
        sa.Column('monthly_budget', sa.Numeric(10, 2)),
        sa.Column('yearly_budget', sa.Numeric(10, 2)),
        sa.Column('budget_alert_threshold', sa.Numeric(5, 2), server_default='80.00', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_user_settings_user_id', 'user_settings', ['user_id'], unique=True)

    op.create_table(
        'email_notifications',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('subscription_id', sa.Integer, server_default='0', nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('details', postgresql.JSONB),
    )
    op.create_index(
        'ix_email_notifications_lookup',
        'email_notifications',
        ['user_id', 'subscription_id', 'type', 'sent_at'],
    )

    op.create_table(
        'ai_requests',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.String(255), nullable=False),
        sa.Column('endpoint', sa.String(50), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('input_length', sa.Integer),
    )
    op.create_index(
        'ix_ai_requests_user_requested_at',
        'ai_requests',
        ['user_id', 'requested_at'],
    )

    # Row-level security: owners only see their own rows
    for table in ('subscriptions', 'user_settings', 'email_notifications', 'ai_requests'):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(f"""
            CREATE POLICY "{table}_owner" ON {table}
            FOR ALL USING (auth.uid()::text = user_id)
        """)


def downgrade() -> None:
    for table in ('ai_requests', 'email_notifications', 'user_settings', 'subscriptions'):
        op.execute(f'DROP POLICY IF EXISTS "{table}_owner" ON {table}')

    op.drop_index('ix_ai_requests_user_requested_at', table_name='ai_requests')
    op.drop_table('ai_requests')
    op.drop_index('ix_email_notifications_lookup', table_name='email_notifications')
    op.drop_table('email_notifications')
    op.drop_index('ix_user_settings_user_id', table_name='user_settings')
    op.drop_table('user_settings')
    op.drop_index('ix_subscriptions_user_next_billing', table_name='subscriptions')
    op.drop_index('ix_subscriptions_user_id', table_name='subscriptions')
    op.drop_table('subscriptions')
