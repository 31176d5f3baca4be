"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - code_mappings table: attribution code -> click attribution
    - click_logs table: one row per click, for analytics
    """
    # Tables may already exist when the service created them on startup
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'code_mappings' not in existing_tables:
        op.create_table(
            'code_mappings',
            sa.Column('code', sa.String(length=64), nullable=False),
            sa.Column('bot_username', sa.String(length=64), nullable=False),
            sa.Column('attribution', sa.Text(), nullable=False),
            sa.Column('created_at', sa.String(length=40), nullable=False),
            sa.Column('resolved', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('resolved_at', sa.String(length=40), nullable=True),
            sa.PrimaryKeyConstraint('code')
        )

        op.create_index(
            'ix_code_mappings_created_at',
            'code_mappings',
            ['created_at']
        )

    if 'click_logs' not in existing_tables:
        op.create_table(
            'click_logs',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('request_id', sa.String(length=36), nullable=False),
            sa.Column('slug', sa.String(length=100), nullable=False),
            sa.Column('timestamp', sa.String(length=40), nullable=False),
            sa.Column('ip_hash', sa.String(length=32), nullable=False),
            sa.Column('user_agent', sa.Text(), nullable=False),
            sa.Column('redirect_target', sa.Text(), nullable=False),
            sa.Column('code', sa.String(length=64), nullable=True),
            sa.Column('query_params', sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )

        op.create_index('ix_click_logs_slug', 'click_logs', ['slug'])
        op.create_index('ix_click_logs_timestamp', 'click_logs', ['timestamp'])


def downgrade() -> None:
    """Drop all tables created by this migration."""
    op.drop_index('ix_click_logs_timestamp', table_name='click_logs')
    op.drop_index('ix_click_logs_slug', table_name='click_logs')
    op.drop_table('click_logs')

    op.drop_index('ix_code_mappings_created_at', table_name='code_mappings')
    op.drop_table('code_mappings')
