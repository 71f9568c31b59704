"""Create visitors table

Revision ID: 001_visitors
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_visitors'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the visitors table: one row per logged request.
    No unique constraints and no foreign keys.
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    # Tables may already exist when AUTO_CREATE_TABLES created them at startup
    if 'visitors' in existing_tables:
        return

    op.create_table(
        'visitors',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('timestamp', sa.String(length=32), nullable=False),
        sa.Column('domain', sa.String(length=253), nullable=False),
        sa.Column('path', sa.Text(), nullable=False),
        sa.Column('method', sa.String(length=16), nullable=False),
        sa.Column('ip', sa.String(length=45), nullable=False),
        sa.Column('country', sa.String(length=8), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('region', sa.String(length=255), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('latitude', sa.String(length=32), nullable=True),
        sa.Column('longitude', sa.String(length=32), nullable=True),
        sa.Column('asn', sa.String(length=16), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=False),
        sa.Column('browser', sa.String(length=32), nullable=True),
        sa.Column('browser_version', sa.String(length=64), nullable=True),
        sa.Column('os', sa.String(length=32), nullable=True),
        sa.Column('device_type', sa.String(length=16), nullable=True),
        sa.Column('is_mobile', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_bot', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('referer', sa.Text(), nullable=True),
        sa.Column('accept_language', sa.Text(), nullable=True),
        sa.Column('accept_encoding', sa.Text(), nullable=True),
        sa.Column('headers', sa.Text(), nullable=False),
        sa.Column('query_params', sa.Text(), nullable=True),
        sa.Column('tls_version', sa.String(length=16), nullable=True),
        sa.Column('http_protocol', sa.String(length=16), nullable=True),
        sa.Column('cloudflare_ray', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index('ix_visitors_timestamp', 'visitors', ['timestamp'])
    op.create_index('ix_visitors_domain', 'visitors', ['domain'])


def downgrade() -> None:
    """Drop the visitors table."""
    op.drop_index('ix_visitors_domain', table_name='visitors')
    op.drop_index('ix_visitors_timestamp', table_name='visitors')
    op.drop_table('visitors')
