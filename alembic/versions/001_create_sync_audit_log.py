"""Create sync_audit_log

Revision ID: 001_create_sync_audit_log
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_create_sync_audit_log'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'sync_audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('event_kind', sa.String(length=64), nullable=False),
        sa.Column('payload_kind', sa.String(length=16), nullable=False),
        sa.Column('asset_identifier', sa.String(length=100), nullable=False),
        sa.Column('serial_number', sa.String(length=100), nullable=False),
        sa.Column('device_id', sa.String(length=32), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('outcome', sa.String(length=16), nullable=False),
        sa.Column('detail', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sync_audit_log_created_at'), 'sync_audit_log', ['created_at'], unique=False)
    op.create_index(op.f('ix_sync_audit_log_status'), 'sync_audit_log', ['status'], unique=False)
    op.create_index(op.f('ix_sync_audit_log_asset_identifier'), 'sync_audit_log', ['asset_identifier'], unique=False)
    op.create_index(op.f('ix_sync_audit_log_serial_number'), 'sync_audit_log', ['serial_number'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_sync_audit_log_serial_number'), table_name='sync_audit_log')
    op.drop_index(op.f('ix_sync_audit_log_asset_identifier'), table_name='sync_audit_log')
    op.drop_index(op.f('ix_sync_audit_log_status'), table_name='sync_audit_log')
    op.drop_index(op.f('ix_sync_audit_log_created_at'), table_name='sync_audit_log')
    op.drop_table('sync_audit_log')
