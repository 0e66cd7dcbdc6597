"""Initial schema: catalog, occupancies, notify roles and command log

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:12:44.512311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'point_types',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('emoji', sa.String(), nullable=False),
        sa.CheckConstraint('id > 0 AND (id & (id - 1)) = 0', name='ck_point_types_single_bit'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'points',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('category_mask', sa.Integer(), nullable=False),
        sa.Column('x', sa.Integer(), nullable=False),
        sa.Column('y', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.CheckConstraint('category_mask > 0', name='ck_points_category_mask'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_points_category_mask', 'points', ['category_mask'], unique=False)

    op.create_table(
        'occupancies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.BigInteger(), nullable=False),
        sa.Column('point_id', sa.Integer(), nullable=False),
        sa.Column('holder_user_id', sa.BigInteger(), nullable=False),
        sa.Column('due_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('challenger_user_id', sa.BigInteger(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.CheckConstraint(
            'challenger_user_id IS NULL OR challenger_user_id <> holder_user_id',
            name='ck_occupancies_challenger_not_holder',
        ),
        sa.ForeignKeyConstraint(['point_id'], ['points.id']),
        sa.PrimaryKeyConstraint('id'),
        # Final arbiter between concurrent first-time occupations
        sa.UniqueConstraint('tenant_id', 'point_id', name='uq_occupancies_tenant_point'),
    )
    op.create_index('idx_occupancies_holder', 'occupancies', ['tenant_id', 'holder_user_id'], unique=False)
    op.create_index('idx_occupancies_challenger', 'occupancies', ['tenant_id', 'challenger_user_id'], unique=False)

    op.create_table(
        'notify_roles',
        sa.Column('tenant_id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('role_id', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('tenant_id'),
    )
    op.create_table(
        'command_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tenant_id', sa.BigInteger(), nullable=True),
        sa.Column('channel_id', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.BigInteger(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_command_logs_tenant', 'command_logs', ['tenant_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_command_logs_tenant', table_name='command_logs')
    op.drop_table('command_logs')
    op.drop_table('notify_roles')
    op.drop_index('idx_occupancies_challenger', table_name='occupancies')
    op.drop_index('idx_occupancies_holder', table_name='occupancies')
    op.drop_table('occupancies')
    op.drop_index('idx_points_category_mask', table_name='points')
    op.drop_table('points')
    op.drop_table('point_types')
