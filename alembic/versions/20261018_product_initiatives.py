"""product_initiatives, team_members, company_events

Revision ID: 20261018_product_initiatives
Revises:
Create Date: 2026-10-18 09:12:44.108231

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261018_product_initiatives'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'product_initiatives',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('problem_statement', sa.Text(), nullable=True),
        sa.Column('item_type', sa.String(20), nullable=False, server_default='feature'),
        sa.Column('phase', sa.String(20), nullable=False, server_default='backlog'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('rice_reach', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('rice_impact', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('rice_confidence', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('rice_effort', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('owner_id', sa.String(100), nullable=True),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column(
            'parent_id',
            sa.Integer(),
            sa.ForeignKey('product_initiatives.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('period_type', sa.String(10), nullable=True),
        sa.Column('period_value', sa.String(100), nullable=True),
        sa.Column('experiment_data', sa.JSON(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_source', sa.String(100), nullable=True),
    )
    op.create_index('ix_product_initiatives_id', 'product_initiatives', ['id'])
    op.create_index('ix_product_initiatives_phase', 'product_initiatives', ['phase'])
    # At most one derived feature per experiment
    op.create_index(
        'uq_product_initiatives_parent_id',
        'product_initiatives',
        ['parent_id'],
        unique=True,
        postgresql_where=sa.text('parent_id IS NOT NULL'),
        sqlite_where=sa.text('parent_id IS NOT NULL'),
    )

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_team_members_id', 'team_members', ['id'])
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'], unique=True)

    op.create_table(
        'company_events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('team', sa.String(100), nullable=False),
        sa.Column('user_id', sa.String(100), nullable=True),
        sa.Column('is_draft', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('video_link', sa.String(500), nullable=True),
        sa.Column('custom_data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_company_events_id', 'company_events', ['id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_company_events_id', table_name='company_events')
    op.drop_table('company_events')
    op.drop_index('ix_team_members_user_id', table_name='team_members')
    op.drop_index('ix_team_members_id', table_name='team_members')
    op.drop_table('team_members')
    op.drop_index('uq_product_initiatives_parent_id', table_name='product_initiatives')
    op.drop_index('ix_product_initiatives_phase', table_name='product_initiatives')
    op.drop_index('ix_product_initiatives_id', table_name='product_initiatives')
    op.drop_table('product_initiatives')
