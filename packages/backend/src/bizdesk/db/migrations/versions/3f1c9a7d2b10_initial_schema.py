"""Initial schema: organizations, users and the owned business records

Learn: Mirrors db/models.py at the time of writing. UUID columns use the
portable sa.Uuid type and JSON columns become JSONB on PostgreSQL, so
`alembic upgrade head` and Base.metadata.create_all() (used by the test
suite) produce the same tables.

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:44.118302
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
money = sa.Numeric(12, 2, asdecimal=False)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
        )
    return columns


def upgrade() -> None:
    # ─── Tenancy + identity ──────────────────────────────
    op.create_table(
        'organizations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('domain', sa.String(255), nullable=True, unique=True),
        sa.Column('modules', json_type),
        sa.Column('subscription_plan', sa.String(20), nullable=False),
        sa.Column('subscription_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('permissions', json_type, nullable=False),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('position', sa.String(100), nullable=True),
        *_timestamps(),
    )

    # ─── Owned resources ─────────────────────────────────
    op.create_table(
        'posts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('visibility', sa.String(20), nullable=False),
        sa.Column('tags', json_type),
        *_timestamps(),
    )
    op.create_index('idx_posts_author_status', 'posts', ['author_id', 'status'])
    op.create_index('idx_posts_status_visibility', 'posts', ['status', 'visibility'])

    op.create_table(
        'leads',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('company', sa.String(200), nullable=True),
        sa.Column('status', sa.String(20)),
        sa.Column('source', sa.String(20)),
        sa.Column('value', money),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('assigned_to', sa.Uuid(), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_leads_org', 'leads', ['organization_id'])

    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20)),
        sa.Column('priority', sa.String(20)),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('budget', money, nullable=True),
        sa.Column('progress', sa.Integer()),
        sa.Column('manager_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('team', json_type),
        *_timestamps(),
    )
    op.create_index('idx_projects_org', 'projects', ['organization_id'])

    op.create_table(
        'project_updates',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'project_id', sa.Uuid(),
            sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index(
        'ix_project_updates_project_id', 'project_updates', ['project_id']
    )

    op.create_table(
        'meetings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('project_id', sa.Uuid(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('company_name', sa.String(200), nullable=False),
        sa.Column('meeting_date', sa.Date(), nullable=False),
        sa.Column('meeting_time', sa.String(10), nullable=False),
        sa.Column('duration', sa.Integer()),
        sa.Column('attendees', json_type),
        sa.Column('location', sa.String(300), nullable=True),
        sa.Column('meeting_type', sa.String(20)),
        sa.Column('status', sa.String(20)),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_meetings_org_date', 'meetings', ['organization_id', 'meeting_date'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('organization_id', sa.Uuid(), sa.ForeignKey('organizations.id'), nullable=True),
        sa.Column('invoice_number', sa.String(50), nullable=False),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('status', sa.String(20)),
        sa.Column('items', json_type),
        sa.Column('subtotal', money),
        sa.Column('tax_rate', sa.Numeric(5, 4, asdecimal=False), nullable=False, server_default='0'),
        sa.Column('tax', money),
        sa.Column('total', money),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('terms', sa.Text(), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('organization_id', 'invoice_number', name='uq_invoices_org_number'),
    )


def downgrade() -> None:
    op.drop_table('invoices')
    op.drop_index('idx_meetings_org_date', table_name='meetings')
    op.drop_table('meetings')
    op.drop_index('ix_project_updates_project_id', table_name='project_updates')
    op.drop_table('project_updates')
    op.drop_index('idx_projects_org', table_name='projects')
    op.drop_table('projects')
    op.drop_index('idx_leads_org', table_name='leads')
    op.drop_table('leads')
    op.drop_index('idx_posts_status_visibility', table_name='posts')
    op.drop_index('idx_posts_author_status', table_name='posts')
    op.drop_table('posts')
    op.drop_table('users')
    op.drop_table('organizations')
