"""Baseline migration - tenants, recipients, content and campaigns

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates every table of the phishing simulation schema. Written with
op.create_table so it runs on both SQLite and PostgreSQL.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def _org_fk() -> sa.Column:
    return sa.Column(
        'organization_id',
        sa.Integer(),
        sa.ForeignKey('organizations.id', ondelete='CASCADE'),
        nullable=False,
    )


def _created_by_fk() -> sa.Column:
    return sa.Column(
        'created_by_id',
        sa.Integer(),
        sa.ForeignKey('users.id', ondelete='SET NULL'),
        nullable=True,
    )


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Tenant & Users
    # ==========================================================================
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=False),
        sa.Column('last_name', sa.String(255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        _org_fk(),
        sa.Column('organization_name', sa.String(255), nullable=False),
        sa.Column('token_version', sa.Integer(), nullable=False, server_default=sa.text('1')),
        *_timestamps(),
    )
    op.create_index('idx_users_org', 'users', ['organization_id'])

    # ==========================================================================
    # Recipients
    # ==========================================================================
    op.create_table(
        'groups',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _org_fk(),
        *_timestamps(),
    )
    op.create_index('idx_groups_org', 'groups', ['organization_id'])

    op.create_table(
        'targets',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.String(255), nullable=False),
        sa.Column('last_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('position', sa.String(255), nullable=True),
        sa.Column(
            'group_id',
            sa.Integer(),
            sa.ForeignKey('groups.id', ondelete='CASCADE'),
            nullable=False,
        ),
        _org_fk(),
        *_timestamps(),
    )
    op.create_index('idx_targets_group', 'targets', ['group_id'])
    op.create_index('idx_targets_org', 'targets', ['organization_id'])

    # ==========================================================================
    # Sending Infrastructure & Content
    # ==========================================================================
    op.create_table(
        'smtp_profiles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('host', sa.String(255), nullable=False),
        sa.Column('port', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('from_name', sa.String(255), nullable=False),
        sa.Column('from_email', sa.String(320), nullable=False),
        _org_fk(),
        *_timestamps(),
    )
    op.create_index('idx_smtp_profiles_org', 'smtp_profiles', ['organization_id'])

    op.create_table(
        'email_templates',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('subject', sa.String(998), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=False),
        sa.Column('text_content', sa.Text(), nullable=True),
        sa.Column('sender_name', sa.String(255), nullable=False),
        sa.Column('sender_email', sa.String(320), nullable=False),
        _org_fk(),
        _created_by_fk(),
        *_timestamps(),
    )
    op.create_index('idx_email_templates_org', 'email_templates', ['organization_id'])

    op.create_table(
        'landing_pages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('html_content', sa.Text(), nullable=False),
        sa.Column('redirect_url', sa.String(2048), nullable=True),
        sa.Column('page_type', sa.String(20), nullable=False),
        sa.Column('thumbnail', sa.Text(), nullable=True),
        _org_fk(),
        _created_by_fk(),
        *_timestamps(),
    )
    op.create_index('idx_landing_pages_org', 'landing_pages', ['organization_id'])

    # ==========================================================================
    # Campaigns
    # ==========================================================================
    op.create_table(
        'campaigns',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default=sa.text("'Draft'")),
        sa.Column(
            'target_group_id',
            sa.Integer(),
            sa.ForeignKey('groups.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column(
            'smtp_profile_id',
            sa.Integer(),
            sa.ForeignKey('smtp_profiles.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column(
            'email_template_id',
            sa.Integer(),
            sa.ForeignKey('email_templates.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column(
            'landing_page_id',
            sa.Integer(),
            sa.ForeignKey('landing_pages.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        _created_by_fk(),
        _org_fk(),
        *_timestamps(),
    )
    op.create_index('idx_campaigns_org_status', 'campaigns', ['organization_id', 'status'])

    op.create_table(
        'campaign_results',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'campaign_id',
            sa.Integer(),
            sa.ForeignKey('campaigns.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'target_id',
            sa.Integer(),
            sa.ForeignKey('targets.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('sent', sa.Boolean(), nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('opened', sa.Boolean(), nullable=False),
        sa.Column('opened_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('clicked', sa.Boolean(), nullable=False),
        sa.Column('clicked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('submitted', sa.Boolean(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('submitted_data', sa.JSON(), nullable=True),
        _org_fk(),
        *_timestamps(),
        sa.UniqueConstraint('campaign_id', 'target_id', name='uq_campaign_result_target'),
    )
    op.create_index('idx_campaign_results_campaign', 'campaign_results', ['campaign_id'])


def downgrade() -> None:
    """Drop all tables, children first."""
    op.drop_table('campaign_results')
    op.drop_table('campaigns')
    op.drop_table('landing_pages')
    op.drop_table('email_templates')
    op.drop_table('smtp_profiles')
    op.drop_table('targets')
    op.drop_table('groups')
    op.drop_table('users')
    op.drop_table('organizations')
