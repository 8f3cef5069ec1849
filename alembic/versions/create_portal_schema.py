"""create portal schema

Revision ID: 3b7c2e91d4a0
Revises:
Create Date: 2026-10-19 10:12:41

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7c2e91d4a0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# enum 은 값이 아니라 멤버 이름으로 저장 (SQLAlchemy Enum 기본 동작)
user_role = sa.Enum('USER', 'SUPPORT', 'MODERATOR', 'ADMIN', name='user_role')
admin_action = sa.Enum(
    'SET_ROLE', 'APPROVE_APPLICATION', 'REJECT_APPLICATION',
    'ASSIGN_TICKET', 'CLOSE_TICKET', 'UPDATE_SETTING',
    name='admin_action',
)
application_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='application_status')
ticket_status = sa.Enum('OPEN', 'PROCESSING', 'CLOSED', name='ticket_status')
ticket_department = sa.Enum(
    'ACCOUNT', 'TECHNICAL', 'PAYMENT', 'RULES', 'SUGGESTION', 'OTHER', name='ticket_department'
)
ticket_priority = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'URGENT', name='ticket_priority')


def _timestamps(updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('discord_id', sa.String(length=32), nullable=True),
        sa.Column('discord_username', sa.String(length=100), nullable=True),
        sa.Column('avatar', sa.String(length=255), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('refresh_token_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            'password_hash IS NOT NULL OR discord_id IS NOT NULL', name='ck_users_has_credential'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_discord_id', 'users', ['discord_id'], unique=True)

    op.create_table(
        'admin_action_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('action', admin_action, nullable=False),
        sa.Column('target_type', sa.String(length=30), nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=True),
        sa.Column('before', sa.String(length=100), nullable=True),
        sa.Column('after', sa.String(length=100), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['actor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_action_logs_actor_id', 'admin_action_logs', ['actor_id'])

    op.create_table(
        'staff_applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('experience', sa.Text(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('additional_info', sa.Text(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('timezone', sa.String(length=50), nullable=True),
        sa.Column('languages', sa.String(length=200), nullable=True),
        sa.Column('availability_hours', sa.Integer(), nullable=True),
        sa.Column('status', application_status, nullable=False),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['reviewed_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_staff_applications_user_id', 'staff_applications', ['user_id'])
    op.create_index('ix_staff_applications_status', 'staff_applications', ['status'])
    # 사용자당 PENDING 지원서 1건 (MySQL 은 partial index 미지원)
    op.create_index(
        'uq_staff_applications_user_pending',
        'staff_applications',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'PENDING'"),
        sqlite_where=sa.text("status = 'PENDING'"),
    )

    op.create_table(
        'tickets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('department', ticket_department, nullable=False),
        sa.Column('priority', ticket_priority, nullable=False),
        sa.Column('status', ticket_status, nullable=False),
        sa.Column('assigned_to', sa.Integer(), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('closed_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_to'], ['users.id']),
        sa.ForeignKeyConstraint(['closed_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tickets_user_id', 'tickets', ['user_id'])
    op.create_index('ix_tickets_status', 'tickets', ['status'])

    op.create_table(
        'ticket_replies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('ticket_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_staff', sa.Boolean(), nullable=False),
        sa.Column('is_system_message', sa.Boolean(), nullable=False),
        sa.Column('attachments', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['ticket_id'], ['tickets.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ticket_replies_ticket_id', 'ticket_replies', ['ticket_id'])

    op.create_table(
        'news_categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('color', sa.String(length=30), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )

    op.create_table(
        'news',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=220), nullable=False),
        sa.Column('excerpt', sa.String(length=500), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('cover_image', sa.String(length=255), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('author_id', sa.Integer(), nullable=True),
        sa.Column('published', sa.Boolean(), nullable=False),
        sa.Column('featured', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['category_id'], ['news_categories.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_news_slug', 'news', ['slug'], unique=True)

    op.create_table(
        'guidelines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=220), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('last_updated_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['last_updated_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_guidelines_slug', 'guidelines', ['slug'], unique=True)
    op.create_index('ix_guidelines_type', 'guidelines', ['type'])

    op.create_table(
        'staff_members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('avatar', sa.String(length=255), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('social_links', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )

    op.create_table(
        'media_gallery',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('thumbnail', sa.String(length=500), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('approved', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_media_gallery_user_id', 'media_gallery', ['user_id'])

    op.create_table(
        'characters',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('title', sa.String(length=150), nullable=True),
        sa.Column('class', sa.String(length=50), nullable=False),
        sa.Column('race', sa.String(length=50), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('alignment', sa.String(length=50), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('origin', sa.String(length=150), nullable=True),
        sa.Column('background', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('stats', sa.JSON(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('equipment', sa.JSON(), nullable=True),
        sa.Column('relations', sa.JSON(), nullable=True),
        sa.Column('current_xp', sa.Integer(), nullable=False),
        sa.Column('next_level_xp', sa.Integer(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'site_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('key'),
    )
    op.create_index('ix_site_settings_category', 'site_settings', ['category'])

    op.create_table(
        'user_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('section', sa.String(length=30), nullable=False),
        sa.Column('value', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'section', name='uq_user_settings_user_section'),
    )

    op.create_table(
        'server_status_cache',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('fetched_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'server_stat_samples',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('online', sa.Boolean(), nullable=False),
        sa.Column('players', sa.Integer(), nullable=False),
        sa.Column('max_players', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_server_stat_samples_created_at', 'server_stat_samples', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_server_stat_samples_created_at', table_name='server_stat_samples')
    op.drop_table('server_stat_samples')
    op.drop_table('server_status_cache')
    op.drop_table('user_settings')
    op.drop_index('ix_site_settings_category', table_name='site_settings')
    op.drop_table('site_settings')
    op.drop_table('characters')
    op.drop_index('ix_media_gallery_user_id', table_name='media_gallery')
    op.drop_table('media_gallery')
    op.drop_table('staff_members')
    op.drop_index('ix_guidelines_type', table_name='guidelines')
    op.drop_index('ix_guidelines_slug', table_name='guidelines')
    op.drop_table('guidelines')
    op.drop_index('ix_news_slug', table_name='news')
    op.drop_table('news')
    op.drop_table('news_categories')
    op.drop_index('ix_ticket_replies_ticket_id', table_name='ticket_replies')
    op.drop_table('ticket_replies')
    op.drop_index('ix_tickets_status', table_name='tickets')
    op.drop_index('ix_tickets_user_id', table_name='tickets')
    op.drop_table('tickets')
    op.drop_index('uq_staff_applications_user_pending', table_name='staff_applications')
    op.drop_index('ix_staff_applications_status', table_name='staff_applications')
    op.drop_index('ix_staff_applications_user_id', table_name='staff_applications')
    op.drop_table('staff_applications')
    op.drop_index('ix_admin_action_logs_actor_id', table_name='admin_action_logs')
    op.drop_table('admin_action_logs')
    op.drop_index('ix_users_discord_id', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        ticket_priority, ticket_department, ticket_status,
        application_status, admin_action, user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
