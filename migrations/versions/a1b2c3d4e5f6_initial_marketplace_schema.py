"""Initial marketplace schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('customer', 'owner', 'broker', 'photographer', 'admin', name='user_role')
user_status = sa.Enum('pending', 'active', 'rejected', name='user_status')
approval_status = sa.Enum('pending', 'approved', 'rejected', name='approval_status')
media_kind = sa.Enum('photo', 'video', name='media_kind')
viewing_request_status = sa.Enum('pending', 'accepted', name='viewing_request_status')
viewing_status = sa.Enum('upcoming', 'cancelled', name='viewing_status')
photo_job_status = sa.Enum('open', 'assigned', 'scheduled', 'rejected', 'completed', name='photo_job_status')


def _timestamps(updated: bool = True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False))
    return cols


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('status', user_status, nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_status', 'users', ['status'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'properties',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('type', sa.String(50), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('area', sa.String(120), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=True),
        sa.Column('broker_id', sa.Integer(), nullable=True),
        sa.Column('approval_status', approval_status, nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
        sa.ForeignKeyConstraint(['broker_id'], ['users.id']),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])
    op.create_index('ix_properties_broker_id', 'properties', ['broker_id'])
    op.create_index('ix_properties_approval_status', 'properties', ['approval_status'])
    op.create_index('ix_properties_created_at', 'properties', ['created_at'])

    op.create_table(
        'media',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('uploaded_by', sa.Integer(), nullable=False),
        sa.Column('kind', media_kind, nullable=False),
        sa.Column('url', sa.String(500), nullable=False),
        sa.Column('thumb_url', sa.String(500), nullable=True),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('size_bytes', sa.Integer(), nullable=True),
        sa.Column('approval_status', approval_status, nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id']),
    )
    op.create_index('ix_media_property_id', 'media', ['property_id'])
    op.create_index('ix_media_approval_status', 'media', ['approval_status'])
    op.create_index('ix_media_created_at', 'media', ['created_at'])

    op.create_table(
        'viewing_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('recipient_user_id', sa.Integer(), nullable=False),
        sa.Column('requester_user_id', sa.Integer(), nullable=True),
        sa.Column('requester_name', sa.String(120), nullable=False),
        sa.Column('requester_email', sa.String(255), nullable=False),
        sa.Column('requester_phone', sa.String(30), nullable=False),
        sa.Column('preferred_dates', sa.JSON(), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', viewing_request_status, nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.ForeignKeyConstraint(['recipient_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['requester_user_id'], ['users.id']),
    )
    op.create_index('ix_viewing_requests_property_id', 'viewing_requests', ['property_id'])
    op.create_index('ix_viewing_requests_recipient_user_id', 'viewing_requests', ['recipient_user_id'])
    op.create_index('ix_viewing_requests_requester_user_id', 'viewing_requests', ['requester_user_id'])
    op.create_index('ix_viewing_requests_status', 'viewing_requests', ['status'])
    op.create_index('ix_viewing_requests_created_at', 'viewing_requests', ['created_at'])

    op.create_table(
        'viewings',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('recipient_user_id', sa.Integer(), nullable=False),
        sa.Column('requester_user_id', sa.Integer(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('location_note', sa.String(255), nullable=True),
        sa.Column('agent_note', sa.String(255), nullable=True),
        sa.Column('status', viewing_status, nullable=False),
        sa.Column('cancel_reason', sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('request_id'),
        sa.ForeignKeyConstraint(['request_id'], ['viewing_requests.id']),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.ForeignKeyConstraint(['recipient_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['requester_user_id'], ['users.id']),
    )
    op.create_index('ix_viewings_property_id', 'viewings', ['property_id'])
    op.create_index('ix_viewings_recipient_user_id', 'viewings', ['recipient_user_id'])
    op.create_index('ix_viewings_requester_user_id', 'viewings', ['requester_user_id'])
    op.create_index('ix_viewings_status', 'viewings', ['status'])
    op.create_index('ix_viewings_created_at', 'viewings', ['created_at'])

    op.create_table(
        'photo_jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('requested_by', sa.Integer(), nullable=False),
        sa.Column('preferred_photographer_id', sa.Integer(), nullable=True),
        sa.Column('photographer_id', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('preferred_dates', sa.JSON(), nullable=True),
        sa.Column('status', photo_job_status, nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reject_reason', sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.ForeignKeyConstraint(['requested_by'], ['users.id']),
        sa.ForeignKeyConstraint(['preferred_photographer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['photographer_id'], ['users.id']),
    )
    op.create_index('ix_photo_jobs_property_id', 'photo_jobs', ['property_id'])
    op.create_index('ix_photo_jobs_requested_by', 'photo_jobs', ['requested_by'])
    op.create_index('ix_photo_jobs_preferred_photographer_id', 'photo_jobs', ['preferred_photographer_id'])
    op.create_index('ix_photo_jobs_photographer_id', 'photo_jobs', ['photographer_id'])
    op.create_index('ix_photo_jobs_status', 'photo_jobs', ['status'])
    op.create_index('ix_photo_jobs_created_at', 'photo_jobs', ['created_at'])

    op.create_table(
        'photo_job_messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('sender_user_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['job_id'], ['photo_jobs.id']),
        sa.ForeignKeyConstraint(['sender_user_id'], ['users.id']),
    )
    op.create_index('ix_photo_job_messages_job_id', 'photo_job_messages', ['job_id'])
    op.create_index('ix_photo_job_messages_created_at', 'photo_job_messages', ['created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(40), nullable=False),
        sa.Column('title', sa.String(160), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('ref_type', sa.String(40), nullable=True),
        sa.Column('ref_id', sa.Integer(), nullable=True),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])

    op.create_table(
        'announcements',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(120), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('audience', sa.JSON(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
    )
    op.create_index('ix_announcements_created_at', 'announcements', ['created_at'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(80), nullable=False),
        sa.Column('entity_type', sa.String(40), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_actor_id', 'audit_logs', ['actor_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])

    op.create_table(
        'analytics_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type', sa.String(60), nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('session_id', sa.String(80), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
    )
    op.create_index('ix_analytics_events_type', 'analytics_events', ['type'])
    op.create_index('ix_analytics_events_property_id', 'analytics_events', ['property_id'])
    op.create_index('ix_analytics_events_created_at', 'analytics_events', ['created_at'])

    op.create_table(
        'inquiries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('property_id', sa.Integer(), nullable=False),
        sa.Column('recipient_user_id', sa.Integer(), nullable=False),
        sa.Column('requester_user_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id']),
        sa.ForeignKeyConstraint(['recipient_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['requester_user_id'], ['users.id']),
    )
    op.create_index('ix_inquiries_property_id', 'inquiries', ['property_id'])
    op.create_index('ix_inquiries_recipient_user_id', 'inquiries', ['recipient_user_id'])
    op.create_index('ix_inquiries_created_at', 'inquiries', ['created_at'])


def downgrade() -> None:
    for table in (
        'inquiries',
        'analytics_events',
        'audit_logs',
        'announcements',
        'notifications',
        'photo_job_messages',
        'photo_jobs',
        'viewings',
        'viewing_requests',
        'media',
        'properties',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (
        photo_job_status,
        viewing_status,
        viewing_request_status,
        media_kind,
        approval_status,
        user_status,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
