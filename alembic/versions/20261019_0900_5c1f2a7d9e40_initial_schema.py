"""initial schema

Revision ID: 5c1f2a7d9e40
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""
from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '5c1f2a7d9e40'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        'tags',
        sa.Column('collection', sa.String(length=32), nullable=False, comment='Tag collection (tags, research)'),
        sa.Column('location_name', sa.String(length=255), nullable=False),
        sa.Column('mission', sa.String(length=32), nullable=False, comment='Mission name'),
        sa.Column('sub_type_name', sa.String(length=100), nullable=True),
        sa.Column('target_name', sa.String(length=100), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('geohash', sa.String(length=12), nullable=False),
        sa.Column('floor', sa.String(length=20), nullable=True),
        sa.Column('pov_heading', sa.Float(), nullable=True),
        sa.Column('pov_pitch', sa.Float(), nullable=True),
        sa.Column('pano_id', sa.String(length=128), nullable=True),
        sa.Column('camera_latitude', sa.Float(), nullable=True),
        sa.Column('camera_longitude', sa.Float(), nullable=True),
        sa.Column('created_by', sa.String(length=128), nullable=False, comment='Creating user id'),
        sa.Column(
            'last_update_time',
            sa.DateTime(timezone=True),
            nullable=False,
            comment='Bumped on edits and status updates (not on views or votes)',
        ),
        sa.Column('archived', sa.Boolean(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tags')),
    )
    op.create_index(op.f('ix_tags_created_at'), 'tags', ['created_at'], unique=False)
    op.create_index(op.f('ix_tags_geohash'), 'tags', ['geohash'], unique=False)
    op.create_index(
        'ix_tags_collection_archived_last_update',
        'tags',
        ['collection', 'archived', 'last_update_time'],
        unique=False,
    )
    op.create_index(
        'ix_tags_collection_created_by_created_at',
        'tags',
        ['collection', 'created_by', 'created_at'],
        unique=False,
    )

    op.create_table(
        'tag_statuses',
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.Column('status_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=128), nullable=False),
        sa.Column('number_of_up_vote', sa.Integer(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.ForeignKeyConstraint(
            ['tag_id'], ['tags.id'],
            name=op.f('fk_tag_statuses_tag_id_tags'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tag_statuses')),
    )
    op.create_index(op.f('ix_tag_statuses_created_at'), 'tag_statuses', ['created_at'], unique=False)
    op.create_index('ix_tag_statuses_tag_id_created_at', 'tag_statuses', ['tag_id', 'created_at'], unique=False)

    op.create_table(
        'tag_upvotes',
        sa.Column('status_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.ForeignKeyConstraint(
            ['status_id'], ['tag_statuses.id'],
            name=op.f('fk_tag_upvotes_status_id_tag_statuses'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tag_upvotes')),
        sa.UniqueConstraint('status_id', 'user_id', name='uq_tag_upvotes_status_user'),
    )
    op.create_index(op.f('ix_tag_upvotes_created_at'), 'tag_upvotes', ['created_at'], unique=False)

    op.create_table(
        'tag_settings',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('key', name=op.f('pk_tag_settings')),
    )

    op.create_table(
        'fixed_tags',
        sa.Column('location_name', sa.String(length=255), nullable=False),
        sa.Column('floor', sa.String(length=20), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_fixed_tags')),
    )
    op.create_index(op.f('ix_fixed_tags_created_at'), 'fixed_tags', ['created_at'], unique=False)

    op.create_table(
        'user_profiles',
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('has_read_guide', sa.Boolean(), nullable=False),
        sa.Column(
            'add_tag_count',
            sa.Integer(),
            nullable=False,
            comment='Number of tags the user reported and has not deleted',
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('user_id', name=op.f('pk_user_profiles')),
    )

    op.create_table(
        'user_activities',
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('collection', sa.String(length=32), nullable=True),
        sa.Column('tag_id', sa.Uuid(), nullable=True),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_user_activities')),
    )
    op.create_index(op.f('ix_user_activities_created_at'), 'user_activities', ['created_at'], unique=False)
    op.create_index(
        'ix_user_activities_user_id_created_at',
        'user_activities',
        ['user_id', 'created_at'],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index('ix_user_activities_user_id_created_at', table_name='user_activities')
    op.drop_index(op.f('ix_user_activities_created_at'), table_name='user_activities')
    op.drop_table('user_activities')
    op.drop_table('user_profiles')
    op.drop_index(op.f('ix_fixed_tags_created_at'), table_name='fixed_tags')
    op.drop_table('fixed_tags')
    op.drop_table('tag_settings')
    op.drop_index(op.f('ix_tag_upvotes_created_at'), table_name='tag_upvotes')
    op.drop_table('tag_upvotes')
    op.drop_index('ix_tag_statuses_tag_id_created_at', table_name='tag_statuses')
    op.drop_index(op.f('ix_tag_statuses_created_at'), table_name='tag_statuses')
    op.drop_table('tag_statuses')
    op.drop_index('ix_tags_collection_created_by_created_at', table_name='tags')
    op.drop_index('ix_tags_collection_archived_last_update', table_name='tags')
    op.drop_index(op.f('ix_tags_geohash'), table_name='tags')
    op.drop_index(op.f('ix_tags_created_at'), table_name='tags')
    op.drop_table('tags')
