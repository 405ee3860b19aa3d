"""fixed tag sub-locations

Revision ID: 8e3b6f0a2c17
Revises: 5c1f2a7d9e40
Create Date: 2026-10-19 14:00:00.000000+00:00

"""
from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '8e3b6f0a2c17'
down_revision: str | None = '5c1f2a7d9e40'
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        'sub_locations',
        sa.Column('fixed_tag_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False, comment='floor or restaurant-store'),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('floor', sa.String(length=20), nullable=True),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.ForeignKeyConstraint(
            ['fixed_tag_id'], ['fixed_tags.id'],
            name=op.f('fk_sub_locations_fixed_tag_id_fixed_tags'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_sub_locations')),
    )
    op.create_index(op.f('ix_sub_locations_created_at'), 'sub_locations', ['created_at'], unique=False)
    op.create_index(op.f('ix_sub_locations_fixed_tag_id'), 'sub_locations', ['fixed_tag_id'], unique=False)

    op.create_table(
        'sub_location_statuses',
        sa.Column('sub_location_id', sa.Uuid(), nullable=False),
        sa.Column('status_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=128), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False, comment='UUID v4 primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp of record creation'),
        sa.ForeignKeyConstraint(
            ['sub_location_id'], ['sub_locations.id'],
            name=op.f('fk_sub_location_statuses_sub_location_id_sub_locations'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_sub_location_statuses')),
    )
    op.create_index(
        op.f('ix_sub_location_statuses_created_at'), 'sub_location_statuses', ['created_at'], unique=False
    )
    op.create_index(
        'ix_sub_location_statuses_sub_location_id_created_at',
        'sub_location_statuses',
        ['sub_location_id', 'created_at'],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index('ix_sub_location_statuses_sub_location_id_created_at', table_name='sub_location_statuses')
    op.drop_index(op.f('ix_sub_location_statuses_created_at'), table_name='sub_location_statuses')
    op.drop_table('sub_location_statuses')
    op.drop_index(op.f('ix_sub_locations_fixed_tag_id'), table_name='sub_locations')
    op.drop_index(op.f('ix_sub_locations_created_at'), table_name='sub_locations')
    op.drop_table('sub_locations')
