"""melhaf catalog, stock, videos and engagement tables

Revision ID: 5c1e0d7a9b42
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1e0d7a9b42'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated=True):
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=True)]
    if updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))
    return columns


def upgrade():
    op.create_table(
        'melhaf_types',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'melhaf_collections',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('type_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['type_id'], ['melhaf_types.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_melhaf_collections_type_id', 'melhaf_collections', ['type_id'])
    op.create_index('ix_melhaf_collections_is_active', 'melhaf_collections', ['is_active'])

    op.create_table(
        'melhaf_colors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('collection_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_ar', sa.String(length=255), nullable=True),
        sa.Column('color_code', sa.String(length=32), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('ean', sa.String(length=13), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['collection_id'], ['melhaf_collections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_melhaf_colors_collection_id', 'melhaf_colors', ['collection_id'])
    op.create_index('ix_melhaf_colors_ean', 'melhaf_colors', ['ean'], unique=True)

    op.create_table(
        'melhaf_color_images',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('variant_id', sa.Uuid(), nullable=False),
        sa.Column('url', sa.String(length=1024), nullable=False),
        sa.Column('alt', sa.String(length=255), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['variant_id'], ['melhaf_colors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_melhaf_color_images_variant_id', 'melhaf_color_images', ['variant_id'])

    op.create_table(
        'melhaf_inventory',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('variant_id', sa.Uuid(), nullable=False),
        sa.Column('available', sa.Integer(), nullable=False),
        sa.Column('reserved', sa.Integer(), nullable=False),
        sa.Column('reorder_point', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['variant_id'], ['melhaf_colors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('variant_id'),
    )

    op.create_table(
        'melhaf_videos',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('collection_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('video_url', sa.String(length=1024), nullable=False),
        sa.Column('thumbnail_url', sa.String(length=1024), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['collection_id'], ['melhaf_collections.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_melhaf_videos_collection_id', 'melhaf_videos', ['collection_id'])
    op.create_index('ix_melhaf_videos_is_active', 'melhaf_videos', ['is_active'])

    op.create_table(
        'melhaf_video_likes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('video_id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['video_id'], ['melhaf_videos.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('video_id', 'actor_id', name='uq_video_like'),
    )
    op.create_index('ix_melhaf_video_likes_video_id', 'melhaf_video_likes', ['video_id'])
    op.create_index('ix_melhaf_video_likes_actor_id', 'melhaf_video_likes', ['actor_id'])

    op.create_table(
        'melhaf_video_reactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('video_id', sa.Uuid(), nullable=False),
        sa.Column('actor_id', sa.String(length=64), nullable=False),
        sa.Column('symbol', sa.String(length=16), nullable=False),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(['video_id'], ['melhaf_videos.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('video_id', 'actor_id', 'symbol', name='uq_video_reaction'),
    )
    op.create_index('ix_melhaf_video_reactions_video_id', 'melhaf_video_reactions', ['video_id'])
    op.create_index('ix_melhaf_video_reactions_actor_id', 'melhaf_video_reactions', ['actor_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('admin_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_log_admin_id', 'audit_log', ['admin_id'])
    op.create_index('ix_audit_log_entity_id', 'audit_log', ['entity_id'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])


def downgrade():
    op.drop_table('audit_log')
    op.drop_table('melhaf_video_reactions')
    op.drop_table('melhaf_video_likes')
    op.drop_table('melhaf_videos')
    op.drop_table('melhaf_inventory')
    op.drop_table('melhaf_color_images')
    op.drop_table('melhaf_colors')
    op.drop_table('melhaf_collections')
    op.drop_table('melhaf_types')
