"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from headpress.db.init_db import default_options


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=nullable)


def upgrade() -> None:
    """Create the content schema and seed the default category, link category and options."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(60), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(250), nullable=True),
        sa.Column('role', sa.String(20), server_default='subscriber', nullable=False),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        _timestamp('registered_at'),
        sa.Column('last_login', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'media',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('file_type', sa.String(20), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('storage_key', sa.String(500), nullable=False),
        sa.Column('url', sa.String(1000), nullable=False),
        sa.Column('alt_text', sa.Text(), nullable=True),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('author_id', sa.Integer(), nullable=False),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('storage_key'),
    )
    op.create_index('ix_media_mime_type', 'media', ['mime_type'])
    op.create_index('ix_media_author_id', 'media', ['author_id'])

    op.create_table(
        'posts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), server_default='draft', nullable=False),
        sa.Column('post_type', sa.String(20), server_default='post', nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('parent_id', sa.Integer(), server_default='0', nullable=False),
        sa.Column('featured_media_id', sa.Integer(), nullable=True),
        sa.Column('featured_image_url', sa.String(1000), nullable=True),
        sa.Column('comment_status', sa.String(10), server_default='open', nullable=False),
        sa.Column('comment_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.Column('published_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['featured_media_id'], ['media.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_posts_slug', 'posts', ['slug'], unique=True)
    op.create_index('ix_posts_status', 'posts', ['status'])
    op.create_index('ix_posts_post_type', 'posts', ['post_type'])
    op.create_index('ix_posts_author_id', 'posts', ['author_id'])
    op.create_index('ix_posts_published_at', 'posts', ['published_at'])

    op.create_table(
        'post_meta',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('meta_key', sa.String(255), nullable=False),
        sa.Column('meta_value', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_post_meta_post_id', 'post_meta', ['post_id'])

    categories = op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parent_id', sa.Integer(), server_default='0', nullable=False),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_tags_slug', 'tags', ['slug'], unique=True)

    op.create_table(
        'post_categories',
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('post_id', 'category_id'),
    )
    op.create_table(
        'post_tags',
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('post_id', 'tag_id'),
    )

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('parent_id', sa.Integer(), server_default='0', nullable=False),
        sa.Column('author_name', sa.String(255), nullable=False),
        sa.Column('author_email', sa.String(255), nullable=False),
        sa.Column('author_url', sa.String(500), nullable=True),
        sa.Column('author_ip', sa.String(100), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['post_id'], ['posts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_comments_post_id', 'comments', ['post_id'])
    op.create_index('ix_comments_status', 'comments', ['status'])

    link_categories = op.create_table(
        'link_categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        _timestamp('created_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )

    op.create_table(
        'links',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('url', sa.String(1000), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('avatar', sa.String(1000), nullable=True),
        sa.Column('category_id', sa.Integer(), server_default='1', nullable=False),
        sa.Column('target', sa.String(10), server_default='_blank', nullable=False),
        sa.Column('visible', sa.String(3), server_default='yes', nullable=False),
        sa.Column('rating', sa.Integer(), server_default='0', nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['category_id'], ['link_categories.id'], ondelete='SET DEFAULT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_links_category_id', 'links', ['category_id'])
    op.create_index('ix_links_visible', 'links', ['visible'])
    op.create_index('ix_links_sort_order', 'links', ['sort_order'])

    op.create_table(
        'moments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), server_default='publish', nullable=False),
        sa.Column('media_urls', sa.JSON(), nullable=False),
        sa.Column('view_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('like_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('comment_count', sa.Integer(), server_default='0', nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_moments_author_id', 'moments', ['author_id'])
    op.create_index('ix_moments_status', 'moments', ['status'])

    options = op.create_table(
        'options',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('option_name', sa.String(191), nullable=False),
        sa.Column('option_value', sa.Text(), nullable=True),
        sa.Column('autoload', sa.String(3), server_default='yes', nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('option_name'),
    )

    op.bulk_insert(categories, [
        {'id': 1, 'name': 'Uncategorized', 'slug': 'uncategorized', 'description': 'Default category'},
    ])
    op.bulk_insert(link_categories, [
        {'id': 1, 'name': 'Friends', 'slug': 'friends', 'description': 'Friendly links'},
    ])
    op.bulk_insert(options, [
        {'option_name': name, 'option_value': value}
        for name, value in default_options().items()
    ])

    # explicit ids above do not advance PostgreSQL sequences
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        op.execute("SELECT setval('categories_id_seq', (SELECT MAX(id) FROM categories))")
        op.execute("SELECT setval('link_categories_id_seq', (SELECT MAX(id) FROM link_categories))")


def downgrade() -> None:
    """Drop the content schema."""
    op.drop_table('options')
    op.drop_index('ix_moments_status', table_name='moments')
    op.drop_index('ix_moments_author_id', table_name='moments')
    op.drop_table('moments')
    op.drop_index('ix_links_sort_order', table_name='links')
    op.drop_index('ix_links_visible', table_name='links')
    op.drop_index('ix_links_category_id', table_name='links')
    op.drop_table('links')
    op.drop_table('link_categories')
    op.drop_index('ix_comments_status', table_name='comments')
    op.drop_index('ix_comments_post_id', table_name='comments')
    op.drop_table('comments')
    op.drop_table('post_tags')
    op.drop_table('post_categories')
    op.drop_index('ix_tags_slug', table_name='tags')
    op.drop_table('tags')
    op.drop_index('ix_categories_slug', table_name='categories')
    op.drop_table('categories')
    op.drop_index('ix_post_meta_post_id', table_name='post_meta')
    op.drop_table('post_meta')
    op.drop_index('ix_posts_published_at', table_name='posts')
    op.drop_index('ix_posts_author_id', table_name='posts')
    op.drop_index('ix_posts_post_type', table_name='posts')
    op.drop_index('ix_posts_status', table_name='posts')
    op.drop_index('ix_posts_slug', table_name='posts')
    op.drop_table('posts')
    op.drop_index('ix_media_author_id', table_name='media')
    op.drop_index('ix_media_mime_type', table_name='media')
    op.drop_table('media')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
