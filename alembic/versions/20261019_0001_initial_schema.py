"""Initial schema - users, articles, comments, favorites, follows

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('bio', sa.Text(), nullable=False, server_default=''),
        sa.Column('image', sa.String(1024), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('username', name='users_username_key'),
        sa.UniqueConstraint('email', name='users_email_key'),
    )

    # Articles table
    op.create_table(
        'articles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('slug', sa.String(512), nullable=False),
        sa.Column('title', sa.String(512), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('slug', name='articles_slug_key'),
    )
    # Listings are newest first
    op.create_index('ix_articles_created_at', 'articles', ['created_at'])
    op.create_index('ix_articles_author_id', 'articles', ['author_id'])

    # Article tags
    op.create_table(
        'article_tags',
        sa.Column('article_id', sa.Uuid(), sa.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag', sa.String(255), primary_key=True),
    )
    op.create_index('ix_article_tags_tag', 'article_tags', ['tag'])

    # Favorites edge
    op.create_table(
        'article_favorites',
        sa.Column('article_id', sa.Uuid(), sa.ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_article_favorites_user_id', 'article_favorites', ['user_id'])

    # Follows edge
    op.create_table(
        'follows',
        sa.Column('following_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('followed_user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('following_user_id <> followed_user_id', name='user_cannot_follow_self'),
    )
    op.create_index('ix_follows_followed_user_id', 'follows', ['followed_user_id'])

    # Comments table
    op.create_table(
        'comments',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), primary_key=True, autoincrement=True),
        sa.Column('article_id', sa.Uuid(), sa.ForeignKey('articles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('author_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_comments_article_id', 'comments', ['article_id'])
    op.create_index('ix_comments_author_id', 'comments', ['author_id'])


def downgrade() -> None:
    op.drop_index('ix_comments_author_id', table_name='comments')
    op.drop_index('ix_comments_article_id', table_name='comments')
    op.drop_table('comments')
    op.drop_index('ix_follows_followed_user_id', table_name='follows')
    op.drop_table('follows')
    op.drop_index('ix_article_favorites_user_id', table_name='article_favorites')
    op.drop_table('article_favorites')
    op.drop_index('ix_article_tags_tag', table_name='article_tags')
    op.drop_table('article_tags')
    op.drop_index('ix_articles_author_id', table_name='articles')
    op.drop_index('ix_articles_created_at', table_name='articles')
    op.drop_table('articles')
    op.drop_table('users')
