"""Initial schema: users, books, user_books, reviews

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""
import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('last_import_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('authors', sa.JSON(), nullable=False),
        sa.Column('isbn_10', sa.String(10), nullable=True),
        sa.Column('isbn_13', sa.String(13), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('published_date', sa.String(32), nullable=True),
        sa.Column('publisher', sa.String(255), nullable=True),
        sa.Column('page_count', sa.Integer(), nullable=True),
        sa.Column('language', sa.String(32), nullable=True),
        sa.Column('categories', sa.JSON(), nullable=True),
        sa.Column('cover_image', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_books_title', 'books', ['title'])
    op.create_index('ix_books_isbn_10', 'books', ['isbn_10'])
    op.create_index('ix_books_isbn_13', 'books', ['isbn_13'])

    op.create_table(
        'user_books',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('book_id', sa.String(64), nullable=False),
        sa.Column('source', sa.String(20), nullable=False),
        sa.Column('ownership_status', sa.String(20), nullable=False),
        sa.Column('reading_status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', name='unique_user_book'),
    )
    op.create_index('ix_user_books_user_id', 'user_books', ['user_id'])
    op.create_index('ix_user_books_book_id', 'user_books', ['book_id'])
    op.create_index('ix_user_books_created_at', 'user_books', ['created_at'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('book_id', sa.String(64), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', name='unique_user_book_review'),
    )
    op.create_index('ix_reviews_user_id', 'reviews', ['user_id'])
    op.create_index('ix_reviews_book_id', 'reviews', ['book_id'])
    op.create_index('ix_reviews_created_at', 'reviews', ['created_at'])


def downgrade() -> None:
    op.drop_table('reviews')
    op.drop_table('user_books')
    op.drop_table('books')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
