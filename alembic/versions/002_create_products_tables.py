"""Create products and product_tags tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create products and product_tags tables."""
    # Products table; category_id is a weak reference without a foreign key
    op.create_table(
        'products',
        sa.Column('id', sa.String(24), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False, index=True),
        sa.Column('brand', sa.String(100), nullable=True, index=True),
        sa.Column('category_id', sa.String(24), nullable=False, index=True),
        sa.Column('in_stock', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rating_average', sa.Numeric(2, 1), nullable=False, server_default='0.0'),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('discount_type', sa.String(20), nullable=False, server_default='percentage'),
        sa.Column('discount_value', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('discount_is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('discount_start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('discount_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('colors', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('sizes', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('images', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Full-text index matching the search expression used by product listings
    op.execute(
        "CREATE INDEX ix_products_search ON products USING GIN "
        "(to_tsvector('simple', concat_ws(' ', name, description)))"
    )

    # Product tags table
    op.create_table(
        'product_tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('product_id', sa.String(24),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tag', sa.String(50), nullable=False, index=True),
    )


def downgrade() -> None:
    """Drop products and product_tags tables."""
    op.drop_table('product_tags')
    op.execute("DROP INDEX IF EXISTS ix_products_search")
    op.drop_table('products')
