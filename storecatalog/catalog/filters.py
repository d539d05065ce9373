"""Query filter builders for category and product listings.

Each filter is a closed set of named, optional options. ``clauses()``
turns the supplied options into SQLAlchemy boolean clauses that are
combined with AND: every supplied option contributes exactly one clause
and an omitted option contributes none, so adding options can only
narrow a result set.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, and_, func, or_
from sqlalchemy.orm import InstrumentedAttribute

from storecatalog.catalog.models import Category, Product, ProductTag
from storecatalog.domain.value_objects import EntityId

# Literal parentCategory value selecting top-level categories
TOP_LEVEL_SENTINEL = "null"

TEXT_SEARCH_CONFIG = "simple"
SEARCH_WORD_PATTERN = re.compile(r"\w+", re.UNICODE)


def search_words(search: str) -> list[str]:
    """Split a search string into plain words, dropping punctuation."""
    return SEARCH_WORD_PATTERN.findall(search)


def text_search(
    columns: Sequence[InstrumentedAttribute],
    words: Sequence[str],
    dialect_name: str,
) -> ColumnElement[bool]:
    """Build a clause matching documents that contain any of ``words``.

    PostgreSQL uses its full-text operators over the concatenated columns;
    other backends fall back to case-insensitive substring matching.

    Args:
        columns: Text columns to search.
        words: Search words; must not be empty.
        dialect_name: Name of the SQL dialect the clause will run on.

    Returns:
        Boolean clause.
    """
    if dialect_name == "postgresql":
        document = func.to_tsvector(TEXT_SEARCH_CONFIG, func.concat_ws(" ", *columns))
        query = func.to_tsquery(TEXT_SEARCH_CONFIG, " | ".join(words))
        return document.bool_op("@@")(query)

    return or_(
        *(column.icontains(word, autoescape=True) for word in words for column in columns)
    )


@dataclass
class CategoryFilter:
    """Filter options for category listings.

    Attributes:
        search: Case-insensitive substring of name or description.
        is_active: Exact match on the active flag.
        parent_category: "null" for top-level categories, or a parent id.
            Malformed ids are ignored.
    """

    search: str | None = None
    is_active: bool | None = None
    parent_category: str | None = None

    def clauses(self) -> list[ColumnElement[bool]]:
        """Build the predicate clauses for the supplied options."""
        conditions: list[ColumnElement[bool]] = []

        if self.search:
            conditions.append(
                or_(
                    Category.name.icontains(self.search, autoescape=True),
                    Category.description.icontains(self.search, autoescape=True),
                )
            )

        if self.is_active is not None:
            conditions.append(Category.is_active == self.is_active)

        if self.parent_category:
            if self.parent_category == TOP_LEVEL_SENTINEL:
                conditions.append(Category.parent_id.is_(None))
            elif EntityId.is_valid(self.parent_category):
                conditions.append(Category.parent_id == self.parent_category.lower())

        return conditions


@dataclass
class ProductFilter:
    """Filter options for product listings.

    Attributes:
        search: Words matched against name and description.
        category: Exact category id.
        brand: Case-insensitive partial brand match.
        in_stock: Exact match on the stock flag.
        tags: Matches products sharing at least one tag.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        discount_active_at: Matches products whose discount is active and
            whose discount window contains this instant.
    """

    search: str | None = None
    category: str | None = None
    brand: str | None = None
    in_stock: bool | None = None
    tags: list[str] | None = None
    min_price: float | None = None
    max_price: float | None = None
    discount_active_at: datetime | None = None

    def clauses(self, dialect_name: str = "postgresql") -> list[ColumnElement[bool]]:
        """Build the predicate clauses for the supplied options.

        Args:
            dialect_name: SQL dialect, used to pick the text search operator.

        Returns:
            Clauses to combine with AND.
        """
        conditions: list[ColumnElement[bool]] = []

        if self.category:
            conditions.append(Product.category_id == self.category.lower())

        if self.brand:
            conditions.append(Product.brand.icontains(self.brand, autoescape=True))

        if self.in_stock is not None:
            conditions.append(Product.in_stock == self.in_stock)

        if self.tags:
            conditions.append(Product.tag_links.any(ProductTag.tag.in_(self.tags)))

        if self.min_price is not None and self.max_price is not None:
            conditions.append(Product.price.between(self.min_price, self.max_price))
        elif self.min_price is not None:
            conditions.append(Product.price >= self.min_price)
        elif self.max_price is not None:
            conditions.append(Product.price <= self.max_price)

        if self.search:
            words = search_words(self.search)
            if words:
                conditions.append(
                    text_search((Product.name, Product.description), words, dialect_name)
                )

        if self.discount_active_at is not None:
            now = self.discount_active_at
            conditions.append(
                and_(
                    Product.discount_is_active.is_(True),
                    or_(
                        Product.discount_start_date.is_(None),
                        Product.discount_start_date <= now,
                    ),
                    or_(
                        Product.discount_end_date.is_(None),
                        Product.discount_end_date >= now,
                    ),
                )
            )

        return conditions
