"""Sort and page planning for listings.

Turns client sort fields and page parameters into an ORDER BY list and
an offset/limit window. The entity id is always appended as the last
ordering key, so rows sharing a sort value come back in a stable order.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import UnaryExpression
from sqlalchemy.orm import InstrumentedAttribute

from storecatalog.catalog.models import Category, Product

DEFAULT_SORT_FIELD = "createdAt"
MAX_PAGE_LIMIT = 100

CATEGORY_SORT_FIELDS: Mapping[str, InstrumentedAttribute] = {
    "name": Category.name,
    "slug": Category.slug,
    "createdAt": Category.created_at,
    "updatedAt": Category.updated_at,
    "sortOrder": Category.sort_order,
    "isActive": Category.is_active,
}

PRODUCT_SORT_FIELDS: Mapping[str, InstrumentedAttribute] = {
    "name": Product.name,
    "price": Product.price,
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
    "ratings.average": Product.rating_average,
    "stockQuantity": Product.stock_quantity,
}


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str | None) -> "SortDirection":
        """Parse a direction; anything but "asc" sorts descending."""
        if value is not None and value.lower() == cls.ASC.value:
            return cls.ASC
        return cls.DESC


@dataclass(frozen=True)
class SortKey:
    """One ordering key: a field name and a direction."""

    field: str
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class SortPlan:
    """Ordered list of sort keys for one entity type.

    Attributes:
        keys: Sort keys, most significant first.
        columns: Allow-list mapping field names to columns.
        tiebreak: Column appended as the final ascending key.
    """

    keys: tuple[SortKey, ...]
    columns: Mapping[str, InstrumentedAttribute]
    tiebreak: InstrumentedAttribute

    @classmethod
    def single(
        cls,
        sort_by: str | None,
        sort_order: str | None,
        columns: Mapping[str, InstrumentedAttribute],
        tiebreak: InstrumentedAttribute,
    ) -> "SortPlan":
        """Plan a single client-chosen sort key.

        Unknown or omitted fields fall back to ``createdAt``.

        Args:
            sort_by: Requested field name.
            sort_order: "asc" or "desc" (default "desc").
            columns: Allow-list of sortable fields.
            tiebreak: Column used to break ties.

        Returns:
            SortPlan with one key.
        """
        field = sort_by if sort_by in columns else DEFAULT_SORT_FIELD
        return cls(
            keys=(SortKey(field, SortDirection.parse(sort_order)),),
            columns=columns,
            tiebreak=tiebreak,
        )

    @classmethod
    def fixed(
        cls,
        keys: Sequence[SortKey],
        columns: Mapping[str, InstrumentedAttribute],
        tiebreak: InstrumentedAttribute,
    ) -> "SortPlan":
        """Plan a fixed multi-key ordering."""
        unknown = [key.field for key in keys if key.field not in columns]
        if unknown:
            raise ValueError(f"Unknown sort fields: {unknown}")
        return cls(keys=tuple(keys), columns=columns, tiebreak=tiebreak)

    def order_by(self) -> list[UnaryExpression]:
        """Build ORDER BY expressions including the id tiebreak."""
        clauses = [
            self.columns[key.field].asc()
            if key.direction is SortDirection.ASC
            else self.columns[key.field].desc()
            for key in self.keys
        ]
        clauses.append(self.tiebreak.asc())
        return clauses


def category_sort(sort_by: str | None = None, sort_order: str | None = None) -> SortPlan:
    """Plan a client-chosen category ordering."""
    return SortPlan.single(sort_by, sort_order, CATEGORY_SORT_FIELDS, Category.id)


def category_display_sort() -> SortPlan:
    """Ordering for the active, main and sub category listings."""
    return SortPlan.fixed(
        [SortKey("sortOrder", SortDirection.ASC), SortKey("name", SortDirection.ASC)],
        CATEGORY_SORT_FIELDS,
        Category.id,
    )


def category_catalog_sort() -> SortPlan:
    """Ordering for the plain list of all categories."""
    return SortPlan.fixed(
        [SortKey("sortOrder", SortDirection.ASC), SortKey("createdAt", SortDirection.DESC)],
        CATEGORY_SORT_FIELDS,
        Category.id,
    )


def product_sort(sort_by: str | None = None, sort_order: str | None = None) -> SortPlan:
    """Plan a client-chosen product ordering."""
    return SortPlan.single(sort_by, sort_order, PRODUCT_SORT_FIELDS, Product.id)


@dataclass(frozen=True)
class PageWindow:
    """Page window over a result set.

    Attributes:
        page: Page number (1-indexed).
        limit: Items per page.
    """

    page: int = 1
    limit: int = 10

    @classmethod
    def plan(
        cls,
        page: int | None,
        limit: int | None,
        default_limit: int,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> "PageWindow":
        """Plan a window, clamping page and limit.

        Page and limit are raised to at least 1 and limit is capped at
        ``max_limit``. Out-of-range values are not rejected here.

        Args:
            page: Requested page; defaults to 1.
            limit: Requested page size; defaults to ``default_limit``.
            default_limit: Page size used when none is given.
            max_limit: Largest allowed page size.

        Returns:
            PageWindow.
        """
        page = max(1, page if page is not None else 1)
        limit = limit if limit is not None else default_limit
        limit = min(max(1, limit), max_limit)
        return cls(page=page, limit=limit)

    @property
    def skip(self) -> int:
        """Number of rows to skip."""
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        """Number of rows to return."""
        return self.limit
