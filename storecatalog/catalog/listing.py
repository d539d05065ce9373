"""Listing orchestration shared by every list operation.

Runs a predicate with an ordering, and either a page window plus an
independent count over the same predicate, or no window at all.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy import ColumnElement, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.catalog.sorting import PageWindow, SortPlan
from storecatalog.infrastructure.database import Base, store_operation

T = TypeVar("T")
M = TypeVar("M", bound=Base)


@dataclass
class Page(Generic[T]):
    """Paginated result container.

    Attributes:
        items: Items on this page.
        total: Number of items matching the predicate, ignoring the window.
        page: Current page.
        limit: Items per page.
    """

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total / self.limit)

    @property
    def has_next_page(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1


class ListingOrchestrator:
    """Executes filtered, ordered listings against the store.

    The count and the windowed query share one predicate, so pagination
    metadata matches the returned rows unless a write lands between the
    two reads.

    Example usage:
        listing = ListingOrchestrator(session)
        page = await listing.paginate(
            Product,
            ProductFilter(brand="acme").clauses(listing.dialect_name),
            product_sort("price", "asc"),
            PageWindow.plan(2, 10, default_limit=10),
        )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize orchestrator with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect behind the session."""
        return self.session.get_bind().dialect.name

    @store_operation
    async def paginate(
        self,
        model: type[M],
        clauses: Sequence[ColumnElement[bool]],
        sort: SortPlan,
        window: PageWindow,
    ) -> Page[M]:
        """Fetch one page of matching rows plus the total count.

        Args:
            model: Mapped class to query.
            clauses: Predicate clauses, combined with AND.
            sort: Ordering.
            window: Page window.

        Returns:
            Page of rows.
        """
        query = select(model)
        if clauses:
            query = query.where(and_(*clauses))
        query = query.order_by(*sort.order_by()).offset(window.skip).limit(window.take)

        result = await self.session.execute(query)
        items = list(result.scalars().all())
        total = await self.count(model, clauses)

        return Page(items=items, total=total, page=window.page, limit=window.limit)

    @store_operation
    async def list_all(
        self,
        model: type[M],
        clauses: Sequence[ColumnElement[bool]],
        sort: SortPlan,
    ) -> list[M]:
        """Fetch every matching row in order.

        Args:
            model: Mapped class to query.
            clauses: Predicate clauses, combined with AND.
            sort: Ordering.

        Returns:
            Matching rows.
        """
        query = select(model)
        if clauses:
            query = query.where(and_(*clauses))
        query = query.order_by(*sort.order_by())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    @store_operation
    async def count(
        self,
        model: type[M],
        clauses: Sequence[ColumnElement[bool]],
    ) -> int:
        """Count rows matching the predicate.

        Args:
            model: Mapped class to count.
            clauses: Predicate clauses, combined with AND.

        Returns:
            Count of matching rows.
        """
        query = select(func.count()).select_from(model)
        if clauses:
            query = query.where(and_(*clauses))

        result = await self.session.execute(query)
        return result.scalar_one()
