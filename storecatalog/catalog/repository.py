"""Repositories for category and product database operations.

Lookups return None for missing documents; deciding whether that is an
error is left to the application services. Every method translates
SQLAlchemy faults into StoreFailureError.
"""

from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.catalog.models import Category, Product, discount_columns
from storecatalog.domain.value_objects import Discount, Ratings
from storecatalog.infrastructure.database import store_operation, utcnow


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with database.session_factory() as session:
            repo = CategoryRepository(session)
            category = await repo.get_by_slug("elektronik")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    @store_operation
    async def add(self, category: Category) -> Category:
        """Stage a new category and flush it.

        Args:
            category: Category to insert.

        Returns:
            The flushed category.
        """
        self.session.add(category)
        await self.session.flush()
        return category

    @store_operation
    async def get_by_id(self, category_id: str) -> Category | None:
        """Get category by ID, reloading any cached state.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        query = (
            select(Category)
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @store_operation
    async def get_by_slug(self, slug: str) -> Category | None:
        """Get category by slug.

        Args:
            slug: Category slug.

        Returns:
            Category if found, None otherwise.
        """
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    @store_operation
    async def exists(self, category_id: str) -> bool:
        """Check whether a category exists."""
        result = await self.session.execute(
            select(Category.id).where(Category.id == category_id)
        )
        return result.scalar_one_or_none() is not None

    @store_operation
    async def name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        """Check whether another category already uses a name.

        Args:
            name: Category name.
            exclude_id: Category to ignore (the one being renamed).

        Returns:
            True if the name is in use.
        """
        query = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    @store_operation
    async def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        """Check whether another category already uses a slug.

        Args:
            slug: Category slug.
            exclude_id: Category to ignore (the one being renamed).

        Returns:
            True if the slug is in use.
        """
        query = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    @store_operation
    async def get_parent_id(self, category_id: str) -> str | None:
        """Get the parent id of a category.

        Returns:
            Parent id, or None for top-level or missing categories.
        """
        result = await self.session.execute(
            select(Category.parent_id).where(Category.id == category_id)
        )
        return result.scalar_one_or_none()

    @store_operation
    async def count(self) -> int:
        """Count all categories."""
        result = await self.session.execute(select(func.count()).select_from(Category))
        return result.scalar_one()

    @store_operation
    async def delete(self, category: Category) -> None:
        """Delete a category. Children and products are left untouched."""
        await self.session.delete(category)
        await self.session.flush()

    @store_operation
    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.session.commit()


class ProductRepository:
    """Repository for Product database operations.

    Narrow updates (stock, discount, ratings) are single UPDATE statements
    so the store applies each of them atomically.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    @store_operation
    async def add(self, product: Product) -> Product:
        """Stage a new product and flush it.

        Args:
            product: Product to insert.

        Returns:
            The flushed product.
        """
        self.session.add(product)
        await self.session.flush()
        return product

    @store_operation
    async def get_by_id(self, product_id: str) -> Product | None:
        """Get product by ID, reloading any cached state.

        Args:
            product_id: Product ID.

        Returns:
            Product if found, None otherwise.
        """
        query = (
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @store_operation
    async def update_fields(self, product_id: str, values: dict[str, Any]) -> bool:
        """Update columns of one product in a single statement.

        Args:
            product_id: Product ID.
            values: Column values to set.

        Returns:
            True if a product was updated.
        """
        statement = (
            update(Product)
            .where(Product.id == product_id)
            .values(**values, updated_at=utcnow())
        )
        result = await self.session.execute(statement)
        return result.rowcount > 0

    async def replace_discount(self, product_id: str, discount: Discount) -> bool:
        """Replace the discount of one product atomically.

        Returns:
            True if a product was updated.
        """
        return await self.update_fields(product_id, discount_columns(discount))

    @store_operation
    async def swap_ratings(
        self,
        product_id: str,
        expected_count: int,
        ratings: Ratings,
    ) -> bool:
        """Write new ratings only if no other rating landed meanwhile.

        The count is bumped by every rating, so it works as a version
        number for the compare-and-swap.

        Args:
            product_id: Product ID.
            expected_count: Rating count the new value was computed from.
            ratings: New ratings.

        Returns:
            True if the swap was applied.
        """
        statement = (
            update(Product)
            .where(Product.id == product_id, Product.rating_count == expected_count)
            .values(
                rating_average=ratings.average,
                rating_count=ratings.count,
                updated_at=utcnow(),
            )
        )
        result = await self.session.execute(statement)
        return result.rowcount > 0

    @store_operation
    async def delete(self, product: Product) -> None:
        """Delete a product and its tags."""
        await self.session.delete(product)
        await self.session.flush()

    @store_operation
    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.session.commit()
