"""Shared fixtures for store-backed tests.

Every test gets its own in-memory SQLite database with the schema
already created.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.catalog.models import Category, Product
from storecatalog.domain.value_objects import Discount, Ratings
from storecatalog.infrastructure.database import Database

SQLITE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Create an in-memory database with all tables."""
    database = Database(SQLITE_URL)
    await database.create_all()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the test database."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_category(
    session: AsyncSession,
) -> Callable[..., Awaitable[Category]]:
    """Factory inserting categories directly through the session."""

    async def factory(name: str, **fields) -> Category:
        fields.setdefault("slug", name.lower().replace(" ", "-"))
        category = Category(name=name, **fields)
        session.add(category)
        await session.commit()
        return category

    return factory


@pytest_asyncio.fixture
async def make_product(
    session: AsyncSession,
) -> Callable[..., Awaitable[Product]]:
    """Factory inserting products directly through the session."""

    async def factory(
        name: str,
        price: float,
        category_id: str,
        tags: list[str] | None = None,
        discount: Discount | None = None,
        ratings: Ratings | None = None,
        **fields,
    ) -> Product:
        product = Product(name=name, price=price, category_id=category_id, **fields)
        product.set_tags(tags or [])
        product.set_discount(discount or Discount())
        product.set_ratings(ratings or Ratings())
        session.add(product)
        await session.commit()
        return product

    return factory
