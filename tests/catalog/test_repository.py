"""Tests for the category and product repositories."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.catalog.models import Product
from storecatalog.catalog.repository import CategoryRepository, ProductRepository
from storecatalog.domain.exceptions import StoreFailureError
from storecatalog.domain.value_objects import Discount, DiscountType, Ratings


class TestCategoryRepository:
    """Tests for CategoryRepository."""

    @pytest.mark.asyncio
    async def test_lookups(self, session: AsyncSession, make_category) -> None:
        """Categories can be found by id and by slug."""
        category = await make_category("Elektronik")
        repo = CategoryRepository(session)

        assert (await repo.get_by_id(category.id)).slug == "elektronik"
        assert (await repo.get_by_slug("elektronik")).id == category.id
        assert await repo.get_by_slug("missing") is None
        assert await repo.exists(category.id) is True
        assert await repo.exists("abcdef0123456789abcdef01") is False

    @pytest.mark.asyncio
    async def test_name_and_slug_taken_exclude_self(
        self, session: AsyncSession, make_category
    ) -> None:
        """A category never conflicts with itself."""
        category = await make_category("Elektronik")
        repo = CategoryRepository(session)

        assert await repo.name_taken("Elektronik") is True
        assert await repo.name_taken("Elektronik", exclude_id=category.id) is False
        assert await repo.slug_taken("elektronik") is True
        assert await repo.slug_taken("elektronik", exclude_id=category.id) is False

    @pytest.mark.asyncio
    async def test_delete_leaves_children(self, session: AsyncSession, make_category) -> None:
        """Deleting a parent does not touch its children."""
        parent = await make_category("Elektronik")
        child = await make_category("Telefonlar", parent_id=parent.id)
        repo = CategoryRepository(session)

        await repo.delete(await repo.get_by_id(parent.id))
        await repo.commit()

        assert await repo.get_parent_id(child.id) == parent.id
        assert await repo.count() == 1


class TestProductRepository:
    """Tests for ProductRepository."""

    @pytest.mark.asyncio
    async def test_update_fields(
        self, session: AsyncSession, make_category, make_product
    ) -> None:
        """update_fields changes only the given columns."""
        category = await make_category("Elektronik")
        product = await make_product("Telefon", 100.0, category.id, stock_quantity=3)
        repo = ProductRepository(session)

        assert await repo.update_fields(product.id, {"stock_quantity": 0, "in_stock": False})
        await repo.commit()

        reloaded = await repo.get_by_id(product.id)
        assert reloaded.stock_quantity == 0
        assert reloaded.in_stock is False
        assert reloaded.price == 100.0

    @pytest.mark.asyncio
    async def test_update_fields_missing_product(self, session: AsyncSession) -> None:
        """Updating a missing product reports no match."""
        repo = ProductRepository(session)
        assert await repo.update_fields("abcdef0123456789abcdef01", {"in_stock": True}) is False

    @pytest.mark.asyncio
    async def test_replace_discount(
        self, session: AsyncSession, make_category, make_product
    ) -> None:
        """The whole discount descriptor is replaced."""
        category = await make_category("Elektronik")
        product = await make_product("Telefon", 100.0, category.id)
        repo = ProductRepository(session)

        discount = Discount(type=DiscountType.FIXED, value=15, is_active=True)
        assert await repo.replace_discount(product.id, discount)
        await repo.commit()

        assert (await repo.get_by_id(product.id)).discount == discount

    @pytest.mark.asyncio
    async def test_swap_ratings_applies_on_expected_count(
        self, session: AsyncSession, make_category, make_product
    ) -> None:
        """The swap applies when the count is unchanged."""
        category = await make_category("Elektronik")
        product = await make_product(
            "Telefon", 100.0, category.id, ratings=Ratings(average=4.0, count=2)
        )
        repo = ProductRepository(session)

        assert await repo.swap_ratings(product.id, 2, Ratings(average=4.3, count=3))
        await repo.commit()

        assert (await repo.get_by_id(product.id)).ratings == Ratings(average=4.3, count=3)

    @pytest.mark.asyncio
    async def test_swap_ratings_rejects_stale_count(
        self, session: AsyncSession, make_category, make_product
    ) -> None:
        """The swap is refused when another rating landed first."""
        category = await make_category("Elektronik")
        product = await make_product(
            "Telefon", 100.0, category.id, ratings=Ratings(average=4.0, count=2)
        )
        repo = ProductRepository(session)

        assert await repo.swap_ratings(product.id, 1, Ratings(average=5.0, count=2)) is False
        await repo.commit()

        assert (await repo.get_by_id(product.id)).ratings == Ratings(average=4.0, count=2)

    @pytest.mark.asyncio
    async def test_delete_removes_tags(
        self, session: AsyncSession, make_category, make_product
    ) -> None:
        """Deleting a product removes its tag rows."""
        category = await make_category("Elektronik")
        product = await make_product("Telefon", 100.0, category.id, tags=["a", "b"])
        repo = ProductRepository(session)

        await repo.delete(await repo.get_by_id(product.id))
        await repo.commit()

        assert await repo.get_by_id(product.id) is None

    @pytest.mark.asyncio
    async def test_store_fault_becomes_store_failure(
        self, session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """SQLAlchemy faults surface as StoreFailureError with a diagnostic."""

        async def broken_execute(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(session, "execute", broken_execute)
        repo = ProductRepository(session)

        with pytest.raises(StoreFailureError) as exc_info:
            await repo.get_by_id("abcdef0123456789abcdef01")
        assert "database is locked" in exc_info.value.diagnostic

    @pytest.mark.asyncio
    async def test_tags_keep_order(
        self, session: AsyncSession, make_category, make_product
    ) -> None:
        """Tags come back in the order they were set."""
        category = await make_category("Elektronik")
        product = await make_product("Telefon", 100.0, category.id, tags=["z", "a", "m"])

        reloaded = await ProductRepository(session).get_by_id(product.id)
        assert isinstance(reloaded, Product)
        assert reloaded.tags == ["z", "a", "m"]
