"""Tests for the product application service."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.application.category_service import CategoryService
from storecatalog.application.product_service import NewProduct, ProductService
from storecatalog.catalog.filters import ProductFilter
from storecatalog.catalog.models import Category
from storecatalog.catalog.repository import ProductRepository
from storecatalog.domain.exceptions import (
    ConcurrentUpdateError,
    InvalidIdentifierError,
    InvalidInputError,
    InvalidReferenceError,
    ProductNotFoundError,
    StoreFailureError,
)
from storecatalog.domain.value_objects import Discount, DiscountType, Ratings

UNKNOWN_ID = "abcdef0123456789abcdef01"


@pytest.fixture
def service(session: AsyncSession) -> ProductService:
    """Product service bound to the test session."""
    return ProductService(session, request_id="test-request")


@pytest_asyncio.fixture
async def category(session: AsyncSession) -> Category:
    """An existing category for products to reference."""
    return await CategoryService(session, slug_locale="tr").create_category(name="Elektronik")


class TestCreateProduct:
    """Tests for product creation."""

    @pytest.mark.asyncio
    async def test_create_populates_category(
        self, service: ProductService, category: Category
    ) -> None:
        """A new product carries its category and defaults."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=499.0, category=category.id, tags=["mobil"])
        )
        assert product.category.name == "Elektronik"
        assert product.tags == ["mobil"]
        assert product.ratings == Ratings()
        assert product.discount == Discount()
        assert product.in_stock is True
        assert product.discounted_price() == 499.0

    @pytest.mark.asyncio
    async def test_unknown_category_rejected(self, service: ProductService) -> None:
        """Products must reference an existing category."""
        with pytest.raises(InvalidReferenceError):
            await service.create_product(NewProduct(name="Telefon", price=1, category=UNKNOWN_ID))

    @pytest.mark.asyncio
    async def test_malformed_category_rejected(self, service: ProductService) -> None:
        """Malformed category ids are rejected."""
        with pytest.raises(InvalidIdentifierError):
            await service.create_product(NewProduct(name="Telefon", price=1, category="x"))


class TestUpdateProduct:
    """Tests for product updates."""

    @pytest.mark.asyncio
    async def test_partial_update(self, service: ProductService, category: Category) -> None:
        """Only supplied fields change."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id, brand="Acme")
        )
        updated = await service.update_product(
            product.id,
            {"price": 80.0, "tags": ["yeni", "indirim"]},
        )
        assert updated.price == 80.0
        assert updated.tags == ["yeni", "indirim"]
        assert updated.brand == "Acme"
        assert updated.name == "Telefon"

    @pytest.mark.asyncio
    async def test_change_category(
        self, session: AsyncSession, service: ProductService, category: Category
    ) -> None:
        """The category can be moved to another existing category."""
        other = await CategoryService(session).create_category(name="Kitap")
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )
        updated = await service.update_product(product.id, {"category": other.id})
        assert updated.category_id == other.id
        assert updated.category.name == "Kitap"

    @pytest.mark.asyncio
    async def test_change_to_unknown_category(
        self, service: ProductService, category: Category
    ) -> None:
        """Moving to a missing category is rejected."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )
        with pytest.raises(InvalidReferenceError):
            await service.update_product(product.id, {"category": UNKNOWN_ID})

    @pytest.mark.asyncio
    async def test_unknown_field(self, service: ProductService, category: Category) -> None:
        """Fields outside the updatable set are rejected."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )
        with pytest.raises(InvalidInputError):
            await service.update_product(product.id, {"id": UNKNOWN_ID})

    @pytest.mark.asyncio
    async def test_missing_product(self, service: ProductService) -> None:
        """Updating a missing product raises ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            await service.update_product(UNKNOWN_ID, {"price": 1.0})


class TestNarrowUpdates:
    """Tests for stock, discount and rating updates."""

    @pytest.mark.asyncio
    async def test_update_stock(self, service: ProductService, category: Category) -> None:
        """Stock fields can be updated independently."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id, stock_quantity=5)
        )
        updated = await service.update_stock(product.id, stock_quantity=0)
        assert updated.stock_quantity == 0
        assert updated.in_stock is True

        updated = await service.update_stock(product.id, in_stock=False)
        assert updated.stock_quantity == 0
        assert updated.in_stock is False

    @pytest.mark.asyncio
    async def test_update_stock_missing(self, service: ProductService) -> None:
        """Stock updates on a missing product raise ProductNotFoundError."""
        with pytest.raises(ProductNotFoundError):
            await service.update_stock(UNKNOWN_ID, stock_quantity=1)

    @pytest.mark.asyncio
    async def test_update_discount(self, service: ProductService, category: Category) -> None:
        """The discount is replaced and reflected in the price."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=200.0, category=category.id)
        )
        updated = await service.update_discount(
            product.id, Discount(type=DiscountType.PERCENTAGE, value=25, is_active=True)
        )
        assert updated.discount.value == 25
        assert updated.discounted_price() == pytest.approx(150.0)

    @pytest.mark.asyncio
    async def test_ratings_fold(self, service: ProductService, category: Category) -> None:
        """Ratings 5, 3, 4 average to 4.0 over three votes."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )
        for rating in (5, 3, 4):
            product = await service.add_rating(product.id, rating)
        assert product.ratings == Ratings(average=4.0, count=3)

    @pytest.mark.asyncio
    async def test_lost_race_is_reported(
        self,
        service: ProductService,
        category: Category,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A lost compare-and-swap raises ConcurrentUpdateError and writes nothing."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )

        async def lost_swap(self, product_id, expected_count, ratings) -> bool:
            return False

        monkeypatch.setattr(ProductRepository, "swap_ratings", lost_swap)

        with pytest.raises(ConcurrentUpdateError) as exc_info:
            await service.add_rating(product.id, 5)
        assert isinstance(exc_info.value, StoreFailureError)

        monkeypatch.undo()
        assert (await service.get_product(product.id)).ratings == Ratings()

    @pytest.mark.asyncio
    async def test_delete(self, service: ProductService, category: Category) -> None:
        """Deleted products can no longer be fetched."""
        product = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )
        await service.delete_product(product.id)
        with pytest.raises(ProductNotFoundError):
            await service.get_product(product.id)


class TestListings:
    """Tests for product listings."""

    @pytest.mark.asyncio
    async def test_price_range_second_page(
        self, service: ProductService, category: Category
    ) -> None:
        """Filtering by price and paging returns the right slice."""
        for index in range(25):
            await service.create_product(
                NewProduct(name=f"Ürün {index:02d}", price=100.0 + index * 10, category=category.id)
            )

        page = await service.list_products(
            ProductFilter(min_price=100, max_price=500),
            sort_by="price",
            sort_order="asc",
            page=2,
            limit=10,
        )
        assert [p.price for p in page.items] == [100.0 + i * 10 for i in range(10, 20)]
        assert page.total == 25
        assert page.total_pages == 3
        assert page.has_next_page is True
        assert page.has_prev_page is True

    @pytest.mark.asyncio
    async def test_malformed_category_filter(self, service: ProductService) -> None:
        """A malformed category filter is rejected."""
        with pytest.raises(InvalidIdentifierError):
            await service.list_products(ProductFilter(category="bad"))

    @pytest.mark.asyncio
    async def test_list_by_category(
        self, session: AsyncSession, service: ProductService, category: Category
    ) -> None:
        """Products are listed per category."""
        other = await CategoryService(session).create_category(name="Kitap")
        kept = await service.create_product(
            NewProduct(name="Telefon", price=100.0, category=category.id)
        )
        await service.create_product(NewProduct(name="Roman", price=20.0, category=other.id))

        page = await service.list_by_category(category.id)
        assert [p.id for p in page.items] == [kept.id]
        assert page.limit == 10

    @pytest.mark.asyncio
    async def test_list_discounted(self, service: ProductService, category: Category) -> None:
        """Only products whose discount applies now are listed."""
        now = datetime(2024, 6, 15, tzinfo=timezone.utc)
        active = await service.create_product(
            NewProduct(
                name="Aktif",
                price=100.0,
                category=category.id,
                discount=Discount(
                    type=DiscountType.FIXED,
                    value=10,
                    is_active=True,
                    start_date=now - timedelta(days=1),
                    end_date=now + timedelta(days=1),
                ),
            )
        )
        await service.create_product(
            NewProduct(
                name="Bitmiş",
                price=100.0,
                category=category.id,
                discount=Discount(
                    type=DiscountType.FIXED,
                    value=10,
                    is_active=True,
                    end_date=now - timedelta(days=1),
                ),
            )
        )
        await service.create_product(
            NewProduct(name="Kapalı", price=100.0, category=category.id)
        )

        page = await service.list_discounted(now=now)
        assert [p.id for p in page.items] == [active.id]
