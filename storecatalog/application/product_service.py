"""Product application service.

Handles product creation and updates, the narrow stock / discount /
rating updates, and the product listings.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.catalog.filters import ProductFilter
from storecatalog.catalog.listing import ListingOrchestrator, Page
from storecatalog.catalog.models import Product
from storecatalog.catalog.repository import CategoryRepository, ProductRepository
from storecatalog.catalog.sorting import PageWindow, product_sort
from storecatalog.domain.exceptions import (
    ConcurrentUpdateError,
    InvalidInputError,
    InvalidReferenceError,
    ProductNotFoundError,
)
from storecatalog.domain.ratings import fold_rating
from storecatalog.domain.value_objects import Discount, EntityId, Ratings
from storecatalog.infrastructure.config import settings
from storecatalog.infrastructure.database import utcnow

logger = structlog.get_logger()

# Plain columns a general update may set directly
SCALAR_FIELDS = frozenset(
    {
        "name",
        "description",
        "price",
        "brand",
        "in_stock",
        "stock_quantity",
        "colors",
        "sizes",
        "images",
    }
)
UPDATABLE_FIELDS = SCALAR_FIELDS | {"category", "tags", "discount", "ratings"}


@dataclass
class NewProduct:
    """Data for a product to be created."""

    name: str
    price: float
    category: str
    description: str | None = None
    brand: str | None = None
    tags: list[str] = field(default_factory=list)
    in_stock: bool = True
    stock_quantity: int = 0
    ratings: Ratings = field(default_factory=Ratings)
    discount: Discount = field(default_factory=Discount)
    colors: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


class ProductService:
    """Application service for managing products.

    Example usage:
        service = ProductService(session)
        product = await service.create_product(
            NewProduct(name="Phone", price=499, category=category.id)
        )
        product = await service.add_rating(product.id, 5)
    """

    def __init__(self, session: AsyncSession, request_id: str | None = None) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session.
            request_id: Request ID for correlation.
        """
        self.repository = ProductRepository(session)
        self.categories = CategoryRepository(session)
        self.listing = ListingOrchestrator(session)
        self.request_id = request_id

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_product(self, data: NewProduct) -> Product:
        """Create a new product.

        Args:
            data: Product data.

        Returns:
            The created product with its category loaded.

        Raises:
            InvalidIdentifierError: If the category id is malformed.
            InvalidReferenceError: If the category does not exist.
        """
        category_id = await self._resolve_category(data.category)

        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            brand=data.brand,
            category_id=category_id,
            in_stock=data.in_stock,
            stock_quantity=data.stock_quantity,
            colors=list(data.colors),
            sizes=list(data.sizes),
            images=list(data.images),
        )
        product.set_tags(list(data.tags))
        product.set_discount(data.discount)
        product.set_ratings(data.ratings)

        await self.repository.add(product)
        await self.repository.commit()

        logger.info(
            "Product created",
            product_id=product.id,
            category_id=category_id,
            request_id=self.request_id,
        )

        return await self._reload(product.id)

    async def update_product(self, product_id: str, changes: Mapping[str, Any]) -> Product:
        """Apply a partial update to a product.

        Args:
            product_id: Product ID.
            changes: Supplied fields keyed by snake_case name. ``discount``
                and ``ratings`` take value objects.

        Returns:
            The updated product.

        Raises:
            InvalidIdentifierError: If an id is malformed.
            InvalidReferenceError: If the new category does not exist.
            ProductNotFoundError: If the product does not exist.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidInputError(
                f"Unknown product fields: {sorted(unknown)}",
                details={"fields": sorted(unknown)},
            )

        product_id = self._parse_id(product_id)
        category_id = None
        if changes.get("category") is not None:
            category_id = await self._resolve_category(changes["category"])

        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        for field_name in SCALAR_FIELDS & set(changes):
            value = changes[field_name]
            if value is None and field_name not in ("description", "brand"):
                continue
            setattr(product, field_name, value)

        if category_id is not None:
            product.category_id = category_id
        if changes.get("tags") is not None:
            product.set_tags(list(changes["tags"]))
        if changes.get("discount") is not None:
            product.set_discount(changes["discount"])
        if changes.get("ratings") is not None:
            product.set_ratings(changes["ratings"])

        product.updated_at = utcnow()
        await self.repository.commit()

        logger.info(
            "Product updated",
            product_id=product_id,
            fields=sorted(changes),
            request_id=self.request_id,
        )

        return await self._reload(product_id)

    async def update_stock(
        self,
        product_id: str,
        stock_quantity: int | None = None,
        in_stock: bool | None = None,
    ) -> Product:
        """Update stock fields in one atomic statement.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            ProductNotFoundError: If the product does not exist.
        """
        product_id = self._parse_id(product_id)

        values: dict[str, Any] = {}
        if stock_quantity is not None:
            values["stock_quantity"] = stock_quantity
        if in_stock is not None:
            values["in_stock"] = in_stock

        if not await self.repository.update_fields(product_id, values):
            raise ProductNotFoundError(product_id)
        await self.repository.commit()

        logger.info(
            "Product stock updated",
            product_id=product_id,
            stock_quantity=stock_quantity,
            in_stock=in_stock,
            request_id=self.request_id,
        )

        return await self._reload(product_id)

    async def update_discount(self, product_id: str, discount: Discount) -> Product:
        """Replace a product's discount in one atomic statement.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            ProductNotFoundError: If the product does not exist.
        """
        product_id = self._parse_id(product_id)

        if not await self.repository.replace_discount(product_id, discount):
            raise ProductNotFoundError(product_id)
        await self.repository.commit()

        logger.info(
            "Product discount updated",
            product_id=product_id,
            discount_type=discount.type.value,
            discount_value=discount.value,
            is_active=discount.is_active,
            request_id=self.request_id,
        )

        return await self._reload(product_id)

    async def add_rating(self, product_id: str, rating: float) -> Product:
        """Fold one rating into the product's running average.

        The write is a compare-and-swap on the rating count: if another
        rating landed between the read and the write, nothing is written
        and ConcurrentUpdateError is raised.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            ProductNotFoundError: If the product does not exist.
            ConcurrentUpdateError: If the swap lost a race.
        """
        product_id = self._parse_id(product_id)
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        current = product.ratings
        updated = fold_rating(current, rating)

        if not await self.repository.swap_ratings(product_id, current.count, updated):
            logger.warning(
                "Rating update lost a race",
                product_id=product_id,
                expected_count=current.count,
                request_id=self.request_id,
            )
            raise ConcurrentUpdateError("product", product_id)
        await self.repository.commit()

        logger.info(
            "Product rating added",
            product_id=product_id,
            rating=rating,
            average=updated.average,
            count=updated.count,
            request_id=self.request_id,
        )

        return await self._reload(product_id)

    async def delete_product(self, product_id: str) -> None:
        """Delete a product.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            ProductNotFoundError: If the product does not exist.
        """
        product_id = self._parse_id(product_id)
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        await self.repository.delete(product)
        await self.repository.commit()

        logger.info(
            "Product deleted",
            product_id=product_id,
            request_id=self.request_id,
        )

    # ------------------------------------------------------------------
    # Lookups and listings
    # ------------------------------------------------------------------

    async def get_product(self, product_id: str) -> Product:
        """Get a product by ID.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            ProductNotFoundError: If the product does not exist.
        """
        return await self._reload(self._parse_id(product_id))

    async def list_products(
        self,
        filters: ProductFilter,
        sort_by: str | None = None,
        sort_order: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Product]:
        """List products with filtering, sorting and pagination.

        Raises:
            InvalidIdentifierError: If the category filter is malformed.
        """
        if filters.category is not None:
            filters.category = str(EntityId.parse(filters.category, entity="category"))

        return await self.listing.paginate(
            Product,
            filters.clauses(self.listing.dialect_name),
            product_sort(sort_by, sort_order),
            self._window(page, limit),
        )

    async def list_discounted(
        self,
        page: int | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> Page[Product]:
        """List products whose discount applies at ``now``."""
        filters = ProductFilter(discount_active_at=now or datetime.now(timezone.utc))
        return await self.listing.paginate(
            Product,
            filters.clauses(self.listing.dialect_name),
            product_sort(),
            self._window(page, limit),
        )

    async def list_by_category(
        self,
        category_id: str,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Product]:
        """List the products of one category.

        Raises:
            InvalidIdentifierError: If the category id is malformed.
        """
        return await self.list_products(
            ProductFilter(category=category_id),
            page=page,
            limit=limit,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_id(product_id: str) -> str:
        return str(EntityId.parse(product_id, entity="product"))

    @staticmethod
    def _window(page: int | None, limit: int | None) -> PageWindow:
        return PageWindow.plan(
            page,
            limit,
            default_limit=settings.default_product_limit,
            max_limit=settings.max_page_limit,
        )

    async def _resolve_category(self, category_id: str) -> str:
        category_id = str(EntityId.parse(category_id, entity="category"))
        if not await self.categories.exists(category_id):
            raise InvalidReferenceError("category", category_id)
        return category_id

    async def _reload(self, product_id: str) -> Product:
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product
