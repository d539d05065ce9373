"""Product API endpoints.

Provides endpoints for product CRUD, the narrow stock, discount and
rating updates, and the product listings.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.api.schemas import (
    ENTITY_ID_REGEX,
    DataResponse,
    DiscountSchema,
    DiscountUpdateRequest,
    ErrorResponse,
    MessageResponse,
    ProductCategorySchema,
    ProductCreateRequest,
    ProductPageResponse,
    ProductPaginationSchema,
    ProductResponse,
    ProductUpdateRequest,
    RatingRequest,
    RatingsSchema,
    StockUpdateRequest,
)
from storecatalog.application.product_service import NewProduct, ProductService
from storecatalog.catalog.filters import ProductFilter
from storecatalog.catalog.listing import Page
from storecatalog.catalog.models import Product
from storecatalog.infrastructure.database import get_session

router = APIRouter(prefix="/api/products", tags=["Products"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

ProductSortField = Literal[
    "name", "price", "createdAt", "updatedAt", "ratings.average", "stockQuantity"
]


# ============================================================================
# Dependencies
# ============================================================================


def get_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProductService:
    """Get product service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return ProductService(session, request_id=request_id)


ServiceDep = Annotated[ProductService, Depends(get_service)]
PageQuery = Annotated[int | None, Query(ge=1)]
LimitQuery = Annotated[int | None, Query(ge=1, le=100)]


def split_tags(tags: list[str] | None) -> list[str] | None:
    """Flatten repeated and comma separated tag parameters."""
    if not tags:
        return None
    flattened = [tag.strip() for value in tags for tag in value.split(",")]
    return [tag for tag in flattened if tag] or None


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product model to response schema."""
    category = ProductCategorySchema(
        id=product.category_id,
        name=product.category.name if product.category is not None else None,
    )
    discount = product.discount
    ratings = product.ratings

    return ProductResponse(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        discounted_price=product.discounted_price(),
        brand=product.brand,
        category=category,
        tags=product.tags,
        in_stock=product.in_stock,
        stock_quantity=product.stock_quantity,
        ratings=RatingsSchema(average=ratings.average, count=ratings.count),
        discount=DiscountSchema(
            type=discount.type,
            value=discount.value,
            is_active=discount.is_active,
            start_date=discount.start_date,
            end_date=discount.end_date,
        ),
        colors=list(product.colors or []),
        sizes=list(product.sizes or []),
        images=list(product.images or []),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def page_to_response(result: Page[Product], message: str) -> ProductPageResponse:
    """Wrap a page of products in the paginated envelope."""
    return ProductPageResponse(
        data=[product_to_response(product) for product in result.items],
        pagination=ProductPaginationSchema(
            current_page=result.page,
            total_pages=result.total_pages,
            total_products=result.total,
            has_next_page=result.has_next_page,
            has_prev_page=result.has_prev_page,
            limit=result.limit,
        ),
        message=message,
    )


def product_envelope(product: Product, message: str) -> DataResponse[ProductResponse]:
    """Wrap a single product in the data envelope."""
    return DataResponse[ProductResponse](data=product_to_response(product), message=message)


# ============================================================================
# Listings
# ============================================================================


@router.get(
    "/",
    response_model=ProductPageResponse,
    responses=ERROR_RESPONSES,
    summary="List products",
    description="Filter, sort and paginate products.",
)
async def list_products(
    service: ServiceDep,
    page: PageQuery = None,
    limit: LimitQuery = None,
    category: Annotated[str | None, Query(pattern=ENTITY_ID_REGEX)] = None,
    brand: str | None = None,
    min_price: Annotated[float | None, Query(alias="minPrice", ge=0)] = None,
    max_price: Annotated[float | None, Query(alias="maxPrice", ge=0)] = None,
    in_stock: Annotated[bool | None, Query(alias="inStock")] = None,
    tags: Annotated[list[str] | None, Query()] = None,
    search: str | None = None,
    sort_by: Annotated[ProductSortField | None, Query(alias="sortBy")] = None,
    sort_order: Annotated[str | None, Query(alias="sortOrder")] = None,
) -> ProductPageResponse:
    """List products with filtering, sorting and pagination.

    Args:
        service: Product service.
        page: Page number.
        limit: Page size (at most 100).
        category: Category id.
        brand: Partial brand match.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        in_stock: Stock flag filter.
        tags: Tags; repeat the parameter or separate with commas.
        search: Words matched against name and description.
        sort_by: Sort field.
        sort_order: "asc" or "desc".

    Returns:
        Page of products with pagination metadata.
    """
    result = await service.list_products(
        ProductFilter(
            search=search,
            category=category,
            brand=brand,
            in_stock=in_stock,
            tags=split_tags(tags),
            min_price=min_price,
            max_price=max_price,
        ),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return page_to_response(result, "Products retrieved successfully")


@router.get(
    "/discounted",
    response_model=ProductPageResponse,
    responses=ERROR_RESPONSES,
    summary="List discounted products",
)
async def list_discounted_products(
    service: ServiceDep,
    page: PageQuery = None,
    limit: LimitQuery = None,
) -> ProductPageResponse:
    """List products whose discount currently applies."""
    result = await service.list_discounted(page=page, limit=limit)
    return page_to_response(result, "Discounted products retrieved successfully")


@router.get(
    "/category/{category_id}",
    response_model=ProductPageResponse,
    responses=ERROR_RESPONSES,
    summary="List products of a category",
)
async def list_category_products(
    category_id: str,
    service: ServiceDep,
    page: PageQuery = None,
    limit: LimitQuery = None,
) -> ProductPageResponse:
    """List the products of one category."""
    result = await service.list_by_category(category_id, page=page, limit=limit)
    return page_to_response(result, "Category products retrieved successfully")


@router.get(
    "/{product_id}",
    response_model=DataResponse[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: ServiceDep,
) -> DataResponse[ProductResponse]:
    """Get a product by ID."""
    product = await service.get_product(product_id)
    return product_envelope(product, "Product retrieved successfully")


# ============================================================================
# Mutations
# ============================================================================


@router.post(
    "/create-product",
    response_model=DataResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    service: ServiceDep,
) -> DataResponse[ProductResponse]:
    """Create a new product.

    Args:
        request: Product data.
        service: Product service.

    Returns:
        The created product with its category populated.
    """
    product = await service.create_product(
        NewProduct(
            name=request.name,
            price=request.price,
            category=request.category,
            description=request.description,
            brand=request.brand,
            tags=request.tags,
            in_stock=request.in_stock,
            stock_quantity=request.stock_quantity,
            ratings=request.ratings.to_value(),
            discount=request.discount.to_value(),
            colors=request.colors,
            sizes=request.sizes,
            images=request.images,
        )
    )
    return product_envelope(product, "Product created successfully")


@router.put(
    "/edit-product/{product_id}",
    response_model=DataResponse[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Edit product",
)
async def edit_product(
    product_id: str,
    request: ProductUpdateRequest,
    service: ServiceDep,
) -> DataResponse[ProductResponse]:
    """Apply a partial update to a product."""
    product = await service.update_product(product_id, request.changes())
    return product_envelope(product, "Product updated successfully")


@router.patch(
    "/{product_id}/stock",
    response_model=DataResponse[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Update stock",
)
async def update_stock(
    product_id: str,
    request: StockUpdateRequest,
    service: ServiceDep,
) -> DataResponse[ProductResponse]:
    """Update stock quantity and/or stock flag."""
    product = await service.update_stock(
        product_id,
        stock_quantity=request.stock_quantity,
        in_stock=request.in_stock,
    )
    return product_envelope(product, "Stock updated successfully")


@router.patch(
    "/{product_id}/discount",
    response_model=DataResponse[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Update discount",
)
async def update_discount(
    product_id: str,
    request: DiscountUpdateRequest,
    service: ServiceDep,
) -> DataResponse[ProductResponse]:
    """Replace a product's discount."""
    product = await service.update_discount(product_id, request.discount.to_value())
    return product_envelope(product, "Discount updated successfully")


@router.patch(
    "/{product_id}/rating",
    response_model=DataResponse[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Add rating",
)
async def add_rating(
    product_id: str,
    request: RatingRequest,
    service: ServiceDep,
) -> DataResponse[ProductResponse]:
    """Fold one rating into the product's running average."""
    product = await service.add_rating(product_id, request.rating)
    return product_envelope(product, "Rating added successfully")


@router.delete(
    "/delete-product/{product_id}",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
    summary="Delete product",
)
async def delete_product(
    product_id: str,
    service: ServiceDep,
) -> MessageResponse:
    """Delete a product."""
    await service.delete_product(product_id)
    return MessageResponse(message="Product deleted successfully")
