"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
JSON keys are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from storecatalog.domain.value_objects import Discount, DiscountType, Ratings

T = TypeVar("T")

ENTITY_ID_REGEX = r"^[0-9a-fA-F]{24}$"

_http_url = TypeAdapter(AnyHttpUrl)


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(ApiModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")
    value: Any = Field(default=None, description="Rejected value")


class ErrorResponse(ApiModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    success: bool = Field(default=False, description="Always false for errors")
    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    error: str | None = Field(default=None, description="Underlying diagnostic")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error context"
    )
    errors: list[ErrorDetail] = Field(
        default_factory=list, description="Per-field validation errors"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class MessageResponse(ApiModel):
    """Response carrying only a status message."""

    success: bool = True
    message: str


class DataResponse(ApiModel, Generic[T]):
    """Response carrying a single document."""

    success: bool = True
    data: T
    message: str | None = None


class ListResponse(ApiModel, Generic[T]):
    """Unpaginated list response."""

    success: bool = True
    count: int
    data: list[T]
    message: str | None = None


class PaginationSchema(ApiModel):
    """Pagination metadata."""

    current_page: int = Field(..., description="Current page number (1-based)")
    total_pages: int = Field(..., description="Total number of pages")
    has_next_page: bool = Field(..., description="Whether a later page exists")
    has_prev_page: bool = Field(..., description="Whether an earlier page exists")
    limit: int = Field(..., description="Items per page")


class CategoryPaginationSchema(PaginationSchema):
    """Pagination metadata for category listings."""

    total_categories: int = Field(..., description="Number of matching categories")


class ProductPaginationSchema(PaginationSchema):
    """Pagination metadata for product listings."""

    total_products: int = Field(..., description="Number of matching products")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryRefSchema(ApiModel):
    """Reference to a category with its display fields."""

    id: str
    name: str | None = None
    slug: str | None = None


class ProductCategorySchema(ApiModel):
    """Category of a product."""

    id: str
    name: str | None = None


class CategoryResponse(ApiModel):
    """Category document."""

    id: str
    name: str
    slug: str
    description: str | None = None
    parent_category: CategoryRefSchema | None = None
    is_active: bool
    sort_order: int
    image: str | None = None
    created_at: datetime
    updated_at: datetime


class CategoryPageResponse(ApiModel):
    """Paginated list of categories."""

    success: bool = True
    data: list[CategoryResponse]
    pagination: CategoryPaginationSchema
    message: str | None = None


class SubCategoriesResponse(ListResponse[CategoryResponse]):
    """Active children of a parent category."""

    parent_category: CategoryRefSchema


class CategoryCreateRequest(ApiModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=200, description="Unique category name")
    description: str | None = Field(default=None, description="Category description")
    parent_category: str | None = Field(default=None, description="Parent category id")
    is_active: bool = Field(default=True, description="Whether the category is active")
    sort_order: int = Field(default=0, description="Ordering hint")
    image: str | None = Field(default=None, max_length=1000, description="Image URL")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        """Reject names made only of whitespace."""
        if not value.strip():
            raise ValueError("Category name is required")
        return value.strip()


class CategoryUpdateRequest(ApiModel):
    """Partial category update; only supplied fields change."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    parent_category: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None
    image: str | None = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        """Reject blank names; a name cannot be cleared."""
        if value is None or not value.strip():
            raise ValueError("Category name cannot be empty")
        return value.strip()


# ============================================================================
# Product Schemas
# ============================================================================


class RatingsSchema(ApiModel):
    """Running rating statistic."""

    average: float = Field(default=0.0, ge=0, le=5, description="Average rating")
    count: int = Field(default=0, ge=0, description="Number of ratings")

    def to_value(self) -> Ratings:
        """Convert to the domain value object."""
        return Ratings(average=self.average, count=self.count)


class DiscountSchema(ApiModel):
    """Discount descriptor."""

    type: DiscountType = Field(default=DiscountType.PERCENTAGE, description="percentage or fixed")
    value: float = Field(default=0.0, ge=0, description="Discount value")
    is_active: bool = Field(default=False, description="Whether the discount is on")
    start_date: datetime | None = Field(default=None, description="Start of the window")
    end_date: datetime | None = Field(default=None, description="End of the window")

    def to_value(self) -> Discount:
        """Convert to the domain value object."""
        return Discount(
            type=self.type,
            value=self.value,
            is_active=self.is_active,
            start_date=self.start_date,
            end_date=self.end_date,
        )


def _validate_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned = [tag.strip() for tag in tags]
    for tag in cleaned:
        if len(tag) > 50:
            raise ValueError("Each tag can be at most 50 characters")
    return cleaned


def _validate_images(images: list[str] | None) -> list[str] | None:
    if images is None:
        return None
    for image in images:
        try:
            _http_url.validate_python(image)
        except ValidationError as exc:
            raise ValueError(f"Invalid image URL: {image}") from exc
    return images


class ProductCreateRequest(ApiModel):
    """Request to create a product."""

    name: str = Field(..., min_length=2, max_length=200, description="Product name")
    description: str | None = Field(default=None, max_length=1000)
    price: float = Field(..., ge=0, description="Base price")
    brand: str | None = Field(default=None, max_length=100)
    category: str = Field(..., pattern=ENTITY_ID_REGEX, description="Category id")
    tags: list[str] = Field(default_factory=list)
    in_stock: bool = True
    stock_quantity: int = Field(default=0, ge=0)
    ratings: RatingsSchema = Field(default_factory=RatingsSchema)
    discount: DiscountSchema = Field(default_factory=DiscountSchema)
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    @field_validator("name", "brand", "description")
    @classmethod
    def strip_text(cls, value: str | None) -> str | None:
        """Trim surrounding whitespace."""
        return value.strip() if value is not None else None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, value: list[str]) -> list[str]:
        """Trim tags and bound their length."""
        return _validate_tags(value) or []

    @field_validator("images")
    @classmethod
    def check_images(cls, value: list[str]) -> list[str]:
        """Require every image to be an http(s) URL."""
        return _validate_images(value) or []


class ProductUpdateRequest(ApiModel):
    """Partial product update; only supplied fields change."""

    name: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    price: float | None = Field(default=None, ge=0)
    brand: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, pattern=ENTITY_ID_REGEX)
    tags: list[str] | None = None
    in_stock: bool | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    ratings: RatingsSchema | None = None
    discount: DiscountSchema | None = None
    colors: list[str] | None = None
    sizes: list[str] | None = None
    images: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, value: list[str] | None) -> list[str] | None:
        """Trim tags and bound their length."""
        return _validate_tags(value)

    @field_validator("images")
    @classmethod
    def check_images(cls, value: list[str] | None) -> list[str] | None:
        """Require every image to be an http(s) URL."""
        return _validate_images(value)

    def changes(self) -> dict[str, Any]:
        """Supplied fields, with nested objects as domain values."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if isinstance(value, (RatingsSchema, DiscountSchema)):
                value = value.to_value()
            changes[name] = value
        return changes


class StockUpdateRequest(ApiModel):
    """Stock update; omitted fields stay unchanged."""

    stock_quantity: int | None = Field(default=None, ge=0)
    in_stock: bool | None = None


class DiscountUpdateRequest(ApiModel):
    """Replacement discount."""

    discount: DiscountSchema


class RatingRequest(ApiModel):
    """One new rating sample."""

    rating: float = Field(..., ge=1, le=5, description="Rating between 1 and 5")


class ProductResponse(ApiModel):
    """Product document with its derived discounted price."""

    id: str
    name: str
    description: str | None = None
    price: float
    discounted_price: float
    brand: str | None = None
    category: ProductCategorySchema
    tags: list[str]
    in_stock: bool
    stock_quantity: int
    ratings: RatingsSchema
    discount: DiscountSchema
    colors: list[str]
    sizes: list[str]
    images: list[str]
    created_at: datetime
    updated_at: datetime


class ProductPageResponse(ApiModel):
    """Paginated list of products."""

    success: bool = True
    data: list[ProductResponse]
    pagination: ProductPaginationSchema
    message: str | None = None
