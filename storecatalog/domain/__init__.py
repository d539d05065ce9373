"""Domain layer: value objects, derived values and domain errors."""

from storecatalog.domain.exceptions import (
    CategoryCycleError,
    CategoryNotFoundError,
    ConcurrentUpdateError,
    DomainError,
    DuplicateNameError,
    DuplicateSlugError,
    InvalidIdentifierError,
    InvalidInputError,
    InvalidReferenceError,
    NotFoundError,
    ProductNotFoundError,
    StoreFailureError,
)
from storecatalog.domain.pricing import discounted_price, is_discount_applicable
from storecatalog.domain.ratings import fold_rating
from storecatalog.domain.slug import slugify_name
from storecatalog.domain.value_objects import (
    Discount,
    DiscountType,
    EntityId,
    Ratings,
)

__all__ = [
    # Value objects
    "Discount",
    "DiscountType",
    "EntityId",
    "Ratings",
    # Derived values
    "discounted_price",
    "fold_rating",
    "is_discount_applicable",
    "slugify_name",
    # Errors
    "CategoryCycleError",
    "CategoryNotFoundError",
    "ConcurrentUpdateError",
    "DomainError",
    "DuplicateNameError",
    "DuplicateSlugError",
    "InvalidIdentifierError",
    "InvalidInputError",
    "InvalidReferenceError",
    "NotFoundError",
    "ProductNotFoundError",
    "StoreFailureError",
]
