"""Domain exceptions.

All domain-level errors that represent business rule violations or
failures of the underlying store. Each error carries a machine-readable
``error_code``; the API layer maps the error families to HTTP statuses:

- ``InvalidInputError`` and the duplicate errors: client errors (400)
- ``NotFoundError``: missing documents (404)
- ``StoreFailureError``: store faults (500)
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Invalid Input Errors
# ============================================================================


class InvalidInputError(DomainError):
    """Raised when a supplied value is malformed or out of range."""

    error_code = "INVALID_INPUT"


class InvalidIdentifierError(InvalidInputError):
    """Raised when an identifier does not have the store's id shape."""

    error_code = "INVALID_IDENTIFIER"

    def __init__(self, entity: str, value: Any) -> None:
        """Initialize invalid identifier error.

        Args:
            entity: Kind of entity the identifier refers to.
            value: The rejected identifier.
        """
        super().__init__(
            f"Invalid {entity} id format: {value!r}",
            details={"entity": entity, "value": value},
        )


class InvalidReferenceError(InvalidInputError):
    """Raised when a well-formed reference points to no document."""

    error_code = "INVALID_REFERENCE"

    def __init__(self, entity: str, reference_id: str) -> None:
        """Initialize invalid reference error.

        Args:
            entity: Kind of entity that was referenced.
            reference_id: The unresolvable identifier.
        """
        super().__init__(
            f"Referenced {entity} does not exist: {reference_id}",
            details={"entity": entity, "reference_id": reference_id},
        )


class CategoryCycleError(InvalidInputError):
    """Raised when a parent assignment would make the hierarchy cyclic."""

    error_code = "CATEGORY_CYCLE"

    def __init__(self, category_id: str, parent_id: str) -> None:
        """Initialize category cycle error.

        Args:
            category_id: Category being updated.
            parent_id: Proposed parent category.
        """
        super().__init__(
            f"Category {category_id} cannot have {parent_id} as parent: "
            "the hierarchy would contain a cycle",
            details={"category_id": category_id, "parent_id": parent_id},
        )


# ============================================================================
# Duplicate Errors
# ============================================================================


class DuplicateNameError(DomainError):
    """Raised when a category name is already taken."""

    error_code = "DUPLICATE_NAME"

    def __init__(self, name: str) -> None:
        """Initialize duplicate name error.

        Args:
            name: The conflicting category name.
        """
        super().__init__(
            f"Category already exists: {name}",
            details={"name": name},
        )


class DuplicateSlugError(DomainError):
    """Raised when a different name normalizes to an existing slug."""

    error_code = "DUPLICATE_SLUG"

    def __init__(self, name: str, slug: str) -> None:
        """Initialize duplicate slug error.

        Args:
            name: Name that produced the slug.
            slug: The conflicting slug.
        """
        super().__init__(
            f"Category name {name!r} produces slug {slug!r}, which is already in use",
            details={"name": name, "slug": slug},
        )


# ============================================================================
# Not Found Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for lookups that matched no document."""

    error_code = "NOT_FOUND"


class CategoryNotFoundError(NotFoundError):
    """Raised when no category matches an id or slug."""

    error_code = "CATEGORY_NOT_FOUND"

    def __init__(self, key: str, field: str = "id") -> None:
        """Initialize category not found error.

        Args:
            key: The id or slug that was looked up.
            field: Which field was matched ("id" or "slug").
        """
        super().__init__(
            f"Category not found: {key}",
            details={field: key},
        )


class ProductNotFoundError(NotFoundError):
    """Raised when no product matches an id."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: The product id that was looked up.
        """
        super().__init__(
            f"Product not found: {product_id}",
            details={"id": product_id},
        )


# ============================================================================
# Store Errors
# ============================================================================


class StoreFailureError(DomainError):
    """Raised when the underlying store fails.

    The diagnostic of the original fault is kept in ``diagnostic`` so
    operators can see it in responses and logs.
    """

    error_code = "STORE_FAILURE"

    def __init__(self, operation: str, diagnostic: str) -> None:
        """Initialize store failure error.

        Args:
            operation: Name of the store operation that failed.
            diagnostic: Message of the underlying fault.
        """
        super().__init__(
            f"Store operation failed: {operation}",
            details={"operation": operation},
        )
        self.diagnostic = diagnostic


class ConcurrentUpdateError(StoreFailureError):
    """Raised when a compare-and-swap update lost a race."""

    error_code = "CONCURRENT_UPDATE"

    def __init__(self, entity: str, entity_id: str) -> None:
        """Initialize concurrent update error.

        Args:
            entity: Kind of entity being updated.
            entity_id: Identifier of the contended document.
        """
        super().__init__(
            f"update {entity} {entity_id}",
            f"{entity} {entity_id} was modified concurrently; the update was not applied",
        )
