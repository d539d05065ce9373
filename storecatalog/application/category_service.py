"""Category application service.

Handles category creation, partial updates, deletion and the category
listings (all, advanced, active, main, sub).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.application.hierarchy import CategoryHierarchyValidator
from storecatalog.catalog.filters import CategoryFilter
from storecatalog.catalog.listing import ListingOrchestrator, Page
from storecatalog.catalog.models import Category
from storecatalog.catalog.repository import CategoryRepository
from storecatalog.catalog.sorting import (
    PageWindow,
    category_catalog_sort,
    category_display_sort,
    category_sort,
)
from storecatalog.domain.exceptions import (
    CategoryNotFoundError,
    DuplicateNameError,
    DuplicateSlugError,
    InvalidInputError,
)
from storecatalog.domain.slug import slugify_name
from storecatalog.domain.value_objects import EntityId
from storecatalog.infrastructure.config import settings
from storecatalog.infrastructure.database import utcnow

logger = structlog.get_logger()

# Fields a partial update may change
UPDATABLE_FIELDS = frozenset(
    {"name", "description", "parent_category", "is_active", "sort_order", "image"}
)


@dataclass
class SubCategories:
    """Active children of one parent category."""

    parent: Category
    items: list[Category] = field(default_factory=list)


class CategoryService:
    """Application service for managing categories.

    Example usage:
        service = CategoryService(session)
        category = await service.create_category(name="Elektronik")
        page = await service.list_advanced(CategoryFilter(search="elek"), page=1)
    """

    def __init__(
        self,
        session: AsyncSession,
        slug_locale: str | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session.
            slug_locale: Locale used for slugs; defaults to the configured one.
            request_id: Request ID for correlation.
        """
        self.repository = CategoryRepository(session)
        self.hierarchy = CategoryHierarchyValidator(self.repository)
        self.listing = ListingOrchestrator(session)
        self.slug_locale = slug_locale or settings.slug_locale
        self.request_id = request_id

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_category(
        self,
        name: str,
        description: str | None = None,
        parent_category: str | None = None,
        is_active: bool = True,
        sort_order: int = 0,
        image: str | None = None,
    ) -> Category:
        """Create a new category.

        Args:
            name: Unique display name.
            description: Optional description.
            parent_category: Optional parent category id.
            is_active: Whether the category is active.
            sort_order: Ordering hint.
            image: Optional image URL.

        Returns:
            The created category with its parent loaded.

        Raises:
            DuplicateNameError: If the name is taken.
            DuplicateSlugError: If the derived slug is taken.
            InvalidIdentifierError: If the parent id is malformed.
            InvalidReferenceError: If the parent does not exist.
        """
        name = name.strip()
        slug = await self._claim_slug(name)
        parent_id = await self.hierarchy.resolve_parent(parent_category)

        category = Category(
            name=name,
            slug=slug,
            description=description,
            parent_id=parent_id,
            is_active=is_active,
            sort_order=sort_order,
            image=image,
        )
        await self.repository.add(category)
        await self.repository.commit()

        logger.info(
            "Category created",
            category_id=category.id,
            slug=slug,
            parent_id=parent_id,
            request_id=self.request_id,
        )

        return await self._reload(category.id)

    async def update_category(
        self,
        category_id: str,
        changes: Mapping[str, Any],
    ) -> Category:
        """Apply a partial update to a category.

        Only the supplied fields change. The slug is recomputed only when
        ``name`` is supplied. ``updated_at`` is refreshed on every call.

        Args:
            category_id: Category ID.
            changes: Supplied fields keyed by snake_case name.

        Returns:
            The updated category.

        Raises:
            InvalidIdentifierError: If an id is malformed.
            CategoryNotFoundError: If the category does not exist.
            DuplicateNameError: If the new name is taken.
            DuplicateSlugError: If the new slug is taken.
            InvalidReferenceError: If the new parent does not exist.
            CategoryCycleError: If the new parent would create a cycle.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidInputError(
                f"Unknown category fields: {sorted(unknown)}",
                details={"fields": sorted(unknown)},
            )

        category_id = str(EntityId.parse(category_id, entity="category"))
        category = await self.repository.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)

        if "name" in changes:
            name = (changes["name"] or "").strip()
            category.slug = await self._claim_slug(name, exclude_id=category_id)
            category.name = name

        if "parent_category" in changes:
            category.parent_id = await self.hierarchy.resolve_parent(
                changes["parent_category"], category_id=category_id
            )

        for field_name in ("description", "image"):
            if field_name in changes:
                setattr(category, field_name, changes[field_name])

        for field_name in ("is_active", "sort_order"):
            if field_name in changes and changes[field_name] is not None:
                setattr(category, field_name, changes[field_name])

        # Every accepted edit counts as a modification, even an empty one
        category.updated_at = utcnow()
        await self.repository.commit()

        logger.info(
            "Category updated",
            category_id=category_id,
            fields=sorted(changes),
            request_id=self.request_id,
        )

        return await self._reload(category_id)

    async def delete_category(self, category_id: str) -> Category:
        """Delete a category.

        Children and products referencing it are not touched.

        Args:
            category_id: Category ID.

        Returns:
            The deleted category.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            CategoryNotFoundError: If the category does not exist.
        """
        category_id = str(EntityId.parse(category_id, entity="category"))
        category = await self.repository.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)

        await self.repository.delete(category)
        await self.repository.commit()

        logger.info(
            "Category deleted",
            category_id=category_id,
            request_id=self.request_id,
        )
        return category

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_category(self, category_id: str) -> Category:
        """Get a category by ID.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            CategoryNotFoundError: If the category does not exist.
        """
        category_id = str(EntityId.parse(category_id, entity="category"))
        return await self._reload(category_id)

    async def get_category_by_slug(self, slug: str) -> Category:
        """Get a category by slug.

        Raises:
            CategoryNotFoundError: If no category has the slug.
        """
        category = await self.repository.get_by_slug(slug)
        if category is None:
            raise CategoryNotFoundError(slug, field="slug")
        return category

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        """List every category, by sort order then newest first."""
        return await self.listing.list_all(Category, [], category_catalog_sort())

    async def list_advanced(
        self,
        filters: CategoryFilter,
        sort_by: str | None = None,
        sort_order: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[Category]:
        """List categories with filtering, sorting and pagination.

        Args:
            filters: Filter options.
            sort_by: Sort field; unknown fields sort by creation time.
            sort_order: "asc" or "desc".
            page: Page number.
            limit: Page size; defaults to the configured category limit.

        Returns:
            Page of categories.
        """
        window = PageWindow.plan(
            page,
            limit,
            default_limit=settings.default_category_limit,
            max_limit=settings.max_page_limit,
        )
        return await self.listing.paginate(
            Category,
            filters.clauses(),
            category_sort(sort_by, sort_order),
            window,
        )

    async def list_active(self) -> list[Category]:
        """List active categories."""
        return await self.listing.list_all(
            Category,
            CategoryFilter(is_active=True).clauses(),
            category_display_sort(),
        )

    async def list_main(self) -> list[Category]:
        """List active top-level categories."""
        return await self.listing.list_all(
            Category,
            CategoryFilter(is_active=True, parent_category="null").clauses(),
            category_display_sort(),
        )

    async def list_sub(self, parent_id: str) -> SubCategories:
        """List active children of a parent category.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            CategoryNotFoundError: If the parent does not exist.
        """
        parent_id = str(EntityId.parse(parent_id, entity="parent category"))
        parent = await self.repository.get_by_id(parent_id)
        if parent is None:
            raise CategoryNotFoundError(parent_id)

        items = await self.listing.list_all(
            Category,
            CategoryFilter(is_active=True, parent_category=parent_id).clauses(),
            category_display_sort(),
        )
        return SubCategories(parent=parent, items=items)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _claim_slug(self, name: str, exclude_id: str | None = None) -> str:
        if not name:
            raise InvalidInputError("Category name is required", details={"field": "name"})

        if await self.repository.name_taken(name, exclude_id=exclude_id):
            raise DuplicateNameError(name)

        slug = slugify_name(name, self.slug_locale)
        if not slug:
            raise InvalidInputError(
                f"Category name {name!r} has no characters usable in a slug",
                details={"field": "name"},
            )
        if await self.repository.slug_taken(slug, exclude_id=exclude_id):
            raise DuplicateSlugError(name, slug)
        return slug

    async def _reload(self, category_id: str) -> Category:
        category = await self.repository.get_by_id(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category
