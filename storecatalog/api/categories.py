"""Category API endpoints.

Provides endpoints for creating, editing, deleting and listing
categories.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.api.schemas import (
    CategoryCreateRequest,
    CategoryPageResponse,
    CategoryPaginationSchema,
    CategoryRefSchema,
    CategoryResponse,
    CategoryUpdateRequest,
    DataResponse,
    ErrorResponse,
    ListResponse,
    SubCategoriesResponse,
)
from storecatalog.application.category_service import CategoryService
from storecatalog.catalog.filters import CategoryFilter
from storecatalog.catalog.models import Category
from storecatalog.infrastructure.database import get_session

router = APIRouter(prefix="/api/categories", tags=["Categories"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CategoryService:
    """Get category service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return CategoryService(session, request_id=request_id)


ServiceDep = Annotated[CategoryService, Depends(get_service)]


# ============================================================================
# Converters
# ============================================================================


def category_ref(category: Category) -> CategoryRefSchema:
    """Convert a category to its reference schema."""
    return CategoryRefSchema(id=category.id, name=category.name, slug=category.slug)


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category model to response schema."""
    parent = None
    if category.parent_id is not None:
        # A deleted parent leaves a dangling reference with no display fields
        parent = (
            category_ref(category.parent)
            if category.parent is not None
            else CategoryRefSchema(id=category.parent_id)
        )

    return CategoryResponse(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        parent_category=parent,
        is_active=category.is_active,
        sort_order=category.sort_order,
        image=category.image,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def categories_to_list(categories: list[Category], message: str) -> ListResponse[CategoryResponse]:
    """Wrap categories in an unpaginated list envelope."""
    return ListResponse[CategoryResponse](
        count=len(categories),
        data=[category_to_response(category) for category in categories],
        message=message,
    )


# ============================================================================
# Mutations
# ============================================================================


@router.post(
    "/create-category",
    response_model=DataResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Create category",
    description="Create a category. The slug is derived from the name.",
)
async def create_category(
    request: CategoryCreateRequest,
    service: ServiceDep,
) -> DataResponse[CategoryResponse]:
    """Create a new category.

    Args:
        request: Category data.
        service: Category service.

    Returns:
        The created category.
    """
    category = await service.create_category(
        name=request.name,
        description=request.description,
        parent_category=request.parent_category,
        is_active=request.is_active,
        sort_order=request.sort_order,
        image=request.image,
    )
    return DataResponse[CategoryResponse](
        data=category_to_response(category),
        message="Category created successfully",
    )


@router.put(
    "/edit-category/{category_id}",
    response_model=DataResponse[CategoryResponse],
    responses=ERROR_RESPONSES,
    summary="Edit category",
    description="Update the supplied fields of a category.",
)
async def edit_category(
    category_id: str,
    request: CategoryUpdateRequest,
    service: ServiceDep,
) -> DataResponse[CategoryResponse]:
    """Apply a partial update to a category."""
    changes = {name: getattr(request, name) for name in request.model_fields_set}
    category = await service.update_category(category_id, changes)
    return DataResponse[CategoryResponse](
        data=category_to_response(category),
        message="Category updated successfully",
    )


@router.delete(
    "/delete-category/{category_id}",
    response_model=DataResponse[CategoryResponse],
    responses=ERROR_RESPONSES,
    summary="Delete category",
)
async def delete_category(
    category_id: str,
    service: ServiceDep,
) -> DataResponse[CategoryResponse]:
    """Delete a category and return it."""
    category = await service.delete_category(category_id)
    return DataResponse[CategoryResponse](
        data=category_to_response(category),
        message="Category deleted successfully",
    )


# ============================================================================
# Listings
# ============================================================================


@router.get(
    "/",
    response_model=ListResponse[CategoryResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List categories",
)
async def list_categories(service: ServiceDep) -> ListResponse[CategoryResponse]:
    """List every category by sort order, newest first."""
    categories = await service.list_categories()
    return categories_to_list(categories, "Categories retrieved successfully")


@router.get(
    "/advanced",
    response_model=CategoryPageResponse,
    responses=ERROR_RESPONSES,
    summary="Search categories",
    description="Filter, sort and paginate categories.",
)
async def list_categories_advanced(
    service: ServiceDep,
    page: Annotated[int | None, Query(ge=1)] = None,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    search: str | None = None,
    is_active: Annotated[bool | None, Query(alias="isActive")] = None,
    parent_category: Annotated[str | None, Query(alias="parentCategory")] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_order: Annotated[str | None, Query(alias="sortOrder")] = None,
) -> CategoryPageResponse:
    """List categories with filtering, sorting and pagination.

    Args:
        service: Category service.
        page: Page number.
        limit: Page size.
        search: Substring of name or description.
        is_active: Active flag filter.
        parent_category: Parent id, or "null" for top-level categories.
        sort_by: Sort field.
        sort_order: "asc" or "desc".

    Returns:
        Page of categories with pagination metadata.
    """
    result = await service.list_advanced(
        CategoryFilter(
            search=search,
            is_active=is_active,
            parent_category=parent_category,
        ),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return CategoryPageResponse(
        data=[category_to_response(category) for category in result.items],
        pagination=CategoryPaginationSchema(
            current_page=result.page,
            total_pages=result.total_pages,
            total_categories=result.total,
            has_next_page=result.has_next_page,
            has_prev_page=result.has_prev_page,
            limit=result.limit,
        ),
        message="Categories retrieved successfully",
    )


@router.get(
    "/active",
    response_model=ListResponse[CategoryResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List active categories",
)
async def list_active_categories(service: ServiceDep) -> ListResponse[CategoryResponse]:
    """List active categories."""
    categories = await service.list_active()
    return categories_to_list(categories, "Active categories retrieved successfully")


@router.get(
    "/main",
    response_model=ListResponse[CategoryResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List main categories",
)
async def list_main_categories(service: ServiceDep) -> ListResponse[CategoryResponse]:
    """List active top-level categories."""
    categories = await service.list_main()
    return categories_to_list(categories, "Main categories retrieved successfully")


@router.get(
    "/sub/{parent_id}",
    response_model=SubCategoriesResponse,
    responses=ERROR_RESPONSES,
    summary="List sub categories",
)
async def list_sub_categories(
    parent_id: str,
    service: ServiceDep,
) -> SubCategoriesResponse:
    """List active children of a parent category."""
    result = await service.list_sub(parent_id)
    return SubCategoriesResponse(
        count=len(result.items),
        data=[category_to_response(category) for category in result.items],
        parent_category=category_ref(result.parent),
        message="Sub categories retrieved successfully",
    )


# ============================================================================
# Lookups
# ============================================================================


@router.get(
    "/id/{category_id}",
    response_model=DataResponse[CategoryResponse],
    responses=ERROR_RESPONSES,
    summary="Get category by id",
)
async def get_category(
    category_id: str,
    service: ServiceDep,
) -> DataResponse[CategoryResponse]:
    """Get a category by ID."""
    category = await service.get_category(category_id)
    return DataResponse[CategoryResponse](
        data=category_to_response(category),
        message="Category retrieved successfully",
    )


@router.get(
    "/slug/{slug}",
    response_model=DataResponse[CategoryResponse],
    responses=ERROR_RESPONSES,
    summary="Get category by slug",
)
async def get_category_by_slug(
    slug: str,
    service: ServiceDep,
) -> DataResponse[CategoryResponse]:
    """Get a category by slug."""
    category = await service.get_category_by_slug(slug)
    return DataResponse[CategoryResponse](
        data=category_to_response(category),
        message="Category retrieved successfully",
    )
