"""Catalog persistence and query construction.

Provides the SQLAlchemy models, the filter builders, sort/page planning,
the listing orchestrator and the repositories.
"""

from storecatalog.catalog.filters import CategoryFilter, ProductFilter
from storecatalog.catalog.listing import ListingOrchestrator, Page
from storecatalog.catalog.models import Category, Product, ProductTag
from storecatalog.catalog.repository import CategoryRepository, ProductRepository
from storecatalog.catalog.sorting import PageWindow, SortDirection, SortKey, SortPlan

__all__ = [
    # Models
    "Category",
    "Product",
    "ProductTag",
    # Query construction
    "CategoryFilter",
    "ProductFilter",
    "PageWindow",
    "SortDirection",
    "SortKey",
    "SortPlan",
    # Listing
    "ListingOrchestrator",
    "Page",
    # Repository
    "CategoryRepository",
    "ProductRepository",
]
