"""Application layer module.

Contains the category and product services that orchestrate the
repositories, the listing engine and the domain rules.
"""

from storecatalog.application.category_service import CategoryService, SubCategories
from storecatalog.application.hierarchy import CategoryHierarchyValidator
from storecatalog.application.product_service import NewProduct, ProductService

__all__ = [
    "CategoryHierarchyValidator",
    "CategoryService",
    "NewProduct",
    "ProductService",
    "SubCategories",
]
