#!/usr/bin/env python3
"""Seed demo catalog script.

Creates the tables and inserts a small category tree with products
through the application services.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --products-per-category 10
"""

import argparse
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from storecatalog.application import CategoryService, NewProduct, ProductService
from storecatalog.catalog.models import Category
from storecatalog.domain.exceptions import CategoryNotFoundError
from storecatalog.domain.slug import slugify_name
from storecatalog.domain.value_objects import Discount, DiscountType
from storecatalog.infrastructure.config import settings
from storecatalog.infrastructure.database import get_database
from storecatalog.infrastructure.logging import configure_logging

# (name, parent name, brand, tags)
CATEGORY_TREE = [
    ("Elektronik", None, None, []),
    ("Telefonlar", "Elektronik", "Acme", ["mobil", "android"]),
    ("Bilgisayarlar", "Elektronik", "Acme Pro", ["dizüstü", "ofis"]),
    ("Ev ve Yaşam", None, None, []),
    ("Mutfak", "Ev ve Yaşam", "Tencere Co", ["mutfak", "pişirme"]),
    ("Bahçe", "Ev ve Yaşam", "GreenCo", ["bahçe", "sulama"]),
    ("Kitap", None, "Okur Yayınları", ["roman", "okuma"]),
]


async def get_or_create_category(
    service: CategoryService,
    name: str,
    parent: Category | None,
) -> tuple[Category, bool]:
    """Return the category with this name's slug, creating it if missing."""
    try:
        category = await service.get_category_by_slug(slugify_name(name, settings.slug_locale))
        return category, False
    except CategoryNotFoundError:
        category = await service.create_category(
            name=name,
            parent_category=parent.id if parent is not None else None,
        )
        return category, True


async def seed(session: AsyncSession, products_per_category: int) -> dict:
    """Seed the demo catalog.

    Args:
        session: Database session.
        products_per_category: Products created under each leaf category.

    Returns:
        Seeding result counts.
    """
    categories = CategoryService(session)
    products = ProductService(session)

    created: dict[str, Category] = {}
    result = {"categories_created": 0, "categories_reused": 0, "products_created": 0}

    for name, parent_name, brand, tags in CATEGORY_TREE:
        parent = created.get(parent_name) if parent_name else None
        category, is_new = await get_or_create_category(categories, name, parent)
        created[name] = category
        result["categories_created" if is_new else "categories_reused"] += 1

        if brand is None:
            continue

        for index in range(1, products_per_category + 1):
            discount = Discount()
            if index % 3 == 0:
                discount = Discount(type=DiscountType.PERCENTAGE, value=15, is_active=True)
            await products.create_product(
                NewProduct(
                    name=f"{name} Ürün {index}",
                    price=round(49.9 * index, 2),
                    category=category.id,
                    description=f"{name} kategorisinden örnek ürün",
                    brand=brand,
                    tags=list(tags),
                    stock_quantity=index * 5,
                    discount=discount,
                )
            )
            result["products_created"] += 1

    return result


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the demo catalog")
    parser.add_argument(
        "--products-per-category",
        type=int,
        default=5,
        help="Products to create under each leaf category (default: 5)",
    )
    args = parser.parse_args()

    configure_logging()

    print("=" * 60)
    print("Store Catalog Seeder")
    print("=" * 60)

    database = get_database()
    print("Creating database tables...")
    await database.create_all()
    print("Tables ready.")
    print()

    try:
        async with database.session_factory() as session:
            result = await seed(session, args.products_per_category)
    finally:
        await database.dispose()

    print(f"  ✓ Categories created: {result['categories_created']}")
    print(f"  ✓ Categories reused: {result['categories_reused']}")
    print(f"  ✓ Products created: {result['products_created']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
