"""SQLAlchemy models for the catalog.

Defines the categories, products and product_tags tables.

References between categories, and from products to categories, are
weak: they are plain indexed id columns without foreign key constraints,
so deleting a category never cascades to, or is blocked by, the
documents that point at it.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storecatalog.domain.pricing import discounted_price
from storecatalog.domain.value_objects import Discount, DiscountType, Ratings, new_entity_id
from storecatalog.infrastructure.database import Base, UTCDateTime, utcnow


class Category(Base):
    """Product category.

    Attributes:
        id: 24-hex identifier.
        name: Unique display name.
        slug: Unique URL identifier derived from the name.
        description: Optional description.
        parent_id: Parent category id; None for top-level categories.
        is_active: Whether the category is shown in active listings.
        sort_order: Ordering hint for listings.
        image: Optional image URL.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_entity_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(250), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_id: Mapped[str | None] = mapped_column(String(24), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    parent: Mapped["Category | None"] = relationship(
        "Category",
        primaryjoin="remote(Category.id) == foreign(Category.parent_id)",
        lazy="selectin",
        # Self-referential eager loads stop at depth 0 unless a depth is given
        join_depth=1,
        viewonly=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, slug={self.slug})>"


class ProductTag(Base):
    """One tag of a product, kept in list order by ``position``."""

    __tablename__ = "product_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tag: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductTag(product_id={self.product_id}, tag={self.tag})>"


class Product(Base):
    """Product in the catalog.

    The discount and ratings sub-documents are stored as flat columns and
    exposed through the ``discount`` and ``ratings`` value objects.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_entity_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False, index=True)
    brand: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    category_id: Mapped[str] = mapped_column(String(24), nullable=False, index=True)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_average: Mapped[float] = mapped_column(
        Numeric(2, 1, asdecimal=False), nullable=False, default=0.0
    )
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discount_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DiscountType.PERCENTAGE.value
    )
    discount_value: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=False, default=0.0
    )
    discount_is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    discount_start_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    discount_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    colors: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    sizes: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    tag_links: Mapped[list[ProductTag]] = relationship(
        ProductTag,
        order_by=ProductTag.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    category: Mapped[Category | None] = relationship(
        Category,
        primaryjoin="Category.id == foreign(Product.category_id)",
        lazy="selectin",
        viewonly=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name[:30]})>"

    @property
    def tags(self) -> list[str]:
        """Tags in stored order."""
        return [link.tag for link in self.tag_links]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the product's tags, keeping their order."""
        self.tag_links = [
            ProductTag(tag=tag, position=position) for position, tag in enumerate(tags)
        ]

    @property
    def discount(self) -> Discount:
        """Discount descriptor."""
        return Discount(
            type=DiscountType(self.discount_type),
            value=float(self.discount_value),
            is_active=self.discount_is_active,
            start_date=self.discount_start_date,
            end_date=self.discount_end_date,
        )

    def set_discount(self, discount: Discount) -> None:
        """Replace the discount descriptor."""
        for column, value in discount_columns(discount).items():
            setattr(self, column, value)

    @property
    def ratings(self) -> Ratings:
        """Running rating statistic."""
        return Ratings(average=float(self.rating_average), count=self.rating_count)

    def set_ratings(self, ratings: Ratings) -> None:
        """Replace the rating statistic."""
        self.rating_average = ratings.average
        self.rating_count = ratings.count

    def discounted_price(self, now: datetime | None = None) -> float:
        """Effective price at ``now``; never stored."""
        return discounted_price(float(self.price), self.discount, now)


def discount_columns(discount: Discount) -> dict[str, object]:
    """Map a discount descriptor to product column values."""
    return {
        "discount_type": discount.type.value,
        "discount_value": discount.value,
        "discount_is_active": discount.is_active,
        "discount_start_date": discount.start_date,
        "discount_end_date": discount.end_date,
    }
