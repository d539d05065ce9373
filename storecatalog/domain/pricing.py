"""Effective price computation for discounted products."""

from datetime import datetime, timezone

from storecatalog.domain.value_objects import Discount, DiscountType


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_discount_applicable(discount: Discount, now: datetime | None = None) -> bool:
    """Check whether a discount applies at the given instant.

    A discount applies when it is active and ``now`` lies inside its
    window. A missing start or end date leaves that side unbounded.

    Args:
        discount: Discount descriptor.
        now: Instant to evaluate; defaults to the current UTC time.

    Returns:
        True if the discount applies.
    """
    if not discount.is_active:
        return False

    current = _as_utc(now or datetime.now(timezone.utc))
    if discount.start_date is not None and current < _as_utc(discount.start_date):
        return False
    if discount.end_date is not None and current > _as_utc(discount.end_date):
        return False
    return True


def discounted_price(price: float, discount: Discount, now: datetime | None = None) -> float:
    """Compute the effective price of a product.

    Derived at read time and never stored.

    Args:
        price: Base price.
        discount: Discount descriptor.
        now: Instant to evaluate; defaults to the current UTC time.

    Returns:
        The discounted price, or ``price`` when the discount does not apply.
    """
    if not is_discount_applicable(discount, now):
        return price

    if discount.type is DiscountType.PERCENTAGE:
        return max(0.0, price * (1 - discount.value / 100))
    return max(0.0, price - discount.value)
