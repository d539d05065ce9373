"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import re
import secrets
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Self

from storecatalog.domain.base import ValueObject
from storecatalog.domain.exceptions import InvalidIdentifierError, InvalidInputError

# 12 bytes rendered as 24 hex characters
ENTITY_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

MIN_RATING = 0.0
MAX_RATING = 5.0


# ============================================================================
# Typed Identifiers
# ============================================================================


@dataclass(frozen=True)
class EntityId(ValueObject):
    """Opaque 24-hex-character document identifier.

    Categories and products share the same identifier shape. Identifiers
    are normalized to lowercase so lookups are case-insensitive.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate and normalize the identifier."""
        if not self.is_valid(self.value):
            raise InvalidIdentifierError("resource", self.value)
        object.__setattr__(self, "value", self.value.lower())

    @classmethod
    def generate(cls) -> Self:
        """Generate a new random identifier.

        Returns:
            New EntityId.
        """
        return cls(value=secrets.token_hex(12))

    @classmethod
    def parse(cls, value: object, entity: str = "resource") -> Self:
        """Create an EntityId from client input.

        Args:
            value: Raw identifier.
            entity: Entity name used in the error message.

        Returns:
            EntityId instance.

        Raises:
            InvalidIdentifierError: If the value is not a valid identifier.
        """
        if not cls.is_valid(value):
            raise InvalidIdentifierError(entity, value)
        return cls(value=value)  # type: ignore[arg-type]

    @staticmethod
    def is_valid(value: object) -> bool:
        """Check whether a value has the identifier shape."""
        return isinstance(value, str) and ENTITY_ID_PATTERN.match(value) is not None

    def __str__(self) -> str:
        """Return string representation.

        Returns:
            Identifier as lowercase hex string.
        """
        return self.value


def new_entity_id() -> str:
    """Column default for generated identifiers."""
    return str(EntityId.generate())


# ============================================================================
# Discount
# ============================================================================


class DiscountType(str, Enum):
    """How a discount value is applied to the price."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Discount(ValueObject):
    """Discount descriptor attached to a product.

    Attributes:
        type: Percentage of the price or a fixed amount.
        value: Non-negative discount value.
        is_active: Whether the discount is switched on.
        start_date: Optional start of the validity window.
        end_date: Optional end of the validity window.
    """

    type: DiscountType = DiscountType.PERCENTAGE
    value: float = 0.0
    is_active: bool = False
    start_date: datetime | None = None
    end_date: datetime | None = None

    def __post_init__(self) -> None:
        """Validate discount value and normalize the type."""
        object.__setattr__(self, "type", DiscountType(self.type))
        if self.value < 0:
            raise InvalidInputError(
                f"Discount value cannot be negative: {self.value}",
                details={"value": self.value},
            )


# ============================================================================
# Ratings
# ============================================================================


@dataclass(frozen=True)
class Ratings(ValueObject):
    """Running rating statistic of a product.

    Attributes:
        average: Mean rating, always within [0, 5].
        count: Number of ratings folded into the average.
    """

    average: float = 0.0
    count: int = 0

    def __post_init__(self) -> None:
        """Validate rating bounds."""
        if not MIN_RATING <= self.average <= MAX_RATING:
            raise InvalidInputError(
                f"Rating average must be between {MIN_RATING} and {MAX_RATING}: {self.average}",
                details={"average": self.average},
            )
        if self.count < 0:
            raise InvalidInputError(
                f"Rating count cannot be negative: {self.count}",
                details={"count": self.count},
            )
