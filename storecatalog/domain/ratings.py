"""Incremental rating aggregation."""

from decimal import ROUND_HALF_UP, Decimal

from storecatalog.domain.value_objects import Ratings

ONE_DECIMAL = Decimal("0.1")


def round_half_away_from_zero(value: Decimal, quantum: Decimal = ONE_DECIMAL) -> Decimal:
    """Round a decimal, sending ties away from zero."""
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def fold_rating(ratings: Ratings, rating: float) -> Ratings:
    """Fold one new rating sample into a running average.

    No history is kept: each call counts as one more vote and cannot be
    undone. The sample itself is not range-checked here.

    Args:
        ratings: Current average and count.
        rating: New sample, expected within [1, 5].

    Returns:
        New Ratings with count incremented and the average rounded to one
        decimal place.
    """
    count = ratings.count + 1
    total = Decimal(str(ratings.average)) * ratings.count + Decimal(str(rating))
    average = round_half_away_from_zero(total / count)
    return Ratings(average=float(average), count=count)
