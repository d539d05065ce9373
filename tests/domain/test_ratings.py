"""Tests for rating aggregation."""

from decimal import Decimal

import pytest

from storecatalog.domain import Ratings, fold_rating
from storecatalog.domain.ratings import round_half_away_from_zero


class TestFoldRating:
    """Tests for fold_rating."""

    def test_first_rating(self) -> None:
        """The first rating becomes the average."""
        ratings = fold_rating(Ratings(), 4)
        assert ratings == Ratings(average=4.0, count=1)

    def test_sequence_of_ratings(self) -> None:
        """Folding 5, 3, 4 gives an average of 4.0 over three votes."""
        ratings = Ratings()
        for rating in (5, 3, 4):
            ratings = fold_rating(ratings, rating)
        assert ratings.average == 4.0
        assert ratings.count == 3

    def test_average_rounded_to_one_decimal(self) -> None:
        """Averages are rounded to one decimal place."""
        ratings = fold_rating(Ratings(average=5.0, count=2), 4)
        # (10 + 4) / 3 = 4.666...
        assert ratings.average == 4.7

    def test_count_increments_by_one(self) -> None:
        """Each fold adds exactly one vote."""
        ratings = Ratings(average=3.2, count=41)
        assert fold_rating(ratings, 1).count == 42

    def test_fold_does_not_mutate_input(self) -> None:
        """The input statistic is left unchanged."""
        ratings = Ratings(average=3.0, count=1)
        fold_rating(ratings, 5)
        assert ratings == Ratings(average=3.0, count=1)


class TestRounding:
    """Tests for half-away-from-zero rounding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("4.25", "4.3"),
            ("4.35", "4.4"),
            ("4.24", "4.2"),
            ("2.05", "2.1"),
        ],
    )
    def test_ties_round_up(self, value: str, expected: str) -> None:
        """Ties go away from zero rather than to even."""
        assert round_half_away_from_zero(Decimal(value)) == Decimal(expected)
