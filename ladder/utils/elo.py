import math
from dataclasses import dataclass

from ladder.constants import RatingConstants


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves toward positive infinity.

    Python's built-in round() uses banker's rounding, which would shift
    rating deltas by one point on exact halves.
    """
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class RatingResult:
    """Outcome of applying one match result to two ratings."""
    winner_new_rating: int
    loser_new_rating: int
    winner_delta: int
    loser_delta: int

    @property
    def rating_change(self) -> int:
        """Rating points the winner gained, shown to players"""
        return self.winner_delta


class EloCalculator:
    """Handles Elo rating calculations for the ladder"""

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """
        Calculate the expected score for player A against player B

        Args:
            rating_a: Player A's current Elo rating
            rating_b: Player B's current Elo rating

        Returns:
            Expected score (0.0 to 1.0) for player A
        """
        return 1 / (1 + math.pow(10, (rating_b - rating_a) / RatingConstants.RATING_SCALE))

    @staticmethod
    def apply_result(winner_rating: int, loser_rating: int) -> RatingResult:
        """
        Calculate new ratings after a match.

        The winner and loser deltas are rounded independently, so they are
        not always exact negatives of each other.

        Args:
            winner_rating: Winner's current Elo rating
            loser_rating: Loser's current Elo rating

        Returns:
            RatingResult with both new ratings and both deltas
        """
        winner_expected = EloCalculator.expected_score(winner_rating, loser_rating)
        loser_expected = EloCalculator.expected_score(loser_rating, winner_rating)

        k_factor = RatingConstants.K_FACTOR
        winner_delta = round_half_up(k_factor * (1 - winner_expected))
        loser_delta = round_half_up(k_factor * (0 - loser_expected))

        return RatingResult(
            winner_new_rating=winner_rating + winner_delta,
            loser_new_rating=loser_rating + loser_delta,
            winner_delta=winner_delta,
            loser_delta=loser_delta,
        )

    @staticmethod
    def format_elo_change(elo_change: int) -> str:
        """Format Elo change for display with an explicit sign"""
        if elo_change > 0:
            return f"+{elo_change}"
        elif elo_change < 0:
            return str(elo_change)
        else:
            return "±0"
