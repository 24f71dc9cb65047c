from ladder.constants import RatingConstants


def classify_tier(rating: int) -> str:
    """
    Map a rating to its tier label.

    Thresholds are inclusive lower bounds checked from highest to lowest;
    anything below the last threshold lands in the lowest tier.
    """
    for threshold, label in RatingConstants.TIER_THRESHOLDS:
        if rating >= threshold:
            return label
    return RatingConstants.LOWEST_TIER
