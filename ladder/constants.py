"""
Ladder-wide constants for the ping pong ladder bot.

This module contains the fixed numbers used by the rating and league logic so
they live in one place instead of being scattered through the codebase.
"""

class RatingConstants:
    """Constants related to Elo calculations and tiers."""

    # Maximum rating swing per match
    K_FACTOR = 60

    # Logistic scale of the expected score curve
    RATING_SCALE = 400

    # Tier thresholds, evaluated high-to-low (inclusive lower bounds)
    TIER_THRESHOLDS = (
        (1400, "💼 Do some work"),
        (1300, "💎 Diamond"),
        (1250, "🥇 Gold"),
        (1200, "🥈 Silver"),
        (1150, "🥉 Bronze"),
        (1075, "⚪ Iron"),
    )
    LOWEST_TIER = "📦 Cardboard"

class LeagueConstants:
    """Constants for rounds, pairings and match reporting."""

    # Minimum roster size for a round
    MIN_ROUND_PLAYERS = 2

    # Rating change above which a win counts as an upset
    UPSET_THRESHOLD = 25

    # Winning score and loser ceiling for a "total destruction" result
    GAME_POINT = 11
    BLOWOUT_MAX_LOSER_SCORE = 3

    # Match history limits
    ALL_MATCHES_LIMIT = 50
    PLAYER_MATCHES_LIMIT = 30

class PaginationConstants:
    """Constants for list displays."""

    # Default leaderboard size
    DEFAULT_PAGE_SIZE = 10

class UIConstants:
    """Constants for Discord UI elements."""

    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xffd700     # Gold for the #1 player
    ERROR_COLOR = 0xe74c3c         # Red for errors
    SUCCESS_COLOR = 0x2ecc71       # Green for success

    PADDLE_EMOJI = "🏓"
    TROPHY_EMOJI = "🏆"
    MEDALS = ("🥇", "🥈", "🥉")

class DatabaseConstants:
    """Constants for read retries against SQLite."""

    MAX_READ_RETRIES = 3
    RETRY_BASE_DELAY = 0.1  # Seconds, doubled per attempt
    LOCK_ERROR_MARKERS = ("database is locked", "database table is locked")

class RateLimitConstants:
    """Per-command rate limits as (calls, window seconds)."""

    REPORT = (3, 60)
    LEADERBOARD = (5, 60)
    DEFAULT = (1, 60)
