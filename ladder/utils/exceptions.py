"""
Custom exceptions for the ladder with user-friendly error messages.

Every error carries a log message and a message safe to show in chat. All of
them are recoverable by the caller: they are raised before any mutation, or
inside a transaction that is rolled back.
"""

class LadderError(Exception):
    """Base exception for ladder-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class LadderOperationError(LadderError):
    """Raised when a database operation fails unexpectedly."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            "❌ Database error occurred. Please try again later."
        )

# ============================================================================
# Validation errors
# ============================================================================

class ValidationError(LadderError):
    """Raised when input is rejected before any mutation."""

class SameParticipantError(ValidationError):
    def __init__(self, player_id: int):
        super().__init__(
            f"Winner and loser are the same player ({player_id})",
            "❌ Winner and loser cannot be the same player!"
        )

class InvalidRosterSizeError(ValidationError):
    def __init__(self, size: int):
        super().__init__(
            f"Pairing requires an even number of players, got {size}",
            "❌ Pairings need an even number of players."
        )
        self.size = size

class InsufficientPlayersError(ValidationError):
    def __init__(self, size: int, required: int = 2):
        super().__init__(
            f"Not enough players for pairings: {size} (need {required})",
            f"❌ At least {required} active players are needed to generate pairings."
        )
        self.size = size

class InvalidScoreError(ValidationError):
    def __init__(self, winner_score: int, loser_score: int, reason: str):
        super().__init__(
            f"Invalid score {winner_score}-{loser_score}: {reason}",
            f"❌ {reason}"
        )

# ============================================================================
# Not found errors
# ============================================================================

class NotFoundError(LadderError):
    """Raised when a referenced record does not exist."""

class PlayerNotFoundError(NotFoundError):
    def __init__(self, player_ref):
        super().__init__(
            f"Player {player_ref} not found",
            "❌ That player hasn't joined the ladder yet! Use `/register` first."
        )

class MatchNotFoundError(NotFoundError):
    def __init__(self, match_id: int):
        super().__init__(
            f"Match {match_id} not found",
            f"❌ Match #{match_id} could not be found."
        )

# ============================================================================
# State conflicts
# ============================================================================

class StateConflictError(LadderError):
    """Raised when the league is not in a state that allows the operation."""

class NoActiveSeasonError(StateConflictError):
    def __init__(self):
        super().__init__(
            "No active season to end",
            "❌ There is no active season right now."
        )

class DuplicatePlayerError(StateConflictError):
    def __init__(self, external_id: int):
        super().__init__(
            f"Player with external id {external_id} already registered",
            "❌ You're already registered on the ladder!"
        )
