"""
Ladder data models.

Immutable data transfer objects handed from the operations and query layers
to callers (cogs, schedulers, tests). None of them carry ORM or Discord types.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple


# ============================================================================
# Operation results
# ============================================================================

@dataclass(frozen=True)
class MatchRecord:
    """Result of recording one match."""
    match_id: int
    winner_id: int
    loser_id: int
    winner_score: int
    loser_score: int
    winner_old_rating: int
    winner_new_rating: int
    loser_old_rating: int
    loser_new_rating: int
    rating_change: int
    loser_rating_change: int
    winner_tier: str
    loser_tier: str
    pairing_id: Optional[int] = None
    round_id: Optional[int] = None


@dataclass(frozen=True)
class UndoResult:
    """Result of undoing one match."""
    match_id: int
    winner_id: int
    loser_id: int
    winner_rating: int
    loser_rating: int
    winner_tier: str
    loser_tier: str
    reset_pairing_ids: Tuple[int, ...] = ()


class RoundGenerationStatus(Enum):
    CREATED = "created"
    LEAGUE_COMPLETED = "league_completed"


@dataclass(frozen=True)
class RoundGenerationResult:
    """Result of a generate_round call."""
    status: RoundGenerationStatus
    rounds_played: int
    max_rounds: int
    round_id: Optional[int] = None
    pairings: Tuple[Tuple[int, int], ...] = ()
    dropped_player_id: Optional[int] = None
    warning: Optional[str] = None

    @property
    def created(self) -> bool:
        return self.status == RoundGenerationStatus.CREATED


@dataclass(frozen=True)
class SeasonSummary:
    """Snapshot of a season after a lifecycle transition."""
    season_id: int
    name: str
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    champion_id: Optional[int] = None
    champion_name: Optional[str] = None
    total_matches: int = 0
    total_rounds: int = 0
    players_reset: int = 0


# ============================================================================
# Read models
# ============================================================================

@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    player_id: int
    name: str
    elo_rating: int
    tier: str
    wins: int
    losses: int

    @property
    def total_games(self) -> int:
        return self.wins + self.losses


@dataclass(frozen=True)
class RatingHistoryPoint:
    elo_rating: int
    recorded_at: datetime
    match_id: Optional[int]
    reason: str


@dataclass(frozen=True)
class MatchSummary:
    match_id: int
    winner_id: int
    winner_name: str
    loser_id: int
    loser_name: str
    winner_score: int
    loser_score: int
    elo_change: int
    round_id: Optional[int]
    played_at: datetime


@dataclass(frozen=True)
class PairingView:
    pairing_id: int
    player1_id: int
    player1_name: str
    player1_rating: int
    player2_id: int
    player2_name: str
    player2_rating: int
    completed: bool
    match_id: Optional[int]


@dataclass(frozen=True)
class RoundView:
    """The active round with its pairings."""
    round_id: int
    week_start: date
    status: str
    season_id: Optional[int]
    pairings: List[PairingView] = field(default_factory=list)

    @property
    def total_pairings(self) -> int:
        return len(self.pairings)

    @property
    def completed_pairings(self) -> int:
        return sum(1 for pairing in self.pairings if pairing.completed)
