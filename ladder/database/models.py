from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Boolean,
    ForeignKey, BigInteger, Enum as SQLEnum, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone
from enum import Enum

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp used for every stored datetime"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RoundStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"

class SeasonStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"

class HistoryReason(Enum):
    REGISTRATION = "registration"
    MATCH = "match"
    SEASON_RESET = "season_reset"


class Player(Base):
    __tablename__ = 'players'

    id = Column(Integer, primary_key=True)
    external_id = Column(BigInteger, unique=True, nullable=False, index=True)  # Discord user id
    name = Column(String(100), nullable=False)

    # Ladder stats
    elo_rating = Column(Integer, nullable=False)
    tier = Column(String(50), nullable=False)  # Cache of classify_tier(elo_rating)
    wins = Column(Integer, default=0, nullable=False)
    losses = Column(Integer, default=0, nullable=False)

    # Inactive players are never deleted, only left out of pairings
    is_active = Column(Boolean, default=True, nullable=False)

    # Metadata
    registered_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    rating_history = relationship("RatingHistory", back_populates="player", order_by="RatingHistory.id")

    @property
    def total_games(self) -> int:
        return (self.wins or 0) + (self.losses or 0)

    @property
    def win_rate(self) -> float:
        if self.total_games == 0:
            return 0.0
        return (self.wins / self.total_games) * 100

    def __repr__(self):
        return f"<Player(id={self.id}, name='{self.name}', elo={self.elo_rating})>"


class Season(Base):
    __tablename__ = 'seasons'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    status = Column(SQLEnum(SeasonStatus), default=SeasonStatus.ACTIVE, nullable=False)

    start_date = Column(DateTime, default=utcnow, nullable=False)
    end_date = Column(DateTime, nullable=True)

    # Filled when the season is closed
    champion_id = Column(Integer, ForeignKey('players.id'), nullable=True)
    total_matches = Column(Integer, default=0)
    total_rounds = Column(Integer, default=0)

    champion = relationship("Player")
    rounds = relationship("Round", back_populates="season")

    @property
    def is_active(self) -> bool:
        return self.status == SeasonStatus.ACTIVE

    def __repr__(self):
        return f"<Season(id={self.id}, name='{self.name}', status={self.status.value})>"


class Round(Base):
    __tablename__ = 'rounds'

    id = Column(Integer, primary_key=True)
    season_id = Column(Integer, ForeignKey('seasons.id'), nullable=True, index=True)
    status = Column(SQLEnum(RoundStatus), default=RoundStatus.ACTIVE, nullable=False)

    week_start = Column(Date, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    season = relationship("Season", back_populates="rounds")
    pairings = relationship("Pairing", back_populates="round", order_by="Pairing.id",
                            cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Round(id={self.id}, status={self.status.value}, season={self.season_id})>"


class Match(Base):
    """
    One reported result between two players.

    elo_change is the winner's gain; loser_elo_change is the loser's (zero or
    negative) delta. Both are kept because they are rounded independently.
    """
    __tablename__ = 'matches'

    id = Column(Integer, primary_key=True)
    winner_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    loser_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)

    winner_score = Column(Integer, nullable=False)
    loser_score = Column(Integer, nullable=False)

    elo_change = Column(Integer, nullable=False)
    loser_elo_change = Column(Integer, nullable=False)

    # Round that was active when the match resolved a pairing
    round_id = Column(Integer, ForeignKey('rounds.id'), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    __table_args__ = (
        CheckConstraint('winner_id != loser_id', name='ck_match_distinct_players'),
    )

    winner = relationship("Player", foreign_keys=[winner_id])
    loser = relationship("Player", foreign_keys=[loser_id])
    round = relationship("Round")
    rating_history = relationship("RatingHistory", back_populates="match", cascade="all, delete-orphan")

    def __repr__(self):
        return (f"<Match(id={self.id}, winner={self.winner_id}, loser={self.loser_id}, "
                f"score={self.winner_score}-{self.loser_score}, change={self.elo_change})>")


class RatingHistory(Base):
    __tablename__ = 'rating_history'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    elo_rating = Column(Integer, nullable=False)
    match_id = Column(Integer, ForeignKey('matches.id'), nullable=True, index=True)
    reason = Column(SQLEnum(HistoryReason), default=HistoryReason.MATCH, nullable=False)
    recorded_at = Column(DateTime, default=utcnow, nullable=False)

    player = relationship("Player", back_populates="rating_history")
    match = relationship("Match", back_populates="rating_history")

    def __repr__(self):
        return f"<RatingHistory(player_id={self.player_id}, elo={self.elo_rating}, match_id={self.match_id})>"


class Pairing(Base):
    __tablename__ = 'pairings'

    id = Column(Integer, primary_key=True)
    round_id = Column(Integer, ForeignKey('rounds.id'), nullable=False, index=True)

    # player1 is the higher rated player when the round was generated
    player1_id = Column(Integer, ForeignKey('players.id'), nullable=False)
    player2_id = Column(Integer, ForeignKey('players.id'), nullable=False)

    completed = Column(Boolean, default=False, nullable=False)
    match_id = Column(Integer, ForeignKey('matches.id'), nullable=True)

    __table_args__ = (
        CheckConstraint('player1_id != player2_id', name='ck_pairing_distinct_players'),
        UniqueConstraint('round_id', 'player1_id', name='uq_pairing_round_player1'),
        UniqueConstraint('round_id', 'player2_id', name='uq_pairing_round_player2'),
    )

    round = relationship("Round", back_populates="pairings")
    player1 = relationship("Player", foreign_keys=[player1_id])
    player2 = relationship("Player", foreign_keys=[player2_id])
    match = relationship("Match")

    def involves(self, player_a: int, player_b: int) -> bool:
        return {self.player1_id, self.player2_id} == {player_a, player_b}

    def __repr__(self):
        return f"<Pairing(round={self.round_id}, {self.player1_id} vs {self.player2_id}, completed={self.completed})>"


class LeagueState(Base):
    """
    Single-row pointer to the league's active round and season.

    Lifecycle operations lock and update this row instead of relying on
    "most recent active row" queries.
    """
    __tablename__ = 'league_state'

    SINGLETON_ID = 1

    id = Column(Integer, primary_key=True)
    active_round_id = Column(Integer, ForeignKey('rounds.id'), nullable=True)
    active_season_id = Column(Integer, ForeignKey('seasons.id'), nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    active_round = relationship("Round", foreign_keys=[active_round_id])
    active_season = relationship("Season", foreign_keys=[active_season_id])

    def __repr__(self):
        return f"<LeagueState(round={self.active_round_id}, season={self.active_season_id})>"
