"""
Round Lifecycle Module

Drives the league state machine:

    NoActiveRound -> RoundActive -> RoundActive (next round) -> SeasonCompleted

Responsibilities:
- generate_round(): pair the roster and persist a new active round with all
  of its pairings in one transaction, closing the previous active round
- complete_pairing(): mark the active round's pairing resolved by a match
- start_season() / end_season(): season boundaries, champion and optional
  rating reset

The active round and season are tracked through the single LeagueState row,
which every lifecycle transaction locks first. Lifecycle mutations are also
serialized in-process so the scheduled trigger and a manual "force pairings"
call cannot both create a round.
"""

import asyncio
from typing import Optional, Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ladder.config import Config
from ladder.data_models.ladder import RoundGenerationResult, RoundGenerationStatus, SeasonSummary
from ladder.database.models import (
    Player, Match, Round, Pairing, Season, RatingHistory, LeagueState,
    RoundStatus, SeasonStatus, HistoryReason, utcnow
)
from ladder.constants import LeagueConstants
from ladder.utils.exceptions import (
    InsufficientPlayersError, NoActiveSeasonError, PlayerNotFoundError,
    LadderError, LadderOperationError, ValidationError
)
from ladder.utils.pairing import PairingCandidate, generate_pairings, sort_roster
from ladder.utils.tiers import classify_tier
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class RoundLifecycle:
    """Round and season lifecycle operations over the shared store."""

    def __init__(self, database, max_rounds: Optional[int] = None, starting_elo: Optional[int] = None):
        """
        Args:
            database: Database instance
            max_rounds: Rounds the league may ever create (defaults to weeks x games per week)
            starting_elo: Rating players are reset to at a season reset
        """
        self.db = database
        self.max_rounds = Config.max_rounds() if max_rounds is None else max_rounds
        self.starting_elo = Config.STARTING_ELO if starting_elo is None else starting_elo
        self.logger = logger
        self._lock = asyncio.Lock()

    # ============================================================================
    # Rounds
    # ============================================================================

    async def generate_round(self, roster: Optional[Sequence[PairingCandidate]] = None) -> RoundGenerationResult:
        """
        Pair the roster and persist a new active round.

        When the league has already created max_rounds rounds this is a no-op
        that reports LEAGUE_COMPLETED. An odd roster drops its lowest rated
        player (the last one after sorting) and reports a warning.

        Args:
            roster: Players to pair; defaults to every active player

        Returns:
            RoundGenerationResult describing what happened

        Raises:
            InsufficientPlayersError: If fewer than two players are available
            PlayerNotFoundError: If a supplied roster entry is not a player
        """
        async with self._lock:
            try:
                async with self.db.transaction() as session:
                    state = await self.db.lock_league_state(session)

                    rounds_played = await self._count_rounds(session)
                    if rounds_played >= self.max_rounds:
                        self.logger.warning(
                            f"League completed! {self.max_rounds} rounds finished, no new round created"
                        )
                        return RoundGenerationResult(
                            status=RoundGenerationStatus.LEAGUE_COMPLETED,
                            rounds_played=rounds_played,
                            max_rounds=self.max_rounds
                        )

                    if roster is None:
                        players = await self.db.get_roster(session)
                        candidates = [PairingCandidate(p.id, p.elo_rating) for p in players]
                    else:
                        candidates = list(roster)
                        await self._validate_roster(session, candidates)

                    if len(candidates) < LeagueConstants.MIN_ROUND_PLAYERS:
                        raise InsufficientPlayersError(len(candidates), LeagueConstants.MIN_ROUND_PLAYERS)

                    dropped_player_id = None
                    warning = None
                    if len(candidates) % 2 != 0:
                        sorted_candidates = sort_roster(candidates)
                        dropped = sorted_candidates[-1]
                        candidates = sorted_candidates[:-1]
                        dropped_player_id = dropped.player_id
                        warning = (
                            f"Odd number of players ({len(sorted_candidates)}). "
                            f"Player {dropped.player_id} sits out this round."
                        )
                        self.logger.warning(warning)

                    pairs = generate_pairings(candidates)

                    now = utcnow()
                    await self._close_active_round(session, state, now)

                    new_round = Round(
                        season_id=state.active_season_id,
                        status=RoundStatus.ACTIVE,
                        week_start=now.date(),
                        created_at=now
                    )
                    session.add(new_round)
                    await session.flush()

                    for first, second in pairs:
                        session.add(Pairing(
                            round_id=new_round.id,
                            player1_id=first.player_id,
                            player2_id=second.player_id,
                            completed=False
                        ))

                    state.active_round_id = new_round.id
                    round_id = new_round.id

                self.logger.info(
                    f"Generated {len(pairs)} pairings for round {round_id} "
                    f"(Round {rounds_played + 1}/{self.max_rounds})"
                )
                return RoundGenerationResult(
                    status=RoundGenerationStatus.CREATED,
                    rounds_played=rounds_played + 1,
                    max_rounds=self.max_rounds,
                    round_id=round_id,
                    pairings=tuple((first.player_id, second.player_id) for first, second in pairs),
                    dropped_player_id=dropped_player_id,
                    warning=warning
                )

            except LadderError:
                raise
            except Exception as e:
                self.logger.error(f"Failed to generate round: {e}")
                raise LadderOperationError("round generation", str(e)) from e

    async def complete_pairing(self, session: AsyncSession, match: Match) -> Optional[Pairing]:
        """
        Mark the active round's open pairing between the match's players as
        completed (session-aware; the caller owns the transaction).

        Matches between players who are not paired in the active round are
        casual games and leave every pairing untouched.

        Returns:
            The completed Pairing, or None for a casual match
        """
        active_round = await self.db.get_active_round(session)
        if active_round is None or active_round.status != RoundStatus.ACTIVE:
            return None

        result = await session.execute(
            select(Pairing).where(
                Pairing.round_id == active_round.id,
                Pairing.completed == False,
                (
                    ((Pairing.player1_id == match.winner_id) & (Pairing.player2_id == match.loser_id)) |
                    ((Pairing.player1_id == match.loser_id) & (Pairing.player2_id == match.winner_id))
                )
            ).order_by(Pairing.id).limit(1)
        )
        pairing = result.scalar_one_or_none()
        if pairing is None:
            return None

        pairing.completed = True
        pairing.match_id = match.id
        match.round_id = pairing.round_id
        self.logger.debug(f"Pairing {pairing.id} in round {pairing.round_id} completed by match {match.id}")
        return pairing

    # ============================================================================
    # Seasons
    # ============================================================================

    async def start_season(self, name: str, reset_ratings: bool = False) -> SeasonSummary:
        """
        Start a new active season.

        Any active season and active round are completed first. With
        reset_ratings every player returns to the starting rating with zero
        wins and losses, and gets one fresh RatingHistory entry.

        Raises:
            ValidationError: If the name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Season name is required", "❌ A season name is required.")

        async with self._lock:
            try:
                async with self.db.transaction() as session:
                    state = await self.db.lock_league_state(session)
                    now = utcnow()

                    previous = None
                    if state.active_season_id is not None:
                        previous = await session.get(Season, state.active_season_id)
                    if previous is not None and previous.status == SeasonStatus.ACTIVE:
                        await self._close_season(session, state, previous, now)
                        self.logger.info(f"Force-completed season {previous.id} ({previous.name})")
                    await self._close_active_round(session, state, now)

                    season = Season(name=name, status=SeasonStatus.ACTIVE, start_date=now)
                    session.add(season)
                    await session.flush()
                    state.active_season_id = season.id

                    players_reset = 0
                    if reset_ratings:
                        players_reset = await self._reset_ratings(session, now)

                    summary = self._summarize(season, players_reset=players_reset)

                self.logger.info(
                    f"Started season {summary.season_id} ({name})"
                    + (f", reset {players_reset} players to {self.starting_elo}" if reset_ratings else "")
                )
                return summary

            except LadderError:
                raise
            except Exception as e:
                self.logger.error(f"Failed to start season '{name}': {e}")
                raise LadderOperationError("season start", str(e)) from e

    async def end_season(self) -> SeasonSummary:
        """
        Close the active season, crowning the top rated player.

        Raises:
            NoActiveSeasonError: If no season is active
        """
        async with self._lock:
            try:
                async with self.db.transaction() as session:
                    state = await self.db.lock_league_state(session)
                    season = None
                    if state.active_season_id is not None:
                        season = await session.get(Season, state.active_season_id)
                    if season is None or season.status != SeasonStatus.ACTIVE:
                        raise NoActiveSeasonError()

                    now = utcnow()
                    champion = await self._close_season(session, state, season, now)
                    await self._close_active_round(session, state, now)
                    summary = self._summarize(season, champion=champion)

                self.logger.info(
                    f"Ended season {summary.season_id} ({summary.name}): "
                    f"{summary.total_matches} matches, {summary.total_rounds} rounds, "
                    f"champion {summary.champion_name or 'none'}"
                )
                return summary

            except LadderError:
                raise
            except Exception as e:
                self.logger.error(f"Failed to end season: {e}")
                raise LadderOperationError("season end", str(e)) from e

    # ============================================================================
    # Helpers (session-aware, caller owns the transaction)
    # ============================================================================

    async def _count_rounds(self, session: AsyncSession) -> int:
        """Every round ever created; seasons do not reset the league cap"""
        return await session.scalar(select(func.count(Round.id))) or 0

    async def _validate_roster(self, session: AsyncSession, candidates: Sequence[PairingCandidate]) -> None:
        if not candidates:
            return
        ids = {candidate.player_id for candidate in candidates}
        result = await session.execute(select(Player.id).where(Player.id.in_(ids)))
        missing = ids - set(result.scalars().all())
        if missing:
            raise PlayerNotFoundError(min(missing))

    async def _close_active_round(self, session: AsyncSession, state: LeagueState, now) -> Optional[Round]:
        if state.active_round_id is None:
            return None
        active_round = await session.get(Round, state.active_round_id)
        state.active_round_id = None
        if active_round is None or active_round.status != RoundStatus.ACTIVE:
            return None
        active_round.status = RoundStatus.COMPLETED
        active_round.completed_at = now
        self.logger.info(f"Completed round {active_round.id}")
        return active_round

    async def _close_season(self, session: AsyncSession, state: LeagueState,
                            season: Season, now) -> Optional[Player]:
        """Record aggregates and champion, and mark the season completed"""
        season.total_matches = await session.scalar(
            select(func.count(Match.id)).where(Match.created_at >= season.start_date)
        ) or 0
        season.total_rounds = await session.scalar(
            select(func.count(Round.id)).where(Round.created_at >= season.start_date)
        ) or 0

        result = await session.execute(
            select(Player)
            .where(Player.is_active == True)
            .order_by(Player.elo_rating.desc(), Player.id)
            .limit(1)
        )
        champion = result.scalar_one_or_none()

        season.champion_id = champion.id if champion else None
        season.status = SeasonStatus.COMPLETED
        season.end_date = now
        state.active_season_id = None
        return champion

    async def _reset_ratings(self, session: AsyncSession, now) -> int:
        result = await session.execute(select(Player).order_by(Player.id))
        players = list(result.scalars().all())
        tier = classify_tier(self.starting_elo)
        for player in players:
            player.elo_rating = self.starting_elo
            player.tier = tier
            player.wins = 0
            player.losses = 0
            session.add(RatingHistory(
                player_id=player.id,
                elo_rating=self.starting_elo,
                match_id=None,
                reason=HistoryReason.SEASON_RESET,
                recorded_at=now
            ))
        return len(players)

    @staticmethod
    def _summarize(season: Season, champion: Optional[Player] = None, players_reset: int = 0) -> SeasonSummary:
        return SeasonSummary(
            season_id=season.id,
            name=season.name,
            status=season.status.value,
            start_date=season.start_date,
            end_date=season.end_date,
            champion_id=season.champion_id,
            champion_name=champion.name if champion else None,
            total_matches=season.total_matches or 0,
            total_rounds=season.total_rounds or 0,
            players_reset=players_reset
        )
