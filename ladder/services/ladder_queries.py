"""
Read-side queries for the ladder: leaderboard, rating trajectories, match
history, the active round's pairings and the season list.

All results are plain data models so callers never hold live ORM objects.
"""

import logging
from typing import List, Optional
from sqlalchemy import select, or_
from sqlalchemy.orm import selectinload

from ladder.constants import LeagueConstants, PaginationConstants
from ladder.data_models.ladder import (
    LeaderboardEntry, RatingHistoryPoint, MatchSummary, PairingView, RoundView, SeasonSummary
)
from ladder.database.models import Player, Match, RatingHistory, Round, Pairing, Season, LeagueState
from ladder.services.base import BaseService
from ladder.utils.exceptions import PlayerNotFoundError

logger = logging.getLogger(__name__)


class LadderQueryService(BaseService):
    """Read-only views over the ladder store."""

    async def get_leaderboard(self, limit: int = PaginationConstants.DEFAULT_PAGE_SIZE,
                              include_inactive: bool = False) -> List[LeaderboardEntry]:
        """Top players by rating, highest first"""
        async def _query():
            async with self.get_session() as session:
                query = select(Player).order_by(Player.elo_rating.desc(), Player.id).limit(limit)
                if not include_inactive:
                    query = query.where(Player.is_active == True)
                result = await session.execute(query)
                return [
                    LeaderboardEntry(
                        rank=rank,
                        player_id=player.id,
                        name=player.name,
                        elo_rating=player.elo_rating,
                        tier=player.tier,
                        wins=player.wins,
                        losses=player.losses
                    )
                    for rank, player in enumerate(result.scalars().all(), start=1)
                ]

        return await self.execute_with_retry(_query)

    async def get_rating_history(self, player_id: int) -> List[RatingHistoryPoint]:
        """
        A player's rating trajectory in recording order.

        Raises:
            PlayerNotFoundError: If the player does not exist
        """
        async with self.get_session() as session:
            if await session.get(Player, player_id) is None:
                raise PlayerNotFoundError(player_id)

            result = await session.execute(
                select(RatingHistory)
                .where(RatingHistory.player_id == player_id)
                .order_by(RatingHistory.recorded_at, RatingHistory.id)
            )
            return [
                RatingHistoryPoint(
                    elo_rating=entry.elo_rating,
                    recorded_at=entry.recorded_at,
                    match_id=entry.match_id,
                    reason=entry.reason.value
                )
                for entry in result.scalars().all()
            ]

    async def get_match_history(self, player_id: Optional[int] = None,
                                limit: Optional[int] = None) -> List[MatchSummary]:
        """
        Recent matches, newest first.

        Without a player this returns the whole ladder's recent matches
        (default 50); with one it returns only that player's (default 30).
        """
        if limit is None:
            limit = LeagueConstants.ALL_MATCHES_LIMIT if player_id is None else LeagueConstants.PLAYER_MATCHES_LIMIT

        async with self.get_session() as session:
            query = (
                select(Match)
                .options(selectinload(Match.winner), selectinload(Match.loser))
                .order_by(Match.created_at.desc(), Match.id.desc())
                .limit(limit)
            )
            if player_id is not None:
                query = query.where(or_(Match.winner_id == player_id, Match.loser_id == player_id))

            result = await session.execute(query)
            return [
                MatchSummary(
                    match_id=match.id,
                    winner_id=match.winner_id,
                    winner_name=match.winner.name,
                    loser_id=match.loser_id,
                    loser_name=match.loser.name,
                    winner_score=match.winner_score,
                    loser_score=match.loser_score,
                    elo_change=match.elo_change,
                    round_id=match.round_id,
                    played_at=match.created_at
                )
                for match in result.scalars().all()
            ]

    async def get_current_pairings(self) -> Optional[RoundView]:
        """The active round with its pairings, or None when no round is active"""
        async with self.get_session() as session:
            state = await session.get(LeagueState, LeagueState.SINGLETON_ID)
            if state is None or state.active_round_id is None:
                return None

            result = await session.execute(
                select(Round)
                .options(
                    selectinload(Round.pairings).selectinload(Pairing.player1),
                    selectinload(Round.pairings).selectinload(Pairing.player2)
                )
                .where(Round.id == state.active_round_id)
            )
            current_round = result.scalar_one_or_none()
            if current_round is None:
                return None

            return RoundView(
                round_id=current_round.id,
                week_start=current_round.week_start,
                status=current_round.status.value,
                season_id=current_round.season_id,
                pairings=[
                    PairingView(
                        pairing_id=pairing.id,
                        player1_id=pairing.player1_id,
                        player1_name=pairing.player1.name,
                        player1_rating=pairing.player1.elo_rating,
                        player2_id=pairing.player2_id,
                        player2_name=pairing.player2.name,
                        player2_rating=pairing.player2.elo_rating,
                        completed=pairing.completed,
                        match_id=pairing.match_id
                    )
                    for pairing in current_round.pairings
                ]
            )

    async def get_seasons(self) -> List[SeasonSummary]:
        """All seasons, newest first"""
        async with self.get_session() as session:
            result = await session.execute(
                select(Season)
                .options(selectinload(Season.champion))
                .order_by(Season.start_date.desc(), Season.id.desc())
            )
            return [
                SeasonSummary(
                    season_id=season.id,
                    name=season.name,
                    status=season.status.value,
                    start_date=season.start_date,
                    end_date=season.end_date,
                    champion_id=season.champion_id,
                    champion_name=season.champion.name if season.champion else None,
                    total_matches=season.total_matches or 0,
                    total_rounds=season.total_rounds or 0
                )
                for season in result.scalars().all()
            ]
