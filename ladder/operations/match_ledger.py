"""
Match Ledger Module

Records and undoes match results. Each call is one transaction that touches
both players, the Match row, its two RatingHistory rows and (when the match
resolves a scheduled pairing) the active round's Pairing. Readers never see a
Match without its history rows, and a failure at any step rolls back all of it.

Undo is local to the one match: ratings of later matches involving the same
players are not recomputed.
"""

from typing import Optional
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ladder.data_models.ladder import MatchRecord, UndoResult
from ladder.database.models import Player, Match, Pairing, RatingHistory, HistoryReason, utcnow
from ladder.utils.elo import EloCalculator
from ladder.utils.exceptions import (
    SameParticipantError, PlayerNotFoundError, MatchNotFoundError, InvalidScoreError,
    LadderError, LadderOperationError
)
from ladder.utils.tiers import classify_tier
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class MatchLedger:
    """Atomic record/undo of match results."""

    def __init__(self, database, round_lifecycle=None):
        """
        Args:
            database: Database instance
            round_lifecycle: RoundLifecycle used to resolve scheduled pairings
        """
        self.db = database
        self.round_lifecycle = round_lifecycle
        self.logger = logger

    async def record_match(self, winner_id: int, loser_id: int,
                           winner_score: int, loser_score: int) -> MatchRecord:
        """
        Record a match result and apply its rating change.

        Args:
            winner_id: Player ID of the winner
            loser_id: Player ID of the loser
            winner_score: Points scored by the winner
            loser_score: Points scored by the loser

        Returns:
            MatchRecord with old/new ratings and the linked pairing, if any

        Raises:
            SameParticipantError: If winner and loser are the same player
            InvalidScoreError: If the scores are missing, negative or not a win
            PlayerNotFoundError: If either player does not exist
        """
        if winner_id == loser_id:
            raise SameParticipantError(winner_id)
        self._validate_scores(winner_score, loser_score)

        try:
            async with self.db.transaction() as session:
                winner = await self._lock_player(session, winner_id)
                loser = await self._lock_player(session, loser_id)

                winner_old = winner.elo_rating
                loser_old = loser.elo_rating
                result = EloCalculator.apply_result(winner_old, loser_old)

                winner.elo_rating = result.winner_new_rating
                winner.tier = classify_tier(result.winner_new_rating)
                winner.wins += 1

                loser.elo_rating = result.loser_new_rating
                loser.tier = classify_tier(result.loser_new_rating)
                loser.losses += 1

                now = utcnow()
                match = Match(
                    winner_id=winner_id,
                    loser_id=loser_id,
                    winner_score=winner_score,
                    loser_score=loser_score,
                    elo_change=result.winner_delta,
                    loser_elo_change=result.loser_delta,
                    created_at=now
                )
                session.add(match)
                await session.flush()

                session.add_all([
                    RatingHistory(player_id=winner_id, elo_rating=winner.elo_rating,
                                  match_id=match.id, reason=HistoryReason.MATCH, recorded_at=now),
                    RatingHistory(player_id=loser_id, elo_rating=loser.elo_rating,
                                  match_id=match.id, reason=HistoryReason.MATCH, recorded_at=now),
                ])

                pairing = None
                if self.round_lifecycle is not None:
                    pairing = await self.round_lifecycle.complete_pairing(session, match)

                record = MatchRecord(
                    match_id=match.id,
                    winner_id=winner_id,
                    loser_id=loser_id,
                    winner_score=winner_score,
                    loser_score=loser_score,
                    winner_old_rating=winner_old,
                    winner_new_rating=winner.elo_rating,
                    loser_old_rating=loser_old,
                    loser_new_rating=loser.elo_rating,
                    rating_change=result.rating_change,
                    loser_rating_change=result.loser_delta,
                    winner_tier=winner.tier,
                    loser_tier=loser.tier,
                    pairing_id=pairing.id if pairing else None,
                    round_id=match.round_id
                )

            self.logger.info(
                f"Recorded match {record.match_id}: {winner_id} beat {loser_id} "
                f"{winner_score}-{loser_score} "
                f"({EloCalculator.format_elo_change(record.rating_change)}/"
                f"{EloCalculator.format_elo_change(record.loser_rating_change)})"
                + (f", completed pairing {record.pairing_id}" if record.pairing_id else "")
            )
            return record

        except LadderError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to record match {winner_id} vs {loser_id}: {e}")
            raise LadderOperationError("match recording", str(e)) from e

    async def undo_match(self, match_id: int) -> UndoResult:
        """
        Delete a match and reverse exactly the rating change it applied.

        Raises:
            MatchNotFoundError: If the match does not exist
        """
        try:
            async with self.db.transaction() as session:
                match = await session.get(Match, match_id)
                if match is None:
                    raise MatchNotFoundError(match_id)

                winner = await self._lock_player(session, match.winner_id)
                loser = await self._lock_player(session, match.loser_id)

                winner.elo_rating -= match.elo_change
                winner.tier = classify_tier(winner.elo_rating)
                winner.wins -= 1

                loser.elo_rating -= match.loser_elo_change
                loser.tier = classify_tier(loser.elo_rating)
                loser.losses -= 1

                pairing_ids = (await session.execute(
                    select(Pairing.id).where(Pairing.match_id == match_id)
                )).scalars().all()
                if pairing_ids:
                    await session.execute(
                        update(Pairing)
                        .where(Pairing.id.in_(pairing_ids))
                        .values(completed=False, match_id=None)
                    )

                await session.execute(delete(RatingHistory).where(RatingHistory.match_id == match_id))
                await session.execute(delete(Match).where(Match.id == match_id))

                undo = UndoResult(
                    match_id=match_id,
                    winner_id=winner.id,
                    loser_id=loser.id,
                    winner_rating=winner.elo_rating,
                    loser_rating=loser.elo_rating,
                    winner_tier=winner.tier,
                    loser_tier=loser.tier,
                    reset_pairing_ids=tuple(pairing_ids)
                )

            self.logger.info(
                f"Undid match {match_id}: player {undo.winner_id} back to {undo.winner_rating}, "
                f"player {undo.loser_id} back to {undo.loser_rating}"
            )
            return undo

        except LadderError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to undo match {match_id}: {e}")
            raise LadderOperationError("match undo", str(e)) from e

    async def get_match(self, match_id: int) -> Optional[Match]:
        async with self.db.get_session() as session:
            return await session.get(Match, match_id)

    async def _lock_player(self, session: AsyncSession, player_id: int) -> Player:
        result = await session.execute(
            select(Player).where(Player.id == player_id).with_for_update()
        )
        player = result.scalar_one_or_none()
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    @staticmethod
    def _validate_scores(winner_score, loser_score) -> None:
        if winner_score is None or loser_score is None:
            raise InvalidScoreError(winner_score, loser_score, "Both scores are required.")
        if winner_score < 0 or loser_score < 0:
            raise InvalidScoreError(winner_score, loser_score, "Scores cannot be negative.")
        if winner_score <= loser_score:
            raise InvalidScoreError(winner_score, loser_score, "The winner must have the higher score.")
