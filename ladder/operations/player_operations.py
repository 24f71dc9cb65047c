"""
Player Operations Module

Business logic for the player lifecycle: registration at the starting
rating, and activation toggles that keep a player out of (or back in)
pairings. Players are never deleted; ratings only change through the
MatchLedger and season resets.
"""

from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ladder.config import Config
from ladder.database.models import Player, RatingHistory, HistoryReason
from ladder.utils.exceptions import (
    DuplicatePlayerError, PlayerNotFoundError, LadderError, LadderOperationError, ValidationError
)
from ladder.utils.tiers import classify_tier
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class PlayerOperations:
    """Atomic operations for Player lifecycle management."""

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    async def register_player(self, external_id: int, name: str, rating: Optional[int] = None) -> Player:
        """
        Register a new player at the starting rating.

        The player's first RatingHistory entry is written in the same
        transaction.

        Raises:
            ValidationError: If the name is empty
            DuplicatePlayerError: If the external id is already registered
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Player name is required", "❌ A player name is required.")

        elo = Config.STARTING_ELO if rating is None else rating

        try:
            async with self.db.transaction() as session:
                existing = await session.execute(
                    select(Player.id).where(Player.external_id == external_id)
                )
                if existing.scalar_one_or_none() is not None:
                    raise DuplicatePlayerError(external_id)

                player = Player(
                    external_id=external_id,
                    name=name,
                    elo_rating=elo,
                    tier=classify_tier(elo),
                    wins=0,
                    losses=0,
                    is_active=True
                )
                session.add(player)
                await session.flush()

                session.add(RatingHistory(
                    player_id=player.id,
                    elo_rating=elo,
                    reason=HistoryReason.REGISTRATION
                ))

            self.logger.info(f"Registered player {player.id} ({name}) at {elo} Elo")
            return player

        except IntegrityError:
            # Lost a registration race for the same external id
            raise DuplicatePlayerError(external_id)
        except LadderError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to register player {external_id}: {e}")
            raise LadderOperationError("player registration", str(e)) from e

    async def set_player_active(self, player_id: int, active: bool) -> Player:
        """
        Block or unblock a player from pairings.

        Raises:
            PlayerNotFoundError: If the player does not exist
        """
        async with self.db.transaction() as session:
            player = await session.get(Player, player_id)
            if player is None:
                raise PlayerNotFoundError(player_id)
            player.is_active = active

        self.logger.info(f"Player {player_id} {'activated' if active else 'deactivated'}")
        return player
