"""
Admin Cog - owner-only ladder management

Undo a match, force a pairing round, start/end seasons and block or unblock
players from pairings.
"""

import discord
from discord import app_commands
from discord.ext import commands

from ladder.config import Config
from ladder.utils.embeds import error_embed, round_generated_embed, season_embed
from ladder.utils.exceptions import LadderError, PlayerNotFoundError
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


def is_bot_owner(interaction: discord.Interaction) -> bool:
    """Checks if the interaction user is the bot owner."""
    return interaction.user.id == Config.OWNER_DISCORD_ID


class AdminCog(commands.Cog):
    """Owner-only ladder administration"""

    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="admin-undo-match", description="Delete a match and reverse its rating change (Owner only)")
    @app_commands.describe(match_id="ID of the match to undo")
    @app_commands.check(is_bot_owner)
    async def undo_match(self, interaction: discord.Interaction, match_id: int):
        await interaction.response.defer(ephemeral=True)
        try:
            undo = await self.bot.match_ledger.undo_match(match_id)
            logger.info(f"Admin {interaction.user} undid match {match_id}")
            await interaction.followup.send(
                f"↩️ Match #{undo.match_id} undone. "
                f"Ratings restored to {undo.winner_rating} and {undo.loser_rating}.",
                ephemeral=True
            )
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="admin-force-pairings", description="Generate a new pairing round now (Owner only)")
    @app_commands.check(is_bot_owner)
    async def force_pairings(self, interaction: discord.Interaction):
        await interaction.response.defer()
        try:
            result = await self.bot.round_lifecycle.generate_round()
            logger.info(f"Admin {interaction.user} forced pairings: {result.status.value}")
            await interaction.followup.send(embed=round_generated_embed(result))
            if result.created:
                await self.bot.notify_pairings()
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="admin-season-start", description="Start a new season (Owner only)")
    @app_commands.describe(name="Season name", reset_ratings="Reset every player to the starting rating")
    @app_commands.check(is_bot_owner)
    async def season_start(self, interaction: discord.Interaction, name: str, reset_ratings: bool = False):
        await interaction.response.defer()
        try:
            summary = await self.bot.round_lifecycle.start_season(name, reset_ratings=reset_ratings)
            logger.info(f"Admin {interaction.user} started season {summary.season_id} (reset={reset_ratings})")
            await interaction.followup.send(embed=season_embed(summary, started=True))
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="admin-season-end", description="End the current season and crown a champion (Owner only)")
    @app_commands.check(is_bot_owner)
    async def season_end(self, interaction: discord.Interaction):
        await interaction.response.defer()
        try:
            summary = await self.bot.round_lifecycle.end_season()
            logger.info(f"Admin {interaction.user} ended season {summary.season_id}")
            await interaction.followup.send(embed=season_embed(summary, started=False))
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="admin-player-active", description="Block or unblock a player from pairings (Owner only)")
    @app_commands.describe(member="Player to update", active="Whether they should be paired")
    @app_commands.check(is_bot_owner)
    async def player_active(self, interaction: discord.Interaction, member: discord.Member, active: bool):
        await interaction.response.defer(ephemeral=True)
        try:
            player = await self.bot.db.get_player_by_external_id(member.id)
            if player is None:
                raise PlayerNotFoundError(member.id)
            await self.bot.player_ops.set_player_active(player.id, active)
            logger.info(f"Admin {interaction.user} set player {player.id} active={active}")
            state = "back in" if active else "removed from"
            await interaction.followup.send(f"✅ **{player.name}** is {state} pairings.", ephemeral=True)
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)


async def setup(bot):
    await bot.add_cog(AdminCog(bot))
