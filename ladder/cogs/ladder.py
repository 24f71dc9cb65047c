"""
Ladder Cog - player-facing commands

Registration, match reporting, leaderboard, pairings and history. Every
command is thin glue: it resolves Discord users to players, calls the
operations/query layer with plain data and renders the result.
"""

import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional

from ladder.constants import RateLimitConstants
from ladder.services.rate_limiter import rate_limit
from ladder.utils.embeds import (
    error_embed, leaderboard_embed, match_result_embed, pairings_embed, match_history_embed, seasons_embed
)
from ladder.utils.exceptions import LadderError, PlayerNotFoundError
from ladder.utils.trash_talk import generate_trash_talk


class LadderCog(commands.Cog):
    """Player commands for the ping pong ladder"""

    def __init__(self, bot):
        self.bot = bot

    async def _resolve_player(self, member: discord.abc.User):
        player = await self.bot.db.get_player_by_external_id(member.id)
        if player is None:
            raise PlayerNotFoundError(member.id)
        return player

    @app_commands.command(name="register", description="Join the ping pong ladder")
    async def register(self, interaction: discord.Interaction):
        try:
            player = await self.bot.player_ops.register_player(
                interaction.user.id, interaction.user.display_name
            )
            await interaction.response.send_message(
                f"🏓 Welcome to the ladder, **{player.name}**! "
                f"You start at **{player.elo_rating}** ELO ({player.tier})."
            )
        except LadderError as e:
            await interaction.response.send_message(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="report", description="Report the result of a match you played")
    @app_commands.describe(
        opponent="Who you played",
        won="Did you win?",
        my_score="Your score",
        opponent_score="Your opponent's score"
    )
    @rate_limit("report", RateLimitConstants.REPORT)
    async def report(self, interaction: discord.Interaction, opponent: discord.Member,
                     won: bool, my_score: int, opponent_score: int):
        await interaction.response.defer()
        try:
            me = await self._resolve_player(interaction.user)
            them = await self._resolve_player(opponent)

            if won:
                winner, loser, winner_score, loser_score = me, them, my_score, opponent_score
            else:
                winner, loser, winner_score, loser_score = them, me, opponent_score, my_score

            record = await self.bot.match_ledger.record_match(winner.id, loser.id, winner_score, loser_score)
            trash_talk = generate_trash_talk(
                winner.name, loser.name, record.rating_change, winner_score, loser_score
            )
            await interaction.followup.send(
                embed=match_result_embed(record, winner.name, loser.name, trash_talk)
            )
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="leaderboard", description="View the ladder standings")
    @rate_limit("leaderboard", RateLimitConstants.LEADERBOARD)
    async def leaderboard(self, interaction: discord.Interaction):
        await interaction.response.defer()
        entries = await self.bot.queries.get_leaderboard()
        await interaction.followup.send(embed=leaderboard_embed(entries))

    @app_commands.command(name="pairings", description="View this round's pairings")
    async def pairings(self, interaction: discord.Interaction):
        await interaction.response.defer()
        round_view = await self.bot.queries.get_current_pairings()
        await interaction.followup.send(embed=pairings_embed(round_view))

    @app_commands.command(name="matches", description="View recent matches")
    @app_commands.describe(player="Only show this player's matches")
    async def matches(self, interaction: discord.Interaction, player: Optional[discord.Member] = None):
        await interaction.response.defer()
        try:
            if player is None:
                history = await self.bot.queries.get_match_history()
                title = "🏓 Recent Matches"
            else:
                target = await self._resolve_player(player)
                history = await self.bot.queries.get_match_history(player_id=target.id)
                title = f"🏓 Matches for {target.name}"
            await interaction.followup.send(embed=match_history_embed(history, title))
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="rating", description="View a player's rating trajectory")
    @app_commands.describe(player="Player to look up (defaults to you)")
    async def rating(self, interaction: discord.Interaction, player: Optional[discord.Member] = None):
        await interaction.response.defer()
        try:
            target = await self._resolve_player(player or interaction.user)
            history = await self.bot.queries.get_rating_history(target.id)
            recent = history[-10:]
            trajectory = " → ".join(str(point.elo_rating) for point in recent) or "No history yet"
            peak = max((point.elo_rating for point in history), default=target.elo_rating)
            embed = discord.Embed(
                title=f"📈 {target.name}",
                description=(
                    f"{target.tier} • ELO **{target.elo_rating}** (peak {peak})\n"
                    f"Record: {target.wins}W-{target.losses}L ({target.win_rate:.1f}%)\n\n{trajectory}"
                )
            )
            await interaction.followup.send(embed=embed)
        except LadderError as e:
            await interaction.followup.send(embed=error_embed(e), ephemeral=True)

    @app_commands.command(name="seasons", description="View past and current seasons")
    async def seasons(self, interaction: discord.Interaction):
        await interaction.response.defer()
        seasons = await self.bot.queries.get_seasons()
        await interaction.followup.send(embed=seasons_embed(seasons))


async def setup(bot):
    await bot.add_cog(LadderCog(bot))
