"""
Shared embed builders for the ladder bot.

Keeps leaderboard, pairing and match result presentation consistent across
cogs. Builders take plain data models and return discord.Embed objects.
"""

import discord
from typing import List, Optional

from ladder.constants import UIConstants
from ladder.data_models.ladder import (
    LeaderboardEntry, MatchRecord, MatchSummary, RoundView, SeasonSummary, RoundGenerationResult
)
from ladder.utils.elo import EloCalculator
from ladder.utils.exceptions import LadderError


def error_embed(error: LadderError) -> discord.Embed:
    """Embed for a ladder error using its user-facing message."""
    return discord.Embed(
        title="Something went wrong",
        description=error.user_message,
        color=UIConstants.ERROR_COLOR
    )


def leaderboard_embed(entries: List[LeaderboardEntry]) -> discord.Embed:
    embed = discord.Embed(
        title=f"{UIConstants.PADDLE_EMOJI} Ladder Leaderboard",
        color=UIConstants.GOLD_RANK_COLOR if entries else UIConstants.DEFAULT_EMBED_COLOR
    )
    if not entries:
        embed.description = "No players yet. Use `/register` to join!"
        return embed

    lines = []
    for entry in entries:
        medal = UIConstants.MEDALS[entry.rank - 1] if entry.rank <= len(UIConstants.MEDALS) else f"**{entry.rank}.**"
        lines.append(
            f"{medal} **{entry.name}**\n"
            f"{entry.tier} • ELO: **{entry.elo_rating}** • Record: {entry.wins}W-{entry.losses}L ({entry.total_games} played)"
        )
    embed.description = "\n".join(lines)
    return embed


def match_result_embed(record: MatchRecord, winner_name: str, loser_name: str,
                       trash_talk: str) -> discord.Embed:
    embed = discord.Embed(
        title=f"{UIConstants.PADDLE_EMOJI} Match #{record.match_id} Recorded",
        description=trash_talk,
        color=UIConstants.SUCCESS_COLOR
    )
    embed.add_field(
        name=winner_name,
        value=(f"{record.winner_old_rating} → **{record.winner_new_rating}** "
               f"({EloCalculator.format_elo_change(record.rating_change)})\n{record.winner_tier}"),
        inline=True
    )
    embed.add_field(
        name=loser_name,
        value=(f"{record.loser_old_rating} → **{record.loser_new_rating}** "
               f"({EloCalculator.format_elo_change(record.loser_rating_change)})\n{record.loser_tier}"),
        inline=True
    )
    if record.pairing_id:
        embed.set_footer(text=f"Scheduled match for round {record.round_id} ✅")
    return embed


def pairings_embed(round_view: Optional[RoundView]) -> discord.Embed:
    if round_view is None:
        return discord.Embed(
            title="📅 Current Pairings",
            description="No active round.",
            color=UIConstants.DEFAULT_EMBED_COLOR
        )

    embed = discord.Embed(
        title=f"📅 Round {round_view.round_id} Pairings",
        description=f"Week of {round_view.week_start:%d %b %Y} • "
                    f"{round_view.completed_pairings}/{round_view.total_pairings} played",
        color=UIConstants.DEFAULT_EMBED_COLOR
    )
    for pairing in round_view.pairings:
        status = "✅" if pairing.completed else "⏳"
        embed.add_field(
            name=f"{status} {pairing.player1_name} vs {pairing.player2_name}",
            value=f"{pairing.player1_rating} vs {pairing.player2_rating}",
            inline=False
        )
    return embed


def round_generated_embed(result: RoundGenerationResult) -> discord.Embed:
    if not result.created:
        return discord.Embed(
            title=f"{UIConstants.TROPHY_EMOJI} League Completed",
            description=f"All {result.max_rounds} rounds have been played. No new pairings.",
            color=UIConstants.GOLD_RANK_COLOR
        )
    embed = discord.Embed(
        title="📅 Pairings Generated",
        description=f"Round {result.rounds_played}/{result.max_rounds} with {len(result.pairings)} matches.",
        color=UIConstants.SUCCESS_COLOR
    )
    if result.warning:
        embed.add_field(name="⚠️ Note", value=result.warning, inline=False)
    return embed


def match_history_embed(matches: List[MatchSummary], title: str) -> discord.Embed:
    embed = discord.Embed(title=title, color=UIConstants.DEFAULT_EMBED_COLOR)
    if not matches:
        embed.description = "No matches played yet."
        return embed
    embed.description = "\n".join(
        f"`#{m.match_id}` **{m.winner_name}** def. {m.loser_name} "
        f"{m.winner_score}-{m.loser_score} (+{m.elo_change}) • {m.played_at:%d %b}"
        for m in matches
    )
    return embed


def season_embed(summary: SeasonSummary, started: bool) -> discord.Embed:
    if started:
        description = f"Season **{summary.name}** is underway!"
        if summary.players_reset:
            description += f"\n{summary.players_reset} players reset to starting ratings."
        return discord.Embed(title="🎬 New Season", description=description, color=UIConstants.SUCCESS_COLOR)

    embed = discord.Embed(
        title=f"{UIConstants.TROPHY_EMOJI} Season {summary.name} Complete",
        color=UIConstants.GOLD_RANK_COLOR
    )
    embed.add_field(name="Champion", value=summary.champion_name or "None", inline=True)
    embed.add_field(name="Matches", value=str(summary.total_matches), inline=True)
    embed.add_field(name="Rounds", value=str(summary.total_rounds), inline=True)
    return embed


def seasons_embed(seasons: List[SeasonSummary]) -> discord.Embed:
    embed = discord.Embed(title=f"{UIConstants.TROPHY_EMOJI} Seasons", color=UIConstants.DEFAULT_EMBED_COLOR)
    if not seasons:
        embed.description = "No seasons yet."
        return embed
    lines = []
    for season in seasons:
        if season.status == "active":
            lines.append(f"🟢 **{season.name}** • started {season.start_date:%d %b %Y}")
        else:
            lines.append(
                f"**{season.name}** • {season.start_date:%d %b} - {season.end_date:%d %b %Y} • "
                f"Champion: {season.champion_name or 'None'} ({season.total_matches} matches)"
            )
    embed.description = "\n".join(lines)
    return embed
