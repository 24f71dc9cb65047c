import random
from typing import List, Optional

from ladder.constants import LeagueConstants


def trash_talk_options(winner_name: str, loser_name: str, elo_change: int,
                       winner_score: int, loser_score: int) -> List[str]:
    """Every message eligible for this result"""
    score = f"{winner_score}-{loser_score}"
    change = f"(+{elo_change} ELO)"
    messages = [
        f"🏓 **{winner_name}** absolutely DEMOLISHED **{loser_name}** {score}! {change}",
        f"🔥 **{winner_name}** served up a beating to **{loser_name}**! Final score: {score} {change}",
        f"💪 **{winner_name}** proved who's boss, crushing **{loser_name}** {score}! {change}",
        f"⚡ **{winner_name}** showed no mercy against **{loser_name}**! {score} {change}",
        f"🎯 **{winner_name}** dominated the table, defeating **{loser_name}** {score}! {change}",
        f"🏆 Victory for **{winner_name}**! **{loser_name}** goes down {score} {change}",
        f"💥 SMASHED! **{winner_name}** takes down **{loser_name}** {score}! {change}",
        f"🎪 **{winner_name}** put on a show, beating **{loser_name}** {score}! {change}",
    ]

    if elo_change > LeagueConstants.UPSET_THRESHOLD:
        messages.append(
            f"🚀 UPSET ALERT! **{winner_name}** shocked everyone by beating **{loser_name}** {score}! {change}"
        )

    if winner_score == LeagueConstants.GAME_POINT and loser_score <= LeagueConstants.BLOWOUT_MAX_LOSER_SCORE:
        messages.append(
            f"😱 TOTAL DESTRUCTION! **{winner_name}** embarrassed **{loser_name}** {score}! "
            f"Better luck next time! {change}"
        )

    return messages


def generate_trash_talk(winner_name: str, loser_name: str, elo_change: int,
                        winner_score: int, loser_score: int,
                        rng: Optional[random.Random] = None) -> str:
    """Pick a random celebratory message for a reported match."""
    messages = trash_talk_options(winner_name, loser_name, elo_change, winner_score, loser_score)
    chooser = rng or random
    return chooser.choice(messages)
