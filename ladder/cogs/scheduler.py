"""
Scheduler Cog - background pairing trigger

Checks every few minutes whether a scheduled pairing day and hour has been
reached and, if so, generates the next round. The same operation backs the
admin "force pairings" command; RoundLifecycle serializes the two.
"""

from discord.ext import commands, tasks

from ladder.config import Config
from ladder.utils.exceptions import LadderError
from ladder.utils.schedule import league_now, is_pairing_due, next_pairing_time
from ladder.utils.logger import setup_logger

logger = setup_logger(__name__)


class SchedulerCog(commands.Cog):
    """Scheduled pairing generation"""

    def __init__(self, bot):
        self.bot = bot
        self.pairing_days = Config.get_pairing_days()
        self.last_run = None
        self.scheduled_pairings.start()
        next_run = next_pairing_time(league_now(), self.pairing_days, Config.PAIRING_HOUR)
        logger.info(
            f"SchedulerCog: pairings on days {self.pairing_days} at "
            f"{Config.PAIRING_HOUR:02d}:00 {Config.PAIRING_TIMEZONE}, next at {next_run:%a %d %b %H:%M}"
        )

    def cog_unload(self):
        self.scheduled_pairings.cancel()
        logger.info("SchedulerCog: background task stopped")

    @tasks.loop(minutes=5)
    async def scheduled_pairings(self):
        now = league_now()
        if not is_pairing_due(now, self.pairing_days, Config.PAIRING_HOUR, self.last_run):
            return

        self.last_run = now.date()
        logger.info("🗓️ Generating scheduled pairings...")
        try:
            result = await self.bot.round_lifecycle.generate_round()
        except LadderError as e:
            logger.error(f"Scheduled pairing skipped: {e}")
            return
        except Exception as e:
            logger.error(f"Error in scheduled pairing task: {e}", exc_info=True)
            return

        if result.created:
            await self.bot.notify_pairings()

    @scheduled_pairings.before_loop
    async def before_scheduled_pairings(self):
        """Wait for bot to be ready before starting the schedule"""
        await self.bot.wait_until_ready()


async def setup(bot):
    await bot.add_cog(SchedulerCog(bot))
