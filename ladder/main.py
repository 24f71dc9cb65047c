import asyncio
import logging
import traceback
from typing import Optional

import discord
from discord.ext import commands
from discord import app_commands

from ladder.config import Config
from ladder.database.database import Database
from ladder.operations import MatchLedger, PlayerOperations, RoundLifecycle
from ladder.services import LadderQueryService, SimpleRateLimiter
from ladder.utils.logger import setup_logger

class LadderBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True

        super().__init__(
            command_prefix=Config.COMMAND_PREFIX,
            intents=intents,
            help_command=None
        )

        self.tree.on_error = self.on_app_command_error

        self.db: Optional[Database] = None
        self.player_ops: Optional[PlayerOperations] = None
        self.round_lifecycle: Optional[RoundLifecycle] = None
        self.match_ledger: Optional[MatchLedger] = None
        self.queries: Optional[LadderQueryService] = None
        self.rate_limiter = SimpleRateLimiter()
        self.logger = setup_logger(__name__)

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.logger.info("Setting up Ladder Bot...")

        self.db = Database()
        await self.db.initialize()

        self.player_ops = PlayerOperations(self.db)
        self.round_lifecycle = RoundLifecycle(self.db)
        self.match_ledger = MatchLedger(self.db, self.round_lifecycle)
        self.queries = LadderQueryService(self.db.session_factory)
        self.logger.info(
            f"League: {Config.LEAGUE_DURATION_WEEKS} weeks, {Config.GAMES_PER_WEEK} games/week "
            f"({self.round_lifecycle.max_rounds} rounds)"
        )

        await self.load_cogs()
        await self._sync_commands()

        self.logger.info("Ladder Bot setup complete!")

    async def load_cogs(self):
        """Load all cogs"""
        cogs_to_load = [
            'ladder.cogs.ladder',
            'ladder.cogs.admin',
            'ladder.cogs.scheduler',
        ]

        for cog in cogs_to_load:
            try:
                await self.load_extension(cog)
                self.logger.info(f"Loaded cog: {cog}")
            except Exception as e:
                self.logger.error(f"Failed to load cog {cog}: {e}", exc_info=True)

    async def _sync_commands(self):
        """Sync slash commands with Discord"""
        if not self.tree.get_commands():
            self.logger.warning("No application commands found to sync. Check for cog loading errors.")
            return

        try:
            guild_ids = Config.get_guild_ids()
            if guild_ids:
                for guild_id in guild_ids:
                    try:
                        guild = discord.Object(id=guild_id)
                        self.tree.copy_global_to(guild=guild)
                        synced = await self.tree.sync(guild=guild)
                        self.logger.info(f"Synced {len(synced)} command(s) to guild {guild_id}")
                    except discord.errors.HTTPException as e:
                        self.logger.error(f"HTTP error syncing to guild {guild_id}. Status: {e.status}", exc_info=True)
            else:
                # Global sync (can take up to 1 hour to propagate)
                synced = await self.tree.sync()
                self.logger.info(f"Synced {len(synced)} command(s) globally")
        except Exception as e:
            self.logger.error(f"Failed to sync commands: {e}", exc_info=True)

    async def notify_pairings(self):
        """DM every paired player their opponent for the active round"""
        round_view = await self.queries.get_current_pairings()
        if round_view is None:
            return

        sent = 0
        for pairing in round_view.pairings:
            for player_id, opponent_name, opponent_rating in (
                (pairing.player1_id, pairing.player2_name, pairing.player2_rating),
                (pairing.player2_id, pairing.player1_name, pairing.player1_rating),
            ):
                player = await self.db.get_player_by_id(player_id)
                if player is None:
                    continue
                try:
                    user = self.get_user(player.external_id) or await self.fetch_user(player.external_id)
                    await user.send(
                        f"🏓 **New pairing for round {round_view.round_id}!**\n"
                        f"Your opponent: **{opponent_name}** (ELO {opponent_rating})\n"
                        f"Report the result with `/report` once you've played."
                    )
                    sent += 1
                except discord.errors.HTTPException as e:
                    self.logger.warning(f"Could not DM player {player_id}: {e}")

        self.logger.info(f"✉️ Sent {sent} pairing DMs for round {round_view.round_id}")

    async def on_ready(self):
        """Called when the bot is ready"""
        self.logger.info(f'{self.user} has connected to Discord!')
        await self.change_presence(activity=discord.Game(name="Ping Pong Ladder | /leaderboard"))

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for slash commands"""
        command_name = interaction.command.name if interaction.command else 'Unknown'
        if isinstance(error, app_commands.CheckFailure):
            self.logger.info(f"Permission denied for command '{command_name}' by user {interaction.user}")
            message = "❌ This command is restricted to the ladder owner."
        else:
            self.logger.error(f"Error in app command '{command_name}': {error}", exc_info=True)
            message = "❌ An unexpected error occurred while processing your command."

        try:
            embed = discord.Embed(description=message, color=discord.Color.red())
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.errors.HTTPException as e:
            self.logger.error(f"Failed to send error response: {e}")

    async def close(self):
        """Cleanup when bot is shutting down"""
        self.logger.info("Shutting down Ladder Bot...")

        if self.db:
            await self.db.close()

        await super().close()

async def main():
    """Main entry point"""
    Config.validate()

    bot = LadderBot()

    try:
        await bot.start(Config.DISCORD_TOKEN)
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
    finally:
        await bot.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
