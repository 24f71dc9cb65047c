import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Ladder bot configuration settings"""

    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///ladder.db')

    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    # Rating settings
    STARTING_ELO = int(os.getenv('STARTING_ELO', 1250))

    # League settings
    LEAGUE_DURATION_WEEKS = int(os.getenv('LEAGUE_DURATION_WEEKS', 4))
    GAMES_PER_WEEK = int(os.getenv('GAMES_PER_WEEK', 2))

    # Pairing schedule (weekday numbers, Monday=0)
    PAIRING_DAYS = os.getenv('PAIRING_DAYS', '2,4')  # Wednesday and Friday
    PAIRING_HOUR = int(os.getenv('PAIRING_HOUR', 9))
    PAIRING_TIMEZONE = os.getenv('PAIRING_TIMEZONE', 'UTC')

    @classmethod
    def max_rounds(cls) -> int:
        """Total rounds a league may create before it is complete"""
        return cls.LEAGUE_DURATION_WEEKS * cls.GAMES_PER_WEEK

    @classmethod
    def get_pairing_days(cls):
        """Get list of weekdays on which pairings are generated"""
        try:
            days = [int(day.strip()) for day in cls.PAIRING_DAYS.split(',') if day.strip()]
        except ValueError:
            raise ValueError("PAIRING_DAYS must be comma-separated integers")
        if any(day < 0 or day > 6 for day in days):
            raise ValueError("PAIRING_DAYS values must be between 0 (Monday) and 6 (Sunday)")
        return days

    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            # Multi-guild support: comma-separated IDs
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.DISCORD_GUILD_ID and not cls.DISCORD_GUILD_IDS:
            raise ValueError("Either DISCORD_GUILD_ID or DISCORD_GUILD_IDS is required")
        if not cls.OWNER_DISCORD_ID:
            raise ValueError("OWNER_DISCORD_ID is required")
        if cls.max_rounds() <= 0:
            raise ValueError("LEAGUE_DURATION_WEEKS and GAMES_PER_WEEK must be positive")
        cls.get_pairing_days()
