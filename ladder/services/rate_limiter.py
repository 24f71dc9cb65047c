"""
Sliding-window rate limiting for ladder commands.

Each user:command key keeps the timestamps of its recent calls. History
lives in memory and is bounded by the ladder's size times its command count.
"""

import asyncio
import logging
import math
import time
from collections import defaultdict, deque
from functools import wraps
from typing import Deque, Dict, Tuple

from ladder.config import Config
from ladder.constants import RateLimitConstants

logger = logging.getLogger(__name__)


class SimpleRateLimiter:
    """In-memory sliding-window limiter with an injectable clock."""

    def __init__(self, clock=time.monotonic):
        self._calls: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._clock = clock

    @staticmethod
    def _key(user_id: int, command: str) -> str:
        return f"{user_id}:{command}"

    def _prune(self, calls: Deque[float], now: float, window: int) -> None:
        while calls and calls[0] <= now - window:
            calls.popleft()

    async def is_allowed(self, user_id: int, command: str, limit: int, window: int) -> bool:
        """Record and allow the call if the user is under `limit` calls per `window` seconds"""
        if limit <= 0 or window <= 0:
            return False

        key = self._key(user_id, command)
        now = self._clock()
        async with self._lock:
            calls = self._calls[key]
            self._prune(calls, now, window)
            if len(calls) >= limit:
                logger.debug(f"Rate limit hit for {key} ({limit}/{window}s)")
                return False
            calls.append(now)
            return True

    async def retry_after(self, user_id: int, command: str, window: int) -> int:
        """Whole seconds until the oldest call in the window expires (0 when free)"""
        now = self._clock()
        async with self._lock:
            calls = self._calls.get(self._key(user_id, command))
            if not calls:
                return 0
            self._prune(calls, now, window)
            if not calls:
                return 0
            return max(0, math.ceil(calls[0] + window - now))


def rate_limit(command: str, limits: Tuple[int, int] = RateLimitConstants.DEFAULT):
    """
    Rate limit a cog app command to `limits` = (calls, window seconds).

    The ladder owner is never limited.
    """
    limit, window = limits

    def decorator(func):
        @wraps(func)
        async def wrapper(self, interaction, *args, **kwargs):
            if interaction.user.id == Config.OWNER_DISCORD_ID:
                return await func(self, interaction, *args, **kwargs)

            limiter = self.bot.rate_limiter
            if not await limiter.is_allowed(interaction.user.id, command, limit, window):
                wait = await limiter.retry_after(interaction.user.id, command, window)
                await interaction.response.send_message(
                    f"⏰ Slow down! You can use `/{command}` again in {wait}s.",
                    ephemeral=True
                )
                return

            return await func(self, interaction, *args, **kwargs)
        return wrapper
    return decorator
