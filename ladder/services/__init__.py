"""
Services package for the ping pong ladder bot.

Read-side services and command infrastructure.
"""

from .base import BaseService
from .ladder_queries import LadderQueryService
from .rate_limiter import SimpleRateLimiter

__all__ = ['BaseService', 'LadderQueryService', 'SimpleRateLimiter']
