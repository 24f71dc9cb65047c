from datetime import date, datetime, timedelta
from typing import Optional, Sequence

import pytz

from ladder.config import Config


def league_now(timezone_name: Optional[str] = None) -> datetime:
    """Current time in the league's pairing timezone."""
    tz = pytz.timezone(timezone_name or Config.PAIRING_TIMEZONE)
    return datetime.now(tz)


def is_pairing_due(now: datetime, days: Sequence[int], hour: int,
                   last_run: Optional[date] = None) -> bool:
    """
    True when pairings should fire at `now`.

    Pairings fire once per scheduled day, on the first check at or after the
    configured hour.
    """
    if now.weekday() not in days:
        return False
    if now.hour < hour:
        return False
    return last_run != now.date()


def next_pairing_time(now: datetime, days: Sequence[int], hour: int) -> datetime:
    """Next scheduled pairing time strictly after `now`, in now's timezone."""
    if not days:
        raise ValueError("At least one pairing day is required")

    naive = now.replace(tzinfo=None)
    for offset in range(8):
        candidate = (naive + timedelta(days=offset)).replace(hour=hour, minute=0, second=0, microsecond=0)
        if candidate.weekday() in days and candidate > naive:
            if now.tzinfo is not None and hasattr(now.tzinfo, 'localize'):
                return now.tzinfo.localize(candidate)
            return candidate.replace(tzinfo=now.tzinfo)
    raise ValueError("No pairing time found in the next week")
