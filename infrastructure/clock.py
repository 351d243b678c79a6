"""Clock implementations"""
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from domain.clock import Clock


class SystemClock(Clock):
    """Wall clock in the deployment's canonical timezone"""

    def __init__(self, timezone: str = "UTC"):
        self._tz = ZoneInfo(timezone)

    def today(self) -> date:
        return self.now().date()

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock(Clock):
    """Clock pinned to a given date, for tests and replays"""

    def __init__(self, current_date: date, current_time: Optional[time] = None):
        self._date = current_date
        self._time = current_time or time(12, 0)

    def today(self) -> date:
        return self._date

    def now(self) -> datetime:
        return datetime.combine(self._date, self._time)

    def advance(self, days: int = 1) -> None:
        self._date += timedelta(days=days)

    def set(self, current_date: date) -> None:
        self._date = current_date
