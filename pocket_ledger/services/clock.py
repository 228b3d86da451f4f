"""
Clock Collaborator

Date presets ("today", "this week", ...) are evaluated against the local
calendar of the machine at query time. The clock is injected so that
queries are reproducible in tests.

Calendar boundaries follow the zone's rules at each instant, not the UTC
offset in force right now: a December record is judged in winter time
even when the query runs in summer.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone, tzinfo
from typing import Optional


def to_local(dt: datetime, tz: Optional[tzinfo]) -> datetime:
    """
    Convert an aware datetime into ``tz``.

    ``tz=None`` means the machine's local zone, with the offset that was in
    force at ``dt`` itself.
    """
    return dt.astimezone(tz)


def localize(naive: datetime, tz: Optional[tzinfo]) -> datetime:
    """Attach ``tz`` to a naive local wall-clock time (None: machine zone)."""
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


class Clock(ABC):
    """Source of the current instant and the local timezone."""

    @abstractmethod
    def now(self) -> datetime:
        """Current instant as an aware datetime in local time."""
        pass

    @property
    def tz(self) -> Optional[tzinfo]:
        """
        Zone used for calendar boundaries.

        None stands for the machine's local zone, including its daylight
        saving rules.
        """
        return self.now().tzinfo


class SystemClock(Clock):
    """Wall clock in the machine's local timezone."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone()

    @property
    def tz(self) -> Optional[tzinfo]:
        return None


class FixedClock(Clock):
    """
    Clock frozen at a given instant.

    A naive instant is taken to be in ``tz`` (UTC when not given). Pass a
    ``zoneinfo.ZoneInfo`` as ``tz`` to get daylight saving rules.
    """

    def __init__(self, instant: datetime, tz: Optional[tzinfo] = None):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=tz or timezone.utc)
        elif tz is not None:
            instant = instant.astimezone(tz)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance_to(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self._instant.tzinfo)
        self._instant = instant
