"""
Auction clock: ACTIVE/ENDED lifecycle derived from a fixed end time.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

ENDED_DISPLAY = "Auction ended"


class ClockState(Enum):
    """Auction lifecycle states"""

    ACTIVE = "active"
    ENDED = "ended"


@dataclass(frozen=True)
class Remaining:
    """Time left in an active auction"""

    days: int
    hours: int
    minutes: int
    seconds: int

    @classmethod
    def from_millis(cls, delta_ms: int) -> "Remaining":
        return cls(
            days=delta_ms // MS_PER_DAY,
            hours=(delta_ms % MS_PER_DAY) // MS_PER_HOUR,
            minutes=(delta_ms % MS_PER_HOUR) // MS_PER_MINUTE,
            seconds=(delta_ms % MS_PER_MINUTE) // MS_PER_SECOND,
        )

    def display(self) -> str:
        return f"{self.days}d {self.hours}h {self.minutes}m {self.seconds}s"


@dataclass(frozen=True)
class ClockReading:
    """One evaluation of the auction clock"""

    state: ClockState
    remaining_ms: int
    remaining: Optional[Remaining] = None

    @property
    def ended(self) -> bool:
        return self.state is ClockState.ENDED

    @property
    def display(self) -> str:
        if self.remaining is None:
            return ENDED_DISPLAY
        return self.remaining.display()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def read_clock(auction_end: datetime, now: datetime) -> ClockReading:
    """
    Evaluate the clock at ``now``.

    Args:
        auction_end: Timezone-aware auction end
        now: Timezone-aware current time

    Returns:
        ACTIVE reading with remaining time while ``auction_end - now > 0``,
        otherwise ENDED
    """
    delta_ms = (auction_end - now) // timedelta(milliseconds=1)
    if delta_ms <= 0:
        return ClockReading(state=ClockState.ENDED, remaining_ms=0)
    return ClockReading(
        state=ClockState.ACTIVE,
        remaining_ms=delta_ms,
        remaining=Remaining.from_millis(delta_ms),
    )


class AuctionClock:
    """
    Latched auction clock.

    Once a reading reports ENDED the clock stays ENDED, even if the time
    source later moves backwards.
    """

    def __init__(
        self,
        auction_end: datetime,
        now_fn: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize auction clock.

        Args:
            auction_end: Timezone-aware auction end
            now_fn: Time source (injectable for tests)
        """
        self.auction_end = auction_end
        self._now_fn = now_fn
        self._ended = False
        self._end_listeners: List[Callable[[], None]] = []
        self._last: ClockReading = self.tick()

    @property
    def state(self) -> ClockState:
        return ClockState.ENDED if self._ended else ClockState.ACTIVE

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def last_reading(self) -> ClockReading:
        return self._last

    def on_ended(self, listener: Callable[[], None]):
        """Register a callback fired once, on the ACTIVE -> ENDED transition."""
        if self._ended:
            return
        self._end_listeners.append(listener)

    def tick(self) -> ClockReading:
        """
        Recompute the reading from the time source.

        Returns:
            Latest reading
        """
        reading = read_clock(self.auction_end, self._now_fn())

        if self._ended:
            reading = ClockReading(state=ClockState.ENDED, remaining_ms=0)
        elif reading.ended:
            self._ended = True
            logger.info(f"[COUNTDOWN] Auction ended at {self.auction_end.isoformat()}")
            listeners, self._end_listeners = self._end_listeners, []
            for listener in listeners:
                listener()

        self._last = reading
        return reading
