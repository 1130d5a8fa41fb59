"""Injectable clock.

A clock is any zero-argument callable returning an aware datetime.
The default is django.utils.timezone.now.
"""

from datetime import datetime, timedelta
from typing import Callable

from django.utils import timezone

Clock = Callable[[], datetime]

system_clock: Clock = timezone.now


class FixedClock:
    """Clock pinned to a given instant, for tests and replays."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant

    def advance(self, delta: timedelta) -> None:
        self.instant = self.instant + delta
