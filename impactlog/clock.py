from datetime import datetime
from typing import Callable

# Anything returning the current naive local datetime.
Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


def fixed_clock(moment: datetime) -> Clock:
    """Clock pinned to ``moment``."""

    def _now() -> datetime:
        return moment

    return _now
