"""
Clock helpers shared by the cache, the admission controller and the
snapshot store.
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], float]


def monotonic_clock() -> float:
    """Seconds from a monotonic clock, unaffected by wall-clock adjustments."""
    return time.monotonic()


def wall_clock_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def seconds_to_ms(seconds: float) -> int:
    """
    Convert a duration in seconds to whole milliseconds, rounding up.

    Rounding up keeps a positive sub-millisecond duration positive.
    """
    ms = seconds * 1000
    whole = int(ms)
    return whole + 1 if ms > whole else whole


def format_epoch_ms(epoch_ms: int) -> str:
    """
    Format an epoch-milliseconds timestamp for logging.

    Args:
        epoch_ms: Milliseconds since the epoch

    Returns:
        ISO8601 formatted UTC string
    """
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).isoformat()


def elapsed_ms(start: float, end: Optional[float] = None, clock: Clock = monotonic_clock) -> int:
    """
    Milliseconds elapsed between two readings of the same clock.

    Args:
        start: Start reading
        end: End reading, defaults to the clock's current value
        clock: Clock used when ``end`` is omitted

    Returns:
        Elapsed time in whole milliseconds
    """
    if end is None:
        end = clock()
    return int((end - start) * 1000)
