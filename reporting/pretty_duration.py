from __future__ import annotations

import math
from typing import List


SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 60 * SECONDS_PER_MINUTE
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def _join(parts: List[str]) -> str:
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2:
        return f"{parts[0]} and {parts[1]}"
    return ", ".join(parts[:-1]) + f", and {parts[-1]}"


def format_duration(seconds: float) -> str:
    """
    Human readable duration.

    Rounding rule: the value is floored to whole milliseconds. Below one
    minute the seconds are shown with their milliseconds, from one minute
    on whole seconds are shown, and from one hour on the leftover seconds
    are dropped (floored), never rounded up to the next minute.

    >>> format_duration(3725.9)
    '1 hour and 2 minutes'
    """
    if seconds < 0 or not math.isfinite(seconds):
        raise ValueError(f"duration must be non-negative and finite, got {seconds!r}")

    total_millis = int(seconds * 1000)
    total_secs, millis = divmod(total_millis, 1000)

    days, rest = divmod(total_secs, SECONDS_PER_DAY)
    hours, rest = divmod(rest, SECONDS_PER_HOUR)
    minutes, secs = divmod(rest, SECONDS_PER_MINUTE)

    if days == 0 and hours == 0 and minutes == 0:
        if millis == 0:
            return _plural(secs, "second")
        return f"{secs}.{millis:03d} seconds"

    if days == 0 and hours == 0:
        parts = [_plural(minutes, "minute")]
        if secs:
            parts.append(_plural(secs, "second"))
        return _join(parts)

    parts = []
    if days:
        parts.append(_plural(days, "day"))
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(_plural(minutes, "minute"))
    return _join(parts)
