"""
Downtime-to-status scoring — pure functions with no side effects.

Maps hours of downtime in a day to an availability percentage and a
green/amber/red status band.

Rounding
--------
Percentages are rounded half-up (``floor(x + 0.5)``). Downtime is clamped
to be non-negative first, so every rounded value is non-negative and this
is the same as round-half-away-from-zero: 94.5 becomes 95 (green) and
44.5 becomes 45 (amber).
"""

import logging
import math
from typing import Any

from .config import (
    AMBER,
    AMBER_MAX_DOWNTIME,
    AMBER_THRESHOLD,
    GREEN,
    GREEN_MAX_DOWNTIME,
    GREEN_SLOPE,
    GREEN_THRESHOLD,
    HOURS_PER_DAY,
    RED,
)
from .utils import safe_float

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for value >= 0."""
    return int(math.floor(value + 0.5))


def clamp_downtime(downtime_hours: Any) -> float:
    """Return downtime as a non-negative float.

    Missing, non-numeric and negative input all become 0. Values above 24
    are kept; the red band saturates at 0% for them.
    """
    value = safe_float(downtime_hours)
    if value is None or value < 0:
        return 0.0
    return value


def percentage_from_downtime(downtime_hours: Any) -> int:
    """Return the availability percentage (0-100) for a day's downtime.

    Bands
    -----
    - downtime <= 1.2   : green, 100 - downtime * 4.17, floored at 95
    - downtime <= 13.2  : amber, linear from 95 down to 45
    - downtime >  13.2  : red, linear from 45 down to 0 at 24 hours
    """
    downtime = clamp_downtime(downtime_hours)

    if downtime <= GREEN_MAX_DOWNTIME:
        return max(GREEN_THRESHOLD, round_half_up(100 - downtime * GREEN_SLOPE))

    if downtime <= AMBER_MAX_DOWNTIME:
        band_width = AMBER_MAX_DOWNTIME - GREEN_MAX_DOWNTIME
        span = GREEN_THRESHOLD - AMBER_THRESHOLD
        return round_half_up(GREEN_THRESHOLD - (downtime - GREEN_MAX_DOWNTIME) / band_width * span)

    remaining = max(0.0, HOURS_PER_DAY - downtime)
    return round_half_up(remaining / (HOURS_PER_DAY - AMBER_MAX_DOWNTIME) * AMBER_THRESHOLD)


def status_from_percentage(percentage: float) -> str:
    """Return 'green', 'amber', or 'red' for a percentage.

    green >= 95 > amber >= 45 > red
    """
    if percentage >= GREEN_THRESHOLD:
        return GREEN
    if percentage >= AMBER_THRESHOLD:
        return AMBER
    return RED


def score(downtime_hours: Any) -> tuple[int, str]:
    """Return (percentage, status) for a day's downtime hours."""
    percentage = percentage_from_downtime(downtime_hours)
    return percentage, status_from_percentage(percentage)
