"""
Timestamp validation policy.

A candidate value is checked against the stored timestamp and against the
environment's own clock `W = now * 1000` (milliseconds):

1. zero                                  -> invalid_timestamp
2. above  W * (10_000 + margin) / 10_000 -> validation_failed:future
3. below  W * (10_000 - margin) / 10_000 -> validation_failed:past
4. below the stored timestamp            -> invalid_timestamp

The bounds are exact for integer candidates: the upper bound is floored and
the lower bound is ceiled, so `v > W * 1.02` and `v < W * 0.98` hold with real
arithmetic.
"""

from __future__ import annotations

from .errors import REJECT_INVALID_TIMESTAMP, REJECT_TOO_FAR_IN_FUTURE, REJECT_TOO_FAR_IN_PAST
from .types import BPS_DENOMINATOR, MILLIS_PER_SECOND


def wall_clock_millis(now: int) -> int:
    return now * MILLIS_PER_SECOND


def drift_bounds(now: int, margin_bps: int) -> tuple[int, int]:
    """Return the inclusive `(lower, upper)` millisecond window accepted at wall-clock `now`."""
    if margin_bps < 0 or margin_bps > BPS_DENOMINATOR:
        raise ValueError(f"margin_bps must be in [0, {BPS_DENOMINATOR}]: {margin_bps}")
    w = wall_clock_millis(now)
    upper = (w * (BPS_DENOMINATOR + margin_bps)) // BPS_DENOMINATOR
    lower = -((-w * (BPS_DENOMINATOR - margin_bps)) // BPS_DENOMINATOR)
    return lower, upper


def check_timestamp(value: int, *, current: int, now: int, margin_bps: int) -> str | None:
    """Return the rejection code for `value`, or None when it is acceptable."""
    if value == 0:
        return REJECT_INVALID_TIMESTAMP
    lower, upper = drift_bounds(now, margin_bps)
    if value > upper:
        return REJECT_TOO_FAR_IN_FUTURE
    if value < lower:
        return REJECT_TOO_FAR_IN_PAST
    if value < current:
        return REJECT_INVALID_TIMESTAMP
    return None
