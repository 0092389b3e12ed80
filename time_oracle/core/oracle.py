"""
Oracle read queries.

This module is intentionally small and pure:
- The functional core answers queries deterministically from a state snapshot.
- The imperative shell is responsible for reading the wall clock.

Queries never fail on well-typed input and never mutate state.
"""

from __future__ import annotations

from ..state.principals import canonical_address
from .access import can_update, is_authorized
from .types import OracleState


def latest(state: OracleState) -> int:
    """Return the latest accepted timestamp (milliseconds)."""
    return state.timestamp


def last_update_time(state: OracleState) -> int:
    """Return the wall-clock second at which `latest()` was accepted."""
    return state.last_update_time


def is_stale(state: OracleState, max_age_seconds: int, current_timestamp: int) -> bool:
    """Return True if more than `max_age_seconds` passed since the last accepted update."""
    if max_age_seconds < 0:
        raise ValueError(f"max_age_seconds must be non-negative: {max_age_seconds}")
    if current_timestamp < 0:
        raise ValueError(f"current_timestamp must be non-negative: {current_timestamp}")
    return current_timestamp > state.last_update_time + max_age_seconds


def is_authorized_updater(state: OracleState, address: str) -> bool:
    """True for the owner and for members of the updater set; False for malformed input."""
    try:
        canonical = canonical_address(address)
    except (TypeError, ValueError):
        return False
    return is_authorized(state, canonical)


def can_update_now(state: OracleState, address: str) -> bool:
    """True when an `update` from `address` would pass both the authorization and the pause gate."""
    try:
        canonical = canonical_address(address)
    except (TypeError, ValueError):
        return False
    return can_update(state, canonical)
