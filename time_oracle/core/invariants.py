"""Invariant checkers for the time oracle kernel.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass). The engine runs them on
every post-state and rejects the step on any violation.
"""

from __future__ import annotations

from typing import Callable

from ..state.principals import is_canonical_nonzero
from .types import BPS_DENOMINATOR, MAX_U256, OracleState


def _is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= MAX_U256


def inv_timestamp_in_domain(s: OracleState) -> bool:
    if not _is_u256(s.timestamp):
        return False
    # The permissive (validation disabled) policy accepts zero.
    return s.timestamp > 0 or not s.validation_enabled


def inv_last_update_time_positive(s: OracleState) -> bool:
    return _is_u256(s.last_update_time) and s.last_update_time > 0


def inv_owner_canonical_nonzero(s: OracleState) -> bool:
    return is_canonical_nonzero(s.owner)


def inv_updaters_canonical_nonzero(s: OracleState) -> bool:
    return all(is_canonical_nonzero(a) for a in s.authorized_updaters)


def inv_drift_margin_in_range(s: OracleState) -> bool:
    m = s.drift_margin_bps
    return isinstance(m, int) and not isinstance(m, bool) and 0 <= m <= BPS_DENOMINATOR


def inv_flags_are_bool(s: OracleState) -> bool:
    return isinstance(s.paused, bool) and isinstance(s.validation_enabled, bool)


INVARIANTS: dict[str, Callable[[OracleState], bool]] = {
    "timestamp_in_domain": inv_timestamp_in_domain,
    "last_update_time_positive": inv_last_update_time_positive,
    "owner_canonical_nonzero": inv_owner_canonical_nonzero,
    "updaters_canonical_nonzero": inv_updaters_canonical_nonzero,
    "drift_margin_in_range": inv_drift_margin_in_range,
    "flags_are_bool": inv_flags_are_bool,
}


def check_all(s: OracleState) -> list[str]:
    """Return the IDs of all violated invariants (empty list = all pass)."""
    return [name for name, fn in INVARIANTS.items() if not fn(s)]
