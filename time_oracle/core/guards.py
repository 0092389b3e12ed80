"""Guard functions for the time oracle kernel.

One pure function per action. Each returns None iff the action is allowed in
the given PRE-state, otherwise the rejection code. Checks run in the order the
error taxonomy promises: capability first, then pause, then validation.
"""

from __future__ import annotations

from ..state.principals import is_null_principal
from .access import is_active, is_authorized, is_owner
from .errors import REJECT_NOT_OWNER, REJECT_PAUSED, REJECT_UNAUTHORIZED_UPDATER, REJECT_ZERO_PRINCIPAL
from .types import ActionParams, OracleState
from .validation import check_timestamp


def guard_update(state: OracleState, params: ActionParams, now: int) -> str | None:
    if not is_authorized(state, params.caller):
        return REJECT_UNAUTHORIZED_UPDATER
    if not is_active(state):
        return REJECT_PAUSED
    if not state.validation_enabled:
        return None
    return check_timestamp(
        params.value,
        current=state.timestamp,
        now=now,
        margin_bps=state.drift_margin_bps,
    )


def guard_add_authorized_updater(state: OracleState, params: ActionParams, now: int) -> str | None:
    if not is_owner(state, params.caller):
        return REJECT_NOT_OWNER
    if is_null_principal(params.target):
        return REJECT_ZERO_PRINCIPAL
    return None


def guard_remove_authorized_updater(state: OracleState, params: ActionParams, now: int) -> str | None:
    if not is_owner(state, params.caller):
        return REJECT_NOT_OWNER
    return None


def guard_pause(state: OracleState, params: ActionParams, now: int) -> str | None:
    if not is_owner(state, params.caller):
        return REJECT_NOT_OWNER
    return None


def guard_unpause(state: OracleState, params: ActionParams, now: int) -> str | None:
    if not is_owner(state, params.caller):
        return REJECT_NOT_OWNER
    return None
