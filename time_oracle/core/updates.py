"""State transition functions for the time oracle kernel.

One pure function per action. Each returns a new `OracleState` with the
action's updates applied, via `dataclasses.replace()` on the frozen state.
Updates evaluate against the PRE-state and only run after the guard passed.
"""

from __future__ import annotations

from dataclasses import replace

from ..state.principals import is_null_principal
from .types import ActionParams, OracleState


def apply_update(state: OracleState, params: ActionParams, now: int) -> OracleState:
    return replace(state, timestamp=params.value, last_update_time=now)


def apply_add_authorized_updater(state: OracleState, params: ActionParams, now: int) -> OracleState:
    if params.target in state.authorized_updaters:
        return state
    return replace(state, authorized_updaters=state.authorized_updaters | {params.target})


def apply_remove_authorized_updater(state: OracleState, params: ActionParams, now: int) -> OracleState:
    # Removing the null principal or an absent member is a no-op.
    if is_null_principal(params.target) or params.target not in state.authorized_updaters:
        return state
    return replace(state, authorized_updaters=state.authorized_updaters - {params.target})


def apply_pause(state: OracleState, params: ActionParams, now: int) -> OracleState:
    return state if state.paused else replace(state, paused=True)


def apply_unpause(state: OracleState, params: ActionParams, now: int) -> OracleState:
    return state if not state.paused else replace(state, paused=False)
