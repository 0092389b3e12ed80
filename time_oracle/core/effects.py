"""Effect functions for the time oracle kernel.

One pure function per action, evaluated after the update with both the PRE-
and POST-state. Admin actions that did not change state return None, so
idempotent calls succeed silently; `update` always emits `TimeUpdated`.
"""

from __future__ import annotations

from .types import ActionParams, Effect, Event, OracleState


def effect_update(pre: OracleState, post: OracleState, params: ActionParams, now: int) -> Effect | None:
    return Effect(
        event=Event.TIME_UPDATED,
        account=params.caller,
        timestamp=post.timestamp,
        block_time=now,
    )


def effect_add_authorized_updater(
    pre: OracleState, post: OracleState, params: ActionParams, now: int,
) -> Effect | None:
    if pre.authorized_updaters == post.authorized_updaters:
        return None
    return Effect(event=Event.UPDATER_AUTHORIZED, account=params.target, block_time=now)


def effect_remove_authorized_updater(
    pre: OracleState, post: OracleState, params: ActionParams, now: int,
) -> Effect | None:
    if pre.authorized_updaters == post.authorized_updaters:
        return None
    return Effect(event=Event.UPDATER_REVOKED, account=params.target, block_time=now)


def effect_pause(pre: OracleState, post: OracleState, params: ActionParams, now: int) -> Effect | None:
    if pre.paused == post.paused:
        return None
    return Effect(event=Event.PAUSED, account=params.caller, block_time=now)


def effect_unpause(pre: OracleState, post: OracleState, params: ActionParams, now: int) -> Effect | None:
    if pre.paused == post.paused:
        return None
    return Effect(event=Event.UNPAUSED, account=params.caller, block_time=now)
