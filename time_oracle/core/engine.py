"""Dispatch-table engine for the time oracle kernel.

``step(state, params, now)`` is the single entry point. It:

1. Validates parameter domains and canonicalizes addresses.
2. Dispatches to the correct guard / update / effect functions.
3. Checks all invariants on the post-state.
4. Returns a ``StepResult`` (accepted or rejected with reason).

A rejected step never carries a state: callers keep their PRE-state, so a
rejection has no observable effect.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable

from ..state.principals import ZERO_ADDRESS, canonical_address, is_null_principal
from .effects import (
    effect_add_authorized_updater,
    effect_pause,
    effect_remove_authorized_updater,
    effect_unpause,
    effect_update,
)
from .errors import (
    REJECT_INVALID_TIMESTAMP,
    REJECT_NOT_OWNER,
    REJECT_PARAM_DOMAIN,
    REJECT_PAUSED,
    REJECT_TOO_FAR_IN_FUTURE,
    REJECT_TOO_FAR_IN_PAST,
    REJECT_UNAUTHORIZED_UPDATER,
    REJECT_ZERO_PRINCIPAL,
    InvalidTimestamp,
    NotOwner,
    OracleError,
    OracleInvariantError,
    OracleParamError,
    OraclePausedError,
    TimestampValidationFailed,
    UnauthorizedUpdater,
    ZeroPrincipal,
)
from .guards import (
    guard_add_authorized_updater,
    guard_pause,
    guard_remove_authorized_updater,
    guard_unpause,
    guard_update,
)
from .invariants import check_all
from .types import MAX_U256, Action, ActionParams, Effect, OracleState, StepResult
from .updates import (
    apply_add_authorized_updater,
    apply_pause,
    apply_remove_authorized_updater,
    apply_unpause,
    apply_update,
)

GuardFn = Callable[[OracleState, ActionParams, int], "str | None"]
UpdateFn = Callable[[OracleState, ActionParams, int], OracleState]
EffectFn = Callable[[OracleState, OracleState, ActionParams, int], "Effect | None"]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.UPDATE: (
        guard_update, apply_update, effect_update,
    ),
    Action.ADD_AUTHORIZED_UPDATER: (
        guard_add_authorized_updater, apply_add_authorized_updater, effect_add_authorized_updater,
    ),
    Action.REMOVE_AUTHORIZED_UPDATER: (
        guard_remove_authorized_updater, apply_remove_authorized_updater, effect_remove_authorized_updater,
    ),
    Action.PAUSE: (
        guard_pause, apply_pause, effect_pause,
    ),
    Action.UNPAUSE: (
        guard_unpause, apply_unpause, effect_unpause,
    ),
}

_TARGETED_ACTIONS = (Action.ADD_AUTHORIZED_UPDATER, Action.REMOVE_AUTHORIZED_UPDATER)


def _is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= MAX_U256


def _normalize_params(params: ActionParams, now: object) -> tuple[ActionParams | None, str | None]:
    """Check parameter domains and canonicalize addresses. Returns (params, rejection)."""
    if not _is_u256(now) or now == 0:
        return None, f"{REJECT_PARAM_DOMAIN}:now"
    try:
        caller = canonical_address(params.caller, name="caller")
    except (TypeError, ValueError):
        return None, f"{REJECT_PARAM_DOMAIN}:caller"

    target = params.target
    if params.action in _TARGETED_ACTIONS:
        if is_null_principal(target):
            target = ZERO_ADDRESS
        else:
            try:
                target = canonical_address(target, name="target")
            except (TypeError, ValueError):
                return None, f"{REJECT_PARAM_DOMAIN}:target"

    if params.action == Action.UPDATE and not _is_u256(params.value):
        return None, f"{REJECT_PARAM_DOMAIN}:value"

    return replace(params, caller=caller, target=target), None


def step(state: OracleState, params: ActionParams, now: int) -> StepResult:
    """Execute one action against the given state at wall-clock second `now`.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with a ``rejection`` reason string.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(accepted=False, rejection=f"unknown_action:{params.action}")

    normalized, domain_err = _normalize_params(params, now)
    if domain_err is not None or normalized is None:
        return StepResult(accepted=False, rejection=domain_err)

    guard_fn, update_fn, effect_fn = entry

    rejection = guard_fn(state, normalized, now)
    if rejection is not None:
        return StepResult(accepted=False, rejection=rejection)

    new_state = update_fn(state, normalized, now)

    violations = check_all(new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=f"invariant:{','.join(violations)}",
        )

    effect = effect_fn(state, new_state, normalized, now)
    return StepResult(accepted=True, state=new_state, effect=effect)


def error_for_rejection(state: OracleState, params: ActionParams, reason: str) -> OracleError:
    """Build the typed exception matching a ``step()`` rejection code."""
    if reason.startswith(f"{REJECT_PARAM_DOMAIN}:"):
        return OracleParamError(reason.split(":", 1)[1])
    if reason.startswith("invariant:"):
        return OracleInvariantError(reason.removeprefix("invariant:").split(","))
    if reason == REJECT_NOT_OWNER:
        return NotOwner(params.caller)
    if reason == REJECT_UNAUTHORIZED_UPDATER:
        return UnauthorizedUpdater(params.caller)
    if reason == REJECT_ZERO_PRINCIPAL:
        return ZeroPrincipal()
    if reason == REJECT_PAUSED:
        return OraclePausedError()
    if reason == REJECT_INVALID_TIMESTAMP:
        return InvalidTimestamp(params.value, state.timestamp)
    if reason == REJECT_TOO_FAR_IN_FUTURE:
        return TimestampValidationFailed("too far in future", code=REJECT_TOO_FAR_IN_FUTURE)
    if reason == REJECT_TOO_FAR_IN_PAST:
        return TimestampValidationFailed("too far in past", code=REJECT_TOO_FAR_IN_PAST)
    return OracleError(reason)


def step_or_raise(state: OracleState, params: ActionParams, now: int) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        OracleParamError: Parameter outside its domain.
        NotOwner / UnauthorizedUpdater: Caller lacks the capability.
        ZeroPrincipal: Null address passed as updater.
        OraclePausedError: Update attempted while paused.
        InvalidTimestamp / TimestampValidationFailed: Validation stage rejected the value.
        OracleInvariantError: Post-state violates one or more invariants.
    """
    result = step(state, params, now)
    if result.accepted:
        return result
    raise error_for_rejection(state, params, result.rejection or "")
