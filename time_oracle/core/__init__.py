"""Time oracle kernel: authorization, validation and staleness state machine.

- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks.

Public API:
- `initial_state(owner, now) -> OracleState`
- `step(state, params, now) -> StepResult`
- `step_or_raise(state, params, now) -> StepResult` (raises on rejection)
- queries: `latest`, `last_update_time`, `is_stale`, `is_authorized_updater`
"""

from .engine import step, step_or_raise
from .errors import (
    CalldataError,
    InvalidTimestamp,
    NotOwner,
    OracleAuthError,
    OracleError,
    OracleInvariantError,
    OracleParamError,
    OraclePausedError,
    OracleValidationError,
    TimestampValidationFailed,
    UnauthorizedUpdater,
    ZeroPrincipal,
)
from .oracle import can_update_now, is_authorized_updater, is_stale, last_update_time, latest
from .state import initial_state, state_digest, state_from_dict, state_to_dict
from .types import Action, ActionParams, Effect, Event, OracleState, StepResult

__all__ = [
    "step",
    "step_or_raise",
    "initial_state",
    "state_digest",
    "state_from_dict",
    "state_to_dict",
    "latest",
    "last_update_time",
    "is_stale",
    "is_authorized_updater",
    "can_update_now",
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "OracleState",
    "StepResult",
    "OracleError",
    "OracleAuthError",
    "NotOwner",
    "UnauthorizedUpdater",
    "ZeroPrincipal",
    "OraclePausedError",
    "OracleValidationError",
    "InvalidTimestamp",
    "TimestampValidationFailed",
    "OracleParamError",
    "OracleInvariantError",
    "CalldataError",
]
