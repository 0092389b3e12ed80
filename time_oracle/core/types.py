"""Data types for the time oracle kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- `timestamp` is milliseconds since the Unix epoch (u256).
- `last_update_time` and every `now` argument are wall-clock seconds (u256),
  as observed by the execution environment.
- `*_bps` rates are basis points (1/10_000).
- addresses are canonical 20-byte hex strings (see `state.principals`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import FrozenSet

from ..state.principals import Address


MAX_U256: int = 2**256 - 1
BPS_DENOMINATOR: int = 10_000
MILLIS_PER_SECOND: int = 1_000
DEFAULT_DRIFT_MARGIN_BPS: int = 200


@unique
class Action(Enum):
    """One member per state-changing operation."""
    UPDATE = "update"
    ADD_AUTHORIZED_UPDATER = "add_authorized_updater"
    REMOVE_AUTHORIZED_UPDATER = "remove_authorized_updater"
    PAUSE = "pause"
    UNPAUSE = "unpause"


@unique
class Event(Enum):
    """Notifications emitted by accepted steps."""
    TIME_UPDATED = "TimeUpdated"
    UPDATER_AUTHORIZED = "UpdaterAuthorized"
    UPDATER_REVOKED = "UpdaterRevoked"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"


@dataclass(frozen=True)
class OracleState:
    """Complete oracle state: the timestamp plus its authorization envelope."""

    owner: Address
    timestamp: int
    last_update_time: int

    # Authorization
    authorized_updaters: FrozenSet[Address] = field(default_factory=frozenset)
    paused: bool = False

    # Validation policy
    validation_enabled: bool = True
    drift_margin_bps: int = DEFAULT_DRIFT_MARGIN_BPS


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields keep their defaults."""

    action: Action
    caller: Address
    value: int = 0        # update
    target: Address = ""  # add_authorized_updater / remove_authorized_updater


@dataclass(frozen=True)
class Effect:
    """Notification produced by a state-changing step.

    `account` is the principal the event is about: the accepting updater for
    `TimeUpdated`, the target for membership events and the owner for pause
    events.
    """

    event: Event
    account: Address
    timestamp: int = 0
    block_time: int = 0

    @property
    def updated_by(self) -> Address:
        return self.account


@dataclass(frozen=True)
class StepResult:
    """Result of a single kernel step.

    An accepted step with `effect=None` is an idempotent no-op (for example
    pausing an already paused oracle).
    """

    accepted: bool
    state: OracleState | None = None
    effect: Effect | None = None
    rejection: str | None = None
