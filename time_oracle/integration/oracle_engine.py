"""
Oracle host: imperative-shell wrapper around the functional core.

`TimeOracle` owns the single process-wide `OracleState` and serializes every
write through one lock:
- the wall clock is read, the kernel step runs, invariants are checked and
  the new frozen state is committed by one reference swap, all under the lock;
- reads take the current snapshot without locking and only ever observe
  committed state;
- subscribers are notified after commit, in commit order, outside the write
  lock, so a subscriber may call back into the oracle.

Rejected calls raise the typed `OracleError` subclasses and leave state
untouched. The core never retries; that policy belongs to the submitter.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Union

from ..core.engine import step_or_raise
from ..core.errors import OracleError, OracleParamError
from ..core.oracle import can_update_now as _can_update_now
from ..core.oracle import is_authorized_updater as _is_authorized_updater
from ..core.oracle import is_stale as _is_stale
from ..core.state import initial_state, state_digest
from ..core.types import Action, ActionParams, Effect, OracleState, StepResult
from .calldata import decode_update_timestamp
from .config import OracleConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], int]
Subscriber = Callable[[Effect], None]


def system_clock() -> int:
    """Wall-clock seconds since the Unix epoch."""
    return int(time.time())


class TimeOracle:
    """Lock-guarded host for one oracle state."""

    def __init__(
        self,
        owner: str,
        *,
        clock: Clock = system_clock,
        validation_enabled: bool = True,
        drift_margin_bps: Optional[int] = None,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._subscribers_lock = threading.Lock()
        self._subscribers: List[Subscriber] = []
        # Committed effects waiting for delivery, appended under `_lock` in commit order.
        self._pending: Deque[Effect] = deque()
        self._dispatch_lock = threading.Lock()
        kwargs = {} if drift_margin_bps is None else {"drift_margin_bps": drift_margin_bps}
        self._state: OracleState = initial_state(
            owner,
            self._now(),
            validation_enabled=validation_enabled,
            **kwargs,
        )
        logger.info(
            "oracle constructed owner=%s timestamp=%d validation=%s margin_bps=%d",
            self._state.owner,
            self._state.timestamp,
            self._state.validation_enabled,
            self._state.drift_margin_bps,
        )

    @classmethod
    def from_config(cls, config: OracleConfig, *, clock: Clock = system_clock) -> "TimeOracle":
        """Build an oracle from config and authorize the configured updaters as the owner."""
        if not config.owner:
            raise OracleParamError("owner", "config.owner is required")
        oracle = cls(
            config.owner,
            clock=clock,
            validation_enabled=config.validation_enabled,
            drift_margin_bps=config.drift_margin_bps,
        )
        oracle.authorize_updaters(oracle.owner, config.updaters)
        return oracle

    def _now(self) -> int:
        now = self._clock()
        if not isinstance(now, int) or isinstance(now, bool):
            raise OracleParamError("now", f"clock must return int seconds, got {type(now).__name__}")
        return now

    # -- reads (lock-free snapshot) -----------------------------------------

    @property
    def state(self) -> OracleState:
        return self._state

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def paused(self) -> bool:
        return self._state.paused

    def latest(self) -> int:
        return self._state.timestamp

    def last_update_time(self) -> int:
        return self._state.last_update_time

    def is_stale(self, max_age_seconds: int) -> bool:
        return _is_stale(self._state, max_age_seconds, self._now())

    def is_authorized_updater(self, address: str) -> bool:
        return _is_authorized_updater(self._state, address)

    def can_update(self, address: str) -> bool:
        """Whether an update from `address` would clear the authorization and pause gates right now."""
        return _can_update_now(self._state, address)

    def digest(self) -> str:
        return state_digest(self._state)

    # -- writes (serialized) ------------------------------------------------

    def update(self, caller: str, value: int) -> Effect:
        result = self._execute(ActionParams(action=Action.UPDATE, caller=caller, value=value))
        assert result.effect is not None
        return result.effect

    def submit_calldata(self, caller: str, data: Union[bytes, bytearray, str]) -> Effect:
        """Decode `updateTimestamp(uint256)` calldata and run `update`."""
        try:
            value = decode_update_timestamp(data)
        except OracleError as exc:
            logger.warning("calldata rejected: %s", exc, extra={"caller": caller, "rejection": exc.code})
            raise
        return self.update(caller, value)

    def add_authorized_updater(self, caller: str, target: str) -> Optional[Effect]:
        return self._execute(
            ActionParams(action=Action.ADD_AUTHORIZED_UPDATER, caller=caller, target=target)
        ).effect

    def remove_authorized_updater(self, caller: str, target: str) -> Optional[Effect]:
        return self._execute(
            ActionParams(action=Action.REMOVE_AUTHORIZED_UPDATER, caller=caller, target=target)
        ).effect

    def authorize_updaters(self, caller: str, targets: Iterable[str]) -> List[Effect]:
        """Add each target; already-authorized targets are skipped silently."""
        effects: List[Effect] = []
        for target in targets:
            effect = self.add_authorized_updater(caller, target)
            if effect is not None:
                effects.append(effect)
        return effects

    def pause(self, caller: str) -> Optional[Effect]:
        return self._execute(ActionParams(action=Action.PAUSE, caller=caller)).effect

    def unpause(self, caller: str) -> Optional[Effect]:
        return self._execute(ActionParams(action=Action.UNPAUSE, caller=caller)).effect

    def _execute(self, params: ActionParams) -> StepResult:
        with self._lock:
            now = self._monotonic_now()
            try:
                result = step_or_raise(self._state, params, now)
            except OracleError as exc:
                logger.warning(
                    "%s rejected: %s",
                    params.action.value,
                    exc,
                    extra={"caller": params.caller, "action": params.action.value, "rejection": exc.code},
                )
                raise
            assert result.state is not None
            self._state = result.state
            if result.effect is None:
                logger.debug("%s accepted as no-op", params.action.value, extra={"caller": params.caller})
            else:
                self._log_commit(params, result.effect)
                self._pending.append(result.effect)
        self._drain()
        return result

    def _monotonic_now(self) -> int:
        # Called under `_lock`. A wall clock stepped backwards (NTP) must not move
        # last_update_time back; hold it at the last accepted second instead.
        now = self._now()
        floor = self._state.last_update_time
        if now < floor:
            logger.warning("wall clock stepped back from %d to %d; holding at %d", floor, now, floor)
            return floor
        return now

    def _log_commit(self, params: ActionParams, effect: Effect) -> None:
        extra = {
            "caller": params.caller,
            "action": params.action.value,
            "event": effect.event.value,
            "block_time": effect.block_time,
        }
        if params.action == Action.UPDATE:
            # Sub-second cadence: keep per-update records at DEBUG.
            extra["timestamp_ms"] = effect.timestamp
            logger.debug("timestamp updated to %d by %s", effect.timestamp, effect.account, extra=extra)
        else:
            logger.info("%s %s", effect.event.value, effect.account, extra=extra)

    # -- notifications ------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback` for committed effects. Returns an unsubscribe function."""
        with self._subscribers_lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._subscribers_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def _drain(self) -> None:
        """Deliver pending effects. One thread delivers at a time; re-entrant calls leave theirs queued."""
        while True:
            if not self._dispatch_lock.acquire(blocking=False):
                # The current deliverer rechecks the queue after releasing.
                return
            try:
                while True:
                    with self._lock:
                        if not self._pending:
                            break
                        effect = self._pending.popleft()
                    self._notify(effect)
            finally:
                self._dispatch_lock.release()
            with self._lock:
                if not self._pending:
                    return

    def _notify(self, effect: Effect) -> None:
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(effect)
            except Exception:
                # A failing subscriber must not undo an already committed step.
                logger.exception("subscriber failed for %s", effect.event.value)
