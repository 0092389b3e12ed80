"""
Authorization predicates (owner, updater set, pause flag).

Capability checks are plain functions over the frozen `OracleState`; there is
no ownership/pausable class hierarchy. All addresses passed here are already
canonical (the engine normalizes them before dispatch).
"""

from __future__ import annotations

from ..state.principals import Address
from .types import OracleState


def is_owner(state: OracleState, caller: Address) -> bool:
    return caller == state.owner


def is_authorized(state: OracleState, caller: Address) -> bool:
    """Owner always passes, independent of `authorized_updaters`."""
    return caller == state.owner or caller in state.authorized_updaters


def is_active(state: OracleState) -> bool:
    return not state.paused


def can_update(state: OracleState, caller: Address) -> bool:
    """Only (Active, Owner) and (Active, Updater) permit `update`."""
    return is_authorized(state, caller) and is_active(state)
