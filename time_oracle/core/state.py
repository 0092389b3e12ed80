"""State construction and serialization for the time oracle kernel.

`initial_state()` seeds the timestamp from the environment's wall clock, so
`latest()` and `last_update_time()` are non-zero from construction on.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all valid states.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.principals import canonical_address, is_null_principal, sorted_addresses
from .errors import OracleInvariantError, OracleParamError, ZeroPrincipal
from .invariants import check_all
from .types import BPS_DENOMINATOR, DEFAULT_DRIFT_MARGIN_BPS, MAX_U256, MILLIS_PER_SECOND, OracleState

STATE_VAR_NAMES: tuple[str, ...] = tuple(OracleState.__dataclass_fields__)

STATE_DIGEST_VERSION = 1


def initial_state(
    owner: str,
    now: int,
    *,
    validation_enabled: bool = True,
    drift_margin_bps: int = DEFAULT_DRIFT_MARGIN_BPS,
) -> OracleState:
    """Construct the oracle state owned by `owner` at wall-clock second `now`.

    Raises:
        ZeroPrincipal: `owner` is empty or the zero address.
        OracleParamError: malformed owner, non-positive `now`, or margin out of range.
    """
    if is_null_principal(owner):
        raise ZeroPrincipal("owner must not be the zero address")
    try:
        owner_c = canonical_address(owner, name="owner")
    except (TypeError, ValueError) as exc:
        raise OracleParamError("owner", str(exc)) from exc
    if not isinstance(now, int) or isinstance(now, bool) or now <= 0 or now * MILLIS_PER_SECOND > MAX_U256:
        raise OracleParamError("now", f"now must be a positive u256 wall-clock second: {now!r}")
    if not isinstance(drift_margin_bps, int) or isinstance(drift_margin_bps, bool) or not (
        0 <= drift_margin_bps <= BPS_DENOMINATOR
    ):
        raise OracleParamError("drift_margin_bps", f"drift_margin_bps must be in [0, {BPS_DENOMINATOR}]")

    return OracleState(
        owner=owner_c,
        timestamp=now * MILLIS_PER_SECOND,
        last_update_time=now,
        authorized_updaters=frozenset(),
        paused=False,
        validation_enabled=bool(validation_enabled),
        drift_margin_bps=drift_margin_bps,
    )


def state_to_dict(state: OracleState) -> dict[str, Any]:
    """Serialize an OracleState to a plain JSON-compatible dict."""
    out: dict[str, Any] = {name: getattr(state, name) for name in STATE_VAR_NAMES}
    out["authorized_updaters"] = sorted_addresses(state.authorized_updaters)
    return out


def state_from_dict(d: Mapping[str, Any]) -> OracleState:
    """Deserialize a dict to an OracleState.

    Raises KeyError on missing fields, TypeError on wrongly typed fields and
    OracleInvariantError when the decoded state violates an invariant.
    """
    kwargs: dict[str, Any] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if name == "owner":
            if not isinstance(val, str):
                raise TypeError("state var 'owner' must be str")
            kwargs[name] = canonical_address(val, name="owner")
        elif name == "authorized_updaters":
            if not isinstance(val, (list, tuple, set, frozenset)):
                raise TypeError("state var 'authorized_updaters' must be a list of addresses")
            kwargs[name] = frozenset(canonical_address(a, name="updater") for a in val)
        elif name in ("paused", "validation_enabled"):
            if not isinstance(val, bool):
                raise TypeError(f"state var {name!r} must be bool, got {type(val).__name__}")
            kwargs[name] = val
        elif isinstance(val, int) and not isinstance(val, bool):
            kwargs[name] = int(val)  # normalize int subclasses
        else:
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")

    state = OracleState(**kwargs)
    violations = check_all(state)
    if violations:
        raise OracleInvariantError(violations)
    return state


def state_digest(state: OracleState) -> str:
    """Deterministic sha256 commitment over the canonical JSON state encoding."""
    payload = domain_sep_bytes("oracle-state", STATE_DIGEST_VERSION) + canonical_json_bytes(state_to_dict(state))
    return sha256_hex(payload)
