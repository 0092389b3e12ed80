"""Tests for time_oracle/core/state.py: construction, serialization, digest."""

import pytest
from dataclasses import replace

from time_oracle.core import OracleInvariantError, OracleParamError, ZeroPrincipal
from time_oracle.core.oracle import is_authorized_updater, last_update_time, latest
from time_oracle.core.state import (
    STATE_VAR_NAMES,
    initial_state,
    state_digest,
    state_from_dict,
    state_to_dict,
)
from time_oracle.core.types import OracleState

OWNER = "0x" + "aa" * 20
UPDATER = "0x" + "bb" * 20
OTHER = "0x" + "cc" * 20


class TestInitialState:
    def test_returns_oracle_state(self):
        assert isinstance(initial_state(OWNER, 1_700_000_000), OracleState)

    def test_seeded_from_wall_clock(self):
        s = initial_state(OWNER, 1_700_000_000)
        assert latest(s) == 1_700_000_000_000
        assert last_update_time(s) == 1_700_000_000
        assert latest(s) > 0 and last_update_time(s) > 0

    def test_owner_authorized_via_bypass(self):
        s = initial_state(OWNER, 1)
        assert s.authorized_updaters == frozenset()
        assert is_authorized_updater(s, OWNER)

    def test_default_values(self):
        s = initial_state(OWNER, 1)
        assert s.paused is False
        assert s.validation_enabled is True
        assert s.drift_margin_bps == 200

    def test_owner_canonicalized(self):
        assert initial_state("AA" * 20, 1).owner == OWNER

    @pytest.mark.parametrize("owner", ["", "0x" + "00" * 20])
    def test_zero_owner_rejected(self, owner):
        with pytest.raises(ZeroPrincipal):
            initial_state(owner, 1)

    def test_malformed_owner_rejected(self):
        with pytest.raises(OracleParamError) as exc_info:
            initial_state("0xdeadbeef", 1)
        assert exc_info.value.field == "owner"

    @pytest.mark.parametrize("now", [0, -1, True, 1.5])
    def test_now_must_be_positive_int(self, now):
        with pytest.raises(OracleParamError):
            initial_state(OWNER, now)

    @pytest.mark.parametrize("margin", [-1, 10_001, True])
    def test_margin_domain(self, margin):
        with pytest.raises(OracleParamError):
            initial_state(OWNER, 1, drift_margin_bps=margin)

    def test_frozen(self):
        s = initial_state(OWNER, 1)
        with pytest.raises(AttributeError):
            s.timestamp = 5  # type: ignore


class TestStateVarNames:
    def test_fields(self):
        assert STATE_VAR_NAMES == (
            "owner",
            "timestamp",
            "last_update_time",
            "authorized_updaters",
            "paused",
            "validation_enabled",
            "drift_margin_bps",
        )


class TestRoundTrip:
    def test_initial_state_round_trip(self):
        s = initial_state(OWNER, 1_700_000_000)
        assert state_from_dict(state_to_dict(s)) == s

    def test_custom_state_round_trip(self):
        s = replace(
            initial_state(OWNER, 1_700_000_000, validation_enabled=False, drift_margin_bps=50),
            authorized_updaters=frozenset({UPDATER, OTHER}),
            paused=True,
            timestamp=1_700_000_123_456,
        )
        d = state_to_dict(s)
        assert d["authorized_updaters"] == [UPDATER, OTHER]
        assert state_from_dict(d) == s

    def test_missing_field(self):
        d = state_to_dict(initial_state(OWNER, 1))
        del d["paused"]
        with pytest.raises(KeyError):
            state_from_dict(d)

    def test_bool_rejected_for_int_field(self):
        d = state_to_dict(initial_state(OWNER, 1))
        d["timestamp"] = True
        with pytest.raises(TypeError):
            state_from_dict(d)

    def test_int_rejected_for_flag(self):
        d = state_to_dict(initial_state(OWNER, 1))
        d["paused"] = 1
        with pytest.raises(TypeError):
            state_from_dict(d)

    def test_zero_owner_fails_invariants(self):
        d = state_to_dict(initial_state(OWNER, 1))
        d["owner"] = "0x" + "00" * 20
        with pytest.raises(OracleInvariantError) as exc_info:
            state_from_dict(d)
        assert exc_info.value.violations == ["owner_canonical_nonzero"]

    def test_updaters_canonicalized_on_load(self):
        d = state_to_dict(initial_state(OWNER, 1))
        d["authorized_updaters"] = ["BB" * 20]
        assert state_from_dict(d).authorized_updaters == frozenset({UPDATER})


class TestDigest:
    def test_deterministic(self):
        s = initial_state(OWNER, 1_700_000_000)
        assert state_digest(s) == state_digest(initial_state(OWNER, 1_700_000_000))
        assert state_digest(s).startswith("0x")
        assert len(state_digest(s)) == 66

    def test_sensitive_to_every_field(self):
        s = initial_state(OWNER, 1_700_000_000)
        variants = [
            replace(s, timestamp=s.timestamp + 1),
            replace(s, last_update_time=s.last_update_time + 1),
            replace(s, authorized_updaters=frozenset({UPDATER})),
            replace(s, paused=True),
            replace(s, validation_enabled=False),
            replace(s, drift_margin_bps=201),
            replace(s, owner=OTHER),
        ]
        digests = {state_digest(v) for v in variants}
        assert state_digest(s) not in digests
        assert len(digests) == len(variants)

    def test_independent_of_insertion_order(self):
        s = initial_state(OWNER, 1)
        a = replace(s, authorized_updaters=frozenset([UPDATER, OTHER]))
        b = replace(s, authorized_updaters=frozenset([OTHER, UPDATER]))
        assert state_digest(a) == state_digest(b)
