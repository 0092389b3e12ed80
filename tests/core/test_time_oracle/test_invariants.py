"""Tests for time_oracle/core/invariants.py."""

from dataclasses import replace

from time_oracle.core.invariants import INVARIANTS, check_all
from time_oracle.core.state import initial_state

OWNER = "0x" + "aa" * 20


def _state(**kwargs):
    return replace(initial_state(OWNER, 1_700_000_000), **kwargs)


class TestCheckAll:
    def test_initial_state_passes(self):
        assert check_all(_state()) == []

    def test_registry(self):
        assert set(INVARIANTS) == {
            "timestamp_in_domain",
            "last_update_time_positive",
            "owner_canonical_nonzero",
            "updaters_canonical_nonzero",
            "drift_margin_in_range",
            "flags_are_bool",
        }

    def test_zero_timestamp_only_allowed_when_permissive(self):
        assert check_all(_state(timestamp=0)) == ["timestamp_in_domain"]
        assert check_all(_state(timestamp=0, validation_enabled=False)) == []

    def test_timestamp_above_u256(self):
        assert check_all(_state(timestamp=2**256)) == ["timestamp_in_domain"]

    def test_last_update_time_zero(self):
        assert check_all(_state(last_update_time=0)) == ["last_update_time_positive"]

    def test_non_canonical_owner(self):
        assert check_all(_state(owner="0x" + "AA" * 20)) == ["owner_canonical_nonzero"]

    def test_zero_updater(self):
        assert check_all(_state(authorized_updaters=frozenset({"0x" + "00" * 20}))) == [
            "updaters_canonical_nonzero"
        ]

    def test_margin_out_of_range(self):
        assert check_all(_state(drift_margin_bps=10_001)) == ["drift_margin_in_range"]

    def test_flags_must_be_bool(self):
        assert check_all(_state(paused=1)) == ["flags_are_bool"]

    def test_multiple_violations_reported(self):
        bad = _state(last_update_time=0, drift_margin_bps=-1)
        assert check_all(bad) == ["last_update_time_positive", "drift_margin_in_range"]
