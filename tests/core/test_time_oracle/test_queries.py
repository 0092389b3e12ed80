"""Tests for time_oracle/core/oracle.py and access.py: read queries and predicates."""

import pytest
from dataclasses import replace

from time_oracle.core.access import can_update, is_active, is_authorized, is_owner
from time_oracle.core.oracle import can_update_now, is_authorized_updater, is_stale, last_update_time, latest
from time_oracle.core.state import initial_state

OWNER = "0x" + "aa" * 20
UPDATER = "0x" + "bb" * 20
STRANGER = "0x" + "cc" * 20


def _state(**kwargs):
    return replace(initial_state(OWNER, 1000), **kwargs)


class TestIsStale:
    def test_boundary(self):
        s = _state(last_update_time=1000)
        assert is_stale(s, 300, 1000) is False
        assert is_stale(s, 300, 1300) is False
        assert is_stale(s, 300, 1301) is True

    def test_zero_max_age(self):
        s = _state(last_update_time=1000)
        assert is_stale(s, 0, 1000) is False
        assert is_stale(s, 0, 1001) is True

    def test_clock_behind_last_update(self):
        s = _state(last_update_time=1000)
        assert is_stale(s, 0, 999) is False

    def test_huge_max_age_never_stale(self):
        s = _state(last_update_time=1000)
        assert is_stale(s, 2**256 - 1, 2**255) is False

    @pytest.mark.parametrize("max_age,now", [(-1, 1000), (10, -1)])
    def test_negative_inputs(self, max_age, now):
        with pytest.raises(ValueError):
            is_stale(_state(), max_age, now)

    def test_pure(self):
        s = _state()
        is_stale(s, 1, 10**9)
        assert s == _state()


class TestReads:
    def test_latest_and_last_update_time(self):
        s = _state(timestamp=42, last_update_time=7)
        assert latest(s) == 42
        assert last_update_time(s) == 7


class TestAuthorizationPredicates:
    def test_owner(self):
        s = _state()
        assert is_owner(s, OWNER)
        assert is_authorized(s, OWNER)
        assert not is_owner(s, UPDATER)

    def test_member(self):
        s = _state(authorized_updaters=frozenset({UPDATER}))
        assert is_authorized(s, UPDATER)
        assert not is_authorized(s, STRANGER)

    def test_is_authorized_updater_canonicalizes(self):
        s = _state(authorized_updaters=frozenset({UPDATER}))
        assert is_authorized_updater(s, "0x" + "BB" * 20)
        assert is_authorized_updater(s, "aa" * 20)

    @pytest.mark.parametrize("address", ["", "0x12", None, 5])
    def test_is_authorized_updater_malformed_is_false(self, address):
        assert is_authorized_updater(_state(), address) is False

    def test_state_matrix(self):
        # {Active, Paused} x {Owner, Updater, Unauthorized}: only active + authorized may update.
        for paused in (False, True):
            s = _state(authorized_updaters=frozenset({UPDATER}), paused=paused)
            assert is_active(s) is (not paused)
            assert can_update(s, OWNER) is (not paused)
            assert can_update(s, UPDATER) is (not paused)
            assert can_update(s, STRANGER) is False

    def test_can_update_now_canonicalizes_and_respects_pause(self):
        s = _state(authorized_updaters=frozenset({UPDATER}))
        assert can_update_now(s, "0x" + "BB" * 20) is True
        assert can_update_now(s, "0x12") is False
        assert can_update_now(replace(s, paused=True), UPDATER) is False
