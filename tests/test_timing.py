import time

import pytest

from osdemos.timing import get_time, spin


def test_get_time_tracks_wall_clock():
    before = time.time()
    now = get_time()
    after = time.time()
    assert before <= now <= after


def test_get_time_is_non_decreasing():
    first = get_time()
    second = get_time()
    assert second >= first


@pytest.mark.parametrize("duration", [0.01, 0.05])
def test_spin_waits_at_least_requested_time(duration):
    start = time.monotonic()
    spin(duration)
    elapsed = time.monotonic() - start
    assert elapsed >= duration * 0.9


@pytest.mark.parametrize("duration", [0, -1])
def test_spin_returns_promptly_for_non_positive(duration):
    start = get_time()
    spin(duration)
    assert get_time() - start < 0.5