from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone

import pytest

from fakes import make_settings, pkt
from night_attendance.core.exceptions import OutsideWindowError
from night_attendance.window.policy import TimeWindowPolicy


@pytest.fixture
def policy():
    return TimeWindowPolicy(make_settings())


@pytest.mark.parametrize(
    "hh, mm, ss, expected",
    [
        (18, 0, 0, True),
        (17, 59, 59, False),
        (5, 30, 0, True),
        (5, 30, 1, False),
        (23, 59, 59, True),
        (0, 0, 0, True),
        (12, 0, 0, False),
    ],
)
def test_window_boundaries_are_inclusive(policy, hh, mm, ss, expected):
    assert policy.is_within_window(pkt(2025, 1, 1, hh, mm, ss)) is expected


def test_window_uses_configured_timezone_not_the_instant_offset(policy):
    # 13:00 UTC is 18:00 in Karachi.
    assert policy.is_within_window(datetime(2025, 1, 1, 13, 0, tzinfo=timezone.utc))
    assert not policy.is_within_window(datetime(2025, 1, 1, 12, 59, 59, tzinfo=timezone.utc))


def test_answer_is_stable_for_the_same_instant(policy):
    t = pkt(2025, 1, 1, 4, 0)
    assert policy.is_within_window(t) == policy.is_within_window(t)


def test_next_open_returns_same_instant_inside_window(policy):
    t = pkt(2025, 1, 1, 2, 15)
    assert policy.next_window_open(t) == t


def test_next_open_is_same_day_during_daytime_gap(policy):
    assert policy.next_window_open(pkt(2025, 1, 1, 10, 0)) == pkt(2025, 1, 1, 18, 0)


def test_next_open_rolls_to_tomorrow_for_non_wrapping_window():
    policy = TimeWindowPolicy(make_settings(window_start=time(9, 0), window_end=time(17, 0)))
    assert policy.next_window_open(pkt(2025, 1, 1, 20, 0)) == pkt(2025, 1, 2, 9, 0)
    assert policy.is_within_window(pkt(2025, 1, 1, 9, 0))
    assert policy.is_within_window(pkt(2025, 1, 1, 17, 0))
    assert not policy.is_within_window(pkt(2025, 1, 1, 17, 0, 1))


def test_window_info_reports_countdown(policy):
    info = policy.window_info(pkt(2025, 1, 1, 17, 0))

    assert info.is_within_window is False
    assert info.allowed_window == "6:00 PM - 5:30 AM PKT"
    assert info.next_available_time == pkt(2025, 1, 1, 18, 0)
    assert info.seconds_until_open == int(timedelta(hours=1).total_seconds())
    assert info.to_dict()["nextAvailableTime"] == "2025-01-01T18:00:00+05:00"


def test_ensure_within_window_raises_with_context(policy):
    with pytest.raises(OutsideWindowError) as exc:
        policy.ensure_within_window(pkt(2025, 1, 1, 10, 0))

    body = exc.value.to_dict()
    assert body["error"] == "ATTENDANCE_TIME_RESTRICTED"
    assert body["allowedWindow"] == "6:00 PM - 5:30 AM PKT"
    assert body["currentTime"] == "2025-01-01T10:00:00+05:00"
    assert body["nextAvailableTime"] == "2025-01-01T18:00:00+05:00"
    assert exc.value.http_status == 403


def test_bypass_allows_action_and_warns(caplog):
    policy = TimeWindowPolicy(make_settings(bypass_window=True))

    with caplog.at_level(logging.WARNING):
        policy.ensure_within_window(pkt(2025, 1, 1, 10, 0))

    assert "bypassed" in caplog.text


def test_naive_datetimes_are_rejected(policy):
    with pytest.raises(ValueError):
        policy.is_within_window(pkt(2025, 1, 1, 10, 0).replace(tzinfo=None))


def test_fractional_seconds_at_window_end_are_still_inside(policy):
    assert policy.is_within_window(pkt(2025, 1, 1, 5, 30).replace(microsecond=400000))
    assert not policy.is_within_window(pkt(2025, 1, 1, 5, 30, 1).replace(microsecond=1))
