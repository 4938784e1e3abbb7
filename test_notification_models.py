"""
Tests for notification triggers and requests.

Usage:
    pytest test_notification_models.py
"""

from datetime import datetime, timedelta, timezone

import pytest

from reengage import DateTrigger, IntervalTrigger, NotificationRequest


T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_date_trigger_drops_seconds():
    trigger = DateTrigger(fire_at=datetime(2026, 12, 25, 22, 0, 45, 123, tzinfo=timezone.utc))

    assert trigger.fire_at == datetime(2026, 12, 25, 22, 0, tzinfo=timezone.utc)


def test_naive_date_is_utc():
    trigger = DateTrigger(fire_at=datetime(2026, 12, 25, 22, 0))

    assert trigger.fire_at.tzinfo == timezone.utc


def test_repeating_date_trigger_fires_once():
    trigger = DateTrigger(fire_at=T0, repeats=True)

    assert trigger.next_fire_date(T0) == T0
    assert trigger.next_fire_date(T0, last_fired=T0) is None


def test_interval_trigger_rearms_only_when_repeating():
    once = IntervalTrigger(interval_sec=90)
    repeating = IntervalTrigger(interval_sec=90, repeats=True)
    fired = T0 + timedelta(seconds=90)

    assert once.next_fire_date(T0) == fired
    assert once.next_fire_date(T0, last_fired=fired) is None
    assert repeating.next_fire_date(T0, last_fired=fired) == fired + timedelta(seconds=90)


@pytest.mark.parametrize("interval_sec,repeats", [(0, False), (-5, False), (30, True)])
def test_invalid_interval_rejected(interval_sec, repeats):
    with pytest.raises(AssertionError):
        IntervalTrigger(interval_sec=interval_sec, repeats=repeats)


def test_request_due():
    request = NotificationRequest(
        id="tick",
        title="Title",
        body="Body",
        trigger=IntervalTrigger(interval_sec=60),
        created_at=T0
    )

    assert not request.is_due(T0 + timedelta(seconds=59))
    assert request.is_due(T0 + timedelta(seconds=60))


def test_request_serialization_keeps_trigger():
    request = NotificationRequest(
        id="engage",
        title="Title",
        body="Body",
        trigger=DateTrigger(fire_at=T0 + timedelta(hours=48)),
        created_at=T0,
        last_fired=T0
    )

    restored = NotificationRequest.from_dict(request.to_dict())

    assert restored == request
