"""
Tests for the asyncio notification service facade.

Usage:
    pytest test_notification_service.py
"""

import asyncio
import threading
from datetime import datetime, timezone

import pytest

from reengage import (
    AuthorizationError,
    AuthorizationStatus,
    DateTrigger,
    DeliveredNotification,
    IntervalTrigger,
    NotificationCenter,
    NotificationRequest,
    NotificationService,
    NotificationSettings,
)


class FakeNotificationCenter(NotificationCenter):
    """In-memory center; completions run inline or on a thread."""

    def __init__(self, status=AuthorizationStatus.AUTHORIZED, auth_error=None,
                 threaded=False, repeat_completions=False):
        self.status = status
        self.auth_error = auth_error
        self.threaded = threaded
        self.repeat_completions = repeat_completions
        self.requested_options = None
        self.pending = {}
        self.delivered = []
        self.removed_ids = []
        self.removed_all = 0

    def _complete(self, completion, *args):
        def call():
            completion(*args)
            if self.repeat_completions:
                completion(*args)

        if self.threaded:
            threading.Thread(target=call).start()
        else:
            call()

    def request_authorization(self, options, completion):
        self.requested_options = set(options)
        self._complete(completion, self.status.has_permission, self.auth_error)

    def get_notification_settings(self, completion):
        self._complete(completion, NotificationSettings(authorization_status=self.status))

    def add(self, request):
        self.pending[request.id] = request

    def get_delivered_notifications(self, completion):
        self._complete(completion, list(self.delivered))

    def remove_pending_notification_requests(self, ids):
        ids = list(ids)
        self.removed_ids.extend(ids)
        for id in ids:
            self.pending.pop(id, None)

    def remove_all_pending_notification_requests(self):
        self.removed_all += 1
        self.pending.clear()


def delivered(id, title="Title"):
    request = NotificationRequest(
        id=id,
        title=title,
        body="Body",
        trigger=IntervalTrigger(interval_sec=5)
    )
    return DeliveredNotification(request=request, delivered_at=datetime(2026, 1, 1, tzinfo=timezone.utc))


@pytest.mark.parametrize("status,expected", [
    (AuthorizationStatus.AUTHORIZED, True),
    (AuthorizationStatus.PROVISIONAL, True),
    (AuthorizationStatus.EPHEMERAL, True),
    (AuthorizationStatus.DENIED, False),
    (AuthorizationStatus.NOT_DETERMINED, False),
])
def test_has_permission_collapses_status(status, expected):
    service = NotificationService(FakeNotificationCenter(status=status))

    assert asyncio.run(service.has_permission()) is expected


@pytest.mark.parametrize("threaded", [False, True])
def test_get_notification_settings_bridges_callback(threaded):
    center = FakeNotificationCenter(status=AuthorizationStatus.DENIED, threaded=threaded)
    service = NotificationService(center)

    settings = asyncio.run(service.get_notification_settings())

    assert settings.authorization_status == AuthorizationStatus.DENIED


def test_completion_called_twice_resolves_once():
    center = FakeNotificationCenter(repeat_completions=True, threaded=True)
    service = NotificationService(center)

    assert asyncio.run(service.has_permission()) is True


def test_request_authorization_asks_for_alert_badge_sound():
    center = FakeNotificationCenter()
    service = NotificationService(center)

    assert asyncio.run(service.request_authorization()) is True
    assert center.requested_options == {"alert", "badge", "sound"}


def test_request_authorization_raises_authorization_error():
    center = FakeNotificationCenter(
        status=AuthorizationStatus.DENIED,
        auth_error=AuthorizationError("declined")
    )
    service = NotificationService(center)

    with pytest.raises(AuthorizationError, match="declined"):
        asyncio.run(service.request_authorization())


def test_request_authorization_wraps_other_errors():
    center = FakeNotificationCenter(
        status=AuthorizationStatus.DENIED,
        auth_error=RuntimeError("prompt failed")
    )
    service = NotificationService(center)

    with pytest.raises(AuthorizationError) as exc_info:
        asyncio.run(service.request_authorization())
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_request_authorization_with_completion():
    center = FakeNotificationCenter(status=AuthorizationStatus.DENIED)
    service = NotificationService(center)
    results = []

    service.request_authorization_with_completion(lambda granted, error: results.append((granted, error)))

    assert results == [(False, None)]


def test_schedule_at_adds_date_request():
    center = FakeNotificationCenter()
    service = NotificationService(center)
    date = datetime(2026, 12, 25, 22, 0, 30, tzinfo=timezone.utc)

    result = service.schedule_at("Title", "Body", "xmas", date)

    assert result is None
    request = center.pending["xmas"]
    assert isinstance(request.trigger, DateTrigger)
    assert request.trigger.fire_at == datetime(2026, 12, 25, 22, 0, tzinfo=timezone.utc)
    assert request.repeats is False
    assert request.sound == "default"


def test_schedule_in_adds_interval_request():
    center = FakeNotificationCenter()
    service = NotificationService(center)

    service.schedule_in("Title", "Body", "tick", interval_sec=120, repeats=True)

    request = center.pending["tick"]
    assert isinstance(request.trigger, IntervalTrigger)
    assert request.trigger.interval_sec == 120
    assert request.repeats is True


def test_schedule_same_id_replaces():
    center = FakeNotificationCenter()
    service = NotificationService(center)

    service.schedule_in("First", "Body", "same", interval_sec=10)
    service.schedule_in("Second", "Body", "same", interval_sec=10)

    assert list(center.pending) == ["same"]
    assert center.pending["same"].title == "Second"


def test_find_delivered_notifications():
    center = FakeNotificationCenter(threaded=True)
    center.delivered = [delivered("a"), delivered("b")]
    service = NotificationService(center)

    result = asyncio.run(service.find_delivered_notifications())

    assert [item.id for item in result] == ["a", "b"]


def test_find_delivered_notification_first_match():
    center = FakeNotificationCenter()
    center.delivered = [delivered("a", "one"), delivered("b"), delivered("a", "two")]
    service = NotificationService(center)

    match = asyncio.run(service.find_delivered_notification("a"))
    missing = asyncio.run(service.find_delivered_notification("zzz"))

    assert match.request.title == "one"
    assert missing is None


def test_remove_pending_notifications_by_id():
    center = FakeNotificationCenter()
    service = NotificationService(center)
    service.schedule_in("Title", "Body", "keep", interval_sec=10)
    service.schedule_in("Title", "Body", "drop", interval_sec=10)

    service.remove_pending_notifications(["drop", "never-scheduled"])

    assert list(center.pending) == ["keep"]


def test_remove_all_pending_notifications():
    center = FakeNotificationCenter()
    service = NotificationService(center)
    service.schedule_in("Title", "Body", "a", interval_sec=10)

    service.remove_all_pending_notifications()

    assert center.pending == {}
    assert center.removed_all == 1
