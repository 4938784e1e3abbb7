"""
Notification service.

Asyncio facade over a NotificationCenter. Every callback from the center is
turned into a future that resolves exactly once; scheduling and removal
are fire-and-forget. Owns no decision logic.
"""

import asyncio
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .notification_center import (
    DEFAULT_OPTIONS,
    AuthorizationCompletion,
    DesktopNotificationCenter,
    NotificationCenter,
)
from .notification_models import (
    AuthorizationError,
    DateTrigger,
    DeliveredNotification,
    IntervalTrigger,
    NotificationRequest,
    NotificationSettings,
    Trigger,
)


async def _await_completion(start: Callable[[Callable[..., None]], None]) -> Tuple[Any, ...]:
    """
    Run a callback-style call and wait for its completion arguments.

    Only the first completion is kept; later ones are ignored.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()

    def resolve(*args):
        if future.done():
            return
        result = args

        def set_result():
            if not future.done():
                future.set_result(result)

        try:
            loop.call_soon_threadsafe(set_result)
        except RuntimeError:
            # Loop already closed; nobody is waiting any more
            pass

    start(resolve)
    return await future


class NotificationService:
    """
    Mediates all communication with the platform notification center.
    """

    def __init__(self, center: Optional[NotificationCenter] = None):
        """
        Initialize notification service.

        Args:
            center: Platform notification center (default: desktop center)
        """
        self.center = center or DesktopNotificationCenter()

    # Authorization

    def request_authorization_with_completion(self, completion: AuthorizationCompletion) -> None:
        """Ask for alert/badge/sound permission; completion gets (granted, error)."""
        self.center.request_authorization(set(DEFAULT_OPTIONS), completion)

    async def request_authorization(self) -> bool:
        """
        Ask the platform for alert/badge/sound permission.

        Prompts only if the user has not decided yet; otherwise returns the
        existing decision.

        Returns:
            True if permission is granted

        Raises:
            AuthorizationError: the platform declined or failed to resolve
        """
        granted, error = await _await_completion(self.request_authorization_with_completion)
        if error is not None:
            if isinstance(error, AuthorizationError):
                raise error
            raise AuthorizationError(str(error)) from error
        return bool(granted)

    async def get_notification_settings(self) -> NotificationSettings:
        (settings,) = await _await_completion(self.center.get_notification_settings)
        return settings

    async def has_permission(self) -> bool:
        settings = await self.get_notification_settings()
        return settings.authorization_status.has_permission

    # Scheduling

    def schedule_at(
        self,
        title: str,
        body: str,
        id: str,
        date: datetime,
        repeats: bool = False
    ) -> None:
        """Schedule a notification for an absolute date (e.g. 25 December at 22:00)."""
        self._schedule(title, body, id, DateTrigger(fire_at=date, repeats=repeats))

    def schedule_in(
        self,
        title: str,
        body: str,
        id: str,
        interval_sec: float,
        repeats: bool = False
    ) -> None:
        """Schedule a notification after a time interval (e.g. 2s, 10min)."""
        self._schedule(title, body, id, IntervalTrigger(interval_sec=interval_sec, repeats=repeats))

    def _schedule(self, title: str, body: str, id: str, trigger: Trigger) -> None:
        request = NotificationRequest(
            id=id,
            title=title,
            body=body,
            trigger=trigger
        )
        self.center.add(request)

    # Delivered notifications

    async def find_delivered_notifications(self) -> List[DeliveredNotification]:
        """Notifications still present in notification center."""
        (delivered,) = await _await_completion(self.center.get_delivered_notifications)
        return list(delivered)

    async def find_delivered_notification(self, id: str) -> Optional[DeliveredNotification]:
        delivered = await self.find_delivered_notifications()
        return next((item for item in delivered if item.request.id == id), None)

    # Pending notifications

    def remove_all_pending_notifications(self) -> None:
        self.center.remove_all_pending_notification_requests()

    def remove_pending_notifications(self, ids: Iterable[str]) -> None:
        self.center.remove_pending_notification_requests(set(ids))
