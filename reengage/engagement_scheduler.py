"""
Engagement notification scheduler.

Decides, once per app-foreground event, whether to schedule, cancel or leave
alone the single re-engagement notification:

- first use not recorded          -> nothing
- no notification permission      -> nothing
- user opted out                  -> nothing
- still in the first window       -> schedule at first use + target offset
- in the second window            -> cancel the pending notification
- past both windows               -> nothing

The checks run in exactly that order. The decision is recomputed from the
preference store, the live permission state and the clock on every call;
the scheduler keeps no state between calls and never re-arms itself.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Callable, Dict, Any

from .engagement_config import EngagementConfig
from .event_logger import EventLogger
from .notification_models import utc_now
from .notification_service import NotificationService
from .preferences import PreferenceStore, PrefKeys


class EngagementWindow(Enum):
    """Where the current time falls relative to first use."""
    UNSET = "unset"  # first use not recorded
    WINDOW_1 = "window_1"
    WINDOW_2 = "window_2"
    EXPIRED = "expired"


class EngagementAction(Enum):
    """The single action taken by one invocation."""
    SCHEDULE = "schedule"
    CANCEL = "cancel"
    NONE = "none"


@dataclass
class EngagementDecision:
    """Outcome of one scheduler invocation."""
    action: EngagementAction
    window: EngagementWindow
    reason: str
    fire_at: Optional[datetime] = None
    suppressed_by: Optional[str] = None  # no_first_use / no_permission / opted_out
    decided_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "window": self.window.value,
            "reason": self.reason,
            "fire_at": self.fire_at.isoformat() if self.fire_at else None,
            "suppressed_by": self.suppressed_by,
            "decided_at": self.decided_at.isoformat(),
        }


class EngagementScheduler:
    """
    Time-window decision engine for the engagement notification.

    Issues at most one call into the notification service per invocation:
    schedule_at, remove_pending_notifications, or nothing.
    """

    def __init__(
        self,
        prefs: PreferenceStore,
        notification_service: NotificationService,
        config: Optional[EngagementConfig] = None,
        event_logger: Optional[EventLogger] = None,
        dry_run: bool = False,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize engagement scheduler.

        Args:
            prefs: Preference store holding first use and opt-in
            notification_service: Notification service
            config: Windows, identifier and notification copy
            event_logger: Event logger
            dry_run: If True, log decisions but don't touch notifications
            clock: Time source used when no explicit time is passed
        """
        self.prefs = prefs
        self.notification_service = notification_service
        self.config = config or EngagementConfig()
        self.event_logger = event_logger or EventLogger()
        self.dry_run = dry_run
        self.clock = clock

    # Preferences

    def record_first_use(self, now: Optional[datetime] = None) -> datetime:
        """
        Record first use if it has not been recorded yet.

        Returns:
            The stored first-use timestamp
        """
        first_use = self.prefs.get_timestamp(PrefKeys.FIRST_APP_USE)
        if first_use is None:
            first_use = now or self.clock()
            self.prefs.set_timestamp(PrefKeys.FIRST_APP_USE, first_use)
        return first_use

    def is_opted_in(self) -> bool:
        return self.prefs.get_bool(PrefKeys.ENGAGEMENT_NOTIFICATIONS, default=True)

    def set_opted_in(self, value: bool):
        self.prefs.set_bool(PrefKeys.ENGAGEMENT_NOTIFICATIONS, value)

    # Decision

    def window_for(self, first_use: Optional[datetime], now: datetime) -> EngagementWindow:
        if first_use is None:
            return EngagementWindow.UNSET

        # A first use in the future (clock skew) counts as the first window
        elapsed = now - first_use
        if elapsed < self.config.window_unit:
            return EngagementWindow.WINDOW_1
        if elapsed < self.config.window_unit * 2:
            return EngagementWindow.WINDOW_2
        return EngagementWindow.EXPIRED

    def evaluate(
        self,
        first_use: Optional[datetime],
        has_permission: bool,
        opted_in: bool,
        now: datetime
    ) -> EngagementDecision:
        """
        Decide the action for the given inputs. No I/O.

        Returns:
            EngagementDecision
        """
        window = self.window_for(first_use, now)

        if first_use is None:
            return EngagementDecision(
                action=EngagementAction.NONE,
                window=window,
                reason="First use not recorded",
                suppressed_by="no_first_use",
                decided_at=now
            )

        if not has_permission:
            return EngagementDecision(
                action=EngagementAction.NONE,
                window=window,
                reason="Notifications not permitted",
                suppressed_by="no_permission",
                decided_at=now
            )

        if not opted_in:
            return EngagementDecision(
                action=EngagementAction.NONE,
                window=window,
                reason="User opted out of engagement notifications",
                suppressed_by="opted_out",
                decided_at=now
            )

        if window == EngagementWindow.WINDOW_1:
            return EngagementDecision(
                action=EngagementAction.SCHEDULE,
                window=window,
                reason="Within first window; notification set for first use + offset",
                fire_at=first_use + self.config.target_offset,
                decided_at=now
            )

        if window == EngagementWindow.WINDOW_2:
            return EngagementDecision(
                action=EngagementAction.CANCEL,
                window=window,
                reason="Returned during second window; pending notification cancelled",
                decided_at=now
            )

        return EngagementDecision(
            action=EngagementAction.NONE,
            window=window,
            reason="Past both windows",
            decided_at=now
        )

    # Invocation

    async def schedule(self, now: Optional[datetime] = None) -> EngagementDecision:
        """
        Run one invocation: read inputs, decide, act.

        Call once per app-foreground event.

        Args:
            now: Evaluation time (default: clock)

        Returns:
            The decision that was applied
        """
        now = now or self.clock()
        first_use = self.prefs.get_timestamp(PrefKeys.FIRST_APP_USE)
        opted_in = self.is_opted_in()

        if first_use is None:
            has_permission = False
        else:
            has_permission = await self._query_permission()

        decision = self.evaluate(first_use, has_permission, opted_in, now)
        self._apply(decision)
        return decision

    async def _query_permission(self) -> bool:
        query = self.notification_service.has_permission()
        timeout = self.config.permission_timeout_sec
        if timeout is None:
            return await query

        try:
            return await asyncio.wait_for(query, timeout=timeout)
        except asyncio.TimeoutError:
            print(f"  [ENGAGEMENT] Permission query timed out after {timeout:.1f}s; treating as not permitted")
            return False

    def _apply(self, decision: EngagementDecision):
        config = self.config

        if decision.suppressed_by:
            self.event_logger.log_suppressed(
                reason=decision.reason,
                suppression_type=decision.suppressed_by
            )

        self.event_logger.log_decision(
            action=decision.action.value,
            window=decision.window.value,
            reason=decision.reason,
            dry_run=self.dry_run
        )

        if decision.action == EngagementAction.NONE:
            if not self.dry_run:
                print(f"  [ENGAGEMENT] No action: {decision.reason}")
            return

        if self.dry_run:
            print(f"  [ENGAGEMENT] DRY RUN: Would {decision.action.value} {config.notification_id}")
            if decision.fire_at:
                print(f"    Fire at: {decision.fire_at.isoformat()}")
            return

        if decision.action == EngagementAction.SCHEDULE:
            self.notification_service.schedule_at(
                title=config.title,
                body=config.body,
                id=config.notification_id,
                date=decision.fire_at,
                repeats=False
            )
            self.event_logger.log_scheduled(
                notification_id=config.notification_id,
                fire_at=decision.fire_at.isoformat()
            )
            print(f"  [ENGAGEMENT] Scheduled for {decision.fire_at.isoformat()}")

        elif decision.action == EngagementAction.CANCEL:
            self.notification_service.remove_pending_notifications([config.notification_id])
            self.event_logger.log_cancelled(notification_id=config.notification_id)
            print(f"  [ENGAGEMENT] Cancelled pending {config.notification_id}")
