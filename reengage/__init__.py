"""
Reengage Core Module
Re-engagement notification scheduling and local notification delivery.
"""

from .notification_models import (
    AuthorizationError,
    AuthorizationStatus,
    NotificationSettings,
    DateTrigger,
    IntervalTrigger,
    NotificationRequest,
    DeliveredNotification,
)
from .notifier import DesktopNotifier
from .notification_center import NotificationCenter, DesktopNotificationCenter
from .notification_service import NotificationService
from .notification_pump import NotificationPump
from .preferences import PreferenceStore, PrefKeys
from .engagement_config import EngagementConfig, EngagementPreset, ENGAGEMENT_NOTIFICATION_ID
from .engagement_scheduler import (
    EngagementScheduler,
    EngagementDecision,
    EngagementAction,
    EngagementWindow
)
from .event_logger import EventLogger
from .debug_settings import DebugSettings, get_debug_settings, reset_debug_settings
from .platform import is_macos, storage_root

__all__ = [
    "AuthorizationError",
    "AuthorizationStatus",
    "NotificationSettings",
    "DateTrigger",
    "IntervalTrigger",
    "NotificationRequest",
    "DeliveredNotification",
    "DesktopNotifier",
    "NotificationCenter",
    "DesktopNotificationCenter",
    "NotificationService",
    "NotificationPump",
    "PreferenceStore",
    "PrefKeys",
    "EngagementConfig",
    "EngagementPreset",
    "ENGAGEMENT_NOTIFICATION_ID",
    "EngagementScheduler",
    "EngagementDecision",
    "EngagementAction",
    "EngagementWindow",
    "EventLogger",
    "DebugSettings",
    "get_debug_settings",
    "reset_debug_settings",
    "is_macos",
    "storage_root"
]
