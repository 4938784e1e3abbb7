"""
Notification value types shared by the notification center and service.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union, Dict, Any


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class AuthorizationError(Exception):
    """Platform declined or failed to resolve a permission prompt."""


class AuthorizationStatus(Enum):
    """Authorization state reported by the platform."""
    AUTHORIZED = "authorized"
    DENIED = "denied"
    NOT_DETERMINED = "not_determined"
    PROVISIONAL = "provisional"
    EPHEMERAL = "ephemeral"

    @property
    def has_permission(self) -> bool:
        return self in (
            AuthorizationStatus.AUTHORIZED,
            AuthorizationStatus.PROVISIONAL,
            AuthorizationStatus.EPHEMERAL,
        )


@dataclass
class NotificationSettings:
    """Authorization and feature settings for this app."""
    authorization_status: AuthorizationStatus = AuthorizationStatus.NOT_DETERMINED
    alert_enabled: bool = False
    sound_enabled: bool = False
    badge_enabled: bool = False


@dataclass
class DateTrigger:
    """
    Fire at an absolute date.

    Matched at minute precision. The match includes the year, so a
    repeating date trigger fires at most once.
    """
    fire_at: datetime
    repeats: bool = False

    def __post_init__(self):
        if self.fire_at.tzinfo is None:
            self.fire_at = self.fire_at.replace(tzinfo=timezone.utc)
        self.fire_at = self.fire_at.replace(second=0, microsecond=0)

    def next_fire_date(self, created_at: datetime, last_fired: Optional[datetime] = None) -> Optional[datetime]:
        if last_fired is not None:
            return None
        return self.fire_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "date",
            "fire_at": self.fire_at.isoformat(),
            "repeats": self.repeats,
        }


@dataclass
class IntervalTrigger:
    """Fire a number of seconds after the request was added."""
    interval_sec: float
    repeats: bool = False

    def __post_init__(self):
        assert self.interval_sec > 0, "interval_sec must be > 0"
        if self.repeats:
            assert self.interval_sec >= 60, "repeating interval must be >= 60s"

    def next_fire_date(self, created_at: datetime, last_fired: Optional[datetime] = None) -> Optional[datetime]:
        if last_fired is None:
            return created_at + timedelta(seconds=self.interval_sec)
        if not self.repeats:
            return None
        return last_fired + timedelta(seconds=self.interval_sec)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "interval",
            "interval_sec": self.interval_sec,
            "repeats": self.repeats,
        }


Trigger = Union[DateTrigger, IntervalTrigger]


def trigger_from_dict(data: Dict[str, Any]) -> Trigger:
    if data["kind"] == "date":
        return DateTrigger(
            fire_at=datetime.fromisoformat(data["fire_at"]),
            repeats=data.get("repeats", False)
        )
    if data["kind"] == "interval":
        return IntervalTrigger(
            interval_sec=float(data["interval_sec"]),
            repeats=data.get("repeats", False)
        )
    raise ValueError(f"Unknown trigger kind: {data['kind']}")


@dataclass
class NotificationRequest:
    """
    A local notification to be delivered by the platform.

    `id` is the only handle for later lookup or cancellation. Adding a
    request whose id is already pending replaces the pending one.
    """
    id: str
    title: str
    body: str
    trigger: Trigger
    sound: str = "default"
    created_at: datetime = field(default_factory=utc_now)
    last_fired: Optional[datetime] = None

    @property
    def repeats(self) -> bool:
        return self.trigger.repeats

    def next_fire_date(self) -> Optional[datetime]:
        return self.trigger.next_fire_date(self.created_at, self.last_fired)

    def is_due(self, now: datetime) -> bool:
        fire_at = self.next_fire_date()
        return fire_at is not None and fire_at <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "trigger": self.trigger.to_dict(),
            "sound": self.sound,
            "created_at": self.created_at.isoformat(),
            "last_fired": self.last_fired.isoformat() if self.last_fired else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NotificationRequest':
        last_fired = data.get("last_fired")
        return cls(
            id=data["id"],
            title=data["title"],
            body=data["body"],
            trigger=trigger_from_dict(data["trigger"]),
            sound=data.get("sound", "default"),
            created_at=datetime.fromisoformat(data["created_at"]),
            last_fired=datetime.fromisoformat(last_fired) if last_fired else None,
        )


@dataclass
class DeliveredNotification:
    """A notification already shown and still present in notification center."""
    request: NotificationRequest
    delivered_at: datetime

    @property
    def id(self) -> str:
        return self.request.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "request": self.request.to_dict(),
            "delivered_at": self.delivered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeliveredNotification':
        return cls(
            request=NotificationRequest.from_dict(data["request"]),
            delivered_at=datetime.fromisoformat(data["delivered_at"]),
        )
