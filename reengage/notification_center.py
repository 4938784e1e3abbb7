"""
Platform notification center.

NotificationCenter is the callback-based port the notification service talks
to. DesktopNotificationCenter implements it for desktop hosts: pending and
delivered notifications plus the authorization decision are kept in
storage/notification_center.json and due notifications are posted through
DesktopNotifier.
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Any

from .notification_models import (
    AuthorizationError,
    AuthorizationStatus,
    DateTrigger,
    DeliveredNotification,
    NotificationRequest,
    NotificationSettings,
    utc_now,
)
from .notifier import DesktopNotifier


AuthorizationCompletion = Callable[[bool, Optional[Exception]], None]
SettingsCompletion = Callable[[NotificationSettings], None]
DeliveredCompletion = Callable[[List[DeliveredNotification]], None]

DEFAULT_OPTIONS = frozenset({"alert", "badge", "sound"})


class NotificationCenter(ABC):
    """
    Port to the host's local-notification subsystem.

    Completions are called exactly once, possibly from another thread.
    """

    @abstractmethod
    def request_authorization(self, options: Set[str], completion: AuthorizationCompletion) -> None:
        ...

    @abstractmethod
    def get_notification_settings(self, completion: SettingsCompletion) -> None:
        ...

    @abstractmethod
    def add(self, request: NotificationRequest) -> None:
        """Enqueue a request, replacing any pending request with the same id."""
        ...

    @abstractmethod
    def get_delivered_notifications(self, completion: DeliveredCompletion) -> None:
        ...

    @abstractmethod
    def remove_pending_notification_requests(self, ids: Iterable[str]) -> None:
        ...

    @abstractmethod
    def remove_all_pending_notification_requests(self) -> None:
        ...


class DesktopNotificationCenter(NotificationCenter):
    """
    File-backed notification center for desktop hosts.

    Storage location: ./storage/notification_center.json
    """

    VERSION = "1.0"

    def __init__(
        self,
        storage_dir: str = "./storage",
        notifier: Optional[DesktopNotifier] = None,
        respect_dnd: bool = True,
        max_delivered: int = 50,
        clock: Callable[[], datetime] = utc_now
    ):
        """
        Initialize notification center.

        Args:
            storage_dir: Directory for storage files
            notifier: Poster used for due notifications
            respect_dnd: Hold due notifications while DND is active
            max_delivered: Delivered notifications kept before the oldest drop
            clock: Time source
        """
        self.storage_dir = Path(storage_dir)
        self.state_file = self.storage_dir / "notification_center.json"
        self.notifier = notifier or DesktopNotifier()
        self.respect_dnd = respect_dnd
        self.max_delivered = max_delivered
        self.clock = clock

        self._lock = threading.Lock()
        self._delivery_lock = threading.Lock()

        self.storage_dir.mkdir(parents=True, exist_ok=True)

    # Callback dispatch

    def _dispatch(self, fn: Callable[..., None], *args) -> None:
        threading.Thread(target=fn, args=args, daemon=True).start()

    # Persistence

    def _empty_state(self) -> Dict[str, Any]:
        return {
            "version": self.VERSION,
            "authorization": AuthorizationStatus.NOT_DETERMINED.value,
            "options": [],
            "pending": [],
            "delivered": [],
        }

    def _load(self) -> Dict[str, Any]:
        if not self.state_file.exists():
            return self._empty_state()

        try:
            with open(self.state_file, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"WARNING: Could not read notification state, starting empty: {e}")
            return self._empty_state()

        if data.get("version") != self.VERSION:
            print(f"WARNING: Unknown notification state version: {data.get('version')}")

        state = self._empty_state()
        state.update(data)
        return state

    def _save(self, state: Dict[str, Any]) -> None:
        temp_file = self.state_file.with_suffix('.tmp')
        with open(temp_file, 'w') as f:
            json.dump(state, f, indent=2)
        os.replace(temp_file, self.state_file)

    def _pending(self, state: Dict[str, Any]) -> List[NotificationRequest]:
        return [NotificationRequest.from_dict(item) for item in state["pending"]]

    def _delivered(self, state: Dict[str, Any]) -> List[DeliveredNotification]:
        return [DeliveredNotification.from_dict(item) for item in state["delivered"]]

    # Authorization

    def authorization_status(self) -> AuthorizationStatus:
        with self._lock:
            return AuthorizationStatus(self._load()["authorization"])

    def set_authorization_status(self, status: AuthorizationStatus) -> None:
        """Record a decision made outside the prompt (e.g. system settings)."""
        with self._lock:
            state = self._load()
            state["authorization"] = status.value
            if status.has_permission and not state.get("options"):
                state["options"] = sorted(DEFAULT_OPTIONS)
            self._save(state)

    def request_authorization(self, options: Set[str], completion: AuthorizationCompletion) -> None:
        with self._lock:
            state = self._load()
            status = AuthorizationStatus(state["authorization"])

            error: Optional[Exception] = None
            if status == AuthorizationStatus.NOT_DETERMINED:
                backend = self.notifier.available_backend()
                if backend:
                    status = AuthorizationStatus.AUTHORIZED
                    print(f"  [CENTER] Notifications authorized (backend: {backend})")
                else:
                    status = AuthorizationStatus.DENIED
                    error = AuthorizationError("No desktop notification backend available")
                    print("  [CENTER] Notifications denied: no backend available")
                state["authorization"] = status.value
                state["options"] = sorted(options)
                self._save(state)

        self._dispatch(completion, status.has_permission, error)

    def get_notification_settings(self, completion: SettingsCompletion) -> None:
        with self._lock:
            state = self._load()

        status = AuthorizationStatus(state["authorization"])
        options = set(state.get("options") or [])
        granted = status.has_permission
        settings = NotificationSettings(
            authorization_status=status,
            alert_enabled=granted and "alert" in options,
            sound_enabled=granted and "sound" in options,
            badge_enabled=granted and "badge" in options,
        )
        self._dispatch(completion, settings)

    # Pending queue

    def add(self, request: NotificationRequest) -> None:
        """
        Enqueue a request, replacing any pending request with the same id.

        A date trigger earlier than the current minute can never match, so
        the request is dropped (still replacing the pending one).
        """
        expired = False
        if isinstance(request.trigger, DateTrigger):
            current_minute = self.clock().replace(second=0, microsecond=0)
            expired = request.trigger.fire_at < current_minute

        with self._lock:
            state = self._load()
            state["pending"] = [
                item for item in state["pending"] if item["id"] != request.id
            ]
            if expired:
                print(f"  [CENTER] Dropped notification with past fire date: {request.id}")
            else:
                state["pending"].append(request.to_dict())
            self._save(state)

    def pending_requests(self) -> List[NotificationRequest]:
        with self._lock:
            return self._pending(self._load())

    def remove_pending_notification_requests(self, ids: Iterable[str]) -> None:
        targets = set(ids)
        with self._lock:
            state = self._load()
            state["pending"] = [
                item for item in state["pending"] if item["id"] not in targets
            ]
            self._save(state)

    def remove_all_pending_notification_requests(self) -> None:
        with self._lock:
            state = self._load()
            state["pending"] = []
            self._save(state)

    # Delivered list

    def get_delivered_notifications(self, completion: DeliveredCompletion) -> None:
        with self._lock:
            delivered = self._delivered(self._load())
        self._dispatch(completion, delivered)

    def remove_delivered_notifications(self, ids: Iterable[str]) -> None:
        targets = set(ids)
        with self._lock:
            state = self._load()
            state["delivered"] = [
                item for item in state["delivered"] if item["request"]["id"] not in targets
            ]
            self._save(state)

    def remove_all_delivered_notifications(self) -> None:
        with self._lock:
            state = self._load()
            state["delivered"] = []
            self._save(state)

    # Delivery

    def deliver_due(self, now: Optional[datetime] = None) -> List[DeliveredNotification]:
        """
        Post every pending notification whose trigger date has passed.

        Repeating requests are re-armed; the rest leave the pending queue.
        Nothing is delivered while DND is active and respect_dnd is set.
        Posting happens outside the state lock, so readers are not blocked;
        a request added or removed meanwhile is left as the caller set it.

        Returns:
            Notifications delivered by this call
        """
        now = now or self.clock()

        with self._delivery_lock:
            with self._lock:
                due = [
                    (item, NotificationRequest.from_dict(item))
                    for item in self._load()["pending"]
                ]
            due = [(snapshot, request) for snapshot, request in due if request.is_due(now)]
            if not due:
                return []

            if self.respect_dnd and self.notifier.is_dnd_active():
                print(f"  [CENTER] {len(due)} notification(s) held (DND active)")
                return []

            delivered: List[DeliveredNotification] = []
            for _, request in due:
                posted = self.notifier.post(
                    title=request.title,
                    message=request.body,
                    sound=request.sound
                )
                request.last_fired = now
                if posted:
                    delivered.append(DeliveredNotification(request=request, delivered_at=now))
                else:
                    print(f"  [CENTER] Failed to post notification: {request.id}")

            with self._lock:
                state = self._load()
                processed = {
                    request.id: (snapshot, request) for snapshot, request in due
                }
                pending = []
                for item in state["pending"]:
                    snapshot, request = processed.get(item["id"], (None, None))
                    if snapshot is None or item != snapshot:
                        pending.append(item)
                    elif request.next_fire_date() is not None:
                        pending.append(request.to_dict())

                # Re-delivery of an id replaces its previous entry
                delivered_ids = {item.id for item in delivered}
                history = [
                    item for item in state["delivered"]
                    if item["request"]["id"] not in delivered_ids
                ]
                history.extend(item.to_dict() for item in delivered)

                state["pending"] = pending
                state["delivered"] = history[-self.max_delivered:]
                self._save(state)

        return delivered

    def purge(self) -> None:
        """Delete all notification state (privacy purge)."""
        with self._lock:
            if self.state_file.exists():
                self.state_file.unlink()
