"""
Notification Pump - background delivery of due notifications.

Periodically asks the desktop notification center to post whatever is due.
"""

import threading
import time
from typing import Optional, List

from .event_logger import EventLogger
from .notification_center import DesktopNotificationCenter
from .notification_models import DeliveredNotification


class NotificationPump:
    """
    Background thread that drives DesktopNotificationCenter.deliver_due().

    Best-effort: errors are printed (rate limited) and the loop keeps going.
    """

    def __init__(
        self,
        center: DesktopNotificationCenter,
        interval_sec: float = 5.0,
        event_logger: Optional[EventLogger] = None
    ):
        """
        Initialize notification pump.

        Args:
            center: Notification center to deliver from
            interval_sec: How often to check for due notifications
            event_logger: Optional logger for delivered notifications
        """
        self.center = center
        self.interval_sec = interval_sec
        self.event_logger = event_logger

        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._error_count = 0
        self._last_error_time = 0.0
        self._backoff_sec = 1.0

    def is_running(self) -> bool:
        return self._running

    def start(self):
        """Start the pump thread."""
        if self._running:
            return

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._pump_loop, daemon=True)
        self._thread.start()

    def stop(self):
        """Stop the pump thread."""
        self._running = False
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def run_once(self) -> List[DeliveredNotification]:
        """Deliver everything currently due."""
        delivered = self.center.deliver_due()
        for item in delivered:
            print(f"  [PUMP] Delivered {item.id}: {item.request.title}")
            if self.event_logger:
                self.event_logger.log_delivered(
                    notification_id=item.id,
                    title=item.request.title
                )
        return delivered

    def _pump_loop(self):
        """Main pump loop (runs in background thread)."""
        while self._running:
            try:
                self.run_once()

                self._error_count = 0
                self._backoff_sec = 1.0

                self._stop_event.wait(self.interval_sec)

            except Exception as e:
                self._error_count += 1
                current_time = time.time()

                # Only log errors occasionally to avoid spam
                if current_time - self._last_error_time > 10.0:
                    print(f"[PUMP] Error delivering notifications: {e}")
                    self._last_error_time = current_time

                if self._error_count > 3:
                    self._backoff_sec = min(self._backoff_sec * 2, 30.0)
                    self._stop_event.wait(self._backoff_sec)
                else:
                    self._stop_event.wait(self.interval_sec)
