"""
Event logger for engagement decisions and notification calls.

Logs decisions, schedules, cancellations and authorization results.
"""

import json
import time
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime


class EventLogger:
    """
    Logger for engagement notification events.

    Logs to JSONL format (one JSON object per line).
    """

    def __init__(self, log_path: Optional[str] = None):
        """
        Initialize event logger.

        Args:
            log_path: Path to log file (default: storage/events.jsonl)
        """
        if log_path is None:
            log_path = "storage/events.jsonl"

        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_event(
        self,
        event_type: str,
        action: str,
        reason: str,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        Log an engagement event.

        Args:
            event_type: Type of event (decision, scheduled, cancelled, etc.)
            action: Scheduler action at time of event (schedule, cancel, none)
            reason: Brief reason string
            metadata: Additional metadata (window, fire date, etc.)
        """
        event = {
            "timestamp": datetime.now().isoformat(),
            "unix_time": time.time(),
            "event_type": event_type,
            "action": action,
            "reason": reason,
            "metadata": metadata or {}
        }

        with open(self.log_path, "a") as f:
            f.write(json.dumps(event) + "\n")

    def log_decision(
        self,
        action: str,
        window: str,
        reason: str,
        dry_run: bool = False
    ):
        """Log the outcome of one scheduler invocation."""
        self.log_event(
            event_type="decision",
            action=action,
            reason=reason,
            metadata={"window": window, "dry_run": dry_run}
        )

    def log_scheduled(
        self,
        notification_id: str,
        fire_at: str
    ):
        """Log a scheduled engagement notification."""
        self.log_event(
            event_type="scheduled",
            action="schedule",
            reason="Scheduled engagement notification",
            metadata={"notification_id": notification_id, "fire_at": fire_at}
        )

    def log_cancelled(
        self,
        notification_id: str
    ):
        """Log a cancelled engagement notification."""
        self.log_event(
            event_type="cancelled",
            action="cancel",
            reason="Removed pending engagement notification",
            metadata={"notification_id": notification_id}
        )

    def log_suppressed(
        self,
        reason: str,
        suppression_type: str
    ):
        """Log an invocation short-circuited before window evaluation."""
        self.log_event(
            event_type="suppressed",
            action="none",
            reason=reason,
            metadata={"suppression_type": suppression_type}
        )

    def log_authorization(
        self,
        granted: bool,
        error: Optional[str] = None
    ):
        """Log the result of a permission request."""
        self.log_event(
            event_type="authorization",
            action="none",
            reason="granted" if granted else "not granted",
            metadata={"granted": granted, "error": error}
        )

    def log_delivered(
        self,
        notification_id: str,
        title: str
    ):
        """Log a notification posted by the delivery pump."""
        self.log_event(
            event_type="delivered",
            action="none",
            reason=f"Delivered: {title}",
            metadata={"notification_id": notification_id}
        )

    def get_recent_events(self, limit: int = 100) -> list:
        """
        Get recent events from log.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of event dictionaries
        """
        if not self.log_path.exists():
            return []

        events = []
        with open(self.log_path, "r") as f:
            for line in f:
                try:
                    events.append(json.loads(line.strip()))
                except json.JSONDecodeError:
                    continue

        return events[-limit:]

    def purge_logs(self):
        """Delete all logged events (privacy purge)."""
        if self.log_path.exists():
            self.log_path.unlink()
