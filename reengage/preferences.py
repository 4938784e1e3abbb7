"""
Local preference store.

Small JSON key-value store for app preferences (first-use timestamp,
notification opt-in). Timestamps are stored as epoch milliseconds.
"""

import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any


class PrefKeys:
    """Preference keys used by the engagement scheduler."""
    FIRST_APP_USE = "firstAppUse"
    ENGAGEMENT_NOTIFICATIONS = "notifications.tipsAndFeatures"


def to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class PreferenceStore:
    """
    Manages local storage of preferences.

    Storage location: ./storage/preferences.json
    """

    VERSION = "1.0"

    def __init__(self, storage_dir: str = "./storage"):
        """
        Initialize preference store.

        Args:
            storage_dir: Directory for storage files
        """
        self.storage_dir = Path(storage_dir)
        self.preferences_file = self.storage_dir / "preferences.json"
        self._lock = threading.Lock()

        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, Any]:
        if not self.preferences_file.exists():
            return {}

        try:
            with open(self.preferences_file, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"WARNING: Could not read preferences, using defaults: {e}")
            return {}

        if data.get("version") != self.VERSION:
            print(f"WARNING: Unknown preferences file version: {data.get('version')}")

        return data.get("values") or {}

    def _save(self, values: Dict[str, Any]):
        data = {
            "version": self.VERSION,
            "values": values
        }
        temp_file = self.preferences_file.with_suffix('.tmp')
        with open(temp_file, 'w') as f:
            json.dump(data, f, indent=2)
        os.replace(temp_file, self.preferences_file)

    def _set(self, key: str, value: Any):
        with self._lock:
            values = self._load()
            values[key] = value
            self._save(values)

    def get_timestamp(self, key: str) -> Optional[datetime]:
        with self._lock:
            value = self._load().get(key)
        if value is None or isinstance(value, bool):
            return None
        try:
            return from_millis(int(value))
        except (TypeError, ValueError, OverflowError, OSError):
            print(f"WARNING: Ignoring invalid timestamp for {key}: {value!r}")
            return None

    def set_timestamp(self, key: str, value: datetime):
        self._set(key, to_millis(value))

    def get_bool(self, key: str, default: bool = False) -> bool:
        with self._lock:
            value = self._load().get(key)
        if isinstance(value, bool):
            return value
        return default

    def set_bool(self, key: str, value: bool):
        self._set(key, bool(value))

    def has_key(self, key: str) -> bool:
        with self._lock:
            return key in self._load()

    def remove(self, key: str):
        with self._lock:
            values = self._load()
            if key in values:
                del values[key]
                self._save(values)

    def purge(self) -> bool:
        """
        Delete all preferences (part of purge data).

        Returns:
            True if deleted successfully
        """
        try:
            with self._lock:
                if self.preferences_file.exists():
                    self.preferences_file.unlink()
            return True
        except OSError as e:
            print(f"ERROR: Failed to delete preferences: {e}")
            return False
