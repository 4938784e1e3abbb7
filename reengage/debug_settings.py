"""
Hidden debug settings toggle.

Tapping the version label a number of times in a row shows or hides the
debug section of the settings panel.
"""

import threading
from typing import Optional


class DebugSettings:
    """Tap counter that flips debug-section visibility."""

    def __init__(self, taps_to_toggle: int = 5, visible: bool = False):
        """
        Initialize debug settings.

        Args:
            taps_to_toggle: Taps needed to flip visibility
            visible: Initial visibility
        """
        assert taps_to_toggle > 0, "taps_to_toggle must be > 0"
        self.taps_to_toggle = taps_to_toggle
        self._initial_visible = visible
        self._visible = visible
        self._tap_count = 0
        self._lock = threading.Lock()

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def tap_count(self) -> int:
        return self._tap_count

    def register_tap(self) -> bool:
        """
        Count one tap; flip visibility when the threshold is reached.

        Returns:
            True if this tap flipped visibility
        """
        with self._lock:
            self._tap_count += 1
            if self._tap_count >= self.taps_to_toggle:
                self._tap_count = 0
                self._visible = not self._visible
                return True
            return False

    def reset(self):
        """Restore initial visibility and clear the tap count."""
        with self._lock:
            self._tap_count = 0
            self._visible = self._initial_visible


# Global instance
_debug_settings: Optional[DebugSettings] = None


def get_debug_settings() -> DebugSettings:
    """Get the global DebugSettings instance."""
    global _debug_settings
    if _debug_settings is None:
        _debug_settings = DebugSettings()
    return _debug_settings


def reset_debug_settings():
    """Drop the global instance; the next get creates a fresh one."""
    global _debug_settings
    _debug_settings = None
