"""
Engagement notification configuration: presets, windows and copy.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional


ENGAGEMENT_NOTIFICATION_ID = "org.reengage.engagementNotification"


class EngagementPreset(Enum):
    """
    Timing presets.

    RELEASE (default): 24h windows, notification 48h after first use
    BETA: 2 min windows, notification 3 min after first use (manual testing)
    """
    RELEASE = "release"
    BETA = "beta"


@dataclass
class EngagementConfig:
    """
    Configuration for the engagement notification.

    All durations in seconds.

    Windows:
    - window 1: [0, window_unit) after first use -> schedule
    - window 2: [window_unit, 2 * window_unit) -> cancel
    - after that: nothing to do
    """
    window_unit_sec: float = 24 * 60 * 60
    target_offset_sec: float = 48 * 60 * 60  # fire time, measured from first use

    notification_id: str = ENGAGEMENT_NOTIFICATION_ID
    title: str = "Still there?"
    body: str = "Pick up where you left off. Your tips and features are waiting."

    # Treat a permission query slower than this as "no permission" (None = wait)
    permission_timeout_sec: Optional[float] = None

    preset: EngagementPreset = EngagementPreset.RELEASE

    def __post_init__(self):
        """Validate configuration."""
        assert self.window_unit_sec > 0, "window_unit_sec must be > 0"
        assert self.target_offset_sec > 0, "target_offset_sec must be > 0"
        assert self.notification_id, "notification_id must not be empty"
        if self.permission_timeout_sec is not None:
            assert self.permission_timeout_sec > 0, "permission_timeout_sec must be > 0"

    @property
    def window_unit(self) -> timedelta:
        return timedelta(seconds=self.window_unit_sec)

    @property
    def target_offset(self) -> timedelta:
        return timedelta(seconds=self.target_offset_sec)

    @staticmethod
    def from_preset(preset: EngagementPreset, **overrides) -> 'EngagementConfig':
        """
        Create config from preset with optional overrides.

        Args:
            preset: Timing preset to use
            **overrides: Override specific config values

        Returns:
            EngagementConfig instance
        """
        if preset == EngagementPreset.BETA:
            config = EngagementConfig(
                window_unit_sec=2 * 60,
                target_offset_sec=3 * 60,
                preset=preset
            )
        else:  # RELEASE
            config = EngagementConfig(preset=preset)

        for key, value in overrides.items():
            if hasattr(config, key):
                setattr(config, key, value)

        config.__post_init__()
        return config
