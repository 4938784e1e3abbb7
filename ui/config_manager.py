"""
Configuration manager for persisting engagement settings.

Saves/loads EngagementConfig to/from JSON.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional

from reengage import EngagementConfig, EngagementPreset


class ConfigManager:
    """
    Manages persistence of configuration settings.

    Saves to storage/engagement_config.json
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to config file (default: storage/engagement_config.json)
        """
        if config_path is None:
            config_path = "storage/engagement_config.json"

        self.config_path = Path(config_path)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def save_config(
        self,
        engagement_config: EngagementConfig,
        system_config: Optional[Dict[str, Any]] = None
    ):
        """
        Save configuration to JSON.

        Args:
            engagement_config: Engagement notification configuration
            system_config: System settings (pump interval, DND handling, etc.)
        """
        config = {
            "engagement_config": {
                "preset": engagement_config.preset.value,
                "window_unit_sec": engagement_config.window_unit_sec,
                "target_offset_sec": engagement_config.target_offset_sec,
                "notification_id": engagement_config.notification_id,
                "title": engagement_config.title,
                "body": engagement_config.body,
                "permission_timeout_sec": engagement_config.permission_timeout_sec
            },
            "system_config": system_config or self._get_default_config()["system_config"]
        }

        with open(self.config_path, "w") as f:
            json.dump(config, f, indent=2)

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from JSON.

        Returns:
            Dictionary with engagement_config, system_config
        """
        if not self.config_path.exists():
            return self._get_default_config()

        try:
            with open(self.config_path, "r") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return self._get_default_config()

    def load_engagement_config(self) -> EngagementConfig:
        """
        Load configuration as an EngagementConfig.

        Unknown keys are ignored; invalid values fall back to the preset.
        """
        data = dict(self.load_config().get("engagement_config") or {})
        try:
            preset = EngagementPreset(data.pop("preset", EngagementPreset.RELEASE.value))
        except ValueError:
            preset = EngagementPreset.RELEASE

        try:
            return EngagementConfig.from_preset(preset, **data)
        except (AssertionError, TypeError) as e:
            print(f"WARNING: Invalid engagement config, using {preset.value} defaults: {e}")
            return EngagementConfig.from_preset(preset)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        engagement_config = EngagementConfig()

        return {
            "engagement_config": {
                "preset": engagement_config.preset.value,
                "window_unit_sec": engagement_config.window_unit_sec,
                "target_offset_sec": engagement_config.target_offset_sec,
                "notification_id": engagement_config.notification_id,
                "title": engagement_config.title,
                "body": engagement_config.body,
                "permission_timeout_sec": engagement_config.permission_timeout_sec
            },
            "system_config": {
                "pump_interval_sec": 5.0,
                "respect_dnd": True,
                "max_delivered": 50
            }
        }

    def purge_config(self):
        """Delete configuration file (privacy purge)."""
        if self.config_path.exists():
            self.config_path.unlink()
