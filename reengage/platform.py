import os
import sys
from pathlib import Path


def is_macos() -> bool:
    return sys.platform == "darwin"


def storage_root(default: str = "./storage") -> Path:
    """Storage directory, overridable with REENGAGE_STORAGE_ROOT."""
    override = os.environ.get("REENGAGE_STORAGE_ROOT")
    return Path(override).expanduser() if override else Path(default)
