"""
Desktop notification poster.

Posts notifications through pync when available, falling back to
terminal-notifier and then osascript. Respects system DND/Focus modes.
"""

import shutil
import subprocess
from typing import Optional

from .platform import is_macos


class DesktopNotifier:
    """
    Posts a single notification to the desktop notification center.

    Posting is best-effort: failures are printed and reported as False,
    never raised.
    """

    def __init__(self, app_name: str = "Reengage", sender: Optional[str] = None):
        """
        Initialize notifier.

        Args:
            app_name: Group name used for posted notifications
            sender: Optional bundle id to post as (pync only)
        """
        self.app_name = app_name
        self.sender = sender

    def available_backend(self) -> Optional[str]:
        """
        Name of the first usable delivery backend, or None.

        Returns:
            "pync", "terminal-notifier", "osascript" or None
        """
        if not is_macos():
            return None
        try:
            import pync  # noqa: F401
            return "pync"
        except ImportError:
            pass
        if shutil.which("terminal-notifier"):
            return "terminal-notifier"
        if shutil.which("osascript"):
            return "osascript"
        return None

    def is_dnd_active(self) -> bool:
        """
        Check if macOS Do Not Disturb / Focus mode is active.

        Returns:
            True if DND is active, False otherwise (or if unknown)
        """
        if not is_macos():
            return False
        try:
            result = subprocess.run(
                ["defaults", "read", "com.apple.notificationcenterui", "doNotDisturb"],
                capture_output=True,
                text=True,
                timeout=1.0
            )
            return result.returncode == 0 and result.stdout.strip() == "1"
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False

    def post(
        self,
        title: str,
        message: str,
        subtitle: Optional[str] = None,
        sound: Optional[str] = "default"
    ) -> bool:
        """
        Post a notification using the best available backend.

        Args:
            title: Notification title
            message: Notification body
            subtitle: Optional subtitle
            sound: Sound name, None for silent

        Returns:
            True if the notification was handed to the system
        """
        backend = self.available_backend()
        if backend == "pync":
            return self._post_via_pync(title, message, subtitle, sound)
        if backend == "terminal-notifier":
            return self._post_via_terminal_notifier(title, message, subtitle, sound)
        if backend == "osascript":
            return self._post_via_osascript(title, message, subtitle)

        print("  [NOTIFICATION] Error: no notification backend available")
        return False

    def _post_via_pync(
        self,
        title: str,
        message: str,
        subtitle: Optional[str],
        sound: Optional[str]
    ) -> bool:
        try:
            import pync

            kwargs = {
                "title": title,
                "subtitle": subtitle or "",
                "group": self.app_name,
            }
            if sound:
                kwargs["sound"] = sound
            if self.sender:
                kwargs["sender"] = self.sender

            pync.notify(message, **kwargs)
            return True

        except ImportError:
            return self._post_via_osascript(title, message, subtitle)
        except Exception as e:
            print(f"  [NOTIFICATION] Error: {e}")
            return False

    def _post_via_terminal_notifier(
        self,
        title: str,
        message: str,
        subtitle: Optional[str],
        sound: Optional[str]
    ) -> bool:
        cmd = [
            "terminal-notifier",
            "-title", title,
            "-message", message,
        ]
        if sound:
            cmd.extend(["-sound", sound])
        if subtitle:
            cmd.extend(["-subtitle", subtitle])

        try:
            # Non-blocking; give it 0.1s to surface immediate failures
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True
            )
            try:
                _, stderr = proc.communicate(timeout=0.1)
                if stderr:
                    print(f"  [NOTIFICATION] Warning: {stderr.strip()}")
            except subprocess.TimeoutExpired:
                pass
            return True

        except FileNotFoundError:
            print("  [NOTIFICATION] Error: terminal-notifier not found")
            return self._post_via_osascript(title, message, subtitle)

    def _post_via_osascript(
        self,
        title: str,
        message: str,
        subtitle: Optional[str] = None
    ) -> bool:
        def quote(text: str) -> str:
            return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'

        script = f"display notification {quote(message)} with title {quote(title)}"
        if subtitle:
            script += f" subtitle {quote(subtitle)}"

        try:
            subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                timeout=2.0
            )
            return True
        except (subprocess.TimeoutExpired, FileNotFoundError):
            print("WARNING: Could not post notification (osascript failed)")
            return False
