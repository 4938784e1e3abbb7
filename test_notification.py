"""
Tests for desktop notification posting.

Usage:
    pytest test_notification.py
"""

import subprocess
import sys

import pytest

from reengage import DesktopNotifier
from reengage import notifier as notifier_module


@pytest.fixture
def macos_without_pync(monkeypatch):
    """Pretend to run on macOS with pync unavailable."""
    monkeypatch.setattr(notifier_module, "is_macos", lambda: True)
    monkeypatch.setitem(sys.modules, "pync", None)


def test_no_backend_off_macos(monkeypatch):
    monkeypatch.setattr(notifier_module, "is_macos", lambda: False)
    notifier = DesktopNotifier()

    assert notifier.available_backend() is None
    assert notifier.is_dnd_active() is False
    assert notifier.post("Title", "Message") is False


def test_prefers_terminal_notifier_over_osascript(monkeypatch, macos_without_pync):
    monkeypatch.setattr(notifier_module.shutil, "which", lambda name: f"/usr/local/bin/{name}")

    assert DesktopNotifier().available_backend() == "terminal-notifier"


def test_posts_via_osascript(monkeypatch, macos_without_pync):
    monkeypatch.setattr(
        notifier_module.shutil, "which",
        lambda name: "/usr/bin/osascript" if name == "osascript" else None
    )
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    monkeypatch.setattr(notifier_module.subprocess, "run", fake_run)

    assert DesktopNotifier().post('Say "hi"', "Come back", subtitle="Tips") is True

    assert calls == [[
        "osascript", "-e",
        'display notification "Come back" with title "Say \\"hi\\"" subtitle "Tips"'
    ]]


def test_osascript_failure_reports_false(monkeypatch, macos_without_pync):
    monkeypatch.setattr(
        notifier_module.shutil, "which",
        lambda name: "/usr/bin/osascript" if name == "osascript" else None
    )

    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(notifier_module.subprocess, "run", fake_run)

    assert DesktopNotifier().post("Title", "Message") is False


def test_dnd_read_from_defaults(monkeypatch):
    monkeypatch.setattr(notifier_module, "is_macos", lambda: True)
    monkeypatch.setattr(
        notifier_module.subprocess, "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, "1\n", "")
    )

    assert DesktopNotifier().is_dnd_active() is True
