"""
Tests for the hidden debug settings toggle.

Usage:
    pytest test_debug_settings.py
"""

from reengage import DebugSettings, get_debug_settings, reset_debug_settings


def test_five_taps_toggle_visibility():
    debug = DebugSettings()

    flips = [debug.register_tap() for _ in range(5)]

    assert flips == [False, False, False, False, True]
    assert debug.is_visible is True
    assert debug.tap_count == 0


def test_next_five_taps_hide_again():
    debug = DebugSettings()
    for _ in range(10):
        debug.register_tap()

    assert debug.is_visible is False


def test_reset_restores_initial_state():
    debug = DebugSettings(visible=True)
    for _ in range(7):
        debug.register_tap()

    debug.reset()

    assert debug.is_visible is True
    assert debug.tap_count == 0


def test_global_instance():
    reset_debug_settings()
    first = get_debug_settings()
    first.register_tap()

    assert get_debug_settings() is first

    reset_debug_settings()
    assert get_debug_settings() is not first
    assert get_debug_settings().tap_count == 0
    reset_debug_settings()
