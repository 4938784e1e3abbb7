"""
Tests for the JSON preference store.

Usage:
    pytest test_preferences.py
"""

import json
from datetime import datetime, timezone

import pytest

from reengage import PreferenceStore, PrefKeys


@pytest.fixture
def prefs(tmp_path):
    return PreferenceStore(str(tmp_path))


def test_missing_values_use_defaults(prefs):
    assert prefs.get_timestamp(PrefKeys.FIRST_APP_USE) is None
    assert prefs.get_bool(PrefKeys.ENGAGEMENT_NOTIFICATIONS, default=True) is True
    assert prefs.get_bool(PrefKeys.ENGAGEMENT_NOTIFICATIONS) is False


def test_explicit_false_overrides_default(prefs):
    prefs.set_bool(PrefKeys.ENGAGEMENT_NOTIFICATIONS, False)

    assert prefs.get_bool(PrefKeys.ENGAGEMENT_NOTIFICATIONS, default=True) is False


def test_timestamp_stored_as_epoch_millis(tmp_path, prefs):
    moment = datetime(2026, 1, 15, 12, 30, 5, 250000, tzinfo=timezone.utc)

    prefs.set_timestamp(PrefKeys.FIRST_APP_USE, moment)

    data = json.loads((tmp_path / "preferences.json").read_text())
    assert data["values"][PrefKeys.FIRST_APP_USE] == int(moment.timestamp() * 1000)
    assert prefs.get_timestamp(PrefKeys.FIRST_APP_USE) == moment


def test_values_shared_between_instances(tmp_path, prefs):
    prefs.set_bool("flag", True)

    assert PreferenceStore(str(tmp_path)).get_bool("flag") is True


def test_bool_key_is_not_a_timestamp(prefs):
    prefs.set_bool("flag", True)

    assert prefs.get_timestamp("flag") is None


def test_invalid_timestamp_ignored(tmp_path, prefs):
    (tmp_path / "preferences.json").write_text(
        json.dumps({"version": "1.0", "values": {PrefKeys.FIRST_APP_USE: "yesterday"}})
    )

    assert prefs.get_timestamp(PrefKeys.FIRST_APP_USE) is None


def test_corrupt_file_reads_as_empty(tmp_path, prefs):
    (tmp_path / "preferences.json").write_text("{oops")

    assert prefs.get_bool("flag", default=True) is True
    prefs.set_bool("flag", False)
    assert prefs.get_bool("flag", default=True) is False


def test_remove_and_has_key(prefs):
    prefs.set_bool("flag", True)
    assert prefs.has_key("flag")

    prefs.remove("flag")
    prefs.remove("never-set")

    assert not prefs.has_key("flag")


def test_purge(tmp_path, prefs):
    prefs.set_bool("flag", True)

    assert prefs.purge() is True
    assert not (tmp_path / "preferences.json").exists()
    assert prefs.get_bool("flag") is False
