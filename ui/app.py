"""
Reengage Streamlit UI - Notification settings and engagement status
"""
import streamlit as st
import asyncio
from pathlib import Path
from datetime import datetime, timezone
import pandas as pd
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from reengage import (PreferenceStore, PrefKeys, DesktopNotificationCenter, NotificationService,
                      EngagementScheduler, EngagementConfig, EngagementPreset, EventLogger,
                      AuthorizationError, get_debug_settings, storage_root)
from ui.config_manager import ConfigManager
from streamlit_autorefresh import st_autorefresh

VERSION = "1.0.0"

# Page config
st.set_page_config(page_title="Reengage", page_icon="🔔", layout="wide")

# Refresh every 5 seconds so delivered notifications show up
st_autorefresh(interval=5000, key="datarefresh")

root = storage_root()

# Initialize session state
if 'config_manager' not in st.session_state:
    st.session_state.config_manager = ConfigManager(str(root / "engagement_config.json"))
if 'prefs' not in st.session_state:
    st.session_state.prefs = PreferenceStore(str(root))
if 'event_logger' not in st.session_state:
    st.session_state.event_logger = EventLogger(str(root / "events.jsonl"))
if 'center' not in st.session_state:
    system_config = st.session_state.config_manager.load_config()["system_config"]
    st.session_state.center = DesktopNotificationCenter(
        str(root),
        respect_dnd=system_config.get("respect_dnd", True),
        max_delivered=system_config.get("max_delivered", 50)
    )

prefs: PreferenceStore = st.session_state.prefs
center: DesktopNotificationCenter = st.session_state.center
event_logger: EventLogger = st.session_state.event_logger
service = NotificationService(center)
config = st.session_state.config_manager.load_engagement_config()
scheduler = EngagementScheduler(prefs, service, config=config, event_logger=event_logger)
debug = get_debug_settings()

st.title("🔔 Notifications")

# Permission Section
st.header("Permission")
settings = asyncio.run(service.get_notification_settings())
status = settings.authorization_status
if status.has_permission:
    st.success(f"✅ Notifications allowed ({status.value})")
else:
    st.warning(f"⚠️ Notifications not allowed ({status.value})")
    if st.button("Allow Notifications"):
        try:
            granted = asyncio.run(service.request_authorization())
            event_logger.log_authorization(granted=granted)
        except AuthorizationError as e:
            event_logger.log_authorization(granted=False, error=str(e))
            st.error(f"Permission request failed: {e}")
        st.rerun()

st.divider()

# Engagement Section
st.header("Tips and Features")
opted_in = scheduler.is_opted_in()
new_opted_in = st.toggle("Tips and features notifications", value=opted_in)
if new_opted_in != opted_in:
    scheduler.set_opted_in(new_opted_in)
    st.rerun()

first_use = prefs.get_timestamp(PrefKeys.FIRST_APP_USE)
col1, col2, col3 = st.columns(3)
col1.metric("First use", first_use.astimezone().strftime("%Y-%m-%d %H:%M") if first_use else "Not recorded")
col2.metric("Window", scheduler.window_for(first_use, datetime.now(timezone.utc)).value.upper())
col3.metric("Preset", config.preset.value.upper())

if st.button("Run Engagement Check"):
    scheduler.record_first_use()
    decision = asyncio.run(scheduler.schedule())
    st.info(f"{decision.action.value.upper()}: {decision.reason}")

st.divider()

# Timing Section
st.header("⏱ Timing")
saved = st.session_state.config_manager.load_config()
system_config = saved['system_config']
presets = [preset.value for preset in EngagementPreset]
preset = st.selectbox("Preset", presets, index=presets.index(config.preset.value))
col1, col2, col3 = st.columns(3)
pump_interval = col1.slider("Pump interval (s)", 1.0, 60.0,
                            float(system_config.get('pump_interval_sec', 5.0)), 1.0)
max_delivered = col2.number_input("Delivered history", 1, 500,
                                  int(system_config.get('max_delivered', 50)))
respect_dnd = col3.checkbox("Hold during DND", value=system_config.get('respect_dnd', True))

if st.button("💾 Save Timing"):
    st.session_state.config_manager.save_config(
        EngagementConfig.from_preset(
            EngagementPreset(preset),
            permission_timeout_sec=config.permission_timeout_sec
        ),
        {
            "pump_interval_sec": pump_interval,
            "respect_dnd": respect_dnd,
            "max_delivered": int(max_delivered)
        }
    )
    st.success("✅ Saved! Restart dev_runner to apply.")

st.divider()

# Queue Section
st.header("Notification Queue")
pending = center.pending_requests()
if pending:
    df = pd.DataFrame([
        {
            "id": request.id,
            "title": request.title,
            "fires_at": request.next_fire_date().isoformat() if request.next_fire_date() else None,
            "repeats": request.repeats
        }
        for request in pending
    ])
    st.dataframe(df, use_container_width=True)
else:
    st.info("No pending notifications")

delivered = asyncio.run(service.find_delivered_notifications())
st.subheader("Delivered")
if delivered:
    df = pd.DataFrame([
        {"id": item.id, "title": item.request.title, "delivered_at": item.delivered_at.isoformat()}
        for item in delivered
    ])
    st.dataframe(df, use_container_width=True)
    if st.button("Clear Delivered"):
        center.remove_all_delivered_notifications()
        st.rerun()
else:
    st.info("No delivered notifications")

st.divider()

# Event Log
st.header("📋 Event Log")
events = event_logger.get_recent_events(100)
if events:
    df = pd.DataFrame(events)
    st.dataframe(df[['timestamp', 'event_type', 'action', 'reason']].tail(20), use_container_width=True)
else:
    st.info("No events yet")

# Debug Section (hidden until the version label is tapped five times)
if debug.is_visible:
    st.divider()
    st.header("🛠 Debug")
    col1, col2 = st.columns(2)
    if col1.button("Test Notification in 10s"):
        service.schedule_in(
            title="Reengage Test",
            body="If you see this, notifications are working!",
            id="org.reengage.debugNotification",
            interval_sec=10
        )
        st.success("Scheduled")
    if col2.button("Remove All Pending"):
        service.remove_all_pending_notifications()
        st.rerun()
    if st.button("🗑️ Purge All Data"):
        event_logger.purge_logs()
        prefs.purge()
        center.purge()
        st.session_state.config_manager.purge_config()
        st.success("✅ Purged!")

st.divider()
if st.button(f"Reengage {VERSION}", type="tertiary"):
    if debug.register_tap():
        st.rerun()
