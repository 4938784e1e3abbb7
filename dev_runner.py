#!/usr/bin/env python3
"""
Reengage Development Runner
Simulates app-foreground events against the engagement scheduler and runs the
notification pump so scheduled notifications actually show up.

Usage:
    python dev_runner.py [--preset beta] [--first-use-hours-ago 12] [--dry-run]
    python dev_runner.py --request-permission --pump
"""

import argparse
import asyncio
import sys
import time
from datetime import datetime, timedelta, timezone

from reengage import (PreferenceStore, PrefKeys, DesktopNotificationCenter, NotificationService,
                      NotificationPump, EngagementScheduler, EngagementPreset, EngagementConfig,
                      EventLogger, AuthorizationError, storage_root)
from ui.config_manager import ConfigManager


def print_decision(decision):
    """Print one scheduler decision."""
    print(f"[{decision.window.value.upper()}] {decision.action.value.upper()} - {decision.reason}")
    if decision.fire_at:
        print(f"  Fire at: {decision.fire_at.astimezone().isoformat()}")


async def request_permission(service: NotificationService, event_logger: EventLogger) -> bool:
    """Ask for notification permission and print the outcome."""
    try:
        granted = await service.request_authorization()
        event_logger.log_authorization(granted=granted)
    except AuthorizationError as e:
        event_logger.log_authorization(granted=False, error=str(e))
        print(f"PERMISSION: ✗ {e}")
        return False

    print(f"PERMISSION: {'✓ Granted' if granted else '✗ Not granted'}")
    return granted


async def run_foreground_event(scheduler: EngagementScheduler):
    """One app-foreground event: record first use, then decide."""
    scheduler.record_first_use()
    decision = await scheduler.schedule()
    print_decision(decision)
    return decision


def main():
    parser = argparse.ArgumentParser(description="Reengage Dev Runner")
    parser.add_argument("--preset", type=str, choices=["release", "beta"],
                        help="Timing preset (default: saved config)")
    parser.add_argument("--first-use-hours-ago", type=float,
                        help="Overwrite first use with now minus this many hours")
    parser.add_argument("--opt-out", action="store_true", help="Set the engagement preference to off")
    parser.add_argument("--opt-in", action="store_true", help="Set the engagement preference to on")
    parser.add_argument("--request-permission", action="store_true", help="Request notification permission first")
    parser.add_argument("--dry-run", action="store_true", help="Log decisions but don't touch notifications")
    parser.add_argument("--pump", action="store_true", help="Keep running and deliver due notifications")
    parser.add_argument("--interval", type=float, help="Pump interval in seconds (default: saved config)")
    parser.add_argument("--no-dnd-check", action="store_true", help="Deliver even while DND is active (dev only)")
    args = parser.parse_args()

    if args.opt_in and args.opt_out:
        print("ERROR: --opt-in and --opt-out are mutually exclusive")
        sys.exit(1)

    root = storage_root()
    config_manager = ConfigManager(str(root / "engagement_config.json"))
    system_config = config_manager.load_config()["system_config"]

    if args.preset:
        engagement_config = EngagementConfig.from_preset(EngagementPreset(args.preset))
    else:
        engagement_config = config_manager.load_engagement_config()

    prefs = PreferenceStore(str(root))
    event_logger = EventLogger(str(root / "events.jsonl"))
    center = DesktopNotificationCenter(
        str(root),
        respect_dnd=system_config.get("respect_dnd", True) and not args.no_dnd_check,
        max_delivered=system_config.get("max_delivered", 50)
    )
    service = NotificationService(center)
    scheduler = EngagementScheduler(
        prefs,
        service,
        config=engagement_config,
        event_logger=event_logger,
        dry_run=args.dry_run
    )

    print("=" * 80)
    print("Reengage - Engagement Notification Dev Runner")
    print("=" * 80)
    print(f"Storage: {root.resolve()}")
    print(f"Preset: {engagement_config.preset.value.upper()}")
    print(f"Window: {engagement_config.window_unit}  Offset: {engagement_config.target_offset}")
    print(f"Notification id: {engagement_config.notification_id}")
    if args.dry_run:
        print("Mode: DRY RUN (no notifications scheduled or cancelled)")
    print()

    if args.first_use_hours_ago is not None:
        first_use = datetime.now(timezone.utc) - timedelta(hours=args.first_use_hours_ago)
        prefs.set_timestamp(PrefKeys.FIRST_APP_USE, first_use)
        print(f"First use set to {first_use.astimezone().isoformat()}")

    if args.opt_in or args.opt_out:
        scheduler.set_opted_in(args.opt_in)
        print(f"Engagement notifications: {'ON' if args.opt_in else 'OFF'}")

    if args.request_permission:
        asyncio.run(request_permission(service, event_logger))

    print()
    asyncio.run(run_foreground_event(scheduler))

    if not args.pump:
        return

    interval = args.interval or system_config.get("pump_interval_sec", 5.0)
    pump = NotificationPump(center, interval_sec=interval, event_logger=event_logger)

    print()
    print(f"Pump running every {interval:.1f}s. Press Ctrl+C to stop")
    print("=" * 80)

    try:
        pump.start()
        while True:
            time.sleep(1.0)
    except KeyboardInterrupt:
        print()
        print("Stopping pump...")
        pump.stop()
        pending = center.pending_requests()
        print(f"Pending notifications: {len(pending)}")
        for request in pending:
            fire_at = request.next_fire_date()
            print(f"  {request.id} -> {fire_at.astimezone().isoformat() if fire_at else 'never'}")
        print("=" * 80)
        sys.exit(0)


if __name__ == "__main__":
    main()
