"""Entry point: print a calendar window or run the reminder poller."""
from __future__ import annotations

import argparse
import asyncio
from datetime import timedelta
from pathlib import Path

from program_calendar.calendar.aggregation import aggregate
from program_calendar.calendar.models import ViewMode
from program_calendar.calendar.source import EntitySource, JsonFileEntitySource, fetch_for_window
from program_calendar.calendar.window import compute_window, today_reference, window_days
from program_calendar.config.loader import AppConfig, load_config
from program_calendar.reminders.dedup_store import ReminderDedupStore
from program_calendar.reminders.notifications import LoggingToastSink, ReminderNotifier
from program_calendar.reminders.preferences import ReminderPreferences
from program_calendar.reminders.scheduler import ReminderScheduler
from program_calendar.storage.kv_store import JsonFileStore, KeyValueStore
from program_calendar.util.logging_utils import configure_logging, get_logger
from program_calendar.util.time_utils import local_midnight


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default="config/dev.yaml", help="Path to env config yaml")
    parser.add_argument("--entities", default="data/entities.json", help="Exported programs/agenda/KPI JSON")
    parser.add_argument("--view", choices=[mode.value for mode in ViewMode], default=None)
    parser.add_argument("--date", default=None, help="Reference date (YYYY-MM-DD), defaults to today")
    parser.add_argument("--watch", action="store_true", help="Run the reminder poller until interrupted")
    return parser.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> AppConfig:
    config_path = Path(args.config)
    env_name = config_path.stem
    return load_config(app_env=env_name, config_dir=config_path.parent)


def _print_window(config: AppConfig, source: JsonFileEntitySource, args: argparse.Namespace) -> None:
    tz = config.calendar.timezone
    mode = ViewMode(args.view or config.calendar.default_view)
    reference = local_midnight(args.date, tz) if args.date else today_reference(tz)
    window = compute_window(reference, mode, tz=tz, agenda_days=config.calendar.agenda_days)
    snapshot = fetch_for_window(source, window, tz=tz)
    buckets = aggregate(window_days(window, tz), snapshot.programs, snapshot.agenda_items, snapshot.kpis, tz=tz)

    print(f"{mode.value} view: {window.start.isoformat()} .. {window.end.isoformat()}")
    for key, bucket in buckets.items():
        if bucket.total:
            print(
                f"{key}  programs={bucket.ranged_count} agenda={bucket.point_count} kpis={bucket.deadline_count}"
            )


def build_scheduler(config: AppConfig, source: EntitySource, store: KeyValueStore) -> ReminderScheduler:
    dedup = ReminderDedupStore(store, expiry=timedelta(hours=config.storage.dedup_expiry_hours))
    notifier = ReminderNotifier(LoggingToastSink())
    return ReminderScheduler(
        source,
        dedup,
        notifier,
        poll_interval=config.reminders.poll_interval,
        lead_times_hours=config.reminders.lead_times_hours,
        tz=config.calendar.timezone,
    )


async def _watch(config: AppConfig, source: JsonFileEntitySource) -> None:
    logger = get_logger(__name__)
    store = JsonFileStore(config.storage.resolved_path())
    preferences = ReminderPreferences(store, default_enabled=config.reminders.enabled)
    if not preferences.is_enabled():
        logger.info("Reminders are disabled; nothing to watch")
        return
    scheduler = build_scheduler(config, source, store)
    await scheduler.set_enabled(True)
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    config = _resolve_config(args)
    log_level = config.logging.level if config.logging else "INFO"
    configure_logging(log_level)
    source = JsonFileEntitySource(Path(args.entities))
    if args.watch:
        try:
            asyncio.run(_watch(config, source))
        except KeyboardInterrupt:
            get_logger(__name__).info("Interrupted. Bye")
        return
    _print_window(config, source, args)


if __name__ == "__main__":
    main()
