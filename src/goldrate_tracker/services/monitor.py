#!/usr/bin/env python3
"""
Command-line entry point for the gold rate tracker.
Runs a one-shot refresh or keeps refreshing on the configured schedule.
"""

import argparse
import json
import logging
import sys
import threading
from dataclasses import replace
from typing import Optional

from goldrate_tracker.config import Config, configure_logging, get_config
from goldrate_tracker.constants import BACKENDS, TRIGGERS, TRIGGER_MANUAL, TRIGGER_SCHEDULE
from goldrate_tracker.exceptions import TrackerError
from goldrate_tracker.fetchers.lombard import LombardRatesFetcher, fetcher_config_from
from goldrate_tracker.models import ReconciliationResult
from goldrate_tracker.services.rates_api import handle_rates_request
from goldrate_tracker.services.reconciler import Reconciler
from goldrate_tracker.services.reports import render_report
from goldrate_tracker.services.scheduler import RefreshScheduler
from goldrate_tracker.services.snapshot_store import SnapshotStore, create_backend

logger = logging.getLogger(__name__)


def build_reconciler(config: Config) -> Reconciler:
    """
    Wire the store, backend and fetcher described by the configuration.

    Args:
        config: Application configuration

    Returns:
        Reconciler ready for refresh()
    """
    store = SnapshotStore(create_backend(config))
    fetcher = LombardRatesFetcher(fetcher_config_from(config))
    return Reconciler(store, fetcher)


def print_result(result: ReconciliationResult, config: Config, as_json: bool = False) -> None:
    """Print a result as JSON or as the text report."""
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return
    print(render_report(
        result,
        utc_offset_hours=config.DISPLAY_UTC_OFFSET_HOURS,
        stale_threshold=config.get_stale_threshold(),
        merge_nine_into_six=config.MERGE_NINE_INTO_SIX,
        track_removals=config.TRACK_DIGIT_REMOVALS,
    ))


def watch(reconciler: Reconciler, config: Config, as_json: bool = False,
          stop_event: Optional[threading.Event] = None) -> None:
    """
    Refresh on the configured schedule until interrupted.

    Args:
        reconciler: Reconciler to drive
        config: Application configuration
        as_json: Print results as JSON
        stop_event: Event that ends the loop (Ctrl+C otherwise)
    """
    def scheduled_refresh():
        print_result(reconciler.refresh(TRIGGER_SCHEDULE), config, as_json)

    scheduler = RefreshScheduler(
        scheduled_refresh,
        update_hours=config.get_update_hours(),
        utc_offset_hours=config.DISPLAY_UTC_OFFSET_HOURS,
        poll_interval=config.SCHEDULER_POLL_SECONDS,
    )
    stop_event = stop_event or threading.Event()
    scheduler.start()
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping scheduler")
    finally:
        scheduler.stop()


def main(argv=None) -> int:
    """Main entry point for the rate tracker CLI."""
    parser = argparse.ArgumentParser(
        description='Track purity rates and show board updates'
    )
    parser.add_argument(
        '--key',
        default=None,
        help='Shared secret (default: SECRET_KEY from environment)'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the raw result as JSON'
    )
    parser.add_argument(
        '--watch',
        action='store_true',
        help='Keep running and refresh at the configured hours'
    )
    parser.add_argument(
        '--backend',
        choices=BACKENDS,
        default=None,
        help='Snapshot storage backend (default: STORAGE_BACKEND)'
    )
    parser.add_argument(
        '--db',
        default=None,
        help='Path to the SQLite database or JSON store file'
    )
    parser.add_argument(
        '--trigger',
        choices=TRIGGERS,
        default=TRIGGER_MANUAL,
        help='What caused this refresh, e.g. reconnect after going offline (default: manual)'
    )

    args = parser.parse_args(argv)

    try:
        config = get_config()
        if args.backend:
            config = replace(config, STORAGE_BACKEND=args.backend)
        if args.db:
            config = replace(config, DB_PATH=args.db, JSON_STORE_PATH=args.db)
    except TrackerError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging()

    try:
        reconciler = build_reconciler(config)
    except TrackerError as e:
        logger.error("Failed to initialise tracker: %s", e)
        return 1

    try:
        status, body = handle_rates_request(
            args.key or config.SECRET_KEY, reconciler, config.SECRET_KEY, args.trigger
        )
    except TrackerError as e:
        logger.error("%s", e)
        reconciler.store.close()
        return 2

    if status != 200:
        logger.error("Refresh failed (%d): %s", status, body.get('message'))
        reconciler.store.close()
        return 1

    print_result(reconciler.cached_result(body.get('error')), config, args.json)

    if args.watch:
        watch(reconciler, config, args.json)

    reconciler.store.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
