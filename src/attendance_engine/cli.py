"""Command-line entry points: schema bootstrap and the scheduler loop."""

from __future__ import annotations

import argparse
import logging
import time

from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .main import configure_logging, load_settings

logger = logging.getLogger(__name__)


def init_db() -> None:
    settings = load_settings()
    configure_logging(settings)
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


def run_scheduler(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the attendance scheduler tick loop.")
    parser.add_argument("--once", action="store_true", help="run a single tick and exit")
    parser.add_argument("--interval", type=int, default=None, help="seconds between ticks")
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(settings)
    interval = args.interval or int(getattr(settings, "SCHEDULER_INTERVAL_SECONDS", 60))
    scheduler = build_container(db_config=dict(settings.DB_CONFIG)).scheduler

    while True:
        started = time.monotonic()
        try:
            report = scheduler.tick()
            logger.debug("tick report: %s", report.to_dict())
        except Exception:
            logger.exception("Scheduler tick failed")
        if args.once:
            return
        time.sleep(max(0.0, interval - (time.monotonic() - started)))
