#!/usr/bin/env python3
"""News ingestion worker.

Runs one ingestion cycle (or every INGEST_INTERVAL_MINUTES when
INGEST_MODE=scheduled): fetch the latest GNews batch, dedupe by slug,
classify, tag and store new articles in Postgres.
"""

from __future__ import annotations

import logging
import time

import schedule

from newsdesk.config import Settings, configure_logging
from newsdesk.errors import StoreUnavailable
from newsdesk.ingestion.pipeline import IngestionRun, build_pipeline
from newsdesk.storage.postgres_schema import ensure_postgres_schema

logger = logging.getLogger("news_ingest_worker")


def run_once(settings: Settings) -> IngestionRun:
    ensure_postgres_schema(settings.pg_dsn)
    run = build_pipeline(settings).run(timeout=settings.fetch_timeout)
    s = run.summary()
    print(
        f"[ingest] fetched={s['fetched']} accepted={s['accepted']} duplicate={s['duplicate']} "
        f"skipped={s['skipped']} failed={s['failed']}" + (f" error={run.error}" if run.error else "")
    )
    return run


def _run_guarded(settings: Settings) -> None:
    # Store failures end the cycle, not the scheduler.
    try:
        run_once(settings)
    except StoreUnavailable as e:
        logger.error(f"Ingestion cycle skipped, store unavailable: {e}")


def run_scheduled(settings: Settings) -> None:
    _run_guarded(settings)
    schedule.every(settings.ingest_interval_minutes).minutes.do(_run_guarded, settings)
    while True:
        schedule.run_pending()
        time.sleep(5)


def main() -> int:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    if settings.ingest_mode in ("scheduled", "daemon"):
        run_scheduled(settings)
        return 0
    run = run_once(settings)
    return 1 if run.error else 0


if __name__ == "__main__":
    raise SystemExit(main())
