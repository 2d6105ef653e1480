from __future__ import annotations

import sys
from pathlib import Path

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from shopify_bulk_export.config_models import (
    ExportJobConfig,
    ResumeInput,
    config_to_export_input,
    load_and_validate_config,
)
from shopify_bulk_export.core.errors import BulkExportError
from shopify_bulk_export.core.export import resume_bulk_export, run_bulk_export
from shopify_bulk_export.sinks.jsonl_sink import JsonlSink
from shopify_bulk_export.utils.logging import get_logger, setup_logging

log = get_logger("shopify_bulk_export.cli")


def run_one(config: ExportJobConfig, job_path: str) -> int:
    """Run (or resume) a single export and write its records. Returns the record count."""
    options = config_to_export_input(config, base_dir=Path(job_path).parent)

    if isinstance(options, ResumeInput):
        records = resume_bulk_export(options)
    else:
        records = run_bulk_export(options)

    JsonlSink().write(config.output.path, records)
    print(f"DONE: {len(records)} records -> {config.output.path}")
    return len(records)


def run_schedule(config: ExportJobConfig, job_path: str) -> None:
    """Re-run an export on a fixed interval."""
    scheduler = BlockingScheduler()

    interval_hours = config.schedule.interval_hours
    print(f"Scheduling export every {interval_hours} hours")
    trigger = IntervalTrigger(hours=interval_hours)

    scheduler.add_job(
        run_one,
        trigger=trigger,
        args=[config, job_path],
        id=f"export_{config.store.name}",
        name=f"Scheduled export: {config.store.name} -> {config.output.path}",
    )

    print(f"Starting scheduled export for store '{config.store.name}' (every {interval_hours} hours)")
    try:
        scheduler.start()
    except KeyboardInterrupt:
        print("Scheduler stopped by user")


def main() -> None:
    """Main entry point for the bulk-export command."""
    if len(sys.argv) < 2:
        print("Usage: bulk-export configs/jobs/<job>.yaml")
        raise SystemExit(2)

    job_path = sys.argv[1]
    setup_logging("configs/logging.yaml")
    print(f"Loading export job from {job_path}")

    try:
        config = load_and_validate_config(job_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        raise SystemExit(2)

    try:
        if config.schedule.enabled:
            print("Running in scheduled mode")
            run_schedule(config, job_path)
        else:
            print("Running in one-time mode")
            run_one(config, job_path)
    except BulkExportError as e:
        log.error("Export failed: %s: %s", type(e).__name__, e)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
