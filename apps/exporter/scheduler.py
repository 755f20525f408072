"""
Export Scheduler - Cron and On-Demand Execution

Manages scheduled and manual export runs using APScheduler.

Features:
- Cron-based scheduling (configurable via EXPORT_SCHEDULE_CRON)
- RUN_ONCE mode for immediate execution (default)
- Graceful shutdown handling

Usage:
    # Run once and exit
    python -m apps.exporter

    # Scheduled mode
    RUN_ONCE=false python -m apps.exporter
"""

import asyncio
import logging
import signal
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from apps.exporter.export_job import run_export
from utils.config import Settings, settings
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


class ExportScheduler:
    """
    Scheduler for periodic or on-demand export runs.

    Handles:
    - APScheduler setup and management
    - RUN_ONCE immediate execution
    - Signal handling for graceful shutdown
    """

    def __init__(self, cfg: Settings, run_once: bool = True) -> None:
        """
        Initialize scheduler.

        Args:
            cfg: Application settings
            run_once: If True, run the export once and exit
        """
        self.cfg = cfg
        self.run_once = run_once
        self.scheduler: AsyncIOScheduler | None = None
        self.shutdown_event = asyncio.Event()

        logger.info(
            "ExportScheduler initialized",
            extra={
                "run_once": run_once,
                "cron_schedule": cfg.EXPORT_SCHEDULE_CRON,
            },
        )

    async def execute_export(self) -> None:
        """Execute one export run, logging and re-raising failures."""
        logger.info("Starting export execution")

        try:
            written = await run_export(self.cfg)

            logger.info(
                "Export execution completed successfully",
                extra={"rows_per_sheet": written},
            )

        except Exception as e:
            logger.error(
                "Export execution failed",
                extra={"error": str(e)},
                exc_info=True,
            )
            raise

        finally:
            if self.run_once:
                self.shutdown_event.set()

    def setup_signal_handlers(self) -> None:
        """Setup handlers for graceful shutdown on SIGINT/SIGTERM."""

        def signal_handler(signum: int, frame: object) -> None:
            logger.info(f"Received signal {signum}, initiating graceful shutdown")
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def start(self) -> None:
        """
        Start scheduler or execute once.

        In scheduled mode, runs continuously until shutdown signal.
        In RUN_ONCE mode, executes immediately and exits.
        """
        if self.run_once:
            logger.info("Running in RUN_ONCE mode")
            await self.execute_export()
            return

        self.setup_signal_handlers()
        logger.info("Running in scheduled mode")

        self.scheduler = AsyncIOScheduler()

        trigger = CronTrigger.from_crontab(self.cfg.EXPORT_SCHEDULE_CRON)
        self.scheduler.add_job(
            self.execute_export,
            trigger=trigger,
            id="export_job",
            name="Periodic Task Sheet Export",
            replace_existing=True,
            max_instances=1,
        )

        # Start scheduler first to get next_run_time
        self.scheduler.start()

        job = self.scheduler.get_job("export_job")
        next_run = getattr(job, "next_run_time", None)

        logger.info(
            "Scheduled export job",
            extra={
                "schedule": self.cfg.EXPORT_SCHEDULE_CRON,
                "next_run": str(next_run) if next_run is not None else None,
            },
        )

        await self.shutdown_event.wait()

        logger.info("Shutting down scheduler")
        if self.scheduler:
            self.scheduler.shutdown(wait=True)
        logger.info("Scheduler shutdown complete")


async def main() -> None:
    """Main entry point for scheduler."""
    setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)

    scheduler = ExportScheduler(settings, run_once=settings.RUN_ONCE)

    try:
        await scheduler.start()
    except Exception as e:
        logger.error("Scheduler failed", extra={"error": str(e)}, exc_info=True)
        sys.exit(1)


def cli() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
