"""Background scheduler for nightly ledger maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .logging_config import get_logger

if TYPE_CHECKING:
    from .context import EngineContext

logger = get_logger("scheduler")

MAINTENANCE_JOB_ID = "nightly_maintenance"


class MaintenanceScheduler:
    """Runs retention cleanup and snapshot repair on a nightly cron."""

    def __init__(self, ctx: EngineContext):
        """Initialize the scheduler with the engine context.

        Args:
            ctx: Engine context with services and config
        """
        self.ctx = ctx
        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            func=self.run_maintenance,
            trigger=CronTrigger(hour=ctx.config.MAINTENANCE_HOUR, minute=0),
            id=MAINTENANCE_JOB_ID,
            name="Nightly ledger maintenance",
            replace_existing=True,
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return
        self.scheduler.start()
        logger.info(
            "Maintenance scheduler started",
            extra={"hour": self.ctx.config.MAINTENANCE_HOUR},
        )

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Maintenance scheduler stopped")

    def run_maintenance(self) -> dict[str, int] | None:
        """Execute cleanup and recompute; failures are logged, not raised."""
        try:
            logger.info("Starting scheduled maintenance")
            result = self.ctx.run_maintenance()
            logger.info("Scheduled maintenance completed", extra=result)
            return result
        except Exception as exc:
            logger.error(f"Scheduled maintenance failed: {exc}", exc_info=True)
            return None


def create_scheduler(ctx: EngineContext, *, auto_start: bool = False) -> MaintenanceScheduler:
    """Create and optionally start a maintenance scheduler."""
    scheduler = MaintenanceScheduler(ctx)
    if auto_start:
        scheduler.start()
    return scheduler
