"""
Embedded publish trigger.

For single-node deployments without an external cron, an APScheduler
interval job calls the batch publisher every
`settings.scheduler_interval_seconds`. Disabled unless
`settings.enable_embedded_scheduler` is set.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from orgcms.config import settings
from orgcms.database import AsyncSessionLocal
from orgcms.services.scheduling_service import PublishResult, publish_scheduled_content

scheduler = AsyncIOScheduler()

logger = logging.getLogger(__name__)

PUBLISH_JOB_ID = "publish_scheduled_content"


async def run_publish_job() -> PublishResult:
    async with AsyncSessionLocal() as db:
        results = await publish_scheduled_content(db)
    if results.errors:
        logger.warning(f"[Scheduler] Publish run finished with errors: {results.errors}")
    return results


def start_scheduler() -> bool:
    """Register the publish job and start the scheduler; returns False when disabled."""
    if not settings.enable_embedded_scheduler:
        return False

    scheduler.add_job(
        run_publish_job,
        trigger=IntervalTrigger(seconds=settings.scheduler_interval_seconds),
        id=PUBLISH_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    if not scheduler.running:
        scheduler.start()
    logger.info(f"[Scheduler] Publishing scheduled content every {settings.scheduler_interval_seconds}s")
    return True


def shutdown_scheduler() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
