"""
Background sweeps with APScheduler.

- every ``sweep_interval_minutes``: refund trigger sweep
- every ``follow_up_interval_minutes``: follow-up sweep
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from .engine import ClaimEngine

logger = logging.getLogger(__name__)


def build_scheduler(engine: ClaimEngine, blocking: bool = False) -> BaseScheduler:
    """
    Create a scheduler running the sweeps for ``engine``.

    Args:
        engine: Engine whose store is swept
        blocking: Run in the foreground (for the CLI) instead of a thread
    """
    scheduler_cls = BlockingScheduler if blocking else BackgroundScheduler
    scheduler = scheduler_cls(timezone="UTC")
    settings = engine.settings

    def refund_job() -> None:
        """Fire any refund the guarantee now requires."""
        result = engine.run_refund_sweep()
        if result.errors:
            logger.warning("Refund sweep had %d failing claims", len(result.errors))

    def follow_up_job() -> None:
        """Record due airline follow-ups."""
        engine.run_follow_up_sweep()

    # A slow sweep is skipped rather than run twice in parallel
    scheduler.add_job(
        refund_job,
        "interval",
        minutes=settings.sweep_interval_minutes,
        id="refund_sweep",
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        follow_up_job,
        "interval",
        minutes=settings.follow_up_interval_minutes,
        id="follow_up_sweep",
        max_instances=1,
        coalesce=True,
    )
    return scheduler
