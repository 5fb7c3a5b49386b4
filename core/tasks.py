"""
Celery tasks for the core app.
"""
import logging

from celery import shared_task

from .utils import update_active_periods

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def update_active_periods_task(self):
    """
    Daily sync of the active academic year and term.
    Scheduled through CELERY_BEAT_SCHEDULE.
    """
    try:
        result = update_active_periods()
    except Exception as exc:
        logger.exception("Failed to update active periods")
        raise self.retry(exc=exc)

    logger.info(f"Active periods updated: {result['summary']}")
    return result['summary']
