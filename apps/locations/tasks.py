"""
Celery tasks for the Locations app.
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    name='apps.locations.tasks.cleanup_stale_locations',
    ignore_result=True,
    max_retries=0,
)
def cleanup_stale_locations():
    """
    Daily purge of location documents older than 24 hours.

    Never retried: failures are logged and the next daily run picks up
    whatever was left behind.
    """
    from apps.locations.services.cleanup import purge_stale_locations

    try:
        return purge_stale_locations()
    except Exception as exc:
        logger.error('Stale location cleanup failed: %s', exc)
        return 0
