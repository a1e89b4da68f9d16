"""
Privacy purge of stale location documents.

Any location not updated in the last 24 hours is deleted, whether or not
its owner still has sharing turned on.
"""
import logging
from datetime import timedelta

from django.utils import timezone

from apps.locations.models import UserLocation
from common.store import MAX_BATCH_WRITES, StoreError, get_document_store

logger = logging.getLogger(__name__)

LOCATION_RETENTION = timedelta(hours=24)


def purge_stale_locations(store=None, now=None):
    """
    Delete every location whose ``updated_at`` is older than
    ``now - 24h`` and return the number of documents deleted.

    Best effort: a failure is logged and the count deleted so far is
    returned.
    """
    store = store or get_document_store()
    cutoff = (now or timezone.now()) - LOCATION_RETENTION
    deleted = 0

    try:
        stale = (
            store.collection(UserLocation.collection)
            .where('updated_at', '<', cutoff)
            .get()
        )
        for start in range(0, len(stale), MAX_BATCH_WRITES):
            batch = store.batch()
            for snap in stale[start:start + MAX_BATCH_WRITES]:
                batch.delete(UserLocation.collection, snap.id)
            batch.commit()
            deleted += len(batch)
    except StoreError as exc:
        logger.error('Error cleaning up locations (deleted %d): %s', deleted, exc)
        return deleted

    logger.info('Cleaned up %d old location records', deleted)
    return deleted
