"""
Feeds document changes from the store into the fan-out signals.
"""
import logging

from apps.alerts.models import Alert
from apps.friends.models import FriendRequest
from apps.locations.models import UserLocation
from apps.notifications.signals import dispatch_change

logger = logging.getLogger(__name__)

WATCHED_COLLECTIONS = (
    FriendRequest.collection,
    Alert.collection,
    UserLocation.collection,
)


def start_listening(store, collections=WATCHED_COLLECTIONS):
    """Open a change watch on each collection and return the handles."""
    handles = []
    for collection in collections:
        handles.append(store.watch_collection(collection, dispatch_change))
        logger.info('Dispatching changes on %s to notification triggers', collection)
    return handles


def stop_listening(handles):
    for handle in handles:
        try:
            handle.close()
        except Exception as exc:
            logger.warning('Error closing change watch: %s', exc)
