"""
Notification fan-out.

Each handler reacts to one kind of document write. Handlers may run more
than once for the same write, so they never create friend requests or
friendships; a repeated push is acceptable. Every failure is logged and
turned into a no-op so nothing is handed back for a retry.
"""
import logging

from django.dispatch import receiver
from django.utils import timezone

from apps.alerts.models import Alert
from apps.friends.models import FriendRequest, FriendRequestStatus
from apps.locations.models import UserLocation
from apps.notifications.services.payloads import (
    alert_payload,
    friend_accepted_payload,
    friend_request_payload,
)
from apps.notifications.services.push import get_push_service
from apps.notifications.signals import document_created, document_updated
from apps.users.models import User
from common.store import get_document_store

logger = logging.getLogger(__name__)


def _user_data(store, user_id):
    if not user_id:
        return None
    return store.get(User.collection, user_id).to_dict()


def handle_friend_request_created(event, store=None, push=None):
    """Push ``friend_request`` to the recipient of a new request."""
    try:
        store = store or get_document_store()
        push = push or get_push_service()

        request = event.after
        if not request or not request.get('to_user_id'):
            logger.info('Invalid friend request data for %s', event.document_id)
            return None

        recipient = _user_data(store, request['to_user_id'])
        if not recipient or not recipient.get('fcm_token'):
            logger.info(
                'Recipient %s of friend request %s not found or has no push token',
                request['to_user_id'],
                event.document_id,
            )
            return None

        data, hints = friend_request_payload(event.document_id, request)
        message_id = push.send(recipient['fcm_token'], data, hints)
        logger.info('Friend request notification sent: %s', message_id)
        return message_id
    except Exception as exc:
        logger.error('Error sending friend request notification: %s', exc)
        return None


def handle_friend_request_updated(event, store=None, push=None):
    """
    Push ``friend_accepted`` to the original sender, only when the
    status moves from PENDING to ACCEPTED.
    """
    try:
        before = event.before or {}
        after = event.after or {}
        if (
            before.get('status') != FriendRequestStatus.PENDING.value
            or after.get('status') != FriendRequestStatus.ACCEPTED.value
        ):
            return None

        store = store or get_document_store()
        push = push or get_push_service()

        sender = _user_data(store, after.get('from_user_id'))
        if not sender or not sender.get('fcm_token'):
            logger.info(
                'Sender %s of friend request %s not found or has no push token',
                after.get('from_user_id'),
                event.document_id,
            )
            return None

        acceptor = _user_data(store, after.get('to_user_id'))
        data, hints = friend_accepted_payload(after, acceptor)
        message_id = push.send(sender['fcm_token'], data, hints)
        logger.info('Friend accepted notification sent: %s', message_id)
        return message_id
    except Exception as exc:
        logger.error('Error sending friend accepted notification: %s', exc)
        return None


def handle_alert_created(event, store=None, push=None):
    """Push a max-priority, deliver-now-or-drop ``alert`` to the recipient."""
    try:
        store = store or get_document_store()
        push = push or get_push_service()

        alert = event.after
        if not alert or not alert.get('to_user_id'):
            logger.info('Invalid alert data for %s', event.document_id)
            return None

        recipient = _user_data(store, alert['to_user_id'])
        if not recipient or not recipient.get('fcm_token'):
            logger.info(
                'Recipient %s of alert %s not found or has no push token',
                alert['to_user_id'],
                event.document_id,
            )
            return None

        data, hints = alert_payload(event.document_id, alert)
        message_id = push.send(recipient['fcm_token'], data, hints)
        logger.info('Alert notification sent: %s', message_id)
        return message_id
    except Exception as exc:
        logger.error('Error sending alert notification: %s', exc)
        return None


def handle_location_written(event, store=None, clock=None):
    """Refresh ``last_active`` on the owner's user document."""
    if event.after is None:
        return False
    try:
        store = store or get_document_store()
        now = (clock or timezone.now)()
        store.update(User.collection, event.document_id, {'last_active': now})
        return True
    except Exception as exc:
        logger.error('Error updating last active for %s: %s', event.document_id, exc)
        return False


# ----------------------------------------------------------------------
# Signal receivers
# ----------------------------------------------------------------------

@receiver(document_created, sender=FriendRequest.collection)
def on_friend_request_created(sender, event, **kwargs):
    handle_friend_request_created(event)


@receiver(document_updated, sender=FriendRequest.collection)
def on_friend_request_updated(sender, event, **kwargs):
    handle_friend_request_updated(event)


@receiver(document_created, sender=Alert.collection)
def on_alert_created(sender, event, **kwargs):
    handle_alert_created(event)


@receiver(document_created, sender=UserLocation.collection)
@receiver(document_updated, sender=UserLocation.collection)
def on_location_written(sender, event, **kwargs):
    handle_location_written(event)
