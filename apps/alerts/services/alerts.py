"""
Alert creation and the recipient's inbox.

An alert is written once by its sender to one of their friends, may
be flipped to read once by its recipient, and may be deleted by either
party. Delivery to the recipient's device is handled by the
notification fan-out.
"""
import logging

from django.utils import timezone

from apps.alerts.models import DEFAULT_ALERT_MESSAGE, Alert
from apps.friends.services.lifecycle import FriendshipService
from apps.users.services.profiles import UserService
from common.exceptions import NotFound, Unauthorized
from common.store import DESCENDING, get_document_store

logger = logging.getLogger(__name__)

ALERTS = Alert.collection

INBOX_LIMIT = 50


def _alerts(snapshots):
    return [Alert.from_snapshot(snap) for snap in snapshots]


class AlertService:

    def __init__(self, store=None, clock=None, users=None, friendships=None):
        self.store = store or get_document_store()
        self.clock = clock or timezone.now
        self.users = users or UserService(store=self.store, clock=self.clock)
        self.friendships = friendships or FriendshipService(
            store=self.store,
            clock=self.clock,
            users=self.users,
        )

    def send_alert(self, current_user_id, to_user_id, message=None):
        recipient = self.users.get_user(to_user_id)
        if recipient is None:
            raise NotFound('User not found.')
        if not self.friendships.are_friends(current_user_id, to_user_id):
            raise Unauthorized('You can only send alerts to your friends.')

        sender = self.users.get_user(current_user_id)
        alert = Alert(
            id=self.store.new_id(ALERTS),
            from_user_id=current_user_id,
            to_user_id=to_user_id,
            from_user_name=(sender.display_name if sender else '') or 'Someone',
            from_user_photo=sender.profile_picture_url if sender else '',
            message=message or DEFAULT_ALERT_MESSAGE,
            is_read=False,
            created_at=self.clock(),
        )
        self.store.set(ALERTS, alert.id, alert.to_dict())
        logger.info('Alert %s sent from %s to %s', alert.id, current_user_id, to_user_id)
        return alert

    def get_alert(self, alert_id):
        alert = Alert.from_snapshot(self.store.get(ALERTS, alert_id))
        if alert is None:
            raise NotFound('Alert not found.')
        return alert

    def mark_read(self, current_user_id, alert_id):
        alert = self.get_alert(alert_id)
        if alert.to_user_id != current_user_id:
            raise Unauthorized('Only the recipient can mark this alert as read.')
        if not alert.is_read:
            self.store.update(ALERTS, alert_id, {'is_read': True})
            alert.is_read = True
        return alert

    def delete_alert(self, current_user_id, alert_id):
        alert = self.get_alert(alert_id)
        if current_user_id not in (alert.from_user_id, alert.to_user_id):
            raise Unauthorized('You are not allowed to delete this alert.')
        self.store.delete(ALERTS, alert_id)
        logger.info('Alert %s deleted by %s', alert_id, current_user_id)

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def received_alerts_query(self, user_id, limit=INBOX_LIMIT):
        return (
            self.store.collection(ALERTS)
            .where('to_user_id', '==', user_id)
            .order_by('created_at', DESCENDING)
            .limit(limit)
        )

    def unread_alerts_query(self, user_id):
        return (
            self.store.collection(ALERTS)
            .where('to_user_id', '==', user_id)
            .where('is_read', '==', False)
        )

    def received_alerts(self, user_id, limit=INBOX_LIMIT):
        return _alerts(self.received_alerts_query(user_id, limit).get())

    def unread_count(self, user_id):
        return len(self.unread_alerts_query(user_id).get())

    def subscribe_received_alerts(self, user_id, limit=INBOX_LIMIT):
        return self.received_alerts_query(user_id, limit).subscribe().map(_alerts)

    def subscribe_unread_count(self, user_id):
        return self.unread_alerts_query(user_id).subscribe().map(len)
