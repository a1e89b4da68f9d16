"""
Push delivery backends.

``FCMPushService`` delivers through Firebase Cloud Messaging;
``DummyPushService`` only logs and records what would have been sent
and is used in development and tests. ``get_push_service()`` returns
the backend selected by the ``PUSH_BACKEND`` setting.
"""
import itertools
import logging
import threading
from dataclasses import dataclass

from django.conf import settings
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from common.firebase import get_firebase_app

logger = logging.getLogger(__name__)


class DeliveryError(Exception):
    """Raised when a push message could not be handed to the delivery service."""


@dataclass
class PlatformHints:
    """
    Android delivery and display hints sent alongside the data payload.

    ``ttl`` is in seconds; ``0`` means deliver immediately or drop.
    """
    priority: str = 'high'
    ttl: int | None = None
    channel_id: str | None = None
    title: str | None = None
    body: str | None = None
    icon: str | None = None
    sound: str | None = None
    notification_priority: str | None = None
    visibility: str | None = None
    default_sound: bool | None = None
    default_vibrate_timings: bool | None = None


def _token_prefix(token):
    return (token or '')[:20]


class PushService:

    def send(self, token, data, hints=None):
        """Deliver ``data`` (a flat str -> str mapping) and return a delivery id."""
        raise NotImplementedError


class FCMPushService(PushService):

    def __init__(self, app=None):
        self.app = app or get_firebase_app()

    def _build_message(self, token, data, hints):
        android = None
        if hints is not None:
            android = messaging.AndroidConfig(
                priority=hints.priority,
                ttl=hints.ttl,
                notification=messaging.AndroidNotification(
                    title=hints.title,
                    body=hints.body,
                    icon=hints.icon,
                    channel_id=hints.channel_id,
                    sound=hints.sound,
                    priority=hints.notification_priority,
                    visibility=hints.visibility,
                    default_sound=hints.default_sound,
                    default_vibrate_timings=hints.default_vibrate_timings,
                ),
            )
        return messaging.Message(
            token=token,
            data={key: str(value) for key, value in data.items()},
            android=android,
        )

    def send(self, token, data, hints=None):
        if not token:
            raise DeliveryError('No push token for recipient.')
        try:
            message_id = messaging.send(self._build_message(token, data, hints), app=self.app)
        except (firebase_exceptions.FirebaseError, ValueError) as exc:
            raise DeliveryError(f'FCM delivery failed: {exc}') from exc
        logger.info('FCM push sent to token %s...', _token_prefix(token))
        return message_id


class DummyPushService(PushService):

    def __init__(self):
        self.sent = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def send(self, token, data, hints=None):
        if not token:
            raise DeliveryError('No push token for recipient.')
        with self._lock:
            message_id = f'dummy-{next(self._ids)}'
            self.sent.append({
                'id': message_id,
                'token': token,
                'data': dict(data),
                'hints': hints,
            })
        logger.info(
            '[dummy push] %s to token %s...: %s',
            data.get('type'),
            _token_prefix(token),
            data,
        )
        return message_id


_push_service = None
_push_lock = threading.Lock()


def get_push_service():
    global _push_service
    if _push_service is None:
        with _push_lock:
            if _push_service is None:
                backend = settings.PUSH_BACKEND
                if backend == 'fcm':
                    _push_service = FCMPushService()
                elif backend == 'dummy':
                    _push_service = DummyPushService()
                else:
                    raise ValueError(f'Unknown PUSH_BACKEND: {backend!r}')
    return _push_service


def reset_push_service(service=None):
    global _push_service
    with _push_lock:
        _push_service = service
