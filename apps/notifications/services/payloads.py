"""
Push payloads for each notification type.

Every builder returns ``(data, hints)`` where ``data`` is a flat
string-to-string mapping. Missing optional fields fall back to defaults.
"""
from apps.alerts.models import DEFAULT_ALERT_MESSAGE
from apps.notifications.services.push import PlatformHints

FRIEND_REQUEST = 'friend_request'
FRIEND_ACCEPTED = 'friend_accepted'
ALERT = 'alert'

FRIEND_REQUESTS_CHANNEL = 'friend_requests'
ALERTS_CHANNEL = 'alerts'


def _text(value, default=''):
    return str(value) if value else default


def friend_request_payload(request_id, request):
    sender_name = _text(request.get('from_user_name'), 'Someone')
    data = {
        'type': FRIEND_REQUEST,
        'request_id': request_id,
        'from_user_id': _text(request.get('from_user_id')),
        'from_user_name': sender_name,
        'from_user_email': _text(request.get('from_user_email')),
        'from_user_photo': _text(request.get('from_user_photo')),
    }
    hints = PlatformHints(
        priority='high',
        channel_id=FRIEND_REQUESTS_CHANNEL,
        title='New Friend Request',
        body=f'{sender_name} wants to be your friend',
        icon='ic_person_add',
    )
    return data, hints


def friend_accepted_payload(request, acceptor):
    acceptor = acceptor or {}
    friend_name = _text(acceptor.get('display_name'), 'Someone')
    data = {
        'type': FRIEND_ACCEPTED,
        'friend_id': _text(request.get('to_user_id')),
        'friend_name': friend_name,
        'friend_email': _text(acceptor.get('email')),
    }
    hints = PlatformHints(
        priority='high',
        channel_id=FRIEND_REQUESTS_CHANNEL,
        title='Friend Request Accepted',
        body=f'{friend_name} accepted your friend request!',
        icon='ic_person_add',
    )
    return data, hints


def alert_payload(alert_id, alert):
    sender_name = _text(alert.get('from_user_name'), 'A friend')
    message = _text(alert.get('message'), DEFAULT_ALERT_MESSAGE)
    data = {
        'type': ALERT,
        'alert_id': alert_id,
        'from_user_id': _text(alert.get('from_user_id')),
        'from_user_name': sender_name,
        'from_user_photo': _text(alert.get('from_user_photo')),
        'message': message,
    }
    hints = PlatformHints(
        priority='high',
        ttl=0,
        channel_id=ALERTS_CHANNEL,
        title=f'Alert from {sender_name}',
        body=f'{sender_name} {message}',
        icon='ic_alert',
        sound='default',
        notification_priority='max',
        visibility='public',
        default_sound=True,
        default_vibrate_timings=True,
    )
    return data, hints
