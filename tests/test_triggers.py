"""Tests for the notification fan-out handlers and their wiring."""
import copy
import logging

import pytest

from apps.notifications import triggers
from apps.notifications.listener import start_listening, stop_listening
from apps.notifications.services.payloads import ALERTS_CHANNEL, FRIEND_REQUESTS_CHANNEL
from apps.notifications.services.push import DeliveryError, DummyPushService
from apps.notifications.signals import dispatch_change, document_created
from common.store import ChangeEvent


def _created(store, collection, doc_id):
    return ChangeEvent(collection, doc_id, None, store.get(collection, doc_id).data)


def _transition(store, collection, doc_id, **changes):
    before = store.get(collection, doc_id).data
    after = {**before, **changes}
    return ChangeEvent(collection, doc_id, before, after)


class FailingPush(DummyPushService):

    def send(self, token, data, hints=None):
        raise DeliveryError('registration token is not registered')


class TestFriendRequestCreated:

    def test_pushes_to_recipient(self, friendships, store, push, alice, bob):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')

        message_id = triggers.handle_friend_request_created(
            _created(store, 'friend_requests', request.id), store=store, push=push,
        )

        [sent] = push.sent
        assert message_id == sent['id']
        assert sent['token'] == 'token-bob'
        assert sent['data'] == {
            'type': 'friend_request',
            'request_id': request.id,
            'from_user_id': 'U1',
            'from_user_name': 'Alice',
            'from_user_email': 'alice@x.com',
            'from_user_photo': 'https://img.example/alice.png',
        }
        assert sent['hints'].channel_id == FRIEND_REQUESTS_CHANNEL
        assert sent['hints'].priority == 'high'
        assert sent['hints'].body == 'Alice wants to be your friend'

    def test_redelivery_sends_again_without_touching_data(self, friendships, store, push, alice, bob):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')
        event = _created(store, 'friend_requests', request.id)
        snapshot = copy.deepcopy(store._collections)

        triggers.handle_friend_request_created(event, store=store, push=push)
        triggers.handle_friend_request_created(event, store=store, push=push)

        assert len(push.sent) == 2
        assert store._collections == snapshot

    def test_recipient_without_token(self, friendships, store, push, alice, carol):
        request = friendships.send_friend_request(alice.id, 'carol@x.com')

        result = triggers.handle_friend_request_created(
            _created(store, 'friend_requests', request.id), store=store, push=push,
        )

        assert result is None
        assert push.sent == []

    def test_malformed_document(self, store, push):
        event = ChangeEvent('friend_requests', 'r1', None, {'from_user_id': 'U1'})
        assert triggers.handle_friend_request_created(event, store=store, push=push) is None
        assert push.sent == []

    def test_delivery_failure_is_swallowed(self, friendships, store, alice, bob, caplog):
        caplog.set_level(logging.ERROR)
        request = friendships.send_friend_request(alice.id, 'bob@x.com')

        result = triggers.handle_friend_request_created(
            _created(store, 'friend_requests', request.id), store=store, push=FailingPush(),
        )

        assert result is None
        assert 'Error sending friend request notification' in caplog.text

    def test_missing_sender_name_falls_back(self, store, push, bob):
        store.set('friend_requests', 'r1', {
            'from_user_id': 'ghost',
            'to_user_id': bob.id,
            'status': 'PENDING',
        })

        triggers.handle_friend_request_created(
            _created(store, 'friend_requests', 'r1'), store=store, push=push,
        )

        [sent] = push.sent
        assert sent['data']['from_user_name'] == 'Someone'
        assert sent['data']['from_user_photo'] == ''


class TestFriendRequestUpdated:

    def test_acceptance_notifies_sender(self, friendships, store, push, alice, bob):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')
        event = _transition(store, 'friend_requests', request.id, status='ACCEPTED')

        triggers.handle_friend_request_updated(event, store=store, push=push)

        [sent] = push.sent
        assert sent['token'] == 'token-alice'
        assert sent['data'] == {
            'type': 'friend_accepted',
            'friend_id': 'U2',
            'friend_name': 'Bob',
            'friend_email': 'bob@x.com',
        }
        assert sent['hints'].body == 'Bob accepted your friend request!'

    @pytest.mark.parametrize('before, after', [
        ('PENDING', 'DECLINED'),
        ('ACCEPTED', 'ACCEPTED'),
        ('DECLINED', 'ACCEPTED'),
        ('PENDING', 'PENDING'),
    ])
    def test_other_transitions_are_ignored(self, friendships, store, push, alice, bob, before, after):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')
        data = store.get('friend_requests', request.id).data
        event = ChangeEvent(
            'friend_requests',
            request.id,
            {**data, 'status': before},
            {**data, 'status': after, 'updated_at': 'later'},
        )

        assert triggers.handle_friend_request_updated(event, store=store, push=push) is None
        assert push.sent == []

    def test_sender_without_token(self, friendships, store, push, carol, bob):
        request = friendships.send_friend_request(carol.id, 'bob@x.com')
        event = _transition(store, 'friend_requests', request.id, status='ACCEPTED')

        assert triggers.handle_friend_request_updated(event, store=store, push=push) is None
        assert push.sent == []


class TestAlertCreated:

    def test_alert_is_deliver_now_or_drop(self, alerts, store, push, make_friends, alice, bob):
        make_friends(alice, bob)
        alert = alerts.send_alert(alice.id, bob.id)

        triggers.handle_alert_created(_created(store, 'alerts', alert.id), store=store, push=push)

        [sent] = push.sent
        assert sent['token'] == 'token-bob'
        assert sent['data'] == {
            'type': 'alert',
            'alert_id': alert.id,
            'from_user_id': 'U1',
            'from_user_name': 'Alice',
            'from_user_photo': 'https://img.example/alice.png',
            'message': 'is trying to reach you!',
        }
        hints = sent['hints']
        assert hints.ttl == 0
        assert hints.priority == 'high'
        assert hints.notification_priority == 'max'
        assert hints.visibility == 'public'
        assert hints.channel_id == ALERTS_CHANNEL
        assert hints.title == 'Alert from Alice'
        assert hints.body == 'Alice is trying to reach you!'

    def test_alert_defaults(self, store, push, bob):
        store.set('alerts', 'a1', {'to_user_id': bob.id, 'from_user_id': 'U9'})

        triggers.handle_alert_created(_created(store, 'alerts', 'a1'), store=store, push=push)

        [sent] = push.sent
        assert sent['data']['from_user_name'] == 'A friend'
        assert sent['data']['message'] == 'is trying to reach you!'

    def test_unknown_recipient(self, store, push):
        store.set('alerts', 'a1', {'to_user_id': 'nobody', 'from_user_id': 'U9'})
        assert triggers.handle_alert_created(
            _created(store, 'alerts', 'a1'), store=store, push=push,
        ) is None
        assert push.sent == []


class TestLocationWritten:

    def test_refreshes_last_active(self, locations, store, clock, alice):
        locations.update_location(alice.id, 51.5, -0.12)
        clock.advance(minutes=3)

        updated = triggers.handle_location_written(
            _created(store, 'locations', alice.id), store=store, clock=clock,
        )

        assert updated is True
        assert store.get('users', alice.id).data['last_active'] == clock.now

    def test_delete_is_ignored(self, store, clock, alice):
        event = ChangeEvent('locations', alice.id, {'user_id': alice.id}, None)
        before = store.get('users', alice.id).data['last_active']

        assert triggers.handle_location_written(event, store=store, clock=clock) is False
        assert store.get('users', alice.id).data['last_active'] == before

    def test_missing_user_is_logged(self, store, clock, caplog):
        caplog.set_level(logging.ERROR)
        event = ChangeEvent('locations', 'ghost', None, {'user_id': 'ghost'})

        assert triggers.handle_location_written(event, store=store, clock=clock) is False
        assert 'Error updating last active for ghost' in caplog.text


class TestDispatch:

    def test_signal_routes_to_receiver(self, friendships, store, push, alice, bob):
        request = friendships.send_friend_request(alice.id, 'bob@x.com')

        dispatch_change(_created(store, 'friend_requests', request.id))

        assert [sent['data']['type'] for sent in push.sent] == ['friend_request']

    def test_unwatched_collection_has_no_receivers(self, store, push, alice):
        dispatch_change(_created(store, 'users', alice.id))
        assert push.sent == []

    def test_receiver_errors_do_not_propagate(self, store, push, alice):
        def broken(sender, event, **kwargs):
            raise RuntimeError('bad receiver')

        document_created.connect(broken, sender='users', weak=False)
        try:
            responses = dispatch_change(_created(store, 'users', alice.id))
        finally:
            document_created.disconnect(broken, sender='users')

        assert any(isinstance(response, RuntimeError) for _, response in responses)

    def test_listener_end_to_end(self, friendships, alerts, store, push, alice, bob):
        handles = start_listening(store)
        try:
            request = friendships.send_friend_request(alice.id, 'bob@x.com')
            friendships.accept_friend_request(bob.id, request.id)
            alerts.send_alert(bob.id, alice.id, 'where are you?')
        finally:
            stop_listening(handles)

        assert [(sent['token'], sent['data']['type']) for sent in push.sent] == [
            ('token-bob', 'friend_request'),
            ('token-alice', 'friend_accepted'),
            ('token-alice', 'alert'),
        ]

    def test_stopped_listener_dispatches_nothing(self, friendships, store, push, alice, bob):
        stop_listening(start_listening(store))
        friendships.send_friend_request(alice.id, 'bob@x.com')
        assert push.sent == []
