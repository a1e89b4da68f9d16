from datetime import datetime, timedelta, timezone

import pytest
from rest_framework.test import APIClient

from apps.alerts.services.alerts import AlertService
from apps.friends.services.lifecycle import FriendshipService
from apps.locations.services.tracking import LocationService
from apps.notifications.services.push import DummyPushService, reset_push_service
from apps.users.services.profiles import UserService
from common.authentication import FirebaseUser
from common.store import reset_document_store
from common.store.memory import InMemoryDocumentStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    store = InMemoryDocumentStore()
    reset_document_store(store)
    yield store
    reset_document_store()


@pytest.fixture
def push():
    push = DummyPushService()
    reset_push_service(push)
    yield push
    reset_push_service()


@pytest.fixture
def users(store, clock):
    return UserService(store=store, clock=clock)


@pytest.fixture
def friendships(store, clock, users):
    return FriendshipService(store=store, clock=clock, users=users)


@pytest.fixture
def alerts(store, clock, users, friendships):
    return AlertService(store=store, clock=clock, users=users, friendships=friendships)


@pytest.fixture
def locations(store, clock, users, friendships):
    return LocationService(store=store, clock=clock, users=users, friendships=friendships)


@pytest.fixture
def alice(users):
    return users.create_or_update_user(
        'U1',
        email='Alice@X.com',
        display_name='Alice',
        profile_picture_url='https://img.example/alice.png',
        fcm_token='token-alice',
    )


@pytest.fixture
def bob(users):
    return users.create_or_update_user(
        'U2',
        email='bob@x.com',
        display_name='Bob',
        profile_picture_url='https://img.example/bob.png',
        fcm_token='token-bob',
    )


@pytest.fixture
def carol(users):
    """A user without a push token."""
    return users.create_or_update_user('U3', email='carol@x.com', display_name='Carol')


@pytest.fixture
def make_friends(friendships, clock):
    def _make_friends(sender, recipient):
        request = friendships.send_friend_request(sender.id, recipient.email)
        clock.advance(seconds=1)
        return friendships.accept_friend_request(recipient.id, request.id)
    return _make_friends


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client, store, push):
    def _client_for(user):
        api_client.force_authenticate(
            user=FirebaseUser(uid=user.id, email=user.email, name=user.display_name)
        )
        return api_client
    return _client_for
