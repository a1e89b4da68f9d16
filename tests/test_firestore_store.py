"""Tests for the Firestore adapter that do not need a live project."""
import logging
from types import SimpleNamespace
from unittest import mock

import pytest
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from common.store import GeoPoint, StoreError
from common.store.firestore import FirestoreDocumentStore


class FakeDoc:

    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


def _change(kind, doc):
    return SimpleNamespace(type=SimpleNamespace(name=kind), document=doc)


@pytest.fixture
def client():
    return mock.MagicMock()


@pytest.fixture
def firestore_store(client):
    return FirestoreDocumentStore(client=client)


def test_get_missing_document(firestore_store, client):
    client.collection.return_value.document.return_value.get.return_value = FakeDoc('x', None)

    snapshot = firestore_store.get('users', 'x')

    assert not snapshot.exists
    client.collection.assert_called_with('users')


def test_backend_errors_become_store_errors(firestore_store, client):
    client.collection.return_value.document.return_value.update.side_effect = (
        google_exceptions.NotFound('no document')
    )

    with pytest.raises(StoreError):
        firestore_store.update('users', 'x', {'fcm_token': 't'})


def test_batch_uses_native_batch(firestore_store, client):
    batch = firestore_store.batch()
    batch.update('friend_requests', 'r1', {'status': 'ACCEPTED'})
    batch.set('friendships', 'f1', {'user_id': 'U1'})
    batch.delete('friendships', 'f2')
    batch.commit()

    native = client.batch.return_value
    assert native.update.call_count == 1
    assert native.set.call_count == 1
    assert native.delete.call_count == 1
    native.commit.assert_called_once_with()


def test_collection_watch_reports_changes(firestore_store, client):
    events = []
    firestore_store.watch_collection('alerts', events.append)
    on_snapshot = client.collection.return_value.on_snapshot.call_args.args[0]

    on_snapshot([FakeDoc('a1', {'is_read': False})], [], None)
    on_snapshot(
        [],
        [
            _change('MODIFIED', FakeDoc('a1', {'is_read': True})),
            _change('ADDED', FakeDoc('a2', {'is_read': False})),
            _change('REMOVED', FakeDoc('a1', {'is_read': True})),
        ],
        None,
    )

    assert [(e.document_id, e.is_create, e.is_update, e.is_delete) for e in events] == [
        ('a1', False, True, False),
        ('a2', True, False, False),
        ('a1', False, False, True),
    ]
    assert events[0].before == {'is_read': False}
    assert events[0].after == {'is_read': True}


def test_subscription_close_unsubscribes(firestore_store, client):
    query = firestore_store.collection('alerts').where('to_user_id', '==', 'U1')
    native_query = client.collection.return_value.where.return_value
    subscription = query.subscribe()

    on_snapshot = native_query.on_snapshot.call_args.args[0]
    on_snapshot([FakeDoc('a1', {'to_user_id': 'U1'})], [], None)
    [snapshot] = subscription.next(timeout=1)
    subscription.close()

    assert snapshot.id == 'a1'
    native_query.on_snapshot.return_value.unsubscribe.assert_called_once_with()


class BrokenDoc(FakeDoc):

    def to_dict(self):
        raise RuntimeError('corrupt document')


def test_subscription_listener_error_reaches_consumer(firestore_store, client):
    native_query = client.collection.return_value.where.return_value
    subscription = (
        firestore_store.collection('alerts')
        .where('to_user_id', '==', 'U1')
        .subscribe()
    )
    on_snapshot = native_query.on_snapshot.call_args.args[0]

    on_snapshot([BrokenDoc('a1', {'to_user_id': 'U1'})], [], None)

    with pytest.raises(RuntimeError):
        subscription.next(timeout=0.5)
    assert subscription.closed
    native_query.on_snapshot.return_value.unsubscribe.assert_called_once_with()


def test_collection_watch_survives_failures(firestore_store, client, caplog):
    caplog.set_level(logging.ERROR)
    events = []

    def callback(event):
        events.append(event)
        if event.document_id == 'a1':
            raise RuntimeError('handler bug')

    firestore_store.watch_collection('alerts', callback)
    on_snapshot = client.collection.return_value.on_snapshot.call_args.args[0]

    on_snapshot([], [], None)
    on_snapshot(
        [],
        [
            _change('ADDED', BrokenDoc('bad', {})),
            _change('ADDED', FakeDoc('a1', {'is_read': False})),
            _change('ADDED', FakeDoc('a2', {'is_read': False})),
        ],
        None,
    )

    assert [event.document_id for event in events] == ['a1', 'a2']
    assert 'Unreadable document alerts/bad' in caplog.text
    assert 'Change callback failed for alerts/a1' in caplog.text


def test_geo_points_use_native_type(firestore_store, client):
    doc_ref = client.collection.return_value.document.return_value

    firestore_store.set('locations', 'U1', {'geo_point': GeoPoint(51.5, -0.12), 'latitude': 51.5})
    written = doc_ref.set.call_args.args[0]
    doc_ref.get.return_value = FakeDoc('U1', written)

    assert isinstance(written['geo_point'], firestore.GeoPoint)
    assert firestore_store.get('locations', 'U1').data == {
        'geo_point': GeoPoint(51.5, -0.12),
        'latitude': 51.5,
    }
