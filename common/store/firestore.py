"""
Cloud Firestore document store.

Thin adapter over ``firebase_admin.firestore``. Backend failures are
re-raised as ``StoreError``; batches use Firestore's native atomic
``WriteBatch``; subscriptions and collection watches are built on
``on_snapshot`` listeners. ``GeoPoint`` values are converted to and from
Firestore's native geo point type.
"""
import logging
import threading
from contextlib import contextmanager

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from common.firebase import get_firebase_app
from common.store.base import (
    DESCENDING,
    ChangeEvent,
    DocumentSnapshot,
    DocumentStore,
    GeoPoint,
    StoreError,
)
from common.store.subscriptions import Subscription

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(action):
    try:
        yield
    except google_exceptions.GoogleAPIError as exc:
        logger.error('Firestore %s failed: %s', action, exc)
        raise StoreError(f'Firestore {action} failed: {exc}') from exc


def _to_native(data):
    return {
        key: firestore.GeoPoint(value.latitude, value.longitude)
        if isinstance(value, GeoPoint) else value
        for key, value in data.items()
    }


def _from_native(data):
    if data is None:
        return None
    return {
        key: GeoPoint(value.latitude, value.longitude)
        if isinstance(value, firestore.GeoPoint) else value
        for key, value in data.items()
    }


def _snapshot(collection, doc):
    data = _from_native(doc.to_dict()) if doc.exists else None
    return DocumentSnapshot(collection, doc.id, data)


class FirestoreDocumentStore(DocumentStore):

    def __init__(self, client=None):
        self.db = client or firestore.client(app=get_firebase_app())

    def _ref(self, collection, doc_id):
        return self.db.collection(collection).document(doc_id)

    def new_id(self, collection):
        return self.db.collection(collection).document().id

    def get(self, collection, doc_id):
        with _store_errors(f'get {collection}/{doc_id}'):
            return _snapshot(collection, self._ref(collection, doc_id).get())

    def set(self, collection, doc_id, data, merge=False):
        with _store_errors(f'set {collection}/{doc_id}'):
            self._ref(collection, doc_id).set(_to_native(data), merge=merge)

    def update(self, collection, doc_id, fields):
        with _store_errors(f'update {collection}/{doc_id}'):
            self._ref(collection, doc_id).update(_to_native(fields))

    def delete(self, collection, doc_id):
        with _store_errors(f'delete {collection}/{doc_id}'):
            self._ref(collection, doc_id).delete()

    def _native_query(self, query):
        native = self.db.collection(query.collection)
        for flt in query.filters:
            native = native.where(filter=FieldFilter(flt.field, flt.op, flt.value))
        for field_path, direction in query.order:
            native = native.order_by(
                field_path,
                direction=(
                    firestore.Query.DESCENDING
                    if direction == DESCENDING
                    else firestore.Query.ASCENDING
                ),
            )
        if query.limit_count is not None:
            native = native.limit(query.limit_count)
        return native

    def run_query(self, query):
        with _store_errors(f'query {query.collection}'):
            return [
                _snapshot(query.collection, doc)
                for doc in self._native_query(query).stream()
            ]

    def commit_batch(self, batch):
        native = self.db.batch()
        for kind, collection, doc_id, data, merge in batch.writes:
            ref = self._ref(collection, doc_id)
            if kind == 'set':
                native.set(ref, _to_native(data), merge=merge)
            elif kind == 'update':
                native.update(ref, _to_native(data))
            elif kind == 'delete':
                native.delete(ref)
            else:
                raise StoreError(f'Unknown write kind: {kind}')
        with _store_errors(f'batch commit ({len(batch)} writes)'):
            native.commit()

    def subscribe(self, query):
        subscription = Subscription()

        def _on_snapshot(docs, changes, read_time):
            try:
                subscription.push([_snapshot(query.collection, doc) for doc in docs])
            except Exception as exc:
                subscription.fail(exc)

        with _store_errors(f'subscribe {query.collection}'):
            watch = self._native_query(query).on_snapshot(_on_snapshot)
        subscription.set_on_close(watch.unsubscribe)
        if subscription.closed:
            # Failed on the first snapshot, before the detach hook was set.
            watch.unsubscribe()
        return subscription

    def watch_collection(self, collection, callback):
        return _CollectionWatch(self, collection, callback)


class _CollectionWatch:
    """
    Turns ``on_snapshot`` document changes into ``ChangeEvent`` objects.

    Firestore only reports the new state of a changed document, so the
    last-seen copy of every document is kept to supply ``before``. The
    initial snapshot seeds that cache and is not dispatched.
    """

    def __init__(self, store, collection, callback):
        self._collection = collection
        self._callback = callback
        self._seen = {}
        self._initialised = False
        self._lock = threading.Lock()
        with _store_errors(f'watch {collection}'):
            self._watch = store.db.collection(collection).on_snapshot(self._on_snapshot)

    def _read(self, doc):
        try:
            return _from_native(doc.to_dict())
        except Exception as exc:
            logger.error('Unreadable document %s/%s: %s', self._collection, doc.id, exc)
            return None

    def _on_snapshot(self, docs, changes, read_time):
        with self._lock:
            if not self._initialised:
                self._seen = {doc.id: self._read(doc) for doc in docs}
                self._initialised = True
                logger.info(
                    'Watching %s (%d existing documents)',
                    self._collection,
                    len(self._seen),
                )
                return

            events = []
            for change in changes:
                doc = change.document
                before = self._seen.get(doc.id)
                if change.type.name == 'REMOVED':
                    after = None
                    self._seen.pop(doc.id, None)
                else:
                    after = self._read(doc)
                    if after is None:
                        continue
                    self._seen[doc.id] = after
                events.append(ChangeEvent(self._collection, doc.id, before, after))

        for event in events:
            try:
                self._callback(event)
            except Exception as exc:
                logger.error(
                    'Change callback failed for %s/%s: %s',
                    event.collection,
                    event.document_id,
                    exc,
                )

    def close(self):
        self._watch.unsubscribe()
