"""
In-process document store.

Keeps every collection in a dict guarded by a lock. Used for local
development and tests in place of Firestore, the same way the cache
falls back to LocMemCache when Redis is not configured.

Batches are applied to a copy of the collections they touch and
swapped in only when every write succeeds, so a failed commit leaves
no partial effect.
"""
import copy
import logging
import threading
import uuid

from common.store.base import (
    DESCENDING,
    ChangeEvent,
    DocumentSnapshot,
    DocumentStore,
    StoreError,
)
from common.store.subscriptions import Subscription

logger = logging.getLogger(__name__)

_MISSING = object()


def _matches(data, flt):
    value = data.get(flt.field, _MISSING)
    if value is _MISSING:
        # Firestore never matches documents lacking the filtered field.
        return False
    try:
        if flt.op == '==':
            return value == flt.value
        if flt.op == '!=':
            return value != flt.value
        if flt.op == '<':
            return value < flt.value
        if flt.op == '<=':
            return value <= flt.value
        if flt.op == '>':
            return value > flt.value
        if flt.op == '>=':
            return value >= flt.value
        if flt.op == 'in':
            return value in flt.value
        if flt.op == 'array_contains':
            return isinstance(value, (list, tuple)) and flt.value in value
    except TypeError:
        return False
    return False


class _Listener:
    def __init__(self, callback):
        self.callback = callback
        self.active = True


class InMemoryDocumentStore(DocumentStore):

    def __init__(self):
        self._collections = {}
        self._lock = threading.RLock()
        self._subscriptions = []
        self._watchers = {}

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    def new_id(self, collection):
        return uuid.uuid4().hex[:20]

    def get(self, collection, doc_id):
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            return DocumentSnapshot(collection, doc_id, copy.deepcopy(data))

    def set(self, collection, doc_id, data, merge=False):
        self.batch().set(collection, doc_id, data, merge=merge).commit()

    def update(self, collection, doc_id, fields):
        self.batch().update(collection, doc_id, fields).commit()

    def delete(self, collection, doc_id):
        self.batch().delete(collection, doc_id).commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def run_query(self, query):
        with self._lock:
            return self._evaluate(query)

    def _evaluate(self, query):
        docs = self._collections.get(query.collection, {})
        results = [
            (doc_id, data) for doc_id, data in docs.items()
            if all(_matches(data, flt) for flt in query.filters)
        ]
        # Apply orderings last-to-first so the first order_by wins.
        for field_path, direction in reversed(query.order):
            results = [item for item in results if field_path in item[1]]
            results.sort(
                key=lambda item: item[1][field_path],
                reverse=direction == DESCENDING,
            )
        if query.limit_count is not None:
            results = results[:query.limit_count]
        return [
            DocumentSnapshot(query.collection, doc_id, copy.deepcopy(data))
            for doc_id, data in results
        ]

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def commit_batch(self, batch):
        with self._lock:
            # Stored documents are replaced, never mutated in place, so only
            # the collections this batch touches need a fresh mapping.
            staged = dict(self._collections)
            for collection in {write[1] for write in batch.writes}:
                staged[collection] = dict(self._collections.get(collection, {}))
            events = []
            for kind, collection, doc_id, data, merge in batch.writes:
                event = self._apply_write(staged, kind, collection, doc_id, data, merge)
                if event is not None:
                    events.append(event)
            self._collections = staged
            self._notify_subscriptions({event.collection for event in events})
            watchers = {
                name: list(listeners) for name, listeners in self._watchers.items()
            }
        # Watch callbacks may write back to the store; run them unlocked.
        for event in events:
            for listener in watchers.get(event.collection, []):
                if not listener.active:
                    continue
                try:
                    listener.callback(event)
                except Exception as exc:
                    logger.error(
                        'Change listener failed for %s/%s: %s',
                        event.collection,
                        event.document_id,
                        exc,
                    )

    def _apply_write(self, staged, kind, collection, doc_id, data, merge):
        docs = staged.setdefault(collection, {})
        before = copy.deepcopy(docs.get(doc_id))

        if kind == 'set':
            if merge and before is not None:
                docs[doc_id] = {**before, **copy.deepcopy(data)}
            else:
                docs[doc_id] = copy.deepcopy(data)
        elif kind == 'update':
            if before is None:
                raise StoreError(f'No document to update: {collection}/{doc_id}')
            docs[doc_id] = {**before, **copy.deepcopy(data)}
        elif kind == 'delete':
            if before is None:
                return None
            del docs[doc_id]
        else:
            raise StoreError(f'Unknown write kind: {kind}')

        return ChangeEvent(
            collection=collection,
            document_id=doc_id,
            before=before,
            after=copy.deepcopy(docs.get(doc_id)),
        )

    # ------------------------------------------------------------------
    # Real-time
    # ------------------------------------------------------------------

    def subscribe(self, query):
        subscription = Subscription()
        entry = {'query': query, 'subscription': subscription, 'last': None}

        def _detach():
            with self._lock:
                if entry in self._subscriptions:
                    self._subscriptions.remove(entry)

        subscription.set_on_close(_detach)
        with self._lock:
            self._subscriptions.append(entry)
            self._push(entry)
        return subscription

    def _push(self, entry):
        results = self._evaluate(entry['query'])
        signature = [(snap.id, snap.data) for snap in results]
        if signature == entry['last']:
            return
        entry['last'] = signature
        entry['subscription'].push(results)

    def _notify_subscriptions(self, collections):
        for entry in list(self._subscriptions):
            if entry['query'].collection in collections:
                self._push(entry)

    def watch_collection(self, collection, callback):
        listener = _Listener(callback)
        with self._lock:
            self._watchers.setdefault(collection, []).append(listener)
        return _WatchHandle(self, collection, listener)

    def _remove_watcher(self, collection, listener):
        with self._lock:
            listeners = self._watchers.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)

    def clear(self):
        with self._lock:
            self._collections = {}


class _WatchHandle:
    def __init__(self, store, collection, listener):
        self._store = store
        self._collection = collection
        self._listener = listener

    def close(self):
        self._listener.active = False
        self._store._remove_watcher(self._collection, self._listener)
