"""
Document store interface.

A narrow, collection-oriented view of the backing database: point
reads and writes, filtered/ordered/limited queries, atomic write
batches, real-time query subscriptions and collection change watches.
Concrete stores live in ``common.store.firestore`` and
``common.store.memory``.
"""
from dataclasses import dataclass, field
from typing import Any

# Firestore rejects batches with more than 500 writes.
MAX_BATCH_WRITES = 500

# Firestore ``in`` filters accept at most 30 values.
MAX_IN_VALUES = 30

ASCENDING = 'ASCENDING'
DESCENDING = 'DESCENDING'

QUERY_OPERATORS = ('==', '!=', '<', '<=', '>', '>=', 'in', 'array_contains')


class StoreError(Exception):
    """Raised when the backing store fails to complete an operation."""


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude value stored as the backend's native geo point."""
    latitude: float
    longitude: float


@dataclass
class DocumentSnapshot:
    """A point-in-time copy of a stored document."""
    collection: str
    id: str
    data: dict | None = None

    @property
    def exists(self):
        return self.data is not None

    def to_dict(self):
        return dict(self.data) if self.data is not None else None

    def get(self, key, default=None):
        if self.data is None:
            return default
        return self.data.get(key, default)


@dataclass
class ChangeEvent:
    """
    A single document write observed on a collection.

    ``before`` is ``None`` for creates and ``after`` is ``None`` for
    deletes.
    """
    collection: str
    document_id: str
    before: dict | None = None
    after: dict | None = None

    @property
    def is_create(self):
        return self.before is None and self.after is not None

    @property
    def is_update(self):
        return self.before is not None and self.after is not None

    @property
    def is_delete(self):
        return self.before is not None and self.after is None


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class Query:
    """
    Immutable query description.

    Builder methods return a new ``Query`` so partially-built queries
    can be shared safely::

        store.collection('friendships').where('user_id', '==', uid) \\
            .order_by('created_at', DESCENDING).limit(20).get()
    """
    store: Any = field(compare=False, repr=False)
    collection: str
    filters: tuple = ()
    order: tuple = ()
    limit_count: int | None = None

    def where(self, field_path, op, value):
        if op not in QUERY_OPERATORS:
            raise ValueError(f'Unsupported query operator: {op}')
        return Query(
            self.store,
            self.collection,
            self.filters + (Filter(field_path, op, value),),
            self.order,
            self.limit_count,
        )

    def order_by(self, field_path, direction=ASCENDING):
        if direction not in (ASCENDING, DESCENDING):
            raise ValueError(f'Unsupported order direction: {direction}')
        return Query(
            self.store,
            self.collection,
            self.filters,
            self.order + ((field_path, direction),),
            self.limit_count,
        )

    def limit(self, count):
        return Query(self.store, self.collection, self.filters, self.order, count)

    def get(self):
        return self.store.run_query(self)

    def subscribe(self):
        return self.store.subscribe(self)


class WriteBatch:
    """
    Collects writes and applies them all-or-nothing on ``commit()``.

    Operations are recorded as ``(kind, collection, doc_id, data, merge)``
    tuples; stores decide how to apply them atomically.
    """

    def __init__(self, store):
        self._store = store
        self._writes = []
        self._committed = False

    def __len__(self):
        return len(self._writes)

    @property
    def writes(self):
        return list(self._writes)

    def set(self, collection, doc_id, data, merge=False):
        self._writes.append(('set', collection, doc_id, dict(data), merge))
        return self

    def update(self, collection, doc_id, fields):
        self._writes.append(('update', collection, doc_id, dict(fields), False))
        return self

    def delete(self, collection, doc_id):
        self._writes.append(('delete', collection, doc_id, None, False))
        return self

    def commit(self):
        if self._committed:
            raise StoreError('Write batch has already been committed.')
        if len(self._writes) > MAX_BATCH_WRITES:
            raise StoreError(
                f'Write batch exceeds {MAX_BATCH_WRITES} writes ({len(self._writes)}).'
            )
        self._store.commit_batch(self)
        self._committed = True


class DocumentStore:
    """Base class for document store implementations."""

    def collection(self, name):
        return Query(self, name)

    def batch(self):
        return WriteBatch(self)

    def new_id(self, collection):
        raise NotImplementedError

    def get(self, collection, doc_id):
        """Return a ``DocumentSnapshot`` (``exists`` is False when absent)."""
        raise NotImplementedError

    def set(self, collection, doc_id, data, merge=False):
        raise NotImplementedError

    def update(self, collection, doc_id, fields):
        """Update fields of an existing document; fails if it is missing."""
        raise NotImplementedError

    def delete(self, collection, doc_id):
        raise NotImplementedError

    def run_query(self, query):
        """Return the list of ``DocumentSnapshot`` matching ``query``."""
        raise NotImplementedError

    def commit_batch(self, batch):
        raise NotImplementedError

    def subscribe(self, query):
        """Return a ``Subscription`` yielding the full result list on every change."""
        raise NotImplementedError

    def watch_collection(self, collection, callback):
        """
        Call ``callback(ChangeEvent)`` for every write to ``collection``
        made after the watch starts. Returns a handle with ``close()``.
        """
        raise NotImplementedError
