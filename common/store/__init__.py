"""
Document store access.

``get_document_store()`` returns the process-wide store selected by the
``DOCUMENT_STORE_BACKEND`` setting (``firestore`` or ``memory``).
"""
import threading

from django.conf import settings

from common.store.base import (
    ASCENDING,
    DESCENDING,
    MAX_BATCH_WRITES,
    MAX_IN_VALUES,
    ChangeEvent,
    DocumentSnapshot,
    DocumentStore,
    GeoPoint,
    Query,
    StoreError,
    WriteBatch,
)
from common.store.subscriptions import Subscription, SubscriptionClosed

__all__ = [
    'ASCENDING',
    'DESCENDING',
    'MAX_BATCH_WRITES',
    'MAX_IN_VALUES',
    'ChangeEvent',
    'DocumentSnapshot',
    'DocumentStore',
    'GeoPoint',
    'Query',
    'StoreError',
    'Subscription',
    'SubscriptionClosed',
    'WriteBatch',
    'get_document_store',
    'reset_document_store',
]

_store = None
_store_lock = threading.Lock()


def _build_store(backend):
    if backend == 'memory':
        from common.store.memory import InMemoryDocumentStore
        return InMemoryDocumentStore()
    if backend == 'firestore':
        from common.store.firestore import FirestoreDocumentStore
        return FirestoreDocumentStore()
    raise ValueError(f'Unknown DOCUMENT_STORE_BACKEND: {backend!r}')


def get_document_store():
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = _build_store(settings.DOCUMENT_STORE_BACKEND)
    return _store


def reset_document_store(store=None):
    """Replace (or drop, when ``store`` is None) the process-wide store."""
    global _store
    with _store_lock:
        _store = store
