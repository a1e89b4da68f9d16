"""
Closable channel for real-time query results.

A store pushes the full, ordered result list of a query into the
subscription whenever it changes; consumers pull values with ``next()``
or by iterating. ``close()`` detaches the store listener and no value
is delivered afterwards.
"""
import logging
import queue
import threading

logger = logging.getLogger(__name__)

_CLOSED = object()


class SubscriptionClosed(Exception):
    """Raised by ``Subscription.next()`` once the subscription is closed."""


class Subscription:

    def __init__(self, transform=None, on_close=None):
        self._queue = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._error = None
        self._transform = transform
        self._on_close = on_close

    @property
    def closed(self):
        return self._closed

    def set_on_close(self, on_close):
        self._on_close = on_close

    def map(self, transform):
        """
        Apply ``transform`` to each value before it is delivered, after
        any transform added earlier.
        """
        previous = self._transform
        if previous is None:
            self._transform = transform
        else:
            self._transform = lambda value: transform(previous(value))
        return self

    def push(self, snapshots):
        with self._lock:
            if self._closed:
                return False
            self._queue.put(snapshots)
            return True

    def fail(self, exc):
        """Close the subscription because its listener failed."""
        logger.warning('Subscription listener failed: %s', exc)
        with self._lock:
            if self._closed:
                return
            self._error = exc
        self.close()

    def next(self, timeout=None):
        """
        Return the next result list.

        Raises ``queue.Empty`` if ``timeout`` elapses, ``SubscriptionClosed``
        after ``close()``, or the listener's error if it failed.
        """
        if self._closed and self._queue.empty():
            self._raise_closed()
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker for other consumers blocked on get().
            self._queue.put(_CLOSED)
            self._raise_closed()
        if self._transform is not None:
            return self._transform(item)
        return item

    def _raise_closed(self):
        if self._error is not None:
            raise self._error
        raise SubscriptionClosed()

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # Drop undelivered values; nothing is observable after close.
            while True:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
            self._queue.put(_CLOSED)
        if self._on_close is not None:
            try:
                self._on_close()
            except Exception as exc:
                logger.warning('Error detaching subscription listener: %s', exc)

    def __iter__(self):
        while True:
            try:
                yield self.next()
            except SubscriptionClosed:
                return

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
