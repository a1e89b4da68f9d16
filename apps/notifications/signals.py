"""
Document change signals.

Sent with ``sender`` set to the collection name and an ``event``
keyword argument holding the ``ChangeEvent``.
"""
import logging

from django.dispatch import Signal

logger = logging.getLogger(__name__)

document_created = Signal()
document_updated = Signal()
document_deleted = Signal()


def dispatch_change(event):
    """
    Send the signal matching ``event`` to its receivers.

    Receiver errors are logged and never propagate.
    """
    if event.is_create:
        signal = document_created
    elif event.is_update:
        signal = document_updated
    elif event.is_delete:
        signal = document_deleted
    else:
        return []

    responses = signal.send_robust(sender=event.collection, event=event)
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                'Receiver %s failed for %s/%s: %s',
                getattr(receiver, '__name__', receiver),
                event.collection,
                event.document_id,
                response,
            )
    return responses
