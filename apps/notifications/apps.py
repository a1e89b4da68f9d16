from django.apps import AppConfig
from django.conf import settings


class NotificationsConfig(AppConfig):
    name = 'apps.notifications'
    label = 'notifications'
    verbose_name = 'Notifications'

    def ready(self):
        # Connect the trigger receivers.
        from apps.notifications import triggers  # noqa: F401

        if settings.INLINE_TRIGGERS and settings.DOCUMENT_STORE_BACKEND == 'memory':
            from apps.notifications.listener import start_listening
            from common.store import get_document_store

            start_listening(get_document_store())
