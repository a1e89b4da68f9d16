"""
Run the notification fan-out against the configured document store.

Usage:
    python manage.py run_triggers
"""
import time

from django.core.management.base import BaseCommand

from apps.notifications.listener import WATCHED_COLLECTIONS, start_listening, stop_listening
from common.store import get_document_store


class Command(BaseCommand):
    help = 'Watch friend_requests, alerts and locations and send push notifications for changes.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--collections',
            nargs='+',
            default=list(WATCHED_COLLECTIONS),
            choices=list(WATCHED_COLLECTIONS),
            help='Collections to watch (default: all).',
        )

    def handle(self, *args, **options):
        handles = start_listening(get_document_store(), options['collections'])
        self.stdout.write(
            self.style.SUCCESS(
                f"Watching {', '.join(options['collections'])}. Press Ctrl+C to stop."
            )
        )
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stdout.write('Stopping triggers...')
        finally:
            stop_listening(handles)
