"""
Celery configuration for the Friend Locator backend.

Only configures Celery if CELERY_BROKER_URL is set in the environment.
Without a broker the scheduled cleanup does not run.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# Only initialise Celery if a broker is configured
_broker = os.environ.get('CELERY_BROKER_URL', '')
if _broker:
    from celery import Celery
    from celery.schedules import crontab

    app = Celery('friend_locator')
    app.config_from_object('django.conf:settings', namespace='CELERY')
    app.autodiscover_tasks()

    # Periodic tasks
    app.conf.beat_schedule = {
        'cleanup-stale-locations': {
            'task': 'apps.locations.tasks.cleanup_stale_locations',
            'schedule': crontab(hour=0, minute=0),  # Daily at midnight
        },
    }
else:
    app = None
