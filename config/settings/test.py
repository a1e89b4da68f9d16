"""
Test settings.

Tests construct their own in-memory stores and dummy push backends; no
Firebase credentials or network access are needed.
"""
from config.settings.base import *  # noqa: F401, F403

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

DOCUMENT_STORE_BACKEND = 'memory'
PUSH_BACKEND = 'dummy'
INLINE_TRIGGERS = False

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    'DEFAULT_THROTTLE_CLASSES': [],
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
