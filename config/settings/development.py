"""
Development-specific Django settings.

Runs entirely in-process by default: in-memory document store, log-only
push delivery and inline notification triggers.
"""
from config.settings.base import *  # noqa: F401, F403
from config.settings.base import env

# ---------------------------------------------------------------------------
# Debug
# ---------------------------------------------------------------------------
DEBUG = True

# ---------------------------------------------------------------------------
# Allowed Hosts
# ---------------------------------------------------------------------------
ALLOWED_HOSTS = ['*']

# ---------------------------------------------------------------------------
# CORS - allow all in development
# ---------------------------------------------------------------------------
CORS_ALLOW_ALL_ORIGINS = True

# ---------------------------------------------------------------------------
# Document store & push delivery
# ---------------------------------------------------------------------------
DOCUMENT_STORE_BACKEND = env('DOCUMENT_STORE_BACKEND', default='memory')
PUSH_BACKEND = env('PUSH_BACKEND', default='dummy')
INLINE_TRIGGERS = env.bool('INLINE_TRIGGERS', default=True)

# ---------------------------------------------------------------------------
# Logging - more verbose in development
# ---------------------------------------------------------------------------
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'DEBUG',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
        'common': {
            'handlers': ['console'],
            'level': 'DEBUG',
            'propagate': False,
        },
    },
}
