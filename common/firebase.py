"""
Firebase Admin SDK bootstrap.

Initialises the default Firebase app once per process, from the
service-account file in ``FIREBASE_CREDENTIALS_PATH`` when configured,
otherwise from application default credentials.
"""
import logging

import firebase_admin
from django.conf import settings
from firebase_admin import credentials

logger = logging.getLogger(__name__)


def get_firebase_app():
    """
    Return the default Firebase app, initialising it if it hasn't been
    initialised yet.
    """
    if not firebase_admin._apps:
        cred_path = getattr(settings, 'FIREBASE_CREDENTIALS_PATH', '')
        if cred_path:
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
            logger.info('Firebase initialised from %s', cred_path)
        else:
            firebase_admin.initialize_app()
            logger.info('Firebase initialised with application default credentials')
    return firebase_admin.get_app()
