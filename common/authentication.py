"""
Firebase ID token authentication for Django REST Framework.

Clients send ``Authorization: Bearer <Firebase ID token>``; the decoded
token's ``uid`` is the user's document id in the ``users`` collection.
"""
import logging
from dataclasses import dataclass

from firebase_admin import auth as firebase_auth
from rest_framework import authentication, exceptions

from common.firebase import get_firebase_app

logger = logging.getLogger(__name__)


@dataclass
class FirebaseUser:
    """The authenticated principal attached to ``request.user``."""
    uid: str
    email: str = ''
    name: str = ''
    picture: str = ''

    is_authenticated = True
    is_anonymous = False

    @property
    def id(self):
        return self.uid

    @property
    def pk(self):
        return self.uid


class FirebaseAuthentication(authentication.BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed('Invalid authorization header.')

        try:
            token = header[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed('Invalid authorization header.')

        try:
            decoded = firebase_auth.verify_id_token(token, app=get_firebase_app())
        except Exception as exc:
            logger.warning('Firebase token verification failed: %s', exc)
            raise exceptions.AuthenticationFailed('Invalid Firebase token.')

        user = FirebaseUser(
            uid=decoded['uid'],
            email=(decoded.get('email') or '').lower(),
            name=decoded.get('name') or '',
            picture=decoded.get('picture') or '',
        )
        return user, token

    def authenticate_header(self, request):
        return self.keyword
