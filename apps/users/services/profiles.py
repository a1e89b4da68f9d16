"""
Reads and writes user profile documents.

Emails are stored lowercased; every lookup normalises its input the
same way so matching is case-insensitive. Uniqueness of emails is a
convention of the sign-up flow, not something the store enforces.
"""
import logging

from django.utils import timezone

from apps.users.models import User
from common.exceptions import NotFound
from common.store import get_document_store

logger = logging.getLogger(__name__)

USERS = User.collection
LOCATIONS = 'locations'

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 20


def normalize_email(email):
    return (email or '').strip().lower()


class UserService:

    def __init__(self, store=None, clock=None):
        self.store = store or get_document_store()
        self.clock = clock or timezone.now

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_user(self, user_id):
        return User.from_snapshot(self.store.get(USERS, user_id))

    def require_user(self, user_id):
        user = self.get_user(user_id)
        if user is None:
            raise NotFound('User not found.')
        return user

    def get_user_by_email(self, email):
        matches = (
            self.store.collection(USERS)
            .where('email', '==', normalize_email(email))
            .limit(1)
            .get()
        )
        if not matches:
            return None
        return User.from_snapshot(matches[0])

    def search_users_by_email(self, prefix, exclude_user_id=None, limit=SEARCH_LIMIT):
        """Prefix search on the lowercased email field."""
        prefix = normalize_email(prefix)
        if len(prefix) < SEARCH_MIN_LENGTH:
            return []

        snapshots = (
            self.store.collection(USERS)
            .where('email', '>=', prefix)
            .where('email', '<=', prefix + '\uf8ff')
            .limit(limit + 1)
            .get()
        )
        users = [User.from_snapshot(snap) for snap in snapshots]
        return [user for user in users if user.id != exclude_user_id][:limit]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_or_update_user(
        self,
        user_id,
        email,
        display_name='',
        profile_picture_url='',
        fcm_token=None,
    ):
        now = self.clock()
        existing = self.get_user(user_id)

        user = existing or User(id=user_id, created_at=now)
        user.email = normalize_email(email)
        user.display_name = display_name or user.display_name
        user.profile_picture_url = profile_picture_url or user.profile_picture_url
        if fcm_token is not None:
            user.fcm_token = fcm_token
        user.last_active = now

        self.store.set(USERS, user_id, user.to_dict(), merge=True)
        if existing is None:
            logger.info('New user profile created: %s (id=%s)', user.email, user_id)
        return user

    def update_profile(self, user_id, **changes):
        allowed = {'display_name', 'profile_picture_url'}
        fields = {k: v for k, v in changes.items() if k in allowed and v is not None}
        user = self.require_user(user_id)
        if not fields:
            return user
        self.store.update(USERS, user_id, fields)
        for key, value in fields.items():
            setattr(user, key, value)
        return user

    def update_fcm_token(self, user_id, token):
        self.require_user(user_id)
        self.store.update(USERS, user_id, {'fcm_token': token})
        logger.info('Push token refreshed for user %s', user_id)

    def update_last_active(self, user_id, when=None):
        self.store.update(USERS, user_id, {'last_active': when or self.clock()})

    def set_location_sharing_enabled(self, user_id, enabled):
        """
        Toggle location sharing. Turning it off also removes the user's
        live location document in the same batch.
        """
        self.require_user(user_id)
        batch = self.store.batch()
        batch.update(USERS, user_id, {'location_sharing_enabled': bool(enabled)})
        if not enabled:
            batch.delete(LOCATIONS, user_id)
        batch.commit()
        logger.info(
            'Location sharing %s for user %s',
            'enabled' if enabled else 'disabled',
            user_id,
        )
