"""
Reads and writes live user locations.

Friends' locations are fetched with ``in`` queries on ``user_id``,
which Firestore caps at 30 values per query, so larger friend lists are
split into several queries.
"""
import logging

from django.utils import timezone

from apps.friends.services.lifecycle import FriendshipService
from apps.locations.models import UserLocation
from apps.users.services.profiles import UserService
from common.exceptions import SharingDisabled
from common.store import MAX_IN_VALUES, GeoPoint, Subscription, get_document_store

logger = logging.getLogger(__name__)

LOCATIONS = UserLocation.collection


def _locations(snapshots):
    return [UserLocation.from_snapshot(snap) for snap in snapshots]


def _chunks(items, size):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class LocationService:

    def __init__(self, store=None, clock=None, users=None, friendships=None):
        self.store = store or get_document_store()
        self.clock = clock or timezone.now
        self.users = users or UserService(store=self.store, clock=self.clock)
        self.friendships = friendships or FriendshipService(
            store=self.store,
            clock=self.clock,
            users=self.users,
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def update_location(
        self,
        user_id,
        latitude,
        longitude,
        accuracy=0.0,
        altitude=0.0,
        speed=0.0,
        bearing=0.0,
    ):
        """
        Overwrite the user's location document with a new sample.

        Raises SharingDisabled if the user turned location sharing off.
        """
        user = self.users.get_user(user_id)
        if user is not None and not user.location_sharing_enabled:
            raise SharingDisabled()

        location = UserLocation(
            id=user_id,
            user_id=user_id,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy or 0.0,
            altitude=altitude or 0.0,
            speed=speed or 0.0,
            bearing=bearing or 0.0,
            geo_point=GeoPoint(latitude, longitude),
            updated_at=self.clock(),
        )
        self.store.set(LOCATIONS, user_id, location.to_dict())
        logger.debug('Updated location for user %s', user_id)
        return location

    def delete_user_location(self, user_id):
        self.store.delete(LOCATIONS, user_id)
        logger.info('Deleted location for user %s', user_id)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_user_location(self, user_id):
        return UserLocation.from_snapshot(self.store.get(LOCATIONS, user_id))

    def friends_locations(self, user_id):
        friend_ids = self.friendships.get_friend_ids(user_id)
        locations = []
        for chunk in _chunks(friend_ids, MAX_IN_VALUES):
            locations.extend(
                _locations(
                    self.store.collection(LOCATIONS).where('user_id', 'in', chunk).get()
                )
            )
        return locations

    def subscribe_user_location(self, user_id):
        def _single(snapshots):
            return snapshots[0] if snapshots else None

        query = self.store.collection(LOCATIONS).where('user_id', '==', user_id)
        return query.subscribe().map(lambda snaps: _single(_locations(snaps)))

    def subscribe_friends_locations(self, friend_ids):
        """
        Live locations for up to 30 friends.

        Yields a single empty list when ``friend_ids`` is empty.
        """
        friend_ids = list(friend_ids)
        if not friend_ids:
            subscription = Subscription()
            subscription.push([])
            return subscription

        if len(friend_ids) > MAX_IN_VALUES:
            logger.warning(
                'Subscribing to %d of %d friend locations',
                MAX_IN_VALUES,
                len(friend_ids),
            )
        query = self.store.collection(LOCATIONS).where(
            'user_id', 'in', friend_ids[:MAX_IN_VALUES],
        )
        return query.subscribe().map(_locations)
