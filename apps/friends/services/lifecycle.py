"""
Friend request and friendship lifecycle.

Owns every mutation of ``friend_requests`` and ``friendships``:

* a request is created PENDING by its sender and resolved exactly once,
  to ACCEPTED or DECLINED, by its recipient;
* accepting marks the request and writes both directional friendship
  documents in one atomic batch;
* removing a friend deletes both directions in one atomic batch.

The duplicate check before sending is a read followed by a write with
no transaction around it, so two concurrent sends between the same pair
can both pass it.
"""
import logging

from django.utils import timezone

from apps.friends.models import FriendRequest, FriendRequestStatus, Friendship
from apps.users.services.profiles import UserService, normalize_email
from common.exceptions import (
    AlreadyFriends,
    AlreadyResolved,
    Duplicate,
    NotFound,
    SelfRequest,
    Unauthorized,
)
from common.store import DESCENDING, get_document_store

logger = logging.getLogger(__name__)

FRIEND_REQUESTS = FriendRequest.collection
FRIENDSHIPS = Friendship.collection


def _requests(snapshots):
    return [FriendRequest.from_snapshot(snap) for snap in snapshots]


def _friendships(snapshots):
    return [Friendship.from_snapshot(snap) for snap in snapshots]


class FriendshipService:

    def __init__(self, store=None, clock=None, users=None):
        self.store = store or get_document_store()
        self.clock = clock or timezone.now
        self.users = users or UserService(store=self.store, clock=self.clock)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def send_friend_request(self, current_user_id, to_email):
        """
        Send a friend request to the user registered under ``to_email``.

        Raises NotFound, SelfRequest, Duplicate or AlreadyFriends before
        anything is written.
        """
        email = normalize_email(to_email)
        target = self.users.get_user_by_email(email)
        if target is None:
            raise NotFound(f'User not found with email: {email}')

        if target.id == current_user_id:
            raise SelfRequest()

        if self._pending_request_between(current_user_id, target.id) is not None:
            raise Duplicate()

        if self._friendship(current_user_id, target.id) is not None:
            raise AlreadyFriends()

        sender = self.users.get_user(current_user_id)
        now = self.clock()
        request = FriendRequest(
            id=self.store.new_id(FRIEND_REQUESTS),
            from_user_id=current_user_id,
            to_user_id=target.id,
            from_user_email=sender.email if sender else '',
            from_user_name=sender.display_name if sender else '',
            from_user_photo=sender.profile_picture_url if sender else '',
            to_user_email=email,
            status=FriendRequestStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        self.store.set(FRIEND_REQUESTS, request.id, request.to_dict())

        logger.info(
            'Friend request %s sent from %s to %s',
            request.id,
            current_user_id,
            target.id,
        )
        return request

    def accept_friend_request(self, current_user_id, request_id):
        """
        Accept a pending request addressed to ``current_user_id``.

        The status change and both friendship documents are committed in
        a single batch. Returns the recipient's side of the friendship.
        """
        request = self._resolvable_request(current_user_id, request_id, 'accept')

        now = self.clock()
        batch = self.store.batch()
        batch.update(FRIEND_REQUESTS, request.id, {
            'status': FriendRequestStatus.ACCEPTED.value,
            'updated_at': now,
        })

        existing = self._friendship(request.to_user_id, request.from_user_id)
        if existing is not None:
            # Crossed requests: the pair is already friends, so only the
            # request is resolved and no second pair is written.
            batch.commit()
            logger.info(
                'Friend request %s accepted; %s and %s were already friends',
                request.id,
                request.from_user_id,
                request.to_user_id,
            )
            return existing

        sender = self.users.get_user(request.from_user_id)
        recipient = self.users.get_user(request.to_user_id)

        senders_view = Friendship(
            id=self.store.new_id(FRIENDSHIPS),
            user_id=request.from_user_id,
            friend_id=request.to_user_id,
            friend_email=recipient.email if recipient else request.to_user_email,
            friend_name=recipient.display_name if recipient else '',
            friend_photo=recipient.profile_picture_url if recipient else '',
            created_at=now,
        )
        recipients_view = Friendship(
            id=self.store.new_id(FRIENDSHIPS),
            user_id=request.to_user_id,
            friend_id=request.from_user_id,
            friend_email=sender.email if sender else request.from_user_email,
            friend_name=sender.display_name if sender else request.from_user_name,
            friend_photo=sender.profile_picture_url if sender else request.from_user_photo,
            created_at=now,
        )
        batch.set(FRIENDSHIPS, senders_view.id, senders_view.to_dict())
        batch.set(FRIENDSHIPS, recipients_view.id, recipients_view.to_dict())
        batch.commit()

        logger.info(
            'Friend request %s accepted; %s and %s are now friends',
            request.id,
            request.from_user_id,
            request.to_user_id,
        )
        return recipients_view

    def decline_friend_request(self, current_user_id, request_id):
        request = self._resolvable_request(current_user_id, request_id, 'decline')
        self.store.update(FRIEND_REQUESTS, request.id, {
            'status': FriendRequestStatus.DECLINED.value,
            'updated_at': self.clock(),
        })
        logger.info('Friend request %s declined by %s', request.id, current_user_id)

    def _resolvable_request(self, current_user_id, request_id, action):
        request = FriendRequest.from_snapshot(self.store.get(FRIEND_REQUESTS, request_id))
        if request is None:
            raise NotFound('Friend request not found.')
        if request.to_user_id != current_user_id:
            raise Unauthorized(f'You are not authorized to {action} this request.')
        if not request.is_pending:
            raise AlreadyResolved(
                f'This friend request was already {request.status.value.lower()}.'
            )
        return request

    # ------------------------------------------------------------------
    # Friendships
    # ------------------------------------------------------------------

    def remove_friend(self, current_user_id, friend_id):
        """
        Delete both directions of a friendship in one batch.

        Both lookups finish before anything is deleted, so a failed
        lookup leaves the pair untouched.
        """
        forward = self._friendship_query(current_user_id, friend_id).get()
        backward = self._friendship_query(friend_id, current_user_id).get()

        if not forward and not backward:
            logger.info('No friendship between %s and %s to remove', current_user_id, friend_id)
            return 0

        batch = self.store.batch()
        for snap in forward + backward:
            batch.delete(FRIENDSHIPS, snap.id)
        batch.commit()

        logger.info(
            'Friendship between %s and %s removed (%d documents)',
            current_user_id,
            friend_id,
            len(batch),
        )
        return len(batch)

    def get_friend_ids(self, user_id):
        snapshots = self.store.collection(FRIENDSHIPS).where('user_id', '==', user_id).get()
        return [snap.get('friend_id') for snap in snapshots]

    def are_friends(self, user_id, other_user_id):
        return self._friendship(user_id, other_user_id) is not None

    def _friendship_query(self, user_id, friend_id):
        return (
            self.store.collection(FRIENDSHIPS)
            .where('user_id', '==', user_id)
            .where('friend_id', '==', friend_id)
        )

    def _friendship(self, user_id, friend_id):
        matches = self._friendship_query(user_id, friend_id).limit(1).get()
        return Friendship.from_snapshot(matches[0]) if matches else None

    def _pending_request_between(self, from_user_id, to_user_id):
        matches = (
            self.store.collection(FRIEND_REQUESTS)
            .where('from_user_id', '==', from_user_id)
            .where('to_user_id', '==', to_user_id)
            .where('status', '==', FriendRequestStatus.PENDING.value)
            .limit(1)
            .get()
        )
        return FriendRequest.from_snapshot(matches[0]) if matches else None

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def pending_requests_query(self, user_id):
        return (
            self.store.collection(FRIEND_REQUESTS)
            .where('to_user_id', '==', user_id)
            .where('status', '==', FriendRequestStatus.PENDING.value)
            .order_by('created_at', DESCENDING)
        )

    def sent_requests_query(self, user_id):
        return (
            self.store.collection(FRIEND_REQUESTS)
            .where('from_user_id', '==', user_id)
            .where('status', '==', FriendRequestStatus.PENDING.value)
            .order_by('created_at', DESCENDING)
        )

    def friends_query(self, user_id):
        return (
            self.store.collection(FRIENDSHIPS)
            .where('user_id', '==', user_id)
            .order_by('created_at', DESCENDING)
        )

    def pending_requests(self, user_id):
        return _requests(self.pending_requests_query(user_id).get())

    def sent_requests(self, user_id):
        return _requests(self.sent_requests_query(user_id).get())

    def friends(self, user_id):
        return _friendships(self.friends_query(user_id).get())

    def subscribe_pending_requests(self, user_id):
        return self.pending_requests_query(user_id).subscribe().map(_requests)

    def subscribe_sent_requests(self, user_id):
        return self.sent_requests_query(user_id).subscribe().map(_requests)

    def subscribe_friends(self, user_id):
        return self.friends_query(user_id).subscribe().map(_friendships)
