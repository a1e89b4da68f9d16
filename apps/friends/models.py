"""
Friend request and friendship documents.

A friendship between A and B is two documents, ``(user_id=A,
friend_id=B)`` and ``(user_id=B, friend_id=A)``, which are always
written and deleted together in one batch.
"""
import enum
from dataclasses import dataclass
from datetime import datetime

from common.models import Document


class FriendRequestStatus(str, enum.Enum):
    PENDING = 'PENDING'
    ACCEPTED = 'ACCEPTED'
    DECLINED = 'DECLINED'


@dataclass
class FriendRequest(Document):
    """
    A directed, single-use proposal. The sender's email, name and photo
    are copied in at send time and are not refreshed afterwards.
    """
    from_user_id: str = ''
    to_user_id: str = ''
    from_user_email: str = ''
    from_user_name: str = ''
    from_user_photo: str = ''
    to_user_email: str = ''
    status: FriendRequestStatus = FriendRequestStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None

    collection = 'friend_requests'

    def __post_init__(self):
        self.status = FriendRequestStatus(self.status)

    @property
    def is_pending(self):
        return self.status == FriendRequestStatus.PENDING


@dataclass
class Friendship(Document):
    """One direction of a friendship, as seen by ``user_id``."""
    user_id: str = ''
    friend_id: str = ''
    friend_email: str = ''
    friend_name: str = ''
    friend_photo: str = ''
    created_at: datetime | None = None

    collection = 'friendships'
