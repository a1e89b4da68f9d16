"""
Alert documents: one-shot pings from one user to another.
"""
from dataclasses import dataclass
from datetime import datetime

from common.models import Document

DEFAULT_ALERT_MESSAGE = 'is trying to reach you!'


@dataclass
class Alert(Document):
    from_user_id: str = ''
    to_user_id: str = ''
    from_user_name: str = ''
    from_user_photo: str = ''
    message: str = DEFAULT_ALERT_MESSAGE
    is_read: bool = False
    created_at: datetime | None = None

    collection = 'alerts'
