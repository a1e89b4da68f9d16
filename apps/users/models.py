"""
User profile documents.

Stored at ``users/{uid}`` where ``uid`` is the Firebase Authentication
subject id.
"""
from dataclasses import dataclass
from datetime import datetime

from common.models import Document


@dataclass
class User(Document):
    email: str = ''
    display_name: str = ''
    profile_picture_url: str = ''
    fcm_token: str = ''
    location_sharing_enabled: bool = True
    created_at: datetime | None = None
    last_active: datetime | None = None

    collection = 'users'
