"""
Live location documents.

Each user has at most one document, keyed by user id, at
``locations/{user_id}``. It is overwritten on every sample, deleted when
the user turns sharing off, and purged once it is 24 hours stale.
"""
from dataclasses import dataclass
from datetime import datetime

from common.models import Document
from common.store import GeoPoint


@dataclass
class UserLocation(Document):
    user_id: str = ''
    latitude: float = 0.0
    longitude: float = 0.0
    accuracy: float = 0.0
    altitude: float = 0.0
    speed: float = 0.0
    bearing: float = 0.0
    geo_point: GeoPoint | None = None
    updated_at: datetime | None = None

    collection = 'locations'
