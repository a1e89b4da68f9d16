"""
URL configuration for the Users app.
"""
from django.urls import path

from apps.users.views import (
    FcmTokenView,
    LocationSharingView,
    UserProfileView,
    UserSearchView,
)

app_name = 'users'

urlpatterns = [
    path('me/', UserProfileView.as_view(), name='user-profile'),
    path('me/fcm-token/', FcmTokenView.as_view(), name='fcm-token'),
    path('me/location-sharing/', LocationSharingView.as_view(), name='location-sharing'),
    path('search/', UserSearchView.as_view(), name='user-search'),
]
