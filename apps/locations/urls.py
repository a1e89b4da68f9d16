"""
URL configuration for the Locations app.
"""
from django.urls import path

from apps.locations.views import (
    FriendLocationsView,
    MyLocationView,
    UpdateLocationView,
)

app_name = 'locations'

urlpatterns = [
    path('update/', UpdateLocationView.as_view(), name='update-location'),
    path('me/', MyLocationView.as_view(), name='my-location'),
    path('friends/', FriendLocationsView.as_view(), name='friend-locations'),
]
