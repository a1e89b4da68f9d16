"""
URL configuration for the Friends app.
"""
from django.urls import path

from apps.friends.views import (
    AcceptFriendRequestView,
    DeclineFriendRequestView,
    FriendDetailView,
    FriendListView,
    FriendRequestView,
    ReceivedRequestsView,
    SentRequestsView,
)

app_name = 'friends'

urlpatterns = [
    path('', FriendListView.as_view(), name='friend-list'),
    path('requests/', FriendRequestView.as_view(), name='send-request'),
    path('requests/received/', ReceivedRequestsView.as_view(), name='received-requests'),
    path('requests/sent/', SentRequestsView.as_view(), name='sent-requests'),
    path(
        'requests/<str:request_id>/accept/',
        AcceptFriendRequestView.as_view(),
        name='accept-request',
    ),
    path(
        'requests/<str:request_id>/decline/',
        DeclineFriendRequestView.as_view(),
        name='decline-request',
    ),
    path('<str:friend_id>/', FriendDetailView.as_view(), name='friend-detail'),
]
