"""
Views for the Friends app.

Friend request lifecycle and friends list for the authenticated user.
"""
import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.friends.serializers import (
    FriendRequestSerializer,
    FriendshipSerializer,
    SendFriendRequestSerializer,
)
from apps.friends.services.lifecycle import FriendshipService

logger = logging.getLogger(__name__)


class FriendRequestView(APIView):
    """
    Send a friend request by email.

    POST /api/v1/friends/requests/
    Body: {"email": "..."}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = SendFriendRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        friend_request = FriendshipService().send_friend_request(
            request.user.uid,
            serializer.validated_data['email'],
        )
        return Response(
            {
                'success': True,
                'data': FriendRequestSerializer(friend_request).data,
                'message': 'Friend request sent.',
            },
            status=status.HTTP_201_CREATED,
        )


class ReceivedRequestsView(APIView):
    """
    Pending requests addressed to the caller, newest first.

    GET /api/v1/friends/requests/received/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        requests = FriendshipService().pending_requests(request.user.uid)
        return Response({
            'success': True,
            'data': FriendRequestSerializer(requests, many=True).data,
        })


class SentRequestsView(APIView):
    """
    Pending requests sent by the caller, newest first.

    GET /api/v1/friends/requests/sent/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        requests = FriendshipService().sent_requests(request.user.uid)
        return Response({
            'success': True,
            'data': FriendRequestSerializer(requests, many=True).data,
        })


class AcceptFriendRequestView(APIView):
    """
    POST /api/v1/friends/requests/{id}/accept/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id):
        friendship = FriendshipService().accept_friend_request(request.user.uid, request_id)
        return Response(
            {
                'success': True,
                'data': FriendshipSerializer(friendship).data,
                'message': 'Friend request accepted.',
            },
            status=status.HTTP_201_CREATED,
        )


class DeclineFriendRequestView(APIView):
    """
    POST /api/v1/friends/requests/{id}/decline/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, request_id):
        FriendshipService().decline_friend_request(request.user.uid, request_id)
        return Response({'success': True, 'message': 'Friend request declined.'})


class FriendListView(APIView):
    """
    The caller's friends, newest first.

    GET /api/v1/friends/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        friends = FriendshipService().friends(request.user.uid)
        return Response({
            'success': True,
            'data': FriendshipSerializer(friends, many=True).data,
        })


class FriendDetailView(APIView):
    """
    Remove a friend (both directions).

    DELETE /api/v1/friends/{friend_id}/
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, friend_id):
        FriendshipService().remove_friend(request.user.uid, friend_id)
        return Response({'success': True, 'message': 'Friend removed.'})
