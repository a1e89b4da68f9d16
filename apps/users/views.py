"""
Views for the Users app.
"""
import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.users.serializers import (
    FcmTokenSerializer,
    LocationSharingSerializer,
    UserRegistrationSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from apps.users.services.profiles import UserService

logger = logging.getLogger(__name__)


class UserProfileView(APIView):
    """
    Retrieve, register or update the authenticated user's profile.

    GET   /api/v1/users/me/
    POST  /api/v1/users/me/
    PATCH /api/v1/users/me/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = UserService().require_user(request.user.uid)
        return Response({'success': True, 'data': UserSerializer(user).data})

    def post(self, request):
        serializer = UserRegistrationSerializer(
            data=request.data,
            context={'request': request},
        )
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        service = UserService()
        created = service.get_user(request.user.uid) is None
        user = service.create_or_update_user(
            request.user.uid,
            email=data.get('email') or request.user.email,
            display_name=data.get('display_name') or request.user.name,
            profile_picture_url=data.get('profile_picture_url') or request.user.picture,
            fcm_token=data.get('fcm_token'),
        )
        return Response(
            {
                'success': True,
                'data': UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def patch(self, request):
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = UserService().update_profile(request.user.uid, **serializer.validated_data)
        return Response({'success': True, 'data': UserSerializer(user).data})


class FcmTokenView(APIView):
    """
    Store a refreshed push token for the caller's device.

    PUT /api/v1/users/me/fcm-token/
    """
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = FcmTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        UserService().update_fcm_token(
            request.user.uid,
            serializer.validated_data['fcm_token'],
        )
        return Response({'success': True, 'message': 'Push token updated.'})


class LocationSharingView(APIView):
    """
    Turn location sharing on or off.

    PUT /api/v1/users/me/location-sharing/
    Body: {"enabled": false}
    """
    permission_classes = [IsAuthenticated]

    def put(self, request):
        serializer = LocationSharingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        enabled = serializer.validated_data['enabled']

        UserService().set_location_sharing_enabled(request.user.uid, enabled)
        return Response({
            'success': True,
            'data': {'location_sharing_enabled': enabled},
            'message': 'Location sharing turned on.' if enabled else 'Location sharing turned off.',
        })


class UserSearchView(APIView):
    """
    Search for users by email prefix.

    GET /api/v1/users/search/?q=<query>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        query = request.query_params.get('q', '')
        users = UserService().search_users_by_email(query, exclude_user_id=request.user.uid)
        return Response({
            'success': True,
            'data': UserSerializer(users, many=True).data,
        })
