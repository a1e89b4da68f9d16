"""
Views for the Locations app.

Provides endpoints for publishing the caller's live location and
reading friends' latest locations.
"""
import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.locations.serializers import LocationUpdateSerializer, UserLocationSerializer
from apps.locations.services.tracking import LocationService

logger = logging.getLogger(__name__)


class UpdateLocationView(APIView):
    """
    Publish the caller's latest location sample.

    POST /api/v1/locations/update/
    Body: {"latitude": ..., "longitude": ..., "accuracy": ..., ...}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LocationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        location = LocationService().update_location(
            request.user.uid,
            **serializer.validated_data,
        )
        return Response({
            'success': True,
            'data': UserLocationSerializer(location).data,
        })


class MyLocationView(APIView):
    """
    GET    /api/v1/locations/me/
    DELETE /api/v1/locations/me/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        location = LocationService().get_user_location(request.user.uid)
        if location is None:
            return Response(
                {
                    'success': False,
                    'error': {
                        'code': 'not_found',
                        'message': 'No location has been shared yet.',
                    },
                },
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({'success': True, 'data': UserLocationSerializer(location).data})

    def delete(self, request):
        LocationService().delete_user_location(request.user.uid)
        return Response({'success': True, 'message': 'Location deleted.'})


class FriendLocationsView(APIView):
    """
    Latest known locations of the caller's friends.

    GET /api/v1/locations/friends/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        locations = LocationService().friends_locations(request.user.uid)
        if not locations:
            return Response({
                'success': True,
                'data': [],
                'message': 'None of your friends are currently sharing their location.',
            })
        return Response({
            'success': True,
            'data': UserLocationSerializer(locations, many=True).data,
        })
