"""
Views for the Alerts app.
"""
import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.alerts.serializers import AlertSerializer, SendAlertSerializer
from apps.alerts.services.alerts import AlertService

logger = logging.getLogger(__name__)


class AlertListView(APIView):
    """
    List received alerts or send a new one.

    GET  /api/v1/alerts/
    POST /api/v1/alerts/
    Body: {"to_user_id": "...", "message": "..."}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        alerts = AlertService().received_alerts(request.user.uid)
        return Response({
            'success': True,
            'data': AlertSerializer(alerts, many=True).data,
        })

    def post(self, request):
        serializer = SendAlertSerializer(
            data=request.data,
            context={'request': request},
        )
        serializer.is_valid(raise_exception=True)

        alert = AlertService().send_alert(
            request.user.uid,
            serializer.validated_data['to_user_id'],
            serializer.validated_data.get('message'),
        )
        return Response(
            {
                'success': True,
                'data': AlertSerializer(alert).data,
                'message': 'Alert sent.',
            },
            status=status.HTTP_201_CREATED,
        )


class UnreadAlertCountView(APIView):
    """
    GET /api/v1/alerts/unread-count/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        count = AlertService().unread_count(request.user.uid)
        return Response({'success': True, 'data': {'unread_count': count}})


class MarkAlertReadView(APIView):
    """
    POST /api/v1/alerts/{id}/read/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, alert_id):
        alert = AlertService().mark_read(request.user.uid, alert_id)
        return Response({'success': True, 'data': AlertSerializer(alert).data})


class AlertDetailView(APIView):
    """
    DELETE /api/v1/alerts/{id}/
    """
    permission_classes = [IsAuthenticated]

    def delete(self, request, alert_id):
        AlertService().delete_alert(request.user.uid, alert_id)
        return Response({'success': True, 'message': 'Alert deleted.'})
