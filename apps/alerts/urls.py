"""
URL configuration for the Alerts app.
"""
from django.urls import path

from apps.alerts.views import (
    AlertDetailView,
    AlertListView,
    MarkAlertReadView,
    UnreadAlertCountView,
)

app_name = 'alerts'

urlpatterns = [
    path('', AlertListView.as_view(), name='alert-list'),
    path('unread-count/', UnreadAlertCountView.as_view(), name='unread-count'),
    path('<str:alert_id>/read/', MarkAlertReadView.as_view(), name='mark-read'),
    path('<str:alert_id>/', AlertDetailView.as_view(), name='alert-detail'),
]
