"""
Friend Locator - Root URL Configuration
"""
from django.conf import settings
from django.urls import include, path
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    return Response({'status': 'ok', 'service': 'friend-locator-api'})


urlpatterns = [
    path('api/v1/health/', health_check, name='health-check'),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/friends/', include('apps.friends.urls')),
    path('api/v1/alerts/', include('apps.alerts.urls')),
    path('api/v1/locations/', include('apps.locations.urls')),
]

# API documentation
if settings.DEBUG:
    from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

    urlpatterns += [
        path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
        path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    ]
