from django.contrib import admin
from django.urls import path, include

from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from reports.urls import commission_urlpatterns, daily_urlpatterns


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    from django.db import connections
    from django.db.utils import OperationalError
    try:
        db_conn = connections['default']
        db_conn.cursor()
    except OperationalError:
        return HttpResponse("DB Error", status=503)
    return HttpResponse("OK")


urlpatterns = [
    path('health/', health_check),
    path('admin/', admin.site.urls),
    path('api/users/', include('users.urls')),
    path('api/properties/', include('properties.urls')),
    path('api/operations-commission/', include(commission_urlpatterns)),
    path('api/operations-daily/', include(daily_urlpatterns)),
    path('api/notifications/', include('notifications.urls')),
]
