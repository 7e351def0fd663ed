"""
Notification URL Configuration
Endpoints under /api/notifications/
"""
from django.urls import path

from .views import (
    CleanupView,
    MarkAllReadView,
    MarkReadView,
    NotificationDetailView,
    NotificationListView,
    NotificationStatsView,
    TestNotificationView,
    UnreadCountView,
)

urlpatterns = [
    path('', NotificationListView.as_view(), name='notification-list'),
    path('stats/', NotificationStatsView.as_view(), name='notification-stats'),
    path('unread-count/', UnreadCountView.as_view(), name='notification-unread-count'),
    path('mark-all-read/', MarkAllReadView.as_view(), name='notification-mark-all-read'),
    path('cleanup/', CleanupView.as_view(), name='notification-cleanup'),
    path('test/', TestNotificationView.as_view(), name='notification-test'),
    path('<int:pk>/', NotificationDetailView.as_view(), name='notification-detail'),
    path('<int:pk>/read/', MarkReadView.as_view(), name='notification-mark-read'),
]
