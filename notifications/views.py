"""
Notification Views
Endpoints under /api/notifications/
"""
from rest_framework import status

from estate_backend.api import EnvelopeAPIView, success_response

from .exceptions import ForbiddenError, NotificationError
from .models import EntityType
from .serializers import (
    CleanupSerializer, NotificationListSerializer, NotificationSerializer,
    TestNotificationSerializer
)
from .services import NotificationService
from .throttling import NotificationsAdminThrottle, NotificationsInboxThrottle


def is_admin(user) -> bool:
    """Check if user has the admin role."""
    role = getattr(user, 'role', '')
    return user.is_staff or user.is_superuser or role == 'admin'


class NotificationAPIView(EnvelopeAPIView):
    domain_error = NotificationError
    throttle_classes = [NotificationsInboxThrottle]


class NotificationListView(NotificationAPIView):
    """GET /api/notifications/"""
    error_context = 'fetching notifications'

    def get(self, request):
        serializer = NotificationListSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        items, total = NotificationService.get_for_user(
            request.user,
            limit=params.get('limit', 50),
            offset=params.get('offset', 0),
            unread_only=params.get('unread_only', False),
            entity_type=params.get('entity_type') or None
        )

        return success_response(
            NotificationSerializer(items, many=True).data,
            unreadCount=NotificationService.get_unread_count(request.user),
            total=total
        )


class NotificationStatsView(NotificationAPIView):
    """GET /api/notifications/stats/"""
    error_context = 'fetching notification stats'

    def get(self, request):
        return success_response(NotificationService.get_stats(request.user))


class UnreadCountView(NotificationAPIView):
    """GET /api/notifications/unread-count/"""
    error_context = 'fetching unread count'

    def get(self, request):
        count = NotificationService.get_unread_count(request.user)
        return success_response({'unreadCount': count})


class MarkReadView(NotificationAPIView):
    """PUT/POST /api/notifications/{id}/read/"""
    error_context = 'marking notification as read'

    def put(self, request, pk):
        notification = NotificationService.mark_read(pk, request.user)
        return success_response(
            NotificationSerializer(notification).data,
            message='Notification marked as read'
        )

    post = put


class MarkAllReadView(NotificationAPIView):
    """PUT/POST /api/notifications/mark-all-read/"""
    error_context = 'marking all notifications as read'

    def put(self, request):
        count = NotificationService.mark_all_read(request.user)
        return success_response(
            {'updatedCount': count},
            message=f'{count} notifications marked as read'
        )

    post = put


class NotificationDetailView(NotificationAPIView):
    """DELETE /api/notifications/{id}/"""
    error_context = 'deleting notification'

    def delete(self, request, pk):
        NotificationService.delete(pk, request.user)
        return success_response(message='Notification deleted successfully')


class CleanupView(NotificationAPIView):
    """DELETE/POST /api/notifications/cleanup/ (admin only)"""
    throttle_classes = [NotificationsAdminThrottle]
    error_context = 'cleaning up notifications'

    def delete(self, request):
        if not is_admin(request.user):
            raise ForbiddenError('Admin access required')

        serializer = CleanupSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        days = serializer.validated_data.get('days')

        deleted = NotificationService.cleanup_old(days=days)
        return success_response(
            {'deletedCount': deleted},
            message=f'Cleaned up {deleted} old notifications'
        )

    post = delete


class TestNotificationView(NotificationAPIView):
    """POST /api/notifications/test/"""
    error_context = 'creating test notification'

    def post(self, request):
        serializer = TestNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        notification = NotificationService.create_notification(
            request.user,
            title=params.get('title', 'Test Notification'),
            message=params.get('message', 'This is a test notification'),
            type=params.get('type'),
            entity_type=EntityType.SYSTEM,
        )
        return success_response(
            NotificationSerializer(notification).data,
            message='Test notification created',
            status_code=status.HTTP_201_CREATED
        )
