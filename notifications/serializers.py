'''
Notification Serializers
Query parameter validation and response shaping.
'''
from rest_framework import serializers

from .models import Notification, NotificationType
from .services import NOTIFICATION_RETENTION_DAYS


class NotificationListSerializer(serializers.Serializer):
    '''Query params for the notification list.'''
    limit = serializers.IntegerField(min_value=1, max_value=100, default=50, required=False)
    offset = serializers.IntegerField(min_value=0, default=0, required=False)
    unread_only = serializers.BooleanField(default=False, required=False)
    entity_type = serializers.CharField(max_length=30, required=False, allow_blank=True)


class CleanupSerializer(serializers.Serializer):
    days = serializers.IntegerField(
        min_value=1, max_value=365, default=NOTIFICATION_RETENTION_DAYS, required=False
    )


class TestNotificationSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, default='Test Notification', required=False)
    message = serializers.CharField(default='This is a test notification', required=False)
    type = serializers.ChoiceField(
        choices=NotificationType.choices, default=NotificationType.INFO, required=False
    )


class NotificationSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source='user.id', read_only=True)

    class Meta:
        model = Notification
        fields = [
            'id', 'user_id', 'title', 'message', 'type',
            'entity_type', 'entity_id', 'is_read', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'title', 'message', 'type', 'entity_type', 'entity_id',
            'is_read', 'created_at', 'updated_at'
        ]
