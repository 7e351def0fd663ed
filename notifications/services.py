"""
Notification Services
Creation, inbox queries, read-state changes and retention cleanup.
"""
import logging
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from .exceptions import NotFoundError, ValidationError
from .models import Notification, NotificationAction, NotificationType

logger = logging.getLogger(__name__)
User = get_user_model()

NOTIFICATION_RETENTION_DAYS = 30

# action -> (title template, message template, type)
ACTION_TEMPLATES = {
    NotificationAction.CREATED: (
        'New {entity} Added',
        'A new {entity_lower} "{label}" has been added to the system.',
        NotificationType.INFO,
    ),
    NotificationAction.UPDATED: (
        '{entity} Updated',
        'The {entity_lower} "{label}" has been updated.',
        NotificationType.SUCCESS,
    ),
    NotificationAction.DELETED: (
        '{entity} Deleted',
        'The {entity_lower} "{label}" has been deleted.',
        NotificationType.WARNING,
    ),
    NotificationAction.ASSIGNED: (
        '{entity} Assigned',
        'You have been assigned to the {entity_lower} "{label}".',
        NotificationType.INFO,
    ),
    NotificationAction.STATUS_CHANGED: (
        '{entity} Status Changed',
        'The status of the {entity_lower} "{label}" has changed.',
        NotificationType.INFO,
    ),
    NotificationAction.REMINDER: (
        '{entity} Reminder',
        'Reminder about the {entity_lower} "{label}".',
        NotificationType.URGENT,
    ),
}

FALLBACK_TEMPLATE = (
    '{entity} Notification',
    'There has been an update to the {entity_lower} "{label}".',
    NotificationType.INFO,
)


def build_action_notification(entity_type: str, action: str, label: str) -> Tuple[str, str, str]:
    """Map an entity event to (title, message, type)."""
    entity = (entity_type or 'item').replace('_', ' ').strip()
    title_tpl, message_tpl, notification_type = ACTION_TEMPLATES.get(action, FALLBACK_TEMPLATE)
    context = {
        'entity': entity.title(),
        'entity_lower': entity.lower(),
        'label': label,
    }
    return (
        title_tpl.format(**context),
        message_tpl.format(**context),
        str(notification_type),
    )


class NotificationService:
    """Service for creating and managing in-app notifications."""

    @staticmethod
    def create_notification(
        user,
        title: str,
        message: str,
        type: str = NotificationType.INFO,
        entity_type: str = '',
        entity_id: Optional[int] = None
    ) -> Notification:
        """Create a single notification for one user."""
        if not title or not message:
            raise ValidationError('Title and message are required')
        if type not in NotificationType.values:
            raise ValidationError(
                'Invalid notification type',
                details={'type': type, 'allowed': list(NotificationType.values)}
            )

        notification = Notification.objects.create(
            user=user,
            title=title,
            message=message,
            type=type,
            entity_type=entity_type or '',
            entity_id=entity_id,
        )
        logger.info(f"Notification {notification.id} created for user {user.pk}: {title}")
        return notification

    @staticmethod
    def create_for_users(
        users: Iterable,
        title: str,
        message: str,
        type: str = NotificationType.INFO,
        entity_type: str = '',
        entity_id: Optional[int] = None
    ) -> int:
        """Create the same notification for several users. Returns count."""
        recipients = {user.pk: user for user in users if user is not None}
        if not recipients:
            return 0

        created = Notification.objects.bulk_create([
            Notification(
                user=user,
                title=title,
                message=message,
                type=type,
                entity_type=entity_type or '',
                entity_id=entity_id,
            )
            for user in recipients.values()
        ])
        logger.info(f"Notification '{title}' created for {len(created)} users")
        return len(created)

    @staticmethod
    def get_for_user(
        user,
        limit: int = 50,
        offset: int = 0,
        unread_only: bool = False,
        entity_type: Optional[str] = None
    ) -> Tuple[List[Notification], int]:
        """Get a page of the user's notifications, newest first."""
        queryset = Notification.objects.filter(user=user)

        if unread_only:
            queryset = queryset.filter(is_read=False)
        if entity_type:
            queryset = queryset.filter(entity_type=entity_type)

        queryset = queryset.order_by('-created_at', '-id')
        total = queryset.count()
        items = list(queryset[offset:offset + limit])

        return items, total

    @staticmethod
    def get_unread_count(user) -> int:
        return Notification.objects.filter(user=user, is_read=False).count()

    @staticmethod
    def get_stats(user) -> Dict[str, int]:
        """Totals for the notification bell."""
        base = Notification.objects.filter(user=user)
        today_start = timezone.now().replace(hour=0, minute=0, second=0, microsecond=0)
        return {
            'total': base.count(),
            'unread': base.filter(is_read=False).count(),
            'urgent_unread': base.filter(
                is_read=False, type=NotificationType.URGENT
            ).count(),
            'today': base.filter(created_at__gte=today_start).count(),
        }

    @staticmethod
    def _get_owned(notification_id: int, user) -> Notification:
        # Other users' notifications are reported as missing.
        try:
            return Notification.objects.get(pk=notification_id, user=user)
        except Notification.DoesNotExist:
            raise NotFoundError('Notification not found')

    @staticmethod
    def mark_read(notification_id: int, user) -> Notification:
        """Mark one of the user's notifications as read (idempotent)."""
        notification = NotificationService._get_owned(notification_id, user)
        notification.mark_read()
        return notification

    @staticmethod
    def mark_all_read(user) -> int:
        """Mark all unread notifications as read. Returns count."""
        count = Notification.objects.filter(user=user, is_read=False).update(
            is_read=True, updated_at=timezone.now()
        )
        logger.info(f"Marked {count} notifications read for user {user.pk}")
        return count

    @staticmethod
    def delete(notification_id: int, user) -> None:
        notification = NotificationService._get_owned(notification_id, user)
        notification.delete()
        logger.info(f"Notification {notification_id} deleted by user {user.pk}")

    @staticmethod
    def cleanup_old(days: int = NOTIFICATION_RETENTION_DAYS) -> int:
        """Delete notifications older than `days`. Returns count."""
        if days < 1:
            raise ValidationError('Retention days must be at least 1')

        cutoff = timezone.now() - timedelta(days=days)
        with transaction.atomic():
            deleted, _ = Notification.objects.filter(created_at__lt=cutoff).delete()

        logger.info(f"Cleaned up {deleted} notifications older than {days} days")
        return deleted

    @staticmethod
    def notify_entity_change(
        recipients: Iterable,
        entity_type: str,
        entity_id: Optional[int],
        action: str,
        label: str,
        exclude=None
    ) -> int:
        """Notify users about a change to a property, lead or report."""
        exclude_id = getattr(exclude, 'pk', None)
        targets = [
            user for user in recipients
            if user is not None and user.pk != exclude_id
        ]
        title, message, notification_type = build_action_notification(entity_type, action, label)
        return NotificationService.create_for_users(
            targets,
            title=title,
            message=message,
            type=notification_type,
            entity_type=entity_type,
            entity_id=entity_id,
        )
