"""
Notifications Models
In-app notifications shown in the dashboard bell.
"""
from django.db import models
from django.contrib.auth import get_user_model

User = get_user_model()


class NotificationType(models.TextChoices):
    INFO = 'info', 'Info'
    SUCCESS = 'success', 'Success'
    WARNING = 'warning', 'Warning'
    URGENT = 'urgent', 'Urgent'


class EntityType(models.TextChoices):
    PROPERTY = 'property', 'Property'
    LEAD = 'lead', 'Lead'
    REPORT = 'report', 'Report'
    SYSTEM = 'system', 'System'


class NotificationAction(models.TextChoices):
    CREATED = 'created', 'Created'
    UPDATED = 'updated', 'Updated'
    DELETED = 'deleted', 'Deleted'
    ASSIGNED = 'assigned', 'Assigned'
    STATUS_CHANGED = 'status_changed', 'Status Changed'
    REMINDER = 'reminder', 'Reminder'


class Notification(models.Model):
    """
    One notification for one user. Rows are removed by the owner, or by
    the retention sweep once they are older than 30 days.
    """
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='notifications'
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    type = models.CharField(
        max_length=10, choices=NotificationType.choices, default=NotificationType.INFO
    )
    entity_type = models.CharField(max_length=30, blank=True)
    entity_id = models.PositiveIntegerField(null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'is_read'], name='idx_notif_user_read'),
            models.Index(fields=['user', 'created_at'], name='idx_notif_user_created'),
            models.Index(fields=['entity_type', 'entity_id'], name='idx_notif_entity'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} → {self.user} ({'read' if self.is_read else 'unread'})"

    def mark_read(self):
        """Mark as read (idempotent)."""
        if not self.is_read:
            self.is_read = True
            self.save(update_fields=['is_read', 'updated_at'])
