"""
Notification Signals
Assignment notifications for newly created properties and leads.
Non-blocking: a failed notification never rolls back the save.
"""
import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import EntityType, NotificationAction
from .services import NotificationService

logger = logging.getLogger(__name__)


@receiver(post_save, sender='properties.Property')
def on_property_created(sender, instance, created, **kwargs):
    """Tell the assigned agent about a new listing."""
    if not created or instance.agent_id is None:
        return
    try:
        NotificationService.notify_entity_change(
            [instance.agent],
            entity_type=EntityType.PROPERTY,
            entity_id=instance.id,
            action=NotificationAction.ASSIGNED,
            label=instance.display_label,
            exclude=instance.created_by
        )
    except Exception:
        logger.exception(f"Error sending assignment notification for property {instance.id}")


@receiver(post_save, sender='properties.Lead')
def on_lead_created(sender, instance, created, **kwargs):
    """Tell the assigned agent about a new lead."""
    if not created or instance.agent_id is None:
        return
    try:
        NotificationService.notify_entity_change(
            [instance.agent],
            entity_type=EntityType.LEAD,
            entity_id=instance.id,
            action=NotificationAction.ASSIGNED,
            label=instance.customer_name,
            exclude=instance.added_by
        )
    except Exception:
        logger.exception(f"Error sending assignment notification for lead {instance.id}")
