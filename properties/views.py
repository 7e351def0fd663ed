"""
Property Views
"""
import logging

from rest_framework.exceptions import NotFound, PermissionDenied

from estate_backend.api import EnvelopeAPIView, success_response
from notifications.models import EntityType, NotificationAction
from notifications.services import NotificationService

from .models import Property
from .serializers import PropertySerializer
from .throttling import PropertyUpdateRateThrottle

logger = logging.getLogger(__name__)

PROPERTY_EDITOR_ROLES = ('admin', 'operations_manager', 'operations', 'agent_manager')


def can_edit_property(user, prop: Property) -> bool:
    if user.is_staff or user.is_superuser:
        return True
    if getattr(user, 'role', '') in PROPERTY_EDITOR_ROLES:
        return True
    return prop.agent_id is not None and prop.agent_id == user.pk


class PropertyDetailView(EnvelopeAPIView):
    """GET/PATCH /api/properties/{id}/"""
    error_context = 'updating property'

    def get_throttles(self):
        if self.request.method == 'PATCH':
            return [PropertyUpdateRateThrottle()]
        return []

    def get_object(self, pk) -> Property:
        try:
            return Property.objects.select_related('agent').get(pk=pk)
        except Property.DoesNotExist:
            raise NotFound('Property not found')

    def get(self, request, pk):
        prop = self.get_object(pk)
        return success_response(PropertySerializer(prop).data)

    def patch(self, request, pk):
        prop = self.get_object(pk)
        if not can_edit_property(request.user, prop):
            raise PermissionDenied('You can only update properties assigned to you.')

        previous_agent_id = prop.agent_id
        serializer = PropertySerializer(prop, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        prop = serializer.save()
        logger.info(f"Property {prop.id} ({prop.reference_number}) updated by user {request.user.pk}")

        if prop.agent_id and prop.agent_id != previous_agent_id:
            action = NotificationAction.ASSIGNED
        else:
            action = NotificationAction.UPDATED
        NotificationService.notify_entity_change(
            [prop.agent],
            entity_type=EntityType.PROPERTY,
            entity_id=prop.id,
            action=action,
            label=prop.display_label,
            exclude=request.user
        )

        return success_response(
            PropertySerializer(prop).data,
            message='Property updated successfully'
        )
