from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Property

User = get_user_model()


class PropertySerializer(serializers.ModelSerializer):
    agent_id = serializers.PrimaryKeyRelatedField(
        source='agent', queryset=User.objects.all(), allow_null=True, required=False
    )

    class Meta:
        model = Property
        fields = [
            'id', 'reference_number', 'property_type', 'price', 'building_name',
            'location', 'agent_id', 'closed_date', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
