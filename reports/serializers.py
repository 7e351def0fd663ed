"""
Report Serializers
Query parameter validation, request bodies and response shaping.
"""
from rest_framework import serializers

from .models import OperationsCommissionReport, OperationsDailyReport


# =============================================================================
# Query Parameter Serializers
# =============================================================================

class CommissionListSerializer(serializers.Serializer):
    """Query params for commission report listing."""
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    year = serializers.IntegerField(min_value=1900, max_value=9999, required=False)


class DailyListSerializer(serializers.Serializer):
    """Query params for daily report listing."""
    operations_id = serializers.IntegerField(min_value=1, required=False)
    report_date = serializers.DateField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


# =============================================================================
# Request Body Serializers
# =============================================================================

class CommissionCreateSerializer(serializers.Serializer):
    # Dates stay raw strings so the date normalizer reports format errors.
    start_date = serializers.CharField(required=False, allow_blank=True)
    end_date = serializers.CharField(required=False, allow_blank=True)


class CommissionUpdateSerializer(serializers.Serializer):
    """Manual overwrite: every aggregate is required."""
    commission_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100
    )
    total_properties_count = serializers.IntegerField(min_value=0)
    total_sales_count = serializers.IntegerField(min_value=0)
    total_rent_count = serializers.IntegerField(min_value=0)
    total_sales_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    total_rent_value = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    total_commission_amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)


class DailyManualFieldsSerializer(serializers.Serializer):
    preparing_contract = serializers.IntegerField(required=False)
    tasks_efficiency_duty_time = serializers.IntegerField(required=False)
    tasks_efficiency_uniform = serializers.IntegerField(required=False)
    tasks_efficiency_after_duty = serializers.IntegerField(required=False)
    leads_responded_out_of_duty_time = serializers.IntegerField(required=False)


class DailyCreateSerializer(DailyManualFieldsSerializer):
    operations_id = serializers.IntegerField(required=False, allow_null=True)
    report_date = serializers.CharField(required=False, allow_blank=True)


class DailyUpdateSerializer(DailyManualFieldsSerializer):
    recalculate = serializers.BooleanField(required=False, default=False)


# =============================================================================
# Response Serializers
# =============================================================================

class CommissionPropertySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    reference_number = serializers.CharField()
    property_type = serializers.CharField()
    price = serializers.DecimalField(max_digits=14, decimal_places=2)
    commission = serializers.DecimalField(max_digits=14, decimal_places=2)
    closed_date = serializers.DateField()


class CommissionReportSerializer(serializers.ModelSerializer):
    class Meta:
        model = OperationsCommissionReport
        fields = [
            'id', 'month', 'year', 'start_date', 'end_date', 'commission_percentage',
            'total_properties_count', 'total_sales_count', 'total_rent_count',
            'total_sales_value', 'total_rent_value', 'total_commission_amount',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class CommissionReportDetailSerializer(CommissionReportSerializer):
    """Includes the live property breakdown attached by the service."""
    properties = CommissionPropertySerializer(many=True, read_only=True)

    class Meta(CommissionReportSerializer.Meta):
        fields = CommissionReportSerializer.Meta.fields + ['properties']
        read_only_fields = CommissionReportSerializer.Meta.fields


class DailyReportSerializer(serializers.ModelSerializer):
    operations_id = serializers.IntegerField(read_only=True)
    effective_leads_responded = serializers.IntegerField(read_only=True)

    class Meta:
        model = OperationsDailyReport
        fields = [
            'id', 'operations_id', 'operations_name', 'report_date',
            'properties_added', 'leads_responded_to', 'amending_previous_properties',
            'preparing_contract', 'tasks_efficiency_duty_time', 'tasks_efficiency_uniform',
            'tasks_efficiency_after_duty', 'leads_responded_out_of_duty_time',
            'effective_leads_responded', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'operations_name', 'report_date',
            'properties_added', 'leads_responded_to', 'amending_previous_properties',
            'preparing_contract', 'tasks_efficiency_duty_time', 'tasks_efficiency_uniform',
            'tasks_efficiency_after_duty', 'leads_responded_out_of_duty_time',
            'created_at', 'updated_at'
        ]
