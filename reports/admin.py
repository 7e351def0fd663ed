from django.contrib import admin

from .models import OperationsCommissionReport, OperationsDailyReport


@admin.register(OperationsCommissionReport)
class OperationsCommissionReportAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'start_date', 'end_date', 'commission_percentage',
        'total_properties_count', 'total_commission_amount', 'updated_at'
    ]
    list_filter = ['year', 'month']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-start_date', '-end_date']


@admin.register(OperationsDailyReport)
class OperationsDailyReportAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'operations_name', 'report_date', 'properties_added',
        'leads_responded_to', 'amending_previous_properties', 'updated_at'
    ]
    list_filter = ['report_date']
    search_fields = ['operations_name']
    raw_id_fields = ['operations']
    readonly_fields = ['operations_name', 'created_at', 'updated_at']
    ordering = ['-report_date', 'operations_name']
