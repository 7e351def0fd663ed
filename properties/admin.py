from django.contrib import admin

from .models import Lead, Property


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = [
        'reference_number', 'property_type', 'price', 'building_name',
        'agent', 'closed_date', 'created_at'
    ]
    list_filter = ['property_type', 'closed_date', 'created_at']
    search_fields = ['reference_number', 'building_name', 'location']
    raw_id_fields = ['agent', 'created_by']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ['customer_name', 'phone_number', 'status', 'agent', 'added_by', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['customer_name', 'phone_number']
    raw_id_fields = ['agent', 'added_by']
