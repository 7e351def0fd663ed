"""
Notification Admin
"""
from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'title', 'type', 'entity_type', 'entity_id', 'is_read', 'created_at']
    list_filter = ['type', 'entity_type', 'is_read', 'created_at']
    search_fields = ['user__username', 'user__email', 'title', 'message']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-created_at']
