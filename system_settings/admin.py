from django.contrib import admin
from .models import SystemSetting


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ['setting_key', 'setting_value', 'setting_type', 'category', 'updated_at']
    list_filter = ['category', 'setting_type']
    search_fields = ['setting_key', 'description']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['category', 'setting_key']
