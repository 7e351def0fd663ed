from django.db import models


class SettingType(models.TextChoices):
    STRING = 'string', 'String'
    NUMBER = 'number', 'Number'
    BOOLEAN = 'boolean', 'Boolean'


class SystemSetting(models.Model):
    """
    Key/value store for business settings editable by administrators.

    Values are stored as text and interpreted by `setting_type`.
    """
    setting_key = models.CharField(max_length=100, unique=True)
    setting_value = models.TextField(blank=True)
    setting_type = models.CharField(
        max_length=10, choices=SettingType.choices, default=SettingType.STRING
    )
    description = models.TextField(blank=True)
    category = models.CharField(max_length=50, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'system_settings'
        ordering = ['category', 'setting_key']

    def __str__(self):
        return f"{self.setting_key}={self.setting_value}"
