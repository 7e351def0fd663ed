"""
Typed access to SystemSetting rows.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from .models import SystemSetting

logger = logging.getLogger(__name__)

COMMISSION_PERCENTAGE_KEY = 'commission_administration_percentage'


class SettingsService:

    @staticmethod
    def get_value(key: str) -> Optional[str]:
        setting = SystemSetting.objects.filter(setting_key=key).only('setting_value').first()
        return setting.setting_value if setting else None

    @staticmethod
    def get_decimal(key: str, default: Decimal) -> Decimal:
        """
        Read a numeric setting. Missing, blank or unparseable values fall
        back to `default`.
        """
        raw = SettingsService.get_value(key)
        if raw is None or not raw.strip():
            return default
        try:
            return Decimal(raw.strip())
        except InvalidOperation:
            logger.warning(f"Setting {key} has non-numeric value {raw!r}; using {default}")
            return default

    @staticmethod
    def set_value(key: str, value, setting_type: str = 'string', category: str = '') -> SystemSetting:
        setting, _ = SystemSetting.objects.update_or_create(
            setting_key=key,
            defaults={
                'setting_value': str(value),
                'setting_type': setting_type,
                'category': category,
            }
        )
        return setting
