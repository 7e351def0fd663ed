from decimal import Decimal

from django.test import TestCase

from .models import SystemSetting
from .services import SettingsService, COMMISSION_PERCENTAGE_KEY


class SettingsServiceTest(TestCase):

    def test_missing_setting_uses_default(self):
        value = SettingsService.get_decimal(COMMISSION_PERCENTAGE_KEY, Decimal('4.0'))
        self.assertEqual(value, Decimal('4.0'))

    def test_numeric_setting_is_parsed(self):
        SystemSetting.objects.create(setting_key=COMMISSION_PERCENTAGE_KEY, setting_value='2.5')
        value = SettingsService.get_decimal(COMMISSION_PERCENTAGE_KEY, Decimal('4.0'))
        self.assertEqual(value, Decimal('2.5'))

    def test_garbage_value_falls_back(self):
        SystemSetting.objects.create(setting_key=COMMISSION_PERCENTAGE_KEY, setting_value='four')
        value = SettingsService.get_decimal(COMMISSION_PERCENTAGE_KEY, Decimal('4.0'))
        self.assertEqual(value, Decimal('4.0'))

    def test_set_value_upserts(self):
        SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, '3', setting_type='number')
        SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, '5', setting_type='number')
        self.assertEqual(SystemSetting.objects.count(), 1)
        self.assertEqual(SettingsService.get_value(COMMISSION_PERCENTAGE_KEY), '5')
