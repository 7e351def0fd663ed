"""
Properties Tests
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.test import TestCase

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from notifications.models import Notification
from .models import Property, PropertyType

User = get_user_model()


class PropertyModelTests(TestCase):

    def test_property_type_must_be_sale_or_rent(self):
        with self.assertRaises(ValidationError):
            Property.objects.create(
                reference_number='REF-X', property_type='lease', price=Decimal('10.00')
            )

    def test_is_sale(self):
        prop = Property(reference_number='REF-1', property_type=PropertyType.SALE, price=1)
        self.assertTrue(prop.is_sale)
        prop.property_type = PropertyType.RENT
        self.assertFalse(prop.is_sale)

    def test_display_label_falls_back(self):
        prop = Property(reference_number='REF-1', property_type='sale', price=1)
        self.assertEqual(prop.display_label, 'REF-1')
        prop.location = 'Downtown'
        self.assertEqual(prop.display_label, 'Downtown')
        prop.building_name = 'Marina Tower'
        self.assertEqual(prop.display_label, 'Marina Tower')


class PropertyUpdateAPITests(APITestCase):

    def setUp(self):
        cache.clear()
        self.ops = User.objects.create_user(username='ops', password='testpass123', role='operations')
        self.agent = User.objects.create_user(username='agent', password='testpass123', role='agent')
        self.stranger = User.objects.create_user(username='other', password='testpass123', role='agent')
        self.prop = Property.objects.create(
            reference_number='REF-100', property_type='sale', price=Decimal('100000.00'),
            building_name='Marina Tower', agent=self.agent, created_by=self.ops
        )
        Notification.objects.all().delete()
        self.client = APIClient()
        self.url = f'/api/properties/{self.prop.id}/'

    def test_patch_updates_and_notifies_agent(self):
        self.client.force_authenticate(user=self.ops)
        response = self.client.patch(self.url, {'price': '120000.00'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.prop.refresh_from_db()
        self.assertEqual(self.prop.price, Decimal('120000.00'))

        notification = Notification.objects.get(user=self.agent)
        self.assertEqual(notification.title, 'Property Updated')
        self.assertEqual(notification.entity_id, self.prop.id)

    def test_patch_rejects_invalid_type(self):
        self.client.force_authenticate(user=self.ops)
        response = self.client.patch(self.url, {'property_type': 'lease'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('property_type', response.data['details'])

    def test_agent_cannot_update_someone_elses_property(self):
        self.client.force_authenticate(user=self.stranger)
        response = self.client.patch(self.url, {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_property_is_404(self):
        self.client.force_authenticate(user=self.ops)
        response = self.client.patch('/api/properties/99999/', {'price': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])

    def test_update_rate_limit(self):
        self.client.force_authenticate(user=self.ops)
        for i in range(10):
            response = self.client.patch(self.url, {'location': f'Area {i}'}, format='json')
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.patch(self.url, {'location': 'Area 11'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response.data['error'], 'rate_limited')

    def test_reads_are_not_throttled(self):
        self.client.force_authenticate(user=self.ops)
        for _ in range(12):
            response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
