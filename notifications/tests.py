"""
Notifications Tests
Service behaviour, ownership scoping, retention and API envelope.
"""
from datetime import timedelta
from io import StringIO
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from properties.models import Lead, Property
from .exceptions import NotFoundError, ValidationError
from .models import Notification, NotificationType
from .services import NotificationService, build_action_notification
from .throttling import NotificationsAdminThrottle, NotificationsInboxThrottle
from .views import CleanupView, NotificationListView

User = get_user_model()


# =============================================================================
# 1. Creation
# =============================================================================

class NotificationCreationTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            username='agent1', email='agent1@test.com', password='testpass123', role='agent'
        )
        self.other = User.objects.create_user(
            username='agent2', email='agent2@test.com', password='testpass123', role='agent'
        )

    def test_create_notification_defaults_to_info(self):
        notification = NotificationService.create_notification(
            self.user, title='Hello', message='World'
        )
        self.assertEqual(notification.type, NotificationType.INFO)
        self.assertFalse(notification.is_read)
        self.assertIsNone(notification.entity_id)

    def test_create_notification_rejects_unknown_type(self):
        with self.assertRaises(ValidationError):
            NotificationService.create_notification(
                self.user, title='Hello', message='World', type='critical'
            )

    def test_create_notification_requires_title_and_message(self):
        with self.assertRaises(ValidationError):
            NotificationService.create_notification(self.user, title='', message='World')

    def test_create_for_users_returns_count(self):
        count = NotificationService.create_for_users(
            [self.user, self.other, self.user],
            title='Broadcast', message='To everyone', type=NotificationType.WARNING
        )
        self.assertEqual(count, 2)
        self.assertEqual(Notification.objects.filter(title='Broadcast').count(), 2)

    def test_create_for_users_with_no_recipients(self):
        self.assertEqual(
            NotificationService.create_for_users([], title='Nobody', message='Here'), 0
        )


# =============================================================================
# 2. Action templates
# =============================================================================

class ActionNotificationTests(TestCase):

    def test_property_updated(self):
        title, message, notification_type = build_action_notification(
            'property', 'updated', 'Marina Tower'
        )
        self.assertEqual(title, 'Property Updated')
        self.assertEqual(message, 'The property "Marina Tower" has been updated.')
        self.assertEqual(notification_type, 'success')

    def test_lead_assigned(self):
        title, message, notification_type = build_action_notification(
            'lead', 'assigned', 'John Smith'
        )
        self.assertEqual(title, 'Lead Assigned')
        self.assertEqual(message, 'You have been assigned to the lead "John Smith".')
        self.assertEqual(notification_type, 'info')

    def test_deleted_is_warning(self):
        _, _, notification_type = build_action_notification('property', 'deleted', 'X')
        self.assertEqual(notification_type, 'warning')

    def test_reminder_is_urgent(self):
        _, _, notification_type = build_action_notification('lead', 'reminder', 'X')
        self.assertEqual(notification_type, 'urgent')

    def test_unknown_action_falls_back(self):
        title, message, notification_type = build_action_notification(
            'property', 'archived', 'Marina Tower'
        )
        self.assertEqual(title, 'Property Notification')
        self.assertIn('Marina Tower', message)
        self.assertEqual(notification_type, 'info')

    def test_notify_entity_change_excludes_actor(self):
        agent = User.objects.create_user(username='agent', password='testpass123')
        actor = User.objects.create_user(username='actor', password='testpass123')

        count = NotificationService.notify_entity_change(
            [agent, actor, None],
            entity_type='property', entity_id=5, action='updated',
            label='Marina Tower', exclude=actor
        )

        self.assertEqual(count, 1)
        notification = Notification.objects.get(user=agent)
        self.assertEqual(notification.entity_type, 'property')
        self.assertEqual(notification.entity_id, 5)


# =============================================================================
# 3. Inbox queries and read state
# =============================================================================

class InboxServiceTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='user1', password='testpass123')
        self.other = User.objects.create_user(username='user2', password='testpass123')
        for i in range(3):
            NotificationService.create_notification(
                self.user, title=f'N{i}', message='m', entity_type='property', entity_id=i
            )
        NotificationService.create_notification(
            self.user, title='Urgent', message='m', type=NotificationType.URGENT,
            entity_type='lead', entity_id=9
        )
        NotificationService.create_notification(self.other, title='Theirs', message='m')

    def test_get_for_user_pagination_and_total(self):
        items, total = NotificationService.get_for_user(self.user, limit=2, offset=0)
        self.assertEqual(total, 4)
        self.assertEqual(len(items), 2)
        self.assertTrue(all(item.user_id == self.user.id for item in items))

    def test_get_for_user_filters(self):
        items, total = NotificationService.get_for_user(self.user, entity_type='lead')
        self.assertEqual(total, 1)
        self.assertEqual(items[0].title, 'Urgent')

        Notification.objects.filter(title='N0').update(is_read=True)
        _, unread_total = NotificationService.get_for_user(self.user, unread_only=True)
        self.assertEqual(unread_total, 3)

    def test_stats(self):
        Notification.objects.filter(title='N0').update(is_read=True)
        Notification.objects.filter(title='N1').update(
            created_at=timezone.now() - timedelta(days=3)
        )
        stats = NotificationService.get_stats(self.user)
        self.assertEqual(stats['total'], 4)
        self.assertEqual(stats['unread'], 3)
        self.assertEqual(stats['urgent_unread'], 1)
        self.assertEqual(stats['today'], 3)

    def test_mark_read_is_owner_scoped(self):
        theirs = Notification.objects.get(title='Theirs')
        with self.assertRaises(NotFoundError):
            NotificationService.mark_read(theirs.id, self.user)

        theirs.refresh_from_db()
        self.assertFalse(theirs.is_read)

    def test_mark_read_idempotent(self):
        mine = Notification.objects.get(title='N0')
        NotificationService.mark_read(mine.id, self.user)
        NotificationService.mark_read(mine.id, self.user)
        mine.refresh_from_db()
        self.assertTrue(mine.is_read)

    def test_mark_all_read_returns_count(self):
        self.assertEqual(NotificationService.mark_all_read(self.user), 4)
        self.assertEqual(NotificationService.get_unread_count(self.user), 0)
        self.assertEqual(NotificationService.get_unread_count(self.other), 1)
        self.assertEqual(NotificationService.mark_all_read(self.user), 0)

    def test_delete_is_owner_scoped(self):
        theirs = Notification.objects.get(title='Theirs')
        with self.assertRaises(NotFoundError):
            NotificationService.delete(theirs.id, self.user)
        self.assertTrue(Notification.objects.filter(pk=theirs.pk).exists())

        mine = Notification.objects.get(title='N0')
        NotificationService.delete(mine.id, self.user)
        self.assertFalse(Notification.objects.filter(pk=mine.pk).exists())


# =============================================================================
# 4. Retention
# =============================================================================

class CleanupTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='user1', password='testpass123')
        self.old = NotificationService.create_notification(self.user, title='Old', message='m')
        self.recent = NotificationService.create_notification(self.user, title='Recent', message='m')
        Notification.objects.filter(pk=self.old.pk).update(
            created_at=timezone.now() - timedelta(days=31)
        )
        Notification.objects.filter(pk=self.recent.pk).update(
            created_at=timezone.now() - timedelta(days=29)
        )

    def test_cleanup_old_uses_cutoff(self):
        deleted = NotificationService.cleanup_old()
        self.assertEqual(deleted, 1)
        self.assertFalse(Notification.objects.filter(pk=self.old.pk).exists())
        self.assertTrue(Notification.objects.filter(pk=self.recent.pk).exists())

    def test_cleanup_custom_days(self):
        self.assertEqual(NotificationService.cleanup_old(days=7), 2)

    def test_cleanup_rejects_zero_days(self):
        with self.assertRaises(ValidationError):
            NotificationService.cleanup_old(days=0)

    def test_management_command(self):
        out = StringIO()
        call_command('cleanup_notifications', stdout=out)
        self.assertIn('Deleted 1 notifications', out.getvalue())


# =============================================================================
# 5. Signals
# =============================================================================

class AssignmentSignalTests(TestCase):

    def setUp(self):
        self.agent = User.objects.create_user(username='agent', password='testpass123', role='agent')
        self.ops = User.objects.create_user(username='ops', password='testpass123', role='operations')

    def test_new_property_notifies_agent(self):
        prop = Property.objects.create(
            reference_number='REF-1', property_type='sale', price=Decimal('1000.00'),
            building_name='Marina Tower', agent=self.agent, created_by=self.ops
        )
        notification = Notification.objects.get(user=self.agent)
        self.assertEqual(notification.title, 'Property Assigned')
        self.assertEqual(notification.entity_id, prop.id)

    def test_property_created_by_its_agent_is_silent(self):
        Property.objects.create(
            reference_number='REF-2', property_type='rent', price=Decimal('1000.00'),
            agent=self.agent, created_by=self.agent
        )
        self.assertFalse(Notification.objects.exists())

    def test_new_lead_notifies_agent(self):
        Lead.objects.create(customer_name='Jane Doe', agent=self.agent, added_by=self.ops)
        notification = Notification.objects.get(user=self.agent)
        self.assertEqual(notification.entity_type, 'lead')
        self.assertIn('Jane Doe', notification.message)


# =============================================================================
# 6. API
# =============================================================================

class NotificationAPITests(APITestCase):

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(username='user1', password='testpass123')
        self.other = User.objects.create_user(username='user2', password='testpass123')
        self.admin = User.objects.create_user(username='boss', password='testpass123', role='admin')
        self.client = APIClient()
        self.mine = NotificationService.create_notification(self.user, title='Mine', message='m')
        self.theirs = NotificationService.create_notification(self.other, title='Theirs', message='m')

    def test_requires_authentication(self):
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_returns_envelope(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get('/api/notifications/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['unreadCount'], 1)
        self.assertEqual(response.data['data'][0]['title'], 'Mine')

    def test_list_rejects_bad_limit(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get('/api/notifications/', {'limit': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')
        self.assertFalse(response.data['success'])

    def test_unread_count_and_stats(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get('/api/notifications/unread-count/')
        self.assertEqual(response.data['data']['unreadCount'], 1)

        response = self.client.get('/api/notifications/stats/')
        self.assertEqual(response.data['data']['total'], 1)

    def test_mark_read_other_users_notification_is_404(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.put(f'/api/notifications/{self.theirs.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'not_found')

    def test_mark_read(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.put(f'/api/notifications/{self.mine.id}/read/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['is_read'])

    def test_mark_all_read(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.put('/api/notifications/mark-all-read/')
        self.assertEqual(response.data['data']['updatedCount'], 1)

    def test_delete_other_users_notification_is_404(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.delete(f'/api/notifications/{self.theirs.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Notification.objects.filter(pk=self.theirs.pk).exists())

    def test_cleanup_requires_admin(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.delete('/api/notifications/cleanup/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'forbidden')

    def test_cleanup_as_admin(self):
        Notification.objects.filter(pk=self.mine.pk).update(
            created_at=timezone.now() - timedelta(days=40)
        )
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete('/api/notifications/cleanup/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['deletedCount'], 1)

    def test_test_notification_defaults(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post('/api/notifications/test/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['title'], 'Test Notification')
        self.assertEqual(response.data['data']['entity_type'], 'system')


class ThrottleTests(TestCase):

    def test_inbox_throttle_assigned(self):
        self.assertIn(NotificationsInboxThrottle, NotificationListView.throttle_classes)

    def test_admin_throttle_assigned(self):
        self.assertIn(NotificationsAdminThrottle, CleanupView.throttle_classes)
