from django.contrib.auth import get_user_model
from django.test import TestCase

User = get_user_model()


class UserRoleTests(TestCase):

    def test_display_name_fallbacks(self):
        user = User(username='jdoe')
        self.assertEqual(user.display_name, 'jdoe')
        user.first_name, user.last_name = 'Jane', 'Doe'
        self.assertEqual(user.display_name, 'Jane Doe')
        user.name = 'J. Doe'
        self.assertEqual(user.display_name, 'J. Doe')

    def test_report_access(self):
        self.assertTrue(User(role=User.ADMIN).can_manage_reports)
        self.assertTrue(User(role=User.OPERATIONS_MANAGER).can_manage_reports)
        self.assertTrue(User(role=User.AGENT, is_staff=True).can_manage_reports)
        self.assertFalse(User(role=User.OPERATIONS).can_manage_reports)
        self.assertTrue(User(role=User.OPERATIONS).is_operations)
        self.assertFalse(User(role=User.AGENT).is_operations)

    def test_operations_users(self):
        User.objects.create_user(username='b', password='testpass123', role=User.OPERATIONS, name='Bea')
        User.objects.create_user(username='a', password='testpass123', role=User.OPERATIONS_MANAGER, name='Al')
        User.objects.create_user(username='c', password='testpass123', role=User.AGENT, name='Cy')

        names = list(User.objects.operations_users().values_list('name', flat=True))
        self.assertEqual(names, ['Al', 'Bea'])
