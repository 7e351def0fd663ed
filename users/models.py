from django.contrib.auth.models import AbstractUser, UserManager as BaseUserManager
from django.db import models


class UserManager(BaseUserManager):

    def operations_users(self):
        """Users eligible to be the subject of a daily operations report."""
        return self.filter(role__in=User.OPERATIONS_ROLES).order_by('name', 'username')


class User(AbstractUser):
    """
    Back-office staff account.
    """
    ADMIN = 'admin'
    OPERATIONS_MANAGER = 'operations_manager'
    OPERATIONS = 'operations'
    AGENT_MANAGER = 'agent_manager'
    TEAM_LEADER = 'team_leader'
    AGENT = 'agent'
    ACCOUNTANT = 'accountant'

    ROLE_CHOICES = [
        (ADMIN, 'Admin'),
        (OPERATIONS_MANAGER, 'Operations Manager'),
        (OPERATIONS, 'Operations'),
        (AGENT_MANAGER, 'Agent Manager'),
        (TEAM_LEADER, 'Team Leader'),
        (AGENT, 'Agent'),
        (ACCOUNTANT, 'Accountant'),
    ]

    OPERATIONS_ROLES = (OPERATIONS, OPERATIONS_MANAGER)
    REPORT_MANAGER_ROLES = (ADMIN, OPERATIONS_MANAGER)

    name = models.CharField(
        max_length=255,
        blank=True,
        help_text='Display name shown on reports and notifications'
    )
    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=AGENT,
        db_index=True,
        help_text='User role for access control'
    )

    objects = UserManager()

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        if self.name:
            return self.name
        full_name = self.get_full_name()
        return full_name or self.username

    @property
    def is_operations(self):
        return self.role in self.OPERATIONS_ROLES

    @property
    def can_manage_reports(self):
        return self.is_staff or self.is_superuser or self.role in self.REPORT_MANAGER_ROLES
