"""
Django management command for the notification retention sweep.
Can be scheduled via cron.

Usage:
    python manage.py cleanup_notifications             # older than 30 days
    python manage.py cleanup_notifications --days=90
"""
from django.core.management.base import BaseCommand, CommandError

from notifications.exceptions import ValidationError
from notifications.services import NOTIFICATION_RETENTION_DAYS, NotificationService


class Command(BaseCommand):
    help = 'Delete notifications older than the retention window'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=NOTIFICATION_RETENTION_DAYS,
            help=f'Retention window in days. Defaults to {NOTIFICATION_RETENTION_DAYS}.',
        )

    def handle(self, *args, **options):
        try:
            deleted = NotificationService.cleanup_old(days=options['days'])
        except ValidationError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(
            f"Deleted {deleted} notifications older than {options['days']} days"
        ))
