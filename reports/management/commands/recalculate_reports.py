"""
Django management command for recalculating stored operations reports.

Usage:
    python manage.py recalculate_reports --start=2024-01-01 --end=2024-01-31
    python manage.py recalculate_reports --start=2024-01-01 --end=2024-01-31 --daily
    python manage.py recalculate_reports --start=2024-01-01 --end=2024-01-31 --commission
"""
import logging

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Q
from django.utils import timezone

from reports.dates import normalize_date_range
from reports.exceptions import ReportError
from reports.models import OperationsCommissionReport, OperationsDailyReport
from reports.services import CommissionReportService, DailyReportService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Recalculate operations commission and daily reports in a date range'

    def add_arguments(self, parser):
        parser.add_argument(
            '--start',
            type=str,
            required=True,
            help='Range start (YYYY-MM-DD).',
        )
        parser.add_argument(
            '--end',
            type=str,
            help='Range end (YYYY-MM-DD). Defaults to --start.',
        )
        parser.add_argument(
            '--commission',
            action='store_true',
            help='Recalculate commission reports only.',
        )
        parser.add_argument(
            '--daily',
            action='store_true',
            help='Recalculate daily reports only.',
        )

    def handle(self, *args, **options):
        try:
            normalized = normalize_date_range(options['start'], options['end'] or options['start'])
        except ReportError as e:
            raise CommandError(e.message)

        run_all = not options['commission'] and not options['daily']
        started = timezone.now()
        self.stdout.write(self.style.NOTICE(
            f"Recalculating reports from {normalized.start_str} to {normalized.end_str}"
        ))

        failures = 0

        if run_all or options['commission']:
            reports = OperationsCommissionReport.objects.filter(
                Q(start_date__lte=normalized.end_date, end_date__gte=normalized.start_date)
                | (Q(start_date__isnull=True) & self._months_q(normalized.start_date, normalized.end_date))
            ).order_by('year', 'month', 'start_date')
            done, failed = self._recalculate(reports, CommissionReportService.recalculate, 'commission')
            failures += failed
            self.stdout.write(f"  Commission reports: {done} recalculated, {failed} failed")

        if run_all or options['daily']:
            reports = OperationsDailyReport.objects.filter(
                report_date__gte=normalized.start_date,
                report_date__lte=normalized.end_date,
            ).order_by('report_date', 'operations_name')
            done, failed = self._recalculate(reports, DailyReportService.recalculate, 'daily')
            failures += failed
            self.stdout.write(f"  Daily reports: {done} recalculated, {failed} failed")

        duration = (timezone.now() - started).total_seconds()
        if failures:
            raise CommandError(f"{failures} reports failed to recalculate")

        self.stdout.write(self.style.SUCCESS(f"Recalculation completed in {duration:.2f}s"))

    def _recalculate(self, queryset, recalculate, label):
        done = failed = 0
        for report_id in queryset.values_list('id', flat=True):
            try:
                recalculate(report_id)
                done += 1
            except ReportError as e:
                failed += 1
                logger.warning(f"Could not recalculate {label} report {report_id}: {e.message}")
                self.stderr.write(f"  {label} report {report_id}: {e.message}")
        return done, failed

    @staticmethod
    def _months_q(start, end):
        """Match month-only rows for every calendar month the range touches."""
        query = Q()
        year, month = start.year, start.month
        while (year, month) <= (end.year, end.month):
            query |= Q(year=year, month=month)
            month += 1
            if month > 12:
                year, month = year + 1, 1
        return query
