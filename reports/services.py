"""
Report Services
Create, query, edit, recalculate and delete operations reports.
"""
import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from .aggregation import CommissionAggregator, CommissionCalculation, DailyAggregator
from .dates import normalize_date, normalize_date_range, parse_day
from .exceptions import DuplicateReportError, ReportNotFoundError, ValidationError
from .models import OperationsCommissionReport, OperationsDailyReport

logger = logging.getLogger(__name__)
User = get_user_model()

COMMISSION_NOT_FOUND = 'Operations commission report not found'
DAILY_NOT_FOUND = 'Operations daily report not found'


class CommissionReportService:
    """Service for operations commission reports."""

    @staticmethod
    def _get_for_update(report_id) -> OperationsCommissionReport:
        try:
            return OperationsCommissionReport.objects.select_for_update().get(pk=report_id)
        except OperationsCommissionReport.DoesNotExist:
            raise ReportNotFoundError(COMMISSION_NOT_FOUND, report_id=report_id)

    @staticmethod
    def attach_properties(report: OperationsCommissionReport) -> OperationsCommissionReport:
        """
        Attach the live per-property breakdown for the report's range.
        Recomputed on every read so it reflects current prices even when
        the stored totals were edited by hand.
        """
        start, end = report.resolved_range()
        report.properties = CommissionAggregator.calculate(start, end).properties
        return report

    @staticmethod
    def create(start_date, end_date) -> OperationsCommissionReport:
        """
        Create a report for an inclusive date range.

        Raises:
            ValidationError / InvalidDateFormatError / InvalidDateRangeError
            DuplicateReportError: a report already covers exactly this range
        """
        normalized = normalize_date_range(start_date, end_date)
        duplicate_details = {'start_date': normalized.start_str, 'end_date': normalized.end_str}

        if OperationsCommissionReport.objects.filter(
            start_date=normalized.start_date, end_date=normalized.end_date
        ).exists():
            raise DuplicateReportError('Report for this date range already exists', duplicate_details)

        calc: CommissionCalculation = CommissionAggregator.calculate(
            normalized.start_date, normalized.end_date
        )

        try:
            with transaction.atomic():
                report = OperationsCommissionReport.objects.create(
                    month=calc.month,
                    year=calc.year,
                    start_date=normalized.start_date,
                    end_date=normalized.end_date,
                    **calc.aggregates()
                )
        except IntegrityError:
            # Lost a race with a concurrent create for the same range
            raise DuplicateReportError('Report for this date range already exists', duplicate_details)

        report.properties = calc.properties
        logger.info(
            f"Operations commission report {report.id} created for "
            f"{normalized.start_str} to {normalized.end_str}"
        )
        return report

    @staticmethod
    def get_all(filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """
        List reports, newest range first.

        Filters: start_date (alias date_from), end_date (alias date_to),
        month, year. An explicit range wins over month, and month over year:
        month is ignored once a start filter is given, year once either
        range bound is given.
        """
        filters = filters or {}
        queryset = OperationsCommissionReport.objects.all()

        start_filter = filters.get('start_date') or filters.get('date_from')
        end_filter = filters.get('end_date') or filters.get('date_to')

        if start_filter:
            queryset = queryset.filter(start_date__gte=parse_day(start_filter, field='start_date'))
        if end_filter:
            queryset = queryset.filter(end_date__lte=parse_day(end_filter, field='end_date'))
        if filters.get('month') and not start_filter:
            queryset = queryset.filter(month=int(filters['month']))
        if filters.get('year') and not start_filter and not end_filter:
            queryset = queryset.filter(year=int(filters['year']))

        return queryset.order_by('-start_date', '-end_date')

    @staticmethod
    def get_by_id(report_id) -> OperationsCommissionReport:
        try:
            report = OperationsCommissionReport.objects.get(pk=report_id)
        except OperationsCommissionReport.DoesNotExist:
            raise ReportNotFoundError(COMMISSION_NOT_FOUND, report_id=report_id)
        return CommissionReportService.attach_properties(report)

    @staticmethod
    def update(report_id, data: Dict[str, Any]) -> OperationsCommissionReport:
        """
        Overwrite the stored aggregate fields by hand.

        Only the keys present in `data` are written; requiring all seven
        together is the job of the request serializer.
        """
        with transaction.atomic():
            report = CommissionReportService._get_for_update(report_id)

            changed = []
            for name in CommissionCalculation.AGGREGATE_FIELDS:
                if name in data:
                    setattr(report, name, data[name])
                    changed.append(name)

            if changed:
                report.save(update_fields=changed + ['updated_at'])

        logger.info(f"Operations commission report {report.id} updated: {changed}")
        return CommissionReportService.attach_properties(report)

    @staticmethod
    def recalculate(report_id) -> OperationsCommissionReport:
        """
        Re-run aggregation for the stored range and overwrite every
        aggregate. Legacy month-only rows get their start/end dates filled in.
        """
        with transaction.atomic():
            report = CommissionReportService._get_for_update(report_id)
            start, end = report.resolved_range()
            calc = CommissionAggregator.calculate(start, end)

            for name, value in calc.aggregates().items():
                setattr(report, name, value)
            report.start_date = start
            report.end_date = end
            report.month = calc.month
            report.year = calc.year
            report.save()

        report.properties = calc.properties
        logger.info(f"Operations commission report {report.id} recalculated for {start} to {end}")
        return report

    @staticmethod
    def delete(report_id) -> OperationsCommissionReport:
        """Delete and return the removed row (its id is kept for the response)."""
        try:
            report = OperationsCommissionReport.objects.get(pk=report_id)
        except OperationsCommissionReport.DoesNotExist:
            raise ReportNotFoundError(COMMISSION_NOT_FOUND, report_id=report_id)

        deleted_id = report.id
        report.delete()
        report.id = deleted_id
        logger.info(f"Operations commission report {deleted_id} deleted")
        return report


class DailyReportService:
    """Service for operations daily reports."""

    @staticmethod
    def _get_for_update(report_id) -> OperationsDailyReport:
        try:
            return OperationsDailyReport.objects.select_for_update().get(pk=report_id)
        except OperationsDailyReport.DoesNotExist:
            raise ReportNotFoundError(DAILY_NOT_FOUND, report_id=report_id)

    @staticmethod
    def _clean_manual(data: Dict[str, Any]) -> Dict[str, int]:
        manual = {}
        for name in OperationsDailyReport.MANUAL_FIELDS:
            if name not in data or data[name] is None:
                continue
            try:
                manual[name] = int(data[name])
            except (TypeError, ValueError):
                raise ValidationError(f'{name} must be an integer', field=name)
        return manual

    @staticmethod
    def create(operations_id, report_date, manual_fields: Optional[Dict[str, Any]] = None) -> OperationsDailyReport:
        """
        Create a report for one operator and day. Manual fields default to 0.

        Raises:
            ValidationError / InvalidDateFormatError
            InvalidOperatorError: unknown user or not an operations role
            DuplicateReportError: the operator already has a report that day
        """
        if operations_id in (None, '') or report_date in (None, ''):
            raise ValidationError('Operations ID and report date are required')

        normalized = normalize_date(report_date)
        operator = DailyAggregator.get_operator(operations_id)
        manual = DailyReportService._clean_manual(manual_fields or {})
        duplicate_details = {'operations_id': operator.pk, 'report_date': normalized.date_str}

        if OperationsDailyReport.objects.filter(
            operations=operator, report_date=normalized.date
        ).exists():
            raise DuplicateReportError(
                'Report for this operations user and date already exists', duplicate_details
            )

        calc = DailyAggregator.calculate(operator.pk, normalized.date)

        try:
            with transaction.atomic():
                report = OperationsDailyReport.objects.create(
                    operations=operator,
                    operations_name=calc.operations_name,
                    report_date=normalized.date,
                    **calc.calculated_fields(),
                    **manual
                )
        except IntegrityError:
            raise DuplicateReportError(
                'Report for this operations user and date already exists', duplicate_details
            )

        logger.info(
            f"Operations daily report {report.id} created for operator {operator.pk} "
            f"on {normalized.date_str}"
        )
        return report

    @staticmethod
    def get_all(filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Filters: operations_id, report_date, start_date, end_date."""
        filters = filters or {}
        queryset = OperationsDailyReport.objects.all()

        if filters.get('operations_id'):
            queryset = queryset.filter(operations_id=int(filters['operations_id']))
        if filters.get('report_date'):
            queryset = queryset.filter(report_date=parse_day(filters['report_date'], field='report_date'))
        if filters.get('start_date'):
            queryset = queryset.filter(report_date__gte=parse_day(filters['start_date'], field='start_date'))
        if filters.get('end_date'):
            queryset = queryset.filter(report_date__lte=parse_day(filters['end_date'], field='end_date'))

        return queryset.order_by('-report_date', 'operations_name')

    @staticmethod
    def get_by_id(report_id) -> OperationsDailyReport:
        try:
            return OperationsDailyReport.objects.get(pk=report_id)
        except OperationsDailyReport.DoesNotExist:
            raise ReportNotFoundError(DAILY_NOT_FOUND, report_id=report_id)

    @staticmethod
    def update(report_id, data: Dict[str, Any]) -> OperationsDailyReport:
        """
        Apply any subset of the manual fields. With `recalculate` set, the
        calculated fields are refreshed first and the manual values from the
        same call are applied on top. Nothing to change returns the row as-is.
        """
        manual = DailyReportService._clean_manual(data)
        recalculate = bool(data.get('recalculate'))

        with transaction.atomic():
            report = DailyReportService._get_for_update(report_id)

            if not recalculate and not manual:
                return report

            changed = []
            if recalculate:
                calc = DailyAggregator.calculate(report.operations_id, report.report_date)
                for name, value in calc.calculated_fields().items():
                    setattr(report, name, value)
                changed.extend(OperationsDailyReport.CALCULATED_FIELDS)

            for name, value in manual.items():
                setattr(report, name, value)
                changed.append(name)

            report.save(update_fields=changed + ['updated_at'])

        logger.info(
            f"Operations daily report {report.id} updated"
            f"{' with recalculation' if recalculate else ''}: {sorted(manual)}"
        )
        return report

    @staticmethod
    def recalculate(report_id) -> OperationsDailyReport:
        return DailyReportService.update(report_id, {'recalculate': True})

    @staticmethod
    def delete(report_id) -> OperationsDailyReport:
        try:
            report = OperationsDailyReport.objects.get(pk=report_id)
        except OperationsDailyReport.DoesNotExist:
            raise ReportNotFoundError(DAILY_NOT_FOUND, report_id=report_id)

        deleted_id = report.id
        report.delete()
        report.id = deleted_id
        logger.info(f"Operations daily report {deleted_id} deleted")
        return report

    @staticmethod
    def get_operations_users() -> QuerySet:
        """Users eligible for daily reports, ordered by name."""
        return User.objects.operations_users()
