"""
Operations Reports Tests
Date normalization, aggregation, report services, exporters and API.
"""
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from io import BytesIO, StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase

from openpyxl import load_workbook
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from properties.models import Lead, Property
from system_settings.services import COMMISSION_PERCENTAGE_KEY, SettingsService
from .aggregation import CommissionAggregator, DailyAggregator
from .dates import month_range, normalize_date, normalize_date_range
from .exceptions import (
    DuplicateReportError, InvalidDateFormatError, InvalidDateRangeError,
    InvalidOperatorError, ReportNotFoundError, ValidationError
)
from .exporters import (
    commission_filename, daily_filename, format_currency, format_date_label,
    format_percentage, format_range_label,
    export_commission_report_to_excel, export_commission_report_to_pdf,
    export_daily_report_to_excel, export_daily_report_to_pdf,
)
from .models import OperationsCommissionReport, OperationsDailyReport
from .services import CommissionReportService, DailyReportService
from .throttling import ReportsExportThrottle
from .views import CommissionReportExcelView, DailyReportPdfView

User = get_user_model()


def utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


def make_property(ref, property_type='sale', price='1000.00', closed_date=None, **kwargs):
    return Property.objects.create(
        reference_number=ref,
        property_type=property_type,
        price=Decimal(price),
        closed_date=closed_date,
        **kwargs
    )


def make_lead(name, added_by, created_at):
    lead = Lead.objects.create(customer_name=name, added_by=added_by)
    Lead.objects.filter(pk=lead.pk).update(created_at=created_at)
    return lead


# =============================================================================
# 1. Date normalization
# =============================================================================

class DateNormalizationTests(TestCase):

    def test_range_pins_day_boundaries_to_utc(self):
        result = normalize_date_range('2024-01-01', '2024-01-31')
        self.assertEqual(result.start_utc, utc(2024, 1, 1))
        self.assertEqual(result.end_utc, utc(2024, 1, 31, 23, 59, 59, 999000))
        self.assertEqual(result.start_str, '2024-01-01')
        self.assertEqual(result.end_str, '2024-01-31')

    def test_same_day_range_is_valid(self):
        result = normalize_date_range('2024-01-15', '2024-01-15')
        self.assertEqual(result.start_date, result.end_date)

    def test_accepts_date_objects_and_iso_datetimes(self):
        result = normalize_date_range(date(2024, 1, 1), '2024-01-15T18:30:00+05:00')
        self.assertEqual(result.start_str, '2024-01-01')
        self.assertEqual(result.end_str, '2024-01-15')

    def test_missing_value(self):
        with self.assertRaises(ValidationError):
            normalize_date_range('2024-01-01', None)

    def test_unparseable_value(self):
        with self.assertRaises(InvalidDateFormatError):
            normalize_date_range('not-a-date', '2024-01-31')

    def test_impossible_calendar_date(self):
        with self.assertRaises(InvalidDateFormatError):
            normalize_date_range('2024-02-30', '2024-03-01')

    def test_end_before_start(self):
        with self.assertRaises(InvalidDateRangeError) as ctx:
            normalize_date_range('2024-02-01', '2024-01-31')
        self.assertIsInstance(ctx.exception, ValidationError)
        self.assertEqual(ctx.exception.status_code, 400)

    def test_single_date(self):
        result = normalize_date('2024-03-10')
        self.assertEqual(result.date_utc, utc(2024, 3, 10))
        self.assertEqual(result.date_str, '2024-03-10')

    def test_month_range_handles_leap_year(self):
        self.assertEqual(month_range(2024, 2), (date(2024, 2, 1), date(2024, 2, 29)))
        self.assertEqual(month_range(2023, 12), (date(2023, 12, 1), date(2023, 12, 31)))


# =============================================================================
# 2. Commission aggregation
# =============================================================================

class CommissionAggregatorTests(TestCase):

    def setUp(self):
        make_property('SALE-1', 'sale', '100000.00', date(2024, 1, 10))
        make_property('RENT-1', 'rent', '50000.00', date(2024, 1, 20))
        make_property('LATE-1', 'sale', '999999.00', date(2024, 2, 1))
        make_property('OPEN-1', 'sale', '888888.00', None)

    def test_default_percentage_example(self):
        calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')

        self.assertEqual(calc.commission_percentage, Decimal('4.0'))
        self.assertEqual(calc.total_properties_count, 2)
        self.assertEqual(calc.total_sales_count, 1)
        self.assertEqual(calc.total_rent_count, 1)
        self.assertEqual(calc.total_sales_value, Decimal('100000.00'))
        self.assertEqual(calc.total_rent_value, Decimal('50000.00'))
        self.assertEqual(calc.total_commission_amount, Decimal('6000.00'))
        self.assertEqual((calc.month, calc.year), (1, 2024))

    def test_counts_and_commissions_are_consistent(self):
        calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')
        self.assertEqual(
            calc.total_sales_count + calc.total_rent_count, calc.total_properties_count
        )
        self.assertEqual(
            sum(p['commission'] for p in calc.properties), calc.total_commission_amount
        )

    def test_properties_ordered_by_closed_date_desc(self):
        calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')
        self.assertEqual([p['reference_number'] for p in calc.properties], ['RENT-1', 'SALE-1'])
        self.assertEqual(calc.properties[1]['commission'], Decimal('4000.00'))

    def test_range_bounds_are_inclusive(self):
        calc = CommissionAggregator.calculate('2024-01-10', '2024-01-20')
        self.assertEqual(calc.total_properties_count, 2)

    def test_percentage_from_setting(self):
        SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, '2.5', 'number')
        calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')
        self.assertEqual(calc.commission_percentage, Decimal('2.5'))
        self.assertEqual(calc.total_commission_amount, Decimal('3750.00'))

    def test_percentage_rounded_to_stored_precision(self):
        SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, '2.125', 'number')
        calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')
        self.assertEqual(calc.commission_percentage, Decimal('2.13'))
        self.assertEqual(calc.total_commission_amount, Decimal('3195.00'))

    def test_out_of_range_percentage_uses_default(self):
        for raw in ('1000', '-1', 'abc'):
            SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, raw, 'number')
            calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')
            self.assertEqual(calc.commission_percentage, Decimal('4.00'), raw)
            self.assertEqual(calc.total_commission_amount, Decimal('6000.00'), raw)

    def test_sale_match_is_case_insensitive(self):
        Property.objects.filter(reference_number='RENT-1').update(property_type='SALE')
        calc = CommissionAggregator.calculate('2024-01-01', '2024-01-31')
        self.assertEqual(calc.total_sales_count, 2)
        self.assertEqual(calc.total_rent_count, 0)

    def test_empty_range_is_all_zero(self):
        calc = CommissionAggregator.calculate('2023-01-01', '2023-01-31')
        self.assertEqual(calc.total_properties_count, 0)
        self.assertEqual(calc.total_commission_amount, Decimal('0.00'))
        self.assertEqual(calc.properties, [])


# =============================================================================
# 3. Daily aggregation
# =============================================================================

class DailyAggregatorTests(TestCase):

    def setUp(self):
        self.ops = User.objects.create_user(
            username='ops1', password='testpass123', role='operations', name='Sara Ops'
        )
        self.other_ops = User.objects.create_user(
            username='ops2', password='testpass123', role='operations_manager'
        )
        self.agent = User.objects.create_user(username='agent1', password='testpass123', role='agent')

        # Created on the day
        make_property('NEW-1', created_at=utc(2024, 3, 10, 0, 0))
        make_property('NEW-2', created_at=utc(2024, 3, 10, 23, 59, 59))
        # Created the day before, edited on the day
        make_property(
            'OLD-1', created_at=utc(2024, 3, 9, 12, 0), updated_at=utc(2024, 3, 10, 8, 0)
        )
        # Created the day before, untouched
        make_property('OLD-2', created_at=utc(2024, 3, 9, 12, 0))
        # Next day
        make_property('NEXT-1', created_at=utc(2024, 3, 11, 0, 0))

        make_lead('Lead A', self.ops, utc(2024, 3, 10, 9, 0))
        make_lead('Lead B', self.ops, utc(2024, 3, 10, 21, 0))
        make_lead('Lead C', self.other_ops, utc(2024, 3, 10, 9, 0))
        make_lead('Lead D', self.ops, utc(2024, 3, 9, 9, 0))

    def test_counts_for_day(self):
        calc = DailyAggregator.calculate(self.ops.id, '2024-03-10')

        self.assertEqual(calc.operations_name, 'Sara Ops')
        self.assertEqual(calc.report_date, '2024-03-10')
        self.assertEqual(calc.properties_added, 2)
        self.assertEqual(calc.leads_responded_to, 2)
        self.assertEqual(calc.amending_previous_properties, 1)

    def test_new_properties_are_not_amendments(self):
        calc = DailyAggregator.calculate(self.ops.id, '2024-03-11')
        self.assertEqual(calc.properties_added, 1)
        self.assertEqual(calc.amending_previous_properties, 0)

    def test_operations_manager_is_eligible(self):
        calc = DailyAggregator.calculate(self.other_ops.id, '2024-03-10')
        self.assertEqual(calc.leads_responded_to, 1)

    def test_non_operations_user_rejected(self):
        with self.assertRaises(InvalidOperatorError):
            DailyAggregator.calculate(self.agent.id, '2024-03-10')

    def test_unknown_user_rejected(self):
        with self.assertRaises(InvalidOperatorError):
            DailyAggregator.calculate(999999, '2024-03-10')


# =============================================================================
# 4. Commission report service
# =============================================================================

class CommissionReportServiceTests(TestCase):

    def setUp(self):
        make_property('SALE-1', 'sale', '100000.00', date(2024, 1, 10))
        make_property('RENT-1', 'rent', '50000.00', date(2024, 1, 20))

    def test_create_stores_aggregates_and_attaches_properties(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')

        self.assertEqual(report.start_date, date(2024, 1, 1))
        self.assertEqual(report.end_date, date(2024, 1, 31))
        self.assertEqual((report.month, report.year), (1, 2024))
        self.assertEqual(report.total_commission_amount, Decimal('6000.00'))
        self.assertEqual(len(report.properties), 2)

        stored = OperationsCommissionReport.objects.get(pk=report.pk)
        self.assertEqual(stored.total_sales_value, Decimal('100000.00'))

    def test_duplicate_range_rejected(self):
        CommissionReportService.create('2024-01-01', '2024-01-31')
        with self.assertRaises(DuplicateReportError):
            CommissionReportService.create('2024-01-01', '2024-01-31')
        self.assertEqual(OperationsCommissionReport.objects.count(), 1)

    def test_non_matching_range_allowed(self):
        CommissionReportService.create('2024-01-01', '2024-01-31')
        CommissionReportService.create('2024-02-01', '2024-02-29')
        self.assertEqual(OperationsCommissionReport.objects.count(), 2)

    def test_invalid_range_writes_nothing(self):
        with self.assertRaises(InvalidDateRangeError):
            CommissionReportService.create('2024-01-31', '2024-01-01')
        self.assertFalse(OperationsCommissionReport.objects.exists())

    def test_recalculate_is_idempotent(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')

        first = CommissionReportService.recalculate(report.id)
        first_values = {f: getattr(first, f) for f in (
            'commission_percentage', 'total_properties_count', 'total_sales_count',
            'total_rent_count', 'total_sales_value', 'total_rent_value', 'total_commission_amount'
        )}
        second = CommissionReportService.recalculate(report.id)
        second.refresh_from_db()

        for name, value in first_values.items():
            self.assertEqual(Decimal(getattr(second, name)), Decimal(value), name)

    def test_recalculate_picks_up_new_closings(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')
        make_property('SALE-2', 'sale', '25000.00', date(2024, 1, 25))

        report = CommissionReportService.recalculate(report.id)

        self.assertEqual(report.total_properties_count, 3)
        self.assertEqual(report.total_commission_amount, Decimal('7000.00'))
        self.assertEqual(len(report.properties), 3)

    def test_recalculate_fills_legacy_month_rows(self):
        legacy = OperationsCommissionReport.objects.create(month=1, year=2024)

        report = CommissionReportService.recalculate(legacy.id)
        report.refresh_from_db()

        self.assertEqual(report.start_date, date(2024, 1, 1))
        self.assertEqual(report.end_date, date(2024, 1, 31))
        self.assertEqual(report.total_properties_count, 2)

    def test_update_overwrites_given_fields_only(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')

        updated = CommissionReportService.update(
            report.id, {'total_commission_amount': Decimal('1.00')}
        )
        updated.refresh_from_db()

        self.assertEqual(updated.total_commission_amount, Decimal('1.00'))
        self.assertEqual(updated.total_sales_value, Decimal('100000.00'))

    def test_get_by_id_breakdown_ignores_manual_totals(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')
        CommissionReportService.update(report.id, {'total_properties_count': 0})

        fetched = CommissionReportService.get_by_id(report.id)
        self.assertEqual(fetched.total_properties_count, 0)
        self.assertEqual(len(fetched.properties), 2)

    def test_missing_report(self):
        with self.assertRaises(ReportNotFoundError):
            CommissionReportService.get_by_id(999)
        with self.assertRaises(ReportNotFoundError):
            CommissionReportService.update(999, {})
        with self.assertRaises(ReportNotFoundError):
            CommissionReportService.recalculate(999)
        with self.assertRaises(ReportNotFoundError):
            CommissionReportService.delete(999)

    def test_delete_returns_row(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')
        deleted = CommissionReportService.delete(report.id)
        self.assertEqual(deleted.id, report.id)
        self.assertFalse(OperationsCommissionReport.objects.exists())

    def test_stored_rate_matches_stored_amounts(self):
        SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, '2.125', 'number')
        report = CommissionReportService.create('2024-01-01', '2024-01-31')
        report.refresh_from_db()

        self.assertEqual(report.commission_percentage, Decimal('2.13'))
        total_value = report.total_sales_value + report.total_rent_value
        self.assertEqual(
            (total_value * report.commission_percentage / 100).quantize(Decimal('0.01')),
            report.total_commission_amount
        )

    def test_oversized_percentage_setting_still_creates(self):
        SettingsService.set_value(COMMISSION_PERCENTAGE_KEY, '1000', 'number')
        report = CommissionReportService.create('2024-01-01', '2024-01-31')
        report.refresh_from_db()
        self.assertEqual(report.commission_percentage, Decimal('4.00'))
        self.assertEqual(report.total_commission_amount, Decimal('6000.00'))

    def test_database_rejects_end_before_start(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                OperationsCommissionReport.objects.create(
                    month=2, year=2024, start_date=date(2024, 2, 10), end_date=date(2024, 2, 1)
                )


class CommissionReportFilterTests(TestCase):

    def setUp(self):
        self.jan_2024 = CommissionReportService.create('2024-01-01', '2024-01-31')
        self.feb_2024 = CommissionReportService.create('2024-02-01', '2024-02-29')
        self.jan_2023 = CommissionReportService.create('2023-01-01', '2023-01-31')

    def ids(self, filters):
        return [r.id for r in CommissionReportService.get_all(filters)]

    def test_no_filters_newest_first(self):
        self.assertEqual(self.ids({}), [self.feb_2024.id, self.jan_2024.id, self.jan_2023.id])

    def test_year_filter(self):
        self.assertEqual(self.ids({'year': 2024}), [self.feb_2024.id, self.jan_2024.id])

    def test_month_filter(self):
        self.assertEqual(self.ids({'month': 1}), [self.jan_2024.id, self.jan_2023.id])

    def test_month_ignored_when_start_given(self):
        self.assertEqual(
            self.ids({'start_date': date(2024, 2, 1), 'month': 1}), [self.feb_2024.id]
        )

    def test_year_ignored_when_range_given(self):
        self.assertEqual(
            self.ids({'date_from': '2024-01-01', 'year': 2023}),
            [self.feb_2024.id, self.jan_2024.id]
        )
        self.assertEqual(
            self.ids({'end_date': '2023-12-31', 'year': 2024}), [self.jan_2023.id]
        )

    def test_legacy_aliases(self):
        self.assertEqual(
            self.ids({'date_from': '2024-01-01', 'date_to': '2024-01-31'}), [self.jan_2024.id]
        )


# =============================================================================
# 5. Daily report service
# =============================================================================

class DailyReportServiceTests(TestCase):

    def setUp(self):
        self.ops = User.objects.create_user(
            username='ops1', password='testpass123', role='operations', name='Sara Ops'
        )
        make_property('NEW-1', created_at=utc(2024, 1, 15, 10, 0))
        make_lead('Lead A', self.ops, utc(2024, 1, 15, 9, 0))

    def test_create_combines_calculated_and_manual(self):
        report = DailyReportService.create(
            self.ops.id, '2024-01-15', {'preparing_contract': 2}
        )

        self.assertEqual(report.operations_name, 'Sara Ops')
        self.assertEqual(report.report_date, date(2024, 1, 15))
        self.assertEqual(report.properties_added, 1)
        self.assertEqual(report.leads_responded_to, 1)
        self.assertEqual(report.amending_previous_properties, 0)
        self.assertEqual(report.preparing_contract, 2)
        self.assertEqual(report.tasks_efficiency_uniform, 0)

    def test_calculated_fields_match_direct_counts(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15')
        self.assertEqual(
            report.leads_responded_to,
            Lead.objects.filter(
                added_by=self.ops,
                created_at__gte=utc(2024, 1, 15),
                created_at__lt=utc(2024, 1, 16)
            ).count()
        )

    def test_duplicate_operator_date_rejected(self):
        DailyReportService.create(self.ops.id, '2024-01-15')
        with self.assertRaises(DuplicateReportError):
            DailyReportService.create(self.ops.id, '2024-01-15')
        DailyReportService.create(self.ops.id, '2024-01-16')
        self.assertEqual(OperationsDailyReport.objects.count(), 2)

    def test_required_fields(self):
        with self.assertRaises(ValidationError):
            DailyReportService.create(None, '2024-01-15')
        with self.assertRaises(ValidationError):
            DailyReportService.create(self.ops.id, '')

    def test_name_is_a_snapshot(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15')
        self.ops.name = 'Sara Renamed'
        self.ops.save()
        report.refresh_from_db()
        self.assertEqual(report.operations_name, 'Sara Ops')

    def test_recalculate_preserves_manual_fields(self):
        report = DailyReportService.create(
            self.ops.id, '2024-01-15', {'leads_responded_out_of_duty_time': 1, 'preparing_contract': 4}
        )
        make_lead('Lead B', self.ops, utc(2024, 1, 15, 22, 0))

        report = DailyReportService.recalculate(report.id)

        self.assertEqual(report.leads_responded_to, 2)
        self.assertEqual(report.leads_responded_out_of_duty_time, 1)
        self.assertEqual(report.preparing_contract, 4)

    def test_update_recalculates_then_applies_manual(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15', {'tasks_efficiency_uniform': 5})
        make_lead('Lead B', self.ops, utc(2024, 1, 15, 22, 0))

        report = DailyReportService.update(
            report.id, {'recalculate': True, 'preparing_contract': 3}
        )
        report.refresh_from_db()

        self.assertEqual(report.leads_responded_to, 2)
        self.assertEqual(report.preparing_contract, 3)
        self.assertEqual(report.tasks_efficiency_uniform, 5)

    def test_manual_update_does_not_recalculate(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15')
        make_lead('Lead B', self.ops, utc(2024, 1, 15, 22, 0))

        report = DailyReportService.update(report.id, {'tasks_efficiency_after_duty': -2})
        report.refresh_from_db()

        self.assertEqual(report.leads_responded_to, 1)
        self.assertEqual(report.tasks_efficiency_after_duty, -2)

    def test_empty_update_returns_row_unchanged(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15')
        before = report.updated_at

        unchanged = DailyReportService.update(report.id, {'recalculate': False})
        self.assertEqual(unchanged.updated_at, before)

    def test_effective_leads_never_negative(self):
        report = OperationsDailyReport(leads_responded_to=10, leads_responded_out_of_duty_time=15)
        self.assertEqual(report.effective_leads_responded, 0)
        report.leads_responded_out_of_duty_time = 4
        self.assertEqual(report.effective_leads_responded, 6)

    def test_filters(self):
        first = DailyReportService.create(self.ops.id, '2024-01-15')
        second = DailyReportService.create(self.ops.id, '2024-01-20')

        self.assertEqual([r.id for r in DailyReportService.get_all({})], [second.id, first.id])
        self.assertEqual(
            [r.id for r in DailyReportService.get_all({'report_date': '2024-01-15'})], [first.id]
        )
        self.assertEqual(
            [r.id for r in DailyReportService.get_all({'start_date': '2024-01-16'})], [second.id]
        )
        self.assertEqual(
            [r.id for r in DailyReportService.get_all({'end_date': date(2024, 1, 16)})], [first.id]
        )
        self.assertEqual(
            DailyReportService.get_all({'operations_id': self.ops.id + 100}).count(), 0
        )

    def test_operations_users(self):
        User.objects.create_user(username='mgr', password='testpass123', role='operations_manager', name='Adam Mgr')
        User.objects.create_user(username='agent', password='testpass123', role='agent', name='Agent')

        names = [u.name for u in DailyReportService.get_operations_users()]
        self.assertEqual(names, ['Adam Mgr', 'Sara Ops'])

    def test_delete(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15')
        DailyReportService.delete(report.id)
        with self.assertRaises(ReportNotFoundError):
            DailyReportService.get_by_id(report.id)


# =============================================================================
# 6. Exporters
# =============================================================================

class ExporterTests(TestCase):

    def setUp(self):
        self.ops = User.objects.create_user(
            username='ops1', password='testpass123', role='operations', name='Sara Ops'
        )

    def sheet_values(self, content):
        ws = load_workbook(BytesIO(content)).active
        return [cell for row in ws.iter_rows(values_only=True) for cell in row if cell is not None]

    def test_formatting_helpers(self):
        self.assertEqual(format_currency(Decimal('1234.5')), '$1,234.50')
        self.assertEqual(format_currency(0), '$0.00')
        self.assertEqual(format_percentage(Decimal('4')), '4.00%')
        self.assertEqual(format_date_label('2024-01-05'), 'Jan-05-2024')
        self.assertEqual(
            format_range_label(date(2024, 1, 1), date(2024, 1, 31)), 'Jan-01-2024_to_Jan-31-2024'
        )

    def test_commission_empty_state_renders(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')

        xlsx = export_commission_report_to_excel(report, [])
        pdf = export_commission_report_to_pdf(report, [])

        self.assertTrue(xlsx.startswith(b'PK'))
        self.assertTrue(pdf.startswith(b'%PDF'))
        values = self.sheet_values(xlsx)
        self.assertIn('TOTAL COMMISSION', values)
        self.assertNotIn('Property Details', values)

    def test_commission_with_properties(self):
        make_property('SALE-1', 'sale', '100000.00', date(2024, 1, 10))
        report = CommissionReportService.create('2024-01-01', '2024-01-31')

        values = self.sheet_values(export_commission_report_to_excel(report, report.properties))

        self.assertIn('Property Details', values)
        self.assertIn('SALE-1', values)
        self.assertIn('$4,000.00', values)
        self.assertTrue(export_commission_report_to_pdf(report, report.properties).startswith(b'%PDF'))

    def test_daily_empty_state_renders(self):
        report = DailyReportService.create(self.ops.id, '2024-01-15')
        self.assertTrue(export_daily_report_to_excel(report).startswith(b'PK'))
        self.assertTrue(export_daily_report_to_pdf(report).startswith(b'%PDF'))

    def test_daily_effective_leads_and_negative_values(self):
        report = DailyReportService.create(
            self.ops.id, '2024-01-15',
            {'leads_responded_out_of_duty_time': 15, 'tasks_efficiency_uniform': -2}
        )
        OperationsDailyReport.objects.filter(pk=report.pk).update(leads_responded_to=10)
        report.refresh_from_db()

        ws = load_workbook(BytesIO(export_daily_report_to_excel(report))).active
        cells = {
            row[0].value: row[1] for row in ws.iter_rows(min_row=4, max_col=2) if row[0].value
        }

        self.assertEqual(cells['Leads Responded To'].value, '0 (10 total, 15 out of duty)')
        self.assertEqual(cells['Tasks Efficiency - Uniform'].value, -2)
        self.assertTrue(cells['Tasks Efficiency - Uniform'].font.color.rgb.endswith('FF0000'))
        self.assertTrue(export_daily_report_to_pdf(report).startswith(b'%PDF'))

    def test_filenames(self):
        report = CommissionReportService.create('2024-01-01', '2024-01-31')
        self.assertEqual(
            commission_filename(report, 'xlsx'),
            'Operations_Commission_Jan-01-2024_to_Jan-31-2024.xlsx'
        )

        daily = DailyReportService.create(self.ops.id, '2024-01-15')
        self.assertEqual(daily_filename(daily, 'pdf'), 'Operations_Daily_Sara_Ops_Jan-15-2024.pdf')


# =============================================================================
# 7. API
# =============================================================================

class ReportAPITestCase(APITestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_user(username='admin1', password='testpass123', role='admin')
        self.ops = User.objects.create_user(
            username='ops1', password='testpass123', role='operations', name='Sara Ops'
        )
        self.agent = User.objects.create_user(username='agent1', password='testpass123', role='agent')


class CommissionAPITests(ReportAPITestCase):

    base = '/api/operations-commission/monthly/'

    def setUp(self):
        super().setUp()
        make_property('SALE-1', 'sale', '100000.00', date(2024, 1, 10))
        make_property('RENT-1', 'rent', '50000.00', date(2024, 1, 20))

    def create_report(self, start='2024-01-01', end='2024-01-31'):
        return self.client.post(self.base, {'start_date': start, 'end_date': end}, format='json')

    def test_requires_authentication(self):
        response = self.client.get(self.base)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_requires_report_manager(self):
        for user in (self.agent, self.ops):
            self.client.force_authenticate(user=user)
            response = self.client.get(self.base)
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
            self.assertFalse(response.data['success'])

    def test_create_and_fetch(self):
        self.client.force_authenticate(user=self.admin)

        response = self.create_report()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data']['total_commission_amount'], '6000.00')
        self.assertEqual(len(response.data['data']['properties']), 2)

        report_id = response.data['data']['id']
        response = self.client.get(f'{self.base}{report_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['properties'][0]['reference_number'], 'RENT-1')

    def test_create_duplicate_is_409(self):
        self.client.force_authenticate(user=self.admin)
        self.create_report()
        response = self.create_report()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'duplicate_report')
        self.assertEqual(response.data['message'], 'Report for this date range already exists')

    def test_create_validation_errors(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(self.base, {'start_date': '2024-01-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Start date and end date are required')

        response = self.create_report('2024-13-45', '2024-01-31')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid date format. Please use YYYY-MM-DD.')

        response = self.create_report('2024-01-31', '2024-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'End date cannot be before start date')
        self.assertFalse(OperationsCommissionReport.objects.exists())

    def test_list_with_filters(self):
        self.client.force_authenticate(user=self.admin)
        self.create_report()
        self.create_report('2023-01-01', '2023-01-31')

        response = self.client.get(self.base, {'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)

        response = self.client.get(self.base, {'month': 13})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'validation_error')

    def test_update_requires_all_fields(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        response = self.client.put(
            f'{self.base}{report_id}/', {'total_commission_amount': '1.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'All fields are required')
        self.assertIn('total_sales_value', response.data['details']['missing_fields'])

    def test_update_rejects_invalid_values(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        payload = {
            'commission_percentage': '5.00',
            'total_properties_count': 3,
            'total_sales_count': 2,
            'total_rent_count': 1,
            'total_sales_value': '-200000.00',
            'total_rent_value': '50000.00',
            'total_commission_amount': '12500.00',
        }
        response = self.client.put(f'{self.base}{report_id}/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid request parameters')
        self.assertIn('total_sales_value', response.data['details'])
        report = OperationsCommissionReport.objects.get(pk=report_id)
        self.assertEqual(report.total_sales_value, Decimal('100000.00'))

    def test_full_update(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        payload = {
            'commission_percentage': '5.00',
            'total_properties_count': 3,
            'total_sales_count': 2,
            'total_rent_count': 1,
            'total_sales_value': '200000.00',
            'total_rent_value': '50000.00',
            'total_commission_amount': '12500.00',
        }
        response = self.client.put(f'{self.base}{report_id}/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        report = OperationsCommissionReport.objects.get(pk=report_id)
        self.assertEqual(report.total_commission_amount, Decimal('12500.00'))
        self.assertEqual(report.commission_percentage, Decimal('5.00'))

    def test_recalculate_and_delete(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        response = self.client.post(f'{self.base}{report_id}/recalculate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['total_properties_count'], 2)

        response = self.client.delete(f'{self.base}{report_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        deleted = response.data['data']
        self.assertEqual(deleted['id'], report_id)
        self.assertEqual(deleted['start_date'], '2024-01-01')
        self.assertEqual(deleted['end_date'], '2024-01-31')
        self.assertEqual(deleted['total_properties_count'], 2)
        self.assertEqual(deleted['total_commission_amount'], '6000.00')

        response = self.client.get(f'{self.base}{report_id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Operations commission report not found')

    def test_exports(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        response = self.client.get(f'{self.base}{report_id}/export/excel/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response['Content-Type'],
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        self.assertIn(
            'Operations_Commission_Jan-01-2024_to_Jan-31-2024.xlsx', response['Content-Disposition']
        )

        response = self.client.get(f'{self.base}{report_id}/export/pdf/')
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_export_failure_is_500(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        with patch('reports.views.export_commission_report_to_excel', side_effect=RuntimeError('boom')):
            response = self.client.get(f'{self.base}{report_id}/export/excel/')

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'Internal server error')

    def test_export_throttle_assigned(self):
        self.assertIn(ReportsExportThrottle, CommissionReportExcelView.throttle_classes)
        self.assertIn(ReportsExportThrottle, DailyReportPdfView.throttle_classes)


class DailyAPITests(ReportAPITestCase):

    base = '/api/operations-daily/'

    def create_report(self, **extra):
        payload = {'operations_id': self.ops.id, 'report_date': '2024-01-15'}
        payload.update(extra)
        return self.client.post(self.base, payload, format='json')

    def test_create(self):
        self.client.force_authenticate(user=self.admin)
        response = self.create_report(preparing_contract=2)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['operations_name'], 'Sara Ops')
        self.assertEqual(response.data['data']['preparing_contract'], 2)

    def test_create_duplicate_is_409(self):
        self.client.force_authenticate(user=self.admin)
        self.create_report()
        response = self.create_report()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(
            response.data['message'], 'Report for this operations user and date already exists'
        )

    def test_create_missing_fields(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(self.base, {'report_date': '2024-01-15'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Operations ID and report date are required')

    def test_create_for_non_operations_user(self):
        self.client.force_authenticate(user=self.admin)
        response = self.create_report(operations_id=self.agent.id)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'invalid_operator')

    def test_operations_user_can_read_but_not_write(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        self.client.force_authenticate(user=self.ops)
        self.assertEqual(self.client.get(self.base).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(f'{self.base}{report_id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.create_report(report_date='2024-01-16').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.delete(f'{self.base}{report_id}/').status_code, status.HTTP_403_FORBIDDEN)

    def test_agent_cannot_read(self):
        self.client.force_authenticate(user=self.agent)
        self.assertEqual(self.client.get(self.base).status_code, status.HTTP_403_FORBIDDEN)

    def test_partial_update(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report(preparing_contract=2).data['data']['id']

        response = self.client.put(
            f'{self.base}{report_id}/', {'tasks_efficiency_uniform': -1}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['tasks_efficiency_uniform'], -1)
        self.assertEqual(response.data['data']['preparing_contract'], 2)

    def test_recalculate(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']
        make_lead('Lead A', self.ops, utc(2024, 1, 15, 9, 0))

        response = self.client.post(f'{self.base}{report_id}/recalculate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['leads_responded_to'], 1)

    def test_operations_users(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f'{self.base}operations-users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['id'] for u in response.data['data']], [self.ops.id])

    def test_exports(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report().data['data']['id']

        response = self.client.get(f'{self.base}{report_id}/export/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('Operations_Daily_Sara_Ops_Jan-15-2024.pdf', response['Content-Disposition'])

        response = self.client.get(f'{self.base}{report_id}/export/excel/')
        self.assertIn('Operations_Daily_Sara_Ops_Jan-15-2024.xlsx', response['Content-Disposition'])

    def test_delete_returns_deleted_row(self):
        self.client.force_authenticate(user=self.admin)
        report_id = self.create_report(preparing_contract=2).data['data']['id']

        response = self.client.delete(f'{self.base}{report_id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        deleted = response.data['data']
        self.assertEqual(deleted['id'], report_id)
        self.assertEqual(deleted['operations_id'], self.ops.id)
        self.assertEqual(deleted['operations_name'], 'Sara Ops')
        self.assertEqual(deleted['report_date'], '2024-01-15')
        self.assertEqual(deleted['preparing_contract'], 2)
        self.assertFalse(OperationsDailyReport.objects.filter(pk=report_id).exists())

    def test_missing_report_is_404(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f'{self.base}999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Operations daily report not found')


# =============================================================================
# 8. Management command
# =============================================================================

class RecalculateCommandTests(TestCase):

    def test_recalculates_reports_in_range(self):
        ops = User.objects.create_user(username='ops1', password='testpass123', role='operations')
        commission = CommissionReportService.create('2024-01-01', '2024-01-31')
        DailyReportService.create(ops.id, '2024-01-15')
        make_property('SALE-1', 'sale', '100000.00', date(2024, 1, 10))

        out = StringIO()
        call_command('recalculate_reports', '--start=2024-01-01', '--end=2024-01-31', stdout=out)

        commission.refresh_from_db()
        self.assertEqual(commission.total_sales_count, 1)
        self.assertIn('Commission reports: 1 recalculated', out.getvalue())
        self.assertIn('Daily reports: 1 recalculated', out.getvalue())

    def test_fills_in_month_only_rows(self):
        make_property('SALE-1', 'sale', '100000.00', date(2024, 1, 10))
        legacy = OperationsCommissionReport.objects.create(month=1, year=2024)
        other_month = OperationsCommissionReport.objects.create(month=3, year=2024)

        out = StringIO()
        call_command(
            'recalculate_reports', '--start=2024-01-10', '--end=2024-01-12', '--commission', stdout=out
        )

        legacy.refresh_from_db()
        other_month.refresh_from_db()
        self.assertEqual(legacy.start_date, date(2024, 1, 1))
        self.assertEqual(legacy.end_date, date(2024, 1, 31))
        self.assertEqual(legacy.total_sales_count, 1)
        self.assertIsNone(other_month.start_date)
        self.assertIn('Commission reports: 1 recalculated', out.getvalue())

    def test_daily_only(self):
        CommissionReportService.create('2024-01-01', '2024-01-31')
        out = StringIO()
        call_command('recalculate_reports', '--start=2024-01-01', '--daily', stdout=out)
        self.assertNotIn('Commission reports', out.getvalue())
