"""
Report Aggregation
Computes commission and daily-activity snapshots from properties and leads.
Read-only against source tables; persistence lives in reports.services.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from django.contrib.auth import get_user_model
from django.db.models import F

from properties.models import Lead, Property, PropertyType
from system_settings.services import COMMISSION_PERCENTAGE_KEY, SettingsService

from .dates import NormalizedDate, NormalizedRange, day_start_utc, normalize_date, normalize_date_range
from .exceptions import InvalidOperatorError

logger = logging.getLogger(__name__)
User = get_user_model()

DEFAULT_COMMISSION_PERCENTAGE = Decimal('4.0')
CENTS = Decimal('0.01')


def quantize_money(value) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def commission_for(price: Decimal, percentage: Decimal) -> Decimal:
    return quantize_money(Decimal(price) * Decimal(percentage) / Decimal('100'))


def get_commission_percentage() -> Decimal:
    """
    Configured percentage at the stored precision (2 places). Amounts are
    computed from this rounded value. Values outside 0..100 fall back to
    the default.
    """
    percentage = SettingsService.get_decimal(COMMISSION_PERCENTAGE_KEY, DEFAULT_COMMISSION_PERCENTAGE)
    if not percentage.is_finite() or not (0 <= percentage <= 100):
        logger.warning(
            f"Setting {COMMISSION_PERCENTAGE_KEY} out of range ({percentage}); "
            f"using {DEFAULT_COMMISSION_PERCENTAGE}"
        )
        percentage = DEFAULT_COMMISSION_PERCENTAGE
    return quantize_money(percentage)


@dataclass
class CommissionCalculation:
    """Snapshot of commission totals for one range."""
    month: int
    year: int
    start_date: str
    end_date: str
    commission_percentage: Decimal
    total_properties_count: int = 0
    total_sales_count: int = 0
    total_rent_count: int = 0
    total_sales_value: Decimal = Decimal('0.00')
    total_rent_value: Decimal = Decimal('0.00')
    total_commission_amount: Decimal = Decimal('0.00')
    properties: List[Dict[str, Any]] = field(default_factory=list)

    AGGREGATE_FIELDS = (
        'commission_percentage',
        'total_properties_count',
        'total_sales_count',
        'total_rent_count',
        'total_sales_value',
        'total_rent_value',
        'total_commission_amount',
    )

    def aggregates(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.AGGREGATE_FIELDS}


@dataclass
class DailyCalculation:
    operations_id: int
    operations_name: str
    report_date: str
    properties_added: int = 0
    leads_responded_to: int = 0
    amending_previous_properties: int = 0

    def calculated_fields(self) -> Dict[str, int]:
        return {
            'properties_added': self.properties_added,
            'leads_responded_to': self.leads_responded_to,
            'amending_previous_properties': self.amending_previous_properties,
        }


class CommissionAggregator:
    """
    Commission totals for properties closed inside a date range.

    Sale vs rent is decided by property_type == 'sale' (case-insensitive);
    any other stored value counts as rent.
    """

    @staticmethod
    def calculate(start, end) -> CommissionCalculation:
        normalized: NormalizedRange = normalize_date_range(start, end)
        percentage = get_commission_percentage()

        closed = (
            Property.objects
            .filter(closed_date__gte=normalized.start_date, closed_date__lte=normalized.end_date)
            .order_by('-closed_date', '-id')
            .values('id', 'reference_number', 'property_type', 'price', 'closed_date')
        )

        calc = CommissionCalculation(
            month=normalized.start_date.month,
            year=normalized.start_date.year,
            start_date=normalized.start_str,
            end_date=normalized.end_str,
            commission_percentage=percentage,
        )

        sales_value = Decimal('0')
        rent_value = Decimal('0')
        for row in closed:
            price = Decimal(row['price'])
            if (row['property_type'] or '').lower() == PropertyType.SALE:
                calc.total_sales_count += 1
                sales_value += price
            else:
                calc.total_rent_count += 1
                rent_value += price

            calc.properties.append({
                'id': row['id'],
                'reference_number': row['reference_number'],
                'property_type': row['property_type'],
                'price': quantize_money(price),
                'commission': commission_for(price, percentage),
                'closed_date': row['closed_date'],
            })

        calc.total_properties_count = calc.total_sales_count + calc.total_rent_count
        calc.total_sales_value = quantize_money(sales_value)
        calc.total_rent_value = quantize_money(rent_value)
        calc.total_commission_amount = commission_for(sales_value + rent_value, percentage)

        logger.info(
            f"Commission aggregation {calc.start_date} to {calc.end_date}: "
            f"{calc.total_properties_count} properties, commission {calc.total_commission_amount}"
        )
        return calc


class DailyAggregator:
    """One operator's activity counts for one UTC day."""

    @staticmethod
    def get_operator(operations_id):
        try:
            operator = User.objects.get(pk=operations_id)
        except (User.DoesNotExist, ValueError, TypeError):
            raise InvalidOperatorError(operations_id=operations_id)

        if not operator.is_operations:
            raise InvalidOperatorError(
                'User is not an operations user', operations_id=operations_id
            )
        return operator

    @staticmethod
    def calculate(operations_id, report_date) -> DailyCalculation:
        operator = DailyAggregator.get_operator(operations_id)
        normalized: NormalizedDate = normalize_date(report_date)

        day_start = normalized.date_utc
        next_day_start = day_start_utc(normalized.date + timedelta(days=1))

        properties_added = Property.objects.filter(
            created_at__gte=day_start, created_at__lt=next_day_start
        ).count()

        leads_responded_to = Lead.objects.filter(
            added_by=operator, created_at__gte=day_start, created_at__lt=next_day_start
        ).count()

        # An insert leaves updated_at == created_at, so only real edits count.
        amending_previous_properties = Property.objects.filter(
            updated_at__gte=day_start,
            updated_at__lt=next_day_start,
            updated_at__gt=F('created_at'),
        ).count()

        calc = DailyCalculation(
            operations_id=operator.pk,
            operations_name=operator.display_name,
            report_date=normalized.date_str,
            properties_added=properties_added,
            leads_responded_to=leads_responded_to,
            amending_previous_properties=amending_previous_properties,
        )
        logger.info(
            f"Daily aggregation for operator {operator.pk} on {calc.report_date}: "
            f"{calc.calculated_fields()}"
        )
        return calc
