"""
Report Models
Persisted operations reports. Aggregate values are snapshots written by
reports.services; the property breakdown is never stored.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from .dates import month_range


class OperationsCommissionReport(models.Model):
    """
    Commission totals for closed properties in an inclusive date range.

    Business Rules:
    - One report per (start_date, end_date)
    - end_date >= start_date
    - month/year mirror start_date for legacy month-based filtering
    """
    month = models.PositiveSmallIntegerField(help_text="Month of start_date (1-12)")
    year = models.PositiveSmallIntegerField(help_text="Year of start_date")
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)

    commission_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('4.00'),
        help_text="Percentage applied to closed property prices (e.g., 4.00 for 4%)"
    )

    total_properties_count = models.PositiveIntegerField(default=0)
    total_sales_count = models.PositiveIntegerField(default=0)
    total_rent_count = models.PositiveIntegerField(default=0)
    total_sales_value = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0)]
    )
    total_rent_value = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0)]
    )
    total_commission_amount = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0)]
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'operations_commission_reports'
        ordering = ['-start_date', '-end_date']
        constraints = [
            models.UniqueConstraint(
                fields=['start_date', 'end_date'],
                name='unique_commission_report_range'
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F('start_date')),
                name='commission_report_end_after_start'
            ),
        ]
        indexes = [
            models.Index(fields=['year', 'month'], name='idx_commission_year_month'),
        ]

    def __str__(self):
        start, end = self.resolved_range()
        return f"Operations commission {start} to {end}"

    def resolved_range(self):
        """
        Return (start_date, end_date). Rows created before ranges existed
        only carry month/year and resolve to that calendar month.
        """
        if self.start_date and self.end_date:
            return self.start_date, self.end_date
        return month_range(self.year, self.month)


class OperationsDailyReport(models.Model):
    """
    One operator's activity for one UTC day.

    Calculated fields come from DailyAggregator and are refreshed by
    recalculation. Manual fields are entered by hand, may be negative, and
    survive recalculation.
    """
    operations = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='operations_daily_reports'
    )
    operations_name = models.CharField(
        max_length=255,
        help_text="Operator name at the time the report was created"
    )
    report_date = models.DateField(db_index=True)

    # Calculated
    properties_added = models.PositiveIntegerField(default=0)
    leads_responded_to = models.PositiveIntegerField(default=0)
    amending_previous_properties = models.PositiveIntegerField(default=0)

    # Manual
    preparing_contract = models.IntegerField(default=0)
    tasks_efficiency_duty_time = models.IntegerField(default=0)
    tasks_efficiency_uniform = models.IntegerField(default=0)
    tasks_efficiency_after_duty = models.IntegerField(default=0)
    leads_responded_out_of_duty_time = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    CALCULATED_FIELDS = (
        'properties_added',
        'leads_responded_to',
        'amending_previous_properties',
    )
    MANUAL_FIELDS = (
        'preparing_contract',
        'tasks_efficiency_duty_time',
        'tasks_efficiency_uniform',
        'tasks_efficiency_after_duty',
        'leads_responded_out_of_duty_time',
    )

    class Meta:
        db_table = 'operations_daily_reports'
        ordering = ['-report_date', 'operations_name']
        constraints = [
            models.UniqueConstraint(
                fields=['operations', 'report_date'],
                name='unique_daily_report_operator_date'
            ),
        ]

    def __str__(self):
        return f"{self.operations_name} - {self.report_date}"

    @property
    def effective_leads_responded(self) -> int:
        """Leads responded during duty time; never negative."""
        return max(0, self.leads_responded_to - self.leads_responded_out_of_duty_time)
