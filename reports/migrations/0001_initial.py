import django.core.validators
import django.db.models.deletion
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='OperationsCommissionReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.PositiveSmallIntegerField(help_text='Month of start_date (1-12)')),
                ('year', models.PositiveSmallIntegerField(help_text='Year of start_date')),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('commission_percentage', models.DecimalField(decimal_places=2, default=Decimal('4.00'), help_text='Percentage applied to closed property prices (e.g., 4.00 for 4%)', max_digits=5)),
                ('total_properties_count', models.PositiveIntegerField(default=0)),
                ('total_sales_count', models.PositiveIntegerField(default=0)),
                ('total_rent_count', models.PositiveIntegerField(default=0)),
                ('total_sales_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14, validators=[django.core.validators.MinValueValidator(0)])),
                ('total_rent_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14, validators=[django.core.validators.MinValueValidator(0)])),
                ('total_commission_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14, validators=[django.core.validators.MinValueValidator(0)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'operations_commission_reports',
                'ordering': ['-start_date', '-end_date'],
                'indexes': [models.Index(fields=['year', 'month'], name='idx_commission_year_month')],
                'constraints': [
                    models.UniqueConstraint(fields=('start_date', 'end_date'), name='unique_commission_report_range'),
                    models.CheckConstraint(condition=models.Q(('end_date__gte', models.F('start_date'))), name='commission_report_end_after_start'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OperationsDailyReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('operations_name', models.CharField(help_text='Operator name at the time the report was created', max_length=255)),
                ('report_date', models.DateField(db_index=True)),
                ('properties_added', models.PositiveIntegerField(default=0)),
                ('leads_responded_to', models.PositiveIntegerField(default=0)),
                ('amending_previous_properties', models.PositiveIntegerField(default=0)),
                ('preparing_contract', models.IntegerField(default=0)),
                ('tasks_efficiency_duty_time', models.IntegerField(default=0)),
                ('tasks_efficiency_uniform', models.IntegerField(default=0)),
                ('tasks_efficiency_after_duty', models.IntegerField(default=0)),
                ('leads_responded_out_of_duty_time', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('operations', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='operations_daily_reports', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'operations_daily_reports',
                'ordering': ['-report_date', 'operations_name'],
                'constraints': [
                    models.UniqueConstraint(fields=('operations', 'report_date'), name='unique_daily_report_operator_date'),
                ],
            },
        ),
    ]
