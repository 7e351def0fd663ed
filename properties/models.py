"""
Properties Models
Listings and leads. Report aggregation reads these tables.
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class PropertyType(models.TextChoices):
    SALE = 'sale', 'Sale'
    RENT = 'rent', 'Rent'


class Property(models.Model):
    """
    A listing handled by the agency. Closed listings (closed_date set) feed
    the operations commission report.
    """
    reference_number = models.CharField(max_length=50, unique=True)
    property_type = models.CharField(max_length=10, choices=PropertyType.choices)
    price = models.DecimalField(
        max_digits=14, decimal_places=2, validators=[MinValueValidator(0)]
    )
    building_name = models.CharField(max_length=255, blank=True)
    location = models.CharField(max_length=255, blank=True)
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_properties'
    )
    closed_date = models.DateField(null=True, blank=True, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_properties'
    )
    created_at = models.DateTimeField(editable=False, db_index=True)
    updated_at = models.DateTimeField(editable=False, db_index=True)

    class Meta:
        db_table = 'properties'
        verbose_name_plural = 'properties'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.reference_number} ({self.get_property_type_display()})"

    def save(self, *args, **kwargs):
        self.full_clean()
        # Inserts get created_at == updated_at; later saves move updated_at only.
        if self._state.adding:
            self.created_at = self.created_at or timezone.now()
            self.updated_at = self.updated_at or self.created_at
        else:
            self.updated_at = timezone.now()
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'updated_at' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['updated_at']
        super().save(*args, **kwargs)

    @property
    def display_label(self) -> str:
        return self.building_name or self.location or self.reference_number

    @property
    def is_sale(self) -> bool:
        return (self.property_type or '').lower() == PropertyType.SALE


class Lead(models.Model):
    customer_name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=50, default='new')
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_leads'
    )
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='added_leads',
        help_text='Operations user who responded to the lead'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'leads'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['added_by', 'created_at'], name='idx_lead_added_by_created'),
        ]

    def __str__(self):
        return f"{self.customer_name} ({self.status})"
