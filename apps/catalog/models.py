"""Models for Catalog app: services offered by taskers."""
import uuid
from django.conf import settings
from django.db import models


class PricingType(models.TextChoices):
    FIXED = 'fixed', 'Fixed price'
    HOURLY = 'hourly', 'Hourly rate'
    PER_ITEM = 'per_item', 'Per item'


class ServiceStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    PAUSED = 'paused', 'Paused'


class TaskerService(models.Model):
    """
    A service a tasker offers under one subcategory.
    Categories are static (see categories.py) and referenced by id.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='services',
    )
    category_id = models.PositiveIntegerField(db_index=True)
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=2000)

    pricing_type = models.CharField(
        max_length=20,
        choices=PricingType.choices,
        default=PricingType.FIXED,
    )
    base_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    minimum_duration = models.DecimalField(
        max_digits=4, decimal_places=1, null=True, blank=True,
        help_text="Minimum booking length in hours",
    )
    service_area = models.CharField(max_length=255, blank=True)
    extra_fees = models.JSONField(default=list, blank=True)
    portfolio_images = models.JSONField(default=list, blank=True)

    service_status = models.CharField(
        max_length=20,
        choices=ServiceStatus.choices,
        default=ServiceStatus.ACTIVE,
        db_index=True,
    )
    is_promoted = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['service_status', 'category_id']),
        ]

    def __str__(self):
        return self.title

    @property
    def price(self):
        """The price a customer sees: hourly rate for hourly services, else base price."""
        if self.pricing_type == PricingType.HOURLY:
            return self.hourly_rate
        return self.base_price
