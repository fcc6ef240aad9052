"""Models for Finance app: money moving between customers and taskers."""
import uuid
from django.conf import settings
from django.db import models


class TransactionType(models.TextChoices):
    JOB_PAYMENT = 'job_payment', 'Job payment'
    PLATFORM_FEE = 'platform_fee', 'Platform fee'
    PREMIUM_APPLICATION = 'premium_application', 'Premium application'
    REFUND = 'refund', 'Refund'
    JOB_PROMOTION = 'job_promotion', 'Job promotion'
    SERVICE_PROMOTION = 'service_promotion', 'Service promotion'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    FAILED = 'failed', 'Failed'
    REFUNDED = 'refunded', 'Refunded'


class Transaction(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    transaction_type = models.CharField(max_length=30, choices=TransactionType.choices)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
        db_index=True,
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default='MAD')

    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='payments_made',
    )
    payee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='payments_received',
    )
    booking = models.ForeignKey(
        'bookings.Booking',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions',
    )
    job = models.ForeignKey(
        'jobs.Job',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='transactions',
    )
    description = models.CharField(max_length=255, blank=True)

    processed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['payee', 'payment_status']),
            models.Index(fields=['payer', 'payment_status']),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} {self.currency} ({self.payment_status})"
