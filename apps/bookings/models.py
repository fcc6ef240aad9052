"""Models for Bookings app."""
import uuid
from django.conf import settings
from django.db import models


class BookingStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    CONFIRMED = 'confirmed', 'Confirmed'
    IN_PROGRESS = 'in_progress', 'In progress'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    DISPUTED = 'disputed', 'Disputed'
    REFUNDED = 'refunded', 'Refunded'


class BookingType(models.TextChoices):
    INSTANT = 'instant', 'Instant'
    SCHEDULED = 'scheduled', 'Scheduled'
    RECURRING = 'recurring', 'Recurring'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    ONLINE = 'online', 'Online'
    WALLET = 'wallet', 'Wallet'
    PENDING = 'pending', 'Pending'


# A customer may hold only one of these per service
OPEN_BOOKING_STATUSES = (
    BookingStatus.PENDING,
    BookingStatus.ACCEPTED,
    BookingStatus.CONFIRMED,
)

# Bookings that still tie up the service
ACTIVE_BOOKING_STATUSES = OPEN_BOOKING_STATUSES + (BookingStatus.IN_PROGRESS,)


class Booking(models.Model):
    """
    A customer's booking of a tasker service.
    Status only moves through bookings.services.transition_booking().
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='customer_bookings',
    )
    tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tasker_bookings',
    )
    service = models.ForeignKey(
        'catalog.TaskerService',
        on_delete=models.SET_NULL,
        null=True,
        related_name='bookings',
    )
    service_title = models.CharField(max_length=100, help_text="Title at booking time")
    address = models.ForeignKey(
        'profiles.Address',
        on_delete=models.SET_NULL,
        null=True,
        related_name='bookings',
    )

    booking_type = models.CharField(
        max_length=20,
        choices=BookingType.choices,
        default=BookingType.INSTANT,
    )
    status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.PENDING,
        db_index=True,
    )
    scheduled_date = models.DateField(null=True, blank=True, db_index=True)
    scheduled_time_start = models.TimeField(null=True, blank=True)
    scheduled_time_end = models.TimeField(null=True, blank=True)
    estimated_duration = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)

    agreed_price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='MAD')
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH,
    )
    customer_requirements = models.TextField(blank=True)

    cancellation_reason = models.TextField(blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )

    accepted_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)
    review_reminder_sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', 'status']),
            models.Index(fields=['tasker', 'status']),
        ]

    def __str__(self):
        return f"Booking {self.id} ({self.status})"
