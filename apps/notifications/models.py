"""Models for Notifications app."""
import uuid
from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    JOB_CREATED = 'job_created', 'Job created'
    JOB_APPROVED = 'job_approved', 'Job approved'
    APPLICATION_RECEIVED = 'application_received', 'Application received'
    APPLICATION_ACCEPTED = 'application_accepted', 'Application accepted'
    JOB_STARTED = 'job_started', 'Job started'
    JOB_COMPLETED = 'job_completed', 'Job completed'
    PAYMENT_RECEIVED = 'payment_received', 'Payment received'
    PAYMENT_CONFIRMED = 'payment_confirmed', 'Payment confirmed'
    PAYMENT_PENDING = 'payment_pending', 'Payment pending'
    MESSAGE_RECEIVED = 'message_received', 'Message received'
    BOOKING_CREATED = 'booking_created', 'Booking created'
    BOOKING_ACCEPTED = 'booking_accepted', 'Booking accepted'
    BOOKING_CONFIRMED = 'booking_confirmed', 'Booking confirmed'
    BOOKING_CANCELLED = 'booking_cancelled', 'Booking cancelled'
    BOOKING_COMPLETED = 'booking_completed', 'Booking completed'
    BOOKING_REMINDER = 'booking_reminder', 'Booking reminder'
    REVIEW_REMINDER = 'review_reminder', 'Review reminder'
    JOB_REVIEW_REMINDER = 'job_review_reminder', 'Job review reminder'
    SERVICE_CREATED = 'service_created', 'Service created'
    SERVICE_UPDATED = 'service_updated', 'Service updated'
    WALLET_REFUND_REQUEST_CREATED = 'wallet_refund_request_created', 'Refund request created'
    WALLET_REFUND_PAYMENT_CONFIRMED = 'wallet_refund_payment_confirmed', 'Refund payment confirmed'
    WALLET_REFUND_VERIFYING = 'wallet_refund_verifying', 'Refund verifying'
    WALLET_REFUND_APPROVED = 'wallet_refund_approved', 'Refund approved'
    WALLET_REFUND_REJECTED = 'wallet_refund_rejected', 'Refund rejected'
    WALLET_LOW_BALANCE = 'wallet_low_balance', 'Low wallet balance'
    REVIEW_RECEIVED = 'review_received', 'Review received'


class Notification(models.Model):
    """
    In-app notification. Title and message are rendered in the recipient's
    language when the notification is created.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
    )
    notification_type = models.CharField(max_length=40, choices=NotificationType.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    is_read = models.BooleanField(default=False)

    # Related records (no FKs to keep apps independent)
    related_job_id = models.UUIDField(null=True, blank=True)
    related_booking_id = models.UUIDField(null=True, blank=True)
    related_service_id = models.UUIDField(null=True, blank=True)
    related_refund_id = models.UUIDField(null=True, blank=True)
    data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read']),
            models.Index(fields=['user', 'notification_type']),
        ]

    def __str__(self):
        return f"{self.notification_type} -> {self.user_id}"
