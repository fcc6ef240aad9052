"""Models for Wallet app: refund requests and the wallet ledger."""
import uuid
from django.conf import settings
from django.db import models


class RefundStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAYMENT_CONFIRMED = 'payment_confirmed', 'Payment confirmed'
    ADMIN_VERIFYING = 'admin_verifying', 'Admin verifying'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


OPEN_REFUND_STATUSES = (
    RefundStatus.PENDING,
    RefundStatus.PAYMENT_CONFIRMED,
    RefundStatus.ADMIN_VERIFYING,
)


class WalletRefundRequest(models.Model):
    """
    A tasker's request to withdraw wallet balance.
    The balance is only debited when an admin approves.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='refund_requests',
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='MAD')
    reference_code = models.CharField(max_length=20, unique=True)
    status = models.CharField(
        max_length=20,
        choices=RefundStatus.choices,
        default=RefundStatus.PENDING,
        db_index=True,
    )
    receipt_url = models.URLField(max_length=500, blank=True)

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='refunds_handled',
    )
    admin_notes = models.TextField(blank=True)

    payment_confirmed_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.reference_code} ({self.status})"


class WalletTransactionType(models.TextChoices):
    DEPOSIT = 'deposit', 'Deposit'
    WITHDRAWAL = 'withdrawal', 'Withdrawal'
    PAYMENT = 'payment', 'Payment'
    REFUND = 'refund', 'Refund'
    ADJUSTMENT = 'adjustment', 'Adjustment'


class WalletTransaction(models.Model):
    """Append-only wallet ledger. Amounts are signed: debits are negative."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wallet_transactions',
    )
    transaction_type = models.CharField(max_length=20, choices=WalletTransactionType.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)
    refund_request = models.ForeignKey(
        WalletRefundRequest,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='wallet_transactions',
    )
    notes = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.transaction_type} {self.amount} ({self.user_id})"
