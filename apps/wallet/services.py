"""
Wallet services: balance summary and the refund request workflow.

    pending -> payment_confirmed -> admin_verifying -> approved
                                                    \-> rejected

The balance is debited only on approval, inside one transaction with
the user row locked.
"""
import logging
import secrets
import string
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.email_service import queue_email
from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.core.uploads import RECEIPT_MAX_SIZE, RECEIPT_TYPES, store_upload
from apps.identity.models import User
from apps.identity.services import to_public_user
from apps.notifications.models import NotificationType
from apps.notifications.services import notify, notify_admins

from .dtos import RefundRequestDTO, WalletSummaryDTO, WalletTransactionDTO
from .models import (
    OPEN_REFUND_STATUSES,
    RefundStatus,
    WalletRefundRequest,
    WalletTransaction,
    WalletTransactionType,
)

logger = logging.getLogger(__name__)

MIN_REFUND_AMOUNT = Decimal('50')
MAX_REFUND_AMOUNT = Decimal('10000')
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
RECENT_TRANSACTIONS = 10


def _transaction_to_dto(t: WalletTransaction) -> WalletTransactionDTO:
    return WalletTransactionDTO(
        id=t.id,
        transaction_type=t.transaction_type,
        amount=t.amount,
        balance_after=t.balance_after,
        refund_request_id=t.refund_request_id,
        notes=t.notes,
        created_at=t.created_at,
    )


def _request_to_dto(r: WalletRefundRequest) -> RefundRequestDTO:
    return RefundRequestDTO(
        id=r.id,
        tasker=to_public_user(r.tasker),
        amount=r.amount,
        currency=r.currency,
        reference_code=r.reference_code,
        status=r.status,
        receipt_url=r.receipt_url,
        admin_id=r.admin_id,
        admin_notes=r.admin_notes,
        payment_confirmed_at=r.payment_confirmed_at,
        approved_at=r.approved_at,
        rejected_at=r.rejected_at,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def low_balance_threshold() -> Decimal:
    return Decimal(str(getattr(settings, 'WALLET_LOW_BALANCE_THRESHOLD', 100)))


# =============================================================================
# Ledger
# =============================================================================

def apply_wallet_entry(
    user: User,
    amount: Decimal,
    transaction_type: str,
    notes: str = "",
    refund_request: Optional[WalletRefundRequest] = None,
) -> WalletTransaction:
    """
    Add a signed amount to the user's balance and write the ledger row.
    Must run inside transaction.atomic() with `user` locked.
    """
    new_balance = user.wallet_balance + amount
    if new_balance < 0:
        raise ValidationFailed("wallet.insufficientBalance")
    user.wallet_balance = new_balance
    user.save(update_fields=['wallet_balance', 'updated_at'])
    return WalletTransaction.objects.create(
        user=user,
        transaction_type=transaction_type,
        amount=amount,
        balance_after=new_balance,
        refund_request=refund_request,
        notes=notes[:255],
    )


def get_wallet_summary(user: User) -> WalletSummaryDTO:
    recent = WalletTransaction.objects.filter(user=user)[:RECENT_TRANSACTIONS]
    return WalletSummaryDTO(
        balance=user.wallet_balance,
        currency="MAD",
        recent_transactions=[_transaction_to_dto(t) for t in recent],
        has_open_refund=WalletRefundRequest.objects.filter(
            tasker=user, status__in=OPEN_REFUND_STATUSES
        ).exists(),
    )


def list_wallet_transactions(user: User, limit: int = 50, offset: int = 0) -> List[WalletTransactionDTO]:
    qs = WalletTransaction.objects.filter(user=user)
    return [_transaction_to_dto(t) for t in qs[max(0, offset):max(0, offset) + max(1, min(limit, 200))]]


# =============================================================================
# Tasker side
# =============================================================================

def generate_reference_code(today: Optional[date] = None) -> str:
    """REF-YYYYMMDD-XXXXXX with six uppercase alphanumerics, unique across requests."""
    stamp = (today or timezone.localdate()).strftime("%Y%m%d")
    while True:
        suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(6))
        code = f"REF-{stamp}-{suffix}"
        if not WalletRefundRequest.objects.filter(reference_code=code).exists():
            return code


def create_refund_request(user: User, amount: Decimal) -> RefundRequestDTO:
    """
    Raises:
        PermissionDeniedError: the user is not a tasker
        ValidationFailed: amount out of range or above the balance
        ConflictError: another request is still open
    """
    if not user.is_tasker:
        raise PermissionDeniedError("wallet.taskerOnly")
    if amount is None or not (MIN_REFUND_AMOUNT <= amount <= MAX_REFUND_AMOUNT):
        raise ValidationFailed("wallet.invalidAmount", min=MIN_REFUND_AMOUNT, max=MAX_REFUND_AMOUNT)

    with transaction.atomic():
        user = User.objects.select_for_update().get(id=user.id)
        if amount > user.wallet_balance:
            raise ValidationFailed("wallet.insufficientBalance")
        if WalletRefundRequest.objects.filter(tasker=user, status__in=OPEN_REFUND_STATUSES).exists():
            raise ConflictError("wallet.openRequestExists")

        request = WalletRefundRequest.objects.create(
            tasker=user,
            amount=amount,
            reference_code=generate_reference_code(),
        )

    logger.info(f"Refund request {request.reference_code} created by {user.id} for {amount} MAD")
    notify_admins(
        NotificationType.WALLET_REFUND_REQUEST_CREATED,
        related_refund_id=request.id,
        reference_code=request.reference_code,
        amount=request.amount,
    )
    return _request_to_dto(request)


def _get_request(request_id: UUID, lock: bool = False) -> WalletRefundRequest:
    qs = WalletRefundRequest.objects.select_related('tasker')
    if lock:
        qs = qs.select_for_update(of=('self',))
    try:
        return qs.get(id=request_id)
    except WalletRefundRequest.DoesNotExist:
        raise NotFoundError("wallet.notFound")


def confirm_refund_payment(user: User, request_id: UUID, receipt) -> RefundRequestDTO:
    """Attach the payment receipt to a pending request."""
    with transaction.atomic():
        request = _get_request(request_id, lock=True)
        if request.tasker_id != user.id:
            raise NotFoundError("wallet.notFound")
        if request.status != RefundStatus.PENDING:
            raise ValidationFailed("wallet.invalidStatus", action="confirm", status=request.status)

        request.receipt_url = store_upload(
            receipt, f"refund-receipts/{user.id}", RECEIPT_TYPES, RECEIPT_MAX_SIZE
        )
        request.status = RefundStatus.PAYMENT_CONFIRMED
        request.payment_confirmed_at = timezone.now()
        request.save(update_fields=['receipt_url', 'status', 'payment_confirmed_at', 'updated_at'])

    notify_admins(
        NotificationType.WALLET_REFUND_PAYMENT_CONFIRMED,
        related_refund_id=request.id,
        reference_code=request.reference_code,
    )
    return _request_to_dto(request)


def list_my_refund_requests(user: User) -> List[RefundRequestDTO]:
    qs = WalletRefundRequest.objects.filter(tasker=user).select_related('tasker')
    return [_request_to_dto(r) for r in qs]


# =============================================================================
# Admin side
# =============================================================================

def list_refund_requests(status: Optional[str] = None) -> List[RefundRequestDTO]:
    qs = WalletRefundRequest.objects.select_related('tasker')
    if status:
        qs = qs.filter(status=status)
    return [_request_to_dto(r) for r in qs]


def mark_verifying(admin: User, request_id: UUID, notes: Optional[str] = None) -> RefundRequestDTO:
    with transaction.atomic():
        request = _get_request(request_id, lock=True)
        if request.status not in (RefundStatus.PENDING, RefundStatus.PAYMENT_CONFIRMED):
            raise ValidationFailed("wallet.invalidStatus", action="verify", status=request.status)

        request.status = RefundStatus.ADMIN_VERIFYING
        request.admin = admin
        if notes:
            request.admin_notes = notes.strip()
        request.save(update_fields=['status', 'admin', 'admin_notes', 'updated_at'])

    notify(request.tasker, NotificationType.WALLET_REFUND_VERIFYING,
           related_refund_id=request.id, reference_code=request.reference_code)
    return _request_to_dto(request)


def approve_refund(admin: User, request_id: UUID, notes: Optional[str] = None) -> RefundRequestDTO:
    """
    Debit the tasker's wallet and close the request.

    Raises:
        ValidationFailed: wrong status, or the balance would go negative
    """
    with transaction.atomic():
        request = _get_request(request_id, lock=True)
        if request.status not in (RefundStatus.PAYMENT_CONFIRMED, RefundStatus.ADMIN_VERIFYING):
            raise ValidationFailed("wallet.invalidStatus", action="approve", status=request.status)

        tasker = User.objects.select_for_update().get(id=request.tasker_id)
        apply_wallet_entry(
            tasker,
            -request.amount,
            WalletTransactionType.WITHDRAWAL,
            notes=f"Wallet refund approved. Reference: {request.reference_code}",
            refund_request=request,
        )

        request.status = RefundStatus.APPROVED
        request.admin = admin
        request.admin_notes = (notes or request.admin_notes or "").strip()
        request.approved_at = timezone.now()
        request.save(update_fields=['status', 'admin', 'admin_notes', 'approved_at', 'updated_at'])

    logger.info(f"Refund {request.reference_code} approved by {admin.id}; balance {tasker.wallet_balance}")
    notify(tasker, NotificationType.WALLET_REFUND_APPROVED, related_refund_id=request.id,
           reference_code=request.reference_code, amount=request.amount)
    queue_email(
        tasker.email,
        "refundApproved",
        tasker.preferred_language,
        name=tasker.display_name,
        reference_code=request.reference_code,
        amount=str(request.amount),
        balance=str(tasker.wallet_balance),
    )
    if tasker.wallet_balance < low_balance_threshold():
        notify(tasker, NotificationType.WALLET_LOW_BALANCE, balance=tasker.wallet_balance)

    request.tasker = tasker
    return _request_to_dto(request)


def reject_refund(admin: User, request_id: UUID, notes: Optional[str]) -> RefundRequestDTO:
    notes = (notes or "").strip()
    if not notes:
        raise ValidationFailed("wallet.notesRequired")

    with transaction.atomic():
        request = _get_request(request_id, lock=True)
        if request.status not in OPEN_REFUND_STATUSES:
            raise ValidationFailed("wallet.invalidStatus", action="reject", status=request.status)

        request.status = RefundStatus.REJECTED
        request.admin = admin
        request.admin_notes = notes
        request.rejected_at = timezone.now()
        request.save(update_fields=['status', 'admin', 'admin_notes', 'rejected_at', 'updated_at'])

    logger.info(f"Refund {request.reference_code} rejected by {admin.id}")
    notify(request.tasker, NotificationType.WALLET_REFUND_REJECTED,
           related_refund_id=request.id, reference_code=request.reference_code)
    queue_email(
        request.tasker.email,
        "refundRejected",
        request.tasker.preferred_language,
        name=request.tasker.display_name,
        reference_code=request.reference_code,
        notes=notes,
    )
    return _request_to_dto(request)
