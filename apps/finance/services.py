"""
Finance services: recording payments and summarising a user's earnings.

Only paid transactions count towards earnings. No platform fee is taken,
so net_amount equals amount.
"""
import logging
from collections import OrderedDict
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from django.db.models import Sum
from django.utils import timezone

from apps.core.errors import ValidationFailed
from apps.identity.models import User

from .dtos import EarningsPointDTO, FinanceStatsDTO, TransactionDTO, TransactionPageDTO
from .models import PaymentStatus, Transaction, TransactionType

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# period -> number of buckets returned by default
PERIOD_LIMITS = {"day": 30, "week": 12, "month": 12}


def _to_dto(t: Transaction) -> TransactionDTO:
    return TransactionDTO(
        id=t.id,
        transaction_type=t.transaction_type,
        payment_status=t.payment_status,
        amount=t.amount,
        net_amount=t.net_amount,
        currency=t.currency,
        payer_id=t.payer_id,
        payer_name=t.payer.display_name if t.payer else "",
        payee_id=t.payee_id,
        booking_id=t.booking_id,
        job_id=t.job_id,
        description=t.description,
        processed_at=t.processed_at,
        created_at=t.created_at,
    )


# =============================================================================
# Recording
# =============================================================================

def record_job_payment(
    payer: User,
    payee: User,
    amount: Decimal,
    booking=None,
    job=None,
    payment_status: str = PaymentStatus.PAID,
    description: str = "",
) -> Transaction:
    """
    Record a job payment from customer to tasker.
    A booking or job is paid at most once; repeated calls return the first row.
    """
    existing = Transaction.objects.filter(transaction_type=TransactionType.JOB_PAYMENT)
    if booking is not None:
        existing = existing.filter(booking=booking)
    elif job is not None:
        existing = existing.filter(job=job)
    else:
        existing = Transaction.objects.none()

    found = existing.first()
    if found is not None:
        return found

    transaction = Transaction.objects.create(
        transaction_type=TransactionType.JOB_PAYMENT,
        payment_status=payment_status,
        amount=amount,
        net_amount=amount,
        payer=payer,
        payee=payee,
        booking=booking,
        job=job,
        description=description[:255],
        processed_at=timezone.now() if payment_status == PaymentStatus.PAID else None,
    )
    logger.info(f"Recorded {payment_status} job payment {transaction.id} of {amount} MAD")
    return transaction


def mark_booking_payment_refunded(booking) -> int:
    updated = 0
    for t in Transaction.objects.filter(booking=booking, transaction_type=TransactionType.JOB_PAYMENT):
        t.payment_status = PaymentStatus.REFUNDED
        t.save(update_fields=['payment_status'])
        updated += 1
    return updated


# =============================================================================
# Queries
# =============================================================================

def list_transactions(
    user: User,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> TransactionPageDTO:
    qs = Transaction.objects.filter(payee=user).select_related('payer')
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)
    total = qs.count()
    page = list(qs[offset:offset + limit])
    return TransactionPageDTO(
        transactions=[_to_dto(t) for t in page],
        total=total,
        has_more=offset + len(page) < total,
    )


def _paid_received(user: User):
    return Transaction.objects.filter(payee=user, payment_status=PaymentStatus.PAID)


def _sum(qs) -> Decimal:
    return qs.aggregate(total=Sum('net_amount'))['total'] or ZERO


def _between(qs, start: date, end: date) -> Decimal:
    """Sum of rows created on days start..end inclusive (local time)."""
    return _sum(qs.filter(created_at__date__gte=start, created_at__date__lte=end))


def get_stats(user: User, today: Optional[date] = None) -> FinanceStatsDTO:
    today = today or timezone.localdate()
    qs = _paid_received(user)

    yesterday = today - timedelta(days=1)
    week_start = today - timedelta(days=today.weekday())
    last_week_start = week_start - timedelta(days=7)
    month_start = today.replace(day=1)
    last_month_end = month_start - timedelta(days=1)
    last_month_start = last_month_end.replace(day=1)

    return FinanceStatsDTO(
        today=_between(qs, today, today),
        yesterday=_between(qs, yesterday, yesterday),
        this_week=_between(qs, week_start, today),
        last_week=_between(qs, last_week_start, week_start - timedelta(days=1)),
        this_month=_between(qs, month_start, today),
        last_month=_between(qs, last_month_start, last_month_end),
        total=_sum(qs),
    )


def _period_key(day: date, period: str) -> str:
    if period == "day":
        return day.isoformat()
    if period == "week":
        year, week, _ = day.isocalendar()
        return f"{year}-W{week:02d}"
    return f"{day.year}-{day.month:02d}"


def get_earnings_by_period(
    user: User,
    period: str = "month",
    limit: Optional[int] = None,
) -> List[EarningsPointDTO]:
    """
    Paid earnings grouped by day (YYYY-MM-DD), ISO week (YYYY-Www) or
    month (YYYY-MM). Keys are ascending and only the last `limit` are kept.
    """
    if period not in PERIOD_LIMITS:
        raise ValidationFailed("finance.invalidPeriod")
    limit = limit or PERIOD_LIMITS[period]

    buckets = {}
    for created_at, amount in _paid_received(user).values_list('created_at', 'net_amount'):
        key = _period_key(timezone.localtime(created_at).date(), period)
        total, count = buckets.get(key, (ZERO, 0))
        buckets[key] = (total + amount, count + 1)

    ordered = OrderedDict(sorted(buckets.items()))
    keys = list(ordered)[-limit:]
    return [
        EarningsPointDTO(period=k, amount=ordered[k][0], count=ordered[k][1])
        for k in keys
    ]


def total_earnings(user: User) -> Decimal:
    return _sum(_paid_received(user))


def month_earnings(user: User, today: Optional[date] = None) -> Decimal:
    today = today or timezone.localdate()
    return _between(_paid_received(user), today.replace(day=1), today)


def total_spent(user: User) -> Decimal:
    return _sum(Transaction.objects.filter(payer=user, payment_status=PaymentStatus.PAID))

