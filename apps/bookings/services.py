"""
Booking services: creation, the status state machine and the
scheduled reminder/expiry jobs.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.catalog.models import PricingType, ServiceStatus, TaskerService
from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.identity.models import User
from apps.identity.permissions import Permissions, get_user_permissions
from apps.identity.services import to_public_user
from apps.notifications.models import NotificationType
from apps.notifications.services import notify
from apps.profiles.services import address_to_dto, resolve_address

from .dtos import BookingDTO, BookingIn, BookingPageDTO
from .models import (
    OPEN_BOOKING_STATUSES,
    Booking,
    BookingStatus,
    BookingType,
    PaymentMethod,
)

logger = logging.getLogger(__name__)

MIN_DURATION_HOURS = Decimal('0.5')
REQUIREMENTS_LENGTH = (100, 2000)
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

CUSTOMER = "customer"
TASKER = "tasker"
ADMIN = "admin"
EITHER = frozenset({CUSTOMER, TASKER})

# (current, target) -> parties allowed to make the move
TRANSITIONS = {
    (BookingStatus.PENDING, BookingStatus.ACCEPTED): frozenset({TASKER}),
    (BookingStatus.PENDING, BookingStatus.CANCELLED): EITHER,
    (BookingStatus.ACCEPTED, BookingStatus.CONFIRMED): EITHER,
    (BookingStatus.ACCEPTED, BookingStatus.IN_PROGRESS): frozenset({TASKER}),
    (BookingStatus.ACCEPTED, BookingStatus.CANCELLED): EITHER,
    (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS): frozenset({TASKER}),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): EITHER,
    (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED): frozenset({TASKER}),
    (BookingStatus.IN_PROGRESS, BookingStatus.DISPUTED): frozenset({CUSTOMER}),
    (BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED): frozenset({CUSTOMER}),
    (BookingStatus.COMPLETED, BookingStatus.DISPUTED): frozenset({CUSTOMER}),
    (BookingStatus.DISPUTED, BookingStatus.REFUNDED): frozenset({ADMIN}),
    (BookingStatus.DISPUTED, BookingStatus.COMPLETED): frozenset({ADMIN}),
}

NON_CANCELLABLE = (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.DISPUTED)

TIMESTAMP_FIELDS = {
    BookingStatus.ACCEPTED: 'accepted_at',
    BookingStatus.CONFIRMED: 'confirmed_at',
    BookingStatus.IN_PROGRESS: 'started_at',
    BookingStatus.COMPLETED: 'completed_at',
    BookingStatus.CANCELLED: 'cancelled_at',
}


def to_dto(b: Booking) -> BookingDTO:
    return BookingDTO(
        id=b.id,
        customer=to_public_user(b.customer),
        tasker=to_public_user(b.tasker),
        service_id=b.service_id,
        service_title=b.service_title,
        address=address_to_dto(b.address) if b.address else None,
        booking_type=b.booking_type,
        status=b.status,
        scheduled_date=b.scheduled_date,
        scheduled_time_start=b.scheduled_time_start,
        scheduled_time_end=b.scheduled_time_end,
        estimated_duration=b.estimated_duration,
        agreed_price=b.agreed_price,
        currency=b.currency,
        payment_method=b.payment_method,
        customer_requirements=b.customer_requirements,
        cancellation_reason=b.cancellation_reason,
        cancelled_by_id=b.cancelled_by_id,
        accepted_at=b.accepted_at,
        confirmed_at=b.confirmed_at,
        started_at=b.started_at,
        completed_at=b.completed_at,
        cancelled_at=b.cancelled_at,
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


def _booking_qs():
    return Booking.objects.select_related('customer', 'tasker', 'address')


# =============================================================================
# Create
# =============================================================================

def _validate_schedule(data: BookingIn, today: date) -> None:
    if data.booking_type == BookingType.SCHEDULED:
        if not (data.scheduled_date and data.scheduled_time_start and data.scheduled_time_end):
            raise ValidationFailed("bookings.dateRequired")
    if data.scheduled_date and data.scheduled_date < today:
        raise ValidationFailed("bookings.pastDate")
    if (data.scheduled_time_start and data.scheduled_time_end
            and data.scheduled_time_start >= data.scheduled_time_end):
        raise ValidationFailed("bookings.invalidTimes")


def _validate_duration(service: TaskerService, duration: Optional[Decimal]) -> None:
    if duration is not None and duration < MIN_DURATION_HOURS:
        raise ValidationFailed("bookings.invalidDuration")
    if service.pricing_type == PricingType.HOURLY and service.minimum_duration:
        if duration is None or duration < service.minimum_duration:
            raise ValidationFailed("bookings.durationTooShort", minimum=service.minimum_duration)


def _validate_requirements(text: Optional[str]) -> str:
    text = (text or "").strip()
    if text:
        low, high = REQUIREMENTS_LENGTH
        if not (low <= len(text) <= high):
            raise ValidationFailed("bookings.requirementsLength")
    return text


def create_booking(customer: User, data: BookingIn) -> BookingDTO:
    """
    Book a tasker service.

    Raises:
        NotFoundError: unknown service or address
        ValidationFailed: invalid price, schedule, duration or requirements
        ConflictError: the customer already has an open booking for this service
    """
    try:
        service = TaskerService.objects.select_related('tasker').get(id=data.service_id)
    except TaskerService.DoesNotExist:
        raise NotFoundError("bookings.serviceNotFound")

    if service.service_status != ServiceStatus.ACTIVE or not service.tasker.is_active:
        raise ValidationFailed("bookings.serviceInactive")
    if service.tasker_id == customer.id:
        raise ValidationFailed("bookings.ownService")
    if data.agreed_price is None or data.agreed_price <= 0:
        raise ValidationFailed("bookings.invalidPrice")
    if data.booking_type not in BookingType.values:
        raise ValidationFailed("bookings.invalidBookingType")
    if data.payment_method not in PaymentMethod.values:
        raise ValidationFailed("bookings.invalidPaymentMethod")

    _validate_schedule(data, timezone.localdate())
    _validate_duration(service, data.estimated_duration)
    requirements = _validate_requirements(data.customer_requirements)

    if service.price and data.agreed_price < service.price:
        logger.info(
            f"Booking for service {service.id} below listed price: "
            f"{data.agreed_price} < {service.price}"
        )

    address = resolve_address(customer, data.address_id)
    if address is None:
        if data.address_id:
            raise NotFoundError("bookings.addressNotFound")
        raise ValidationFailed("bookings.addressRequired")

    with transaction.atomic():
        # Lock the customer row so two concurrent requests cannot both pass the check
        User.objects.select_for_update().filter(id=customer.id).first()
        if Booking.objects.filter(
            customer=customer, service=service, status__in=OPEN_BOOKING_STATUSES
        ).exists():
            raise ConflictError("bookings.alreadyBooked")

        booking = Booking.objects.create(
            customer=customer,
            tasker=service.tasker,
            service=service,
            service_title=service.title,
            address=address,
            booking_type=data.booking_type,
            scheduled_date=data.scheduled_date,
            scheduled_time_start=data.scheduled_time_start,
            scheduled_time_end=data.scheduled_time_end,
            estimated_duration=data.estimated_duration,
            agreed_price=data.agreed_price,
            payment_method=data.payment_method,
            customer_requirements=requirements,
        )

    logger.info(f"Booking {booking.id} created by {customer.id} for service {service.id}")
    notify(
        service.tasker,
        NotificationType.BOOKING_CREATED,
        related_booking_id=booking.id,
        related_service_id=service.id,
        customer_name=customer.display_name,
        service_title=service.title,
    )
    return to_dto(booking)


# =============================================================================
# State machine
# =============================================================================

def _parties(booking: Booking, user: User) -> set:
    parties = set()
    if booking.customer_id == user.id:
        parties.add(CUSTOMER)
    if booking.tasker_id == user.id:
        parties.add(TASKER)
    if Permissions.BOOKING_RESOLVE_DISPUTE in get_user_permissions(user):
        parties.add(ADMIN)
    return parties


def transition_booking(
    user: User,
    booking_id: UUID,
    target: str,
    cancellation_reason: Optional[str] = None,
) -> BookingDTO:
    """
    Move a booking to `target` if the table allows it for the acting party.

    Raises:
        NotFoundError: booking unknown or not visible to the user
        ValidationFailed: the move is not in the transition table
        PermissionDeniedError: the move exists but not for this party
    """
    with transaction.atomic():
        try:
            booking = _booking_qs().select_for_update(of=('self',)).get(id=booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError("bookings.notFound")

        parties = _parties(booking, user)
        if not parties:
            raise NotFoundError("bookings.notFound")

        current = booking.status
        if target == BookingStatus.CANCELLED and current in NON_CANCELLABLE:
            raise ValidationFailed("bookings.cannotCancel")

        allowed = TRANSITIONS.get((current, target))
        if allowed is None:
            raise ValidationFailed("bookings.invalidTransition", current=current, target=target)
        if not (parties & allowed):
            raise PermissionDeniedError("bookings.notAllowed", target=target)

        now = timezone.now()
        booking.status = target
        if target in TIMESTAMP_FIELDS:
            setattr(booking, TIMESTAMP_FIELDS[target], now)
        if target == BookingStatus.CANCELLED:
            booking.cancelled_by = user
            booking.cancellation_reason = (cancellation_reason or "").strip()
        booking.save()

        if target == BookingStatus.COMPLETED:
            _record_payment(booking)
        elif target == BookingStatus.REFUNDED:
            _refund_payment(booking)

    logger.info(f"Booking {booking.id}: {current} -> {target} by {user.id}")
    _notify_transition(booking, user, target)
    return to_dto(booking)


def cancel_booking(user: User, booking_id: UUID, reason: Optional[str] = None) -> BookingDTO:
    return transition_booking(user, booking_id, BookingStatus.CANCELLED, reason)


def _record_payment(booking: Booking) -> None:
    from apps.finance.models import PaymentStatus
    from apps.finance.services import record_job_payment

    status = (
        PaymentStatus.PENDING if booking.payment_method == PaymentMethod.PENDING
        else PaymentStatus.PAID
    )
    record_job_payment(
        payer=booking.customer,
        payee=booking.tasker,
        amount=booking.agreed_price,
        booking=booking,
        payment_status=status,
        description=booking.service_title,
    )


def _refund_payment(booking: Booking) -> None:
    from apps.finance.services import mark_booking_payment_refunded

    mark_booking_payment_refunded(booking)


def _notify_transition(booking: Booking, actor: User, target: str) -> None:
    other = booking.tasker if actor.id == booking.customer_id else booking.customer
    common = dict(related_booking_id=booking.id, related_service_id=booking.service_id)

    if target == BookingStatus.ACCEPTED:
        notify(booking.customer, NotificationType.BOOKING_ACCEPTED,
               service_title=booking.service_title, **common)
    elif target == BookingStatus.CONFIRMED:
        notify(other, NotificationType.BOOKING_CONFIRMED,
               service_title=booking.service_title, **common)
    elif target == BookingStatus.IN_PROGRESS:
        notify(booking.customer, NotificationType.JOB_STARTED,
               title=booking.service_title, **common)
    elif target == BookingStatus.COMPLETED:
        notify(booking.customer, NotificationType.BOOKING_COMPLETED,
               service_title=booking.service_title, **common)
    elif target == BookingStatus.CANCELLED:
        notify(other, NotificationType.BOOKING_CANCELLED,
               service_title=booking.service_title, **common)


# =============================================================================
# Queries
# =============================================================================

def get_booking(user: User, booking_id: UUID) -> BookingDTO:
    """Visible to the two parties and to admins only."""
    try:
        booking = _booking_qs().get(id=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError("bookings.notFound")
    if not _parties(booking, user):
        raise NotFoundError("bookings.notFound")
    return to_dto(booking)


def list_bookings(
    user: User,
    as_role: str = CUSTOMER,
    status: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> BookingPageDTO:
    qs = _booking_qs()
    qs = qs.filter(tasker=user) if as_role == TASKER else qs.filter(customer=user)
    if status:
        qs = qs.filter(status=status)

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)
    total = qs.count()
    page = list(qs.order_by('-created_at')[offset:offset + limit])
    return BookingPageDTO(
        bookings=[to_dto(b) for b in page],
        total=total,
        has_more=offset + len(page) < total,
    )


# =============================================================================
# Scheduled jobs
# =============================================================================

def send_booking_reminders(today: Optional[date] = None) -> int:
    """
    Remind both parties of accepted/confirmed bookings scheduled for tomorrow.
    Each booking is reminded once.
    """
    today = today or timezone.localdate()
    tomorrow = today + timedelta(days=1)
    qs = _booking_qs().filter(
        status__in=(BookingStatus.ACCEPTED, BookingStatus.CONFIRMED),
        scheduled_date=tomorrow,
        reminder_sent_at__isnull=True,
    )

    sent = 0
    for booking in qs:
        for party in (booking.customer, booking.tasker):
            notify(
                party,
                NotificationType.BOOKING_REMINDER,
                related_booking_id=booking.id,
                related_service_id=booking.service_id,
                service_title=booking.service_title,
                date=booking.scheduled_date.isoformat(),
            )
        Booking.objects.filter(id=booking.id).update(reminder_sent_at=timezone.now())
        sent += 1

    logger.info(f"Sent reminders for {sent} bookings scheduled on {tomorrow}")
    return sent


def expire_stale_bookings(today: Optional[date] = None) -> int:
    """Cancel pending bookings whose scheduled date has passed."""
    today = today or timezone.localdate()
    qs = _booking_qs().filter(status=BookingStatus.PENDING, scheduled_date__lt=today)

    expired = 0
    for booking in qs:
        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = timezone.now()
        booking.cancellation_reason = "expired"
        booking.save(update_fields=['status', 'cancelled_at', 'cancellation_reason', 'updated_at'])
        notify(
            booking.customer,
            NotificationType.BOOKING_CANCELLED,
            related_booking_id=booking.id,
            related_service_id=booking.service_id,
            service_title=booking.service_title,
        )
        expired += 1

    logger.info(f"Expired {expired} stale pending bookings")
    return expired

