"""
Notification services.

notify() is called from every feature that informs a user about
something. It renders the title and message in the recipient's
language and never raises, so a notification problem cannot fail the
request that triggered it.
"""
import logging
from typing import Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.errors import NotFoundError, ValidationFailed
from apps.core.i18n import translate
from apps.identity.models import User

from .dtos import NotificationDTO, NotificationPageDTO, NotificationStatsDTO
from .models import Notification, NotificationType

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
BULK_ACTIONS = ("mark_read", "mark_unread", "delete")


def _to_dto(n: Notification) -> NotificationDTO:
    return NotificationDTO(
        id=n.id,
        notification_type=n.notification_type,
        title=n.title,
        message=n.message,
        is_read=n.is_read,
        related_job_id=n.related_job_id,
        related_booking_id=n.related_booking_id,
        related_service_id=n.related_service_id,
        related_refund_id=n.related_refund_id,
        data=n.data,
        created_at=n.created_at,
        read_at=n.read_at,
    )


def _stringify(params: dict) -> dict:
    # JSONField and str.format both want plain values
    return {k: (v if isinstance(v, (str, int, float, bool)) or v is None else str(v))
            for k, v in params.items()}


# =============================================================================
# Producers
# =============================================================================

def notify(
    user: User,
    notification_type: str,
    *,
    related_job_id: Optional[UUID] = None,
    related_booking_id: Optional[UUID] = None,
    related_service_id: Optional[UUID] = None,
    related_refund_id: Optional[UUID] = None,
    **params,
) -> Optional[Notification]:
    """
    Create a notification for `user`, localized to their preferred language.

    Args:
        user:               Recipient.
        notification_type:  One of NotificationType.
        related_*_id:       Optional ids of the record the notification is about.
        **params:           Values interpolated into the catalog message.

    Returns:
        The Notification, or None if it could not be created.
    """
    try:
        if notification_type not in NotificationType.values:
            logger.warning(f"Unknown notification type '{notification_type}'")
            return None

        data = _stringify(params)
        locale = user.preferred_language
        # Savepoint: a failed insert must not abort the caller's transaction
        with transaction.atomic():
            return Notification.objects.create(
                user=user,
                notification_type=notification_type,
                title=translate(f"notifications.types.{notification_type}.title", locale, **data),
                message=translate(f"notifications.types.{notification_type}.message", locale, **data),
                related_job_id=related_job_id,
                related_booking_id=related_booking_id,
                related_service_id=related_service_id,
                related_refund_id=related_refund_id,
                data=data,
            )
    except Exception as e:
        logger.exception(f"Failed to create '{notification_type}' notification: {e}")
        return None


def notify_admins(notification_type: str, **kwargs) -> List[Notification]:
    """Send the same notification to every active admin."""
    from apps.identity.services import list_admins

    created = []
    for admin in list_admins():
        notification = notify(admin, notification_type, **kwargs)
        if notification is not None:
            created.append(notification)
    return created


# =============================================================================
# Queries
# =============================================================================

def list_notifications(
    user: User,
    is_read: Optional[bool] = None,
    notification_type: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "newest",
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> NotificationPageDTO:
    # Totals follow the type and search filters but count both read states
    base = Notification.objects.filter(user=user)
    if notification_type:
        base = base.filter(notification_type=notification_type)
    if search:
        base = base.filter(
            Q(title__icontains=search)
            | Q(message__icontains=search)
            | Q(notification_type__icontains=search)
        )
    counts = base.aggregate(
        total=Count('id'),
        total_read=Count('id', filter=Q(is_read=True)),
    )

    qs = base
    if is_read is not None:
        qs = qs.filter(is_read=is_read)

    qs = qs.order_by('created_at' if sort == "oldest" else '-created_at')
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)
    filtered_total = qs.count()
    page = list(qs[offset:offset + limit])

    return NotificationPageDTO(
        notifications=[_to_dto(n) for n in page],
        total=counts['total'],
        total_read=counts['total_read'],
        total_unread=counts['total'] - counts['total_read'],
        has_more=offset + len(page) < filtered_total,
    )


def get_stats(user: User) -> NotificationStatsDTO:
    qs = Notification.objects.filter(user=user)
    by_type = {
        row['notification_type']: row['count']
        for row in qs.values('notification_type').annotate(count=Count('id')).order_by()
    }
    return NotificationStatsDTO(
        total=sum(by_type.values()),
        unread=qs.filter(is_read=False).count(),
        by_type=by_type,
    )


def unread_count(user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


# =============================================================================
# Actions
# =============================================================================

def _get_owned(user: User, notification_id: UUID) -> Notification:
    try:
        return Notification.objects.get(id=notification_id, user=user)
    except Notification.DoesNotExist:
        raise NotFoundError("notifications.notFound")


def mark_read(user: User, notification_id: UUID) -> NotificationDTO:
    n = _get_owned(user, notification_id)
    if not n.is_read:
        n.is_read = True
        n.read_at = timezone.now()
        n.save(update_fields=['is_read', 'read_at'])
    return _to_dto(n)


def mark_unread(user: User, notification_id: UUID) -> NotificationDTO:
    n = _get_owned(user, notification_id)
    if n.is_read:
        n.is_read = False
        n.read_at = None
        n.save(update_fields=['is_read', 'read_at'])
    return _to_dto(n)


def delete_notification(user: User, notification_id: UUID) -> None:
    _get_owned(user, notification_id).delete()


def mark_all_read(user: User) -> int:
    # Row-by-row save so post_save listeners see every change
    updated = 0
    now = timezone.now()
    for n in Notification.objects.filter(user=user, is_read=False):
        n.is_read = True
        n.read_at = now
        n.save(update_fields=['is_read', 'read_at'])
        updated += 1
    return updated


def bulk_update(user: User, ids: Iterable[UUID], action: str) -> int:
    """Apply `action` to the caller's notifications among `ids`. Returns the count."""
    if action not in BULK_ACTIONS:
        raise ValidationFailed("notifications.invalidAction")

    rows = list(Notification.objects.filter(user=user, id__in=list(ids)))
    if action == "delete":
        for n in rows:
            n.delete()
        return len(rows)

    now = timezone.now()
    for n in rows:
        n.is_read = action == "mark_read"
        n.read_at = now if n.is_read else None
        n.save(update_fields=['is_read', 'read_at'])
    return len(rows)
