"""Realtime outbox: publishing, polling and pruning."""
import logging
from datetime import timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Channel, RealtimeEvent

logger = logging.getLogger(__name__)

DEFAULT_POLL_LIMIT = 100
MAX_POLL_LIMIT = 500


def publish(
    user_ids: Iterable,
    channel: str,
    action: str,
    record_id,
    payload: Optional[dict] = None,
) -> List[RealtimeEvent]:
    """
    Write one event per distinct recipient. Never raises.
    """
    try:
        recipients = []
        for user_id in user_ids:
            if user_id and user_id not in recipients:
                recipients.append(user_id)
        # Savepoint: a failed insert must not abort the caller's transaction
        with transaction.atomic():
            return RealtimeEvent.objects.bulk_create([
                RealtimeEvent(
                    user_id=user_id,
                    channel=channel,
                    action=action,
                    record_id=str(record_id),
                    payload=payload or {},
                )
                for user_id in recipients
            ])
    except Exception as e:
        logger.exception(f"Failed to publish {channel}:{action} for {record_id}: {e}")
        return []


def publish_on_commit(
    user_ids: Iterable,
    channel: str,
    action: str,
    record_id,
    payload: Optional[dict] = None,
) -> None:
    """
    Publish once the surrounding transaction commits, and not at all if it
    rolls back. Outside a transaction the event is written right away.
    """
    user_ids = list(user_ids)
    transaction.on_commit(lambda: publish(user_ids, channel, action, record_id, payload))


def parse_channels(channels: Optional[str]) -> Optional[List[str]]:
    """'bookings, messages' -> ['bookings', 'messages']; unknown names are dropped."""
    if not channels:
        return None
    return [c.strip() for c in channels.split(',') if c.strip() in Channel.values]


def poll(
    user,
    after: int = 0,
    channels: Optional[List[str]] = None,
    limit: int = DEFAULT_POLL_LIMIT,
    settle_seconds: Optional[int] = None,
):
    """
    Events for `user` with id > after, in id order.

    Ids are handed out before commit, so a lower id can become visible after
    a higher one. Events younger than the settle window are held back until
    every id below them has had time to commit.

    Returns:
        (events, cursor) where cursor is the id to pass as `after` next time.
    """
    if settle_seconds is None:
        settle_seconds = getattr(settings, 'REALTIME_SETTLE_SECONDS', 2)
    after = max(after or 0, 0)
    limit = max(1, min(limit or DEFAULT_POLL_LIMIT, MAX_POLL_LIMIT))

    qs = RealtimeEvent.objects.filter(user_id=user.id, id__gt=after)
    if settle_seconds > 0:
        qs = qs.filter(created_at__lte=timezone.now() - timedelta(seconds=settle_seconds))
    if channels is not None:
        qs = qs.filter(channel__in=channels)
    events = list(qs.order_by('id')[:limit])
    cursor = events[-1].id if events else after
    return events, cursor


def prune_events(retention_hours: Optional[int] = None) -> int:
    hours = retention_hours or getattr(settings, 'REALTIME_EVENT_RETENTION_HOURS', 24)
    cutoff = timezone.now() - timedelta(hours=hours)
    deleted, _ = RealtimeEvent.objects.filter(created_at__lt=cutoff).delete()
    logger.info(f"Pruned {deleted} realtime events older than {hours}h")
    return deleted
