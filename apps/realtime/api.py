"""Realtime event polling."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.http import HttpRequest
from ninja import Router, Schema

from apps.identity.decorators import require_auth

from . import services

router = Router(tags=["Realtime"])


class EventOut(Schema):
    id: int
    channel: str
    action: str
    record_id: str
    payload: Dict[str, Any]
    created_at: datetime


class PollResponse(Schema):
    events: List[EventOut]
    cursor: int


@router.get("/events", response=PollResponse, auth=None)
def poll_events(
    request: HttpRequest,
    after: int = 0,
    channels: Optional[str] = None,
    limit: int = services.DEFAULT_POLL_LIMIT,
):
    """
    Return the caller's events newer than `after`.
    Pass the returned cursor as `after` on the next poll.
    """
    user = require_auth(request)
    events, cursor = services.poll(
        user, after=after, channels=services.parse_channels(channels), limit=limit
    )
    return {"events": events, "cursor": cursor}
