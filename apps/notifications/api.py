"""Notification endpoints for the current user."""
from typing import Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router, Schema

from apps.identity.decorators import require_auth

from . import services
from .dtos import BulkUpdateIn, NotificationDTO, NotificationPageDTO, NotificationStatsDTO

router = Router(tags=["Notifications"])


class CountResponse(Schema):
    success: bool
    count: int


class SuccessResponse(Schema):
    success: bool


@router.get("/", response=NotificationPageDTO, auth=None)
def list_notifications(
    request: HttpRequest,
    is_read: Optional[bool] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "newest",
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    user = require_auth(request)
    return services.list_notifications(
        user,
        is_read=is_read,
        notification_type=type,
        search=search,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response=NotificationStatsDTO, auth=None)
def notification_stats(request: HttpRequest):
    user = require_auth(request)
    return services.get_stats(user)


@router.post("/read-all", response=CountResponse, auth=None)
def mark_all_read(request: HttpRequest):
    user = require_auth(request)
    return {"success": True, "count": services.mark_all_read(user)}


@router.post("/bulk", response=CountResponse, auth=None)
def bulk_update(request: HttpRequest, payload: BulkUpdateIn):
    """Mark read, mark unread or delete several notifications at once."""
    user = require_auth(request)
    return {"success": True, "count": services.bulk_update(user, payload.ids, payload.action)}


@router.post("/{notification_id}/read", response=NotificationDTO, auth=None)
def mark_read(request: HttpRequest, notification_id: UUID):
    user = require_auth(request)
    return services.mark_read(user, notification_id)


@router.post("/{notification_id}/unread", response=NotificationDTO, auth=None)
def mark_unread(request: HttpRequest, notification_id: UUID):
    user = require_auth(request)
    return services.mark_unread(user, notification_id)


@router.delete("/{notification_id}", response=SuccessResponse, auth=None)
def delete_notification(request: HttpRequest, notification_id: UUID):
    user = require_auth(request)
    services.delete_notification(user, notification_id)
    return {"success": True}
