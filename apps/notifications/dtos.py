"""DTOs and schemas for Notifications app."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from ninja import Schema


@dataclass(frozen=True)
class NotificationDTO:
    id: UUID
    notification_type: str
    title: str
    message: str
    is_read: bool
    related_job_id: Optional[UUID]
    related_booking_id: Optional[UUID]
    related_service_id: Optional[UUID]
    related_refund_id: Optional[UUID]
    data: dict
    created_at: datetime
    read_at: Optional[datetime]


@dataclass(frozen=True)
class NotificationPageDTO:
    notifications: List[NotificationDTO]
    total: int
    total_read: int
    total_unread: int
    has_more: bool


@dataclass(frozen=True)
class NotificationStatsDTO:
    total: int
    unread: int
    by_type: Dict[str, int] = field(default_factory=dict)


class BulkUpdateIn(Schema):
    ids: List[UUID]
    action: str
