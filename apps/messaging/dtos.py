"""DTOs and schemas for Messaging app."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import PublicUserDTO


@dataclass(frozen=True)
class MessageDTO:
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    is_read: bool
    created_at: datetime


@dataclass(frozen=True)
class ConversationDTO:
    id: UUID
    other_participant: PublicUserDTO
    job_id: Optional[UUID]
    service_id: Optional[UUID]
    booking_id: Optional[UUID]
    last_message: Optional[MessageDTO]
    last_message_at: Optional[datetime]
    unread_count: int
    created_at: datetime


@dataclass(frozen=True)
class MessagePageDTO:
    messages: List[MessageDTO]
    total: int
    has_more: bool


class StartConversationIn(Schema):
    recipient_id: UUID
    initial_message: str
    job_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    booking_id: Optional[UUID] = None


class SendMessageIn(Schema):
    content: str
