"""DTOs and schemas for Contact app."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema


@dataclass(frozen=True)
class ContactMessageDTO:
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    subject: str
    message: str
    status: str
    admin_notes: str
    replied_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class ContactPageDTO:
    messages: List[ContactMessageDTO]
    total: int


class ContactIn(Schema):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str


class ContactUpdateIn(Schema):
    status: Optional[str] = None
    admin_notes: Optional[str] = None
