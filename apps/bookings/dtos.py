"""DTOs and schemas for Bookings app."""
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import PublicUserDTO
from apps.profiles.dtos import AddressDTO


@dataclass(frozen=True)
class BookingDTO:
    id: UUID
    customer: PublicUserDTO
    tasker: PublicUserDTO
    service_id: Optional[UUID]
    service_title: str
    address: Optional[AddressDTO]
    booking_type: str
    status: str
    scheduled_date: Optional[date]
    scheduled_time_start: Optional[time]
    scheduled_time_end: Optional[time]
    estimated_duration: Optional[Decimal]
    agreed_price: Decimal
    currency: str
    payment_method: str
    customer_requirements: str
    cancellation_reason: str
    cancelled_by_id: Optional[UUID]
    accepted_at: Optional[datetime]
    confirmed_at: Optional[datetime]
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BookingPageDTO:
    bookings: List[BookingDTO]
    total: int
    has_more: bool


class BookingIn(Schema):
    service_id: UUID
    agreed_price: Decimal
    booking_type: str = "instant"
    payment_method: str = "cash"
    scheduled_date: Optional[date] = None
    scheduled_time_start: Optional[time] = None
    scheduled_time_end: Optional[time] = None
    estimated_duration: Optional[Decimal] = None
    customer_requirements: Optional[str] = None
    address_id: Optional[UUID] = None


class BookingStatusIn(Schema):
    status: str
    cancellation_reason: Optional[str] = None


class CancelBookingIn(Schema):
    reason: Optional[str] = None
