"""DTOs and schemas for Jobs app."""
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import PublicUserDTO
from apps.profiles.dtos import AddressDTO


@dataclass(frozen=True)
class JobDTO:
    id: UUID
    customer: PublicUserDTO
    category_id: int
    category_name: str
    title: str
    description: str
    address: Optional[AddressDTO]
    preferred_date: date
    preferred_time_start: Optional[time]
    preferred_time_end: Optional[time]
    is_flexible: bool
    customer_budget: Decimal
    currency: str
    estimated_duration: Optional[Decimal]
    requirements: str
    max_applications: int
    application_count: int
    status: str
    assigned_tasker: Optional[PublicUserDTO]
    final_price: Optional[Decimal]
    approved_at: Optional[datetime]
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    payment_confirmed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class JobPageDTO:
    jobs: List[JobDTO]
    total: int
    has_more: bool


@dataclass(frozen=True)
class ApplicationDTO:
    id: UUID
    job_id: UUID
    job_title: str
    tasker: PublicUserDTO
    proposed_price: Decimal
    estimated_duration: Decimal
    message: str
    availability: str
    experience_level: str
    status: str
    created_at: datetime


class JobIn(Schema):
    title: str
    description: str
    category_id: int
    preferred_date: date
    address_id: UUID
    customer_budget: Decimal
    preferred_time_start: Optional[time] = None
    preferred_time_end: Optional[time] = None
    is_flexible: bool = False
    estimated_duration: Optional[Decimal] = None
    requirements: Optional[str] = None
    max_applications: int = 3


class JobUpdateIn(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    preferred_date: Optional[date] = None
    address_id: Optional[UUID] = None
    customer_budget: Optional[Decimal] = None
    preferred_time_start: Optional[time] = None
    preferred_time_end: Optional[time] = None
    is_flexible: Optional[bool] = None
    estimated_duration: Optional[Decimal] = None
    requirements: Optional[str] = None
    max_applications: Optional[int] = None


class ApplicationIn(Schema):
    proposed_price: Decimal
    estimated_duration: Decimal
    message: str
    availability: Optional[str] = None
    experience_level: Optional[str] = None
