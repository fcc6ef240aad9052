"""DTOs and schemas for Profiles app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from ninja import Schema

from apps.catalog.dtos import ServiceDTO
from apps.reviews.dtos import RatingSummaryDTO


@dataclass(frozen=True)
class AddressDTO:
    id: UUID
    label: str
    street_address: str
    city: str
    region: str
    postal_code: str
    country: str
    latitude: Optional[Decimal]
    longitude: Optional[Decimal]
    is_default: bool
    created_at: datetime


@dataclass(frozen=True)
class TaskerProfileDTO:
    user_id: UUID
    bio: str
    experience_level: str
    service_radius_km: int
    operation_hours: dict
    is_available: bool
    identity_document_url: str
    verification_status: str
    verified_at: Optional[datetime]


@dataclass(frozen=True)
class CompletionItemDTO:
    id: str
    section: str
    required: bool


@dataclass(frozen=True)
class ProfileCompletionDTO:
    completion_percentage: int
    missing_fields: List[CompletionItemDTO]


@dataclass(frozen=True)
class PublicTaskerProfileDTO:
    id: UUID
    first_name: str
    last_name: str
    avatar_url: str
    bio: str
    experience_level: str
    service_radius_km: int
    verification_status: str
    is_available: bool
    member_since: datetime
    rating: RatingSummaryDTO
    services: List[ServiceDTO]


@dataclass(frozen=True)
class UploadResultDTO:
    success: bool
    url: str


class PersonalInfoIn(Schema):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None


class AddressIn(Schema):
    label: str
    street_address: str
    city: str
    region: str
    postal_code: Optional[str] = None
    country: str = "MA"
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    is_default: bool = False


class AddressUpdateIn(Schema):
    label: Optional[str] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None


class DayHours(Schema):
    enabled: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class BecomeTaskerIn(Schema):
    bio: str
    experience_level: str
    service_radius_km: int
    operation_hours: Dict[str, DayHours]
    is_available: bool = True


class TaskerProfileUpdateIn(Schema):
    bio: Optional[str] = None
    experience_level: Optional[str] = None
    service_radius_km: Optional[int] = None
    is_available: Optional[bool] = None
    operation_hours: Optional[Dict[str, DayHours]] = None


class VerificationIn(Schema):
    status: str
