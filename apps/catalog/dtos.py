"""DTOs and schemas for Catalog app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ninja import Schema


@dataclass(frozen=True)
class CategoryDTO:
    id: int
    parent_id: Optional[int]
    name: str
    description: str


@dataclass(frozen=True)
class ServiceDTO:
    id: UUID
    tasker_id: UUID
    tasker_name: str
    tasker_avatar_url: str
    category_id: int
    category_name: str
    title: str
    description: str
    pricing_type: str
    base_price: Optional[Decimal]
    hourly_rate: Optional[Decimal]
    price: Optional[Decimal]
    minimum_duration: Optional[Decimal]
    service_area: str
    extra_fees: list
    portfolio_images: list
    service_status: str
    is_promoted: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ServicePageDTO:
    services: List[ServiceDTO]
    total: int
    has_more: bool


@dataclass(frozen=True)
class InteractionStatusDTO:
    has_open_booking: bool
    booking_id: Optional[UUID]
    has_conversation: bool
    conversation_id: Optional[UUID]


class ExtraFeeIn(Schema):
    name: str
    price: Decimal


class ServiceIn(Schema):
    title: str
    description: str
    category_id: int
    pricing_type: str
    base_price: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    minimum_duration: Optional[Decimal] = None
    service_area: Optional[str] = None
    extra_fees: List[ExtraFeeIn] = []
    portfolio_images: List[str] = []


class ServiceUpdateIn(Schema):
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    pricing_type: Optional[str] = None
    base_price: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    minimum_duration: Optional[Decimal] = None
    service_area: Optional[str] = None
    extra_fees: Optional[List[ExtraFeeIn]] = None
    portfolio_images: Optional[List[str]] = None
