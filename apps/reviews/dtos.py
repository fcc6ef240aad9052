"""DTOs and schemas for Reviews app."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import PublicUserDTO


@dataclass(frozen=True)
class RatingSummaryDTO:
    avg_rating: float
    total_reviews: int
    response_rate: int
    five_star_count: int


@dataclass(frozen=True)
class ReviewDTO:
    id: UUID
    booking_id: Optional[UUID]
    job_id: Optional[UUID]
    reviewer: PublicUserDTO
    reviewee_id: UUID
    overall_rating: int
    quality_rating: Optional[int]
    communication_rating: Optional[int]
    timeliness_rating: Optional[int]
    comment: str
    reply: str
    replied_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class ReviewPageDTO:
    reviews: List[ReviewDTO]
    stats: RatingSummaryDTO
    has_more: bool


class ReviewIn(Schema):
    booking_id: Optional[UUID] = None
    job_id: Optional[UUID] = None
    overall_rating: int
    quality_rating: Optional[int] = None
    communication_rating: Optional[int] = None
    timeliness_rating: Optional[int] = None
    comment: str = ""


class ReplyIn(Schema):
    reply: str
