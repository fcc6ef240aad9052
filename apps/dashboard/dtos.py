"""DTOs for Dashboard app."""
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from apps.bookings.dtos import BookingDTO
from apps.profiles.dtos import ProfileCompletionDTO


@dataclass(frozen=True)
class TaskerDashboardDTO:
    wallet_balance: Decimal
    total_earnings: Decimal
    month_earnings: Decimal
    active_bookings: int
    completed_bookings: int
    pending_requests: int
    active_services: int
    avg_rating: float
    total_reviews: int
    unread_notifications: int
    unread_messages: int
    profile_completion: ProfileCompletionDTO
    recent_bookings: List[BookingDTO]


@dataclass(frozen=True)
class CustomerDashboardDTO:
    total_bookings: int
    active_bookings: int
    completed_bookings: int
    posted_jobs: int
    active_jobs: int
    total_spent: Decimal
    unread_notifications: int
    unread_messages: int
    profile_completion: ProfileCompletionDTO
    recent_bookings: List[BookingDTO]
