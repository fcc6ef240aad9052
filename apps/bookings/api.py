"""
Booking endpoints. Customers create bookings; both parties move them
through their status flow; admins resolve disputes.
"""
from typing import Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router

from apps.identity.decorators import require_auth, require_permission
from apps.identity.permissions import Permissions

from . import services
from .dtos import BookingDTO, BookingIn, BookingPageDTO, BookingStatusIn, CancelBookingIn

router = Router(tags=["Bookings"])


@router.post("/", response={201: BookingDTO}, auth=None)
def create_booking(request: HttpRequest, payload: BookingIn):
    user = require_permission(request, Permissions.BOOKING_CREATE)
    return 201, services.create_booking(user, payload)


@router.get("/", response=BookingPageDTO, auth=None)
def list_bookings(
    request: HttpRequest,
    role: str = services.CUSTOMER,
    status: Optional[str] = None,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    """List the caller's bookings as customer (default) or as tasker."""
    user = require_auth(request)
    return services.list_bookings(user, as_role=role, status=status, limit=limit, offset=offset)


@router.get("/{booking_id}", response=BookingDTO, auth=None)
def get_booking(request: HttpRequest, booking_id: UUID):
    user = require_auth(request)
    return services.get_booking(user, booking_id)


@router.post("/{booking_id}/status", response=BookingDTO, auth=None)
def update_booking_status(request: HttpRequest, booking_id: UUID, payload: BookingStatusIn):
    user = require_auth(request)
    return services.transition_booking(
        user, booking_id, payload.status, payload.cancellation_reason
    )


@router.post("/{booking_id}/cancel", response=BookingDTO, auth=None)
def cancel_booking(request: HttpRequest, booking_id: UUID, payload: CancelBookingIn):
    user = require_auth(request)
    return services.cancel_booking(user, booking_id, payload.reason)
