"""Review endpoints. Listing a tasker's reviews is public."""
from uuid import UUID

from django.http import HttpRequest
from ninja import Router

from apps.identity.decorators import require_permission
from apps.identity.permissions import Permissions

from . import services
from .dtos import RatingSummaryDTO, ReplyIn, ReviewDTO, ReviewIn, ReviewPageDTO

router = Router(tags=["Reviews"])


@router.post("/", response={201: ReviewDTO}, auth=None)
def create_review(request: HttpRequest, payload: ReviewIn):
    user = require_permission(request, Permissions.REVIEW_CREATE)
    return 201, services.create_review(user, payload)


@router.post("/{review_id}/reply", response=ReviewDTO, auth=None)
def reply_to_review(request: HttpRequest, review_id: UUID, payload: ReplyIn):
    user = require_permission(request, Permissions.REVIEW_REPLY)
    return services.reply_to_review(user, review_id, payload.reply)


@router.get("/taskers/{tasker_id}", response=ReviewPageDTO, auth=None)
def list_tasker_reviews(
    request: HttpRequest,
    tasker_id: UUID,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    return services.list_tasker_reviews(tasker_id, limit=limit, offset=offset)


@router.get("/taskers/{tasker_id}/summary", response=RatingSummaryDTO, auth=None)
def tasker_rating_summary(request: HttpRequest, tasker_id: UUID):
    return services.get_rating_summary(tasker_id)


@router.get("/bookings/{booking_id}", response=ReviewDTO, auth=None)
def review_for_booking(request: HttpRequest, booking_id: UUID):
    return services.get_review_for_booking(booking_id)
