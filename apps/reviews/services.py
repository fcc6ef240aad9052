"""
Review services: customers rate taskers after completed work, taskers
reply once, and a daily sweep reminds customers who have not reviewed.
"""
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Avg, Count, Q
from django.utils import timezone

from apps.bookings.models import Booking, BookingStatus
from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.identity.models import User
from apps.identity.services import to_public_user
from apps.jobs.models import Job, JobStatus
from apps.notifications.models import NotificationType
from apps.notifications.services import notify

from .dtos import RatingSummaryDTO, ReviewDTO, ReviewIn, ReviewPageDTO
from .models import Review

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 2000
REPLY_MAX_LENGTH = 1000
REMINDER_DELAY = timedelta(hours=24)
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def to_dto(review: Review) -> ReviewDTO:
    return ReviewDTO(
        id=review.id,
        booking_id=review.booking_id,
        job_id=review.job_id,
        reviewer=to_public_user(review.reviewer),
        reviewee_id=review.reviewee_id,
        overall_rating=review.overall_rating,
        quality_rating=review.quality_rating,
        communication_rating=review.communication_rating,
        timeliness_rating=review.timeliness_rating,
        comment=review.comment,
        reply=review.reply,
        replied_at=review.replied_at,
        created_at=review.created_at,
    )


def _check_rating(value: Optional[int], field: str, required: bool = False) -> None:
    if value is None:
        if required:
            raise ValidationFailed("reviews.invalidRating", field=field)
        return
    if not 1 <= value <= 5:
        raise ValidationFailed("reviews.invalidRating", field=field)


def _resolve_target(user: User, data: ReviewIn):
    """Return (booking, job, tasker) for the work being reviewed."""
    if data.booking_id:
        try:
            booking = Booking.objects.select_related('tasker').get(id=data.booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError("bookings.notFound")
        if booking.customer_id != user.id:
            raise PermissionDeniedError("reviews.notCustomer")
        if booking.status != BookingStatus.COMPLETED:
            raise ValidationFailed("reviews.notCompleted")
        return booking, None, booking.tasker

    if data.job_id:
        try:
            job = Job.objects.select_related('assigned_tasker').get(id=data.job_id)
        except Job.DoesNotExist:
            raise NotFoundError("jobs.notFound")
        if job.customer_id != user.id:
            raise PermissionDeniedError("reviews.notCustomer")
        if job.status != JobStatus.COMPLETED or job.assigned_tasker is None:
            raise ValidationFailed("reviews.notCompleted")
        return None, job, job.assigned_tasker

    raise ValidationFailed("reviews.targetRequired")


def create_review(user: User, data: ReviewIn) -> ReviewDTO:
    """
    Review a completed booking or job as its customer.

    Raises:
        ValidationFailed: bad ratings/comment, no target, work not completed
        PermissionDeniedError: caller is not the customer
        ConflictError: the booking or job was already reviewed
    """
    _check_rating(data.overall_rating, "overall_rating", required=True)
    _check_rating(data.quality_rating, "quality_rating")
    _check_rating(data.communication_rating, "communication_rating")
    _check_rating(data.timeliness_rating, "timeliness_rating")
    comment = (data.comment or "").strip()
    if len(comment) > COMMENT_MAX_LENGTH:
        raise ValidationFailed("reviews.commentLength")

    booking, job, tasker = _resolve_target(user, data)

    with transaction.atomic():
        existing = Review.objects.filter(booking=booking) if booking else Review.objects.filter(job=job)
        if existing.exists():
            raise ConflictError("reviews.alreadyReviewed")

        review = Review.objects.create(
            booking=booking,
            job=job,
            reviewer=user,
            reviewee=tasker,
            overall_rating=data.overall_rating,
            quality_rating=data.quality_rating,
            communication_rating=data.communication_rating,
            timeliness_rating=data.timeliness_rating,
            comment=comment,
        )

    logger.info(f"Review {review.id} by {user.id} for tasker {tasker.id}: {review.overall_rating}*")
    notify(
        tasker,
        NotificationType.REVIEW_RECEIVED,
        related_booking_id=review.booking_id,
        related_job_id=review.job_id,
        rating=review.overall_rating,
    )
    return to_dto(review)


def reply_to_review(user: User, review_id: UUID, reply: str) -> ReviewDTO:
    reply = (reply or "").strip()
    if not 1 <= len(reply) <= REPLY_MAX_LENGTH:
        raise ValidationFailed("reviews.replyLength")

    with transaction.atomic():
        try:
            review = Review.objects.select_for_update(of=('self',)).select_related('reviewer').get(id=review_id)
        except Review.DoesNotExist:
            raise NotFoundError("reviews.notFound")
        if review.reviewee_id != user.id:
            raise PermissionDeniedError("reviews.notReviewee")
        if review.replied_at is not None:
            raise ConflictError("reviews.alreadyReplied")

        review.reply = reply
        review.replied_at = timezone.now()
        review.save(update_fields=['reply', 'replied_at', 'updated_at'])

    return to_dto(review)


def get_rating_summary(tasker_id: UUID) -> RatingSummaryDTO:
    stats = Review.objects.filter(reviewee_id=tasker_id).aggregate(
        avg=Avg('overall_rating'),
        total=Count('id'),
        replied=Count('id', filter=Q(replied_at__isnull=False)),
        five_star=Count('id', filter=Q(overall_rating=5)),
    )
    total = stats['total'] or 0
    return RatingSummaryDTO(
        avg_rating=round(float(stats['avg'] or 0), 1),
        total_reviews=total,
        response_rate=round(stats['replied'] * 100 / total) if total else 0,
        five_star_count=stats['five_star'] or 0,
    )


def list_tasker_reviews(
    tasker_id: UUID,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> ReviewPageDTO:
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)

    qs = Review.objects.filter(reviewee_id=tasker_id).select_related('reviewer')
    page = list(qs[offset:offset + limit])
    summary = get_rating_summary(tasker_id)
    return ReviewPageDTO(
        reviews=[to_dto(r) for r in page],
        stats=summary,
        has_more=offset + len(page) < summary.total_reviews,
    )


def get_review_for_booking(booking_id: UUID) -> ReviewDTO:
    review = Review.objects.select_related('reviewer').filter(booking_id=booking_id).first()
    if review is None:
        raise NotFoundError("reviews.notFound")
    return to_dto(review)


# =============================================================================
# Scheduled reminders
# =============================================================================

def send_review_reminders(now=None) -> int:
    """
    Remind customers to review work completed more than a day ago.
    Each booking or job is reminded once.
    """
    cutoff = (now or timezone.now()) - REMINDER_DELAY
    sent = 0

    bookings = Booking.objects.select_related('customer').filter(
        status=BookingStatus.COMPLETED,
        completed_at__lte=cutoff,
        review_reminder_sent_at__isnull=True,
        review__isnull=True,
    )
    for booking in bookings:
        notify(
            booking.customer,
            NotificationType.REVIEW_REMINDER,
            related_booking_id=booking.id,
            related_service_id=booking.service_id,
            service_title=booking.service_title,
        )
        Booking.objects.filter(id=booking.id).update(review_reminder_sent_at=timezone.now())
        sent += 1

    jobs = Job.objects.select_related('customer').filter(
        status=JobStatus.COMPLETED,
        completed_at__lte=cutoff,
        review_reminder_sent_at__isnull=True,
        review__isnull=True,
    )
    for job in jobs:
        notify(
            job.customer,
            NotificationType.JOB_REVIEW_REMINDER,
            related_job_id=job.id,
            job_title=job.title,
        )
        Job.objects.filter(id=job.id).update(review_reminder_sent_at=timezone.now())
        sent += 1

    logger.info(f"Sent {sent} review reminders")
    return sent
