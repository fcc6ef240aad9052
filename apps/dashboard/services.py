"""
Dashboard aggregates. Read-only; every number comes from the owning
app's models or services.
"""
from django.db.models import Count, Q

from apps.bookings import services as booking_services
from apps.bookings.models import Booking, BookingStatus
from apps.catalog.models import ServiceStatus, TaskerService
from apps.finance import services as finance_services
from apps.identity.models import User
from apps.jobs.models import Job, JobStatus
from apps.messaging import services as messaging_services
from apps.notifications import services as notification_services
from apps.profiles.services import get_profile_completion
from apps.reviews.services import get_rating_summary

from .dtos import CustomerDashboardDTO, TaskerDashboardDTO

RECENT_BOOKINGS = 5

# Bookings agreed to and not yet finished
ACTIVE_STATUSES = (
    BookingStatus.ACCEPTED,
    BookingStatus.CONFIRMED,
    BookingStatus.IN_PROGRESS,
)

ACTIVE_JOB_STATUSES = (
    JobStatus.ACTIVE,
    JobStatus.ASSIGNED,
    JobStatus.IN_PROGRESS,
)


def _recent_bookings(**filters):
    qs = Booking.objects.select_related('customer', 'tasker', 'address').filter(**filters)
    return [booking_services.to_dto(b) for b in qs[:RECENT_BOOKINGS]]


def get_tasker_dashboard(user: User) -> TaskerDashboardDTO:
    counts = Booking.objects.filter(tasker=user).aggregate(
        active=Count('id', filter=Q(status__in=ACTIVE_STATUSES)),
        completed=Count('id', filter=Q(status=BookingStatus.COMPLETED)),
        pending=Count('id', filter=Q(status=BookingStatus.PENDING)),
    )
    rating = get_rating_summary(user.id)

    return TaskerDashboardDTO(
        wallet_balance=user.wallet_balance,
        total_earnings=finance_services.total_earnings(user),
        month_earnings=finance_services.month_earnings(user),
        active_bookings=counts['active'],
        completed_bookings=counts['completed'],
        pending_requests=counts['pending'],
        active_services=TaskerService.objects.filter(
            tasker=user, service_status=ServiceStatus.ACTIVE
        ).count(),
        avg_rating=rating.avg_rating,
        total_reviews=rating.total_reviews,
        unread_notifications=notification_services.unread_count(user),
        unread_messages=messaging_services.unread_count(user),
        profile_completion=get_profile_completion(user),
        recent_bookings=_recent_bookings(tasker=user),
    )


def get_customer_dashboard(user: User) -> CustomerDashboardDTO:
    bookings = Booking.objects.filter(customer=user).aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status__in=ACTIVE_STATUSES)),
        completed=Count('id', filter=Q(status=BookingStatus.COMPLETED)),
    )
    jobs = Job.objects.filter(customer=user).aggregate(
        posted=Count('id'),
        active=Count('id', filter=Q(status__in=ACTIVE_JOB_STATUSES)),
    )

    return CustomerDashboardDTO(
        total_bookings=bookings['total'],
        active_bookings=bookings['active'],
        completed_bookings=bookings['completed'],
        posted_jobs=jobs['posted'],
        active_jobs=jobs['active'],
        total_spent=finance_services.total_spent(user),
        unread_notifications=notification_services.unread_count(user),
        unread_messages=messaging_services.unread_count(user),
        profile_completion=get_profile_completion(user),
        recent_bookings=_recent_bookings(customer=user),
    )
