"""
Job services: posting and moderation, tasker applications, and the
assigned-work flow through to payment confirmation.
"""
import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.catalog import categories
from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.identity.models import User
from apps.identity.services import to_public_user
from apps.notifications.models import NotificationType
from apps.notifications.services import notify
from apps.profiles.models import Address, ExperienceLevel
from apps.profiles.services import address_to_dto

from .dtos import ApplicationDTO, ApplicationIn, JobDTO, JobIn, JobPageDTO, JobUpdateIn
from .models import ApplicationStatus, Job, JobApplication, JobStatus

logger = logging.getLogger(__name__)

TITLE_LENGTH = (5, 100)
DESCRIPTION_LENGTH = (80, 2000)
REQUIREMENTS_MAX = 2000
MAX_APPLICATIONS_RANGE = (1, 10)
MIN_DURATION_HOURS = Decimal('0.5')
MIN_PROPOSED_PRICE = Decimal('1')
MESSAGE_LENGTH = (20, 500)
AVAILABILITY_MAX = 200
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

EDITABLE_STATUSES = (JobStatus.UNDER_REVIEW, JobStatus.ACTIVE)
UNDELETABLE_STATUSES = (JobStatus.IN_PROGRESS, JobStatus.COMPLETED)


def to_dto(job: Job, locale: Optional[str] = None) -> JobDTO:
    category = categories.get_category(job.category_id)
    return JobDTO(
        id=job.id,
        customer=to_public_user(job.customer),
        category_id=job.category_id,
        category_name=category.name(locale) if category else "",
        title=job.title,
        description=job.description,
        address=address_to_dto(job.address) if job.address else None,
        preferred_date=job.preferred_date,
        preferred_time_start=job.preferred_time_start,
        preferred_time_end=job.preferred_time_end,
        is_flexible=job.is_flexible,
        customer_budget=job.customer_budget,
        currency=job.currency,
        estimated_duration=job.estimated_duration,
        requirements=job.requirements,
        max_applications=job.max_applications,
        application_count=job.application_count,
        status=job.status,
        assigned_tasker=to_public_user(job.assigned_tasker) if job.assigned_tasker else None,
        final_price=job.final_price,
        approved_at=job.approved_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        payment_confirmed_at=job.payment_confirmed_at,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def _application_to_dto(a: JobApplication) -> ApplicationDTO:
    return ApplicationDTO(
        id=a.id,
        job_id=a.job_id,
        job_title=a.job.title,
        tasker=to_public_user(a.tasker),
        proposed_price=a.proposed_price,
        estimated_duration=a.estimated_duration,
        message=a.message,
        availability=a.availability,
        experience_level=a.experience_level,
        status=a.status,
        created_at=a.created_at,
    )


def _job_qs():
    return Job.objects.select_related('customer', 'address', 'assigned_tasker')


def _page(qs, limit: int, offset: int, locale: Optional[str]) -> JobPageDTO:
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)
    total = qs.count()
    page = list(qs[offset:offset + limit])
    return JobPageDTO(
        jobs=[to_dto(j, locale) for j in page],
        total=total,
        has_more=offset + len(page) < total,
    )


# =============================================================================
# Validation
# =============================================================================

def _text(value: str, bounds, key: str) -> str:
    value = (value or "").strip()
    low, high = bounds
    if not (low <= len(value) <= high):
        raise ValidationFailed(key)
    return value


def _validate_job_fields(values: dict, customer: User) -> dict:
    """Validate whichever job fields are present and return the cleaned values."""
    cleaned = {}
    if values.get('title') is not None:
        cleaned['title'] = _text(values['title'], TITLE_LENGTH, "jobs.titleLength")
    if values.get('description') is not None:
        cleaned['description'] = _text(values['description'], DESCRIPTION_LENGTH, "jobs.descriptionLength")
    if values.get('category_id') is not None:
        if not categories.is_valid_category(values['category_id']):
            raise ValidationFailed("jobs.invalidCategory")
        cleaned['category_id'] = values['category_id']
    if values.get('preferred_date') is not None:
        if values['preferred_date'] < timezone.localdate():
            raise ValidationFailed("jobs.pastDate")
        cleaned['preferred_date'] = values['preferred_date']
    for field in ('preferred_time_start', 'preferred_time_end'):
        if field in values:
            cleaned[field] = values[field]
    if values.get('is_flexible') is not None:
        cleaned['is_flexible'] = values['is_flexible']
    if values.get('customer_budget') is not None:
        if values['customer_budget'] <= 0:
            raise ValidationFailed("jobs.invalidBudget")
        cleaned['customer_budget'] = values['customer_budget']
    if values.get('estimated_duration') is not None:
        if values['estimated_duration'] < MIN_DURATION_HOURS:
            raise ValidationFailed("jobs.invalidDuration")
        cleaned['estimated_duration'] = values['estimated_duration']
    if 'requirements' in values:
        requirements = (values['requirements'] or "").strip()
        if len(requirements) > REQUIREMENTS_MAX:
            raise ValidationFailed("jobs.requirementsLength")
        cleaned['requirements'] = requirements
    if values.get('max_applications') is not None:
        low, high = MAX_APPLICATIONS_RANGE
        if not (low <= values['max_applications'] <= high):
            raise ValidationFailed("jobs.invalidMaxApplications")
        cleaned['max_applications'] = values['max_applications']
    if values.get('address_id') is not None:
        address = Address.objects.filter(id=values['address_id'], user=customer).first()
        if address is None:
            raise NotFoundError("jobs.addressNotFound")
        cleaned['address'] = address
    return cleaned


def _check_times(start, end) -> None:
    if start and end and start >= end:
        raise ValidationFailed("jobs.invalidTimes")


# =============================================================================
# Jobs
# =============================================================================

def _get_job(job_id: UUID) -> Job:
    try:
        return _job_qs().get(id=job_id)
    except Job.DoesNotExist:
        raise NotFoundError("jobs.notFound")


def _get_owned_job(user: User, job_id: UUID, lock: bool = False) -> Job:
    qs = _job_qs().select_for_update(of=('self',)) if lock else _job_qs()
    try:
        job = qs.get(id=job_id)
    except Job.DoesNotExist:
        raise NotFoundError("jobs.notFound")
    if job.customer_id != user.id:
        raise PermissionDeniedError("jobs.notOwner")
    return job


def create_job(customer: User, data: JobIn, locale: Optional[str] = None) -> JobDTO:
    values = _validate_job_fields(data.dict(), customer)
    _check_times(values.get('preferred_time_start'), values.get('preferred_time_end'))

    job = Job.objects.create(customer=customer, status=JobStatus.UNDER_REVIEW, **values)
    logger.info(f"Job {job.id} created by {customer.id}")
    notify(customer, NotificationType.JOB_CREATED, related_job_id=job.id, job_title=job.title)
    return to_dto(job, locale)


def update_job(user: User, job_id: UUID, data: JobUpdateIn, locale: Optional[str] = None) -> JobDTO:
    job = _get_owned_job(user, job_id)
    if job.status not in EDITABLE_STATUSES or job.assigned_tasker_id:
        raise ValidationFailed("jobs.cannotUpdate")

    values = _validate_job_fields(data.dict(exclude_unset=True), user)
    for field, value in values.items():
        setattr(job, field, value)
    _check_times(job.preferred_time_start, job.preferred_time_end)
    job.save()
    return to_dto(job, locale)


def delete_job(user: User, job_id: UUID) -> None:
    job = _get_owned_job(user, job_id)
    if job.assigned_tasker_id or job.status in UNDELETABLE_STATUSES:
        raise ConflictError("jobs.cannotDelete")
    job.delete()
    logger.info(f"Job {job_id} deleted by {user.id}")


def _moderate(admin: User, job_id: UUID, target: str) -> Job:
    job = _get_job(job_id)
    if job.status != JobStatus.UNDER_REVIEW:
        raise ValidationFailed("jobs.invalidStatus", expected=JobStatus.UNDER_REVIEW, current=job.status)
    job.status = target
    if target == JobStatus.ACTIVE:
        job.approved_at = timezone.now()
    job.save()
    logger.info(f"Admin {admin.id} moved job {job.id} to {target}")
    return job


def approve_job(admin: User, job_id: UUID, locale: Optional[str] = None) -> JobDTO:
    job = _moderate(admin, job_id, JobStatus.ACTIVE)
    notify(job.customer, NotificationType.JOB_APPROVED, related_job_id=job.id, job_title=job.title)
    return to_dto(job, locale)


def reject_job(admin: User, job_id: UUID, locale: Optional[str] = None) -> JobDTO:
    return to_dto(_moderate(admin, job_id, JobStatus.CANCELLED), locale)


def list_active_jobs(
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    min_budget: Optional[Decimal] = None,
    max_budget: Optional[Decimal] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    locale: Optional[str] = None,
) -> JobPageDTO:
    qs = _job_qs().filter(status=JobStatus.ACTIVE)
    if category_id is not None:
        qs = qs.filter(category_id__in=categories.expand_category_ids(category_id))
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))
    if min_budget is not None:
        qs = qs.filter(customer_budget__gte=min_budget)
    if max_budget is not None:
        qs = qs.filter(customer_budget__lte=max_budget)
    return _page(qs.order_by('-created_at'), limit, offset, locale)


def list_my_jobs(
    user: User,
    status: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    locale: Optional[str] = None,
) -> JobPageDTO:
    qs = _job_qs().filter(customer=user)
    if status:
        qs = qs.filter(status=status)
    return _page(qs.order_by('-created_at'), limit, offset, locale)


def get_job_detail(user: User, job_id: UUID, locale: Optional[str] = None) -> JobDTO:
    """Listed jobs are visible to everyone; other jobs only to the people involved."""
    job = _get_job(job_id)
    visible = (
        job.status == JobStatus.ACTIVE
        or user.id in (job.customer_id, job.assigned_tasker_id)
        or user.is_admin
        or JobApplication.objects.filter(job=job, tasker=user).exists()
    )
    if not visible:
        raise NotFoundError("jobs.notFound")
    return to_dto(job, locale)


# =============================================================================
# Applications
# =============================================================================

def apply_to_job(tasker: User, job_id: UUID, data: ApplicationIn) -> ApplicationDTO:
    if data.proposed_price is None or data.proposed_price < MIN_PROPOSED_PRICE:
        raise ValidationFailed("jobs.invalidProposedPrice")
    if data.estimated_duration is None or data.estimated_duration < MIN_DURATION_HOURS:
        raise ValidationFailed("jobs.invalidDuration")
    message = _text(data.message, MESSAGE_LENGTH, "jobs.messageLength")
    availability = (data.availability or "").strip()
    if len(availability) > AVAILABILITY_MAX:
        raise ValidationFailed("jobs.availabilityLength")
    if data.experience_level and data.experience_level not in ExperienceLevel.values:
        raise ValidationFailed("jobs.invalidExperienceLevel")

    with transaction.atomic():
        try:
            job = _job_qs().select_for_update(of=('self',)).get(id=job_id)
        except Job.DoesNotExist:
            raise NotFoundError("jobs.notFound")

        if job.status != JobStatus.ACTIVE:
            raise ValidationFailed("jobs.notActive")
        if job.customer_id == tasker.id:
            raise ValidationFailed("jobs.ownJob")
        if JobApplication.objects.filter(job=job, tasker=tasker).exists():
            raise ConflictError("jobs.alreadyApplied")
        if job.application_count >= job.max_applications:
            raise ConflictError("jobs.maxApplicationsReached")

        try:
            with transaction.atomic():
                application = JobApplication.objects.create(
                    job=job,
                    tasker=tasker,
                    proposed_price=data.proposed_price,
                    estimated_duration=data.estimated_duration,
                    message=message,
                    availability=availability,
                    experience_level=data.experience_level or "",
                )
        except IntegrityError:
            raise ConflictError("jobs.alreadyApplied")

        job.application_count += 1
        job.save(update_fields=['application_count', 'updated_at'])

    logger.info(f"Tasker {tasker.id} applied to job {job.id}")
    notify(
        job.customer,
        NotificationType.APPLICATION_RECEIVED,
        related_job_id=job.id,
        tasker_name=tasker.display_name,
        job_title=job.title,
    )
    return _application_to_dto(application)


def list_job_applications(user: User, job_id: UUID) -> List[ApplicationDTO]:
    job = _get_owned_job(user, job_id)
    qs = JobApplication.objects.filter(job=job).select_related('job', 'tasker')
    return [_application_to_dto(a) for a in qs]


def list_my_applications(tasker: User, status: Optional[str] = None) -> List[ApplicationDTO]:
    qs = JobApplication.objects.filter(tasker=tasker).select_related('job', 'tasker')
    if status:
        qs = qs.filter(status=status)
    return [_application_to_dto(a) for a in qs]


def _get_application(application_id: UUID, lock: bool = False) -> JobApplication:
    qs = JobApplication.objects.select_related('job', 'tasker', 'job__customer')
    if lock:
        qs = qs.select_for_update(of=('self',))
    try:
        return qs.get(id=application_id)
    except JobApplication.DoesNotExist:
        raise NotFoundError("jobs.applicationNotFound")


def accept_application(user: User, application_id: UUID) -> ApplicationDTO:
    """
    Accept one application: the others still pending are rejected and the
    job is assigned to the tasker at the proposed price.
    """
    with transaction.atomic():
        application = _get_application(application_id, lock=True)
        job = _get_owned_job(user, application.job_id, lock=True)
        if job.status != JobStatus.ACTIVE:
            raise ValidationFailed("jobs.invalidStatus", expected=JobStatus.ACTIVE, current=job.status)
        if application.status != ApplicationStatus.PENDING:
            raise ValidationFailed("jobs.applicationNotPending")

        application.status = ApplicationStatus.ACCEPTED
        application.save(update_fields=['status', 'updated_at'])

        others = JobApplication.objects.filter(
            job=job, status=ApplicationStatus.PENDING
        ).exclude(id=application.id)
        for other in others:
            other.status = ApplicationStatus.REJECTED
            other.save(update_fields=['status', 'updated_at'])

        job.status = JobStatus.ASSIGNED
        job.assigned_tasker = application.tasker
        job.final_price = application.proposed_price
        job.save(update_fields=['status', 'assigned_tasker', 'final_price', 'updated_at'])

    logger.info(f"Application {application.id} accepted for job {job.id}")
    notify(
        application.tasker,
        NotificationType.APPLICATION_ACCEPTED,
        related_job_id=job.id,
        job_title=job.title,
    )
    return _application_to_dto(application)


def reject_application(user: User, application_id: UUID) -> ApplicationDTO:
    application = _get_application(application_id)
    _get_owned_job(user, application.job_id)
    if application.status != ApplicationStatus.PENDING:
        raise ValidationFailed("jobs.applicationNotPending")
    application.status = ApplicationStatus.REJECTED
    application.save(update_fields=['status', 'updated_at'])
    return _application_to_dto(application)


def withdraw_application(tasker: User, application_id: UUID) -> ApplicationDTO:
    with transaction.atomic():
        application = _get_application(application_id, lock=True)
        if application.tasker_id != tasker.id:
            raise NotFoundError("jobs.applicationNotFound")
        if application.status != ApplicationStatus.PENDING:
            raise ValidationFailed("jobs.applicationNotPending")

        application.status = ApplicationStatus.WITHDRAWN
        application.save(update_fields=['status', 'updated_at'])
        job = Job.objects.select_for_update().get(id=application.job_id)
        if job.application_count > 0:
            job.application_count -= 1
            job.save(update_fields=['application_count', 'updated_at'])
    return _application_to_dto(application)


# =============================================================================
# Assigned work
# =============================================================================

def _get_assigned_job(tasker: User, job_id: UUID) -> Job:
    job = _get_job(job_id)
    if job.assigned_tasker_id != tasker.id:
        raise PermissionDeniedError("jobs.notAssignedTasker")
    return job


def start_job(tasker: User, job_id: UUID, locale: Optional[str] = None) -> JobDTO:
    job = _get_assigned_job(tasker, job_id)
    if job.status != JobStatus.ASSIGNED:
        raise ValidationFailed("jobs.invalidStatus", expected=JobStatus.ASSIGNED, current=job.status)
    job.status = JobStatus.IN_PROGRESS
    job.started_at = timezone.now()
    job.save(update_fields=['status', 'started_at', 'updated_at'])
    notify(job.customer, NotificationType.JOB_STARTED, related_job_id=job.id, title=job.title)
    return to_dto(job, locale)


def complete_job(tasker: User, job_id: UUID, locale: Optional[str] = None) -> JobDTO:
    job = _get_assigned_job(tasker, job_id)
    if job.status != JobStatus.IN_PROGRESS:
        raise ValidationFailed("jobs.invalidStatus", expected=JobStatus.IN_PROGRESS, current=job.status)
    job.status = JobStatus.COMPLETED
    job.completed_at = timezone.now()
    job.save(update_fields=['status', 'completed_at', 'updated_at'])
    notify(job.customer, NotificationType.JOB_COMPLETED, related_job_id=job.id, job_title=job.title)
    return to_dto(job, locale)


def confirm_job_payment(customer: User, job_id: UUID, locale: Optional[str] = None) -> JobDTO:
    """Record the customer's payment for a completed job. Allowed once."""
    from apps.finance.models import PaymentStatus
    from apps.finance.services import record_job_payment

    with transaction.atomic():
        job = _get_owned_job(customer, job_id, lock=True)
        if job.status != JobStatus.COMPLETED:
            raise ValidationFailed("jobs.invalidStatus", expected=JobStatus.COMPLETED, current=job.status)
        if job.payment_confirmed_at is not None:
            raise ConflictError("jobs.alreadyPaid")

        amount = job.final_price or job.customer_budget
        record_job_payment(
            payer=customer,
            payee=job.assigned_tasker,
            amount=amount,
            job=job,
            payment_status=PaymentStatus.PAID,
            description=job.title,
        )
        job.payment_confirmed_at = timezone.now()
        job.save(update_fields=['payment_confirmed_at', 'updated_at'])

    logger.info(f"Payment of {amount} MAD confirmed for job {job.id}")
    notify(job.assigned_tasker, NotificationType.PAYMENT_RECEIVED, related_job_id=job.id,
           amount=amount, job_title=job.title)
    notify(customer, NotificationType.PAYMENT_CONFIRMED, related_job_id=job.id, amount=amount)
    return to_dto(job, locale)
