"""
Catalog services: category lookups and tasker service management.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional
from uuid import UUID

from django.db.models import Case, F, Q, When

from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.identity.models import User
from apps.notifications.models import NotificationType
from apps.notifications.services import notify

from . import categories
from .dtos import (
    CategoryDTO,
    InteractionStatusDTO,
    ServiceDTO,
    ServiceIn,
    ServicePageDTO,
    ServiceUpdateIn,
)
from .models import PricingType, ServiceStatus, TaskerService

logger = logging.getLogger(__name__)

TITLE_LENGTH = (5, 100)
DESCRIPTION_LENGTH = (20, 2000)
MIN_DURATION_HOURS = Decimal('0.5')
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
SORT_OPTIONS = ("newest", "price_asc", "price_desc")


# =============================================================================
# Categories
# =============================================================================

def _category_to_dto(c: categories.Category, locale: Optional[str]) -> CategoryDTO:
    return CategoryDTO(
        id=c.id,
        parent_id=c.parent_id,
        name=c.name(locale),
        description=c.description(locale),
    )


def list_categories(locale: Optional[str] = None, parents_only: bool = False) -> List[CategoryDTO]:
    items = categories.get_parent_categories() if parents_only else categories.get_all_categories()
    return [_category_to_dto(c, locale) for c in items]


def list_subcategories(parent_id: int, locale: Optional[str] = None) -> List[CategoryDTO]:
    return [_category_to_dto(c, locale) for c in categories.get_subcategories(parent_id)]


def get_category(category_id: int, locale: Optional[str] = None) -> CategoryDTO:
    category = categories.get_category(category_id)
    if category is None:
        raise NotFoundError("services.invalidCategory")
    return _category_to_dto(category, locale)


# =============================================================================
# Mapping
# =============================================================================

def _to_dto(s: TaskerService, locale: Optional[str] = None) -> ServiceDTO:
    category = categories.get_category(s.category_id)
    return ServiceDTO(
        id=s.id,
        tasker_id=s.tasker_id,
        tasker_name=s.tasker.display_name,
        tasker_avatar_url=s.tasker.avatar_url,
        category_id=s.category_id,
        category_name=category.name(locale) if category else "",
        title=s.title,
        description=s.description,
        pricing_type=s.pricing_type,
        base_price=s.base_price,
        hourly_rate=s.hourly_rate,
        price=s.price,
        minimum_duration=s.minimum_duration,
        service_area=s.service_area,
        extra_fees=s.extra_fees,
        portfolio_images=s.portfolio_images,
        service_status=s.service_status,
        is_promoted=s.is_promoted,
        created_at=s.created_at,
        updated_at=s.updated_at,
    )


# =============================================================================
# Validation
# =============================================================================

def _validate_text(value: str, bounds, key: str) -> str:
    value = (value or "").strip()
    low, high = bounds
    if not (low <= len(value) <= high):
        raise ValidationFailed(key)
    return value


def _validate_pricing(pricing_type: str, base_price, hourly_rate) -> None:
    if pricing_type not in PricingType.values:
        raise ValidationFailed("services.invalidPricingType")
    if pricing_type == PricingType.HOURLY:
        if hourly_rate is None or hourly_rate <= 0:
            raise ValidationFailed("services.hourlyRateRequired")
    elif base_price is None or base_price <= 0:
        raise ValidationFailed("services.basePriceRequired")


def _normalize_duration(value) -> Optional[Decimal]:
    if value is None:
        return None
    value = Decimal(str(value))
    if value < MIN_DURATION_HOURS:
        raise ValidationFailed("services.invalidMinimumDuration")
    return value.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)


def _validate_category(category_id: int) -> int:
    if not categories.is_subcategory(category_id):
        raise ValidationFailed("services.invalidCategory")
    return category_id


def _extras(extras) -> list:
    return [
        {"name": e.name.strip(), "price": str(e.price)}
        for e in extras or []
        if e.name.strip()
    ]


# =============================================================================
# Tasker operations
# =============================================================================

def _get_service(service_id: UUID) -> TaskerService:
    try:
        return TaskerService.objects.select_related('tasker').get(id=service_id)
    except TaskerService.DoesNotExist:
        raise NotFoundError("services.notFound")


def _get_owned_service(user: User, service_id: UUID) -> TaskerService:
    service = _get_service(service_id)
    if service.tasker_id != user.id:
        raise PermissionDeniedError("services.notOwner")
    return service


def create_service(user: User, data: ServiceIn, locale: Optional[str] = None) -> ServiceDTO:
    if not user.is_tasker:
        raise PermissionDeniedError("services.taskerOnly")

    title = _validate_text(data.title, TITLE_LENGTH, "services.titleLength")
    description = _validate_text(data.description, DESCRIPTION_LENGTH, "services.descriptionLength")
    category_id = _validate_category(data.category_id)
    _validate_pricing(data.pricing_type, data.base_price, data.hourly_rate)

    service = TaskerService.objects.create(
        tasker=user,
        category_id=category_id,
        title=title,
        description=description,
        pricing_type=data.pricing_type,
        base_price=data.base_price,
        hourly_rate=data.hourly_rate,
        minimum_duration=_normalize_duration(data.minimum_duration),
        service_area=(data.service_area or "").strip(),
        extra_fees=_extras(data.extra_fees),
        portfolio_images=list(data.portfolio_images or []),
        service_status=ServiceStatus.ACTIVE,
    )
    logger.info(f"Tasker {user.id} created service {service.id}")
    notify(user, NotificationType.SERVICE_CREATED, related_service_id=service.id,
           service_title=service.title)
    return _to_dto(service, locale)


def update_service(user: User, service_id: UUID, data: ServiceUpdateIn,
                   locale: Optional[str] = None) -> ServiceDTO:
    service = _get_owned_service(user, service_id)
    values = data.dict(exclude_unset=True)

    if values.get('title') is not None:
        service.title = _validate_text(values['title'], TITLE_LENGTH, "services.titleLength")
    if values.get('description') is not None:
        service.description = _validate_text(
            values['description'], DESCRIPTION_LENGTH, "services.descriptionLength"
        )
    if values.get('category_id') is not None:
        service.category_id = _validate_category(values['category_id'])
    if values.get('pricing_type') is not None:
        service.pricing_type = values['pricing_type']
    if 'base_price' in values:
        service.base_price = values['base_price']
    if 'hourly_rate' in values:
        service.hourly_rate = values['hourly_rate']
    if 'minimum_duration' in values:
        service.minimum_duration = _normalize_duration(values['minimum_duration'])
    if values.get('service_area') is not None:
        service.service_area = values['service_area'].strip()
    if data.extra_fees is not None:
        service.extra_fees = _extras(data.extra_fees)
    if values.get('portfolio_images') is not None:
        service.portfolio_images = list(values['portfolio_images'])

    _validate_pricing(service.pricing_type, service.base_price, service.hourly_rate)
    service.save()

    notify(user, NotificationType.SERVICE_UPDATED, related_service_id=service.id,
           service_title=service.title)
    return _to_dto(service, locale)


def delete_service(user: User, service_id: UUID) -> None:
    from apps.bookings.models import ACTIVE_BOOKING_STATUSES, Booking

    service = _get_owned_service(user, service_id)
    if Booking.objects.filter(service=service, status__in=ACTIVE_BOOKING_STATUSES).exists():
        raise ConflictError("services.hasActiveBookings")
    service.delete()
    logger.info(f"Tasker {user.id} deleted service {service_id}")


def toggle_service_status(user: User, service_id: UUID, locale: Optional[str] = None) -> ServiceDTO:
    service = _get_owned_service(user, service_id)
    service.service_status = (
        ServiceStatus.PAUSED if service.service_status == ServiceStatus.ACTIVE
        else ServiceStatus.ACTIVE
    )
    service.save(update_fields=['service_status', 'updated_at'])
    return _to_dto(service, locale)


def list_my_services(user: User, locale: Optional[str] = None) -> List[ServiceDTO]:
    qs = TaskerService.objects.filter(tasker=user).select_related('tasker')
    return [_to_dto(s, locale) for s in qs]


def list_active_services_for_tasker(tasker_id: UUID, locale: Optional[str] = None) -> List[ServiceDTO]:
    qs = TaskerService.objects.filter(
        tasker_id=tasker_id, service_status=ServiceStatus.ACTIVE
    ).select_related('tasker')
    return [_to_dto(s, locale) for s in qs]


# =============================================================================
# Public browsing
# =============================================================================

def list_public_services(
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort: str = "newest",
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    locale: Optional[str] = None,
) -> ServicePageDTO:
    qs = TaskerService.objects.filter(
        service_status=ServiceStatus.ACTIVE,
        tasker__is_active=True,
    ).select_related('tasker').annotate(
        effective_price=Case(
            When(pricing_type=PricingType.HOURLY, then=F('hourly_rate')),
            default=F('base_price'),
        )
    )

    if category_id is not None:
        qs = qs.filter(category_id__in=categories.expand_category_ids(category_id))
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))
    if min_price is not None:
        qs = qs.filter(effective_price__gte=min_price)
    if max_price is not None:
        qs = qs.filter(effective_price__lte=max_price)

    if sort == "price_asc":
        qs = qs.order_by(F('effective_price').asc(nulls_last=True), '-created_at')
    elif sort == "price_desc":
        qs = qs.order_by(F('effective_price').desc(nulls_last=True), '-created_at')
    else:
        qs = qs.order_by('-is_promoted', '-created_at')

    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)
    total = qs.count()
    page = list(qs[offset:offset + limit])
    return ServicePageDTO(
        services=[_to_dto(s, locale) for s in page],
        total=total,
        has_more=offset + len(page) < total,
    )


def get_service_detail(service_id: UUID, user: Optional[User] = None,
                       locale: Optional[str] = None) -> ServiceDTO:
    """Active services are public; paused ones are visible to their owner only."""
    service = _get_service(service_id)
    if service.service_status != ServiceStatus.ACTIVE and (user is None or user.id != service.tasker_id):
        raise NotFoundError("services.notFound")
    return _to_dto(service, locale)


def get_interaction_status(user: User, service_id: UUID) -> InteractionStatusDTO:
    """Whether the customer already has an open booking or a conversation for a service."""
    from apps.bookings.models import OPEN_BOOKING_STATUSES, Booking
    from apps.messaging.models import Conversation

    service = _get_service(service_id)
    booking = Booking.objects.filter(
        service=service, customer=user, status__in=OPEN_BOOKING_STATUSES
    ).order_by('-created_at').first()
    conversation = Conversation.objects.filter(
        Q(participant1=user, participant2_id=service.tasker_id)
        | Q(participant1_id=service.tasker_id, participant2=user),
        service_id=service.id,
    ).first()
    return InteractionStatusDTO(
        has_open_booking=booking is not None,
        booking_id=booking.id if booking else None,
        has_conversation=conversation is not None,
        conversation_id=conversation.id if conversation else None,
    )
