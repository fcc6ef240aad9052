"""
Profile services: personal info, addresses, tasker onboarding,
verification and profile completion.
"""
import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.core.errors import ConflictError, NotFoundError, ValidationFailed
from apps.core.uploads import (
    AVATAR_MAX_SIZE,
    DOCUMENT_MAX_SIZE,
    DOCUMENT_TYPES,
    IMAGE_TYPES,
    store_upload,
)
from apps.identity.dtos import UserDTO
from apps.identity.models import User, UserRole
from apps.identity.services import get_active_user, get_user_dto

from . import validators
from .dtos import (
    AddressDTO,
    AddressIn,
    AddressUpdateIn,
    BecomeTaskerIn,
    CompletionItemDTO,
    PersonalInfoIn,
    ProfileCompletionDTO,
    PublicTaskerProfileDTO,
    TaskerProfileDTO,
    TaskerProfileUpdateIn,
)
from .models import Address, ExperienceLevel, TaskerProfile, VerificationStatus

logger = logging.getLogger(__name__)

BIO_MIN_LENGTH = 50
BIO_MAX_LENGTH = 1000
SERVICE_RADIUS_RANGE = (1, 200)

TASKER_REQUIRED_ITEMS = 7


def address_to_dto(a: Address) -> AddressDTO:
    return AddressDTO(
        id=a.id,
        label=a.label,
        street_address=a.street_address,
        city=a.city,
        region=a.region,
        postal_code=a.postal_code,
        country=a.country,
        latitude=a.latitude,
        longitude=a.longitude,
        is_default=a.is_default,
        created_at=a.created_at,
    )


def _tasker_profile_to_dto(p: TaskerProfile) -> TaskerProfileDTO:
    return TaskerProfileDTO(
        user_id=p.user_id,
        bio=p.bio,
        experience_level=p.experience_level,
        service_radius_km=p.service_radius_km,
        operation_hours=p.operation_hours,
        is_available=p.is_available,
        identity_document_url=p.identity_document_url,
        verification_status=p.verification_status,
        verified_at=p.verified_at,
    )


# =============================================================================
# Personal info
# =============================================================================

def update_personal_info(user: User, data: PersonalInfoIn) -> UserDTO:
    """Validate and save only the fields that were sent."""
    fields = []
    if data.first_name is not None:
        user.first_name = validators.validate_name(data.first_name, "first_name")
        fields.append('first_name')
    if data.last_name is not None:
        user.last_name = validators.validate_name(data.last_name, "last_name")
        fields.append('last_name')
    if data.phone is not None:
        user.phone = validators.normalize_phone(data.phone)
        fields.append('phone')
    if data.date_of_birth is not None:
        user.date_of_birth = validators.validate_date_of_birth(data.date_of_birth)
        fields.append('date_of_birth')

    if fields:
        user.save(update_fields=fields + ['updated_at'])
    return get_user_dto(user.id)


def upload_avatar(user: User, file) -> str:
    url = store_upload(file, f"avatars/{user.id}", IMAGE_TYPES, AVATAR_MAX_SIZE)
    user.avatar_url = url
    user.save(update_fields=['avatar_url', 'updated_at'])
    logger.info(f"Avatar updated for user {user.id}")
    return url


# =============================================================================
# Addresses
# =============================================================================

def _clean_address_fields(values: dict) -> dict:
    cleaned = dict(values)
    if 'label' in cleaned:
        cleaned['label'] = (cleaned['label'] or '').strip()
        if not cleaned['label']:
            raise ValidationFailed("profile.labelRequired")
    if 'street_address' in cleaned:
        cleaned['street_address'] = validators.min_length(cleaned['street_address'], "street_address", 5)
    for field in ('city', 'region', 'country'):
        if field in cleaned:
            cleaned[field] = validators.min_length(cleaned[field], field, 2)
    if 'country' in cleaned:
        cleaned['country'] = cleaned['country'].upper()
    if cleaned.get('postal_code') is None:
        cleaned.pop('postal_code', None)
    return cleaned


def _get_address(user: User, address_id: UUID) -> Address:
    try:
        return Address.objects.get(id=address_id, user=user)
    except Address.DoesNotExist:
        raise NotFoundError("profile.addressNotFound")


def list_addresses(user: User) -> List[AddressDTO]:
    return [address_to_dto(a) for a in Address.objects.filter(user=user)]


def create_address(user: User, data: AddressIn) -> AddressDTO:
    values = _clean_address_fields(data.dict())
    make_default = values.pop('is_default', False)

    with transaction.atomic():
        is_first = not Address.objects.filter(user=user).exists()
        address = Address.objects.create(user=user, **values)
        if make_default or is_first:
            _make_default(user, address)
    return address_to_dto(address)


def update_address(user: User, address_id: UUID, data: AddressUpdateIn) -> AddressDTO:
    address = _get_address(user, address_id)
    values = _clean_address_fields(data.dict(exclude_unset=True))
    for field, value in values.items():
        setattr(address, field, value)
    address.save()
    return address_to_dto(address)


def delete_address(user: User, address_id: UUID) -> None:
    """Delete an address; if it was the default, the newest remaining one takes over."""
    with transaction.atomic():
        address = _get_address(user, address_id)
        was_default = address.is_default
        address.delete()
        if was_default:
            replacement = Address.objects.filter(user=user).order_by('-created_at').first()
            if replacement:
                _make_default(user, replacement)


def _make_default(user: User, address: Address) -> None:
    Address.objects.filter(user=user, is_default=True).exclude(id=address.id).update(is_default=False)
    if not address.is_default:
        address.is_default = True
        address.save(update_fields=['is_default', 'updated_at'])


def set_default_address(user: User, address_id: UUID) -> AddressDTO:
    with transaction.atomic():
        address = _get_address(user, address_id)
        _make_default(user, address)
    return address_to_dto(address)


def resolve_address(user: User, address_id: Optional[UUID] = None) -> Optional[Address]:
    """
    Address to use for an order: the given one (must be the user's),
    else the default, else any address, else None.
    """
    if address_id:
        return Address.objects.filter(id=address_id, user=user).first()
    qs = Address.objects.filter(user=user)
    return qs.filter(is_default=True).first() or qs.first()


# =============================================================================
# Tasker onboarding
# =============================================================================

def _validate_bio(bio: str) -> str:
    bio = (bio or "").strip()
    if not (BIO_MIN_LENGTH <= len(bio) <= BIO_MAX_LENGTH):
        raise ValidationFailed("profile.bioLength")
    return bio


def _validate_experience_level(level: str) -> str:
    if level not in ExperienceLevel.values:
        raise ValidationFailed("profile.invalidExperienceLevel")
    return level


def _validate_radius(radius: int) -> int:
    low, high = SERVICE_RADIUS_RANGE
    if not (low <= radius <= high):
        raise ValidationFailed("profile.invalidServiceRadius")
    return radius


def _hours_to_dict(hours) -> dict:
    return {
        day: slot.dict() if hasattr(slot, 'dict') else dict(slot)
        for day, slot in (hours or {}).items()
    }


def become_tasker(user: User, data: BecomeTaskerIn) -> UserDTO:
    """
    Turn a customer into a tasker, or finish the signup of someone who
    registered as a tasker and has no profile yet. The role change and
    the profile creation happen in one transaction.
    """
    bio = _validate_bio(data.bio)
    level = _validate_experience_level(data.experience_level)
    radius = _validate_radius(data.service_radius_km)
    hours = validators.validate_operation_hours(_hours_to_dict(data.operation_hours))

    with transaction.atomic():
        user = User.objects.select_for_update().get(id=user.id)
        if TaskerProfile.objects.filter(user=user).exists():
            raise ConflictError("profile.alreadyTasker")

        if user.role == UserRole.CUSTOMER:
            user.role = UserRole.TASKER
            user.save(update_fields=['role', 'updated_at'])

        TaskerProfile.objects.create(
            user=user,
            bio=bio,
            experience_level=level,
            service_radius_km=radius,
            operation_hours=hours,
            is_available=data.is_available,
            verification_status=VerificationStatus.UNDER_REVIEW,
        )

    logger.info(f"User {user.id} became a tasker")
    return get_user_dto(user.id)


def _get_tasker_profile(user_id) -> TaskerProfile:
    try:
        return TaskerProfile.objects.get(user_id=user_id)
    except TaskerProfile.DoesNotExist:
        raise NotFoundError("profile.taskerProfileNotFound")


def get_tasker_profile(user: User) -> TaskerProfileDTO:
    return _tasker_profile_to_dto(_get_tasker_profile(user.id))


def update_tasker_profile(user: User, data: TaskerProfileUpdateIn) -> TaskerProfileDTO:
    profile = _get_tasker_profile(user.id)
    values = data.dict(exclude_unset=True)

    if values.get('bio') is not None:
        profile.bio = _validate_bio(values['bio'])
    if values.get('experience_level') is not None:
        profile.experience_level = _validate_experience_level(values['experience_level'])
    if values.get('service_radius_km') is not None:
        profile.service_radius_km = _validate_radius(values['service_radius_km'])
    if values.get('is_available') is not None:
        profile.is_available = values['is_available']
    if values.get('operation_hours') is not None:
        profile.operation_hours = validators.validate_operation_hours(
            _hours_to_dict(values['operation_hours'])
        )

    profile.save()
    return _tasker_profile_to_dto(profile)


def upload_verification_document(user: User, file) -> TaskerProfileDTO:
    """Store an identity document and put the profile back under review."""
    profile = _get_tasker_profile(user.id)
    url = store_upload(file, f"verification/{user.id}", DOCUMENT_TYPES, DOCUMENT_MAX_SIZE)
    profile.identity_document_url = url
    profile.verification_status = VerificationStatus.UNDER_REVIEW
    profile.verified_at = None
    profile.save(update_fields=[
        'identity_document_url', 'verification_status', 'verified_at', 'updated_at'
    ])
    logger.info(f"Verification document uploaded for tasker {user.id}")
    return _tasker_profile_to_dto(profile)


def set_verification_status(admin: User, tasker_id: UUID, status: str) -> TaskerProfileDTO:
    if status not in (VerificationStatus.VERIFIED, VerificationStatus.REJECTED):
        raise ValidationFailed("profile.invalidVerificationStatus")

    profile = _get_tasker_profile(tasker_id)
    profile.verification_status = status
    profile.verified_at = timezone.now() if status == VerificationStatus.VERIFIED else None
    profile.save(update_fields=['verification_status', 'verified_at', 'updated_at'])
    logger.info(f"Admin {admin.id} set tasker {tasker_id} verification to {status}")
    return _tasker_profile_to_dto(profile)


def list_pending_verifications() -> List[TaskerProfileDTO]:
    qs = TaskerProfile.objects.filter(
        verification_status=VerificationStatus.UNDER_REVIEW
    ).exclude(identity_document_url='').order_by('updated_at')
    return [_tasker_profile_to_dto(p) for p in qs]


# =============================================================================
# Completion
# =============================================================================

def get_profile_completion(user: User) -> ProfileCompletionDTO:
    if user.is_tasker:
        return _tasker_completion(user)
    return _customer_completion(user)


def _tasker_completion(user: User) -> ProfileCompletionDTO:
    profile = TaskerProfile.objects.filter(user=user).first()
    has_address = Address.objects.filter(user=user).exists()

    checks = [
        ("profile_photo", "personal", bool(user.avatar_url)),
        ("full_name", "personal", bool(user.first_name and user.last_name)),
        ("identity_verification", "personal", bool(
            profile and profile.identity_document_url
            and profile.verification_status == VerificationStatus.VERIFIED
        )),
        ("bio", "bio", bool(profile and profile.bio.strip())),
        ("service_area", "bio", bool(profile and profile.service_radius_km > 0)),
        ("availability", "availability", bool(profile and profile.operation_hours)),
        ("addresses", "addresses", has_address),
    ]
    missing = [CompletionItemDTO(id=i, section=s, required=True) for i, s, ok in checks if not ok]
    completed = TASKER_REQUIRED_ITEMS - len(missing)
    return ProfileCompletionDTO(
        completion_percentage=round(completed / TASKER_REQUIRED_ITEMS * 100),
        missing_fields=missing,
    )


def _customer_completion(user: User) -> ProfileCompletionDTO:
    checks = [
        ("full_name", "personal", True, bool(user.first_name and user.last_name)),
        ("profile_photo", "personal", False, bool(user.avatar_url)),
        ("phone", "personal", True, bool(user.phone)),
        ("address", "addresses", True, Address.objects.filter(user=user).exists()),
    ]
    missing = [
        CompletionItemDTO(id=i, section=s, required=req)
        for i, s, req, ok in checks if not ok
    ]
    total_required = sum(1 for _, _, req, _ in checks if req)
    completed = total_required - sum(1 for m in missing if m.required)
    return ProfileCompletionDTO(
        completion_percentage=round(completed / total_required * 100),
        missing_fields=missing,
    )


# =============================================================================
# Public profile
# =============================================================================

def get_public_tasker_profile(tasker_id: UUID) -> PublicTaskerProfileDTO:
    from apps.catalog.services import list_active_services_for_tasker
    from apps.reviews.services import get_rating_summary

    tasker = get_active_user(tasker_id)
    profile = _get_tasker_profile(tasker.id)
    return PublicTaskerProfileDTO(
        id=tasker.id,
        first_name=tasker.first_name,
        last_name=tasker.last_name,
        avatar_url=tasker.avatar_url,
        bio=profile.bio,
        experience_level=profile.experience_level,
        service_radius_km=profile.service_radius_km,
        verification_status=profile.verification_status,
        is_available=profile.is_available,
        member_since=tasker.date_joined,
        rating=get_rating_summary(tasker.id),
        services=list_active_services_for_tasker(tasker.id),
    )
