"""
Profile endpoints: personal info, avatar, addresses, tasker onboarding
and verification, completion and public tasker profiles.
"""
from typing import List
from uuid import UUID

from django.http import HttpRequest
from ninja import File, Router, Schema
from ninja.files import UploadedFile

from apps.identity.decorators import require_auth, require_permission
from apps.identity.dtos import UserDTO
from apps.identity.permissions import Permissions

from . import services
from .dtos import (
    AddressDTO,
    AddressIn,
    AddressUpdateIn,
    BecomeTaskerIn,
    PersonalInfoIn,
    ProfileCompletionDTO,
    PublicTaskerProfileDTO,
    TaskerProfileDTO,
    TaskerProfileUpdateIn,
    UploadResultDTO,
    VerificationIn,
)

router = Router(tags=["Profiles"])


class SuccessResponse(Schema):
    success: bool


# =============================================================================
# Personal info
# =============================================================================

@router.patch("/me", response=UserDTO, auth=None)
def update_personal_info(request: HttpRequest, payload: PersonalInfoIn):
    user = require_auth(request)
    return services.update_personal_info(user, payload)


@router.post("/me/avatar", response=UploadResultDTO, auth=None)
def upload_avatar(request: HttpRequest, file: UploadedFile = File(...)):
    """Upload a profile photo (JPEG, PNG or WebP, max 5 MB)."""
    user = require_auth(request)
    return UploadResultDTO(success=True, url=services.upload_avatar(user, file))


@router.get("/me/completion", response=ProfileCompletionDTO, auth=None)
def profile_completion(request: HttpRequest):
    user = require_auth(request)
    return services.get_profile_completion(user)


# =============================================================================
# Addresses
# =============================================================================

@router.get("/addresses", response=List[AddressDTO], auth=None)
def list_addresses(request: HttpRequest):
    user = require_auth(request)
    return services.list_addresses(user)


@router.post("/addresses", response={201: AddressDTO}, auth=None)
def create_address(request: HttpRequest, payload: AddressIn):
    user = require_auth(request)
    return 201, services.create_address(user, payload)


@router.patch("/addresses/{address_id}", response=AddressDTO, auth=None)
def update_address(request: HttpRequest, address_id: UUID, payload: AddressUpdateIn):
    user = require_auth(request)
    return services.update_address(user, address_id, payload)


@router.delete("/addresses/{address_id}", response=SuccessResponse, auth=None)
def delete_address(request: HttpRequest, address_id: UUID):
    user = require_auth(request)
    services.delete_address(user, address_id)
    return {"success": True}


@router.post("/addresses/{address_id}/default", response=AddressDTO, auth=None)
def set_default_address(request: HttpRequest, address_id: UUID):
    user = require_auth(request)
    return services.set_default_address(user, address_id)


# =============================================================================
# Tasker profile
# =============================================================================

@router.post("/become-tasker", response={201: UserDTO}, auth=None)
def become_tasker(request: HttpRequest, payload: BecomeTaskerIn):
    user = require_auth(request)
    return 201, services.become_tasker(user, payload)


@router.get("/tasker", response=TaskerProfileDTO, auth=None)
def get_tasker_profile(request: HttpRequest):
    user = require_auth(request)
    return services.get_tasker_profile(user)


@router.patch("/tasker", response=TaskerProfileDTO, auth=None)
def update_tasker_profile(request: HttpRequest, payload: TaskerProfileUpdateIn):
    user = require_auth(request)
    return services.update_tasker_profile(user, payload)


@router.post("/tasker/verification-document", response=TaskerProfileDTO, auth=None)
def upload_verification_document(request: HttpRequest, file: UploadedFile = File(...)):
    """Upload an identity document (JPEG, PNG or PDF, max 10 MB)."""
    user = require_auth(request)
    return services.upload_verification_document(user, file)


@router.get("/taskers/pending-verification", response=List[TaskerProfileDTO], auth=None)
def list_pending_verifications(request: HttpRequest):
    require_permission(request, Permissions.PROFILE_VERIFY_TASKER)
    return services.list_pending_verifications()


@router.post("/taskers/{tasker_id}/verification", response=TaskerProfileDTO, auth=None)
def set_verification_status(request: HttpRequest, tasker_id: UUID, payload: VerificationIn):
    admin = require_permission(request, Permissions.PROFILE_VERIFY_TASKER)
    return services.set_verification_status(admin, tasker_id, payload.status)


@router.get("/taskers/{tasker_id}", response=PublicTaskerProfileDTO, auth=None)
def public_tasker_profile(request: HttpRequest, tasker_id: UUID):
    require_auth(request)
    return services.get_public_tasker_profile(tasker_id)
