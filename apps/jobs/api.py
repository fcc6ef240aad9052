"""
Job endpoints: posting, moderation, browsing, applications and the
assigned-work flow.
"""
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router, Schema

from apps.core.i18n import resolve_locale
from apps.identity.decorators import require_auth, require_permission
from apps.identity.permissions import Permissions

from . import services
from .dtos import ApplicationDTO, ApplicationIn, JobDTO, JobIn, JobPageDTO, JobUpdateIn

router = Router(tags=["Jobs"])


class SuccessResponse(Schema):
    success: bool


# =============================================================================
# Jobs
# =============================================================================

@router.post("/", response={201: JobDTO}, auth=None)
def create_job(request: HttpRequest, payload: JobIn):
    user = require_permission(request, Permissions.JOB_POST)
    return 201, services.create_job(user, payload, resolve_locale(request))


@router.get("/", response=JobPageDTO, auth=None)
def list_active_jobs(
    request: HttpRequest,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    min_budget: Optional[Decimal] = None,
    max_budget: Optional[Decimal] = None,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    require_auth(request)
    return services.list_active_jobs(
        category_id=category_id,
        search=search,
        min_budget=min_budget,
        max_budget=max_budget,
        limit=limit,
        offset=offset,
        locale=resolve_locale(request),
    )


@router.get("/mine", response=JobPageDTO, auth=None)
def list_my_jobs(
    request: HttpRequest,
    status: Optional[str] = None,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    user = require_auth(request)
    return services.list_my_jobs(user, status=status, limit=limit, offset=offset,
                                 locale=resolve_locale(request))


@router.get("/applications/mine", response=List[ApplicationDTO], auth=None)
def list_my_applications(request: HttpRequest, status: Optional[str] = None):
    user = require_permission(request, Permissions.JOB_APPLY)
    return services.list_my_applications(user, status=status)


@router.post("/applications/{application_id}/accept", response=ApplicationDTO, auth=None)
def accept_application(request: HttpRequest, application_id: UUID):
    user = require_auth(request)
    return services.accept_application(user, application_id)


@router.post("/applications/{application_id}/reject", response=ApplicationDTO, auth=None)
def reject_application(request: HttpRequest, application_id: UUID):
    user = require_auth(request)
    return services.reject_application(user, application_id)


@router.post("/applications/{application_id}/withdraw", response=ApplicationDTO, auth=None)
def withdraw_application(request: HttpRequest, application_id: UUID):
    user = require_auth(request)
    return services.withdraw_application(user, application_id)


@router.get("/{job_id}", response=JobDTO, auth=None)
def get_job(request: HttpRequest, job_id: UUID):
    user = require_auth(request)
    return services.get_job_detail(user, job_id, resolve_locale(request))


@router.patch("/{job_id}", response=JobDTO, auth=None)
def update_job(request: HttpRequest, job_id: UUID, payload: JobUpdateIn):
    user = require_auth(request)
    return services.update_job(user, job_id, payload, resolve_locale(request))


@router.delete("/{job_id}", response=SuccessResponse, auth=None)
def delete_job(request: HttpRequest, job_id: UUID):
    user = require_auth(request)
    services.delete_job(user, job_id)
    return {"success": True}


# =============================================================================
# Moderation
# =============================================================================

@router.post("/{job_id}/approve", response=JobDTO, auth=None)
def approve_job(request: HttpRequest, job_id: UUID):
    admin = require_permission(request, Permissions.JOB_MODERATE)
    return services.approve_job(admin, job_id, resolve_locale(request))


@router.post("/{job_id}/reject", response=JobDTO, auth=None)
def reject_job(request: HttpRequest, job_id: UUID):
    admin = require_permission(request, Permissions.JOB_MODERATE)
    return services.reject_job(admin, job_id, resolve_locale(request))


# =============================================================================
# Applications & work
# =============================================================================

@router.post("/{job_id}/applications", response={201: ApplicationDTO}, auth=None)
def apply_to_job(request: HttpRequest, job_id: UUID, payload: ApplicationIn):
    user = require_permission(request, Permissions.JOB_APPLY)
    return 201, services.apply_to_job(user, job_id, payload)


@router.get("/{job_id}/applications", response=List[ApplicationDTO], auth=None)
def list_job_applications(request: HttpRequest, job_id: UUID):
    user = require_auth(request)
    return services.list_job_applications(user, job_id)


@router.post("/{job_id}/start", response=JobDTO, auth=None)
def start_job(request: HttpRequest, job_id: UUID):
    user = require_auth(request)
    return services.start_job(user, job_id, resolve_locale(request))


@router.post("/{job_id}/complete", response=JobDTO, auth=None)
def complete_job(request: HttpRequest, job_id: UUID):
    user = require_auth(request)
    return services.complete_job(user, job_id, resolve_locale(request))


@router.post("/{job_id}/confirm-payment", response=JobDTO, auth=None)
def confirm_job_payment(request: HttpRequest, job_id: UUID):
    user = require_auth(request)
    return services.confirm_job_payment(user, job_id, resolve_locale(request))
