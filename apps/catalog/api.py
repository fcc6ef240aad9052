"""
Catalog endpoints: categories, public service browsing and the
tasker's own services.
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
from .dtos import (
    CategoryDTO,
    InteractionStatusDTO,
    ServiceDTO,
    ServiceIn,
    ServicePageDTO,
    ServiceUpdateIn,
)

router = Router(tags=["Catalog"])


class SuccessResponse(Schema):
    success: bool


# =============================================================================
# Categories (public)
# =============================================================================

@router.get("/categories", response=List[CategoryDTO], auth=None)
def list_categories(request: HttpRequest, parents_only: bool = False):
    return services.list_categories(resolve_locale(request), parents_only=parents_only)


@router.get("/categories/{category_id}", response=CategoryDTO, auth=None)
def get_category(request: HttpRequest, category_id: int):
    return services.get_category(category_id, resolve_locale(request))


@router.get("/categories/{category_id}/subcategories", response=List[CategoryDTO], auth=None)
def list_subcategories(request: HttpRequest, category_id: int):
    return services.list_subcategories(category_id, resolve_locale(request))


# =============================================================================
# Services
# =============================================================================

@router.get("/services", response=ServicePageDTO, auth=None)
def list_public_services(
    request: HttpRequest,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort: str = "newest",
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    """Browse active services. A parent category id also matches its subcategories."""
    return services.list_public_services(
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        limit=limit,
        offset=offset,
        locale=resolve_locale(request),
    )


@router.get("/services/mine", response=List[ServiceDTO], auth=None)
def list_my_services(request: HttpRequest):
    user = require_permission(request, Permissions.SERVICE_MANAGE)
    return services.list_my_services(user, resolve_locale(request))


@router.post("/services", response={201: ServiceDTO}, auth=None)
def create_service(request: HttpRequest, payload: ServiceIn):
    user = require_permission(request, Permissions.SERVICE_MANAGE)
    return 201, services.create_service(user, payload, resolve_locale(request))


@router.get("/services/{service_id}", response=ServiceDTO, auth=None)
def get_service(request: HttpRequest, service_id: UUID):
    user = request.user if request.user.is_authenticated else None
    return services.get_service_detail(service_id, user, resolve_locale(request))


@router.patch("/services/{service_id}", response=ServiceDTO, auth=None)
def update_service(request: HttpRequest, service_id: UUID, payload: ServiceUpdateIn):
    user = require_permission(request, Permissions.SERVICE_MANAGE)
    return services.update_service(user, service_id, payload, resolve_locale(request))


@router.delete("/services/{service_id}", response=SuccessResponse, auth=None)
def delete_service(request: HttpRequest, service_id: UUID):
    user = require_permission(request, Permissions.SERVICE_MANAGE)
    services.delete_service(user, service_id)
    return {"success": True}


@router.post("/services/{service_id}/toggle-status", response=ServiceDTO, auth=None)
def toggle_service_status(request: HttpRequest, service_id: UUID):
    """Switch a service between active and paused."""
    user = require_permission(request, Permissions.SERVICE_MANAGE)
    return services.toggle_service_status(user, service_id, resolve_locale(request))


@router.get("/services/{service_id}/interaction", response=InteractionStatusDTO, auth=None)
def interaction_status(request: HttpRequest, service_id: UUID):
    user = require_auth(request)
    return services.get_interaction_status(user, service_id)
