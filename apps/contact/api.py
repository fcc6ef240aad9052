"""Contact form endpoints. Submitting is public; the inbox is admin-only."""
from typing import Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import Router

from apps.identity.decorators import require_permission
from apps.identity.permissions import Permissions

from . import services
from .dtos import ContactIn, ContactMessageDTO, ContactPageDTO, ContactUpdateIn

router = Router(tags=["Contact"])


@router.post("/", response={201: ContactMessageDTO}, auth=None)
def submit_message(request: HttpRequest, payload: ContactIn):
    user = request.user if request.user.is_authenticated else None
    return 201, services.submit_message(payload, user=user)


@router.get("/messages", response=ContactPageDTO, auth=None)
def list_messages(
    request: HttpRequest,
    status: Optional[str] = None,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    require_permission(request, Permissions.CONTACT_MANAGE)
    return services.list_messages(status=status, limit=limit, offset=offset)


@router.patch("/messages/{message_id}", response=ContactMessageDTO, auth=None)
def update_message(request: HttpRequest, message_id: UUID, payload: ContactUpdateIn):
    require_permission(request, Permissions.CONTACT_MANAGE)
    return services.update_message(message_id, payload)
