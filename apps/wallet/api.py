"""
Wallet endpoints: balance, ledger and refund requests.
Admin routes live under /wallet/admin/.
"""
from typing import List, Optional
from uuid import UUID

from django.http import HttpRequest
from ninja import File, Router
from ninja.files import UploadedFile

from apps.identity.decorators import require_auth, require_permission
from apps.identity.permissions import Permissions

from . import services
from .dtos import (
    AdminNotesIn,
    RefundRequestDTO,
    RefundRequestIn,
    WalletSummaryDTO,
    WalletTransactionDTO,
)

router = Router(tags=["Wallet"])


@router.get("/", response=WalletSummaryDTO, auth=None)
def wallet_summary(request: HttpRequest):
    user = require_auth(request)
    return services.get_wallet_summary(user)


@router.get("/transactions", response=List[WalletTransactionDTO], auth=None)
def wallet_transactions(request: HttpRequest, limit: int = 50, offset: int = 0):
    user = require_auth(request)
    return services.list_wallet_transactions(user, limit=limit, offset=offset)


# =============================================================================
# Refund requests (tasker)
# =============================================================================

@router.post("/refunds", response={201: RefundRequestDTO}, auth=None)
def create_refund_request(request: HttpRequest, payload: RefundRequestIn):
    user = require_auth(request)
    return 201, services.create_refund_request(user, payload.amount)


@router.get("/refunds", response=List[RefundRequestDTO], auth=None)
def list_my_refund_requests(request: HttpRequest):
    user = require_auth(request)
    return services.list_my_refund_requests(user)


@router.post("/refunds/{request_id}/confirm-payment", response=RefundRequestDTO, auth=None)
def confirm_refund_payment(request: HttpRequest, request_id: UUID, receipt: UploadedFile = File(...)):
    """Upload the payment receipt (JPEG, PNG, WebP or PDF, max 5 MB)."""
    user = require_auth(request)
    return services.confirm_refund_payment(user, request_id, receipt)


# =============================================================================
# Refund requests (admin)
# =============================================================================

@router.get("/admin/refunds", response=List[RefundRequestDTO], auth=None)
def admin_list_refund_requests(request: HttpRequest, status: Optional[str] = None):
    require_permission(request, Permissions.WALLET_MANAGE_REFUNDS)
    return services.list_refund_requests(status=status)


@router.post("/admin/refunds/{request_id}/verify", response=RefundRequestDTO, auth=None)
def admin_mark_verifying(request: HttpRequest, request_id: UUID, payload: AdminNotesIn):
    admin = require_permission(request, Permissions.WALLET_MANAGE_REFUNDS)
    return services.mark_verifying(admin, request_id, payload.admin_notes)


@router.post("/admin/refunds/{request_id}/approve", response=RefundRequestDTO, auth=None)
def admin_approve_refund(request: HttpRequest, request_id: UUID, payload: AdminNotesIn):
    admin = require_permission(request, Permissions.WALLET_MANAGE_REFUNDS)
    return services.approve_refund(admin, request_id, payload.admin_notes)


@router.post("/admin/refunds/{request_id}/reject", response=RefundRequestDTO, auth=None)
def admin_reject_refund(request: HttpRequest, request_id: UUID, payload: AdminNotesIn):
    admin = require_permission(request, Permissions.WALLET_MANAGE_REFUNDS)
    return services.reject_refund(admin, request_id, payload.admin_notes)
