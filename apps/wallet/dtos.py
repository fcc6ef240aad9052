"""DTOs and schemas for Wallet app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from ninja import Schema

from apps.identity.dtos import PublicUserDTO


@dataclass(frozen=True)
class WalletTransactionDTO:
    id: UUID
    transaction_type: str
    amount: Decimal
    balance_after: Decimal
    refund_request_id: Optional[UUID]
    notes: str
    created_at: datetime


@dataclass(frozen=True)
class WalletSummaryDTO:
    balance: Decimal
    currency: str
    recent_transactions: List[WalletTransactionDTO]
    has_open_refund: bool


@dataclass(frozen=True)
class RefundRequestDTO:
    id: UUID
    tasker: PublicUserDTO
    amount: Decimal
    currency: str
    reference_code: str
    status: str
    receipt_url: str
    admin_id: Optional[UUID]
    admin_notes: str
    payment_confirmed_at: Optional[datetime]
    approved_at: Optional[datetime]
    rejected_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class RefundRequestIn(Schema):
    amount: Decimal


class AdminNotesIn(Schema):
    admin_notes: Optional[str] = None
