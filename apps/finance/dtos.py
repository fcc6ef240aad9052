"""DTOs for Finance app."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID


@dataclass(frozen=True)
class TransactionDTO:
    id: UUID
    transaction_type: str
    payment_status: str
    amount: Decimal
    net_amount: Decimal
    currency: str
    payer_id: Optional[UUID]
    payer_name: str
    payee_id: Optional[UUID]
    booking_id: Optional[UUID]
    job_id: Optional[UUID]
    description: str
    processed_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class TransactionPageDTO:
    transactions: List[TransactionDTO]
    total: int
    has_more: bool


@dataclass(frozen=True)
class FinanceStatsDTO:
    today: Decimal
    yesterday: Decimal
    this_week: Decimal
    last_week: Decimal
    this_month: Decimal
    last_month: Decimal
    total: Decimal


@dataclass(frozen=True)
class EarningsPointDTO:
    period: str
    amount: Decimal
    count: int
