"""Finance endpoints: transactions received, stats and earnings."""
from typing import List, Optional

from django.http import HttpRequest
from ninja import Router

from apps.identity.decorators import has_permission
from apps.identity.permissions import Permissions

from . import services
from .dtos import EarningsPointDTO, FinanceStatsDTO, TransactionPageDTO

router = Router(tags=["Finance"])


@router.get("/transactions", response=TransactionPageDTO, auth=None)
@has_permission(Permissions.FINANCE_VIEW_EARNINGS)
def list_transactions(
    request: HttpRequest,
    limit: int = services.DEFAULT_PAGE_SIZE,
    offset: int = 0,
):
    return services.list_transactions(request.user, limit=limit, offset=offset)


@router.get("/stats", response=FinanceStatsDTO, auth=None)
@has_permission(Permissions.FINANCE_VIEW_EARNINGS)
def finance_stats(request: HttpRequest):
    """Paid earnings for today, yesterday, this/last week, this/last month and all time."""
    return services.get_stats(request.user)


@router.get("/earnings", response=List[EarningsPointDTO], auth=None)
@has_permission(Permissions.FINANCE_VIEW_EARNINGS)
def earnings_by_period(request: HttpRequest, period: str = "month", limit: Optional[int] = None):
    return services.get_earnings_by_period(request.user, period=period, limit=limit)
