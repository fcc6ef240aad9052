"""Dashboard endpoints for the signed-in user."""
from django.http import HttpRequest
from ninja import Router

from apps.identity.decorators import has_permission, require_auth
from apps.identity.permissions import Permissions

from . import services
from .dtos import CustomerDashboardDTO, TaskerDashboardDTO

router = Router(tags=["Dashboard"])


@router.get("/tasker", response=TaskerDashboardDTO, auth=None)
@has_permission(Permissions.BOOKING_MANAGE_AS_TASKER)
def tasker_dashboard(request: HttpRequest):
    return services.get_tasker_dashboard(request.user)


@router.get("/customer", response=CustomerDashboardDTO, auth=None)
def customer_dashboard(request: HttpRequest):
    user = require_auth(request)
    return services.get_customer_dashboard(user)
