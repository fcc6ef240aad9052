"""
URL configuration for ManzelHelp project.
"""
import logging

from django.contrib import admin
from django.urls import path
from django.conf import settings
from django.conf.urls.static import static
from django.db import DatabaseError
from ninja import NinjaAPI
from ninja.errors import HttpError, ValidationError

from apps.core.errors import ServiceError, translate_database_error
from apps.core.i18n import resolve_locale, translate

logger = logging.getLogger(__name__)

api = NinjaAPI(
    title="ManzelHelp API",
    version="1.0.0",
    description="Service marketplace connecting customers with taskers",
    docs_url="/docs",
)


# =============================================================================
# Error responses: {"success": false, "error": <localized message>, "code": ...}
# =============================================================================

def error_response(request, status: int, message: str, code: str, details=None):
    body = {"success": False, "error": message, "code": code}
    if details is not None:
        body["details"] = details
    return api.create_response(request, body, status=status)


@api.exception_handler(ServiceError)
def service_error_handler(request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"Service error on {request.path}: {exc}")
    return error_response(
        request, exc.status_code, exc.localized(resolve_locale(request)), exc.code
    )


@api.exception_handler(HttpError)
def http_error_handler(request, exc: HttpError):
    return error_response(request, exc.status_code, str(exc), "http_error")


@api.exception_handler(ValidationError)
def validation_error_handler(request, exc: ValidationError):
    return error_response(
        request,
        422,
        translate("errors.validation", resolve_locale(request)),
        "validation_error",
        details=exc.errors,
    )


@api.exception_handler(DatabaseError)
def database_error_handler(request, exc: DatabaseError):
    logger.warning(f"Database error on {request.path}: {exc}")
    return service_error_handler(request, translate_database_error(exc))


from apps.identity.api import router as auth_router
from apps.profiles.api import router as profiles_router
from apps.catalog.api import router as catalog_router
from apps.bookings.api import router as bookings_router
from apps.jobs.api import router as jobs_router
from apps.messaging.api import router as messaging_router
from apps.notifications.api import router as notifications_router
from apps.wallet.api import router as wallet_router
from apps.finance.api import router as finance_router
from apps.reviews.api import router as reviews_router
from apps.contact.api import router as contact_router
from apps.dashboard.api import router as dashboard_router
from apps.realtime.api import router as realtime_router

api.add_router("/auth/", auth_router)
api.add_router("/profiles/", profiles_router)
api.add_router("/catalog/", catalog_router)
api.add_router("/bookings/", bookings_router)
api.add_router("/jobs/", jobs_router)
api.add_router("/messages/", messaging_router)
api.add_router("/notifications/", notifications_router)
api.add_router("/wallet/", wallet_router)
api.add_router("/finance/", finance_router)
api.add_router("/reviews/", reviews_router)
api.add_router("/contact/", contact_router)
api.add_router("/dashboard/", dashboard_router)
api.add_router("/realtime/", realtime_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(
        getattr(settings, 'MEDIA_URL', '/media/'),
        document_root=getattr(settings, 'MEDIA_ROOT', settings.BASE_DIR / 'media')
    )
