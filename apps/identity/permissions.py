from typing import List, Dict
from .models import UserRole, User

# Define all available permissions here for reference
class Permissions:
    # Bookings
    BOOKING_CREATE = "bookings.create"
    BOOKING_MANAGE_AS_TASKER = "bookings.manage_as_tasker"
    BOOKING_RESOLVE_DISPUTE = "bookings.resolve_dispute"

    # Catalog
    SERVICE_MANAGE = "catalog.manage_service"

    # Jobs
    JOB_POST = "jobs.post"
    JOB_APPLY = "jobs.apply"
    JOB_MODERATE = "jobs.moderate"

    # Reviews
    REVIEW_CREATE = "reviews.create"
    REVIEW_REPLY = "reviews.reply"

    # Wallet / finance
    WALLET_REQUEST_REFUND = "wallet.request_refund"
    WALLET_MANAGE_REFUNDS = "wallet.manage_refunds"
    FINANCE_VIEW_EARNINGS = "finance.view_earnings"

    # Profiles
    PROFILE_VERIFY_TASKER = "profiles.verify_tasker"

    # Contact
    CONTACT_MANAGE = "contact.manage"


CUSTOMER_PERMISSIONS = [
    Permissions.BOOKING_CREATE,
    Permissions.JOB_POST,
    Permissions.REVIEW_CREATE,
]

TASKER_PERMISSIONS = [
    Permissions.BOOKING_MANAGE_AS_TASKER,
    Permissions.SERVICE_MANAGE,
    Permissions.JOB_APPLY,
    Permissions.REVIEW_REPLY,
    Permissions.WALLET_REQUEST_REFUND,
    Permissions.FINANCE_VIEW_EARNINGS,
]

ADMIN_ONLY_PERMISSIONS = [
    Permissions.BOOKING_RESOLVE_DISPUTE,
    Permissions.JOB_MODERATE,
    Permissions.WALLET_MANAGE_REFUNDS,
    Permissions.PROFILE_VERIFY_TASKER,
    Permissions.CONTACT_MANAGE,
]


# Static Role -> Permission Mapping
ROLE_PERMISSIONS: Dict[str, List[str]] = {
    UserRole.CUSTOMER: CUSTOMER_PERMISSIONS,
    UserRole.TASKER: TASKER_PERMISSIONS,
    UserRole.BOTH: CUSTOMER_PERMISSIONS + TASKER_PERMISSIONS,
    UserRole.ADMIN: CUSTOMER_PERMISSIONS + TASKER_PERMISSIONS + ADMIN_ONLY_PERMISSIONS,
}


def get_user_permissions(user: User) -> List[str]:
    """
    Returns a list of permission strings for the given user based on their role.
    Superusers are treated as admins.
    """
    if not user or not user.is_active:
        return []

    if user.is_superuser:
        return list(ROLE_PERMISSIONS[UserRole.ADMIN])

    return list(ROLE_PERMISSIONS.get(user.role, []))
