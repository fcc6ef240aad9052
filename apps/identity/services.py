"""Services for Identity app: signup, login, password reset, preferences."""
import logging
import re
from typing import Optional

from django.conf import settings
from django.contrib.auth import authenticate
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Q
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode

from apps.core.email_service import queue_email
from apps.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationFailed
from apps.core.i18n import SUPPORTED_LOCALES, normalize_locale

from .dtos import PublicUserDTO, SignupIn, UserDTO
from .models import User, UserRole
from .permissions import get_user_permissions
from .tokens import email_confirmation_token

logger = logging.getLogger(__name__)

SIGNUP_ROLES = (UserRole.CUSTOMER, UserRole.TASKER)
PASSWORD_MIN_LENGTH = 8
_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")


def _to_dto(user: User) -> UserDTO:
    return UserDTO(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        phone=user.phone,
        avatar_url=user.avatar_url,
        preferred_language=user.preferred_language,
        email_verified=user.email_verified,
        wallet_balance=user.wallet_balance,
        is_active=user.is_active,
        permissions=get_user_permissions(user),
    )


def get_user_dto(user_id) -> Optional[UserDTO]:
    try:
        return _to_dto(User.objects.get(id=user_id))
    except User.DoesNotExist:
        return None


def to_public_user(user: User) -> PublicUserDTO:
    return PublicUserDTO(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar_url=user.avatar_url,
        role=user.role,
    )


# =============================================================================
# Validation
# =============================================================================

def normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    try:
        validate_email(email)
    except ValidationError:
        raise ValidationFailed("auth.invalidEmail")
    return email


def validate_password_strength(password: str) -> None:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if (
        len(password or "") < PASSWORD_MIN_LENGTH
        or not _UPPER.search(password)
        or not _LOWER.search(password)
        or not _DIGIT.search(password)
    ):
        raise ValidationFailed("auth.weakPassword")


# =============================================================================
# Token links
# =============================================================================

def _uid_for(user: User) -> str:
    return urlsafe_base64_encode(force_bytes(user.pk))


def _user_from_uid(uid: str) -> Optional[User]:
    try:
        pk = force_str(urlsafe_base64_decode(uid))
        return User.objects.get(pk=pk)
    except (TypeError, ValueError, OverflowError, ValidationError, User.DoesNotExist):
        return None


def _frontend_link(user: User, path: str, token_generator=default_token_generator) -> str:
    token = token_generator.make_token(user)
    return f"{settings.FRONTEND_URL}/{user.preferred_language}/{path}?uid={_uid_for(user)}&token={token}"


def send_confirmation_email(user: User) -> None:
    queue_email(
        user.email,
        "confirmEmail",
        user.preferred_language,
        name=user.display_name,
        link=_frontend_link(user, "confirm", email_confirmation_token),
    )


# =============================================================================
# Operations
# =============================================================================

def signup(payload: SignupIn) -> UserDTO:
    email = normalize_email(payload.email)
    validate_password_strength(payload.password)

    role = payload.role or UserRole.CUSTOMER
    if role not in SIGNUP_ROLES:
        raise ValidationFailed("auth.invalidRole")

    if User.objects.filter(email__iexact=email).exists():
        raise ConflictError("auth.emailTaken")

    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            password=payload.password,
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            role=role,
            preferred_language=normalize_locale(payload.preferred_language),
        )

    logger.info(f"New {role} account {user.id}")
    send_confirmation_email(user)
    return _to_dto(user)


def confirm_email(uid: str, token: str) -> UserDTO:
    user = _user_from_uid(uid)
    if user is None or not email_confirmation_token.check_token(user, token):
        raise ValidationFailed("auth.invalidConfirmToken")

    if not user.email_verified:
        user.email_verified = True
        user.save(update_fields=["email_verified", "updated_at"])
    return _to_dto(user)


def authenticate_user(request, email: str, password: str) -> User:
    """
    Check credentials. A disabled account with the right password gets a
    distinct message; every other failure is the generic one.
    """
    email = (email or "").strip().lower()
    user = authenticate(request, username=email, password=password)
    if user is not None:
        return user

    inactive = User.objects.filter(email__iexact=email, is_active=False).first()
    if inactive is not None and inactive.check_password(password):
        raise AuthenticationError("auth.accountDisabled")
    raise AuthenticationError("auth.invalidCredentials")


def request_password_reset(email: str) -> None:
    """Send a reset link when the account exists. Never reveals whether it does."""
    user = User.objects.filter(email__iexact=(email or "").strip(), is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return

    queue_email(
        user.email,
        "passwordReset",
        user.preferred_language,
        name=user.display_name,
        link=_frontend_link(user, "reset-password"),
    )


def confirm_password_reset(uid: str, token: str, password: str, confirm_password: str) -> None:
    if password != confirm_password:
        raise ValidationFailed("auth.passwordMismatch")
    validate_password_strength(password)

    user = _user_from_uid(uid)
    if user is None or not default_token_generator.check_token(user, token):
        raise ValidationFailed("auth.invalidResetToken")

    user.set_password(password)
    user.save(update_fields=["password", "updated_at"])
    logger.info(f"Password reset for user {user.id}")


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not user.check_password(current_password):
        raise ValidationFailed("auth.wrongCurrentPassword")
    validate_password_strength(new_password)
    user.set_password(new_password)
    user.save(update_fields=["password", "updated_at"])


def set_language(user: User, locale: str) -> UserDTO:
    code = (locale or "").lower()
    if code not in SUPPORTED_LOCALES:
        raise ValidationFailed("auth.invalidLanguage", code=locale)
    user.preferred_language = code
    user.save(update_fields=["preferred_language", "updated_at"])
    return _to_dto(user)


def get_active_user(user_id) -> User:
    try:
        return User.objects.get(id=user_id, is_active=True)
    except User.DoesNotExist:
        raise NotFoundError("profile.userNotFound")


def list_admins():
    return User.objects.filter(Q(role=UserRole.ADMIN) | Q(is_superuser=True), is_active=True)
