"""
Auth API endpoints with JWT authentication.

Provides signup, login, logout, token refresh, email confirmation and
password reset. Uses JWT tokens in httpOnly cookies for stateless auth.
"""
import os
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from ninja import Router, Schema

from apps.core.errors import AuthenticationError, NotFoundError

from . import services
from .decorators import require_auth
from .dtos import (
    ChangePasswordIn,
    EmailConfirmIn,
    LanguageIn,
    LoginIn,
    PasswordResetConfirmIn,
    PasswordResetRequestIn,
    SignupIn,
    UserDTO,
)
from .jwt_auth import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    create_access_token,
    create_token_pair,
    decode_token,
    get_access_token_cookie_settings,
    get_refresh_token_cookie_settings,
)
from .models import User

router = Router(tags=["Auth"])


class TokenResponse(Schema):
    success: bool
    user: Optional[UserDTO] = None
    message: Optional[str] = None


class SuccessResponse(Schema):
    success: bool


def is_production() -> bool:
    """Check if running in production (Lambda or DEBUG=False)."""
    return bool(os.getenv('AWS_LAMBDA_FUNCTION_NAME')) or not settings.DEBUG


def _json_response(body: TokenResponse) -> HttpResponse:
    return HttpResponse(body.model_dump_json(), content_type='application/json')


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/signup", response={201: TokenResponse}, auth=None)
def signup(request: HttpRequest, payload: SignupIn):
    """
    Create a customer or tasker account and send the confirmation email.
    """
    user = services.signup(payload)
    return 201, TokenResponse(success=True, user=user, message="confirmation_email_sent")


@router.post("/confirm-email", response=TokenResponse, auth=None)
def confirm_email(request: HttpRequest, payload: EmailConfirmIn):
    user = services.confirm_email(payload.uid, payload.token)
    return TokenResponse(success=True, user=user)


@router.post("/login", response=TokenResponse, auth=None)
def login_user(request: HttpRequest, payload: LoginIn):
    """
    Authenticate by email and set JWT tokens in httpOnly cookies.
    """
    user = services.authenticate_user(request, payload.email, payload.password)

    access_token, refresh_token = create_token_pair(user.id, user.role)
    response = _json_response(TokenResponse(success=True, user=services.get_user_dto(user.id)))

    prod = is_production()
    response.set_cookie(ACCESS_COOKIE, access_token, **get_access_token_cookie_settings(prod))
    response.set_cookie(REFRESH_COOKIE, refresh_token, **get_refresh_token_cookie_settings(prod))
    return response


@router.post("/logout", response=TokenResponse, auth=None)
def logout_user(request: HttpRequest):
    """
    Clear authentication cookies.
    """
    response = _json_response(TokenResponse(success=True, message="Logged out"))
    response.delete_cookie(ACCESS_COOKIE, path='/')
    response.delete_cookie(REFRESH_COOKIE, path='/')
    return response


@router.post("/refresh", response=TokenResponse, auth=None)
def refresh_token(request: HttpRequest):
    """
    Issue a new access token from the refresh token cookie.
    """
    refresh_token_value = request.COOKIES.get(REFRESH_COOKIE)
    if not refresh_token_value:
        raise AuthenticationError("auth.noRefreshToken")

    payload = decode_token(refresh_token_value, expected_type='refresh')
    if not payload:
        raise AuthenticationError("auth.invalidRefreshToken")

    try:
        user = User.objects.get(id=UUID(payload['sub']), is_active=True)
    except (KeyError, ValueError, User.DoesNotExist):
        raise AuthenticationError("auth.invalidRefreshToken")

    response = _json_response(TokenResponse(success=True, user=services.get_user_dto(user.id)))
    response.set_cookie(
        ACCESS_COOKIE,
        create_access_token(user.id, user.role),
        **get_access_token_cookie_settings(is_production()),
    )
    return response


@router.get("/me", response=UserDTO, auth=None)
def get_me(request: HttpRequest):
    """
    Get current authenticated user.
    """
    user = require_auth(request)
    user_dto = services.get_user_dto(user.id)
    if not user_dto:
        raise NotFoundError("profile.userNotFound")
    return user_dto


# =============================================================================
# Passwords & preferences
# =============================================================================

@router.post("/password-reset/request", response=SuccessResponse, auth=None)
def request_password_reset(request: HttpRequest, payload: PasswordResetRequestIn):
    """Always succeeds so account existence is not disclosed."""
    services.request_password_reset(payload.email)
    return {"success": True}


@router.post("/password-reset/confirm", response=SuccessResponse, auth=None)
def confirm_password_reset(request: HttpRequest, payload: PasswordResetConfirmIn):
    services.confirm_password_reset(
        payload.uid, payload.token, payload.password, payload.confirm_password
    )
    return {"success": True}


@router.post("/change-password", response=SuccessResponse, auth=None)
def change_password(request: HttpRequest, payload: ChangePasswordIn):
    user = require_auth(request)
    services.change_password(user, payload.current_password, payload.new_password)
    return {"success": True}


@router.patch("/language", response=UserDTO, auth=None)
def set_language(request: HttpRequest, payload: LanguageIn):
    user = require_auth(request)
    return services.set_language(user, payload.locale)
