"""
JWT Authentication utilities for ManzelHelp.

Provides token generation, validation, and cookie management
for stateless authentication compatible with AWS Lambda.
"""
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID
from django.conf import settings


JWT_ALGORITHM = 'HS256'
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 7

ACCESS_COOKIE = 'access_token'
REFRESH_COOKIE = 'refresh_token'


def _secret() -> str:
    return getattr(settings, 'JWT_SECRET', None) or settings.SECRET_KEY


def _encode(user_id: UUID, token_type: str, lifetime: timedelta, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'exp': now + lifetime,
        'iat': now,
        'type': token_type,
        **claims,
    }
    return jwt.encode(payload, _secret(), algorithm=JWT_ALGORITHM)


def create_access_token(user_id: UUID, role: str) -> str:
    """
    Create a short-lived access token carrying the user's role.
    Expires in 15 minutes.
    """
    return _encode(
        user_id, 'access', timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES), role=role
    )


def create_refresh_token(user_id: UUID) -> str:
    """
    Create a long-lived refresh token.
    Expires in 7 days.
    """
    return _encode(user_id, 'refresh', timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


def create_token_pair(user_id: UUID, role: str) -> Tuple[str, str]:
    """
    Create both access and refresh tokens.

    Returns:
        (access_token, refresh_token)
    """
    return (
        create_access_token(user_id, role),
        create_refresh_token(user_id)
    )


def decode_token(token: str, expected_type: Optional[str] = None) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload if valid (and of the expected type), None otherwise.
    """
    try:
        payload = jwt.decode(token, _secret(), algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    if expected_type and payload.get('type') != expected_type:
        return None
    return payload


def get_user_id_from_token(token: str, expected_type: str = 'access') -> Optional[UUID]:
    """
    Extract user_id from a valid token.

    Returns:
        UUID of user if token valid, None otherwise.
    """
    payload = decode_token(token, expected_type)
    if payload and 'sub' in payload:
        try:
            return UUID(payload['sub'])
        except ValueError:
            return None
    return None


# Cookie configuration
def get_cookie_settings(is_production: bool = False) -> dict:
    """
    Production: Secure, SameSite=Lax
    Development: Not secure (localhost), SameSite=Lax
    """
    return {
        'httponly': True,
        'secure': is_production,
        'samesite': 'Lax',
        'path': '/',
    }


def get_access_token_cookie_settings(is_production: bool = False) -> dict:
    """Cookie settings for access token."""
    cookie = get_cookie_settings(is_production)
    cookie['max_age'] = ACCESS_TOKEN_EXPIRE_MINUTES * 60
    return cookie


def get_refresh_token_cookie_settings(is_production: bool = False) -> dict:
    """Cookie settings for refresh token."""
    cookie = get_cookie_settings(is_production)
    cookie['max_age'] = REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    return cookie
