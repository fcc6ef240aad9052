from functools import wraps
from typing import Callable
from django.http import HttpRequest

from apps.core.errors import AuthenticationError, PermissionDeniedError
from .models import User
from .permissions import get_user_permissions


def require_auth(request: HttpRequest) -> User:
    """Require an authenticated, active user. Raises 401 otherwise."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated or not user.is_active:
        raise AuthenticationError("errors.authRequired")
    return user


def require_permission(request: HttpRequest, permission: str) -> User:
    """Require a specific permission. Raises 401/403."""
    user = require_auth(request)
    if permission not in get_user_permissions(user):
        raise PermissionDeniedError("errors.permissionDenied")
    return user


def has_permission(required_perm: str):
    """
    Decorator to enforce a specific permission on a Django Ninja endpoint.

    Usage:
        @router.get("/some-path")
        @has_permission(Permissions.SOME_PERM)
        def my_view(request):
            ...
    """
    def decorator(view_func: Callable):
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args, **kwargs):
            require_permission(request, required_perm)
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator
