"""DTOs and input schemas for Identity app."""
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID
from typing import Optional, List

from ninja import Schema

from .models import UserRole


@dataclass(frozen=True)
class UserDTO:
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    phone: str
    avatar_url: str
    preferred_language: str
    email_verified: bool
    wallet_balance: Decimal
    is_active: bool
    permissions: List[str]


@dataclass(frozen=True)
class PublicUserDTO:
    """What other marketplace users may see about someone."""
    id: UUID
    first_name: str
    last_name: str
    avatar_url: str
    role: str


class SignupIn(Schema):
    email: str
    password: str
    role: str = UserRole.CUSTOMER
    first_name: str = ""
    last_name: str = ""
    preferred_language: Optional[str] = None


class LoginIn(Schema):
    email: str
    password: str


class EmailConfirmIn(Schema):
    uid: str
    token: str


class PasswordResetRequestIn(Schema):
    email: str


class PasswordResetConfirmIn(Schema):
    uid: str
    token: str
    password: str
    confirm_password: str


class ChangePasswordIn(Schema):
    current_password: str
    new_password: str


class LanguageIn(Schema):
    locale: str
