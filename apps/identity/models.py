import uuid
from decimal import Decimal
from django.db import models
from django.contrib.auth.models import AbstractUser, UserManager


class UserRole(models.TextChoices):
    CUSTOMER = 'customer', 'Customer'
    TASKER = 'tasker', 'Tasker'
    BOTH = 'both', 'Customer & Tasker'
    ADMIN = 'admin', 'Administrator'


class Language(models.TextChoices):
    EN = 'en', 'English'
    FR = 'fr', 'Français'
    AR = 'ar', 'العربية'
    DE = 'de', 'Deutsch'


class MarketplaceUserManager(UserManager):
    """Email is the login; username mirrors it unless given."""

    def create_user(self, username=None, email=None, password=None, **extra_fields):
        email = self.normalize_email(email or '').lower()
        return super().create_user(username or email, email, password, **extra_fields)

    def create_superuser(self, username=None, email=None, password=None, **extra_fields):
        extra_fields.setdefault('role', UserRole.ADMIN)
        email = self.normalize_email(email or '').lower()
        return super().create_superuser(username or email, email, password, **extra_fields)


class User(AbstractUser):
    """
    Marketplace account. A single user can act as customer, tasker or both.
    The wallet balance lives here and only changes through wallet services.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CUSTOMER,
        db_index=True,
    )
    phone = models.CharField(max_length=20, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    avatar_url = models.URLField(max_length=500, blank=True)
    preferred_language = models.CharField(
        max_length=2,
        choices=Language.choices,
        default=Language.FR,
    )
    email_verified = models.BooleanField(default=False)
    wallet_balance = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00')
    )
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    objects = MarketplaceUserManager()

    class Meta:
        ordering = ['email']

    def __str__(self):
        return self.email or self.username

    @property
    def display_name(self) -> str:
        full = self.get_full_name()
        return full or self.email.split('@')[0]

    @property
    def is_tasker(self) -> bool:
        return self.role in (UserRole.TASKER, UserRole.BOTH)

    @property
    def is_customer(self) -> bool:
        return self.role in (UserRole.CUSTOMER, UserRole.BOTH)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN or self.is_superuser
