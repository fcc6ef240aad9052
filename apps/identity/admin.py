from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'wallet_balance', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'email_verified', 'preferred_language']
    search_fields = ['email', 'first_name', 'last_name', 'phone']
    ordering = ['email']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Marketplace', {
            'fields': ('role', 'phone', 'date_of_birth', 'avatar_url',
                       'preferred_language', 'email_verified', 'wallet_balance'),
        }),
    )
