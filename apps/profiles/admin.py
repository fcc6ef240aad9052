from django.contrib import admin

from .models import Address, TaskerProfile


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ('label', 'user', 'city', 'region', 'country', 'is_default')
    list_filter = ('country', 'region')
    search_fields = ('street_address', 'city', 'user__email')


@admin.register(TaskerProfile)
class TaskerProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'experience_level', 'verification_status', 'is_available', 'updated_at')
    list_filter = ('verification_status', 'experience_level', 'is_available')
    search_fields = ('user__email', 'user__first_name', 'user__last_name')
