from django.contrib import admin

from .models import ContactMessage


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ('subject', 'email', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('subject', 'email', 'first_name', 'last_name')
    readonly_fields = ('created_at', 'updated_at', 'replied_at')
