from django.contrib import admin

from .models import RealtimeEvent


@admin.register(RealtimeEvent)
class RealtimeEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'channel', 'action', 'user_id', 'record_id', 'created_at')
    list_filter = ('channel', 'action')
    search_fields = ('user_id', 'record_id')
