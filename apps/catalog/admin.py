from django.contrib import admin

from .models import TaskerService


@admin.register(TaskerService)
class TaskerServiceAdmin(admin.ModelAdmin):
    list_display = ('title', 'tasker', 'category_id', 'pricing_type', 'service_status', 'created_at')
    list_filter = ('service_status', 'pricing_type', 'is_promoted')
    search_fields = ('title', 'description', 'tasker__email')
