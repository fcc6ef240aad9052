from django.contrib import admin

from .models import Job, JobApplication


class JobApplicationInline(admin.TabularInline):
    model = JobApplication
    extra = 0
    fields = ('tasker', 'proposed_price', 'status', 'created_at')
    readonly_fields = ('created_at',)


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ('title', 'customer', 'status', 'customer_budget', 'application_count', 'preferred_date')
    list_filter = ('status',)
    search_fields = ('title', 'description', 'customer__email')
    inlines = [JobApplicationInline]


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ('job', 'tasker', 'proposed_price', 'status', 'created_at')
    list_filter = ('status',)
