from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('id', 'reviewee', 'reviewer', 'overall_rating', 'replied_at', 'created_at')
    list_filter = ('overall_rating',)
    search_fields = ('reviewee__email', 'reviewer__email', 'comment')
    readonly_fields = ('created_at', 'updated_at')
