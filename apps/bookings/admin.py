from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'service_title', 'customer', 'tasker', 'status', 'agreed_price', 'scheduled_date')
    list_filter = ('status', 'booking_type', 'payment_method')
    search_fields = ('service_title', 'customer__email', 'tasker__email')
    readonly_fields = ('created_at', 'updated_at')
