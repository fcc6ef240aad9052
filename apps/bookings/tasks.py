"""Celery tasks for the bookings app."""
from celery import shared_task

from . import services


@shared_task
def send_booking_reminders():
    """Hourly: remind both parties of bookings scheduled for tomorrow."""
    sent = services.send_booking_reminders()
    return f"Reminded {sent} bookings"


@shared_task
def expire_stale_bookings():
    """Cancel pending bookings whose date has passed."""
    expired = services.expire_stale_bookings()
    return f"Expired {expired} bookings"
