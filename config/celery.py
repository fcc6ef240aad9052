"""
Celery configuration for ManzelHelp project.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat Schedule
app.conf.beat_schedule = {
    'send-booking-reminders': {
        'task': 'apps.bookings.tasks.send_booking_reminders',
        'schedule': crontab(minute='0'),  # Hourly
    },
    'expire-stale-bookings': {
        'task': 'apps.bookings.tasks.expire_stale_bookings',
        'schedule': crontab(minute='*/30'),  # Every 30 minutes
    },
    'send-review-reminders': {
        'task': 'apps.reviews.tasks.send_review_reminders',
        'schedule': crontab(hour='10', minute='0'),  # Daily
    },
    'prune-realtime-events': {
        'task': 'apps.realtime.tasks.prune_realtime_events',
        'schedule': crontab(minute='15'),  # Hourly
    },
}
