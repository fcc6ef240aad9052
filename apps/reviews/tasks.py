"""Celery tasks for the reviews app."""
from celery import shared_task

from . import services


@shared_task
def send_review_reminders():
    """Daily: nudge customers to review work completed over a day ago."""
    sent = services.send_review_reminders()
    return f"Sent {sent} review reminders"
