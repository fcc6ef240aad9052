"""Celery tasks for the core app."""
from celery import shared_task

from .email_service import send_email


@shared_task
def send_email_task(to, template, locale=None, params=None):
    """Deliver a queued catalog email from a worker."""
    sent = send_email(to, template, locale, **(params or {}))
    return f"Email '{template}' {'sent' if sent else 'not sent'}"
