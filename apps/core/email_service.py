"""
Transactional email.

Subjects and bodies come from the locale catalogs ("emails.<name>").
Delivery goes through Django's mail framework, so the provider (SMTP,
SES, console, locmem in tests) is chosen by EMAIL_BACKEND.

send_email() is fire-and-forget: a delivery failure is logged and never
breaks the calling request.
"""
import logging
from typing import List, Optional, Union

from django.conf import settings
from django.core.mail import send_mail

from .i18n import translate

logger = logging.getLogger(__name__)


def render_email(template: str, locale: Optional[str], **params) -> tuple:
    """Return (subject, body) for a catalog email template."""
    subject = translate(f"emails.{template}.subject", locale, **params)
    body = translate(f"emails.{template}.body", locale, **params)
    return subject, body


def send_email(
    to: Union[str, List[str]],
    template: str,
    locale: Optional[str] = None,
    **params,
) -> bool:
    """
    Render and send a catalog email right away.

    Returns True when the backend accepted the message.
    """
    recipients = [to] if isinstance(to, str) else list(to)
    recipients = [r for r in recipients if r]
    if not recipients:
        logger.warning(f"Email '{template}' has no recipients; skipped")
        return False

    subject, body = render_email(template, locale, **params)
    try:
        sent = send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipients,
        )
        logger.info(f"Email '{template}' sent to {len(recipients)} recipient(s)")
        return sent > 0
    except Exception as e:
        logger.exception(f"Failed to send email '{template}': {e}")
        return False


def queue_email(
    to: Union[str, List[str]],
    template: str,
    locale: Optional[str] = None,
    **params,
) -> Optional[str]:
    """
    Hand an email to the task backend.

    Parameters must be JSON-serializable; the local backend delivers
    synchronously, Celery/Lambda deliver from a worker.
    """
    from .task_service import TaskService

    recipients = [to] if isinstance(to, str) else list(to)
    try:
        return TaskService.send_email(
            to=recipients, template=template, locale=locale, params=params
        )
    except Exception as e:
        logger.exception(f"Failed to queue email '{template}': {e}")
        return None
