"""
Local Task Backend - Synchronous execution for development.

This backend executes tasks immediately in the same process.
No Redis, SQS, or external dependencies required.

Usage:
    Set TASK_BACKEND=local in your .env file (the default, also used by tests).
"""

import uuid
import logging
from typing import Any, Dict, List, Optional
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


# Task handler registry - maps task names to handler functions
TASK_HANDLERS = {}


def register_handler(task_name: str):
    """Decorator to register a task handler."""
    def decorator(func):
        TASK_HANDLERS[task_name] = func
        return func
    return decorator


class LocalTaskService(TaskServiceInterface):
    """
    Execute tasks synchronously in the same process.

    This is ideal for:
    - Local development without Docker/Redis
    - Unit testing with immediate execution
    - Debugging task logic

    Note: Tasks run in the same request cycle, so they block
    the response. Only use for development.
    """

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Execute task synchronously."""
        task_id = str(uuid.uuid4())

        logger.info(f"[LOCAL] Executing task {task_name} (id={task_id})")

        if delay_seconds > 0:
            logger.warning(
                f"[LOCAL] delay_seconds={delay_seconds} ignored in local backend"
            )

        handler = TASK_HANDLERS.get(task_name)
        if handler:
            try:
                result = handler(**payload)
                logger.info(f"[LOCAL] Task {task_name} completed: {result}")
            except Exception as e:
                logger.exception(f"[LOCAL] Task {task_name} failed: {e}")
                raise
        else:
            logger.warning(f"[LOCAL] No handler registered for task: {task_name}")

        return task_id


# =============================================================================
# Task Handlers - Shared by the local backend and the SQS Lambda consumer
# =============================================================================

@register_handler("send_email")
def handle_send_email(to: List[str], template: str, locale: Optional[str] = None, params: Optional[dict] = None):
    """Deliver a catalog email synchronously."""
    from apps.core.email_service import send_email
    sent = send_email(to, template, locale, **(params or {}))
    return f"Email '{template}' {'sent' if sent else 'not sent'}"


@register_handler("send_booking_reminders")
def handle_send_booking_reminders():
    """Remind both parties of tomorrow's bookings."""
    from apps.bookings import services
    count = services.send_booking_reminders()
    return f"Sent reminders for {count} bookings"


@register_handler("expire_stale_bookings")
def handle_expire_stale_bookings():
    """Cancel pending bookings whose date has passed."""
    from apps.bookings import services
    count = services.expire_stale_bookings()
    return f"Expired {count} bookings"


@register_handler("send_review_reminders")
def handle_send_review_reminders():
    """Remind customers to review completed work."""
    from apps.reviews import services
    count = services.send_review_reminders()
    return f"Sent {count} review reminders"


@register_handler("prune_realtime_events")
def handle_prune_realtime_events():
    """Delete realtime events past retention."""
    from apps.realtime import services
    count = services.prune_events()
    return f"Pruned {count} realtime events"
