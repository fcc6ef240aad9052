"""
Celery Task Backend - Async execution via Celery + Redis.

Serves as a fallback option if Lambda doesn't meet requirements.

Usage:
    Set TASK_BACKEND=celery in your .env file.
    Requires Redis and Celery worker running.
"""

import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


# Task names -> registered Celery task paths. Payload keys are passed as kwargs.
CELERY_TASKS = {
    "send_email": "apps.core.tasks.send_email_task",
    "send_booking_reminders": "apps.bookings.tasks.send_booking_reminders",
    "expire_stale_bookings": "apps.bookings.tasks.expire_stale_bookings",
    "send_review_reminders": "apps.reviews.tasks.send_review_reminders",
    "prune_realtime_events": "apps.realtime.tasks.prune_realtime_events",
}


def _get_celery_task(task_name: str):
    """Get the Celery task function for a task name."""
    task_path = CELERY_TASKS.get(task_name)
    if not task_path:
        raise ValueError(f"No Celery task mapped for: {task_name}")

    from celery import current_app
    return current_app.tasks.get(task_path)


class CeleryTaskService(TaskServiceInterface):
    """Execute tasks via Celery + Redis."""

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Queue task via Celery."""
        task_id = str(uuid.uuid4())

        logger.info(f"[CELERY] Queueing task {task_name} (id={task_id})")

        task = _get_celery_task(task_name)

        if task is None:
            logger.error(f"[CELERY] Task not found: {task_name}")
            raise ValueError(f"Celery task not found: {task_name}")

        options = {"kwargs": payload, "task_id": task_id}
        if delay_seconds > 0:
            options["countdown"] = delay_seconds
        task.apply_async(**options)

        return task_id
