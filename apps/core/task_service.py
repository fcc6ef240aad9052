"""
TaskService - Abstraction layer for async task execution.

This module provides a platform-agnostic interface for executing background tasks.
The actual backend is determined by the TASK_BACKEND environment variable.

Usage:
    from apps.core.task_service import TaskService

    # Queue a transactional email
    TaskService.send_email(to=["a@b.ma"], template="passwordReset", locale="fr", params={...})

    # Queue the hourly booking reminder sweep
    TaskService.send_booking_reminders()

Environment Configuration:
    TASK_BACKEND=local   # Sync execution (development/tests)
    TASK_BACKEND=lambda  # AWS Lambda + SQS (production)
    TASK_BACKEND=celery  # Celery + Redis (fallback)
"""

import os
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class TaskServiceInterface(ABC):
    """
    Abstract interface for async task execution.

    Implementations:
    - LocalTaskService: Sync execution for development/testing
    - LambdaTaskService: AWS Lambda + SQS for production
    - CeleryTaskService: Celery + Redis as fallback
    """

    @abstractmethod
    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """
        Queue a task for async execution.

        Args:
            task_name: Identifier for the task handler
            payload: JSON-serializable keyword arguments for the handler
            delay_seconds: Delay before execution (0 = immediate)

        Returns:
            Task ID for tracking
        """
        pass


def _get_backend() -> TaskServiceInterface:
    """Get the configured task backend based on TASK_BACKEND env var."""
    backend = os.getenv('TASK_BACKEND', 'local')

    if backend == 'local':
        from apps.core.backends.local_backend import LocalTaskService
        return LocalTaskService()
    elif backend == 'lambda':
        from apps.core.backends.lambda_backend import LambdaTaskService
        return LambdaTaskService()
    elif backend == 'celery':
        from apps.core.backends.celery_backend import CeleryTaskService
        return CeleryTaskService()
    else:
        raise ValueError(f"Unknown TASK_BACKEND: {backend}")


class TaskService:
    """
    Facade for sending async tasks.

    This class provides static methods for each task type,
    delegating to the configured backend.
    """

    @staticmethod
    def send_email(
        to: List[str],
        template: str,
        locale: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Queue a catalog email.

        Used by: signup confirmation, password reset, wallet refunds, contact form.
        """
        logger.info(f"Queueing send_email task '{template}' for {len(to)} recipient(s)")
        return _get_backend().send_task(
            task_name="send_email",
            payload={
                "to": list(to),
                "template": template,
                "locale": locale,
                "params": params or {},
            },
        )

    @staticmethod
    def send_booking_reminders() -> str:
        """
        Queue the reminder sweep for bookings scheduled tomorrow.

        Used by: Hourly schedule.
        """
        logger.info("Queueing send_booking_reminders task")
        return _get_backend().send_task(task_name="send_booking_reminders", payload={})

    @staticmethod
    def expire_stale_bookings() -> str:
        """
        Queue cancellation of pending bookings whose date has passed.

        Used by: Schedule every 30 minutes.
        """
        logger.info("Queueing expire_stale_bookings task")
        return _get_backend().send_task(task_name="expire_stale_bookings", payload={})

    @staticmethod
    def send_review_reminders() -> str:
        """
        Queue review reminders for completed, unreviewed work.

        Used by: Daily schedule.
        """
        logger.info("Queueing send_review_reminders task")
        return _get_backend().send_task(task_name="send_review_reminders", payload={})

    @staticmethod
    def prune_realtime_events() -> str:
        """
        Queue deletion of realtime events past their retention window.

        Used by: Hourly schedule.
        """
        logger.info("Queueing prune_realtime_events task")
        return _get_backend().send_task(task_name="prune_realtime_events", payload={})
