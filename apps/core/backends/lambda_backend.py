"""
Lambda Task Backend - Async execution via AWS SQS + Lambda.

Messages go to SQS; lambda_handlers.sqs_task_handler consumes them and
dispatches to the handlers registered in local_backend.

Usage:
    Set TASK_BACKEND=lambda in your .env file.

Environment Variables:
    TASK_QUEUE_URL: SQS queue URL for task messages (".fifo" queues supported)
    AWS_REGION: AWS region (default: eu-west-3)
"""

import os
import json
import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)

SQS_MAX_DELAY_SECONDS = 900


class LambdaTaskService(TaskServiceInterface):
    """Execute tasks via AWS SQS + Lambda."""

    def __init__(self):
        self._sqs_client = None
        self._queue_url = os.getenv('TASK_QUEUE_URL')

        if not self._queue_url:
            logger.warning(
                "[LAMBDA] TASK_QUEUE_URL not set. "
                "Lambda backend will fail on send_task."
            )

    @property
    def sqs_client(self):
        """Lazy initialization of SQS client."""
        if self._sqs_client is None:
            import boto3
            self._sqs_client = boto3.client(
                'sqs',
                region_name=os.getenv('AWS_REGION', 'eu-west-3')
            )
        return self._sqs_client

    @property
    def is_fifo(self) -> bool:
        return bool(self._queue_url) and self._queue_url.endswith('.fifo')

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Queue task via SQS."""
        task_id = str(uuid.uuid4())

        if not self._queue_url:
            raise RuntimeError(
                "TASK_QUEUE_URL environment variable not set. "
                "Cannot send tasks to Lambda backend."
            )

        message = {
            'QueueUrl': self._queue_url,
            'MessageBody': json.dumps({
                "task_id": task_id,
                "task_name": task_name,
                "payload": payload,
            }),
            'MessageAttributes': {
                'TaskName': {'DataType': 'String', 'StringValue': task_name},
                'TaskId': {'DataType': 'String', 'StringValue': task_id},
            },
        }
        if self.is_fifo:
            # FIFO queues reject per-message delays
            message['MessageGroupId'] = task_name
            message['MessageDeduplicationId'] = task_id
        else:
            message['DelaySeconds'] = min(delay_seconds, SQS_MAX_DELAY_SECONDS)

        logger.info(f"[LAMBDA] Sending task {task_name} to SQS (id={task_id})")

        try:
            response = self.sqs_client.send_message(**message)
        except Exception as e:
            logger.exception(f"[LAMBDA] Failed to send task {task_name}: {e}")
            raise

        logger.info(
            f"[LAMBDA] Task {task_name} queued. "
            f"SQS MessageId: {response['MessageId']}"
        )
        return task_id
