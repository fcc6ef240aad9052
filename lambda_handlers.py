"""
Lambda Handlers - Entry points for AWS Lambda functions.

This module provides Lambda handlers for:
1. SQS Task Processing - Consumes messages from task queue
2. Django API (via Mangum) - HTTP requests through API Gateway
3. Scheduled Events - EventBridge triggers for reminders and cleanup

The handlers use Django's setup to access models and services.
"""

import os
import sys
import json
import logging

# Ensure the project root is in the path for Lambda
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Configure Django before importing any models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def sqs_task_handler(event, context):
    """
    AWS Lambda handler for SQS task messages.

    Event structure:
    {
        "Records": [
            {
                "body": "{\"task_id\": \"...\", \"task_name\": \"...\", \"payload\": {...}}"
            }
        ]
    }

    A failing message is re-raised so SQS retries it and eventually
    moves it to the dead-letter queue.
    """
    from apps.core.backends.local_backend import TASK_HANDLERS

    processed = 0
    skipped = 0

    for record in event.get('Records', []):
        message = json.loads(record['body'])
        task_id = message.get('task_id', 'unknown')
        task_name = message['task_name']
        payload = message.get('payload', {})

        handler = TASK_HANDLERS.get(task_name)
        if handler is None:
            logger.error(f"No handler for task: {task_name}")
            skipped += 1
            continue

        logger.info(f"Processing task {task_name} (id={task_id})")
        try:
            result = handler(**payload)
        except Exception as e:
            logger.exception(f"Task {task_name} (id={task_id}) failed: {e}")
            raise
        logger.info(f"Task {task_name} completed: {result}")
        processed += 1

    return {
        'statusCode': 200,
        'body': json.dumps({
            'processed': processed,
            'skipped': skipped,
        })
    }


def _scheduled(name: str, queue):
    """Hand a sweep to the task queue so it runs on the SQS consumer."""
    logger.info(f"Running scheduled {name}")
    task_id = queue()
    return {
        'statusCode': 200,
        'body': json.dumps({'task': name, 'task_id': task_id})
    }


def scheduled_booking_reminders(event, context):
    """
    EventBridge scheduled handler: remind both parties of tomorrow's bookings.

    Schedule: Hourly
    """
    from apps.core.task_service import TaskService
    return _scheduled("send_booking_reminders", TaskService.send_booking_reminders)


def scheduled_expire_bookings(event, context):
    """
    EventBridge scheduled handler: cancel pending bookings whose date passed.

    Schedule: Every 30 minutes
    """
    from apps.core.task_service import TaskService
    return _scheduled("expire_stale_bookings", TaskService.expire_stale_bookings)


def scheduled_review_reminders(event, context):
    """
    EventBridge scheduled handler: nudge customers to review completed work.

    Schedule: Daily
    """
    from apps.core.task_service import TaskService
    return _scheduled("send_review_reminders", TaskService.send_review_reminders)


def scheduled_prune_realtime(event, context):
    """
    EventBridge scheduled handler: delete realtime events past retention.

    Schedule: Hourly
    """
    from apps.core.task_service import TaskService
    return _scheduled("prune_realtime_events", TaskService.prune_realtime_events)


# =============================================================================
# Django API Handler (Mangum)
# =============================================================================

def api_handler(event, context):
    """
    AWS Lambda handler for HTTP requests via API Gateway.

    Uses Mangum to wrap Django's ASGI application.
    """
    from config.asgi import lambda_handler
    return lambda_handler(event, context)
