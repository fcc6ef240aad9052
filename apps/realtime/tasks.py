"""Celery tasks for the realtime app."""
from celery import shared_task

from .services import prune_events


@shared_task
def prune_realtime_events():
    deleted = prune_events()
    return f"Pruned {deleted} realtime events"
