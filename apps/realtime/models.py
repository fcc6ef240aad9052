"""Models for Realtime app."""
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class Channel(models.TextChoices):
    NOTIFICATIONS = 'notifications', 'Notifications'
    MESSAGES = 'messages', 'Messages'
    CONVERSATIONS = 'conversations', 'Conversations'
    BOOKINGS = 'bookings', 'Bookings'
    JOBS = 'jobs', 'Jobs'
    JOB_APPLICATIONS = 'job_applications', 'Job applications'
    WALLET_REFUNDS = 'wallet_refunds', 'Wallet refunds'
    TRANSACTIONS = 'transactions', 'Transactions'


class EventAction(models.TextChoices):
    INSERT = 'INSERT', 'Insert'
    UPDATE = 'UPDATE', 'Update'
    DELETE = 'DELETE', 'Delete'


class RealtimeEvent(models.Model):
    """
    Outbox row describing a change a user should see live.
    Clients poll with the last id they received as cursor.
    """
    id = models.BigAutoField(primary_key=True)
    # Plain UUID: events must survive the recipient's cascade deletes
    user_id = models.UUIDField(db_index=True)
    channel = models.CharField(max_length=30, choices=Channel.choices)
    action = models.CharField(max_length=10, choices=EventAction.choices)
    record_id = models.CharField(max_length=64)
    payload = models.JSONField(default=dict, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['id']
        indexes = [
            models.Index(fields=['user_id', 'id']),
        ]

    def __str__(self):
        return f"#{self.id} {self.channel}:{self.action} -> {self.user_id}"
