"""
Model signal producers for the realtime outbox.

Each watched model maps to a channel and a function returning the ids
of the users who should see the change.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db.models.signals import post_delete, post_save

from .models import Channel, EventAction
from .services import publish_on_commit

logger = logging.getLogger(__name__)


def _job_application_recipients(application):
    try:
        owner_id = application.job.customer_id
    except ObjectDoesNotExist:
        owner_id = None
    return [owner_id, application.tasker_id]


def _message_recipients(message):
    try:
        conversation = message.conversation
    except ObjectDoesNotExist:
        return [message.sender_id]
    return [conversation.participant1_id, conversation.participant2_id]


PRODUCERS = {
    'notifications.Notification': (Channel.NOTIFICATIONS, lambda n: [n.user_id]),
    'messaging.Message': (Channel.MESSAGES, _message_recipients),
    'messaging.Conversation': (
        Channel.CONVERSATIONS, lambda c: [c.participant1_id, c.participant2_id]
    ),
    'bookings.Booking': (Channel.BOOKINGS, lambda b: [b.customer_id, b.tasker_id]),
    'jobs.Job': (Channel.JOBS, lambda j: [j.customer_id]),
    'jobs.JobApplication': (Channel.JOB_APPLICATIONS, _job_application_recipients),
    'wallet.WalletRefundRequest': (Channel.WALLET_REFUNDS, lambda r: [r.tasker_id]),
    'finance.Transaction': (Channel.TRANSACTIONS, lambda t: [t.payee_id]),
}


def serialize_instance(instance) -> dict:
    """Concrete field values keyed by attname (foreign keys as `<name>_id`)."""
    return {
        field.attname: field.value_from_object(instance)
        for field in instance._meta.concrete_fields
    }


def _emit(channel, recipients, instance, action):
    try:
        user_ids = recipients(instance)
    except Exception as e:
        logger.error(f"Signal: could not resolve recipients for {channel} {instance.pk}: {e}")
        return
    publish_on_commit(user_ids, channel, action, instance.pk, serialize_instance(instance))


def _make_handlers(channel, recipients):
    def on_save(sender, instance, created, raw=False, **kwargs):
        if raw:
            return
        _emit(channel, recipients, instance, EventAction.INSERT if created else EventAction.UPDATE)

    def on_delete(sender, instance, **kwargs):
        _emit(channel, recipients, instance, EventAction.DELETE)

    return on_save, on_delete


def connect_producers():
    for label, (channel, recipients) in PRODUCERS.items():
        on_save, on_delete = _make_handlers(channel, recipients)
        uid = f"realtime:{label}"
        post_save.connect(on_save, sender=label, weak=False, dispatch_uid=f"{uid}:save")
        post_delete.connect(on_delete, sender=label, weak=False, dispatch_uid=f"{uid}:delete")
