"""
Messaging services: two-party conversations and their messages.
Non-participants always get 404 so conversation ids are not disclosed.
"""
import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from apps.core.errors import NotFoundError, ValidationFailed
from apps.identity.models import User
from apps.identity.services import to_public_user
from apps.notifications.models import NotificationType
from apps.notifications.services import notify

from .dtos import ConversationDTO, MessageDTO, MessagePageDTO, StartConversationIn
from .models import Conversation, Message

logger = logging.getLogger(__name__)

INITIAL_MESSAGE_LENGTH = (10, 500)
CONTENT_LENGTH = (1, 5000)
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def _message_to_dto(m: Message) -> MessageDTO:
    return MessageDTO(
        id=m.id,
        conversation_id=m.conversation_id,
        sender_id=m.sender_id,
        content=m.content,
        is_read=m.is_read,
        created_at=m.created_at,
    )


def _conversation_to_dto(c: Conversation, user: User, unread_count: int = 0) -> ConversationDTO:
    other = c.participant2 if c.participant1_id == user.id else c.participant1
    last = c.messages.order_by('-created_at').first()
    return ConversationDTO(
        id=c.id,
        other_participant=to_public_user(other),
        job_id=c.job_id,
        service_id=c.service_id,
        booking_id=c.booking_id,
        last_message=_message_to_dto(last) if last else None,
        last_message_at=c.last_message_at,
        unread_count=unread_count,
        created_at=c.created_at,
    )


def _clean(content: str, bounds, key: str) -> str:
    content = (content or "").strip()
    low, high = bounds
    if not (low <= len(content) <= high):
        raise ValidationFailed(key)
    return content


def _pair_filter(a_id, b_id) -> Q:
    return Q(participant1_id=a_id, participant2_id=b_id) | Q(participant1_id=b_id, participant2_id=a_id)


def _participant_conversations(user: User):
    return Conversation.objects.filter(Q(participant1=user) | Q(participant2=user))


def _get_conversation(user: User, conversation_id: UUID) -> Conversation:
    try:
        return _participant_conversations(user).select_related(
            'participant1', 'participant2'
        ).get(id=conversation_id)
    except Conversation.DoesNotExist:
        raise NotFoundError("messages.conversationNotFound")


def _append_message(conversation: Conversation, sender: User, content: str) -> Message:
    message = Message.objects.create(conversation=conversation, sender=sender, content=content)
    conversation.last_message_at = message.created_at
    conversation.save(update_fields=['last_message_at'])

    recipient_id = conversation.other_participant_id(sender.id)
    recipient = User.objects.filter(id=recipient_id).first()
    if recipient is not None:
        notify(recipient, NotificationType.MESSAGE_RECEIVED, sender_name=sender.display_name)
    return message


# =============================================================================
# Operations
# =============================================================================

def start_conversation(user: User, data: StartConversationIn) -> ConversationDTO:
    """
    Open (or reuse) a conversation with `recipient_id` and post the first message.
    With a service id, only a conversation about the same service is reused.
    """
    if data.recipient_id == user.id:
        raise ValidationFailed("messages.selfMessage")
    recipient = User.objects.filter(id=data.recipient_id, is_active=True).first()
    if recipient is None:
        raise NotFoundError("messages.recipientNotFound")
    content = _clean(data.initial_message, INITIAL_MESSAGE_LENGTH, "messages.initialMessageLength")

    with transaction.atomic():
        existing = Conversation.objects.filter(_pair_filter(user.id, recipient.id))
        if data.service_id:
            existing = existing.filter(service_id=data.service_id)
        conversation = existing.order_by(F('last_message_at').desc(nulls_last=True)).first()

        if conversation is None:
            conversation = Conversation.objects.create(
                participant1=user,
                participant2=recipient,
                job_id=data.job_id,
                service_id=data.service_id,
                booking_id=data.booking_id,
            )
            logger.info(f"Conversation {conversation.id} started by {user.id}")

        _append_message(conversation, user, content)

    conversation = _get_conversation(user, conversation.id)
    return _conversation_to_dto(conversation, user)


def list_conversations(user: User) -> List[ConversationDTO]:
    qs = _participant_conversations(user).select_related(
        'participant1', 'participant2'
    ).annotate(
        unread=Count(
            'messages',
            filter=Q(messages__is_read=False) & ~Q(messages__sender=user),
        )
    ).order_by(F('last_message_at').desc(nulls_last=True), '-created_at')
    return [_conversation_to_dto(c, user, c.unread) for c in qs]


def get_messages(
    user: User,
    conversation_id: UUID,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> MessagePageDTO:
    conversation = _get_conversation(user, conversation_id)
    qs = Message.objects.filter(conversation=conversation).order_by('created_at')
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)
    total = qs.count()
    page = list(qs[offset:offset + limit])
    return MessagePageDTO(
        messages=[_message_to_dto(m) for m in page],
        total=total,
        has_more=offset + len(page) < total,
    )


def send_message(user: User, conversation_id: UUID, content: str) -> MessageDTO:
    content = _clean(content, CONTENT_LENGTH, "messages.contentLength")
    conversation = _get_conversation(user, conversation_id)
    with transaction.atomic():
        message = _append_message(conversation, user, content)
    return _message_to_dto(message)


def mark_conversation_read(user: User, conversation_id: UUID) -> int:
    """Mark the other participant's messages as read. Returns how many changed."""
    conversation = _get_conversation(user, conversation_id)
    now = timezone.now()
    updated = 0
    for message in conversation.messages.filter(is_read=False).exclude(sender=user):
        message.is_read = True
        message.read_at = now
        message.save(update_fields=['is_read', 'read_at'])
        updated += 1
    return updated


def unread_count(user: User) -> int:
    return Message.objects.filter(
        Q(conversation__participant1=user) | Q(conversation__participant2=user),
        is_read=False,
    ).exclude(sender=user).count()
