"""
Contact form: public submission and the admin inbox.
"""
import logging
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.utils import timezone

from apps.core.email_service import queue_email
from apps.core.errors import NotFoundError, ValidationFailed
from apps.identity.models import User
from apps.identity.services import list_admins

from .dtos import ContactIn, ContactMessageDTO, ContactPageDTO, ContactUpdateIn
from .models import ContactMessage, ContactStatus

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
SUBJECT_LENGTH = (3, 200)
MESSAGE_LENGTH = (10, 5000)
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


def to_dto(m: ContactMessage) -> ContactMessageDTO:
    return ContactMessageDTO(
        id=m.id,
        first_name=m.first_name,
        last_name=m.last_name,
        email=m.email,
        phone=m.phone,
        subject=m.subject,
        message=m.message,
        status=m.status,
        admin_notes=m.admin_notes,
        replied_at=m.replied_at,
        created_at=m.created_at,
    )


def _admin_recipients() -> List[str]:
    recipients = [settings.SUPPORT_EMAIL] if getattr(settings, 'SUPPORT_EMAIL', '') else []
    recipients += [email for email in list_admins().values_list('email', flat=True) if email]
    return list(dict.fromkeys(recipients))


def submit_message(data: ContactIn, user: Optional[User] = None) -> ContactMessageDTO:
    first_name = (data.first_name or "").strip()
    last_name = (data.last_name or "").strip()
    for field, value in (("first_name", first_name), ("last_name", last_name)):
        if len(value) < NAME_MIN_LENGTH:
            raise ValidationFailed("contact.nameLength", field=field)

    email = (data.email or "").strip().lower()
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationFailed("contact.invalidEmail")

    subject = (data.subject or "").strip()
    if not SUBJECT_LENGTH[0] <= len(subject) <= SUBJECT_LENGTH[1]:
        raise ValidationFailed("contact.subjectLength")
    message = (data.message or "").strip()
    if not MESSAGE_LENGTH[0] <= len(message) <= MESSAGE_LENGTH[1]:
        raise ValidationFailed("contact.messageLength")

    contact = ContactMessage.objects.create(
        user=user,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=(data.phone or "").strip()[:20],
        subject=subject,
        message=message,
    )
    logger.info(f"Contact message {contact.id} received from {email}")

    queue_email(
        _admin_recipients(),
        "contactReceived",
        settings.LANGUAGE_CODE,
        name=f"{first_name} {last_name}",
        email=email,
        subject=subject,
        message=message,
    )
    return to_dto(contact)


def list_messages(
    status: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> ContactPageDTO:
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)

    qs = ContactMessage.objects.all()
    if status:
        qs = qs.filter(status=status)
    return ContactPageDTO(
        messages=[to_dto(m) for m in qs[offset:offset + limit]],
        total=qs.count(),
    )


def update_message(message_id: UUID, data: ContactUpdateIn) -> ContactMessageDTO:
    try:
        contact = ContactMessage.objects.get(id=message_id)
    except ContactMessage.DoesNotExist:
        raise NotFoundError("contact.notFound")

    fields = ['updated_at']
    if data.status is not None:
        if data.status not in ContactStatus.values:
            raise ValidationFailed("contact.invalidStatus")
        contact.status = data.status
        fields.append('status')
        if data.status == ContactStatus.REPLIED:
            contact.replied_at = timezone.now()
            fields.append('replied_at')
    if data.admin_notes is not None:
        contact.admin_notes = data.admin_notes.strip()
        fields.append('admin_notes')

    contact.save(update_fields=fields)
    return to_dto(contact)
