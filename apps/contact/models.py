"""Models for Contact app."""
import uuid
from django.conf import settings
from django.db import models


class ContactStatus(models.TextChoices):
    NEW = 'new', 'New'
    READ = 'read', 'Read'
    REPLIED = 'replied', 'Replied'
    ARCHIVED = 'archived', 'Archived'


class ContactMessage(models.Model):
    """A message sent through the public contact form."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contact_messages',
    )
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    email = models.EmailField()
    phone = models.CharField(max_length=20, blank=True)
    subject = models.CharField(max_length=200)
    message = models.TextField(max_length=5000)

    status = models.CharField(
        max_length=20,
        choices=ContactStatus.choices,
        default=ContactStatus.NEW,
        db_index=True,
    )
    admin_notes = models.TextField(blank=True)
    replied_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.subject} <{self.email}>"
