"""Models for Jobs app: jobs posted by customers and tasker applications."""
import uuid
from django.conf import settings
from django.db import models


class JobStatus(models.TextChoices):
    UNDER_REVIEW = 'under_review', 'Under review'
    ACTIVE = 'active', 'Active'
    ASSIGNED = 'assigned', 'Assigned'
    IN_PROGRESS = 'in_progress', 'In progress'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class ApplicationStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    REJECTED = 'rejected', 'Rejected'
    WITHDRAWN = 'withdrawn', 'Withdrawn'


class Job(models.Model):
    """
    A task a customer posts for taskers to apply to.
    New jobs wait for moderation before they are listed.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='posted_jobs',
    )
    category_id = models.PositiveIntegerField(db_index=True)
    title = models.CharField(max_length=100)
    description = models.TextField(max_length=2000)
    address = models.ForeignKey(
        'profiles.Address',
        on_delete=models.SET_NULL,
        null=True,
        related_name='jobs',
    )

    preferred_date = models.DateField()
    preferred_time_start = models.TimeField(null=True, blank=True)
    preferred_time_end = models.TimeField(null=True, blank=True)
    is_flexible = models.BooleanField(default=False)
    customer_budget = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='MAD')
    estimated_duration = models.DecimalField(max_digits=5, decimal_places=1, null=True, blank=True)
    requirements = models.TextField(blank=True)

    max_applications = models.PositiveSmallIntegerField(default=3)
    application_count = models.PositiveSmallIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=JobStatus.choices,
        default=JobStatus.UNDER_REVIEW,
        db_index=True,
    )
    assigned_tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_jobs',
    )
    final_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    approved_at = models.DateTimeField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    payment_confirmed_at = models.DateTimeField(null=True, blank=True)
    review_reminder_sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'category_id']),
        ]

    def __str__(self):
        return self.title


class JobApplication(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    tasker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='job_applications',
    )
    proposed_price = models.DecimalField(max_digits=10, decimal_places=2)
    estimated_duration = models.DecimalField(max_digits=5, decimal_places=1)
    message = models.TextField(max_length=500)
    availability = models.CharField(max_length=200, blank=True)
    experience_level = models.CharField(max_length=20, blank=True)
    status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.PENDING,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['job', 'tasker'], name='unique_application_per_tasker'),
        ]

    def __str__(self):
        return f"Application {self.tasker_id} -> {self.job_id} ({self.status})"
