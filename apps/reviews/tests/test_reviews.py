"""
Tests for reviews.

Covers:
1. Review creation rules (completed work, customer only, one per target)
2. Tasker replies
3. Rating summary math
4. Review reminder sweep
"""
import json
from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase
from django.utils import timezone

from apps.bookings.models import Booking, BookingStatus
from apps.core.errors import ConflictError, PermissionDeniedError, ValidationFailed
from apps.identity.models import UserRole
from apps.jobs.models import Job, JobStatus
from apps.notifications.models import Notification, NotificationType
from apps.reviews import services
from apps.reviews.dtos import ReviewIn

User = get_user_model()


def make_user(role=UserRole.CUSTOMER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        preferred_language='en',
        **extra,
    )


def make_booking(customer, tasker, status=BookingStatus.COMPLETED, completed_at=None):
    return Booking.objects.create(
        customer=customer,
        tasker=tasker,
        service_title="Deep cleaning",
        agreed_price=Decimal('200.00'),
        status=status,
        completed_at=completed_at or timezone.now(),
    )


def make_job(customer, tasker, status=JobStatus.COMPLETED, completed_at=None):
    return Job.objects.create(
        customer=customer,
        category_id=1,
        title="Paint the living room",
        description="Two walls, white paint provided.",
        preferred_date=date.today(),
        customer_budget=Decimal('400.00'),
        status=status,
        assigned_tasker=tasker,
        completed_at=completed_at or timezone.now(),
    )


class CreateReviewTest(TestCase):

    def setUp(self):
        self.customer = make_user()
        self.tasker = make_user(role=UserRole.TASKER)
        self.booking = make_booking(self.customer, self.tasker)

    def test_review_completed_booking(self):
        dto = services.create_review(self.customer, ReviewIn(
            booking_id=self.booking.id, overall_rating=5, quality_rating=4, comment="  Great work  ",
        ))
        self.assertEqual(dto.reviewee_id, self.tasker.id)
        self.assertEqual(dto.comment, "Great work")
        self.assertTrue(Notification.objects.filter(
            user=self.tasker, notification_type=NotificationType.REVIEW_RECEIVED
        ).exists())

    def test_review_completed_job(self):
        job = make_job(self.customer, self.tasker)
        dto = services.create_review(self.customer, ReviewIn(job_id=job.id, overall_rating=4))
        self.assertEqual(dto.job_id, job.id)

    def test_rating_bounds(self):
        for bad in (0, 6):
            with self.assertRaises(ValidationFailed):
                services.create_review(self.customer, ReviewIn(
                    booking_id=self.booking.id, overall_rating=bad,
                ))
        with self.assertRaises(ValidationFailed):
            services.create_review(self.customer, ReviewIn(
                booking_id=self.booking.id, overall_rating=5, timeliness_rating=7,
            ))

    def test_comment_too_long(self):
        with self.assertRaises(ValidationFailed):
            services.create_review(self.customer, ReviewIn(
                booking_id=self.booking.id, overall_rating=5, comment="x" * 2001,
            ))

    def test_target_required(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.create_review(self.customer, ReviewIn(overall_rating=5))
        self.assertEqual(ctx.exception.message_key, "reviews.targetRequired")

    def test_unfinished_booking_rejected(self):
        booking = make_booking(self.customer, self.tasker, status=BookingStatus.IN_PROGRESS)
        with self.assertRaises(ValidationFailed):
            services.create_review(self.customer, ReviewIn(booking_id=booking.id, overall_rating=5))

    def test_only_customer_can_review(self):
        with self.assertRaises(PermissionDeniedError):
            services.create_review(self.tasker, ReviewIn(booking_id=self.booking.id, overall_rating=5))

    def test_one_review_per_booking(self):
        services.create_review(self.customer, ReviewIn(booking_id=self.booking.id, overall_rating=5))
        with self.assertRaises(ConflictError):
            services.create_review(self.customer, ReviewIn(booking_id=self.booking.id, overall_rating=3))


class ReplyAndSummaryTest(TestCase):

    def setUp(self):
        self.customer = make_user()
        self.tasker = make_user(role=UserRole.TASKER)
        self.reviews = [
            services.create_review(self.customer, ReviewIn(
                booking_id=make_booking(self.customer, self.tasker).id, overall_rating=rating,
            ))
            for rating in (5, 4, 5)
        ]

    def test_reply_once(self):
        review_id = self.reviews[0].id
        dto = services.reply_to_review(self.tasker, review_id, "  Thank you!  ")
        self.assertEqual(dto.reply, "Thank you!")
        self.assertIsNotNone(dto.replied_at)
        with self.assertRaises(ConflictError):
            services.reply_to_review(self.tasker, review_id, "Again")

    def test_reply_length(self):
        with self.assertRaises(ValidationFailed):
            services.reply_to_review(self.tasker, self.reviews[0].id, "   ")
        with self.assertRaises(ValidationFailed):
            services.reply_to_review(self.tasker, self.reviews[0].id, "x" * 1001)

    def test_only_reviewee_can_reply(self):
        with self.assertRaises(PermissionDeniedError):
            services.reply_to_review(self.customer, self.reviews[0].id, "Hi")

    def test_rating_summary(self):
        services.reply_to_review(self.tasker, self.reviews[0].id, "Thanks")
        summary = services.get_rating_summary(self.tasker.id)
        self.assertEqual(summary.avg_rating, 4.7)
        self.assertEqual(summary.total_reviews, 3)
        self.assertEqual(summary.response_rate, 33)
        self.assertEqual(summary.five_star_count, 2)

    def test_summary_without_reviews(self):
        summary = services.get_rating_summary(make_user(role=UserRole.TASKER).id)
        self.assertEqual(summary.avg_rating, 0)
        self.assertEqual(summary.total_reviews, 0)
        self.assertEqual(summary.response_rate, 0)

    def test_list_pagination(self):
        page = services.list_tasker_reviews(self.tasker.id, limit=2)
        self.assertEqual(len(page.reviews), 2)
        self.assertTrue(page.has_more)
        self.assertEqual(page.stats.total_reviews, 3)


class ReviewReminderTest(TestCase):

    def setUp(self):
        self.customer = make_user()
        self.tasker = make_user(role=UserRole.TASKER)
        two_days_ago = timezone.now() - timedelta(days=2)
        self.old_booking = make_booking(self.customer, self.tasker, completed_at=two_days_ago)
        self.recent_booking = make_booking(self.customer, self.tasker)
        self.old_job = make_job(self.customer, self.tasker, completed_at=two_days_ago)
        self.reviewed = make_booking(self.customer, self.tasker, completed_at=two_days_ago)
        services.create_review(self.customer, ReviewIn(booking_id=self.reviewed.id, overall_rating=5))

    def test_reminds_once_for_old_unreviewed_work(self):
        self.assertEqual(services.send_review_reminders(), 2)
        self.assertTrue(Notification.objects.filter(
            user=self.customer,
            notification_type=NotificationType.REVIEW_REMINDER,
            related_booking_id=self.old_booking.id,
        ).exists())
        self.assertTrue(Notification.objects.filter(
            user=self.customer,
            notification_type=NotificationType.JOB_REVIEW_REMINDER,
            related_job_id=self.old_job.id,
        ).exists())

        self.assertEqual(services.send_review_reminders(), 0)


class ReviewAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.customer = make_user()
        self.tasker = make_user(role=UserRole.TASKER)
        self.booking = make_booking(self.customer, self.tasker)

    def test_create_over_api(self):
        self.client.force_login(self.customer)
        response = self.client.post(
            '/api/reviews/',
            data=json.dumps({'booking_id': str(self.booking.id), 'overall_rating': 5}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)

        again = self.client.post(
            '/api/reviews/',
            data=json.dumps({'booking_id': str(self.booking.id), 'overall_rating': 4}),
            content_type='application/json',
        )
        self.assertEqual(again.status_code, 409)

    def test_public_listing(self):
        services.create_review(self.customer, ReviewIn(booking_id=self.booking.id, overall_rating=4))
        response = Client().get(f'/api/reviews/taskers/{self.tasker.id}')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data['reviews']), 1)
        self.assertEqual(data['stats']['avg_rating'], 4.0)

    def test_tasker_cannot_create(self):
        self.client.force_login(self.tasker)
        response = self.client.post(
            '/api/reviews/',
            data=json.dumps({'booking_id': str(self.booking.id), 'overall_rating': 5}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)
