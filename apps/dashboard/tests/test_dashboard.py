"""
Tests for the tasker and customer dashboards.
"""
from datetime import date
from decimal import Decimal
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase

from apps.bookings.models import Booking, BookingStatus
from apps.catalog.models import ServiceStatus, TaskerService
from apps.dashboard import services
from apps.finance.services import record_job_payment
from apps.identity.models import UserRole
from apps.jobs.models import Job, JobStatus
from apps.notifications.models import NotificationType
from apps.notifications.services import notify

User = get_user_model()


def make_user(role=UserRole.CUSTOMER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        preferred_language='en',
        **extra,
    )


def make_booking(customer, tasker, status):
    return Booking.objects.create(
        customer=customer,
        tasker=tasker,
        service_title="Plumbing repair",
        agreed_price=Decimal('150.00'),
        status=status,
    )


class DashboardTest(TestCase):

    def setUp(self):
        self.customer = make_user()
        self.tasker = make_user(role=UserRole.TASKER, wallet_balance=Decimal('80.00'))

        for status in (
            BookingStatus.PENDING,
            BookingStatus.ACCEPTED,
            BookingStatus.IN_PROGRESS,
            BookingStatus.COMPLETED,
            BookingStatus.CANCELLED,
        ):
            make_booking(self.customer, self.tasker, status)

        completed = Booking.objects.get(status=BookingStatus.COMPLETED)
        record_job_payment(self.customer, self.tasker, Decimal('150.00'), booking=completed)

        TaskerService.objects.create(
            tasker=self.tasker, category_id=2, title="Pipe fixing",
            description="Leaks and blocked drains", base_price=Decimal('150.00'),
        )
        TaskerService.objects.create(
            tasker=self.tasker, category_id=2, title="Boiler check",
            description="Annual boiler service", base_price=Decimal('200.00'),
            service_status=ServiceStatus.PAUSED,
        )
        for status in (JobStatus.UNDER_REVIEW, JobStatus.ACTIVE, JobStatus.COMPLETED):
            Job.objects.create(
                customer=self.customer, category_id=2, title="Fix the tap",
                description="Kitchen tap drips", preferred_date=date.today(),
                customer_budget=Decimal('100.00'), status=status,
            )
        notify(self.tasker, NotificationType.BOOKING_CREATED, customer_name="Amina", service_title="Pipe fixing")

    def test_tasker_dashboard(self):
        dash = services.get_tasker_dashboard(self.tasker)
        self.assertEqual(dash.wallet_balance, Decimal('80.00'))
        self.assertEqual(dash.total_earnings, Decimal('150.00'))
        self.assertEqual(dash.month_earnings, Decimal('150.00'))
        self.assertEqual(dash.active_bookings, 2)
        self.assertEqual(dash.completed_bookings, 1)
        self.assertEqual(dash.pending_requests, 1)
        self.assertEqual(dash.active_services, 1)
        self.assertEqual(dash.total_reviews, 0)
        self.assertEqual(dash.unread_notifications, 1)
        self.assertEqual(dash.unread_messages, 0)
        self.assertEqual(len(dash.recent_bookings), 5)

    def test_customer_dashboard(self):
        dash = services.get_customer_dashboard(self.customer)
        self.assertEqual(dash.total_bookings, 5)
        self.assertEqual(dash.active_bookings, 2)
        self.assertEqual(dash.completed_bookings, 1)
        self.assertEqual(dash.posted_jobs, 3)
        self.assertEqual(dash.active_jobs, 1)
        self.assertEqual(dash.total_spent, Decimal('150.00'))
        self.assertEqual(len(dash.recent_bookings), 5)

    def test_tasker_dashboard_forbidden_for_customer(self):
        client = Client()
        client.force_login(self.customer)
        self.assertEqual(client.get('/api/dashboard/tasker').status_code, 403)
        self.assertEqual(client.get('/api/dashboard/customer').status_code, 200)
