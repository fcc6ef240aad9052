"""
Tests for bookings.

Covers:
1. Creation rules (own service, duplicates, address, requirements)
2. The status state machine and who may move it
3. Payment recording on completion and refund
4. Scheduled reminders and expiry
"""
import json
from datetime import date, time, timedelta
from decimal import Decimal
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase
from django.utils import timezone

from apps.bookings import services
from apps.bookings.dtos import BookingIn
from apps.bookings.models import Booking, BookingStatus, PaymentMethod
from apps.catalog.models import PricingType, ServiceStatus, TaskerService
from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.finance.models import PaymentStatus, Transaction
from apps.identity.models import UserRole
from apps.notifications.models import Notification, NotificationType
from apps.profiles.dtos import AddressIn
from apps.profiles.services import create_address

User = get_user_model()


def make_user(role=UserRole.CUSTOMER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        preferred_language='en',
        **extra,
    )


def make_service(tasker, **overrides):
    data = dict(
        tasker=tasker,
        category_id=301,
        title="Leak repair",
        description="Fixing leaking pipes and taps",
        pricing_type=PricingType.FIXED,
        base_price=Decimal('200.00'),
    )
    data.update(overrides)
    return TaskerService.objects.create(**data)


def booking_in(service, **overrides):
    data = dict(service_id=service.id, agreed_price=Decimal('200.00'))
    data.update(overrides)
    return BookingIn(**data)


class BookingTestCase(TestCase):

    def setUp(self):
        self.tasker = make_user(role=UserRole.TASKER)
        self.customer = make_user(first_name="Amina", last_name="Benali")
        self.service = make_service(self.tasker)
        self.address = create_address(self.customer, AddressIn(
            label="home", street_address="12 Rue Ibn Batouta", city="Rabat", region="Rabat-Salé",
        ))

    def book(self, **overrides):
        return services.create_booking(self.customer, booking_in(self.service, **overrides))

    def move(self, user, booking_id, target, reason=None):
        return services.transition_booking(user, booking_id, target, reason)


class CreateBookingTest(BookingTestCase):

    def test_create_uses_default_address(self):
        dto = self.book()
        self.assertEqual(dto.status, BookingStatus.PENDING)
        self.assertEqual(dto.address.id, self.address.id)
        self.assertEqual(dto.service_title, "Leak repair")
        self.assertEqual(dto.tasker.id, self.tasker.id)
        self.assertTrue(Notification.objects.filter(
            user=self.tasker, notification_type=NotificationType.BOOKING_CREATED
        ).exists())

    def test_cannot_book_own_service(self):
        with self.assertRaises(ValidationFailed):
            services.create_booking(self.tasker, booking_in(self.service))

    def test_inactive_service(self):
        self.service.service_status = ServiceStatus.PAUSED
        self.service.save()
        with self.assertRaises(ValidationFailed):
            self.book()

    def test_unknown_service(self):
        with self.assertRaises(NotFoundError):
            services.create_booking(self.customer, BookingIn(service_id=uuid4(), agreed_price=Decimal('10')))

    def test_duplicate_open_booking(self):
        self.book()
        with self.assertRaises(ConflictError):
            self.book()

    def test_rebook_after_cancel(self):
        first = self.book()
        services.cancel_booking(self.customer, first.id, "changed my mind")
        second = self.book()
        self.assertNotEqual(first.id, second.id)

    def test_address_required(self):
        with self.assertRaises(ValidationFailed):
            services.create_booking(make_user(), booking_in(self.service))
        with self.assertRaises(NotFoundError):
            self.book(address_id=uuid4())

    def test_invalid_inputs(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        cases = [
            {'agreed_price': Decimal('0')},
            {'booking_type': 'someday'},
            {'payment_method': 'barter'},
            {'booking_type': 'scheduled'},
            {'scheduled_date': timezone.localdate() - timedelta(days=1)},
            {'scheduled_date': tomorrow, 'scheduled_time_start': time(14), 'scheduled_time_end': time(10)},
            {'estimated_duration': Decimal('0.2')},
            {'customer_requirements': 'Too short'},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationFailed):
                    self.book(**overrides)

    def test_hourly_minimum_duration(self):
        hourly = make_service(
            self.tasker, title="Gardening", pricing_type=PricingType.HOURLY,
            base_price=None, hourly_rate=Decimal('80.00'), minimum_duration=Decimal('2.0'),
        )
        with self.assertRaises(ValidationFailed):
            services.create_booking(self.customer, booking_in(hourly, estimated_duration=Decimal('1.5')))
        dto = services.create_booking(self.customer, booking_in(hourly, estimated_duration=Decimal('2.0')))
        self.assertEqual(dto.estimated_duration, Decimal('2.0'))

    def test_scheduled_booking(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        dto = self.book(
            booking_type='scheduled',
            scheduled_date=tomorrow,
            scheduled_time_start=time(9),
            scheduled_time_end=time(11),
            customer_requirements="The leak is under the kitchen sink. " * 4,
        )
        self.assertEqual(dto.scheduled_date, tomorrow)
        self.assertTrue(dto.customer_requirements.startswith("The leak"))


class TransitionTest(BookingTestCase):

    def setUp(self):
        super().setUp()
        self.booking = self.book()

    def test_happy_path(self):
        self.move(self.tasker, self.booking.id, BookingStatus.ACCEPTED)
        self.move(self.customer, self.booking.id, BookingStatus.CONFIRMED)
        self.move(self.tasker, self.booking.id, BookingStatus.IN_PROGRESS)
        dto = self.move(self.tasker, self.booking.id, BookingStatus.COMPLETED)

        self.assertEqual(dto.status, BookingStatus.COMPLETED)
        self.assertIsNotNone(dto.accepted_at)
        self.assertIsNotNone(dto.confirmed_at)
        self.assertIsNotNone(dto.started_at)
        self.assertIsNotNone(dto.completed_at)

        payment = Transaction.objects.get(booking_id=self.booking.id)
        self.assertEqual(payment.payment_status, PaymentStatus.PAID)
        self.assertEqual(payment.amount, Decimal('200.00'))
        self.assertEqual(payment.payee, self.tasker)
        self.assertTrue(Notification.objects.filter(
            user=self.customer, notification_type=NotificationType.BOOKING_COMPLETED
        ).exists())

    def test_customer_cannot_accept(self):
        with self.assertRaises(PermissionDeniedError):
            self.move(self.customer, self.booking.id, BookingStatus.ACCEPTED)

    def test_invalid_transition(self):
        with self.assertRaises(ValidationFailed):
            self.move(self.tasker, self.booking.id, BookingStatus.COMPLETED)

    def test_stranger_sees_not_found(self):
        with self.assertRaises(NotFoundError):
            self.move(make_user(), self.booking.id, BookingStatus.CANCELLED)
        with self.assertRaises(NotFoundError):
            services.get_booking(make_user(), self.booking.id)

    def test_cancel_records_reason(self):
        dto = services.cancel_booking(self.tasker, self.booking.id, "  fully booked  ")
        self.assertEqual(dto.status, BookingStatus.CANCELLED)
        self.assertEqual(dto.cancellation_reason, "fully booked")
        self.assertEqual(dto.cancelled_by_id, self.tasker.id)
        self.assertTrue(Notification.objects.filter(
            user=self.customer, notification_type=NotificationType.BOOKING_CANCELLED
        ).exists())

    def test_cannot_cancel_completed(self):
        Booking.objects.filter(id=self.booking.id).update(status=BookingStatus.COMPLETED)
        with self.assertRaises(ValidationFailed) as ctx:
            services.cancel_booking(self.customer, self.booking.id)
        self.assertEqual(ctx.exception.message_key, "bookings.cannotCancel")

    def test_pending_payment_method(self):
        Booking.objects.filter(id=self.booking.id).update(
            status=BookingStatus.IN_PROGRESS, payment_method=PaymentMethod.PENDING,
        )
        self.move(self.tasker, self.booking.id, BookingStatus.COMPLETED)
        payment = Transaction.objects.get(booking_id=self.booking.id)
        self.assertEqual(payment.payment_status, PaymentStatus.PENDING)
        self.assertIsNone(payment.processed_at)

    def test_dispute_resolved_by_refund(self):
        admin = make_user(role=UserRole.ADMIN)
        Booking.objects.filter(id=self.booking.id).update(status=BookingStatus.IN_PROGRESS)
        self.move(self.tasker, self.booking.id, BookingStatus.COMPLETED)
        self.move(self.customer, self.booking.id, BookingStatus.DISPUTED)

        with self.assertRaises(PermissionDeniedError):
            self.move(self.customer, self.booking.id, BookingStatus.REFUNDED)

        dto = self.move(admin, self.booking.id, BookingStatus.REFUNDED)
        self.assertEqual(dto.status, BookingStatus.REFUNDED)
        payment = Transaction.objects.get(booking_id=self.booking.id)
        self.assertEqual(payment.payment_status, PaymentStatus.REFUNDED)


class ListBookingsTest(BookingTestCase):

    def test_list_by_role(self):
        self.book()
        self.assertEqual(services.list_bookings(self.customer).total, 1)
        self.assertEqual(services.list_bookings(self.customer, as_role=services.TASKER).total, 0)
        self.assertEqual(services.list_bookings(self.tasker, as_role=services.TASKER).total, 1)

    def test_status_filter(self):
        dto = self.book()
        services.cancel_booking(self.customer, dto.id)
        self.assertEqual(services.list_bookings(self.customer, status=BookingStatus.PENDING).total, 0)
        self.assertEqual(services.list_bookings(self.customer, status=BookingStatus.CANCELLED).total, 1)


class ScheduledJobsTest(BookingTestCase):

    def make_booking(self, status, scheduled_date):
        return Booking.objects.create(
            customer=self.customer,
            tasker=self.tasker,
            service=self.service,
            service_title=self.service.title,
            agreed_price=Decimal('200.00'),
            status=status,
            scheduled_date=scheduled_date,
        )

    def test_reminders_sent_once(self):
        today = date(2025, 6, 15)
        self.make_booking(BookingStatus.CONFIRMED, date(2025, 6, 16))
        self.make_booking(BookingStatus.PENDING, date(2025, 6, 16))
        self.make_booking(BookingStatus.ACCEPTED, date(2025, 6, 18))

        self.assertEqual(services.send_booking_reminders(today=today), 1)
        self.assertEqual(Notification.objects.filter(
            notification_type=NotificationType.BOOKING_REMINDER
        ).count(), 2)
        self.assertEqual(services.send_booking_reminders(today=today), 0)

    def test_expire_stale_pending(self):
        today = date(2025, 6, 15)
        stale = self.make_booking(BookingStatus.PENDING, date(2025, 6, 14))
        fresh = self.make_booking(BookingStatus.PENDING, date(2025, 6, 15))
        accepted = self.make_booking(BookingStatus.ACCEPTED, date(2025, 6, 1))

        self.assertEqual(services.expire_stale_bookings(today=today), 1)
        stale.refresh_from_db()
        self.assertEqual(stale.status, BookingStatus.CANCELLED)
        self.assertEqual(stale.cancellation_reason, "expired")
        self.assertEqual(Booking.objects.get(id=fresh.id).status, BookingStatus.PENDING)
        self.assertEqual(Booking.objects.get(id=accepted.id).status, BookingStatus.ACCEPTED)


class BookingAPITest(BookingTestCase):

    def test_create_and_accept(self):
        client = Client()
        client.force_login(self.customer)
        response = client.post(
            '/api/bookings/',
            data=json.dumps({'service_id': str(self.service.id), 'agreed_price': '200.00'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        booking_id = response.json()['id']

        response = client.post(
            f'/api/bookings/{booking_id}/status',
            data=json.dumps({'status': 'accepted'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)

        tasker_client = Client()
        tasker_client.force_login(self.tasker)
        response = tasker_client.post(
            f'/api/bookings/{booking_id}/status',
            data=json.dumps({'status': 'accepted'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'accepted')

        listing = tasker_client.get('/api/bookings/?role=tasker')
        self.assertEqual(listing.json()['total'], 1)

    def test_tasker_cannot_create(self):
        client = Client()
        client.force_login(make_user(role=UserRole.TASKER))
        response = client.post(
            '/api/bookings/',
            data=json.dumps({'service_id': str(self.service.id), 'agreed_price': '200.00'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)
