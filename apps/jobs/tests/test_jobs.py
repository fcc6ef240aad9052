"""
Tests for posted jobs and tasker applications.
"""
import json
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase
from django.utils import timezone

from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.finance.models import PaymentStatus, Transaction
from apps.identity.models import UserRole
from apps.jobs import services
from apps.jobs.dtos import ApplicationIn, JobIn, JobUpdateIn
from apps.jobs.models import ApplicationStatus, Job, JobApplication, JobStatus
from apps.notifications.models import Notification, NotificationType
from apps.profiles.dtos import AddressIn
from apps.profiles.services import create_address

User = get_user_model()

DESCRIPTION = (
    "The bathroom sink has been leaking for a week and the cabinet under it "
    "is getting damaged. Looking for someone to replace the trap and seals."
)
MESSAGE = "I replace sink traps every week and can come tomorrow morning."


def make_user(role=UserRole.CUSTOMER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        preferred_language='en',
        **extra,
    )


def application_in(**overrides):
    data = dict(proposed_price=Decimal('180.00'), estimated_duration=Decimal('2'), message=MESSAGE)
    data.update(overrides)
    return ApplicationIn(**data)


class JobTestCase(TestCase):

    def setUp(self):
        self.customer = make_user()
        self.admin = make_user(role=UserRole.ADMIN)
        self.tasker = make_user(role=UserRole.TASKER, first_name="Youssef")
        self.address = create_address(self.customer, AddressIn(
            label="home", street_address="12 Rue Ibn Batouta", city="Rabat", region="Rabat-Salé",
        ))

    def job_in(self, **overrides):
        data = dict(
            title="Fix the bathroom sink",
            description=DESCRIPTION,
            category_id=301,
            preferred_date=timezone.localdate() + timedelta(days=2),
            address_id=self.address.id,
            customer_budget=Decimal('200.00'),
        )
        data.update(overrides)
        return JobIn(**data)

    def post_job(self, **overrides):
        return services.create_job(self.customer, self.job_in(**overrides))

    def active_job(self, **overrides):
        job = self.post_job(**overrides)
        return services.approve_job(self.admin, job.id)


class PostJobTest(JobTestCase):

    def test_new_job_is_under_review(self):
        dto = self.post_job()
        self.assertEqual(dto.status, JobStatus.UNDER_REVIEW)
        self.assertEqual(dto.address.id, self.address.id)
        self.assertEqual(dto.max_applications, 3)
        self.assertTrue(Notification.objects.filter(
            user=self.customer, notification_type=NotificationType.JOB_CREATED
        ).exists())

    def test_validation(self):
        cases = [
            {'title': 'Fix'},
            {'description': 'Too short to be useful'},
            {'category_id': 999},
            {'preferred_date': timezone.localdate() - timedelta(days=1)},
            {'customer_budget': Decimal('0')},
            {'estimated_duration': Decimal('0.25')},
            {'max_applications': 11},
            {'requirements': 'x' * 2001},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationFailed):
                    self.post_job(**overrides)

    def test_foreign_address(self):
        other = create_address(make_user(), AddressIn(
            label="home", street_address="1 Avenue Mohammed V", city="Fes", region="Fes-Meknes",
        ))
        with self.assertRaises(NotFoundError):
            self.post_job(address_id=other.id)

    def test_update_and_delete(self):
        dto = self.post_job()
        updated = services.update_job(self.customer, dto.id, JobUpdateIn(customer_budget=Decimal('250')))
        self.assertEqual(updated.customer_budget, Decimal('250'))
        self.assertEqual(updated.title, "Fix the bathroom sink")

        with self.assertRaises(PermissionDeniedError):
            services.update_job(make_user(), dto.id, JobUpdateIn(title="Someone else's job"))

        services.delete_job(self.customer, dto.id)
        self.assertFalse(Job.objects.filter(id=dto.id).exists())


class ModerationTest(JobTestCase):

    def test_approve(self):
        dto = self.active_job()
        self.assertEqual(dto.status, JobStatus.ACTIVE)
        self.assertIsNotNone(dto.approved_at)
        self.assertTrue(Notification.objects.filter(
            user=self.customer, notification_type=NotificationType.JOB_APPROVED
        ).exists())

    def test_only_under_review_can_be_moderated(self):
        dto = self.active_job()
        with self.assertRaises(ValidationFailed):
            services.reject_job(self.admin, dto.id)

    def test_listing_shows_active_only(self):
        self.post_job()
        active = self.active_job(title="Paint the hallway", category_id=401)
        page = services.list_active_jobs()
        self.assertEqual([j.id for j in page.jobs], [active.id])
        self.assertEqual(services.list_active_jobs(category_id=4).total, 1)
        self.assertEqual(services.list_active_jobs(search="hallway").total, 1)
        self.assertEqual(services.list_active_jobs(max_budget=Decimal('100')).total, 0)

    def test_hidden_job_visibility(self):
        dto = self.post_job()
        with self.assertRaises(NotFoundError):
            services.get_job_detail(self.tasker, dto.id)
        self.assertEqual(services.get_job_detail(self.customer, dto.id).id, dto.id)
        self.assertEqual(services.get_job_detail(self.admin, dto.id).id, dto.id)


class ApplicationTest(JobTestCase):

    def setUp(self):
        super().setUp()
        self.job = self.active_job(max_applications=2)

    def test_apply(self):
        dto = services.apply_to_job(self.tasker, self.job.id, application_in())
        self.assertEqual(dto.status, ApplicationStatus.PENDING)
        self.assertEqual(Job.objects.get(id=self.job.id).application_count, 1)
        self.assertTrue(Notification.objects.filter(
            user=self.customer, notification_type=NotificationType.APPLICATION_RECEIVED
        ).exists())

    def test_apply_twice(self):
        services.apply_to_job(self.tasker, self.job.id, application_in())
        with self.assertRaises(ConflictError):
            services.apply_to_job(self.tasker, self.job.id, application_in())

    def test_max_applications(self):
        services.apply_to_job(self.tasker, self.job.id, application_in())
        services.apply_to_job(make_user(role=UserRole.TASKER), self.job.id, application_in())
        with self.assertRaises(ConflictError):
            services.apply_to_job(make_user(role=UserRole.TASKER), self.job.id, application_in())

    def test_application_validation(self):
        cases = [
            {'proposed_price': Decimal('0.5')},
            {'estimated_duration': Decimal('0.1')},
            {'message': 'Hire me'},
            {'availability': 'x' * 201},
            {'experience_level': 'guru'},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationFailed):
                    services.apply_to_job(self.tasker, self.job.id, application_in(**overrides))

    def test_cannot_apply_to_own_or_hidden_job(self):
        with self.assertRaises(ValidationFailed):
            services.apply_to_job(self.customer, self.job.id, application_in())
        hidden = self.post_job(title="Another job here")
        with self.assertRaises(ValidationFailed):
            services.apply_to_job(self.tasker, hidden.id, application_in())

    def test_withdraw_frees_a_slot(self):
        dto = services.apply_to_job(self.tasker, self.job.id, application_in())
        withdrawn = services.withdraw_application(self.tasker, dto.id)
        self.assertEqual(withdrawn.status, ApplicationStatus.WITHDRAWN)
        self.assertEqual(Job.objects.get(id=self.job.id).application_count, 0)

    def test_accept_rejects_the_rest(self):
        mine = services.apply_to_job(self.tasker, self.job.id, application_in())
        other = services.apply_to_job(
            make_user(role=UserRole.TASKER), self.job.id, application_in(proposed_price=Decimal('150')),
        )

        with self.assertRaises(PermissionDeniedError):
            services.accept_application(self.tasker, mine.id)

        services.accept_application(self.customer, mine.id)
        job = Job.objects.get(id=self.job.id)
        self.assertEqual(job.status, JobStatus.ASSIGNED)
        self.assertEqual(job.assigned_tasker, self.tasker)
        self.assertEqual(job.final_price, Decimal('180.00'))
        self.assertEqual(JobApplication.objects.get(id=other.id).status, ApplicationStatus.REJECTED)
        self.assertEqual(len(services.list_job_applications(self.customer, self.job.id)), 2)


class AssignedWorkTest(JobTestCase):

    def setUp(self):
        super().setUp()
        self.job = self.active_job()
        application = services.apply_to_job(self.tasker, self.job.id, application_in())
        services.accept_application(self.customer, application.id)

    def test_full_flow_records_payment(self):
        with self.assertRaises(ValidationFailed):
            services.complete_job(self.tasker, self.job.id)

        services.start_job(self.tasker, self.job.id)
        done = services.complete_job(self.tasker, self.job.id)
        self.assertEqual(done.status, JobStatus.COMPLETED)

        paid = services.confirm_job_payment(self.customer, self.job.id)
        self.assertIsNotNone(paid.payment_confirmed_at)
        payment = Transaction.objects.get(job_id=self.job.id)
        self.assertEqual(payment.amount, Decimal('180.00'))
        self.assertEqual(payment.payment_status, PaymentStatus.PAID)
        self.assertEqual(payment.payee, self.tasker)
        self.assertTrue(Notification.objects.filter(
            user=self.tasker, notification_type=NotificationType.PAYMENT_RECEIVED
        ).exists())

        with self.assertRaises(ConflictError):
            services.confirm_job_payment(self.customer, self.job.id)
        self.assertEqual(Transaction.objects.filter(job_id=self.job.id).count(), 1)

    def test_only_assigned_tasker_can_start(self):
        with self.assertRaises(PermissionDeniedError):
            services.start_job(make_user(role=UserRole.TASKER), self.job.id)

    def test_assigned_job_cannot_be_deleted(self):
        with self.assertRaises(ConflictError):
            services.delete_job(self.customer, self.job.id)


class JobAPITest(JobTestCase):

    def test_post_and_moderate(self):
        client = Client()
        client.force_login(self.customer)
        response = client.post(
            '/api/jobs/',
            data=json.dumps({
                'title': 'Fix the bathroom sink',
                'description': DESCRIPTION,
                'category_id': 301,
                'preferred_date': (timezone.localdate() + timedelta(days=2)).isoformat(),
                'address_id': str(self.address.id),
                'customer_budget': '200.00',
            }),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        job_id = response.json()['id']

        self.assertEqual(client.post(f'/api/jobs/{job_id}/approve').status_code, 403)

        admin_client = Client()
        admin_client.force_login(self.admin)
        response = admin_client.post(f'/api/jobs/{job_id}/approve')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'active')

    def test_update_ignores_null_flag(self):
        job = self.post_job(is_flexible=True)
        client = Client()
        client.force_login(self.customer)
        response = client.patch(
            f'/api/jobs/{job.id}',
            data=json.dumps({'is_flexible': None, 'title': 'Fix the kitchen sink'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['is_flexible'])
        self.assertEqual(response.json()['title'], 'Fix the kitchen sink')

    def test_customer_cannot_apply(self):
        job = self.active_job()
        client = Client()
        client.force_login(make_user())
        response = client.post(
            f'/api/jobs/{job.id}/applications',
            data=json.dumps({'proposed_price': '180', 'estimated_duration': '2', 'message': MESSAGE}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)
