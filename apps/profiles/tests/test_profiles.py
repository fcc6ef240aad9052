"""
Tests for profiles.

Covers:
1. Field validators (names, Moroccan phones, age, operation hours)
2. Address book default handling
3. Becoming a tasker and admin verification
4. Profile completion for customers and taskers
"""
import json
import shutil
import tempfile
from datetime import date
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, TestCase, override_settings

from apps.core.errors import ConflictError, NotFoundError, ValidationFailed
from apps.identity import services as identity_services
from apps.identity.dtos import SignupIn
from apps.identity.models import UserRole
from apps.profiles import services, validators
from apps.profiles.dtos import AddressIn, BecomeTaskerIn, PersonalInfoIn
from apps.profiles.models import Address, TaskerProfile, VerificationStatus

User = get_user_model()

MEDIA_ROOT = tempfile.mkdtemp()

BIO = "I have been fixing leaks and installing bathrooms in Rabat for eight years."

WEEKDAYS_ONLY = {
    "monday": {"enabled": True, "start_time": "08:00", "end_time": "17:00"},
    "tuesday": {"enabled": True, "start_time": "08:00", "end_time": "17:00"},
    "sunday": {"enabled": False},
}


def make_user(role=UserRole.CUSTOMER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        **extra,
    )


def address_in(label="home", **overrides):
    data = dict(label=label, street_address="12 Rue Ibn Batouta", city="Rabat", region="Rabat-Salé")
    data.update(overrides)
    return AddressIn(**data)


def become_tasker_in(**overrides):
    data = dict(bio=BIO, experience_level="expert", service_radius_km=20, operation_hours=WEEKDAYS_ONLY)
    data.update(overrides)
    return BecomeTaskerIn(**data)


class ValidatorTest(TestCase):

    def test_phone_normalization(self):
        self.assertEqual(validators.normalize_phone("06 12-34-56-78"), "0612345678")
        self.assertEqual(validators.normalize_phone("+212 612345678"), "+212612345678")
        for bad in ("12345", "0812345678", "+33612345678"):
            with self.subTest(phone=bad):
                with self.assertRaises(ValidationFailed):
                    validators.normalize_phone(bad)

    def test_names(self):
        self.assertEqual(validators.validate_name("  Zineb ", "first_name"), "Zineb")
        self.assertEqual(validators.validate_name("El-Amrani", "last_name"), "El-Amrani")
        for bad in ("Z", "R2D2", "x" * 51):
            with self.subTest(name=bad):
                with self.assertRaises(ValidationFailed):
                    validators.validate_name(bad, "first_name")

    def test_date_of_birth(self):
        today = date(2025, 6, 15)
        self.assertEqual(
            validators.validate_date_of_birth("2007-06-15", today=today), date(2007, 6, 15)
        )
        with self.assertRaises(ValidationFailed):
            validators.validate_date_of_birth("2007-06-16", today=today)
        with self.assertRaises(ValidationFailed):
            validators.validate_date_of_birth("2030-01-01", today=today)
        with self.assertRaises(ValidationFailed):
            validators.validate_date_of_birth("15/06/1990", today=today)

    def test_operation_hours(self):
        cleaned = validators.validate_operation_hours(WEEKDAYS_ONLY)
        self.assertTrue(cleaned["monday"]["enabled"])
        self.assertEqual(cleaned["sunday"]["start_time"], "09:00")

        with self.assertRaises(ValidationFailed):
            validators.validate_operation_hours({"monday": {"enabled": False}})
        with self.assertRaises(ValidationFailed):
            validators.validate_operation_hours(
                {"monday": {"enabled": True, "start_time": "18:00", "end_time": "09:00"}}
            )
        with self.assertRaises(ValidationFailed):
            validators.validate_operation_hours({"funday": {"enabled": True}})


class PersonalInfoTest(TestCase):

    def test_partial_update(self):
        user = make_user(first_name="Old", last_name="Name")
        dto = services.update_personal_info(user, PersonalInfoIn(first_name="Yasmine", phone="0712345678"))
        self.assertEqual(dto.first_name, "Yasmine")
        self.assertEqual(dto.last_name, "Name")
        self.assertEqual(dto.phone, "0712345678")


class AddressTest(TestCase):

    def setUp(self):
        self.user = make_user()

    def test_first_address_becomes_default(self):
        first = services.create_address(self.user, address_in())
        second = services.create_address(self.user, address_in(label="work"))
        self.assertTrue(first.is_default)
        self.assertFalse(second.is_default)

    def test_single_default(self):
        services.create_address(self.user, address_in())
        work = services.create_address(self.user, address_in(label="work"))
        services.set_default_address(self.user, work.id)
        defaults = Address.objects.filter(user=self.user, is_default=True)
        self.assertEqual([a.id for a in defaults], [work.id])

    def test_deleting_default_promotes_another(self):
        home = services.create_address(self.user, address_in())
        work = services.create_address(self.user, address_in(label="work"))
        services.delete_address(self.user, home.id)
        self.assertTrue(Address.objects.get(id=work.id).is_default)

    def test_validation(self):
        with self.assertRaises(ValidationFailed):
            services.create_address(self.user, address_in(label="  "))
        with self.assertRaises(ValidationFailed):
            services.create_address(self.user, address_in(street_address="abc"))

    def test_cannot_touch_other_users_address(self):
        other = services.create_address(make_user(), address_in())
        with self.assertRaises(NotFoundError):
            services.delete_address(self.user, other.id)

    def test_resolve_address(self):
        self.assertIsNone(services.resolve_address(self.user))
        home = services.create_address(self.user, address_in())
        self.assertEqual(services.resolve_address(self.user).id, home.id)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class TaskerOnboardingTest(TestCase):

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.user = make_user()
        self.admin = make_user(role=UserRole.ADMIN)

    def test_become_tasker(self):
        dto = services.become_tasker(self.user, become_tasker_in())
        self.assertEqual(dto.role, UserRole.TASKER)
        profile = TaskerProfile.objects.get(user=self.user)
        self.assertEqual(profile.verification_status, VerificationStatus.UNDER_REVIEW)

    def test_become_tasker_twice(self):
        services.become_tasker(self.user, become_tasker_in())
        with self.assertRaises(ConflictError):
            services.become_tasker(self.user, become_tasker_in())

    def test_tasker_signup_finishes_with_profile(self):
        signed_up = identity_services.signup(SignupIn(
            email="new.tasker@test.com", password="Secret123", role=UserRole.TASKER,
        ))
        tasker = User.objects.get(id=signed_up.id)
        self.assertFalse(TaskerProfile.objects.filter(user=tasker).exists())

        dto = services.become_tasker(tasker, become_tasker_in())
        self.assertEqual(dto.role, UserRole.TASKER)
        self.assertEqual(services.get_tasker_profile(tasker).experience_level, "expert")

        with self.assertRaises(ConflictError):
            services.become_tasker(tasker, become_tasker_in())

    def test_become_tasker_validation(self):
        with self.assertRaises(ValidationFailed):
            services.become_tasker(self.user, become_tasker_in(bio="Too short"))
        with self.assertRaises(ValidationFailed):
            services.become_tasker(self.user, become_tasker_in(experience_level="guru"))
        with self.assertRaises(ValidationFailed):
            services.become_tasker(self.user, become_tasker_in(service_radius_km=0))
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, UserRole.CUSTOMER)

    def test_verification_flow(self):
        services.become_tasker(self.user, become_tasker_in())
        document = SimpleUploadedFile("id.pdf", b"%PDF-1.4", content_type="application/pdf")
        services.upload_verification_document(self.user, document)

        pending = services.list_pending_verifications()
        self.assertEqual([p.user_id for p in pending], [self.user.id])

        dto = services.set_verification_status(self.admin, self.user.id, VerificationStatus.VERIFIED)
        self.assertEqual(dto.verification_status, VerificationStatus.VERIFIED)
        self.assertIsNotNone(dto.verified_at)
        self.assertEqual(services.list_pending_verifications(), [])

    def test_invalid_verification_status(self):
        services.become_tasker(self.user, become_tasker_in())
        with self.assertRaises(ValidationFailed):
            services.set_verification_status(self.admin, self.user.id, VerificationStatus.UNDER_REVIEW)


class CompletionTest(TestCase):

    def test_customer_completion(self):
        user = make_user(first_name="Amina", last_name="Benali")
        completion = services.get_profile_completion(user)
        self.assertEqual(completion.completion_percentage, 33)
        missing = {m.id for m in completion.missing_fields}
        self.assertEqual(missing, {"profile_photo", "phone", "address"})

        user.phone = "0612345678"
        user.save()
        services.create_address(user, address_in())
        completion = services.get_profile_completion(user)
        self.assertEqual(completion.completion_percentage, 100)
        self.assertEqual([m.id for m in completion.missing_fields], ["profile_photo"])

    def test_tasker_completion(self):
        user = make_user(first_name="Omar", last_name="Tazi")
        services.become_tasker(user, become_tasker_in())
        user.refresh_from_db()
        completion = services.get_profile_completion(user)
        missing = {m.id for m in completion.missing_fields}
        self.assertEqual(missing, {"profile_photo", "identity_verification", "addresses"})
        self.assertEqual(completion.completion_percentage, 57)


class ProfileAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.user = make_user()
        self.client.force_login(self.user)

    def test_address_crud(self):
        response = self.client.post(
            '/api/profiles/addresses',
            data=json.dumps({
                'label': 'home', 'street_address': '3 Rue Tarik', 'city': 'Fes', 'region': 'Fes-Meknes',
            }),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 201)
        address_id = response.json()['id']

        response = self.client.patch(
            f'/api/profiles/addresses/{address_id}',
            data=json.dumps({'city': 'Meknes'}),
            content_type='application/json',
        )
        self.assertEqual(response.json()['city'], 'Meknes')

        self.assertEqual(self.client.delete(f'/api/profiles/addresses/{address_id}').status_code, 200)
        self.assertEqual(self.client.get('/api/profiles/addresses').json(), [])

    def test_public_tasker_profile(self):
        tasker = make_user()
        services.become_tasker(tasker, become_tasker_in())
        response = self.client.get(f'/api/profiles/taskers/{tasker.id}')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['rating']['total_reviews'], 0)
        self.assertEqual(data['services'], [])

    def test_pending_verification_requires_admin(self):
        response = self.client.get('/api/profiles/taskers/pending-verification')
        self.assertEqual(response.status_code, 403)
