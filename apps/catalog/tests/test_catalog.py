"""
Tests for categories and tasker services.
"""
import json
from decimal import Decimal
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import Client, TestCase

from apps.bookings.models import Booking, BookingStatus
from apps.catalog import categories, services
from apps.catalog.dtos import ExtraFeeIn, ServiceIn, ServiceUpdateIn
from apps.catalog.models import ServiceStatus, TaskerService
from apps.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailed
from apps.identity.models import UserRole
from apps.notifications.models import Notification, NotificationType

User = get_user_model()


def make_user(role=UserRole.TASKER, **extra):
    return User.objects.create_user(
        email=f"user_{uuid4().hex[:8]}@test.com",
        password="Testpass123",
        role=role,
        preferred_language='en',
        **extra,
    )


def service_in(**overrides):
    data = dict(
        title="Deep apartment cleaning",
        description="Kitchen, bathrooms and floors, products included.",
        category_id=101,
        pricing_type="fixed",
        base_price=Decimal('250.00'),
    )
    data.update(overrides)
    return ServiceIn(**data)


class CategoryTest(TestCase):

    def test_tree_shape(self):
        parents = categories.get_parent_categories()
        self.assertEqual(len(parents), 8)
        for parent in parents:
            for child in categories.get_subcategories(parent.id):
                self.assertEqual(child.id // 100, parent.id)

    def test_localized_names(self):
        category = categories.get_category(101)
        self.assertEqual(category.name("fr"), "Nettoyage de maison")
        self.assertEqual(category.name("es"), category.name("fr"))

    def test_expand_parent(self):
        ids = categories.expand_category_ids(1)
        self.assertIn(1, ids)
        self.assertIn(101, ids)
        self.assertEqual(categories.expand_category_ids(101), [101])
        self.assertEqual(categories.expand_category_ids(999), [])

    def test_unknown_category(self):
        with self.assertRaises(NotFoundError):
            services.get_category(999)


class ServiceManagementTest(TestCase):

    def setUp(self):
        self.tasker = make_user()

    def test_create_service(self):
        dto = services.create_service(self.tasker, service_in(
            extra_fees=[ExtraFeeIn(name=" Balcony ", price=Decimal('50')), ExtraFeeIn(name=" ", price=Decimal('1'))],
            minimum_duration=Decimal('1.25'),
        ))
        self.assertEqual(dto.service_status, ServiceStatus.ACTIVE)
        self.assertEqual(dto.price, Decimal('250.00'))
        self.assertEqual(dto.extra_fees, [{"name": "Balcony", "price": "50"}])
        self.assertEqual(dto.minimum_duration, Decimal('1.3'))
        self.assertTrue(Notification.objects.filter(
            user=self.tasker, notification_type=NotificationType.SERVICE_CREATED
        ).exists())

    def test_customer_cannot_create(self):
        with self.assertRaises(PermissionDeniedError):
            services.create_service(make_user(role=UserRole.CUSTOMER), service_in())

    def test_validation(self):
        cases = [
            {'title': 'Tiny'},
            {'description': 'Too short'},
            {'category_id': 1},
            {'pricing_type': 'barter'},
            {'base_price': None},
            {'pricing_type': 'hourly', 'hourly_rate': None},
            {'minimum_duration': Decimal('0.2')},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValidationFailed):
                    services.create_service(self.tasker, service_in(**overrides))

    def test_hourly_price(self):
        dto = services.create_service(self.tasker, service_in(
            pricing_type="hourly", base_price=None, hourly_rate=Decimal('90.00'),
        ))
        self.assertEqual(dto.price, Decimal('90.00'))

    def test_update_and_toggle(self):
        dto = services.create_service(self.tasker, service_in())
        updated = services.update_service(self.tasker, dto.id, ServiceUpdateIn(title="Spotless apartment cleaning"))
        self.assertEqual(updated.title, "Spotless apartment cleaning")

        paused = services.toggle_service_status(self.tasker, dto.id)
        self.assertEqual(paused.service_status, ServiceStatus.PAUSED)
        active = services.toggle_service_status(self.tasker, dto.id)
        self.assertEqual(active.service_status, ServiceStatus.ACTIVE)

    def test_only_owner_can_update(self):
        dto = services.create_service(self.tasker, service_in())
        with self.assertRaises(PermissionDeniedError):
            services.update_service(make_user(), dto.id, ServiceUpdateIn(title="Hijacked service"))

    def test_delete_blocked_by_active_booking(self):
        dto = services.create_service(self.tasker, service_in())
        booking = Booking.objects.create(
            customer=make_user(role=UserRole.CUSTOMER),
            tasker=self.tasker,
            service_id=dto.id,
            service_title=dto.title,
            agreed_price=Decimal('250.00'),
            status=BookingStatus.CONFIRMED,
        )
        with self.assertRaises(ConflictError):
            services.delete_service(self.tasker, dto.id)

        booking.status = BookingStatus.COMPLETED
        booking.save()
        services.delete_service(self.tasker, dto.id)
        self.assertFalse(TaskerService.objects.filter(id=dto.id).exists())

    def test_paused_service_hidden_from_public(self):
        dto = services.create_service(self.tasker, service_in())
        services.toggle_service_status(self.tasker, dto.id)
        with self.assertRaises(NotFoundError):
            services.get_service_detail(dto.id)
        self.assertEqual(services.get_service_detail(dto.id, self.tasker).id, dto.id)


class PublicBrowsingTest(TestCase):

    def setUp(self):
        tasker = make_user()
        self.cheap = services.create_service(tasker, service_in(base_price=Decimal('100')))
        self.hourly = services.create_service(tasker, service_in(
            title="Hourly garden work", description="Mowing, trimming and weeding the garden.",
            category_id=201, pricing_type="hourly", base_price=None, hourly_rate=Decimal('150'),
        ))
        self.pricey = services.create_service(tasker, service_in(base_price=Decimal('400')))
        paused = services.create_service(tasker, service_in(base_price=Decimal('50')))
        services.toggle_service_status(tasker, paused.id)

    def test_only_active_services_listed(self):
        page = services.list_public_services()
        self.assertEqual(page.total, 3)
        self.assertFalse(page.has_more)

    def test_filter_by_parent_category(self):
        page = services.list_public_services(category_id=1)
        self.assertEqual({s.id for s in page.services}, {self.cheap.id, self.pricey.id})

    def test_price_filter_uses_hourly_rate(self):
        page = services.list_public_services(min_price=Decimal('120'), max_price=Decimal('200'))
        self.assertEqual([s.id for s in page.services], [self.hourly.id])

    def test_sort_by_price(self):
        page = services.list_public_services(sort="price_asc")
        self.assertEqual([s.id for s in page.services], [self.cheap.id, self.hourly.id, self.pricey.id])

    def test_pagination(self):
        page = services.list_public_services(limit=2)
        self.assertEqual(len(page.services), 2)
        self.assertTrue(page.has_more)

    def test_search(self):
        page = services.list_public_services(search="garden")
        self.assertEqual([s.id for s in page.services], [self.hourly.id])


class CatalogAPITest(TestCase):

    def test_categories_localized_by_header(self):
        response = Client().get('/api/catalog/categories/101', HTTP_ACCEPT_LANGUAGE='de')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['name'], "Hausreinigung")

    def test_create_requires_tasker(self):
        client = Client()
        client.force_login(make_user(role=UserRole.CUSTOMER))
        response = client.post(
            '/api/catalog/services',
            data=json.dumps({
                'title': 'Deep apartment cleaning',
                'description': 'Kitchen, bathrooms and floors, products included.',
                'category_id': 101,
                'pricing_type': 'fixed',
                'base_price': '250.00',
            }),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 403)

    def test_interaction_status(self):
        tasker = make_user()
        customer = make_user(role=UserRole.CUSTOMER)
        dto = services.create_service(tasker, service_in())
        client = Client()
        client.force_login(customer)
        response = client.get(f'/api/catalog/services/{dto.id}/interaction')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['has_open_booking'])
        self.assertFalse(response.json()['has_conversation'])
