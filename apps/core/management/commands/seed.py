from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.bookings.models import Booking, BookingStatus, PaymentMethod
from apps.catalog.categories import get_parent_categories, get_subcategories
from apps.catalog.models import PricingType, TaskerService
from apps.identity.models import UserRole
from apps.jobs.models import Job, JobStatus
from apps.profiles.models import Address, ExperienceLevel, TaskerProfile, VerificationStatus

User = get_user_model()

PASSWORD = "password123"

WEEK_HOURS = {
    day: {"enabled": day not in ("saturday", "sunday"), "start_time": "09:00", "end_time": "18:00"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
}


class Command(BaseCommand):
    help = 'Seeds the database with sample marketplace data for testing.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clean',
            action='store_true',
            help='Delete existing data before seeding',
        )
        parser.add_argument(
            '--users',
            action='store_true',
            help='Seed users, addresses and tasker profiles only',
        )
        parser.add_argument(
            '--services',
            action='store_true',
            help='Seed tasker services only',
        )
        parser.add_argument(
            '--activity',
            action='store_true',
            help='Seed bookings and jobs only',
        )

    def handle(self, *args, **options):
        seed_all = not any([options['users'], options['services'], options['activity']])

        if options['clean']:
            self.stdout.write(self.style.WARNING('Cleaning database...'))
            User.objects.exclude(is_superuser=True).delete()
            self.stdout.write(self.style.SUCCESS('Database cleaned.'))

        if seed_all or options['users']:
            self._seed_users()

        if seed_all or options['services']:
            self._seed_services()

        if seed_all or options['activity']:
            self._seed_activity()

        self.stdout.write(self.style.SUCCESS('Seeding completed successfully.'))

    def _user(self, email, role, first_name, last_name, **extra):
        user = User.objects.filter(email=email).first()
        if user:
            return user
        create = User.objects.create_superuser if role == UserRole.ADMIN else User.objects.create_user
        user = create(
            email=email,
            password=PASSWORD,
            role=role,
            first_name=first_name,
            last_name=last_name,
            email_verified=True,
            **extra,
        )
        self.stdout.write(f' - Created {role} {email} ({PASSWORD})')
        return user

    def _seed_users(self):
        self.stdout.write('Seeding Users...')

        self._user("admin@manzelhelp.ma", UserRole.ADMIN, "Admin", "ManzelHelp")
        customer = self._user(
            "customer@manzelhelp.ma", UserRole.CUSTOMER, "Amina", "Benali",
            phone="0612345678", preferred_language='fr',
        )
        tasker = self._user(
            "tasker@manzelhelp.ma", UserRole.TASKER, "Youssef", "El Idrissi",
            phone="0698765432", preferred_language='ar', wallet_balance=Decimal('450.00'),
        )

        for user, street in ((customer, "12 Rue Ibn Batouta"), (tasker, "5 Avenue Hassan II")):
            Address.objects.get_or_create(
                user=user,
                label="home",
                defaults={
                    'street_address': street,
                    'city': "Casablanca",
                    'region': "Casablanca-Settat",
                    'postal_code': "20000",
                    'is_default': True,
                },
            )

        TaskerProfile.objects.get_or_create(
            user=tasker,
            defaults={
                'bio': "Ten years fixing plumbing and electrics around Casablanca.",
                'experience_level': ExperienceLevel.EXPERT,
                'service_radius_km': 25,
                'operation_hours': WEEK_HOURS,
                'verification_status': VerificationStatus.VERIFIED,
                'verified_at': timezone.now(),
            },
        )

    def _seed_services(self):
        self.stdout.write('Seeding Services...')

        tasker = User.objects.filter(email="tasker@manzelhelp.ma").first()
        if tasker is None:
            self.stdout.write(self.style.WARNING(' - No tasker; run with --users first'))
            return

        created = 0
        for parent in get_parent_categories()[:3]:
            sub = get_subcategories(parent.id)[0]
            _, was_created = TaskerService.objects.get_or_create(
                tasker=tasker,
                category_id=sub.id,
                defaults={
                    'title': sub.name("en"),
                    'description': f"{sub.description('en')}. Tools and materials included.",
                    'pricing_type': PricingType.HOURLY,
                    'hourly_rate': Decimal('120.00'),
                    'minimum_duration': Decimal('2.0'),
                    'service_area': "Casablanca",
                },
            )
            created += int(was_created)
        self.stdout.write(f' - Created {created} services')

    def _seed_activity(self):
        self.stdout.write('Seeding Bookings and Jobs...')

        customer = User.objects.filter(email="customer@manzelhelp.ma").first()
        service = TaskerService.objects.select_related('tasker').first()
        if customer is None or service is None:
            self.stdout.write(self.style.WARNING(' - Missing customer or service; seed them first'))
            return

        address = Address.objects.filter(user=customer, is_default=True).first()
        today = timezone.localdate()

        Booking.objects.get_or_create(
            customer=customer,
            service=service,
            status=BookingStatus.PENDING,
            defaults={
                'tasker': service.tasker,
                'service_title': service.title,
                'address': address,
                'scheduled_date': today + timedelta(days=3),
                'estimated_duration': Decimal('2.0'),
                'agreed_price': service.price * 2,
                'payment_method': PaymentMethod.CASH,
                'customer_requirements': "Please bring a ladder. " * 6,
            },
        )
        self.stdout.write(' - Created 1 pending booking')

        Job.objects.get_or_create(
            customer=customer,
            title="Repaint the living room",
            defaults={
                'category_id': service.category_id,
                'description': "Two walls, about 30 square meters. Paint is already bought.",
                'address': address,
                'preferred_date': today + timedelta(days=7),
                'customer_budget': Decimal('600.00'),
                'status': JobStatus.ACTIVE,
                'approved_at': timezone.now(),
            },
        )
        self.stdout.write(' - Created 1 active job')
