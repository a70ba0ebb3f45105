"""
Seed management command.

Populates the membership catalog:
  - BOGEY_PASS   : 30 days, 4 simulator hours
  - BIRDIE_PASS  : 30 days, 8 simulator hours + 2 classes
  - EAGLE_PASS   : 30 days, 16 simulator hours + 4 classes

Usage:
    python manage.py seed_membership_types
    python manage.py seed_membership_types --update   # overwrite existing rows
"""
from decimal import Decimal

from django.core.management.base import BaseCommand

from apps.memberships.models import MembershipType

MEMBERSHIP_TYPES = [
    {
        'code': 'BOGEY_PASS',
        'name': 'Bogey Pass',
        'description': 'Membresía mensual con 4 horas de simulador.',
        'price': Decimal('1500.00'),
        'duration_days': 30,
        'included_hours': 4,
        'included_classes': 0,
    },
    {
        'code': 'BIRDIE_PASS',
        'name': 'Birdie Pass',
        'description': 'Membresía mensual con 8 horas de simulador y 2 clases.',
        'price': Decimal('2800.00'),
        'duration_days': 30,
        'included_hours': 8,
        'included_classes': 2,
    },
    {
        'code': 'EAGLE_PASS',
        'name': 'Eagle Pass',
        'description': 'Membresía mensual con 16 horas de simulador y 4 clases.',
        'price': Decimal('4900.00'),
        'duration_days': 30,
        'included_hours': 16,
        'included_classes': 4,
    },
]


class Command(BaseCommand):
    help = 'Seed the membership type catalog'

    def add_arguments(self, parser):
        parser.add_argument(
            '--update', action='store_true',
            help='Overwrite price, term and allowances of codes that already exist',
        )

    def handle(self, *args, **options):
        created_count = updated_count = 0

        for data in MEMBERSHIP_TYPES:
            defaults = {key: value for key, value in data.items() if key != 'code'}
            membership_type, created = MembershipType.objects.get_or_create(
                code=data['code'], defaults=defaults,
            )
            if created:
                created_count += 1
                self.stdout.write(f'  + {membership_type.code}')
            elif options['update']:
                for key, value in defaults.items():
                    setattr(membership_type, key, value)
                membership_type.is_active = True
                membership_type.save()
                updated_count += 1
                self.stdout.write(f'  ~ {membership_type.code}')

        self.stdout.write(self.style.SUCCESS(
            f'seed_membership_types: {created_count} created, {updated_count} updated'
        ))
