"""
Management command to seed the subjects of the Ghana basic school curriculum.

Usage:
    # Run for a specific tenant
    python manage.py seed_subjects --schema=demo

    # Include SHS electives
    python manage.py seed_subjects --schema=demo --shs
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from django_tenants.utils import schema_context

from academics.models import Subject

CORE_SUBJECTS = [
    ('English Language', 'ENG'),
    ('Mathematics', 'MATH'),
    ('Integrated Science', 'SCI'),
    ('Social Studies', 'SOC'),
]

BASIC_SUBJECTS = [
    ('Computing', 'COMP'),
    ('Ghanaian Language', 'GHL'),
    ('French', 'FRE'),
    ('Religious and Moral Education', 'RME'),
    ('Creative Arts and Design', 'CAD'),
    ('Career Technology', 'CT'),
    ('Physical and Health Education', 'PHE'),
]

SHS_ELECTIVES = [
    ('Physics', 'PHY'),
    ('Chemistry', 'CHEM'),
    ('Biology', 'BIO'),
    ('Elective Mathematics', 'EMATH'),
    ('Economics', 'ECON'),
    ('Geography', 'GEO'),
    ('Government', 'GOV'),
    ('History', 'HIST'),
    ('Literature in English', 'LIT'),
    ('Financial Accounting', 'FACC'),
    ('Business Management', 'BM'),
]


class Command(BaseCommand):
    help = 'Seed curriculum subjects, skipping any that already exist'

    def add_arguments(self, parser):
        parser.add_argument(
            '--shs',
            action='store_true',
            help='Also seed SHS elective subjects',
        )
        parser.add_argument(
            '--schema',
            type=str,
            help='Tenant schema name to run this command for',
        )

    def handle(self, *args, **options):
        schema = options.get('schema')

        if schema:
            with schema_context(schema):
                self._seed_data(options['shs'])
        else:
            self._seed_data(options['shs'])

    def _seed_data(self, include_shs):
        rows = [(name, short, True) for name, short in CORE_SUBJECTS]
        rows += [(name, short, False) for name, short in BASIC_SUBJECTS]
        if include_shs:
            rows += [(name, short, False) for name, short in SHS_ELECTIVES]

        created_count = 0
        with transaction.atomic():
            for name, short_name, is_core in rows:
                _, created = Subject.objects.get_or_create(
                    name=name,
                    defaults={'short_name': short_name, 'is_core': is_core},
                )
                if created:
                    created_count += 1
                    self.stdout.write(f'  Created: {name} [{short_name}]' + (' (Core)' if is_core else ''))

        self.stdout.write(self.style.SUCCESS(
            f'Created {created_count} subjects ({len(rows) - created_count} already existed)'
        ))
