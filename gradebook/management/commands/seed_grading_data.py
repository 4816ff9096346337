"""
Management command to seed the standard WAEC grading system (A1-F) for a school.

Usage:
    # Run for a specific tenant
    python manage.py seed_grading_data --schema=demo

    # Or through django-tenants for all tenants
    python manage.py all_tenants_command seed_grading_data
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from django_tenants.utils import schema_context

from core.models import SchoolSettings
from gradebook import config
from gradebook.grading import DEFAULT_GRADE_LEVELS
from gradebook.models import GradingSystem, GradeLevel

SYSTEM_NAME = 'WAEC Standard'


class Command(BaseCommand):
    help = 'Seed the standard WAEC grading system and make it the default when none is set'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Recreate the grade levels of an existing system',
        )
        parser.add_argument(
            '--schema',
            type=str,
            help='Tenant schema name to run this command for',
        )

    def handle(self, *args, **options):
        force = options['force']
        schema = options.get('schema')

        if schema:
            # Run within specific tenant context
            with schema_context(schema):
                self._seed_data(force)
        else:
            # Works when called via tenant_command / all_tenants_command
            self._seed_data(force)

    def _seed_data(self, force):
        with transaction.atomic():
            system, created = GradingSystem.objects.get_or_create(
                name=SYSTEM_NAME,
                defaults={
                    'description': 'West African Examinations Council grading (A1-F)',
                    'pass_mark': config.DEFAULT_PASS_MARK,
                },
            )
            if not created and not force:
                self.stdout.write(f"'{SYSTEM_NAME}' already exists. Use --force to recreate its levels.")
            else:
                system.levels.all().delete()
                GradeLevel.objects.bulk_create([
                    GradeLevel(
                        grading_system=system,
                        grade=band.grade,
                        min_score=band.min_score,
                        max_score=band.max_score,
                        remark=band.remark,
                    )
                    for band in DEFAULT_GRADE_LEVELS
                ])
                self.stdout.write(f"  Created {len(DEFAULT_GRADE_LEVELS)} grade levels")

            settings = SchoolSettings.load()
            if settings.default_grading_system_id is None:
                settings.default_grading_system = system
                settings.save()
                self.stdout.write(f"  '{SYSTEM_NAME}' set as the default grading system")

        self.stdout.write(self.style.SUCCESS('Successfully seeded grading data'))
