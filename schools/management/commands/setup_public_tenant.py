import os

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django_tenants.utils import get_public_schema_name

from schools.models import School, Domain


class Command(BaseCommand):
    help = 'Set up the public tenant, its domains and a platform superuser'

    def add_arguments(self, parser):
        parser.add_argument(
            '--email',
            help='Superuser email address (defaults to $SUPERUSER_EMAIL)'
        )
        parser.add_argument(
            '--password',
            help='Superuser password (defaults to $SUPERUSER_PASSWORD)'
        )

    def handle(self, *args, **options):
        public_tenant, created = School.objects.get_or_create(
            schema_name=get_public_schema_name(),
            defaults={'name': 'School Platform', 'short_name': 'PLATFORM'},
        )
        self.stdout.write(f"  Public tenant {'created' if created else 'exists'}: {public_tenant.name}")

        for index, domain_name in enumerate(d.strip().lower() for d in settings.PUBLIC_DOMAINS if d.strip()):
            domain, created = Domain.objects.get_or_create(
                domain=domain_name,
                defaults={'tenant': public_tenant, 'is_primary': index == 0},
            )
            if domain.tenant_id != public_tenant.pk:
                self.stdout.write(self.style.WARNING(
                    f'  Domain {domain_name} belongs to {domain.tenant.schema_name}; left unchanged'
                ))
            elif created:
                self.stdout.write(self.style.SUCCESS(f'  Domain created: {domain_name}'))

        self._setup_superuser(options)

    def _setup_superuser(self, options):
        User = get_user_model()

        existing = User.objects.filter(is_superuser=True).first()
        if existing:
            self.stdout.write(f'  Superuser exists: {existing.email}')
            return

        email = options.get('email') or os.getenv('SUPERUSER_EMAIL')
        password = options.get('password') or os.getenv('SUPERUSER_PASSWORD')
        if not email or not password:
            self.stdout.write(self.style.WARNING('  Skipping superuser creation (no credentials provided)'))
            return

        User.objects.create_superuser(email=email, password=password, first_name='Platform', last_name='Admin')
        self.stdout.write(self.style.SUCCESS(f'  Superuser created: {email}'))
