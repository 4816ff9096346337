import getpass

from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from schools.services import create_school, default_domain


class Command(BaseCommand):
    help = 'Create a school tenant with its domain and first school admin'

    def add_arguments(self, parser):
        parser.add_argument('--name', help='School name (e.g., "Demo School")')
        parser.add_argument('--schema', help='Schema/subdomain for the school (e.g., "demo")')
        parser.add_argument('--domain', help='Full domain (defaults to <schema>.$BASE_DOMAIN)')
        parser.add_argument('--admin-email', help='School admin email address')
        parser.add_argument('--admin-password', help='School admin password')
        parser.add_argument('--no-input', action='store_true', help='Run without prompts')

    def handle(self, *args, **options):
        no_input = options['no_input']
        name = options.get('name')
        schema = options.get('schema')
        admin_email = options.get('admin_email')
        admin_password = options.get('admin_password')

        if not no_input:
            if not name:
                name = input('  School name: ').strip()
            if not schema:
                suggested = name.lower().replace(' ', '_')[:20] if name else 'school'
                schema = input(f'  Schema [{suggested}]: ').strip() or suggested
            if not admin_email:
                admin_email = input('  Admin email: ').strip()
            if not admin_password:
                admin_password = self._prompt_password()

        if not all([name, schema, admin_email]):
            raise CommandError('Name, schema and admin email are required.')

        schema = schema.lower().replace('-', '_').replace(' ', '_')
        domain = options.get('domain') or default_domain(schema)

        self.stdout.write(f'\n  Creating school: {name}')
        self.stdout.write(f'  Schema: {schema}')
        self.stdout.write(f'  Domain: {domain}\n')

        try:
            school, admin_user, password = create_school(
                name=name,
                schema_name=schema,
                admin_email=admin_email,
                admin_password=admin_password or None,
                domain=domain,
                short_name=schema.upper()[:20],
            )
        except ValidationError as e:
            raise CommandError('; '.join(e.messages))

        protocol = 'http' if settings.DEBUG else 'https'
        port = ':8000' if settings.DEBUG else ''

        self.stdout.write(self.style.SUCCESS(f'  School created: {school.name}'))
        self.stdout.write(f'  URL: {protocol}://{domain}{port}')
        self.stdout.write(f'  Admin Email: {admin_user.email}')
        if admin_user.must_change_password:
            self.stdout.write(self.style.WARNING(f'  Temporary password: {password}'))

    def _prompt_password(self):
        while True:
            password = getpass.getpass('  Admin password (blank for a temporary one): ')
            if not password:
                return None
            if password != getpass.getpass('  Confirm password: '):
                self.stdout.write(self.style.ERROR('  Passwords do not match. Try again.'))
                continue
            try:
                validate_password(password)
                return password
            except ValidationError as e:
                self.stdout.write(self.style.ERROR(f'  {"; ".join(e.messages)}'))
