import time

from django.core.management.base import BaseCommand
from django.db import connections
from django.db.utils import OperationalError


class Command(BaseCommand):
    help = 'Wait for database to be available'

    def add_arguments(self, parser):
        parser.add_argument(
            '--timeout',
            type=int,
            default=60,
            help='Maximum time to wait in seconds (default: 60)'
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=1,
            help='Seconds between retry attempts (default: 1)'
        )

    def handle(self, *args, **options):
        timeout = options['timeout']
        interval = options['interval']

        self.stdout.write('Waiting for database...')

        start_time = time.monotonic()
        attempts = 0

        while True:
            attempts += 1
            try:
                with connections['default'].cursor() as cursor:
                    cursor.execute('SELECT 1')
            except OperationalError as e:
                elapsed = int(time.monotonic() - start_time)
                if elapsed >= timeout:
                    self.stdout.write(self.style.ERROR(
                        f'Database connection timeout after {timeout}s ({attempts} attempts): {e}'
                    ))
                    raise
                self.stdout.write(f'  Database unavailable (attempt {attempts}, {elapsed}s/{timeout}s)')
                # Drop the broken connection so the next attempt reconnects
                connections['default'].close()
                time.sleep(interval)
            else:
                elapsed = int(time.monotonic() - start_time)
                self.stdout.write(self.style.SUCCESS(
                    f'Database available (took {elapsed}s, {attempts} attempts)'
                ))
                return
