import logging

from django.http import JsonResponse
from django_tenants.middleware.main import TenantMainMiddleware
from django_tenants.utils import get_public_schema_name

logger = logging.getLogger(__name__)


class TenantNotFoundMiddleware(TenantMainMiddleware):
    """
    Tenant middleware that answers unknown hosts with a JSON 404 instead of
    falling through to the public schema.

    The public schema (platform administration) is only served on the main
    domains listed in ``PUBLIC_DOMAINS``; every school is reached through
    its own domain.
    """

    @property
    def public_domains(self):
        """Get list of domains that serve the platform administration."""
        from django.conf import settings
        return getattr(settings, 'PUBLIC_DOMAINS', ['localhost', '127.0.0.1'])

    def is_public_domain(self, hostname):
        # Remove port if present
        hostname_without_port = hostname.split(':')[0].lower()
        return hostname_without_port in [d.lower() for d in self.public_domains]

    def no_tenant_found(self, request, hostname):
        logger.warning(f"No school found for host {hostname}")
        return JsonResponse({'success': False, 'error': f"School not found for {hostname}"}, status=404)

    def process_request(self, request):
        """
        Flow:
        1. Try to find tenant for hostname
        2. If found and NOT public schema -> use it (school tenant)
        3. If found and IS public schema -> only on a main domain
        4. If not found -> "School not found"
        """
        from django_tenants.utils import get_tenant_domain_model
        from django.db import connection

        hostname = self.hostname_from_request(request)
        domain_model = get_tenant_domain_model()

        try:
            tenant = self.get_tenant(domain_model, hostname)
        except domain_model.DoesNotExist:
            return self.no_tenant_found(request, hostname)

        if tenant.schema_name == get_public_schema_name() and not self.is_public_domain(hostname):
            return self.no_tenant_found(request, hostname)

        tenant.domain_url = hostname
        request.tenant = tenant
        connection.set_tenant(tenant)
        self.setup_url_routing(request)


class HealthCheckMiddleware:
    """
    Middleware to handle health check requests before tenant resolution.

    This must be placed BEFORE the tenant middleware in MIDDLEWARE settings
    to allow health checks to pass without requiring a valid tenant domain.

    Endpoints:
    - /health/ - Basic health check (for load balancers)
    - /health/ready/ - Readiness check (database)
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Basic health check (fast, for load balancers)
        if request.path in ['/health/', '/health']:
            return JsonResponse({'status': 'healthy'})

        # Detailed readiness check
        if request.path in ['/health/ready/', '/health/ready']:
            return self._readiness_check()

        return self.get_response(request)

    def _readiness_check(self):
        """Check if the app is ready to serve requests."""
        checks = {
            'database': self._check_database(),
        }

        all_healthy = all(c['status'] == 'healthy' for c in checks.values())
        status_code = 200 if all_healthy else 503

        return JsonResponse({
            'status': 'ready' if all_healthy else 'not_ready',
            'checks': checks,
        }, status=status_code)

    def _check_database(self):
        """Check database connectivity."""
        from django.db import DatabaseError, connection
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
            return {'status': 'healthy'}
        except DatabaseError as e:
            logger.exception("Health check: database unreachable")
            return {'status': 'unhealthy', 'error': str(e)}
