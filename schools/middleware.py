from django.http import JsonResponse


class ActiveSchoolMiddleware:
    """
    Reject requests for suspended schools.

    Must come after TenantMainMiddleware so ``request.tenant`` is set. The
    public schema is never suspended.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        tenant = getattr(request, 'tenant', None)
        if tenant is not None and not getattr(tenant, 'is_active', True):
            return JsonResponse(
                {'success': False, 'error': "This school has been suspended. Contact the platform administrator."},
                status=403,
            )
        return self.get_response(request)
