from django.http import JsonResponse
from django.urls import NoReverseMatch, reverse


class ForcePasswordChangeMiddleware:
    """
    Middleware to force users to change their password on first login.
    Users with must_change_password=True get a 403 from every action except
    the ones listed below until they set their own password.
    """

    # URL names that should be accessible even when password change is required
    ALLOWED_URL_NAMES = [
        'accounts:password_change',
        'accounts:logout',
        'accounts:me',
        'admin:logout',
    ]

    def __init__(self, get_response):
        self.get_response = get_response

    def _allowed_paths(self):
        paths = []
        for url_name in self.ALLOWED_URL_NAMES:
            try:
                paths.append(reverse(url_name))
            except NoReverseMatch:
                # Not every urlconf (public vs tenant) has every name
                continue
        return paths

    def __call__(self, request):
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated and getattr(user, 'must_change_password', False):
            current_path = request.path
            is_allowed = current_path in self._allowed_paths() or current_path.startswith('/static/')
            if not is_allowed:
                return JsonResponse(
                    {'success': False, 'error': "You must change your password before continuing."},
                    status=403,
                )

        return self.get_response(request)
