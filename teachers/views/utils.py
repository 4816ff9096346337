import logging
from functools import wraps

from core.utils import is_school_admin, action_error, PERMISSION_DENIED_MESSAGE

logger = logging.getLogger(__name__)


def admin_or_owner(view_func):
    """Allow school admin OR the teacher accessing their own data (pk match)."""
    @wraps(view_func)
    def _wrapped_view(request, pk, *args, **kwargs):
        if is_school_admin(request.user):
            return view_func(request, pk, *args, **kwargs)
        teacher = getattr(request.user, 'teacher_profile', None)
        if getattr(request.user, 'is_teacher', False) and teacher is not None and str(teacher.pk) == str(pk):
            return view_func(request, pk, *args, **kwargs)
        logger.warning(f"Permission denied for {request.user} on teacher {pk}")
        return action_error(PERMISSION_DENIED_MESSAGE, status=403)
    return _wrapped_view
