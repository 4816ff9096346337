"""
Shared helpers for JSON actions: role checks, request payloads and the
success/error envelope every action returns.
"""
import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.core.paginator import Paginator
from django.db import IntegrityError
from django.forms.models import model_to_dict
from django.http import Http404, HttpResponseBase, JsonResponse

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "You don't have permission to perform this action."


# ============ Roles ============

def is_super_admin(user):
    return user.is_authenticated and user.is_superuser


def is_school_admin(user):
    """Check if user is a school admin or superuser."""
    return user.is_superuser or getattr(user, 'is_school_admin', False)


def is_teacher_or_admin(user):
    """Check if user is a teacher, school admin, or superuser."""
    return (user.is_superuser or
            getattr(user, 'is_school_admin', False) or
            getattr(user, 'is_teacher', False))


def _role_required(check):
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            if not check(request.user):
                logger.warning(
                    f"Permission denied for {request.user} on {view_func.__name__}"
                )
                return action_error(PERMISSION_DENIED_MESSAGE, status=403)
            return view_func(request, *args, **kwargs)
        return _wrapped_view
    return decorator


super_admin_required = _role_required(is_super_admin)
admin_required = _role_required(is_school_admin)
teacher_or_admin_required = _role_required(is_teacher_or_admin)
student_required = _role_required(lambda user: getattr(user, 'is_student', False))
parent_required = _role_required(lambda user: getattr(user, 'is_parent', False))


# ============ Responses ============

def action_success(data=None, status=200):
    return JsonResponse({'success': True, 'data': data}, status=status)


def action_error(message, status=400):
    return JsonResponse({'success': False, 'error': message}, status=status)


def validation_message(error):
    """Flatten a ValidationError (or form errors dict) into one readable string."""
    if isinstance(error, ValidationError):
        if hasattr(error, 'error_dict'):
            return _join_error_dict(error.message_dict)
        return ' '.join(error.messages)
    if isinstance(error, dict):
        return _join_error_dict(error)
    return str(error)


def _join_error_dict(errors):
    parts = []
    for field, messages in errors.items():
        text = ' '.join(str(m) for m in messages)
        parts.append(text if field == '__all__' else f"{field}: {text}")
    return ' '.join(parts)


def form_error(form):
    """400 response carrying a bound form's errors."""
    return action_error(validation_message(form.errors))


def json_action(view_func):
    """
    Wrap a view that returns plain data in the action envelope.

    Not-found, permission and integrity errors raised inside the view become
    404/403/400 error envelopes. Writes are expected to run inside
    ``transaction.atomic()`` so a rejected action leaves nothing behind.
    """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        try:
            result = view_func(request, *args, **kwargs)
        except PermissionDenied as e:
            logger.warning(f"{view_func.__name__}: permission denied for {request.user}: {e}")
            return action_error(str(e) or PERMISSION_DENIED_MESSAGE, status=403)
        except (Http404, ObjectDoesNotExist) as e:
            logger.warning(f"{view_func.__name__}: not found: {e}")
            return action_error(str(e) or "Not found.", status=404)
        except ValidationError as e:
            message = validation_message(e)
            logger.warning(f"{view_func.__name__}: rejected: {message}")
            return action_error(message, status=400)
        except IntegrityError as e:
            logger.error(f"{view_func.__name__}: integrity error: {e}")
            return action_error("The change conflicts with existing records.", status=400)

        if isinstance(result, HttpResponseBase):
            return result
        return action_success(result)
    return _wrapped_view


# ============ Payloads ============

def get_payload(request):
    """
    Request data as a dict-like object.

    JSON bodies are decoded; anything else falls back to ``request.POST``
    (or ``request.GET`` for reads).
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            payload = json.loads(request.body)
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON body.")
        if not isinstance(payload, dict):
            raise ValidationError("JSON body must be an object.")
        return payload
    return request.POST if request.method == 'POST' else request.GET


def truthy(value):
    """Checkbox-style flag from JSON or form data."""
    return value in (True, 'true', 'True', '1', 'on', 1)


def get_list(payload, key):
    """A list value from either a JSON payload or a QueryDict."""
    if hasattr(payload, 'getlist'):
        return payload.getlist(key)
    value = payload.get(key) or []
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be a list.")
    return value


def get_object_or_error(queryset, message, **lookup):
    """Fetch one object or raise Http404 carrying ``message``."""
    model = getattr(queryset, 'model', queryset)
    manager = queryset if hasattr(queryset, 'filter') else model.objects
    try:
        return manager.get(**lookup)
    except (model.DoesNotExist, ValueError, ValidationError):
        raise Http404(message)


def bind_form(form_class, payload, instance=None, **kwargs):
    """
    Bind ``payload`` to a ModelForm.

    On updates, fields missing from the payload keep the instance's current
    values so partial JSON bodies don't blank them out.
    """
    if instance is None:
        return form_class(payload, **kwargs)
    data = model_to_dict(instance, fields=form_class._meta.fields)
    data.update(payload.dict() if hasattr(payload, 'dict') else payload)
    return form_class(data, instance=instance, **kwargs)


def paginate(queryset, request, per_page=25):
    """Slice ``queryset`` by the ``page`` query parameter. Returns (page, meta)."""
    paginator = Paginator(queryset, per_page)
    page = paginator.get_page(request.GET.get('page'))
    return page, {
        'page': page.number,
        'num_pages': paginator.num_pages,
        'count': paginator.count,
        'has_next': page.has_next(),
        'has_previous': page.has_previous(),
    }
