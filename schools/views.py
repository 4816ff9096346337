"""
Platform administration: schools (tenants) managed from the public schema
by super admins.
"""
import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Q
from django.views.decorators.http import require_POST
from django_tenants.utils import get_public_schema_name

from core.utils import (
    super_admin_required, json_action, get_payload, get_object_or_error,
    form_error, bind_form, action_error,
)
from .forms import SchoolForm, SchoolCreationForm
from .models import School
from . import services
from .services import delete_school, role_counts

logger = logging.getLogger(__name__)


def _schools():
    return School.objects.exclude(schema_name=get_public_schema_name()).prefetch_related('domains')


def get_school(pk):
    return get_object_or_error(_schools(), "School not found", pk=pk)


def platform_dashboard_data():
    """School counts and users per role across every school."""
    schools = list(_schools())
    totals = {'admins': 0, 'teachers': 0, 'students': 0, 'parents': 0}
    per_school = []
    for school in schools:
        counts = role_counts(school)
        for key, value in counts.items():
            totals[key] += value
        per_school.append({'id': school.pk, 'name': school.name, **counts})

    return {
        'role': 'super_admin',
        'school_count': len(schools),
        'active_schools': sum(1 for s in schools if s.is_active),
        'inactive_schools': sum(1 for s in schools if not s.is_active),
        'users': totals,
        'schools': per_school,
        'top_schools': services.school_performance(per_school),
    }


@login_required
@super_admin_required
@json_action
def platform_dashboard(request):
    return platform_dashboard_data()


@login_required
@super_admin_required
@json_action
def school_list(request):
    schools = _schools()
    search = request.GET.get('search', '').strip()
    if search:
        schools = schools.filter(
            Q(name__icontains=search) | Q(short_name__icontains=search) | Q(schema_name__icontains=search)
        )
    status = request.GET.get('status')
    if status in ('active', 'inactive'):
        schools = schools.filter(is_active=status == 'active')
    return {'schools': [school.to_dict() for school in schools]}


@login_required
@super_admin_required
@json_action
def school_detail(request, pk):
    school = get_school(pk)
    data = school.to_dict()
    data['users'] = role_counts(school)
    return data


@login_required
@super_admin_required
@require_POST
@json_action
def school_create(request):
    """Create a school: schema, primary domain and first admin account."""
    form = SchoolCreationForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    school, admin_user, password = form.create()
    logger.info(f"School {school.schema_name} created by {request.user}")

    data = school.to_dict()
    data['admin'] = admin_user.to_dict()
    if admin_user.must_change_password:
        data['admin']['temporary_password'] = password
    return data


@login_required
@super_admin_required
@require_POST
@json_action
def school_update(request, pk):
    school = get_school(pk)
    form = bind_form(SchoolForm, get_payload(request), instance=school)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        school = form.save()
    return school.to_dict()


@login_required
@super_admin_required
@require_POST
@json_action
def school_toggle_active(request, pk):
    """Suspend or reactivate a school; suspended schools reject all requests."""
    school = get_school(pk)
    school.is_active = not school.is_active
    school.save(update_fields=['is_active', 'updated_at'])
    logger.warning(
        f"School {school.schema_name} {'activated' if school.is_active else 'suspended'} by {request.user}"
    )
    return school.to_dict()


@login_required
@super_admin_required
@require_POST
@json_action
def school_delete(request, pk):
    """Delete a school and drop its schema. Requires ``confirm`` to equal the schema name."""
    school = get_school(pk)
    if get_payload(request).get('confirm') != school.schema_name:
        return action_error(f'Type the schema name "{school.schema_name}" to confirm deletion.')

    delete_school(school)
    logger.warning(f"School {pk} deleted by {request.user}")
    return {'deleted': pk}


@login_required
@super_admin_required
@json_action
def school_admin_list(request, pk):
    school = get_school(pk)
    return {'school': school.to_dict(), 'admins': services.school_admins(school)}


@login_required
@super_admin_required
@json_action
def school_admin_detail(request, pk, user_id):
    return services.school_admin_detail(get_school(pk), user_id)


@login_required
@super_admin_required
@require_POST
@json_action
def school_admin_create(request, pk):
    """Add another admin account to a school; returns a temporary password when none is given."""
    school = get_school(pk)
    payload = get_payload(request)
    data, password = services.create_school_admin(
        school,
        payload.get('email'),
        first_name=payload.get('first_name', ''),
        last_name=payload.get('last_name', ''),
        password=payload.get('password') or None,
    )
    if data['must_change_password']:
        data['temporary_password'] = password
    logger.info(f"Admin {data['email']} created in {school.schema_name} by {request.user}")
    return data


@login_required
@super_admin_required
@require_POST
@json_action
def school_admin_toggle_active(request, pk, user_id):
    return services.toggle_school_admin(get_school(pk), user_id)


@login_required
@super_admin_required
@require_POST
@json_action
def school_admin_delete(request, pk, user_id):
    services.delete_school_admin(get_school(pk), user_id)
    return {'deleted': user_id}
