import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Count, Q
from django.views.decorators.http import require_POST

from accounts.utils import create_account
from core.utils import (
    admin_required, json_action, get_payload, get_object_or_error,
    form_error, bind_form, paginate, truthy,
)
from students.forms import ParentForm, StudentParentForm
from students.models import Parent, Student, StudentParent
from .utils import get_parent

logger = logging.getLogger(__name__)


@login_required
@admin_required
@json_action
def parent_list(request):
    """Parents with search by name, phone or email."""
    parents = Parent.objects.annotate(student_count=Count('student_links'))

    search = request.GET.get('search', '').strip()
    if search:
        parents = parents.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(phone_number__icontains=search) |
            Q(email__icontains=search)
        )

    page, meta = paginate(parents, request)
    return {
        'parents': [{**parent.to_dict(), 'student_count': parent.student_count} for parent in page],
        'pagination': meta,
    }


@login_required
@admin_required
@json_action
def parent_detail(request, pk):
    return get_parent(pk).to_dict(include_students=True)


@login_required
@admin_required
@require_POST
@json_action
def parent_create(request):
    """Create a parent, optionally with a login (``create_account``)."""
    payload = get_payload(request)
    form = ParentForm(payload)
    if not form.is_valid():
        return form_error(form)

    password = None
    with transaction.atomic():
        parent = form.save()
        if truthy(payload.get('create_account')):
            user, password = create_account(
                'parent',
                payload.get('account_email') or parent.email,
                first_name=parent.first_name,
                last_name=parent.last_name,
                password=payload.get('account_password') or None,
                phone_number=parent.phone_number,
            )
            parent.user = user
            parent.save(update_fields=['user'])

    logger.info(f"Parent {parent.full_name} created by {request.user}")
    data = parent.to_dict()
    if parent.user_id and parent.user.must_change_password:
        data['temporary_password'] = password
    return data


@login_required
@admin_required
@require_POST
@json_action
def parent_update(request, pk):
    parent = get_parent(pk)
    form = bind_form(ParentForm, get_payload(request), instance=parent)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        parent = form.save()
    return parent.to_dict(include_students=True)


@login_required
@admin_required
@require_POST
@json_action
def parent_delete(request, pk):
    """Delete a parent; their student links go with them and the login is disabled."""
    parent = get_parent(pk)
    with transaction.atomic():
        if parent.user_id:
            parent.user.is_active = False
            parent.user.save(update_fields=['is_active'])
        parent.delete()
    logger.info(f"Parent {pk} deleted by {request.user}")
    return {'deleted': pk}


@login_required
@admin_required
@require_POST
@json_action
def parent_link_student(request):
    """Link a parent to a student; relinking updates relationship and primary flag."""
    form = StudentParentForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    data = form.cleaned_data
    with transaction.atomic():
        link, created = StudentParent.objects.get_or_create(
            student=data['student'],
            parent=data['parent'],
            defaults={'relationship': data['relationship'], 'is_primary': data['is_primary']},
        )
        if not created:
            link.relationship = data['relationship']
            link.is_primary = data['is_primary']
            link.save()

    logger.info(f"Linked {link} by {request.user}")
    return {
        'link_id': link.pk,
        'student_id': link.student_id,
        'parent_id': link.parent_id,
        'relationship': link.relationship,
        'is_primary': link.is_primary,
        'created': created,
    }


@login_required
@admin_required
@require_POST
@json_action
def parent_unlink_student(request, pk, student_id):
    parent = get_parent(pk)
    link = get_object_or_error(
        StudentParent, "This parent is not linked to that student", parent=parent, student_id=student_id
    )
    link.delete()
    logger.info(f"Unlinked parent {pk} from student {student_id} by {request.user}")
    return {'parent_id': pk, 'student_id': student_id}


@login_required
@admin_required
@json_action
def unlinked_students(request):
    """Active students without any parent, for the linking picker."""
    students = Student.objects.filter(
        status=Student.Status.ACTIVE, parent_links__isnull=True
    )
    search = request.GET.get('search', '').strip()
    if search:
        students = students.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(admission_number__icontains=search)
        )
    return {'students': [student.to_dict() for student in students[:100]]}
