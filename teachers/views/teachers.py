import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Q
from django.views.decorators.http import require_POST

from accounts.utils import create_account
from core.models import Term
from core.utils import (
    admin_required, json_action, get_payload, get_object_or_error,
    form_error, bind_form, action_error, truthy,
)
from teachers.forms import TeacherForm
from teachers.models import Teacher
from .utils import admin_or_owner

logger = logging.getLogger(__name__)


def get_teacher(pk):
    return get_object_or_error(Teacher.objects.select_related('user'), "Teacher not found", pk=pk)


@login_required
@admin_required
@json_action
def teacher_list(request):
    """Teachers, searchable by name, staff ID or email."""
    teachers = Teacher.objects.all()

    search = request.GET.get('search', '').strip()
    if search:
        teachers = teachers.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(staff_id__icontains=search) |
            Q(email__icontains=search)
        )
    status = request.GET.get('status')
    if status:
        teachers = teachers.filter(status=status)

    return {'teachers': [teacher.to_dict() for teacher in teachers]}


@login_required
@admin_or_owner
@json_action
def teacher_detail(request, pk):
    """Teacher profile with current-term subject assignments and homeroom classes."""
    teacher = get_teacher(pk)
    current_term = Term.get_current()

    assignments = teacher.subject_assignments.select_related(
        'class_term__class_assigned', 'class_term__term', 'subject'
    )
    if request.GET.get('all') != '1' and current_term:
        assignments = assignments.filter(class_term__term=current_term)

    data = teacher.to_dict()
    data['has_account'] = teacher.user_id is not None
    data['assignments'] = [
        {**allocation.to_dict(), 'class_term': allocation.class_term.to_dict()}
        for allocation in assignments
    ]
    data['homeroom_classes'] = [cls.to_dict() for cls in teacher.assigned_classes.filter(is_active=True)]
    return data


@login_required
@admin_required
@require_POST
@json_action
def teacher_create(request):
    """
    Create a teacher. With ``create_account`` set, a login is created from
    ``account_email`` (or the teacher's email) and ``account_password`` (or a
    temporary password).
    """
    payload = get_payload(request)
    form = TeacherForm(payload)
    if not form.is_valid():
        return form_error(form)

    password = None
    with transaction.atomic():
        teacher = form.save()
        if truthy(payload.get('create_account')):
            user, password = create_account(
                'teacher',
                payload.get('account_email') or teacher.email,
                first_name=teacher.first_name,
                last_name=teacher.last_name,
                password=payload.get('account_password') or None,
                phone_number=teacher.phone_number,
            )
            teacher.user = user
            if not teacher.email:
                teacher.email = user.email
            teacher.save(update_fields=['user', 'email'])

    logger.info(f"Teacher {teacher.staff_id} created by {request.user}")
    data = teacher.to_dict()
    if teacher.user_id and teacher.user.must_change_password:
        data['temporary_password'] = password
    return data


@login_required
@admin_required
@require_POST
@json_action
def teacher_update(request, pk):
    teacher = get_teacher(pk)
    form = bind_form(TeacherForm, get_payload(request), instance=teacher)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        teacher = form.save()
        if teacher.user_id:
            # Keep the login's display name in step with the profile
            teacher.user.first_name = teacher.first_name
            teacher.user.last_name = teacher.last_name
            teacher.user.save(update_fields=['first_name', 'last_name'])
    return teacher.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def teacher_delete(request, pk):
    """Delete a teacher who teaches no subjects; their login is deactivated."""
    teacher = get_teacher(pk)
    if teacher.subject_assignments.exists():
        return action_error(
            f"Cannot delete {teacher.full_name}: they are assigned to subjects. "
            f"Unassign them first or set their status to inactive."
        )

    with transaction.atomic():
        if teacher.user_id:
            teacher.user.is_active = False
            teacher.user.save(update_fields=['is_active'])
        staff_id = teacher.staff_id
        teacher.delete()

    logger.info(f"Teacher {staff_id} deleted by {request.user}")
    return {'deleted': str(pk)}
