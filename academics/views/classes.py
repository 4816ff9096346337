import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Count, Q
from django.views.decorators.http import require_POST

from .base import (
    admin_required, teacher_or_admin_required, json_action, get_payload,
    get_object_or_error, form_error, bind_form, action_error, get_class,
)
from ..forms import ClassForm
from ..models import Class
from core.models import Term

logger = logging.getLogger(__name__)


# ============ CLASS LIST & DETAIL ============

@login_required
@teacher_or_admin_required
@json_action
def classes_list(request):
    """All classes with their enrolment for the current term."""
    current_term = Term.get_current()
    classes = Class.objects.select_related('class_teacher')

    level_type = request.GET.get('level_type')
    if level_type:
        classes = classes.filter(level_type=level_type)
    if request.GET.get('active') == '1':
        classes = classes.filter(is_active=True)

    classes = classes.annotate(
        student_count=Count(
            'class_terms__enrollments',
            filter=Q(class_terms__term=current_term),
        )
    )

    rows = []
    for cls in classes:
        row = cls.to_dict()
        row['class_teacher_name'] = cls.class_teacher.full_name if cls.class_teacher else None
        row['student_count'] = cls.student_count
        rows.append(row)

    return {
        'current_term': current_term.to_dict() if current_term else None,
        'classes': rows,
    }


@login_required
@teacher_or_admin_required
@json_action
def class_detail(request, pk):
    """A class with every term it has been offered in."""
    cls = get_class(pk)
    class_terms = cls.class_terms.select_related('term__academic_year').annotate(
        student_count=Count('enrollments', distinct=True),
        subject_count=Count('subjects', distinct=True),
    ).order_by('-term__start_date')

    data = cls.to_dict()
    data['class_teacher'] = cls.class_teacher.to_dict() if cls.class_teacher else None
    data['class_terms'] = [
        {
            **class_term.to_dict(),
            'academic_year': class_term.term.academic_year.name,
            'student_count': class_term.student_count,
            'subject_count': class_term.subject_count,
        }
        for class_term in class_terms
    ]
    return data


# ============ CLASS CRUD ============

@login_required
@admin_required
@require_POST
@json_action
def class_create(request):
    """Create a new class."""
    form = ClassForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        cls = form.save()
    logger.info(f"Class {cls.name} created by {request.user}")
    return cls.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def class_update(request, pk):
    """Edit a class; the name is regenerated from level and section."""
    cls = get_class(pk)
    form = bind_form(ClassForm, get_payload(request), instance=cls)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        cls = form.save()
    return cls.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def class_delete(request, pk):
    """Delete a class that has never had students enrolled."""
    cls = get_class(pk)
    if cls.class_terms.filter(enrollments__isnull=False).exists():
        return action_error(
            f'Cannot delete class "{cls.name}": it has students enrolled. Deactivate it instead.'
        )

    class_name = cls.name
    cls.delete()
    logger.info(f"Class {class_name} deleted by {request.user}")
    return {'deleted': pk}


@login_required
@admin_required
@require_POST
@json_action
def class_set_teacher(request, pk):
    """Set (or clear, with an empty teacher_id) the class teacher."""
    from teachers.models import Teacher

    cls = get_class(pk)
    teacher_id = get_payload(request).get('teacher_id')

    if teacher_id:
        teacher = get_object_or_error(Teacher, "Teacher not found", pk=teacher_id)
        if teacher.status != Teacher.Status.ACTIVE:
            return action_error(f"{teacher.full_name} is not an active teacher.")
    else:
        teacher = None

    cls.class_teacher = teacher
    cls.save(update_fields=['class_teacher', 'name', 'updated_at'])
    logger.info(f"Class teacher for {cls.name} set to {teacher} by {request.user}")
    return cls.to_dict()
