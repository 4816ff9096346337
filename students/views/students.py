import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.views.decorators.http import require_POST

from accounts.utils import create_account
from academics.models import ClassTerm
from core.choices import RelationshipType
from core.models import Term
from core.utils import (
    admin_required, json_action, get_payload, get_object_or_error,
    form_error, bind_form, paginate, truthy,
)
from students.admission import allocate_admission_number, preview_next_admission_number
from students.forms import StudentForm
from students.models import Student, StudentParent
from .utils import get_student, get_parent, enrol_student, resolve_class_term

logger = logging.getLogger(__name__)


@login_required
@admin_required
@json_action
def student_list(request):
    """Student list with search and filter."""
    students = Student.objects.all()

    # Search
    search = request.GET.get('search', '').strip()
    if search:
        students = students.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(other_names__icontains=search) |
            Q(admission_number__icontains=search)
        )

    # Filter by class term, or by class in the current term
    class_term_filter = request.GET.get('class_term')
    class_filter = request.GET.get('class')
    if class_term_filter:
        students = students.filter(class_terms__class_term_id=class_term_filter)
    elif class_filter:
        current_term = Term.get_current()
        students = students.filter(
            class_terms__class_term__class_assigned_id=class_filter,
            class_terms__class_term__term=current_term,
        )

    # Filter by status
    status_filter = request.GET.get('status', '')
    if status_filter:
        students = students.filter(status=status_filter)

    page, meta = paginate(students.distinct(), request)
    return {
        'students': [student.to_dict() for student in page],
        'pagination': meta,
    }


@login_required
@admin_required
@json_action
def student_detail(request, pk):
    """Student with enrolment history, parents and transitions."""
    student = get_student(pk)
    enrollments = student.class_terms.select_related(
        'class_term__class_assigned', 'class_term__term__academic_year'
    ).order_by('-class_term__term__start_date')
    links = student.parent_links.select_related('parent')

    data = student.to_dict()
    data['enrollments'] = [
        {
            **enrollment.class_term.to_dict(),
            'academic_year': enrollment.class_term.term.academic_year.name,
            'enrolled_on': enrollment.enrolled_on,
        }
        for enrollment in enrollments
    ]
    data['parents'] = [
        {
            'link_id': link.pk,
            'relationship': link.relationship,
            'is_primary': link.is_primary,
            **link.parent.to_dict(),
        }
        for link in links
    ]
    data['transitions'] = [
        t.to_dict() for t in student.transitions.select_related(
            'from_class_term__class_assigned', 'to_class_term__class_assigned'
        )
    ]
    return data


@login_required
@admin_required
@require_POST
@json_action
def student_create(request):
    """
    Admit a student.

    Optional extras in the payload: ``class_id`` + ``term_id`` to enrol,
    ``parent_id`` (+ ``relationship``) to link a parent, ``create_account``
    (+ ``account_email``, ``account_password``) for a login. Everything
    happens in one transaction.
    """
    payload = get_payload(request)
    form = StudentForm(payload)
    if not form.is_valid():
        return form_error(form)

    password = None
    with transaction.atomic():
        student = form.save(commit=False)
        if not student.admission_number:
            student.admission_number = allocate_admission_number()
        student.save()

        if payload.get('class_id') and payload.get('term_id'):
            class_term = resolve_class_term(payload['class_id'], payload['term_id'])
            enrol_student(student, class_term)

        if payload.get('parent_id'):
            parent = get_parent(payload['parent_id'])
            relationship = payload.get('relationship') or RelationshipType.GUARDIAN
            if relationship not in RelationshipType.values:
                raise ValidationError(f"Unknown relationship: {relationship}")
            StudentParent.objects.create(
                student=student, parent=parent, relationship=relationship, is_primary=True,
            )

        if truthy(payload.get('create_account')):
            user, password = create_account(
                'student',
                payload.get('account_email'),
                first_name=student.first_name,
                last_name=student.last_name,
                password=payload.get('account_password') or None,
                phone_number=student.phone,
            )
            student.user = user
            student.save(update_fields=['user'])

    logger.info(f"Student {student.admission_number} admitted by {request.user}")
    data = student.to_dict()
    if student.user_id and student.user.must_change_password:
        data['temporary_password'] = password
    return data


@login_required
@admin_required
@require_POST
@json_action
def student_update(request, pk):
    student = get_student(pk)
    form = bind_form(StudentForm, get_payload(request), instance=student)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        student = form.save()
        if student.user_id:
            student.user.first_name = student.first_name
            student.user.last_name = student.last_name
            student.user.save(update_fields=['first_name', 'last_name'])
    return student.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def student_toggle_status(request, pk):
    """Flip a student between active and inactive; the login follows."""
    student = get_student(pk)
    if student.status == Student.Status.ACTIVE:
        student.status = Student.Status.INACTIVE
    else:
        student.status = Student.Status.ACTIVE

    with transaction.atomic():
        student.save(update_fields=['status', 'updated_at'])
        if student.user_id:
            student.user.is_active = student.status == Student.Status.ACTIVE
            student.user.save(update_fields=['is_active'])

    logger.info(f"Student {student.admission_number} set to {student.status} by {request.user}")
    return student.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def student_enrol(request, pk):
    """Enrol a student into a class term (``class_term_id``, or ``class_id`` + ``term_id``)."""
    student = get_student(pk)
    payload = get_payload(request)
    if payload.get('class_term_id'):
        class_term = get_object_or_error(
            ClassTerm.objects.select_related('class_assigned', 'term'),
            "Class term not found",
            pk=payload['class_term_id'],
        )
    else:
        class_term = resolve_class_term(payload.get('class_id'), payload.get('term_id'))

    with transaction.atomic():
        enrollment, created = enrol_student(student, class_term)
    if created:
        logger.info(f"{student.admission_number} enrolled in {class_term} by {request.user}")
    return {
        'student_id': student.pk,
        'class_term': class_term.to_dict(),
        'created': created,
    }


@login_required
@admin_required
@json_action
def admission_preview(request):
    """The admission number the next student would receive."""
    year = request.GET.get('year')
    return {'admission_number': preview_next_admission_number(int(year) if year and year.isdigit() else None)}
