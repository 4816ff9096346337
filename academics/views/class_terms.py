"""
Class terms: offering a class in a term, the subjects taught in it and who
teaches them.
"""
import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Count
from django.views.decorators.http import require_POST

from .base import (
    admin_required, teacher_or_admin_required, json_action, get_payload, get_list,
    get_object_or_error, action_error, get_class, get_class_term, get_allocation,
)
from ..models import ClassTerm, ClassTermSubject, Subject
from core.models import Term

logger = logging.getLogger(__name__)


@login_required
@teacher_or_admin_required
@json_action
def term_classes(request, term_id):
    """Classes offered in a term with student and subject counts."""
    term = get_object_or_error(Term, "Term not found", pk=term_id)
    class_terms = (
        ClassTerm.objects.filter(term=term)
        .select_related('class_assigned', 'term')
        .annotate(
            student_count=Count('enrollments', distinct=True),
            subject_count=Count('subjects', distinct=True),
        )
        .order_by('class_assigned__level_type', 'class_assigned__level_number', 'class_assigned__section')
    )
    return {
        'term': term.to_dict(),
        'class_terms': [
            {
                **class_term.to_dict(),
                'student_count': class_term.student_count,
                'subject_count': class_term.subject_count,
            }
            for class_term in class_terms
        ],
    }


@login_required
@teacher_or_admin_required
@json_action
def class_term_detail(request, pk):
    """A class term with its subject allocations and enrolled students."""
    class_term = get_class_term(pk)
    allocations = class_term.subjects.select_related('subject', 'teacher')
    enrollments = class_term.enrollments.select_related('student')

    data = class_term.to_dict()
    data['grades_locked'] = class_term.term.grades_locked
    data['subjects'] = [allocation.to_dict() for allocation in allocations]
    data['students'] = [enrollment.student.to_dict() for enrollment in enrollments]
    return data


@login_required
@admin_required
@require_POST
@json_action
def class_term_assign(request):
    """Offer a class in a term. Assigning an existing pair is a no-op."""
    payload = get_payload(request)
    cls = get_class(payload.get('class_id'))
    term = get_object_or_error(Term, "Term not found", pk=payload.get('term_id'))

    class_term, created = ClassTerm.objects.get_or_create(class_assigned=cls, term=term)
    if created:
        logger.info(f"{cls.name} assigned to {term} by {request.user}")
    data = class_term.to_dict()
    data['created'] = created
    return data


@login_required
@admin_required
@require_POST
@json_action
def class_term_remove(request, pk):
    """Withdraw a class from a term; refused while students are enrolled."""
    class_term = get_class_term(pk)
    if class_term.enrollments.exists():
        return action_error(
            "Cannot remove class from term: there are students enrolled in this class term. "
            "Remove or reassign students before deleting the class term"
        )

    label = str(class_term)
    with transaction.atomic():
        class_term.subjects.all().delete()
        class_term.delete()
    logger.info(f"Class term {label} removed by {request.user}")
    return {'deleted': pk}


@login_required
@admin_required
@require_POST
@json_action
def class_term_assign_subjects(request, pk):
    """
    Make the class term's subjects exactly ``subject_ids``.

    Subjects not in the list are removed, new ones are added, and the rest
    keep their teacher assignments.
    """
    class_term = get_class_term(pk)
    desired = []
    for value in get_list(get_payload(request), 'subject_ids'):
        try:
            subject_id = int(value)
        except (TypeError, ValueError):
            return action_error(f"Subject not found: {value}")
        if subject_id not in desired:
            desired.append(subject_id)

    current = set(class_term.subjects.values_list('subject_id', flat=True))
    to_remove = current - set(desired)
    to_add = [subject_id for subject_id in desired if subject_id not in current]

    if to_add:
        found = set(Subject.objects.filter(pk__in=to_add).values_list('pk', flat=True))
        for subject_id in to_add:
            if subject_id not in found:
                return action_error(f"Subject not found: {subject_id}")

    with transaction.atomic():
        if to_remove:
            class_term.subjects.filter(subject_id__in=to_remove).delete()
        ClassTermSubject.objects.bulk_create(
            [ClassTermSubject(class_term=class_term, subject_id=subject_id) for subject_id in to_add],
            ignore_conflicts=True,
        )

    logger.info(
        f"Subjects for {class_term}: {len(to_add)} added, {len(to_remove)} removed by {request.user}"
    )
    return {
        'class_term_id': class_term.pk,
        'added': to_add,
        'removed': sorted(to_remove),
        'subjects': [
            allocation.to_dict()
            for allocation in class_term.subjects.select_related('subject', 'teacher')
        ],
    }


@login_required
@admin_required
@require_POST
@json_action
def class_term_subject_assign_teacher(request, pk, subject_id):
    """Assign the teacher who teaches a subject in a class term."""
    from teachers.models import Teacher

    class_term = get_class_term(pk)
    allocation = get_allocation(class_term, subject_id)
    teacher = get_object_or_error(Teacher, "Teacher not found", pk=get_payload(request).get('teacher_id'))
    if teacher.status != Teacher.Status.ACTIVE:
        return action_error(f"{teacher.full_name} is not an active teacher.")

    allocation.teacher = teacher
    allocation.save(update_fields=['teacher'])
    logger.info(f"{teacher} assigned to {allocation} by {request.user}")
    return allocation.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def class_term_subject_unassign_teacher(request, pk, subject_id):
    class_term = get_class_term(pk)
    allocation = get_allocation(class_term, subject_id)
    allocation.teacher = None
    allocation.save(update_fields=['teacher'])
    logger.info(f"Teacher unassigned from {allocation} by {request.user}")
    return allocation.to_dict()
