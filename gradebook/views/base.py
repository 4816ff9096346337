"""Base utilities, decorators, and helper functions for gradebook views."""
from django.core.exceptions import PermissionDenied

from core.utils import (
    is_school_admin,
    admin_required,
    teacher_or_admin_required,
    json_action,
    get_payload,
    get_list,
    get_object_or_error,
    form_error,
    bind_form,
    validation_message,
    truthy,
)
from academics.models import ClassTerm, ClassTermSubject

from ..models import GradingSystem, GradeLevel
from ..utils import can_edit_scores


def get_grading_system(pk):
    return get_object_or_error(
        GradingSystem.objects.prefetch_related('levels'), "Grading system not found", pk=pk
    )


def get_grade_level(pk):
    return get_object_or_error(
        GradeLevel.objects.select_related('grading_system'), "Grade level not found", pk=pk
    )


def get_class_term(pk):
    return get_object_or_error(
        ClassTerm.objects.select_related('class_assigned', 'term__academic_year'),
        "Class term not found",
        pk=pk,
    )


def get_allocation(class_term, subject_id):
    return get_object_or_error(
        ClassTermSubject.objects.select_related('subject', 'teacher'),
        "Subject is not offered in this class term",
        class_term=class_term,
        subject_id=subject_id,
    )


def check_can_edit(user, class_term, subject):
    """Raise PermissionDenied unless ``user`` may enter scores for the subject."""
    if not can_edit_scores(user, class_term, subject):
        raise PermissionDenied("You are not assigned to teach this subject in this class.")


def check_can_view(user, class_term):
    """Admins see every class; teachers only classes they teach or form-master."""
    if is_school_admin(user):
        return
    teacher = getattr(user, 'teacher_profile', None)
    if teacher is not None and (
        class_term.class_assigned.class_teacher_id == teacher.pk
        or ClassTermSubject.objects.filter(class_term=class_term, teacher=teacher).exists()
    ):
        return
    raise PermissionDenied("You don't teach this class.")
