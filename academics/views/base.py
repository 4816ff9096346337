"""Base utilities, decorators, and helper functions for academics views."""
from core.utils import (
    is_school_admin,
    admin_required,
    is_teacher_or_admin,
    teacher_or_admin_required,
    json_action,
    get_payload,
    get_list,
    get_object_or_error,
    form_error,
    bind_form,
    action_error,
)

from ..models import Class, Subject, ClassTerm, ClassTermSubject


def get_class(pk):
    return get_object_or_error(Class.objects.select_related('class_teacher'), "Class not found", pk=pk)


def get_subject(pk):
    return get_object_or_error(Subject, "Subject not found", pk=pk)


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
