from django.core.exceptions import ValidationError

from academics.models import ClassTerm
from core.utils import get_object_or_error
from students.models import Student, Parent, StudentClassTerm


def get_student(pk):
    return get_object_or_error(Student.objects.select_related('user'), "Student not found", pk=pk)


def get_parent(pk):
    return get_object_or_error(Parent.objects.select_related('user'), "Parent not found", pk=pk)


def enrol_student(student, class_term):
    """
    Enrol ``student`` in ``class_term``.

    A student belongs to at most one class per term; enrolling again in the
    same class term is a no-op.
    """
    existing = StudentClassTerm.objects.filter(
        student=student, class_term__term_id=class_term.term_id
    ).select_related('class_term__class_assigned').first()
    if existing:
        if existing.class_term_id == class_term.pk:
            return existing, False
        raise ValidationError(
            f"{student.full_name} is already enrolled in {existing.class_term.class_assigned.name} for this term."
        )

    capacity = class_term.class_assigned.capacity
    if capacity and class_term.enrollments.count() >= capacity:
        raise ValidationError(f"{class_term.class_assigned.name} is full ({capacity} students).")

    return StudentClassTerm.objects.create(student=student, class_term=class_term), True


def resolve_class_term(class_id, term_id):
    """The class term for a class and term, created on first use."""
    from academics.models import Class
    from core.models import Term

    cls = get_object_or_error(Class, "Invalid class selected", pk=class_id)
    term = get_object_or_error(Term, "Invalid term selected", pk=term_id)
    class_term, _ = ClassTerm.objects.get_or_create(class_assigned=cls, term=term)
    return class_term
