import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.views.decorators.http import require_POST

from core.models import Term
from students.models import Student, StudentClassTerm
from .base import (
    admin_required, teacher_or_admin_required, json_action, get_object_or_error,
    get_class_term, check_can_view, is_school_admin,
)
from .. import compiler, utils
from ..models import Assessment

logger = logging.getLogger(__name__)


@login_required
@teacher_or_admin_required
@json_action
def class_term_results(request, class_term_id):
    """Ranked results for every student in a class term."""
    class_term = get_class_term(class_term_id)
    check_can_view(request.user, class_term)
    data = utils.class_term_results(class_term)
    data['is_published'] = Assessment.objects.filter(
        student_class_term__class_term=class_term, is_published=True
    ).exists()
    return data


@login_required
@teacher_or_admin_required
@json_action
def class_statistics(request, class_term_id):
    class_term = get_class_term(class_term_id)
    check_can_view(request.user, class_term)
    return utils.class_statistics(class_term)


@login_required
@teacher_or_admin_required
@json_action
def student_report(request, student_id):
    """A student's report for ``term`` (defaults to the current term)."""
    student = get_object_or_error(Student, "Student not found", pk=student_id)
    term_id = request.GET.get('term')
    if term_id:
        term = get_object_or_error(Term.objects.select_related('academic_year'), "Term not found", pk=term_id)
    else:
        term = Term.get_current()
        if term is None:
            return {'student': student.to_dict(), 'report': None, 'message': "No current term set."}

    enrolment = utils.find_enrolment(student, term)
    if enrolment is None:
        # Teachers may only learn about students in classes they teach
        if not is_school_admin(request.user):
            raise PermissionDenied("You don't teach this class.")
        raise StudentClassTerm.DoesNotExist("Student not found in any class for this term")
    check_can_view(request.user, enrolment.class_term)
    return utils.student_report(enrolment)


@login_required
@admin_required
@require_POST
@json_action
def publish_results(request, class_term_id):
    """
    Publish a class term's results once every enrolled student has a
    complete, absent or exempt assessment for every subject offered.
    """
    class_term = get_class_term(class_term_id)
    compiled = utils.compile_class_term(class_term)
    students = compiled['students']
    missing = compiler.find_incomplete(students.keys(), compiled['subject_ids'], compiled['assessments'])

    if missing:
        subjects = {a.subject_id: a.subject.name for a in compiled['allocations']}
        logger.warning(f"Publish refused for {class_term}: {len(missing)} incomplete assessment(s)")
        return {
            'published': False,
            'message': "Results incomplete, cannot publish",
            'missing': [
                {
                    'student_id': student_id,
                    'student_name': students[student_id].full_name,
                    'subject_id': subject_id,
                    'subject_name': subjects[subject_id],
                }
                for student_id, subject_id in missing
            ],
        }

    count = Assessment.objects.filter(student_class_term__class_term=class_term).update(is_published=True)
    logger.info(f"Results for {class_term} published by {request.user} ({count} assessments)")
    return {'published': True, 'message': "Results published successfully", 'assessments': count}
