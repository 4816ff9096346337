from django.contrib.auth.decorators import login_required

from academics.models import ClassTermSubject
from core.models import Term
from core.utils import json_action, action_error
from gradebook import compiler
from gradebook.models import Assessment
from students.models import StudentClassTerm


def _completion_by_allocation(allocations):
    """Completion summary for every (class term, subject) a teacher teaches."""
    class_term_ids = {a.class_term_id for a in allocations}
    enrolled = {}
    for class_term_id, student_id in StudentClassTerm.objects.filter(
        class_term_id__in=class_term_ids
    ).values_list('class_term_id', 'student_id'):
        enrolled.setdefault(class_term_id, []).append(student_id)

    assessments = {}
    for assessment in Assessment.objects.filter(
        student_class_term__class_term_id__in=class_term_ids
    ).select_related('student_class_term'):
        key = (assessment.student_class_term.class_term_id, assessment.subject_id)
        assessments.setdefault(key, {})[assessment.student_class_term.student_id] = assessment

    summaries = {}
    for allocation in allocations:
        recorded = assessments.get((allocation.class_term_id, allocation.subject_id), {})
        statuses = [
            compiler.completion_status(recorded.get(student_id))
            for student_id in enrolled.get(allocation.class_term_id, [])
        ]
        summaries[allocation.pk] = compiler.completion_summary(statuses)
    return summaries


def teacher_dashboard_data(user):
    """Class terms and subjects the teacher has in the current term, with progress."""
    teacher = getattr(user, 'teacher_profile', None)
    if teacher is None:
        return {'role': 'teacher', 'teacher': None, 'message': "No teacher profile linked to your account."}

    current_term = Term.get_current()
    allocations = []
    if current_term:
        allocations = list(
            ClassTermSubject.objects.filter(teacher=teacher, class_term__term=current_term)
            .select_related('class_term__class_assigned', 'class_term__term', 'subject')
            .order_by('class_term__class_assigned__name', 'subject__name')
        )
    completion = _completion_by_allocation(allocations)

    subjects = []
    for allocation in allocations:
        subjects.append({
            **allocation.to_dict(),
            'class_term': allocation.class_term.to_dict(),
            'completion': completion[allocation.pk],
        })

    homeroom = teacher.assigned_classes.filter(is_active=True)
    class_term_ids = {a.class_term_id for a in allocations}
    return {
        'role': 'teacher',
        'teacher': teacher.to_dict(),
        'current_term': current_term.to_dict() if current_term else None,
        'grades_locked': current_term.grades_locked if current_term else False,
        'subjects': subjects,
        'homeroom_classes': [cls.to_dict() for cls in homeroom],
        'workload': {
            'classes_taught': len(class_term_ids),
            'subjects_taught': len(allocations),
            'total_students': StudentClassTerm.objects.filter(class_term_id__in=class_term_ids).count(),
            'homeroom_classes': homeroom.count(),
        },
    }


@login_required
@json_action
def dashboard(request):
    """Dashboard for logged-in teachers showing their classes and progress."""
    if not getattr(request.user, 'is_teacher', False):
        return action_error("Only teachers have a teacher dashboard.", status=403)
    return teacher_dashboard_data(request.user)
