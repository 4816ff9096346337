from django.contrib.auth.decorators import login_required

from core.models import Term
from core.utils import json_action, student_required, parent_required
from gradebook.models import Assessment
from students.models import StudentClassTerm


def _published_report(student, term):
    """
    The student's term report, or None while the class results are
    unpublished.
    """
    from gradebook.utils import find_enrolment, student_report

    enrolment = find_enrolment(student, term)
    if enrolment is None:
        return None
    published = Assessment.objects.filter(
        student_class_term__class_term_id=enrolment.class_term_id, is_published=True
    ).exists()
    if not published:
        return None
    return student_report(enrolment)


def _child_summary(student, term):
    enrolment = None
    if term:
        enrolment = StudentClassTerm.objects.select_related('class_term__class_assigned').filter(
            student=student, class_term__term=term
        ).first()
    return {
        'student': student.to_dict(),
        'current_class': enrolment.class_term.to_dict() if enrolment else None,
        'results': _published_report(student, term) if term else None,
    }


def student_dashboard_data(user):
    """The student's profile, current class and published results for the current term."""
    student = getattr(user, 'student_profile', None)
    if student is None:
        return {'role': 'student', 'student': None, 'message': "No student profile linked to your account."}

    current_term = Term.get_current()
    data = _child_summary(student, current_term)
    data.update({
        'role': 'student',
        'current_term': current_term.to_dict() if current_term else None,
    })
    if data['results'] is None:
        data['message'] = "Results for this term have not been published yet."
    return data


def parent_dashboard_data(user):
    """Each linked child with their current class and published results."""
    parent = getattr(user, 'parent_profile', None)
    if parent is None:
        return {'role': 'parent', 'parent': None, 'message': "No parent profile linked to your account."}

    current_term = Term.get_current()
    links = parent.student_links.select_related('student').order_by('-is_primary', 'student__first_name')
    return {
        'role': 'parent',
        'parent': parent.to_dict(),
        'current_term': current_term.to_dict() if current_term else None,
        'children': [
            {
                **_child_summary(link.student, current_term),
                'relationship': link.relationship,
                'is_primary': link.is_primary,
            }
            for link in links
        ],
    }


@login_required
@student_required
@json_action
def student_dashboard(request):
    return student_dashboard_data(request.user)


@login_required
@parent_required
@json_action
def parent_dashboard(request):
    return parent_dashboard_data(request.user)
