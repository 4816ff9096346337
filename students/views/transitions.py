import logging

from django.contrib.auth.decorators import login_required
from django.db.models import Count, Q
from django.views.decorators.http import require_POST

from academics.models import ClassTerm
from core.models import Term
from core.utils import (
    admin_required, json_action, get_payload, get_list, get_object_or_error, form_error,
)
from students.forms import TransitionForm
from students.models import StudentTransition
from students.transitions import execute_transitions, transition_eligibility

logger = logging.getLogger(__name__)


def _class_term(pk, message="Class term not found"):
    return get_object_or_error(
        ClassTerm.objects.select_related('class_assigned', 'term__academic_year'), message, pk=pk
    )


@login_required
@admin_required
@json_action
def transition_candidates(request, class_term_id):
    """
    Students of a class term with their results and whether they look
    eligible for promotion.
    """
    from gradebook.grading import pass_rate
    from gradebook.utils import compile_class_term

    class_term = _class_term(class_term_id)
    compiled = compile_class_term(class_term)
    pass_mark = compiled['pass_mark']
    students = compiled['students']

    rows = []
    for result in compiled['results']:
        scores = [e['score'] for e in result.subjects.values() if e['score'] is not None]
        failed = sum(1 for score in scores if score < pass_mark)
        rate = pass_rate(scores, pass_mark)
        eligible, reason = transition_eligibility(result.average_score, rate, failed, pass_mark)
        student = students[result.student_id]
        rows.append({
            'student_id': student.pk,
            'student_name': student.full_name,
            'admission_number': student.admission_number,
            'gender': student.gender,
            'average_score': float(result.display_average),
            'grade': result.grade.grade if result.grade else None,
            'remark': result.grade.remark if result.grade else None,
            'position': result.position,
            'subjects_offered': len(scores),
            'subjects_passed': len(scores) - failed,
            'subjects_failed': failed,
            'pass_rate': rate,
            'is_eligible': eligible,
            'eligibility_reason': reason,
        })

    return {'class_term': class_term.to_dict(), 'students': rows}


@login_required
@admin_required
@require_POST
@json_action
def transition_execute(request):
    """Move the listed students from one class term to another, all or nothing."""
    payload = get_payload(request)
    form = TransitionForm(payload)
    if not form.is_valid():
        return form_error(form)

    from_class_term = _class_term(form.cleaned_data['from_class_term'], "Source or destination class term not found")
    to_class_term = _class_term(form.cleaned_data['to_class_term'], "Source or destination class term not found")

    student_ids = get_list(payload, 'student_ids')
    transitions = execute_transitions(
        from_class_term,
        to_class_term,
        student_ids,
        form.cleaned_data['transition_type'],
        request.user,
        notes=form.cleaned_data['notes'],
    )

    count = len(transitions)
    return {
        'transitions_created': count,
        'transitions': [t.to_dict() for t in transitions],
        'message': (
            f"Successfully transitioned {count} student{'s' if count > 1 else ''} "
            f"from {from_class_term.class_assigned.name} to {to_class_term.class_assigned.name}"
        ),
    }


@login_required
@admin_required
@json_action
def transition_history(request):
    """Latest transitions, optionally for one student or one class term."""
    transitions = StudentTransition.objects.select_related(
        'student',
        'from_class_term__class_assigned', 'from_class_term__term__academic_year',
        'to_class_term__class_assigned', 'to_class_term__term__academic_year',
    )
    student_id = request.GET.get('student')
    if student_id:
        transitions = transitions.filter(student_id=student_id)
    class_term_id = request.GET.get('class_term')
    if class_term_id:
        transitions = transitions.filter(Q(from_class_term_id=class_term_id) | Q(to_class_term_id=class_term_id))

    rows = []
    for transition in transitions[:100]:
        row = transition.to_dict()
        row['admission_number'] = transition.student.admission_number
        row['from_term'] = (
            f"{transition.from_class_term.term.academic_year.name} - {transition.from_class_term.term.name}"
        )
        row['to_term'] = f"{transition.to_class_term.term.academic_year.name} - {transition.to_class_term.term.name}"
        rows.append(row)
    return {'transitions': rows}


@login_required
@admin_required
@json_action
def transition_statistics(request, term_id):
    """Transitions into a term, counted by type."""
    term = get_object_or_error(Term, "Term not found", pk=term_id)
    stats = (
        StudentTransition.objects.filter(to_class_term__term=term)
        .values('transition_type')
        .annotate(count=Count('id'))
        .order_by('transition_type')
    )
    by_type = {row['transition_type']: row['count'] for row in stats}
    return {
        'term': term.to_dict(),
        'total_transitions': sum(by_type.values()),
        'by_type': by_type,
    }
