"""
Moving students between class terms (promotion, repetition, transfer,
withdrawal) and the eligibility hints shown when picking who to promote.
"""
import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from .models import StudentClassTerm, StudentTransition

logger = logging.getLogger(__name__)


def transition_eligibility(average_score, pass_rate, failed_subjects, pass_mark):
    """
    Return ``(eligible, reason)`` for a student's term performance.

    A student is eligible with an average at the pass mark and at least half
    their subjects passed, with an average of 80% of the pass mark and at
    most two failures, or with a pass rate of 70% or more.
    """
    average_score = Decimal(str(average_score))
    pass_rate = Decimal(str(pass_rate))
    pass_mark = Decimal(str(pass_mark))

    if average_score >= pass_mark and pass_rate >= 50:
        return True, "Excellent performance - meets all criteria"
    if average_score >= pass_mark * Decimal('0.8') and failed_subjects <= 2:
        return True, "Good performance - acceptable with few failures"
    if pass_rate >= 70:
        return True, "High pass rate - eligible despite lower average"

    if average_score < pass_mark * Decimal('0.6'):
        return False, "Below minimum average score requirement"
    if failed_subjects > 3:
        return False, "Too many failed subjects"
    if pass_rate < 40:
        return False, "Low pass rate - needs improvement"
    return False, "Does not meet transition criteria"


def execute_transitions(from_class_term, to_class_term, student_ids, transition_type, user, notes=''):
    """
    Enrol every student in ``to_class_term`` and record a transition for each.

    All-or-nothing: a student missing from the source class or already in
    the destination aborts the whole batch.
    """
    if not student_ids:
        raise ValidationError("Select at least one student.")

    transitions = []
    with transaction.atomic():
        for student_id in student_ids:
            if not StudentClassTerm.objects.filter(student_id=student_id, class_term=from_class_term).exists():
                raise ValidationError(f"Student {student_id} not found in source class")
            if StudentClassTerm.objects.filter(student_id=student_id, class_term=to_class_term).exists():
                raise ValidationError(f"Student {student_id} already exists in destination class")
            clash = StudentClassTerm.objects.filter(
                student_id=student_id, class_term__term_id=to_class_term.term_id
            ).select_related('class_term__class_assigned').first()
            if clash:
                raise ValidationError(
                    f"Student {student_id} is already enrolled in {clash.class_term.class_assigned.name} "
                    f"for that term"
                )

            StudentClassTerm.objects.create(student_id=student_id, class_term=to_class_term)
            transitions.append(StudentTransition.objects.create(
                student_id=student_id,
                from_class_term=from_class_term,
                to_class_term=to_class_term,
                transition_type=transition_type,
                notes=notes or '',
                created_by=user,
            ))

    logger.info(
        f"{len(transitions)} {transition_type} transition(s) from {from_class_term} to {to_class_term} by {user}"
    )
    return transitions
