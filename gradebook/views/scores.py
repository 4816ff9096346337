import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.views.decorators.http import require_POST

from core.models import Term
from students.models import StudentClassTerm
from .base import (
    teacher_or_admin_required, json_action, get_payload, get_list,
    validation_message, get_class_term, get_allocation, check_can_edit,
)
from .. import compiler, config
from ..forms import AssessmentEntryForm
from ..grading import resolve_grade
from ..models import Assessment, get_school_grading
from ..utils import class_term_students

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('ca1', 'ca2', 'ca3', 'exam', 'is_absent', 'is_exempt')


def _entry_row(student, assessment, bands, pass_mark):
    row = {
        'student_id': student.pk,
        'student_name': student.full_name,
        'admission_number': student.admission_number,
        'assessment_id': str(assessment.pk) if assessment else None,
        'ca1': None, 'ca2': None, 'ca3': None, 'exam': None,
        'is_absent': False,
        'is_exempt': False,
        'is_published': False,
        'total': None,
        'grade': None,
        'remark': None,
        'status': compiler.completion_status(assessment),
    }
    if assessment is not None:
        total = assessment.total
        grade = resolve_grade(total, bands, pass_mark)
        row.update({
            'ca1': float(assessment.ca1) if assessment.ca1 is not None else None,
            'ca2': float(assessment.ca2) if assessment.ca2 is not None else None,
            'ca3': float(assessment.ca3) if assessment.ca3 is not None else None,
            'exam': float(assessment.exam) if assessment.exam is not None else None,
            'is_absent': assessment.is_absent,
            'is_exempt': assessment.is_exempt,
            'is_published': assessment.is_published,
            'total': float(total) if total is not None else None,
            'grade': grade.grade if grade else None,
            'remark': grade.remark if grade else None,
        })
    return row


@login_required
@teacher_or_admin_required
@json_action
def assessment_list(request, class_term_id, subject_id):
    """
    Every student enrolled in the class term with their scores for one
    subject, the entry status of each row and completion statistics.
    """
    class_term = get_class_term(class_term_id)
    allocation = get_allocation(class_term, subject_id)
    check_can_edit(request.user, class_term, allocation.subject)

    _, bands, pass_mark = get_school_grading()
    assessments = {
        a.student_class_term.student_id: a
        for a in Assessment.objects.filter(
            student_class_term__class_term=class_term, subject_id=subject_id
        ).select_related('student_class_term')
    }
    rows = [
        _entry_row(student, assessments.get(student.pk), bands, pass_mark)
        for student in class_term_students(class_term)
    ]

    return {
        'class_term': class_term.to_dict(),
        'subject': allocation.subject.to_dict(),
        'grades_locked': class_term.term.grades_locked,
        'max_scores': {'ca': float(config.CA_MAX_SCORE), 'exam': float(config.EXAM_MAX_SCORE)},
        'students': rows,
        'statistics': compiler.completion_summary(row['status'] for row in rows),
    }


@login_required
@teacher_or_admin_required
@require_POST
@json_action
def assessment_save(request):
    """
    Bulk upsert of one subject's scores for a class term.

    Rejected as a whole when the term's grades are locked, the subject is
    not offered, a student is not enrolled or any score is out of range.
    Saved rows are unpublished until results are published again.
    """
    payload = get_payload(request)
    class_term = get_class_term(payload.get('class_term_id'))
    allocation = get_allocation(class_term, payload.get('subject_id'))
    check_can_edit(request.user, class_term, allocation.subject)

    entries = []
    for row in get_list(payload, 'assessments'):
        form = AssessmentEntryForm(row)
        if not form.is_valid():
            raise ValidationError(validation_message(form.errors))
        entries.append(form.cleaned_data)
    if not entries:
        raise ValidationError("No assessments to save.")

    student_ids = [entry['student_id'] for entry in entries]
    if len(set(student_ids)) != len(student_ids):
        raise ValidationError("Each student can only appear once per save.")

    enrolments = {
        sct.student_id: sct
        for sct in StudentClassTerm.objects.filter(class_term=class_term, student_id__in=student_ids)
    }
    missing = [str(sid) for sid in student_ids if sid not in enrolments]
    if missing:
        raise ValidationError(f"Students not found in this class: {', '.join(missing)}")

    now = timezone.now()
    with transaction.atomic():
        # Re-check the lock with the term row held
        term = Term.objects.select_for_update().get(pk=class_term.term_id)
        if term.grades_locked:
            raise ValidationError("Grades are locked for this term.")

        existing = {
            a.student_class_term_id: a
            for a in Assessment.objects.filter(
                student_class_term__in=enrolments.values(), subject=allocation.subject
            )
        }
        to_create, to_update = [], []
        for entry in entries:
            enrolment = enrolments[entry['student_id']]
            assessment = existing.get(enrolment.pk)
            if assessment is None:
                assessment = Assessment(
                    student_class_term=enrolment,
                    subject=allocation.subject,
                    recorded_by=request.user,
                )
                to_create.append(assessment)
            else:
                to_update.append(assessment)
            for name in EDITABLE_FIELDS:
                setattr(assessment, name, entry[name])
            assessment.is_published = False
            assessment.updated_by = request.user
            assessment.updated_at = now

        Assessment.objects.bulk_create(to_create, batch_size=config.BULK_UPDATE_BATCH_SIZE)
        Assessment.objects.bulk_update(
            to_update,
            list(EDITABLE_FIELDS) + ['is_published', 'updated_by', 'updated_at'],
            batch_size=config.BULK_UPDATE_BATCH_SIZE,
        )

    logger.info(
        f"{request.user} saved {allocation.subject.name} scores for {class_term}: "
        f"{len(to_create)} created, {len(to_update)} updated"
    )
    return {
        'created': len(to_create),
        'updated': len(to_update),
        'message': f"Saved {len(entries)} assessment{'s' if len(entries) != 1 else ''}",
    }
