"""
Database-facing helpers for results: loading a class term, compiling and
ranking it, and building per-student reports. The arithmetic lives in
``gradebook.compiler``; this module only fetches rows and shapes output.
"""
import logging

from academics.models import ClassTermSubject
from students.models import Student, StudentClassTerm

from . import compiler, config
from .grading import pass_rate, round_score
from .models import Assessment, get_school_grading

logger = logging.getLogger(__name__)


def get_teacher_profile(user):
    return getattr(user, 'teacher_profile', None)


def can_edit_scores(user, class_term, subject):
    """
    Check if a user can edit scores for a class term subject.

    Returns True if:
    - User is superuser or school admin
    - User is the teacher assigned to this subject for this class term
    """
    if user.is_superuser or getattr(user, 'is_school_admin', False):
        return True

    teacher = get_teacher_profile(user)
    if teacher is None:
        return False

    return ClassTermSubject.objects.filter(
        class_term=class_term,
        subject=subject,
        teacher=teacher
    ).exists()


def class_term_subjects(class_term):
    return list(
        ClassTermSubject.objects.filter(class_term=class_term)
        .select_related('subject', 'teacher')
        .order_by('subject__name')
    )


def class_term_students(class_term):
    return list(
        Student.objects.filter(class_terms__class_term=class_term)
        .order_by('last_name', 'first_name')
    )


def load_assessments(class_term, subject=None):
    queryset = Assessment.objects.filter(
        student_class_term__class_term=class_term
    ).select_related('student_class_term')
    if subject is not None:
        queryset = queryset.filter(subject=subject)
    return [compiler.SubjectAssessment.from_assessment(a) for a in queryset]


def compile_class_term(class_term):
    """
    Load everything needed for a class term and compile ranked results.

    Returns a dict with the grading system used, subjects, students keyed by
    id, ranked StudentTermResults and per-subject statistics.
    """
    grading_system, bands, pass_mark = get_school_grading()
    allocations = class_term_subjects(class_term)
    subject_ids = [a.subject_id for a in allocations]
    students = class_term_students(class_term)
    assessments = load_assessments(class_term)

    results = compiler.compile_class_results(students, assessments, subject_ids, bands, pass_mark)
    logger.debug(
        f"Compiled {len(results)} results for {class_term} across {len(subject_ids)} subjects"
    )
    return {
        'grading_system': grading_system,
        'bands': bands,
        'pass_mark': pass_mark,
        'allocations': allocations,
        'subject_ids': subject_ids,
        'students': {s.pk: s for s in students},
        'assessments': assessments,
        'results': results,
        'subject_statistics': compiler.subject_statistics(results, subject_ids),
    }


def grading_to_dict(grading_system, bands, pass_mark):
    return {
        'id': str(grading_system.pk) if grading_system else None,
        'name': grading_system.name if grading_system else 'Default',
        'pass_mark': float(pass_mark),
        'levels': [band.to_dict() for band in bands],
    }


def result_row(result, student):
    row = result.to_dict()
    row.update({
        'student_name': student.full_name,
        'admission_number': student.admission_number,
        'gender': student.gender,
    })
    return row


def class_term_results(class_term):
    """Ranked results for a class term, ready for JSON."""
    compiled = compile_class_term(class_term)
    students = compiled['students']
    return {
        'class_term': class_term.to_dict(),
        'grading_system': grading_to_dict(
            compiled['grading_system'], compiled['bands'], compiled['pass_mark']
        ),
        'subjects': [
            {'id': a.subject_id, 'name': a.subject.name, 'code': a.subject.code}
            for a in compiled['allocations']
        ],
        'results': [result_row(r, students[r.student_id]) for r in compiled['results']],
        'subject_statistics': compiled['subject_statistics'],
    }


def class_statistics(class_term):
    """Class size, averages, pass rate and grade distribution for a class term."""
    compiled = compile_class_term(class_term)
    results = compiled['results']
    averages = [r.average_score for r in results]

    distribution = {band.grade: 0 for band in compiled['bands']}
    for result in results:
        if result.grade is not None:
            distribution[result.grade.grade] = distribution.get(result.grade.grade, 0) + 1

    students = compiled['students']
    top = [
        {
            'student_id': r.student_id,
            'student_name': students[r.student_id].full_name,
            'average_score': float(r.display_average),
            'position': r.position,
        }
        for r in results[:config.TOP_PERFORMERS_LIMIT]
    ]
    return {
        'class_term': class_term.to_dict(),
        'class_size': len(results),
        'class_average': float(round_score(sum(averages) / len(averages))) if averages else 0,
        'highest_average': float(round_score(max(averages))) if averages else None,
        'lowest_average': float(round_score(min(averages))) if averages else None,
        'pass_rate': pass_rate(averages, compiled['pass_mark']),
        'grade_distribution': distribution,
        'top_students': top,
        'subject_statistics': compiled['subject_statistics'],
    }


def find_enrolment(student, term):
    """The student's class term enrolment for ``term``, or None."""
    return StudentClassTerm.objects.select_related(
        'student', 'class_term__class_assigned', 'class_term__term__academic_year'
    ).filter(student=student, class_term__term=term).first()


def student_report(enrolment):
    """
    One student's report for the enrolment's term: every subject offered to
    their class with components, grade, subject position and class
    statistics, plus totals, overall grade and class position.
    """
    student = enrolment.student
    class_term = enrolment.class_term
    term = class_term.term
    compiled = compile_class_term(class_term)
    results = {r.student_id: r for r in compiled['results']}
    result = results[student.pk]
    positions = compiler.subject_positions(compiled['results'], compiled['subject_ids'])
    stats = compiled['subject_statistics']

    subjects = []
    for allocation in compiled['allocations']:
        entry = compiler.entry_to_dict(result.subjects[allocation.subject_id])
        entry.update({
            'subject_id': allocation.subject_id,
            'subject_name': allocation.subject.name,
            'position': positions[allocation.subject_id].get(student.pk),
            'out_of': stats[allocation.subject_id]['total_students'],
            'highest': stats[allocation.subject_id]['highest'],
            'lowest': stats[allocation.subject_id]['lowest'],
            'average': stats[allocation.subject_id]['average'],
        })
        subjects.append(entry)

    return {
        'student': student.to_dict(),
        'class_term': class_term.to_dict(),
        'term': term.to_dict(),
        'subjects': subjects,
        'total_score': float(result.total_score),
        'average_score': float(result.display_average),
        'grade': result.grade.grade if result.grade else None,
        'remark': result.grade.remark if result.grade else None,
        'position': result.position,
        'class_size': len(compiled['results']),
        'grading_system': grading_to_dict(
            compiled['grading_system'], compiled['bands'], compiled['pass_mark']
        ),
    }
