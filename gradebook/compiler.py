"""
Results compilation: per-student aggregation and class ranking.

Everything here works on plain records already loaded from the database, so
results are recomputed on every request and never cached. Running the same
input through twice gives identical output.
"""
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .grading import GradeResult, percentage, resolve_grade, round_score, to_decimal

logger = logging.getLogger(__name__)

COMPONENTS = ('ca1', 'ca2', 'ca3', 'exam')

STATUS_NOT_STARTED = 'not_started'
STATUS_PARTIAL = 'partial'
STATUS_COMPLETE = 'complete'
STATUS_ABSENT = 'absent'
STATUS_EXEMPT = 'exempt'

REMARK_ABSENT = 'Absent'
REMARK_EXEMPT = 'Exempt'
REMARK_NOT_TAKEN = 'Not Taken'


class SubjectAssessment:
    """Raw score components for one student in one subject for one term."""

    def __init__(self, student_id, subject_id, ca1=None, ca2=None, ca3=None, exam=None,
                 is_absent=False, is_exempt=False):
        self.student_id = student_id
        self.subject_id = subject_id
        self.ca1 = ca1
        self.ca2 = ca2
        self.ca3 = ca3
        self.exam = exam
        self.is_absent = is_absent
        self.is_exempt = is_exempt

    @classmethod
    def from_assessment(cls, assessment) -> 'SubjectAssessment':
        """Build from an Assessment model row (student_class_term must be loaded)."""
        return cls(
            student_id=assessment.student_class_term.student_id,
            subject_id=assessment.subject_id,
            ca1=assessment.ca1,
            ca2=assessment.ca2,
            ca3=assessment.ca3,
            exam=assessment.exam,
            is_absent=assessment.is_absent,
            is_exempt=assessment.is_exempt,
        )

    @property
    def is_excluded(self) -> bool:
        return bool(self.is_absent or self.is_exempt)

    @property
    def total(self) -> Decimal:
        """Sum of the four components, missing ones counted as zero."""
        return sum((to_decimal(getattr(self, name) or 0) for name in COMPONENTS), Decimal('0'))

    @property
    def status(self) -> str:
        return completion_status(self)


class StudentTermResult:
    """Derived result row for one student in one class term."""

    def __init__(self, student_id, subjects, total_score, average_score, grade: Optional[GradeResult],
                 counted_subjects: int, tie_key: Tuple = ()):
        self.student_id = student_id
        self.subjects = subjects
        self.total_score = total_score
        self.average_score = average_score
        self.grade = grade
        self.counted_subjects = counted_subjects
        self.tie_key = tie_key
        self.position = None

    @property
    def display_average(self) -> Decimal:
        """The average rounded to 2 places for output and overall grading."""
        return round_score(self.average_score)

    def to_dict(self) -> Dict:
        return {
            'student_id': self.student_id,
            'subjects': {
                subject_id: entry_to_dict(entry) for subject_id, entry in self.subjects.items()
            },
            'total_score': float(self.total_score),
            'average_score': float(self.display_average),
            'grade': self.grade.grade if self.grade else None,
            'remark': self.grade.remark if self.grade else None,
            'passed': self.grade.passed if self.grade else None,
            'counted_subjects': self.counted_subjects,
            'position': self.position,
        }


def _as_float(value):
    return None if value is None else float(value)


def entry_to_dict(entry: Dict) -> Dict:
    data = {name: _as_float(entry.get(name)) for name in COMPONENTS}
    data.update({
        'score': _as_float(entry['score']),
        'grade': entry['grade'],
        'remark': entry['remark'],
    })
    return data


def aggregate_student(student_id, assessments: Iterable[SubjectAssessment], levels,
                      pass_mark=None, subject_ids: Optional[Iterable] = None,
                      tie_key: Tuple = ()) -> StudentTermResult:
    """
    Aggregate one student's subject assessments into a term result.

    Absent and exempt subjects are recorded with a null score and grade and do
    not count towards the total or the average. When ``subject_ids`` is given,
    subjects offered to the class but never assessed are recorded as
    "Not Taken". Every subject appears exactly once in ``subjects``.
    """
    subjects = {}
    total = Decimal('0')
    counted = 0

    for assessment in assessments:
        if assessment.subject_id in subjects:
            logger.warning(
                f"Duplicate assessment for student {student_id} subject {assessment.subject_id}; "
                f"keeping the first"
            )
            continue

        if assessment.is_excluded:
            subjects[assessment.subject_id] = {
                'ca1': None, 'ca2': None, 'ca3': None, 'exam': None,
                'score': None,
                'grade': None,
                'remark': REMARK_ABSENT if assessment.is_absent else REMARK_EXEMPT,
            }
            continue

        subject_total = assessment.total
        result = resolve_grade(subject_total, levels, pass_mark)
        subjects[assessment.subject_id] = {
            'ca1': to_decimal(assessment.ca1 or 0),
            'ca2': to_decimal(assessment.ca2 or 0),
            'ca3': to_decimal(assessment.ca3 or 0),
            'exam': to_decimal(assessment.exam or 0),
            'score': subject_total,
            'grade': result.grade if result else None,
            'remark': result.remark if result else None,
        }
        total += subject_total
        counted += 1

    for subject_id in subject_ids or ():
        if subject_id not in subjects:
            subjects[subject_id] = {
                'ca1': None, 'ca2': None, 'ca3': None, 'exam': None,
                'score': None, 'grade': None, 'remark': REMARK_NOT_TAKEN,
            }

    # Exact quotient; ranking compares it unrounded
    average = total / counted if counted else Decimal('0')
    return StudentTermResult(
        student_id=student_id,
        subjects=subjects,
        total_score=total,
        average_score=average,
        grade=resolve_grade(round_score(average), levels, pass_mark),
        counted_subjects=counted,
        tie_key=tie_key,
    )


def _assign_positions(ordered: List, score_of) -> Dict:
    """
    Walk an already sorted list and hand out index-based positions.

    Equal scores share the position of the first of them; the next distinct
    score takes its own index, so [90, 80, 80, 70] becomes [1, 2, 2, 4].
    """
    positions = {}
    position = 0
    previous = None
    for index, item in enumerate(ordered):
        score = score_of(item)
        if previous is None or score != previous:
            position = index + 1
        positions[id(item)] = position
        previous = score
    return positions


def rank_results(results: Iterable[StudentTermResult]) -> List[StudentTermResult]:
    """
    Sort results by average descending and set ``position`` on each.

    Exact ties are ordered by ``tie_key`` (last name, first name, admission
    number) so the order is stable across requests. Nobody is dropped,
    including students with no counted subjects.
    """
    ordered = sorted(results, key=lambda r: (-r.average_score, r.tie_key, str(r.student_id)))
    positions = _assign_positions(ordered, lambda r: r.average_score)
    for result in ordered:
        result.position = positions[id(result)]
    return ordered


def compile_class_results(students: Iterable, assessments: Iterable[SubjectAssessment],
                          subject_ids: Iterable, levels, pass_mark=None) -> List[StudentTermResult]:
    """
    Aggregate and rank a whole class term.

    ``students`` need ``pk``, ``first_name``, ``last_name`` and
    ``admission_number``. Assessments for subjects outside ``subject_ids``
    are ignored.
    """
    subject_ids = list(subject_ids)
    offered = set(subject_ids)
    by_student = defaultdict(list)
    for assessment in assessments:
        if assessment.subject_id in offered:
            by_student[assessment.student_id].append(assessment)

    results = []
    for student in students:
        results.append(aggregate_student(
            student.pk,
            by_student.get(student.pk, []),
            levels,
            pass_mark=pass_mark,
            subject_ids=subject_ids,
            tie_key=(student.last_name.lower(), student.first_name.lower(), student.admission_number),
        ))
    return rank_results(results)


def subject_statistics(results: Iterable[StudentTermResult], subject_ids: Iterable) -> Dict:
    """Per subject: number of graded students and highest, lowest and average score."""
    results = list(results)
    stats = {}
    for subject_id in subject_ids:
        scores = [
            r.subjects[subject_id]['score'] for r in results
            if subject_id in r.subjects and r.subjects[subject_id]['score'] is not None
        ]
        if scores:
            stats[subject_id] = {
                'total_students': len(scores),
                'highest': float(max(scores)),
                'lowest': float(min(scores)),
                'average': float(round_score(sum(scores) / len(scores))),
            }
        else:
            stats[subject_id] = {'total_students': 0, 'highest': None, 'lowest': None, 'average': None}
    return stats


def subject_positions(results: Iterable[StudentTermResult], subject_ids: Iterable) -> Dict:
    """Per subject, map student_id to that student's position in the subject."""
    results = list(results)
    positions = {}
    for subject_id in subject_ids:
        graded = [
            r for r in results
            if subject_id in r.subjects and r.subjects[subject_id]['score'] is not None
        ]
        graded.sort(key=lambda r: (-r.subjects[subject_id]['score'], r.tie_key, str(r.student_id)))
        walk = _assign_positions(graded, lambda r: r.subjects[subject_id]['score'])
        positions[subject_id] = {r.student_id: walk[id(r)] for r in graded}
    return positions


def completion_status(assessment) -> str:
    """Classify an assessment (or None) by how much of it has been recorded."""
    if assessment is None:
        return STATUS_NOT_STARTED
    if assessment.is_absent:
        return STATUS_ABSENT
    if assessment.is_exempt:
        return STATUS_EXEMPT
    recorded = [getattr(assessment, name) is not None for name in COMPONENTS]
    if all(recorded):
        return STATUS_COMPLETE
    if any(recorded):
        return STATUS_PARTIAL
    return STATUS_NOT_STARTED


def completion_summary(statuses: Iterable[str]) -> Dict:
    """Count statuses; absent and exempt rows count as done."""
    counts = {
        STATUS_NOT_STARTED: 0,
        STATUS_PARTIAL: 0,
        STATUS_COMPLETE: 0,
        STATUS_ABSENT: 0,
        STATUS_EXEMPT: 0,
    }
    for status in statuses:
        counts[status] += 1
    total = sum(counts.values())
    done = counts[STATUS_COMPLETE] + counts[STATUS_ABSENT] + counts[STATUS_EXEMPT]
    counts['total'] = total
    counts['completion_percentage'] = percentage(done, total)
    return counts


def find_incomplete(student_ids: Iterable, subject_ids: Iterable,
                    assessments: Iterable[SubjectAssessment]) -> List[Tuple]:
    """
    Return the (student_id, subject_id) pairs that block publishing.

    A pair is done when its assessment is absent, exempt, or has all four
    components recorded.
    """
    by_key = {(a.student_id, a.subject_id): a for a in assessments}
    subject_ids = list(subject_ids)
    missing = []
    for student_id in student_ids:
        for subject_id in subject_ids:
            status = completion_status(by_key.get((student_id, subject_id)))
            if status in (STATUS_NOT_STARTED, STATUS_PARTIAL):
                missing.append((student_id, subject_id))
    return missing
