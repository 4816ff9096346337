"""
Score to grade resolution.

A grading system is an ordered list of bands, each covering a closed
``[min_score, max_score]`` interval of the 0-100 score range. Resolution is a
pure lookup: no clamping, no database access. Scores that fall outside every
band resolve to ``None`` (ungraded).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

SCORE_FLOOR = Decimal('0')
SCORE_CEILING = Decimal('100')
TWO_PLACES = Decimal('0.01')


def to_decimal(value) -> Decimal:
    """Coerce ints, floats, strings and Decimals to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_score(value) -> Decimal:
    """Round a score to 2 decimal places, halves away from zero."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class GradeBand:
    """One row of a grading table."""

    def __init__(self, min_score, max_score, grade: str, remark: str = ''):
        self.min_score = to_decimal(min_score)
        self.max_score = to_decimal(max_score)
        self.grade = grade
        self.remark = remark

    @classmethod
    def from_level(cls, level) -> 'GradeBand':
        """Build a band from a GradeLevel model instance (or anything shaped like one)."""
        return cls(level.min_score, level.max_score, level.grade, level.remark)

    def contains(self, score: Decimal) -> bool:
        return self.min_score <= score <= self.max_score

    def to_dict(self) -> Dict:
        return {
            'min_score': float(self.min_score),
            'max_score': float(self.max_score),
            'grade': self.grade,
            'remark': self.remark,
        }

    def __repr__(self):
        return f"GradeBand({self.grade}: {self.min_score}-{self.max_score})"


class GradeResult:
    """Outcome of resolving a score against a grading table."""

    def __init__(self, grade: str, remark: str, passed: Optional[bool] = None):
        self.grade = grade
        self.remark = remark
        self.passed = passed

    def to_dict(self) -> Dict:
        return {'grade': self.grade, 'remark': self.remark, 'passed': self.passed}

    def __eq__(self, other):
        if not isinstance(other, GradeResult):
            return NotImplemented
        return (self.grade, self.remark, self.passed) == (other.grade, other.remark, other.passed)

    def __repr__(self):
        return f"GradeResult({self.grade!r}, {self.remark!r}, passed={self.passed})"


DEFAULT_PASS_MARK = Decimal('40')

# Upper bounds use .99 so fractional averages between integer bands still
# resolve (79.5 is an A2, not ungraded).
DEFAULT_GRADE_LEVELS = (
    GradeBand(80, 100, 'A1', 'Excellent'),
    GradeBand(70, '79.99', 'A2', 'Very Good'),
    GradeBand(60, '69.99', 'B1', 'Good'),
    GradeBand(50, '59.99', 'B2', 'Fair'),
    GradeBand(45, '49.99', 'C1', 'Pass'),
    GradeBand(40, '44.99', 'C2', 'Weak Pass'),
    GradeBand(0, '39.99', 'F', 'Fail'),
)


def sort_levels(levels: Iterable[GradeBand]) -> List[GradeBand]:
    """Order bands by descending min_score, the order resolve_grade expects."""
    return sorted(levels, key=lambda band: band.min_score, reverse=True)


def resolve_grade(score, levels: Iterable[GradeBand], pass_mark=None) -> Optional[GradeResult]:
    """
    Return the grade of the first band whose [min, max] contains ``score``.

    ``levels`` is expected in descending min_score order. Returns None when
    ``score`` is None or no band matches.
    """
    if score is None:
        return None
    score = to_decimal(score)
    for band in levels:
        if band.contains(score):
            passed = None if pass_mark is None else score >= to_decimal(pass_mark)
            return GradeResult(band.grade, band.remark, passed)
    return None


def find_overlaps(levels: Iterable[GradeBand]) -> List[Tuple[GradeBand, GradeBand]]:
    """Return every pair of bands whose ranges intersect."""
    ordered = sorted(levels, key=lambda band: band.min_score)
    overlaps = []
    for i, band in enumerate(ordered):
        for other in ordered[i + 1:]:
            if other.min_score > band.max_score:
                break
            overlaps.append((band, other))
    return overlaps


def find_coverage_gaps(levels: Iterable[GradeBand], step=TWO_PLACES) -> List[Tuple[Decimal, Decimal]]:
    """
    Return the parts of [0, 100] no band covers, as (low, high) pairs.

    Scores are recorded to 2 decimal places, so two bands that meet at
    79.99 / 80.00 leave no gap.
    """
    step = to_decimal(step)
    gaps = []
    cursor = SCORE_FLOOR
    for band in sorted(levels, key=lambda b: b.min_score):
        if band.min_score > cursor:
            gaps.append((cursor, band.min_score - step))
        if band.max_score + step > cursor:
            cursor = band.max_score + step
    if cursor <= SCORE_CEILING:
        gaps.append((cursor, SCORE_CEILING))
    return gaps


def percentage(part, whole) -> int:
    """Whole-number percentage with halves rounded up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def pass_rate(scores: Iterable, pass_mark) -> int:
    """Percentage of scores at or above the pass mark."""
    scores = [to_decimal(s) for s in scores if s is not None]
    passed = sum(1 for s in scores if s >= to_decimal(pass_mark))
    return percentage(passed, len(scores))
