import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from . import config
from .grading import (
    DEFAULT_GRADE_LEVELS, GradeBand, resolve_grade, sort_levels,
)


class GradingSystem(models.Model):
    """A school's score-to-grade table (e.g., WAEC style A1-F)."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    pass_mark = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('40.00'),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Minimum score to pass a subject'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'grading_system'
        ordering = ['name']
        verbose_name = 'Grading System'
        verbose_name_plural = 'Grading Systems'

    def __str__(self):
        return self.name

    def get_bands(self):
        """Grade bands in the order resolve_grade expects."""
        return sort_levels(GradeBand.from_level(level) for level in self.levels.all())

    def is_passing_score(self, score):
        if score is None:
            return False
        return Decimal(str(score)) >= self.pass_mark

    def get_grade_for_score(self, score):
        """Resolve ``score`` against this system's levels."""
        return resolve_grade(score, self.get_bands(), self.pass_mark)

    def to_dict(self, default_id=None):
        """``default_id`` is the school's default grading system id, loaded once by the caller."""
        return {
            'id': str(self.pk),
            'name': self.name,
            'description': self.description,
            'pass_mark': float(self.pass_mark),
            'is_default': default_id is not None and self.pk == default_id,
            'levels': [level.to_dict() for level in self.levels.all()],
        }


class GradeLevel(models.Model):
    """One grade band within a grading system (e.g., A1 = 80-100)."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    grading_system = models.ForeignKey(
        GradingSystem,
        on_delete=models.CASCADE,
        related_name='levels',
        db_index=True
    )
    grade = models.CharField(max_length=10, help_text='Grade label (e.g., A1, B2, F)')
    min_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Minimum score for this grade (inclusive)'
    )
    max_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text='Maximum score for this grade (inclusive)'
    )
    remark = models.CharField(max_length=50, blank=True, help_text='e.g., Excellent, Pass, Fail')

    class Meta:
        db_table = 'grade_level'
        ordering = ['grading_system', '-min_score']
        unique_together = ['grading_system', 'grade']
        verbose_name = 'Grade Level'
        verbose_name_plural = 'Grade Levels'

    def __str__(self):
        return f"{self.grade} ({self.min_score}-{self.max_score}) - {self.remark}"

    def clean(self):
        """Validate that min <= max and ranges don't overlap"""
        if self.min_score is None or self.max_score is None:
            return
        if self.min_score > self.max_score:
            raise ValidationError('Minimum score cannot be greater than maximum score')

        overlapping = GradeLevel.objects.filter(
            grading_system_id=self.grading_system_id
        ).exclude(pk=self.pk).filter(
            models.Q(min_score__lte=self.max_score, max_score__gte=self.min_score)
        )
        if overlapping.exists():
            raise ValidationError(f'Grade range overlaps with existing grade: {overlapping.first()}')

    def to_dict(self):
        return {
            'id': str(self.pk),
            'grade': self.grade,
            'min_score': float(self.min_score),
            'max_score': float(self.max_score),
            'remark': self.remark,
        }


def get_school_grading():
    """
    Return (grading_system, bands, pass_mark) for the current school.

    Falls back to the built-in table when no default grading system has
    been configured; ``grading_system`` is then None.
    """
    from core.models import SchoolSettings
    system = SchoolSettings.load().default_grading_system
    if system is not None:
        bands = system.get_bands()
        if bands:
            return system, bands, system.pass_mark
    return None, list(DEFAULT_GRADE_LEVELS), config.DEFAULT_PASS_MARK


class Assessment(models.Model):
    """
    Raw score components for one student in one subject in one class term.

    Upper bounds (CA 10, exam 70 by default) are enforced at entry by
    AssessmentEntryForm. Absent or exempt subjects are kept on record but
    left out of averages.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student_class_term = models.ForeignKey(
        'students.StudentClassTerm',
        on_delete=models.CASCADE,
        related_name='assessments'
    )
    subject = models.ForeignKey(
        'academics.Subject',
        on_delete=models.PROTECT,
        related_name='assessments'
    )
    ca1 = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True,
                              validators=[MinValueValidator(0)])
    ca2 = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True,
                              validators=[MinValueValidator(0)])
    ca3 = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True,
                              validators=[MinValueValidator(0)])
    exam = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True,
                               validators=[MinValueValidator(0)])
    is_absent = models.BooleanField(default=False)
    is_exempt = models.BooleanField(default=False)
    is_published = models.BooleanField(default=False)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_assessments'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='updated_assessments'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'assessment'
        unique_together = ['student_class_term', 'subject']
        verbose_name = 'Assessment'
        verbose_name_plural = 'Assessments'
        indexes = [
            models.Index(fields=['subject', 'student_class_term'], name='assessment_subject_sct_idx'),
        ]

    def __str__(self):
        return f"{self.student_class_term.student} - {self.subject}"

    @property
    def total(self):
        """Sum of recorded components; None when absent or exempt."""
        if self.is_absent or self.is_exempt:
            return None
        return sum(
            (getattr(self, name) or Decimal('0') for name in ('ca1', 'ca2', 'ca3', 'exam')),
            Decimal('0')
        )
