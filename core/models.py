from django.conf import settings
from django.db import models
from django.utils import timezone

from .choices import Gender


class Person(models.Model):
    """
    Abstract Person model shared by teachers and parents.
    """
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    middle_name = models.CharField(max_length=50, blank=True, default='')

    gender = models.CharField(
        max_length=1,
        choices=Gender.choices,
        default=Gender.MALE
    )
    date_of_birth = models.DateField(null=True, blank=True)

    # Contact
    phone_number = models.CharField(max_length=17, blank=True)
    address = models.TextField(blank=True, default='')
    email = models.EmailField(blank=True, null=True)

    class Meta:
        abstract = True

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(filter(None, parts))


class AcademicYear(models.Model):
    """
    Represents an academic year / session (e.g., 2024/2025).
    Each tenant has their own academic years.
    """
    name = models.CharField(
        max_length=50,
        help_text="e.g., 2024/2025 Academic Year"
    )
    start_date = models.DateField()
    end_date = models.DateField()
    is_current = models.BooleanField(
        default=False,
        help_text="Only one academic year can be current at a time"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_date']
        verbose_name = "Academic Year"
        verbose_name_plural = "Academic Years"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Ensure only one academic year is current
        if self.is_current:
            AcademicYear.objects.filter(is_current=True).exclude(pk=self.pk).update(is_current=False)
        super().save(*args, **kwargs)

    @classmethod
    def get_current(cls):
        """Get the current academic year."""
        return cls.objects.filter(is_current=True).first()

    def to_dict(self, include_terms=False):
        data = {
            'id': self.pk,
            'name': self.name,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'is_current': self.is_current,
        }
        if include_terms:
            data['terms'] = [term.to_dict() for term in self.terms.all()]
        return data


class Term(models.Model):
    """
    Represents a term/semester within an academic year.
    """
    PERIOD_NUMBER_CHOICES = [
        (1, 'First'),
        (2, 'Second'),
        (3, 'Third'),
        (4, 'Fourth'),
    ]

    academic_year = models.ForeignKey(
        AcademicYear,
        on_delete=models.CASCADE,
        related_name='terms'
    )
    name = models.CharField(
        max_length=50,
        help_text="e.g., First Term, Semester One"
    )
    term_number = models.PositiveSmallIntegerField(
        choices=PERIOD_NUMBER_CHOICES,
        default=1,
        verbose_name="Period Number"
    )
    start_date = models.DateField()
    end_date = models.DateField()
    is_current = models.BooleanField(
        default=False,
        help_text="Only one term can be current at a time"
    )

    # Grade locking
    grades_locked = models.BooleanField(
        default=False,
        help_text="When locked, scores cannot be modified"
    )
    grades_locked_at = models.DateTimeField(null=True, blank=True)
    grades_locked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='locked_terms',
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['academic_year', 'term_number']
        verbose_name = "Term"
        verbose_name_plural = "Terms"
        unique_together = ['academic_year', 'term_number']

    def __str__(self):
        return f"{self.name} - {self.academic_year.name}"

    def save(self, *args, **kwargs):
        # Ensure only one term is current
        if self.is_current:
            Term.objects.filter(is_current=True).exclude(pk=self.pk).update(is_current=False)
        super().save(*args, **kwargs)

    @classmethod
    def get_current(cls):
        """Get the current term."""
        return cls.objects.filter(is_current=True).select_related('academic_year').first()

    def lock_grades(self, user):
        """Lock grades for this term."""
        self.grades_locked = True
        self.grades_locked_at = timezone.now()
        self.grades_locked_by = user
        self.save(update_fields=['grades_locked', 'grades_locked_at', 'grades_locked_by'])

    def unlock_grades(self):
        """Unlock grades for this term."""
        self.grades_locked = False
        self.grades_locked_at = None
        self.grades_locked_by = None
        self.save(update_fields=['grades_locked', 'grades_locked_at', 'grades_locked_by'])

    def to_dict(self):
        return {
            'id': self.pk,
            'academic_year_id': self.academic_year_id,
            'name': self.name,
            'term_number': self.term_number,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'is_current': self.is_current,
            'grades_locked': self.grades_locked,
        }


class SchoolSettings(models.Model):
    """
    Stores configuration specific to this School (Tenant).
    """
    PERIOD_TYPE_CHOICES = [
        ('term', 'Terms (Primary/JHS)'),
        ('semester', 'Semesters (SHS)'),
    ]
    DEFAULT_ADMISSION_FORMAT = '{PREFIX}/{YEAR}/{NUMBER}'

    display_name = models.CharField(max_length=50, blank=True)
    motto = models.CharField(max_length=200, blank=True)

    academic_period_type = models.CharField(
        max_length=10,
        choices=PERIOD_TYPE_CHOICES,
        default='term',
        help_text="Terms for Primary/JHS, Semesters for SHS"
    )

    # Admission numbers
    admission_prefix = models.CharField(max_length=20, default='ADM')
    admission_format = models.CharField(
        max_length=100,
        default=DEFAULT_ADMISSION_FORMAT,
        help_text="Placeholders: {PREFIX}, {YEAR}, {NUMBER}"
    )
    admission_sequence_start = models.PositiveIntegerField(
        default=1,
        help_text="First sequence number issued in a new year"
    )

    # A single nullable pointer replaces a per-row is_default flag
    default_grading_system = models.ForeignKey(
        'gradebook.GradingSystem',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
    )

    class Meta:
        verbose_name = "School Settings"
        verbose_name_plural = "School Settings"

    def __str__(self):
        return "School Profile & Settings"

    @property
    def period_label(self):
        """Return 'Term' or 'Semester' based on setting."""
        return 'Semester' if self.academic_period_type == 'semester' else 'Term'

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        profile, _ = cls.objects.get_or_create(pk=1)
        return profile

    def to_dict(self):
        return {
            'display_name': self.display_name,
            'motto': self.motto,
            'academic_period_type': self.academic_period_type,
            'period_label': self.period_label,
            'admission_prefix': self.admission_prefix,
            'admission_format': self.admission_format,
            'admission_sequence_start': self.admission_sequence_start,
            'default_grading_system_id': self.default_grading_system_id,
        }
