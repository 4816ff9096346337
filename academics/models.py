from django.db import models
from django.utils.translation import gettext_lazy as _


class Class(models.Model):
    """
    Represents a class/classroom grouping of students.

    Name format: KG1-A, B1-A (primary), B8-B (JHS 2), SHS2-A.
    """
    class LevelType(models.TextChoices):
        KG = 'kg', _('Kindergarten')
        PRIMARY = 'primary', _('Primary')
        JHS = 'jhs', _('JHS')
        SHS = 'shs', _('SHS')

    level_type = models.CharField(
        max_length=10,
        choices=LevelType.choices,
        default=LevelType.PRIMARY
    )
    level_number = models.PositiveSmallIntegerField(help_text="1, 2, 3, etc.")
    section = models.CharField(max_length=5, help_text="A, B, C, etc.")

    # Auto-generated class name
    name = models.CharField(max_length=20, editable=False)

    capacity = models.PositiveIntegerField(default=35, help_text="Maximum number of students")

    class_teacher = models.ForeignKey(
        'teachers.Teacher',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_classes',
        help_text="The form tutor or class teacher responsible for this class."
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['level_type', 'level_number', 'section']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        unique_together = ['level_type', 'level_number', 'section']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.name = self.generate_name()
        super().save(*args, **kwargs)

    def generate_name(self):
        """Generate class name based on level type."""
        if self.level_type == self.LevelType.KG:
            return f"KG{self.level_number}-{self.section}"
        elif self.level_type == self.LevelType.PRIMARY:
            return f"B{self.level_number}-{self.section}"
        elif self.level_type == self.LevelType.JHS:
            # JHS is B7-B9
            return f"B{self.level_number + 6}-{self.section}"
        elif self.level_type == self.LevelType.SHS:
            return f"SHS{self.level_number}-{self.section}"
        return f"{self.level_type.upper()}{self.level_number}-{self.section}"

    @property
    def level_display(self):
        """Human-readable level name."""
        if self.level_type == self.LevelType.KG:
            return f"KG {self.level_number}"
        elif self.level_type == self.LevelType.PRIMARY:
            return f"Basic {self.level_number}"
        elif self.level_type == self.LevelType.JHS:
            return f"JHS {self.level_number}"
        elif self.level_type == self.LevelType.SHS:
            return f"SHS {self.level_number}"
        return str(self.level_number)

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'level_type': self.level_type,
            'level_number': self.level_number,
            'level_display': self.level_display,
            'section': self.section,
            'capacity': self.capacity,
            'class_teacher_id': str(self.class_teacher_id) if self.class_teacher_id else None,
            'is_active': self.is_active,
        }


class Subject(models.Model):
    """
    Represents a subject taught at the school.
    """
    name = models.CharField(max_length=100, unique=True)
    short_name = models.CharField(max_length=20, blank=True, help_text="e.g., MATH, ENG")
    code = models.CharField(max_length=20, blank=True, help_text="Optional subject code")
    description = models.TextField(blank=True)
    is_core = models.BooleanField(default=True, help_text="Core subjects are mandatory")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-is_core', 'name']
        verbose_name = "Subject"
        verbose_name_plural = "Subjects"

    def __str__(self):
        return self.name

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'short_name': self.short_name,
            'code': self.code,
            'description': self.description,
            'is_core': self.is_core,
            'is_active': self.is_active,
        }


class ClassTerm(models.Model):
    """
    A class offered in a specific term.

    Scopes which students are enrolled and which subjects are taught for
    that period.
    """
    class_assigned = models.ForeignKey(Class, on_delete=models.CASCADE, related_name='class_terms')
    term = models.ForeignKey('core.Term', on_delete=models.CASCADE, related_name='class_terms')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['class_assigned', 'term']
        ordering = ['term', 'class_assigned']
        verbose_name = "Class Term"
        verbose_name_plural = "Class Terms"

    def __str__(self):
        return f"{self.class_assigned.name} - {self.term.name}"

    def to_dict(self):
        return {
            'id': self.pk,
            'class_id': self.class_assigned_id,
            'class_name': self.class_assigned.name,
            'term_id': self.term_id,
            'term_name': self.term.name,
        }


class ClassTermSubject(models.Model):
    """
    Links a ClassTerm to a Subject and assigns the Teacher who teaches it.
    Example: 'Mr. Smith' teaches 'Mathematics' to 'B8-B' in First Term.
    """
    class_term = models.ForeignKey(ClassTerm, on_delete=models.CASCADE, related_name='subjects')
    subject = models.ForeignKey(Subject, on_delete=models.PROTECT, related_name='class_term_allocations')
    teacher = models.ForeignKey(
        'teachers.Teacher',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subject_assignments'
    )

    class Meta:
        unique_together = ['class_term', 'subject']
        ordering = ['subject__name']
        verbose_name = "Subject Allocation"
        verbose_name_plural = "Subject Allocations"

    def __str__(self):
        return f"{self.subject.name} - {self.class_term}"

    def to_dict(self):
        return {
            'id': self.pk,
            'class_term_id': self.class_term_id,
            'subject_id': self.subject_id,
            'subject_name': self.subject.name,
            'teacher_id': str(self.teacher_id) if self.teacher_id else None,
            'teacher_name': self.teacher.full_name if self.teacher_id else None,
        }
