from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.choices import Gender, RelationshipType
from core.models import Person


class Student(models.Model):
    """
    Represents a student admitted to the school.
    """
    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')
        GRADUATED = 'graduated', _('Graduated')
        WITHDRAWN = 'withdrawn', _('Withdrawn')
        TRANSFERRED = 'transferred', _('Transferred')

    # Personal Information
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    other_names = models.CharField(max_length=100, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=1, choices=Gender.choices)

    # Contact Information
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=20, blank=True, help_text="Student's phone (if any)")

    # Admission Details
    admission_number = models.CharField(
        max_length=50,
        unique=True,
        help_text="Unique student ID/admission number"
    )
    admission_date = models.DateField(default=timezone.localdate)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE
    )

    # Optional User Account
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='student_profile'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']
        verbose_name = "Student"
        verbose_name_plural = "Students"

    def __str__(self):
        return f"{self.full_name} ({self.admission_number})"

    @property
    def full_name(self):
        """Return full name of student."""
        names = [self.first_name]
        if self.other_names:
            names.append(self.other_names)
        names.append(self.last_name)
        return ' '.join(names)

    def get_class_term(self, term):
        """Return the student's enrolment for ``term``, if any."""
        return self.class_terms.select_related(
            'class_term__class_assigned', 'class_term__term'
        ).filter(class_term__term=term).first()

    def to_dict(self):
        return {
            'id': self.pk,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'other_names': self.other_names,
            'full_name': self.full_name,
            'gender': self.gender,
            'date_of_birth': self.date_of_birth,
            'address': self.address,
            'phone': self.phone,
            'admission_number': self.admission_number,
            'admission_date': self.admission_date,
            'status': self.status,
            'user_id': self.user_id,
        }


class StudentClassTerm(models.Model):
    """
    Enrolment of a student in a class for one term.
    """
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='class_terms')
    class_term = models.ForeignKey(
        'academics.ClassTerm',
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    enrolled_on = models.DateField(auto_now_add=True)

    class Meta:
        unique_together = ['student', 'class_term']
        ordering = ['student__last_name', 'student__first_name']
        verbose_name = "Class Enrolment"
        verbose_name_plural = "Class Enrolments"

    def __str__(self):
        return f"{self.student.full_name} - {self.class_term}"


class StudentTransition(models.Model):
    """
    Audit record of a student moving from one class term to another.
    """
    class TransitionType(models.TextChoices):
        PROMOTION = 'PROMOTION', _('Promotion')
        REPETITION = 'REPETITION', _('Repetition')
        TRANSFER = 'TRANSFER', _('Transfer')
        WITHDRAWAL = 'WITHDRAWAL', _('Withdrawal')

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='transitions')
    from_class_term = models.ForeignKey(
        'academics.ClassTerm',
        on_delete=models.PROTECT,
        related_name='transitions_out'
    )
    to_class_term = models.ForeignKey(
        'academics.ClassTerm',
        on_delete=models.PROTECT,
        related_name='transitions_in'
    )
    transition_type = models.CharField(max_length=20, choices=TransitionType.choices)
    transition_date = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='student_transitions'
    )

    class Meta:
        ordering = ['-transition_date']

    def __str__(self):
        return f"{self.student.full_name}: {self.get_transition_type_display()}"

    def to_dict(self):
        return {
            'id': self.pk,
            'student_id': self.student_id,
            'student_name': self.student.full_name,
            'from_class_term_id': self.from_class_term_id,
            'from_class': self.from_class_term.class_assigned.name,
            'to_class_term_id': self.to_class_term_id,
            'to_class': self.to_class_term.class_assigned.name,
            'transition_type': self.transition_type,
            'transition_date': self.transition_date,
            'notes': self.notes,
        }


class AdmissionSequence(models.Model):
    """Last admission sequence number issued in a calendar year."""
    year = models.PositiveIntegerField(unique=True)
    last_sequence = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year']

    def __str__(self):
        return f"{self.year}: {self.last_sequence}"


class Parent(Person):
    """
    Parent or guardian; may be linked to several students.
    """
    occupation = models.CharField(max_length=100, blank=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='parent_profile'
    )
    students = models.ManyToManyField(Student, through='StudentParent', related_name='parents')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']

    def to_dict(self, include_students=False):
        data = {
            'id': self.pk,
            'first_name': self.first_name,
            'middle_name': self.middle_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'gender': self.gender,
            'email': self.email,
            'phone_number': self.phone_number,
            'address': self.address,
            'occupation': self.occupation,
            'user_id': self.user_id,
        }
        if include_students:
            data['students'] = [
                {
                    'link_id': link.pk,
                    'relationship': link.relationship,
                    'is_primary': link.is_primary,
                    **link.student.to_dict(),
                }
                for link in self.student_links.select_related('student')
            ]
        return data


class StudentParent(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='parent_links')
    parent = models.ForeignKey(Parent, on_delete=models.CASCADE, related_name='student_links')
    relationship = models.CharField(
        max_length=20,
        choices=RelationshipType.choices,
        default=RelationshipType.GUARDIAN
    )
    is_primary = models.BooleanField(default=False)

    class Meta:
        unique_together = ['student', 'parent']

    def __str__(self):
        return f"{self.parent.full_name} ({self.get_relationship_display()}) - {self.student.full_name}"

    def save(self, *args, **kwargs):
        # One primary contact per student
        if self.is_primary:
            StudentParent.objects.filter(
                student_id=self.student_id, is_primary=True
            ).exclude(pk=self.pk).update(is_primary=False)
        super().save(*args, **kwargs)
