import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import Person
from core.choices import PersonTitle as Title


class Teacher(Person):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Status(models.TextChoices):
        ACTIVE = 'active', _('Active')
        INACTIVE = 'inactive', _('Inactive')
        ON_LEAVE = 'on_leave', _('On Leave')

    # Link to User account
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='teacher_profile',
        help_text="Associated user account for login"
    )

    title = models.CharField(
        max_length=10,
        choices=Title.choices,
        default=Title.MR
    )
    staff_id = models.CharField(max_length=20, unique=True, help_text="Unique Employee ID")
    subject_specialization = models.CharField(max_length=100, blank=True, help_text="e.g. Mathematics, Science")
    qualification = models.CharField(max_length=100, blank=True)
    employment_date = models.DateField(default=timezone.now)
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.get_title_display()} {self.full_name}"

    def to_dict(self):
        return {
            'id': str(self.pk),
            'title': self.title,
            'first_name': self.first_name,
            'middle_name': self.middle_name,
            'last_name': self.last_name,
            'full_name': self.full_name,
            'gender': self.gender,
            'staff_id': self.staff_id,
            'email': self.email,
            'phone_number': self.phone_number,
            'subject_specialization': self.subject_specialization,
            'qualification': self.qualification,
            'employment_date': self.employment_date,
            'status': self.status,
            'user_id': self.user_id,
        }
