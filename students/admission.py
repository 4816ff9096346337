"""
Admission number generation.

Numbers come from a per-year sequence stored in AdmissionSequence and are
rendered through the school's format template, e.g. ``{PREFIX}/{YEAR}/{NUMBER}``
gives ``ADM/2025/0007``.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.models import SchoolSettings
from .models import AdmissionSequence, Student

logger = logging.getLogger(__name__)

NUMBER_WIDTH = 4


def format_admission_number(template, prefix, year, number):
    """Fill ``{PREFIX}``, ``{YEAR}`` and ``{NUMBER}`` (zero-padded to 4 digits)."""
    return (
        template
        .replace('{PREFIX}', prefix)
        .replace('{YEAR}', str(year))
        .replace('{NUMBER}', str(number).zfill(NUMBER_WIDTH))
    )


def validate_admission_format(template):
    """A template must contain {NUMBER} or every number it produces would collide."""
    if '{NUMBER}' not in template:
        raise ValidationError('Admission format must contain the {NUMBER} placeholder.')


def _current_year(year):
    return year or timezone.localdate().year


def preview_next_admission_number(year=None):
    """The number the next admission would get, without consuming it."""
    year = _current_year(year)
    school_settings = SchoolSettings.load()
    sequence = AdmissionSequence.objects.filter(year=year).first()
    if sequence is None:
        next_number = school_settings.admission_sequence_start
    else:
        next_number = sequence.last_sequence + 1
    return format_admission_number(
        school_settings.admission_format, school_settings.admission_prefix, year, next_number
    )


def allocate_admission_number(year=None):
    """
    Consume and return the next admission number for ``year``.

    The sequence row is locked for the duration of the surrounding
    transaction so concurrent admissions never receive the same number.
    """
    year = _current_year(year)
    school_settings = SchoolSettings.load()

    with transaction.atomic():
        sequence = AdmissionSequence.objects.select_for_update().filter(year=year).first()
        if sequence is None:
            sequence = AdmissionSequence.objects.create(
                year=year, last_sequence=school_settings.admission_sequence_start
            )
        else:
            sequence.last_sequence += 1
            sequence.save(update_fields=['last_sequence', 'updated_at'])

        number = format_admission_number(
            school_settings.admission_format,
            school_settings.admission_prefix,
            year,
            sequence.last_sequence,
        )
        if Student.objects.filter(admission_number=number).exists():
            raise ValidationError(
                f"Admission number {number} is already in use. Adjust the admission settings."
            )

    logger.info(f"Allocated admission number {number} (sequence {sequence.last_sequence}, {year})")
    return number
