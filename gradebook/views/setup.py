import logging

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.db import transaction
from django.views.decorators.http import require_POST

from core.models import SchoolSettings
from .base import (
    admin_required, json_action, get_payload, get_list, form_error, bind_form,
    validation_message, truthy, get_grading_system, get_grade_level,
)
from ..forms import GradingSystemForm, GradeLevelForm
from ..grading import DEFAULT_GRADE_LEVELS, find_coverage_gaps, find_overlaps
from ..models import GradingSystem, GradeLevel

logger = logging.getLogger(__name__)


def _system_data(system, default_id):
    data = system.to_dict(default_id=default_id)
    bands = system.get_bands()
    data['coverage_gaps'] = [[float(low), float(high)] for low, high in find_coverage_gaps(bands)]
    data['overlaps'] = [[a.grade, b.grade] for a, b in find_overlaps(bands)]
    return data


def _add_levels(system, levels):
    """Create grade levels from payload rows; any invalid row aborts."""
    for row in levels:
        form = GradeLevelForm(row, grading_system=system)
        if not form.is_valid():
            raise ValidationError(validation_message(form.errors))
        form.save()


# ============ Grading System CRUD ============

@login_required
@admin_required
@json_action
def grading_system_list(request):
    """All grading systems with the school default flagged."""
    default_id = SchoolSettings.load().default_grading_system_id
    systems = GradingSystem.objects.prefetch_related('levels')
    return {
        'grading_systems': [_system_data(system, default_id) for system in systems],
        'default_id': str(default_id) if default_id else None,
    }


@login_required
@admin_required
@json_action
def grading_system_detail(request, pk):
    system = get_grading_system(pk)
    return _system_data(system, SchoolSettings.load().default_grading_system_id)


@login_required
@admin_required
@require_POST
@json_action
def grading_system_create(request):
    """
    Create a grading system.

    Levels can be sent as a ``levels`` list or seeded from the built-in
    table with ``use_default_levels``. The first system a school creates
    becomes its default.
    """
    payload = get_payload(request)
    form = GradingSystemForm(payload)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        system = form.save()
        if truthy(payload.get('use_default_levels')):
            GradeLevel.objects.bulk_create([
                GradeLevel(
                    grading_system=system,
                    grade=band.grade,
                    min_score=band.min_score,
                    max_score=band.max_score,
                    remark=band.remark,
                )
                for band in DEFAULT_GRADE_LEVELS
            ])
        else:
            _add_levels(system, get_list(payload, 'levels'))

        settings = SchoolSettings.load()
        if settings.default_grading_system_id is None or truthy(payload.get('is_default')):
            settings.default_grading_system = system
            settings.save()

    logger.info(f"Grading system '{system.name}' created by {request.user}")
    return _system_data(system, SchoolSettings.load().default_grading_system_id)


@login_required
@admin_required
@require_POST
@json_action
def grading_system_update(request, pk):
    system = get_grading_system(pk)
    form = bind_form(GradingSystemForm, get_payload(request), instance=system)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        system = form.save()
    return _system_data(system, SchoolSettings.load().default_grading_system_id)


@login_required
@admin_required
@require_POST
@json_action
def grading_system_delete(request, pk):
    system = get_grading_system(pk)
    if SchoolSettings.load().default_grading_system_id == system.pk:
        raise ValidationError(
            "Cannot delete the default grading system. Set another system as default first."
        )

    with transaction.atomic():
        system.delete()
    logger.info(f"Grading system {pk} deleted by {request.user}")
    return {'deleted': str(pk)}


@login_required
@admin_required
@require_POST
@json_action
def grading_system_set_default(request, pk):
    """Point the school at this grading system; the previous default is replaced."""
    system = get_grading_system(pk)
    with transaction.atomic():
        settings = SchoolSettings.objects.select_for_update().get(pk=SchoolSettings.load().pk)
        settings.default_grading_system = system
        settings.save()

    logger.info(f"Default grading system set to '{system.name}' by {request.user}")
    return _system_data(system, system.pk)


# ============ Grade Level CRUD ============

@login_required
@admin_required
@require_POST
@json_action
def grade_level_create(request, system_id):
    system = get_grading_system(system_id)
    form = GradeLevelForm(get_payload(request), grading_system=system)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        level = form.save()
    return level.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def grade_level_update(request, pk):
    level = get_grade_level(pk)
    form = bind_form(
        GradeLevelForm, get_payload(request), instance=level, grading_system=level.grading_system
    )
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        level = form.save()
    return level.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def grade_level_delete(request, pk):
    level = get_grade_level(pk)
    level.delete()
    return {'deleted': str(pk)}
