import logging

from django.contrib.auth.decorators import login_required
from django.db import transaction
from django.db.models import Count, Q
from django.views.decorators.http import require_POST

from .base import (
    admin_required, teacher_or_admin_required, json_action, get_payload,
    form_error, bind_form, action_error, get_subject,
)
from ..forms import SubjectForm
from ..models import Subject

logger = logging.getLogger(__name__)


@login_required
@teacher_or_admin_required
@json_action
def subjects_list(request):
    """Subjects, optionally filtered by a search term or core/elective."""
    subjects = Subject.objects.annotate(class_term_count=Count('class_term_allocations'))

    search = request.GET.get('search', '').strip()
    if search:
        subjects = subjects.filter(
            Q(name__icontains=search) | Q(short_name__icontains=search) | Q(code__icontains=search)
        )
    if request.GET.get('is_core') in ('0', '1'):
        subjects = subjects.filter(is_core=request.GET['is_core'] == '1')

    return {
        'subjects': [
            {**subject.to_dict(), 'class_term_count': subject.class_term_count}
            for subject in subjects
        ],
    }


@login_required
@teacher_or_admin_required
@json_action
def subject_detail(request, pk):
    subject = get_subject(pk)
    allocations = subject.class_term_allocations.select_related(
        'class_term__class_assigned', 'class_term__term', 'teacher'
    )
    data = subject.to_dict()
    data['allocations'] = [
        {**allocation.to_dict(), 'class_term': allocation.class_term.to_dict()}
        for allocation in allocations
    ]
    return data


@login_required
@admin_required
@require_POST
@json_action
def subject_create(request):
    form = SubjectForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        subject = form.save()
    logger.info(f"Subject {subject.name} created by {request.user}")
    return subject.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def subject_update(request, pk):
    subject = get_subject(pk)
    form = bind_form(SubjectForm, get_payload(request), instance=subject)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        subject = form.save()
    return subject.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def subject_delete(request, pk):
    """Delete a subject that has no recorded assessments."""
    subject = get_subject(pk)
    if subject.assessments.exists():
        return action_error(
            f'Cannot delete "{subject.name}": scores have been recorded for it. Deactivate it instead.'
        )

    name = subject.name
    with transaction.atomic():
        subject.class_term_allocations.all().delete()
        subject.delete()
    logger.info(f"Subject {name} deleted by {request.user}")
    return {'deleted': pk}
