import logging

from django.contrib.auth.decorators import login_required
from django.db import connection, transaction
from django.db.models import Count, Q
from django.utils import timezone
from django.views.decorators.http import require_POST

from . import calendar
from .forms import (
    SchoolInformationForm,
    AdmissionSettingsForm,
    AcademicYearForm,
    TermForm,
    DateRangeForm,
)
from .models import SchoolSettings, AcademicYear, Term
from .utils import (
    admin_required, json_action, get_payload, get_object_or_error, form_error,
    action_error, bind_form,
)

logger = logging.getLogger(__name__)


# ============ Dashboards ============

def admin_dashboard_data():
    """Counts and the current period for the school admin landing page."""
    from students.models import Student, StudentClassTerm
    from academics.models import Class, Subject
    from teachers.models import Teacher

    current_year = AcademicYear.get_current()
    current_term = Term.get_current()

    students = Student.objects.aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status=Student.Status.ACTIVE)),
        male=Count('id', filter=Q(status=Student.Status.ACTIVE, gender='M')),
        female=Count('id', filter=Q(status=Student.Status.ACTIVE, gender='F')),
    )

    enrolled = 0
    if current_term:
        enrolled = StudentClassTerm.objects.filter(class_term__term=current_term).count()

    recent_students = Student.objects.order_by('-created_at')[:5]

    return {
        'role': 'admin',
        'current_year': current_year.to_dict() if current_year else None,
        'current_term': current_term.to_dict() if current_term else None,
        'student_count': students['active'],
        'total_students': students['total'],
        'male_count': students['male'],
        'female_count': students['female'],
        'teacher_count': Teacher.objects.filter(status=Teacher.Status.ACTIVE).count(),
        'class_count': Class.objects.filter(is_active=True).count(),
        'subject_count': Subject.objects.filter(is_active=True).count(),
        'enrolled_this_term': enrolled,
        'recent_students': [s.to_dict() for s in recent_students],
    }


@login_required
@json_action
def index(request):
    """Dashboard router: returns the payload for the caller's role."""
    user = request.user
    role = user.role

    if role in ('super_admin', 'admin'):
        if connection.schema_name == 'public':
            from schools.views import platform_dashboard_data
            return platform_dashboard_data()
        return admin_dashboard_data()

    if role == 'teacher':
        from teachers.views import teacher_dashboard_data
        return teacher_dashboard_data(user)

    if role == 'student':
        from students.views import student_dashboard_data
        return student_dashboard_data(user)

    if role == 'parent':
        from students.views import parent_dashboard_data
        return parent_dashboard_data(user)

    return {'role': role, 'user': user.to_dict()}


# ============ Academic years ============

@login_required
@admin_required
@json_action
def academic_year_list(request):
    years = AcademicYear.objects.prefetch_related('terms')
    return {'academic_years': [year.to_dict(include_terms=True) for year in years]}


@login_required
@admin_required
@require_POST
@json_action
def academic_year_create(request):
    """Create a new academic year."""
    form = AcademicYearForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        academic_year = form.save()
    logger.info(f"Academic year '{academic_year.name}' created by {request.user}")
    return academic_year.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def academic_year_update(request, pk):
    """Edit an academic year."""
    academic_year = get_object_or_error(AcademicYear, "Academic year not found", pk=pk)
    form = bind_form(AcademicYearForm, get_payload(request), instance=academic_year)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        academic_year = form.save()
    return academic_year.to_dict(include_terms=True)


@login_required
@admin_required
@require_POST
@json_action
def academic_year_delete(request, pk):
    """Delete an academic year and its terms."""
    academic_year = get_object_or_error(AcademicYear, "Academic year not found", pk=pk)

    from academics.models import ClassTerm
    if ClassTerm.objects.filter(term__academic_year=academic_year, enrollments__isnull=False).exists():
        return action_error(
            f"Cannot delete {academic_year.name}: students are enrolled in its terms."
        )

    name = academic_year.name
    academic_year.delete()
    logger.info(f"Academic year '{name}' deleted by {request.user}")
    return {'deleted': pk}


@login_required
@admin_required
@require_POST
@json_action
def academic_year_set_current(request, pk):
    """Set an academic year as current."""
    academic_year = get_object_or_error(AcademicYear, "Academic year not found", pk=pk)
    with transaction.atomic():
        academic_year.is_current = True
        academic_year.save()
    return academic_year.to_dict()


# ============ Terms ============

@login_required
@admin_required
@json_action
def term_list(request):
    terms = Term.objects.select_related('academic_year')
    academic_year_id = request.GET.get('academic_year')
    if academic_year_id:
        terms = terms.filter(academic_year_id=academic_year_id)
    return {
        'period_label': SchoolSettings.load().period_label,
        'terms': [term.to_dict() for term in terms],
    }


@login_required
@admin_required
@require_POST
@json_action
def term_create(request):
    """Create a new term/semester."""
    school_settings = SchoolSettings.load()
    form = TermForm(get_payload(request), period_type=school_settings.academic_period_type)
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        term = form.save()
    logger.info(f"{school_settings.period_label} '{term}' created by {request.user}")
    return term.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def term_update(request, pk):
    """Edit a term/semester."""
    term = get_object_or_error(Term, "Term not found", pk=pk)
    school_settings = SchoolSettings.load()
    form = bind_form(
        TermForm, get_payload(request), instance=term, period_type=school_settings.academic_period_type
    )
    if not form.is_valid():
        return form_error(form)

    with transaction.atomic():
        term = form.save()
    return term.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def term_delete(request, pk):
    """Delete a term/semester with no enrolments."""
    term = get_object_or_error(Term, "Term not found", pk=pk)
    if term.class_terms.filter(enrollments__isnull=False).exists():
        return action_error(f"Cannot delete {term.name}: students are enrolled in it.")

    term.delete()
    logger.info(f"Term {pk} deleted by {request.user}")
    return {'deleted': pk}


@login_required
@admin_required
@require_POST
@json_action
def term_set_current(request, pk):
    """Set a term/semester as current; its academic year becomes current too."""
    term = get_object_or_error(Term.objects.select_related('academic_year'), "Term not found", pk=pk)
    with transaction.atomic():
        term.is_current = True
        term.save()
        if not term.academic_year.is_current:
            term.academic_year.is_current = True
            term.academic_year.save()
    return term.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def term_lock_grades(request, pk):
    """Lock scores for a term; no assessment can be saved while locked."""
    term = get_object_or_error(Term, "Term not found", pk=pk)
    if term.grades_locked:
        return action_error(f"Grades for {term.name} are already locked.")
    term.lock_grades(request.user)
    logger.info(f"Grades locked for {term} by {request.user}")
    return term.to_dict()


@login_required
@admin_required
@require_POST
@json_action
def term_unlock_grades(request, pk):
    term = get_object_or_error(Term, "Term not found", pk=pk)
    if not term.grades_locked:
        return action_error(f"Grades for {term.name} are not locked.")
    term.unlock_grades()
    logger.info(f"Grades unlocked for {term} by {request.user}")
    return term.to_dict()


# ============ Calendar ============

@login_required
@json_action
def calendar_data(request):
    """
    Sessions with their terms, week counts, progress, breaks and the next
    upcoming events, all relative to today.
    """
    today = timezone.localdate()
    sessions = list(AcademicYear.objects.prefetch_related('terms').order_by('start_date'))
    pairs = [(session, list(session.terms.all())) for session in sessions]

    current = next((s for s, _ in pairs if s.is_current), None)
    return {
        'today': today,
        'period_label': SchoolSettings.load().period_label,
        'current_session_id': current.pk if current else None,
        'sessions': [calendar.session_summary(session, terms, today) for session, terms in pairs],
        'upcoming_events': calendar.upcoming_events(pairs, today),
    }


@login_required
@admin_required
@require_POST
@json_action
def session_update_dates(request, pk):
    """Move an academic year's dates; its terms must still fit inside."""
    academic_year = get_object_or_error(AcademicYear, "Academic year not found", pk=pk)
    form = DateRangeForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    start_date = form.cleaned_data['start_date']
    end_date = form.cleaned_data['end_date']
    outside = academic_year.terms.exclude(start_date__gte=start_date, end_date__lte=end_date)
    if outside.exists():
        return action_error(
            f"{outside.first().name} falls outside the new dates. Update its dates first."
        )

    academic_year.start_date = start_date
    academic_year.end_date = end_date
    academic_year.save(update_fields=['start_date', 'end_date', 'updated_at'])
    return academic_year.to_dict(include_terms=True)


@login_required
@admin_required
@require_POST
@json_action
def term_update_dates(request, pk):
    """Move a term's dates; they must stay inside its academic year."""
    term = get_object_or_error(Term.objects.select_related('academic_year'), "Term not found", pk=pk)
    form = DateRangeForm(get_payload(request))
    if not form.is_valid():
        return form_error(form)

    start_date = form.cleaned_data['start_date']
    end_date = form.cleaned_data['end_date']
    academic_year = term.academic_year
    if start_date < academic_year.start_date or end_date > academic_year.end_date:
        return action_error(
            f"Dates must be within the academic year ({academic_year.start_date} - {academic_year.end_date})."
        )

    term.start_date = start_date
    term.end_date = end_date
    term.save(update_fields=['start_date', 'end_date', 'updated_at'])
    return term.to_dict()


# ============ School settings ============

@login_required
@admin_required
@json_action
def school_information(request):
    """Read or update the school's own details and display settings."""
    school = request.tenant
    school_settings = SchoolSettings.load()

    if request.method == 'POST':
        form = SchoolInformationForm(get_payload(request))
        if not form.is_valid():
            return form_error(form)
        with transaction.atomic():
            form.save(school, school_settings)
        logger.info(f"School information for {school.schema_name} updated by {request.user}")

    return {
        'school': school.to_dict(),
        'settings': school_settings.to_dict(),
    }


@login_required
@admin_required
@json_action
def admission_settings(request):
    """Read or update the admission number prefix, format and start."""
    from students.admission import preview_next_admission_number

    school_settings = SchoolSettings.load()
    if request.method == 'POST':
        form = bind_form(AdmissionSettingsForm, get_payload(request), instance=school_settings)
        if not form.is_valid():
            return form_error(form)
        school_settings = form.save()
        logger.info(f"Admission settings updated by {request.user}")

    return {
        'admission_prefix': school_settings.admission_prefix,
        'admission_format': school_settings.admission_format,
        'admission_sequence_start': school_settings.admission_sequence_start,
        'next_admission_number': preview_next_admission_number(),
    }
