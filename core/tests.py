import json
from datetime import date
from types import SimpleNamespace

from django.test import SimpleTestCase
from django.contrib.auth import get_user_model
from django.urls import reverse
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from core import calendar
from core.models import AcademicYear, Term, SchoolSettings
from core.utils import truthy, validation_message

User = get_user_model()


def _period(pk, name, start, end):
    return SimpleNamespace(pk=pk, name=name, start_date=start, end_date=end, is_current=False)


class CalendarArithmeticTests(SimpleTestCase):
    """Tests for week counting and progress."""

    def test_weeks_round_partial_weeks_up(self):
        """A calendar year spans 53 weeks."""
        self.assertEqual(calendar.weeks(date(2024, 1, 1), date(2024, 12, 31)), 53)
        self.assertEqual(calendar.weeks(date(2024, 1, 1), date(2024, 1, 8)), 1)
        self.assertEqual(calendar.weeks(date(2024, 1, 1), date(2024, 1, 9)), 2)

    def test_completed_weeks_mid_year(self):
        """Half way through 2024 is 26 of 53 weeks, 49%."""
        start, end, today = date(2024, 1, 1), date(2024, 12, 31), date(2024, 7, 1)
        done = calendar.completed_weeks(start, end, today)
        self.assertEqual(done, 26)
        self.assertEqual(calendar.progress_percentage(done, calendar.weeks(start, end)), 49)

    def test_completed_weeks_before_and_after(self):
        """Progress is 0 before the start and capped at the end."""
        start, end = date(2024, 1, 1), date(2024, 12, 31)
        self.assertEqual(calendar.completed_weeks(start, end, date(2023, 12, 1)), 0)
        self.assertEqual(calendar.completed_weeks(start, end, date(2025, 6, 1)), 53)
        self.assertEqual(calendar.progress_percentage(0, 0), 0)

    def test_term_status(self):
        start, end = date(2024, 9, 1), date(2024, 12, 15)
        self.assertEqual(calendar.term_status(start, end, date(2024, 8, 31)), calendar.STATUS_UPCOMING)
        self.assertEqual(calendar.term_status(start, end, date(2024, 12, 15)), calendar.STATUS_CURRENT)
        self.assertEqual(calendar.term_status(start, end, date(2024, 12, 16)), calendar.STATUS_COMPLETED)


class CalendarSessionTests(SimpleTestCase):
    """Tests for breaks and session summaries."""

    def setUp(self):
        self.session = _period(1, '2024/2025', date(2024, 9, 1), date(2025, 7, 31))
        self.terms = [
            _period(2, 'Second Term', date(2025, 1, 6), date(2025, 4, 4)),
            _period(1, 'First Term', date(2024, 9, 1), date(2024, 12, 15)),
            _period(3, 'Third Term', date(2025, 4, 5), date(2025, 7, 31)),
        ]

    def test_breaks_between_terms(self):
        """Only gaps longer than a day are breaks."""
        breaks = calendar.break_windows(self.terms)
        self.assertEqual(len(breaks), 1)
        self.assertEqual(breaks[0]['start_date'], date(2024, 12, 16))
        self.assertEqual(breaks[0]['end_date'], date(2025, 1, 5))
        self.assertEqual(breaks[0]['weeks'], 3)
        self.assertEqual(breaks[0]['name'], 'Break between First Term and Second Term')

    def test_session_summary(self):
        """Academic weeks are the session weeks minus break weeks."""
        summary = calendar.session_summary(self.session, self.terms, date(2024, 10, 1))
        self.assertEqual(summary['total_weeks'], 48)
        self.assertEqual(summary['total_break_weeks'], 3)
        self.assertEqual(summary['academic_weeks'], 45)
        self.assertEqual([t['name'] for t in summary['terms']], ['First Term', 'Second Term', 'Third Term'])
        self.assertEqual(summary['terms'][0]['status'], calendar.STATUS_CURRENT)

    def test_academic_weeks_never_negative(self):
        self.assertEqual(calendar.academic_weeks(2, [{'weeks': 5}]), 0)

    def test_upcoming_events_sorted_and_limited(self):
        """Only future dates are listed, earliest first."""
        events = calendar.upcoming_events([(self.session, self.terms)], date(2025, 1, 1), limit=3)
        self.assertEqual([e['id'] for e in events], ['term-start-2', 'term-end-2', 'term-start-3'])


class CoreUtilsTests(SimpleTestCase):

    def test_truthy(self):
        for value in (True, 'true', 'on', '1', 1):
            self.assertTrue(truthy(value))
        for value in (False, None, '', 'false', 0):
            self.assertFalse(truthy(value))

    def test_validation_message_joins_fields(self):
        """Field errors are prefixed with the field name."""
        message = validation_message({'__all__': ['Broken.'], 'name': ['Required.']})
        self.assertEqual(message, 'Broken. name: Required.')


class AcademicYearModelTests(TenantTestCase):
    """Tests for the AcademicYear model."""

    def _create_year(self, **kwargs):
        defaults = {
            'name': '2024/2025 Academic Year',
            'start_date': date(2024, 9, 1),
            'end_date': date(2025, 7, 31),
            'is_current': False,
        }
        defaults.update(kwargs)
        return AcademicYear.objects.create(**defaults)

    def test_only_one_current(self):
        ay1 = self._create_year(is_current=True)
        ay2 = self._create_year(
            name='2025/2026',
            start_date=date(2025, 9, 1),
            end_date=date(2026, 7, 31),
            is_current=True,
        )
        ay1.refresh_from_db()
        self.assertFalse(ay1.is_current)
        self.assertTrue(ay2.is_current)

    def test_get_current_none(self):
        self.assertIsNone(AcademicYear.get_current())


class TermModelTests(TenantTestCase):
    """Tests for the Term model."""

    def setUp(self):
        self.ay = AcademicYear.objects.create(
            name='2024/2025',
            start_date=date(2024, 9, 1),
            end_date=date(2025, 7, 31),
            is_current=True,
        )

    def _create_term(self, **kwargs):
        defaults = {
            'academic_year': self.ay,
            'name': 'First Term',
            'term_number': 1,
            'start_date': date(2024, 9, 1),
            'end_date': date(2024, 12, 20),
            'is_current': False,
        }
        defaults.update(kwargs)
        return Term.objects.create(**defaults)

    def test_create_term(self):
        term = self._create_term()
        self.assertEqual(str(term), 'First Term - 2024/2025')

    def test_only_one_current_term(self):
        t1 = self._create_term(is_current=True)
        t2 = self._create_term(
            name='Second Term',
            term_number=2,
            start_date=date(2025, 1, 6),
            end_date=date(2025, 4, 15),
            is_current=True,
        )
        t1.refresh_from_db()
        self.assertFalse(t1.is_current)
        self.assertTrue(t2.is_current)

    def test_lock_and_unlock_grades(self):
        term = self._create_term()
        user = User.objects.create_user(email='admin@test.com', password='pass')
        term.lock_grades(user)
        term.refresh_from_db()
        self.assertTrue(term.grades_locked)
        self.assertEqual(term.grades_locked_by, user)

        term.unlock_grades()
        term.refresh_from_db()
        self.assertFalse(term.grades_locked)
        self.assertIsNone(term.grades_locked_at)


class SchoolSettingsModelTests(TenantTestCase):
    """Tests for the SchoolSettings singleton model."""

    def test_load_returns_singleton(self):
        SchoolSettings.objects.all().delete()
        s1 = SchoolSettings.load()
        s2 = SchoolSettings.load()
        self.assertEqual(s1.pk, 1)
        self.assertEqual(s1.pk, s2.pk)
        self.assertEqual(SchoolSettings.objects.count(), 1)

    def test_period_label(self):
        settings = SchoolSettings.load()
        self.assertEqual(settings.period_label, 'Term')
        settings.academic_period_type = 'semester'
        self.assertEqual(settings.period_label, 'Semester')


class CoreActionTestCase(TenantTestCase):
    """Base test case with a logged-in school admin."""

    @classmethod
    def setup_tenant(cls, tenant):
        """Called when tenant is created."""
        tenant.name = 'Test School'
        tenant.short_name = 'TEST'

    def setUp(self):
        super().setUp()
        self.client = TenantClient(self.tenant)
        self.admin_user = User.objects.create_user(
            email='admin@school.com',
            password='testpass123',
            is_school_admin=True
        )
        self.client.login(email='admin@school.com', password='testpass123')

    def post_json(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type='application/json')


class AcademicYearActionTests(CoreActionTestCase):
    """Tests for academic year actions."""

    def test_create_academic_year(self):
        response = self.post_json(reverse('core:academic_year_create'), {
            'name': '2024/2025', 'start_date': '2024-09-01', 'end_date': '2025-07-31',
        })
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['name'], '2024/2025')

    def test_create_rejects_reversed_dates(self):
        response = self.post_json(reverse('core:academic_year_create'), {
            'name': '2024/2025', 'start_date': '2025-07-31', 'end_date': '2024-09-01',
        })
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])
        self.assertIn('End date must be after start date.', response.json()['error'])

    def test_update_rejects_dates_excluding_terms(self):
        """Shrinking a year must keep its terms inside."""
        year = AcademicYear.objects.create(name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31))
        Term.objects.create(academic_year=year, name='Third Term', term_number=3,
                            start_date=date(2025, 4, 20), end_date=date(2025, 7, 20))

        response = self.post_json(reverse('core:session_update_dates', args=[year.pk]), {
            'start_date': '2024-09-01', 'end_date': '2025-06-30',
        })

        self.assertEqual(response.status_code, 400)
        year.refresh_from_db()
        self.assertEqual(year.end_date, date(2025, 7, 31))

    def test_non_admin_forbidden(self):
        """Teachers cannot manage academic years."""
        User.objects.create_user(email='teacher@school.com', password='testpass123', is_teacher=True)
        self.client.logout()
        self.client.login(email='teacher@school.com', password='testpass123')

        response = self.post_json(reverse('core:academic_year_create'), {
            'name': '2024/2025', 'start_date': '2024-09-01', 'end_date': '2025-07-31',
        })

        self.assertEqual(response.status_code, 403)
        self.assertFalse(AcademicYear.objects.exists())


class TermActionTests(CoreActionTestCase):
    """Tests for term actions."""

    def setUp(self):
        super().setUp()
        self.year = AcademicYear.objects.create(
            name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31)
        )

    def test_create_term_inside_year(self):
        response = self.post_json(reverse('core:term_create'), {
            'academic_year': self.year.pk, 'name': 'First Term', 'term_number': 1,
            'start_date': '2024-09-01', 'end_date': '2024-12-15',
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['term_number'], 1)

    def test_create_term_outside_year_rejected(self):
        response = self.post_json(reverse('core:term_create'), {
            'academic_year': self.year.pk, 'name': 'First Term', 'term_number': 1,
            'start_date': '2024-08-01', 'end_date': '2024-12-15',
        })
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Term.objects.exists())

    def test_set_current_term_sets_current_year(self):
        term = Term.objects.create(academic_year=self.year, name='First Term', term_number=1,
                                   start_date=date(2024, 9, 1), end_date=date(2024, 12, 15))

        response = self.post_json(reverse('core:term_set_current', args=[term.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Term.get_current(), term)
        self.assertEqual(AcademicYear.get_current(), self.year)

    def test_lock_twice_rejected(self):
        term = Term.objects.create(academic_year=self.year, name='First Term', term_number=1,
                                   start_date=date(2024, 9, 1), end_date=date(2024, 12, 15))
        self.assertEqual(self.post_json(reverse('core:term_lock_grades', args=[term.pk])).status_code, 200)
        self.assertEqual(self.post_json(reverse('core:term_lock_grades', args=[term.pk])).status_code, 400)

    def test_missing_term_is_not_found(self):
        response = self.post_json(reverse('core:term_delete', args=[999]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Term not found')

    def test_calendar_data(self):
        Term.objects.create(academic_year=self.year, name='First Term', term_number=1,
                            start_date=date(2024, 9, 1), end_date=date(2024, 12, 15))
        response = self.client.get(reverse('core:calendar_data'))
        data = response.json()['data']
        self.assertEqual(len(data['sessions']), 1)
        self.assertEqual(data['sessions'][0]['terms'][0]['weeks'], 15)


class DashboardActionTests(CoreActionTestCase):
    """Tests for the role dashboard router."""

    def test_admin_dashboard(self):
        response = self.client.get(reverse('core:index'))
        data = response.json()['data']
        self.assertEqual(data['role'], 'admin')
        self.assertEqual(data['student_count'], 0)
        self.assertIsNone(data['current_term'])

    def test_anonymous_redirected_to_login(self):
        self.client.logout()
        response = self.client.get(reverse('core:index'))
        self.assertEqual(response.status_code, 302)


class AdmissionSettingsActionTests(CoreActionTestCase):
    """Tests for admission number settings."""

    def test_update_format(self):
        response = self.post_json(reverse('core:admission_settings'), {
            'admission_prefix': 'STU', 'admission_format': '{YEAR}-{NUMBER}', 'admission_sequence_start': 100,
        })
        data = response.json()['data']
        self.assertEqual(data['admission_format'], '{YEAR}-{NUMBER}')
        self.assertTrue(data['next_admission_number'].endswith('-0100'))

    def test_format_without_number_rejected(self):
        response = self.post_json(reverse('core:admission_settings'), {
            'admission_prefix': 'STU', 'admission_format': '{PREFIX}/{YEAR}', 'admission_sequence_start': 1,
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(SchoolSettings.load().admission_format, SchoolSettings.DEFAULT_ADMISSION_FORMAT)
