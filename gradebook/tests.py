import json
from datetime import date
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace

from django.core.management import call_command
from django.test import SimpleTestCase
from django.contrib.auth import get_user_model
from django.urls import reverse
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from academics.models import Class, Subject, ClassTerm, ClassTermSubject
from core.models import AcademicYear, Term, SchoolSettings
from students.models import Student, StudentClassTerm
from teachers.models import Teacher

from . import compiler
from .compiler import SubjectAssessment
from .forms import AssessmentEntryForm, GradeLevelForm
from .grading import (
    DEFAULT_GRADE_LEVELS, GradeBand, find_coverage_gaps, find_overlaps,
    pass_rate, resolve_grade, sort_levels,
)
from .models import Assessment, GradingSystem, GradeLevel, get_school_grading

User = get_user_model()


def _student(pk, first, last, admission=None):
    return SimpleNamespace(pk=pk, first_name=first, last_name=last, admission_number=admission or f"ADM{pk:03d}")


# ============ Grade resolution ============

class ResolveGradeTests(SimpleTestCase):
    """Tests for band lookup."""

    def test_every_score_in_range_resolves(self):
        """Test the built-in table grades every 2dp score from 0 to 100."""
        for cents in range(0, 10001):
            score = Decimal(cents) / 100
            self.assertIsNotNone(resolve_grade(score, DEFAULT_GRADE_LEVELS), score)

    def test_band_boundaries_are_inclusive(self):
        """Test min and max of a band both belong to it."""
        self.assertEqual(resolve_grade(80, DEFAULT_GRADE_LEVELS).grade, 'A1')
        self.assertEqual(resolve_grade(100, DEFAULT_GRADE_LEVELS).grade, 'A1')
        self.assertEqual(resolve_grade('79.99', DEFAULT_GRADE_LEVELS).grade, 'A2')
        self.assertEqual(resolve_grade(0, DEFAULT_GRADE_LEVELS).grade, 'F')

    def test_out_of_range_is_ungraded(self):
        """Test scores outside every band are not clamped."""
        self.assertIsNone(resolve_grade(101, DEFAULT_GRADE_LEVELS))
        self.assertIsNone(resolve_grade(-1, DEFAULT_GRADE_LEVELS))
        self.assertIsNone(resolve_grade(None, DEFAULT_GRADE_LEVELS))

    def test_pass_flag_uses_pass_mark(self):
        """Test passed is set against the pass mark when one is given."""
        self.assertTrue(resolve_grade(40, DEFAULT_GRADE_LEVELS, pass_mark=40).passed)
        self.assertFalse(resolve_grade('39.99', DEFAULT_GRADE_LEVELS, pass_mark=40).passed)
        self.assertIsNone(resolve_grade(50, DEFAULT_GRADE_LEVELS).passed)

    def test_sort_levels_descending(self):
        """Test bands are ordered by descending minimum."""
        bands = sort_levels([GradeBand(0, 49, 'F'), GradeBand(50, 100, 'P')])
        self.assertEqual([b.grade for b in bands], ['P', 'F'])

    def test_coverage_gaps_and_overlaps(self):
        """Test gaps and overlaps are detected."""
        bands = [GradeBand(0, 40, 'F'), GradeBand(40, 70, 'C'), GradeBand(80, 100, 'A')]
        self.assertEqual(find_coverage_gaps(bands), [(Decimal('70.01'), Decimal('79.99'))])
        overlaps = find_overlaps(bands)
        self.assertEqual(len(overlaps), 1)
        self.assertEqual({overlaps[0][0].grade, overlaps[0][1].grade}, {'F', 'C'})
        self.assertEqual(find_coverage_gaps(DEFAULT_GRADE_LEVELS), [])

    def test_pass_rate(self):
        """Test pass rate rounds halves up and ignores missing scores."""
        self.assertEqual(pass_rate([50, 30, None], 40), 50)
        self.assertEqual(pass_rate([50, 30, 20], 40), 33)
        self.assertEqual(pass_rate([], 40), 0)


# ============ Compilation and ranking ============

class CompilerTests(SimpleTestCase):
    """Tests for aggregation and ranking."""

    def _assessment(self, student_id, subject_id, ca=(5, 5, 5), exam=50, **flags):
        return SubjectAssessment(student_id, subject_id, *ca, exam=exam, **flags)

    def test_ranking_shares_positions(self):
        """Test [90, 80, 80, 70] ranks as [1, 2, 2, 4]."""
        students = [_student(1, 'Ama', 'Owusu'), _student(2, 'Kofi', 'Boateng'),
                    _student(3, 'Yaw', 'Mensah'), _student(4, 'Esi', 'Asante')]
        exams = {1: 60, 2: 50, 3: 50, 4: 40}
        assessments = [self._assessment(sid, 10, ca=(10, 10, 10), exam=exam) for sid, exam in exams.items()]

        results = compiler.compile_class_results(students, assessments, [10], DEFAULT_GRADE_LEVELS)

        self.assertEqual([float(r.average_score) for r in results], [90, 80, 80, 70])
        self.assertEqual([r.position for r in results], [1, 2, 2, 4])
        # Ties broken by last name
        self.assertEqual([r.student_id for r in results][1:3], [2, 3])

    def test_close_averages_rank_apart(self):
        """Test averages differing below display precision still rank apart."""
        students = [_student(1, 'Ama', 'Owusu'), _student(2, 'Kofi', 'Boateng')]
        assessments = [
            self._assessment(1, 10, ca=(10, 10, 10), exam='50.01'),
            self._assessment(1, 11, ca=(10, 10, 10), exam=50),
            self._assessment(1, 12, ca=(10, 10, 10), exam=50),
        ] + [self._assessment(2, subject_id, ca=(10, 10, 10), exam=50) for subject_id in (10, 11, 12)]

        results = compiler.compile_class_results(students, assessments, [10, 11, 12], DEFAULT_GRADE_LEVELS)

        self.assertEqual([r.student_id for r in results], [1, 2])
        self.assertEqual([r.position for r in results], [1, 2])
        self.assertGreater(results[0].average_score, results[1].average_score)
        # Both display as 80.00 and grade as A1
        self.assertEqual([r.to_dict()['average_score'] for r in results], [80.0, 80.0])
        self.assertEqual([r.grade.grade for r in results], ['A1', 'A1'])

    def test_overall_grade_uses_displayed_average(self):
        """Test an average just under a band edge grades by its rounded value."""
        result = compiler.aggregate_student(1, [
            self._assessment(1, 10, ca=(10, 10, 10), exam='49.99'),
            self._assessment(1, 11, ca=(10, 10, 10), exam='49.99'),
            self._assessment(1, 12, ca=(10, 10, 10), exam='50.00'),
        ], DEFAULT_GRADE_LEVELS)

        # 239.98 / 3 = 79.9933.., displayed as 79.99
        self.assertEqual(result.display_average, Decimal('79.99'))
        self.assertEqual(result.grade.grade, 'A2')

    def test_absent_and_exempt_are_excluded(self):
        """Test absent/exempt subjects have no score or grade and don't count."""
        result = compiler.aggregate_student(1, [
            self._assessment(1, 10, ca=(10, 10, 10), exam=50),
            self._assessment(1, 11, is_absent=True),
            self._assessment(1, 12, is_exempt=True),
        ], DEFAULT_GRADE_LEVELS)

        self.assertEqual(result.average_score, Decimal('80.00'))
        self.assertEqual(result.counted_subjects, 1)
        self.assertIsNone(result.subjects[11]['score'])
        self.assertIsNone(result.subjects[11]['grade'])
        self.assertEqual(result.subjects[11]['remark'], 'Absent')
        self.assertEqual(result.subjects[12]['remark'], 'Exempt')

    def test_missing_subject_marked_not_taken(self):
        """Test offered subjects without an assessment appear as Not Taken."""
        result = compiler.aggregate_student(1, [self._assessment(1, 10)], DEFAULT_GRADE_LEVELS, subject_ids=[10, 11])
        self.assertEqual(result.subjects[11]['remark'], 'Not Taken')
        self.assertEqual(result.counted_subjects, 1)

    def test_student_without_subjects_stays_ranked(self):
        """Test a student with nothing counted averages 0 and is still listed."""
        students = [_student(1, 'Ama', 'Owusu'), _student(2, 'Kofi', 'Boateng')]
        results = compiler.compile_class_results(
            students, [self._assessment(1, 10)], [10], DEFAULT_GRADE_LEVELS
        )
        self.assertEqual(len(results), 2)
        self.assertEqual(results[1].average_score, Decimal('0'))
        self.assertEqual(results[1].position, 2)

    def test_compilation_is_repeatable(self):
        """Test the same input compiles to the same output."""
        students = [_student(1, 'Ama', 'Owusu'), _student(2, 'Kofi', 'Boateng')]
        assessments = [self._assessment(1, 10), self._assessment(2, 10, exam=60)]
        first = [r.to_dict() for r in compiler.compile_class_results(students, assessments, [10], DEFAULT_GRADE_LEVELS)]
        second = [r.to_dict() for r in compiler.compile_class_results(students, assessments, [10], DEFAULT_GRADE_LEVELS)]
        self.assertEqual(first, second)

    def test_subject_positions_and_statistics(self):
        """Test per-subject ranking and highest/lowest/average."""
        students = [_student(1, 'Ama', 'Owusu'), _student(2, 'Kofi', 'Boateng')]
        assessments = [self._assessment(1, 10, exam=40), self._assessment(2, 10, exam=60)]
        results = compiler.compile_class_results(students, assessments, [10], DEFAULT_GRADE_LEVELS)

        positions = compiler.subject_positions(results, [10])
        self.assertEqual(positions[10], {2: 1, 1: 2})
        stats = compiler.subject_statistics(results, [10])
        self.assertEqual(stats[10], {'total_students': 2, 'highest': 75.0, 'lowest': 55.0, 'average': 65.0})

    def test_completion_and_incomplete_pairs(self):
        """Test completion statuses and what blocks publishing."""
        partial = SubjectAssessment(1, 10, ca1=5)
        absent = SubjectAssessment(2, 10, is_absent=True)
        self.assertEqual(compiler.completion_status(None), compiler.STATUS_NOT_STARTED)
        self.assertEqual(compiler.completion_status(partial), compiler.STATUS_PARTIAL)
        self.assertEqual(compiler.completion_status(absent), compiler.STATUS_ABSENT)

        summary = compiler.completion_summary([compiler.STATUS_PARTIAL, compiler.STATUS_ABSENT])
        self.assertEqual(summary['completion_percentage'], 50)
        self.assertEqual(compiler.find_incomplete([1, 2], [10], [partial, absent]), [(1, 10)])


class AssessmentEntryFormTests(SimpleTestCase):
    """Tests for component bounds."""

    def test_valid_entry(self):
        """Test components within CA 10 / exam 70 pass."""
        form = AssessmentEntryForm({'student_id': 1, 'ca1': '10', 'ca2': '0', 'exam': '70'})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertIsNone(form.cleaned_data['ca3'])

    def test_ca_out_of_range(self):
        """Test an over-limit CA is rejected with the component name."""
        form = AssessmentEntryForm({'student_id': 1, 'ca1': '12'})
        self.assertFalse(form.is_valid())
        self.assertIn('CA1 score must be between 0 and 10, got 12', form.errors['__all__'])

    def test_exam_out_of_range(self):
        """Test a negative or over-limit exam is rejected."""
        form = AssessmentEntryForm({'student_id': 1, 'exam': '70.5'})
        self.assertFalse(form.is_valid())
        self.assertIn('Exam score must be between 0 and 70, got 70.5', form.errors['__all__'])


# ============ Tenant actions ============

class GradebookTestCase(TenantTestCase):
    """Base test case with a class term, two subjects and three students."""

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

        self.year = AcademicYear.objects.create(
            name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31), is_current=True
        )
        self.term = Term.objects.create(
            academic_year=self.year, name='First Term', term_number=1,
            start_date=date(2024, 9, 1), end_date=date(2024, 12, 15), is_current=True
        )
        self.class_obj = Class.objects.create(level_type='jhs', level_number=1, section='A')
        self.class_term = ClassTerm.objects.create(class_assigned=self.class_obj, term=self.term)
        self.maths = Subject.objects.create(name='Mathematics', short_name='MATH')
        self.english = Subject.objects.create(name='English Language', short_name='ENG')
        for subject in (self.maths, self.english):
            ClassTermSubject.objects.create(class_term=self.class_term, subject=subject)

        self.students = []
        for i, (first, last) in enumerate([('Ama', 'Owusu'), ('Kofi', 'Boateng'), ('Yaw', 'Mensah')], 1):
            student = Student.objects.create(
                first_name=first, last_name=last, gender='M', admission_number=f'ADM/2024/{i:04d}'
            )
            StudentClassTerm.objects.create(student=student, class_term=self.class_term)
            self.students.append(student)

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')

    def save_scores(self, subject, rows):
        return self.post_json(reverse('gradebook:assessment_save'), {
            'class_term_id': self.class_term.pk,
            'subject_id': subject.pk,
            'assessments': rows,
        })

    def full_row(self, student, exam=50):
        return {'student_id': student.pk, 'ca1': 10, 'ca2': 10, 'ca3': 10, 'exam': exam}


class GradingSystemActionTests(GradebookTestCase):
    """Tests for grading system and grade level actions."""

    def test_first_system_becomes_default(self):
        """Test the first grading system created is the school default."""
        response = self.post_json(reverse('gradebook:grading_system_create'), {
            'name': 'WAEC', 'pass_mark': '45', 'use_default_levels': True,
        })
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertTrue(data['is_default'])
        self.assertEqual(len(data['levels']), len(DEFAULT_GRADE_LEVELS))
        self.assertEqual(data['coverage_gaps'], [])

        second = self.post_json(reverse('gradebook:grading_system_create'), {'name': 'Custom'})
        self.assertFalse(second.json()['data']['is_default'])

    def test_set_default_keeps_one_default(self):
        """Test switching the default leaves exactly one."""
        first = GradingSystem.objects.create(name='First')
        second = GradingSystem.objects.create(name='Second')
        settings = SchoolSettings.load()
        settings.default_grading_system = first
        settings.save()

        response = self.client.post(reverse('gradebook:grading_system_set_default', args=[second.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(SchoolSettings.load().default_grading_system_id, second.pk)
        listed = self.client.get(reverse('gradebook:grading_systems')).json()['data']['grading_systems']
        systems = {s['name']: s['is_default'] for s in listed}
        self.assertEqual(systems, {'First': False, 'Second': True})

    def test_to_dict_does_not_load_settings(self):
        """Test serialising a system only queries its levels."""
        system = GradingSystem.objects.create(name='Custom')
        with self.assertNumQueries(1):
            data = system.to_dict(default_id=system.pk)
        self.assertTrue(data['is_default'])
        self.assertFalse(system.to_dict()['is_default'])

    def test_default_cannot_be_deleted(self):
        """Test deleting the default grading system is refused."""
        system = GradingSystem.objects.create(name='Only')
        settings = SchoolSettings.load()
        settings.default_grading_system = system
        settings.save()

        response = self.client.post(reverse('gradebook:grading_system_delete', args=[system.pk]))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(GradingSystem.objects.filter(pk=system.pk).exists())

    def test_duplicate_grade_rejected(self):
        """Test a grade label can only appear once per system."""
        system = GradingSystem.objects.create(name='Custom')
        GradeLevel.objects.create(grading_system=system, grade='A', min_score=80, max_score=100)

        response = self.post_json(reverse('gradebook:grade_level_create', args=[system.pk]), {
            'grade': 'A', 'min_score': 70, 'max_score': 79.99,
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('Grade "A" already exists in this grading system', response.json()['error'])

    def test_overlapping_level_rejected(self):
        """Test a band overlapping another band is refused."""
        system = GradingSystem.objects.create(name='Custom')
        GradeLevel.objects.create(grading_system=system, grade='A', min_score=80, max_score=100)

        form = GradeLevelForm({'grade': 'B', 'min_score': 75, 'max_score': 85}, grading_system=system)

        self.assertFalse(form.is_valid())

    def test_school_grading_falls_back_to_builtin(self):
        """Test no default system means the built-in table and pass mark 40."""
        system, bands, pass_mark = get_school_grading()
        self.assertIsNone(system)
        self.assertEqual(len(bands), len(DEFAULT_GRADE_LEVELS))
        self.assertEqual(pass_mark, Decimal('40.00'))


class AssessmentActionTests(GradebookTestCase):
    """Tests for score entry."""

    def test_save_creates_then_updates(self):
        """Test a bulk save upserts one row per student and subject."""
        response = self.save_scores(self.maths, [self.full_row(s) for s in self.students])
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['created'], 3)

        response = self.save_scores(self.maths, [self.full_row(self.students[0], exam=60)])
        self.assertEqual(response.json()['data']['updated'], 1)
        self.assertEqual(Assessment.objects.filter(subject=self.maths).count(), 3)
        assessment = Assessment.objects.get(subject=self.maths, student_class_term__student=self.students[0])
        self.assertEqual(assessment.total, Decimal('90'))

    def test_out_of_range_rejects_whole_batch(self):
        """Test one bad score saves nothing."""
        rows = [self.full_row(self.students[0]), {'student_id': self.students[1].pk, 'ca2': 11}]
        response = self.save_scores(self.maths, rows)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'CA2 score must be between 0 and 10, got 11')
        self.assertFalse(Assessment.objects.exists())

    def test_locked_term_rejected(self):
        """Test saving into a locked term fails."""
        self.term.lock_grades(self.admin_user)
        response = self.save_scores(self.maths, [self.full_row(self.students[0])])
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Assessment.objects.exists())

    def test_unenrolled_student_rejected(self):
        """Test students outside the class term are refused."""
        outsider = Student.objects.create(first_name='Esi', last_name='Asante', gender='F', admission_number='X1')
        response = self.save_scores(self.maths, [self.full_row(outsider)])
        self.assertEqual(response.status_code, 400)
        self.assertIn('Students not found in this class', response.json()['error'])

    def test_subject_not_offered(self):
        """Test a subject not allocated to the class term is a 404."""
        science = Subject.objects.create(name='Integrated Science')
        response = self.save_scores(science, [self.full_row(self.students[0])])
        self.assertEqual(response.status_code, 404)

    def test_teacher_limited_to_assigned_subjects(self):
        """Test a teacher can save only the subjects they teach."""
        user = User.objects.create_user(email='teacher@school.com', password='testpass123', is_teacher=True)
        teacher = Teacher.objects.create(first_name='Kwame', last_name='Nkrumah', staff_id='T001', user=user)
        ClassTermSubject.objects.filter(class_term=self.class_term, subject=self.maths).update(teacher=teacher)
        self.client.logout()
        self.client.login(email='teacher@school.com', password='testpass123')

        allowed = self.save_scores(self.maths, [self.full_row(self.students[0])])
        denied = self.save_scores(self.english, [self.full_row(self.students[0])])

        self.assertEqual(allowed.status_code, 200)
        self.assertEqual(denied.status_code, 403)

    def test_assessment_list_reports_status(self):
        """Test every enrolled student is listed with an entry status."""
        self.save_scores(self.maths, [
            self.full_row(self.students[0]),
            {'student_id': self.students[1].pk, 'ca1': 5},
        ])
        response = self.client.get(reverse('gradebook:assessment_list', args=[self.class_term.pk, self.maths.pk]))

        data = response.json()['data']
        statuses = {row['student_id']: row['status'] for row in data['students']}
        self.assertEqual(statuses[self.students[0].pk], 'complete')
        self.assertEqual(statuses[self.students[1].pk], 'partial')
        self.assertEqual(statuses[self.students[2].pk], 'not_started')
        self.assertEqual(data['statistics']['total'], 3)


class ResultsActionTests(GradebookTestCase):
    """Tests for results, publishing and export."""

    def fill_class(self):
        for subject in (self.maths, self.english):
            self.save_scores(subject, [
                self.full_row(self.students[0], exam=60),
                self.full_row(self.students[1], exam=50),
                self.full_row(self.students[2], exam=50),
            ])

    def test_class_results_ranked(self):
        """Test results come back in rank order with shared positions."""
        self.fill_class()
        response = self.client.get(reverse('gradebook:class_term_results', args=[self.class_term.pk]))

        results = response.json()['data']['results']
        self.assertEqual([r['position'] for r in results], [1, 2, 2])
        self.assertEqual(results[0]['student_id'], self.students[0].pk)
        self.assertEqual(results[0]['grade'], 'A1')

    def test_publish_refused_until_complete(self):
        """Test publishing reports missing assessments and then succeeds."""
        self.save_scores(self.maths, [self.full_row(s) for s in self.students])
        url = reverse('gradebook:publish_results', args=[self.class_term.pk])

        refused = self.client.post(url).json()['data']
        self.assertFalse(refused['published'])
        self.assertEqual(len(refused['missing']), 3)

        self.save_scores(self.english, [
            self.full_row(self.students[0]),
            self.full_row(self.students[1]),
            {'student_id': self.students[2].pk, 'is_exempt': True},
        ])
        published = self.client.post(url).json()['data']
        self.assertTrue(published['published'])
        self.assertFalse(Assessment.objects.filter(is_published=False).exists())

    def test_student_report(self):
        """Test the report has every subject with positions."""
        self.fill_class()
        response = self.client.get(
            reverse('gradebook:student_report', args=[self.students[1].pk]), {'term': self.term.pk}
        )
        data = response.json()['data']
        self.assertEqual(data['position'], 2)
        self.assertEqual(data['class_size'], 3)
        self.assertEqual({s['subject_name'] for s in data['subjects']}, {'Mathematics', 'English Language'})

    def test_student_report_hides_enrolment_from_other_teachers(self):
        """Test a teacher outside the class is refused whether or not the student is enrolled."""
        User.objects.create_user(email='teacher@school.com', password='testpass123', is_teacher=True)
        outsider = Student.objects.create(first_name='Esi', last_name='Asante', gender='F', admission_number='ADM/2024/0099')
        self.client.logout()
        self.client.login(email='teacher@school.com', password='testpass123')

        enrolled = self.client.get(reverse('gradebook:student_report', args=[self.students[0].pk]), {'term': self.term.pk})
        unenrolled = self.client.get(reverse('gradebook:student_report', args=[outsider.pk]), {'term': self.term.pk})

        self.assertEqual(enrolled.status_code, 403)
        self.assertEqual(unenrolled.status_code, 403)
        self.assertEqual(enrolled.json()['error'], unenrolled.json()['error'])

    def test_student_report_unenrolled_for_admin(self):
        outsider = Student.objects.create(first_name='Esi', last_name='Asante', gender='F', admission_number='ADM/2024/0099')
        response = self.client.get(reverse('gradebook:student_report', args=[outsider.pk]), {'term': self.term.pk})
        self.assertEqual(response.status_code, 404)

    def test_class_statistics(self):
        """Test class size, pass rate and distribution."""
        self.fill_class()
        data = self.client.get(reverse('gradebook:class_statistics', args=[self.class_term.pk])).json()['data']
        self.assertEqual(data['class_size'], 3)
        self.assertEqual(data['pass_rate'], 100)
        self.assertEqual(data['grade_distribution']['A1'], 3)

    def test_export_broadsheet(self):
        """Test the broadsheet downloads as an xlsx attachment."""
        self.fill_class()
        response = self.client.get(reverse('gradebook:results_export', args=[self.class_term.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response['Content-Type'],
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        self.assertIn('attachment;', response['Content-Disposition'])


class SeedGradingDataTests(GradebookTestCase):
    """Tests for the seed_grading_data command."""

    def test_seeds_default_system(self):
        call_command('seed_grading_data', stdout=StringIO())

        system = GradingSystem.objects.get(name='WAEC Standard')
        self.assertEqual(system.levels.count(), len(DEFAULT_GRADE_LEVELS))
        self.assertEqual(SchoolSettings.load().default_grading_system, system)

    def test_rerun_keeps_levels_and_default(self):
        """Test running twice neither duplicates levels nor moves the default."""
        other = GradingSystem.objects.create(name='Custom')
        settings = SchoolSettings.load()
        settings.default_grading_system = other
        settings.save()

        call_command('seed_grading_data', stdout=StringIO())
        call_command('seed_grading_data', stdout=StringIO())

        self.assertEqual(GradingSystem.objects.get(name='WAEC Standard').levels.count(), len(DEFAULT_GRADE_LEVELS))
        self.assertEqual(SchoolSettings.load().default_grading_system, other)
