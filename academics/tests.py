import json
from datetime import date
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.urls import reverse
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from core.models import AcademicYear, Term
from students.models import Student, StudentClassTerm
from teachers.models import Teacher
from gradebook.models import Assessment
from .forms import ClassForm
from .models import Class, Subject, ClassTerm, ClassTermSubject

User = get_user_model()


class AcademicsTestCase(TenantTestCase):
    """Base test case for academics app."""

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

    def post_json(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type='application/json')


class ClassModelTests(AcademicsTestCase):
    """Tests for Class model."""

    def test_name_generation(self):
        """Test names follow the level scheme."""
        cases = [
            ('kg', 1, 'A', 'KG1-A'),
            ('primary', 3, 'B', 'B3-B'),
            ('jhs', 2, 'A', 'B8-A'),
            ('shs', 1, 'C', 'SHS1-C'),
        ]
        for level_type, level_number, section, expected in cases:
            cls = Class.objects.create(level_type=level_type, level_number=level_number, section=section)
            self.assertEqual(cls.name, expected)

    def test_unique_level_and_section(self):
        Class.objects.create(level_type='jhs', level_number=1, section='A')
        with self.assertRaises(IntegrityError), transaction.atomic():
            Class.objects.create(level_type='jhs', level_number=1, section='A')

    def test_form_limits_levels(self):
        """Test JHS stops at level 3."""
        form = ClassForm({'level_type': 'jhs', 'level_number': 4, 'section': 'a', 'capacity': 30})
        self.assertFalse(form.is_valid())
        self.assertIn('level_number', form.errors)


class ClassActionTests(AcademicsTestCase):
    """Tests for class actions."""

    def test_create_class(self):
        response = self.post_json(reverse('academics:class_create'), {
            'level_type': 'primary', 'level_number': 4, 'section': 'b', 'capacity': 40,
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['name'], 'B4-B')

    def test_list_counts_current_term_enrolment(self):
        cls = Class.objects.create(level_type='primary', level_number=1, section='A')
        class_term = ClassTerm.objects.create(class_assigned=cls, term=self.term)
        student = Student.objects.create(first_name='Ama', last_name='Owusu', gender='F', admission_number='A1')
        StudentClassTerm.objects.create(student=student, class_term=class_term)

        data = self.client.get(reverse('academics:classes')).json()['data']

        self.assertEqual(data['classes'][0]['student_count'], 1)

    def test_delete_with_enrolments_refused(self):
        cls = Class.objects.create(level_type='primary', level_number=1, section='A')
        class_term = ClassTerm.objects.create(class_assigned=cls, term=self.term)
        student = Student.objects.create(first_name='Ama', last_name='Owusu', gender='F', admission_number='A1')
        StudentClassTerm.objects.create(student=student, class_term=class_term)

        response = self.post_json(reverse('academics:class_delete', args=[cls.pk]))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Class.objects.filter(pk=cls.pk).exists())

    def test_set_class_teacher_requires_active_teacher(self):
        cls = Class.objects.create(level_type='primary', level_number=1, section='A')
        teacher = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T1', status='on_leave')

        response = self.post_json(reverse('academics:class_set_teacher', args=[cls.pk]), {'teacher_id': str(teacher.pk)})

        self.assertEqual(response.status_code, 400)
        cls.refresh_from_db()
        self.assertIsNone(cls.class_teacher)

    def test_teacher_cannot_create_class(self):
        User.objects.create_teacher(email='teacher@school.com', password='testpass123')
        self.client.logout()
        self.client.login(email='teacher@school.com', password='testpass123')

        response = self.post_json(reverse('academics:class_create'), {
            'level_type': 'primary', 'level_number': 4, 'section': 'B', 'capacity': 40,
        })

        self.assertEqual(response.status_code, 403)


class SubjectActionTests(AcademicsTestCase):
    """Tests for subject actions."""

    def test_create_subject(self):
        response = self.post_json(reverse('academics:subject_create'), {
            'name': ' Mathematics ', 'short_name': 'math', 'is_core': True, 'is_active': True,
        })
        data = response.json()['data']
        self.assertEqual(data['name'], 'Mathematics')
        self.assertEqual(data['short_name'], 'MATH')

    def test_duplicate_name_rejected(self):
        Subject.objects.create(name='Mathematics')
        response = self.post_json(reverse('academics:subject_create'), {'name': 'Mathematics'})
        self.assertEqual(response.status_code, 400)

    def test_delete_with_scores_refused(self):
        """Test a subject with recorded assessments cannot be deleted."""
        subject = Subject.objects.create(name='Mathematics')
        cls = Class.objects.create(level_type='primary', level_number=1, section='A')
        class_term = ClassTerm.objects.create(class_assigned=cls, term=self.term)
        ClassTermSubject.objects.create(class_term=class_term, subject=subject)
        student = Student.objects.create(first_name='Ama', last_name='Owusu', gender='F', admission_number='A1')
        enrolment = StudentClassTerm.objects.create(student=student, class_term=class_term)
        Assessment.objects.create(student_class_term=enrolment, subject=subject, exam=50)

        response = self.post_json(reverse('academics:subject_delete', args=[subject.pk]))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Subject.objects.filter(pk=subject.pk).exists())

    def test_delete_removes_allocations(self):
        subject = Subject.objects.create(name='Mathematics')
        cls = Class.objects.create(level_type='primary', level_number=1, section='A')
        class_term = ClassTerm.objects.create(class_assigned=cls, term=self.term)
        ClassTermSubject.objects.create(class_term=class_term, subject=subject)

        response = self.post_json(reverse('academics:subject_delete', args=[subject.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(ClassTermSubject.objects.exists())


class ClassTermActionTests(AcademicsTestCase):
    """Tests for offering classes in a term and allocating subjects."""

    def setUp(self):
        super().setUp()
        self.cls = Class.objects.create(level_type='jhs', level_number=1, section='A')
        self.maths = Subject.objects.create(name='Mathematics')
        self.english = Subject.objects.create(name='English')
        self.science = Subject.objects.create(name='Science')

    def test_assign_is_idempotent(self):
        """Test assigning the same class and term twice gives one class term."""
        url = reverse('academics:class_term_assign')
        first = self.post_json(url, {'class_id': self.cls.pk, 'term_id': self.term.pk}).json()['data']
        second = self.post_json(url, {'class_id': self.cls.pk, 'term_id': self.term.pk}).json()['data']

        self.assertTrue(first['created'])
        self.assertFalse(second['created'])
        self.assertEqual(first['id'], second['id'])
        self.assertEqual(ClassTerm.objects.count(), 1)

    def test_assign_subjects_replaces_set(self):
        """Test the allocation becomes exactly the requested subjects."""
        class_term = ClassTerm.objects.create(class_assigned=self.cls, term=self.term)
        teacher = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T1')
        ClassTermSubject.objects.create(class_term=class_term, subject=self.maths, teacher=teacher)
        ClassTermSubject.objects.create(class_term=class_term, subject=self.english)

        response = self.post_json(
            reverse('academics:class_term_assign_subjects', args=[class_term.pk]),
            {'subject_ids': [self.maths.pk, self.science.pk, self.science.pk]},
        )

        data = response.json()['data']
        self.assertEqual(data['added'], [self.science.pk])
        self.assertEqual(data['removed'], [self.english.pk])
        self.assertEqual(
            set(class_term.subjects.values_list('subject_id', flat=True)), {self.maths.pk, self.science.pk}
        )
        self.assertEqual(class_term.subjects.get(subject=self.maths).teacher, teacher)

    def test_assign_unknown_subject_changes_nothing(self):
        class_term = ClassTerm.objects.create(class_assigned=self.cls, term=self.term)

        response = self.post_json(
            reverse('academics:class_term_assign_subjects', args=[class_term.pk]),
            {'subject_ids': [self.maths.pk, 9999]},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Subject not found: 9999')
        self.assertFalse(class_term.subjects.exists())

    def test_remove_with_enrolments_refused(self):
        class_term = ClassTerm.objects.create(class_assigned=self.cls, term=self.term)
        student = Student.objects.create(first_name='Ama', last_name='Owusu', gender='F', admission_number='A1')
        StudentClassTerm.objects.create(student=student, class_term=class_term)

        response = self.post_json(reverse('academics:class_term_remove', args=[class_term.pk]))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(ClassTerm.objects.filter(pk=class_term.pk).exists())

    def test_assign_and_unassign_subject_teacher(self):
        class_term = ClassTerm.objects.create(class_assigned=self.cls, term=self.term)
        ClassTermSubject.objects.create(class_term=class_term, subject=self.maths)
        teacher = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T1')

        assigned = self.post_json(
            reverse('academics:class_term_subject_assign_teacher', args=[class_term.pk, self.maths.pk]),
            {'teacher_id': str(teacher.pk)},
        ).json()['data']
        self.assertEqual(assigned['teacher_id'], str(teacher.pk))

        removed = self.post_json(
            reverse('academics:class_term_subject_unassign_teacher', args=[class_term.pk, self.maths.pk])
        ).json()['data']
        self.assertIsNone(removed['teacher_id'])

    def test_assign_teacher_to_subject_not_offered(self):
        class_term = ClassTerm.objects.create(class_assigned=self.cls, term=self.term)
        teacher = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T1')

        response = self.post_json(
            reverse('academics:class_term_subject_assign_teacher', args=[class_term.pk, self.maths.pk]),
            {'teacher_id': str(teacher.pk)},
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Subject is not offered in this class term')

    def test_term_classes(self):
        ClassTerm.objects.create(class_assigned=self.cls, term=self.term)
        data = self.client.get(reverse('academics:term_classes', args=[self.term.pk])).json()['data']
        self.assertEqual([c['class_name'] for c in data['class_terms']], ['B7-A'])


class SeedSubjectsTests(AcademicsTestCase):
    """Tests for the seed_subjects command."""

    def test_seed_skips_existing(self):
        Subject.objects.create(name='Mathematics', short_name='MATHS')

        call_command('seed_subjects', stdout=StringIO())
        count = Subject.objects.count()
        call_command('seed_subjects', stdout=StringIO())

        self.assertEqual(Subject.objects.count(), count)
        self.assertEqual(Subject.objects.get(name='Mathematics').short_name, 'MATHS')
        self.assertTrue(Subject.objects.get(name='English Language').is_core)
        self.assertFalse(Subject.objects.filter(name='Physics').exists())

    def test_seed_shs_electives(self):
        call_command('seed_subjects', '--shs', stdout=StringIO())
        self.assertTrue(Subject.objects.filter(name='Physics', is_core=False).exists())
