import json
from datetime import date

from django.test import SimpleTestCase
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.urls import reverse
from django.utils import timezone
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from academics.models import Class, Subject, ClassTerm, ClassTermSubject
from core.models import AcademicYear, Term, SchoolSettings
from gradebook.models import Assessment
from .admission import (
    allocate_admission_number, format_admission_number, preview_next_admission_number,
    validate_admission_format,
)
from .models import Student, Parent, StudentClassTerm, StudentParent, StudentTransition
from .transitions import transition_eligibility

User = get_user_model()


# ============ Pure helpers ============

class AdmissionFormatTests(SimpleTestCase):
    """Tests for admission number templates."""

    def test_default_template(self):
        self.assertEqual(format_admission_number('{PREFIX}/{YEAR}/{NUMBER}', 'ADM', 2025, 7), 'ADM/2025/0007')

    def test_number_wider_than_padding(self):
        self.assertEqual(format_admission_number('{NUMBER}', 'ADM', 2025, 12345), '12345')

    def test_template_without_number_rejected(self):
        with self.assertRaises(ValidationError):
            validate_admission_format('{PREFIX}-{YEAR}')
        validate_admission_format('{YEAR}{NUMBER}')


class TransitionEligibilityTests(SimpleTestCase):
    """Tests for promotion eligibility hints (pass mark 40)."""

    def assertEligibility(self, args, eligible, reason):
        self.assertEqual(transition_eligibility(*args, pass_mark=40), (eligible, reason))

    def test_meets_all_criteria(self):
        self.assertEligibility((60, 60, 0), True, "Excellent performance - meets all criteria")

    def test_few_failures(self):
        """80% of the pass mark with two failures is enough."""
        self.assertEligibility((35, 40, 2), True, "Good performance - acceptable with few failures")

    def test_high_pass_rate(self):
        self.assertEligibility((30, 75, 3), True, "High pass rate - eligible despite lower average")

    def test_rejection_reasons(self):
        self.assertEligibility((20, 10, 5), False, "Below minimum average score requirement")
        self.assertEligibility((30, 50, 4), False, "Too many failed subjects")
        self.assertEligibility((30, 30, 3), False, "Low pass rate - needs improvement")
        self.assertEligibility((30, 50, 3), False, "Does not meet transition criteria")


# ============ Tenant tests ============

class StudentsTestCase(TenantTestCase):
    """Base test case for students app."""

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

    def post_json(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type='application/json')

    def make_student(self, first='Ama', last='Owusu', admission='ADM/2024/0001', class_term=None, **kwargs):
        student = Student.objects.create(
            first_name=first, last_name=last, gender=kwargs.pop('gender', 'F'),
            admission_number=admission, **kwargs
        )
        if class_term is not None:
            StudentClassTerm.objects.create(student=student, class_term=class_term)
        return student


class AdmissionSequenceTests(StudentsTestCase):
    """Tests for admission number allocation."""

    def test_sequence_starts_at_configured_start(self):
        settings = SchoolSettings.load()
        settings.admission_sequence_start = 50
        settings.save()

        self.assertEqual(allocate_admission_number(2025), 'ADM/2025/0050')
        self.assertEqual(allocate_admission_number(2025), 'ADM/2025/0051')
        self.assertEqual(allocate_admission_number(2026), 'ADM/2026/0050')

    def test_preview_does_not_consume(self):
        self.assertEqual(preview_next_admission_number(2025), 'ADM/2025/0001')
        self.assertEqual(preview_next_admission_number(2025), 'ADM/2025/0001')
        self.assertEqual(allocate_admission_number(2025), 'ADM/2025/0001')
        self.assertEqual(preview_next_admission_number(2025), 'ADM/2025/0002')

    def test_clash_with_existing_student(self):
        """Test a number already taken by hand is not handed out again."""
        self.make_student(admission='ADM/2025/0001')
        with self.assertRaises(ValidationError):
            allocate_admission_number(2025)


class StudentActionTests(StudentsTestCase):
    """Tests for student actions."""

    def test_create_allocates_admission_number(self):
        """Test a student created without a number gets the next one."""
        response = self.post_json(reverse('students:student_create'), {
            'first_name': 'Kofi', 'last_name': 'Boateng', 'gender': 'M',
        })

        self.assertEqual(response.status_code, 200)
        expected = format_admission_number('{PREFIX}/{YEAR}/{NUMBER}', 'ADM', timezone.localdate().year, 1)
        self.assertEqual(response.json()['data']['admission_number'], expected)
        self.assertEqual(response.json()['data']['status'], 'active')

    def test_create_with_enrolment_and_parent(self):
        parent = Parent.objects.create(first_name='Yaw', last_name='Boateng', phone_number='0241234567')

        response = self.post_json(reverse('students:student_create'), {
            'first_name': 'Kofi', 'last_name': 'Boateng', 'gender': 'M', 'admission_number': 'X-1',
            'class_id': self.class_obj.pk, 'term_id': self.term.pk,
            'parent_id': parent.pk, 'relationship': 'FATHER',
        })

        student = Student.objects.get(pk=response.json()['data']['id'])
        self.assertEqual(student.get_class_term(self.term).class_term, self.class_term)
        link = StudentParent.objects.get(student=student)
        self.assertEqual(link.relationship, 'FATHER')
        self.assertTrue(link.is_primary)

    def test_create_with_bad_relationship_saves_nothing(self):
        parent = Parent.objects.create(first_name='Yaw', last_name='Boateng', phone_number='0241234567')

        response = self.post_json(reverse('students:student_create'), {
            'first_name': 'Kofi', 'last_name': 'Boateng', 'gender': 'M', 'admission_number': 'X-1',
            'parent_id': parent.pk, 'relationship': 'COUSIN',
        })

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Student.objects.exists())

    def test_duplicate_admission_number_rejected(self):
        self.make_student(admission='ADM/2024/0001')
        response = self.post_json(reverse('students:student_create'), {
            'first_name': 'Kofi', 'last_name': 'Boateng', 'gender': 'M', 'admission_number': 'adm/2024/0001',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('already in use', response.json()['error'])

    def test_create_with_account(self):
        response = self.post_json(reverse('students:student_create'), {
            'first_name': 'Kofi', 'last_name': 'Boateng', 'gender': 'M', 'admission_number': 'X-1',
            'create_account': True, 'account_email': 'kofi@school.com',
        })

        data = response.json()['data']
        self.assertTrue(data['temporary_password'])
        self.assertTrue(User.objects.get(email='kofi@school.com').is_student)

    def test_toggle_status_follows_login(self):
        user = User.objects.create_student(email='ama@school.com', password='pass')
        student = self.make_student(user=user)

        self.post_json(reverse('students:student_toggle_status', args=[student.pk]))

        student.refresh_from_db()
        user.refresh_from_db()
        self.assertEqual(student.status, 'inactive')
        self.assertFalse(user.is_active)

    def test_one_class_per_term(self):
        """Test enrolling in a second class in the same term is refused."""
        student = self.make_student(class_term=self.class_term)
        other = ClassTerm.objects.create(
            class_assigned=Class.objects.create(level_type='jhs', level_number=1, section='B'), term=self.term
        )

        response = self.post_json(reverse('students:student_enrol', args=[student.pk]), {'class_term_id': other.pk})

        self.assertEqual(response.status_code, 400)
        self.assertIn('already enrolled in B7-A', response.json()['error'])

    def test_enrol_again_is_noop(self):
        student = self.make_student(class_term=self.class_term)
        response = self.post_json(
            reverse('students:student_enrol', args=[student.pk]), {'class_term_id': self.class_term.pk}
        )
        self.assertFalse(response.json()['data']['created'])

    def test_enrol_into_full_class(self):
        self.class_obj.capacity = 1
        self.class_obj.save()
        self.make_student(class_term=self.class_term)
        student = self.make_student(first='Kofi', admission='ADM/2024/0002')

        response = self.post_json(
            reverse('students:student_enrol', args=[student.pk]),
            {'class_id': self.class_obj.pk, 'term_id': self.term.pk},
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('is full', response.json()['error'])

    def test_list_filters_by_class(self):
        self.make_student(class_term=self.class_term)
        self.make_student(first='Kofi', admission='ADM/2024/0002')

        data = self.client.get(reverse('students:index'), {'class': self.class_obj.pk}).json()['data']

        self.assertEqual([s['first_name'] for s in data['students']], ['Ama'])
        self.assertEqual(data['pagination']['count'], 1)

    def test_detail_lists_enrolments_and_parents(self):
        student = self.make_student(class_term=self.class_term)
        parent = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='024')
        StudentParent.objects.create(student=student, parent=parent, relationship='FATHER')

        data = self.client.get(reverse('students:student_detail', args=[student.pk])).json()['data']

        self.assertEqual(data['enrollments'][0]['class_name'], 'B7-A')
        self.assertEqual(data['parents'][0]['relationship'], 'FATHER')


class ParentActionTests(StudentsTestCase):
    """Tests for parent actions."""

    def test_parent_needs_phone_or_email(self):
        response = self.post_json(reverse('students:parent_create'), {
            'first_name': 'Yaw', 'last_name': 'Boateng', 'gender': 'M',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('Provide a phone number or an email address.', response.json()['error'])

    def test_link_and_relink(self):
        """Test relinking updates the existing link."""
        student = self.make_student()
        parent = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='024')
        url = reverse('students:parent_link_student')

        first = self.post_json(url, {'student': student.pk, 'parent': parent.pk}).json()['data']
        second = self.post_json(url, {
            'student': student.pk, 'parent': parent.pk, 'relationship': 'FATHER', 'is_primary': True,
        }).json()['data']

        self.assertTrue(first['created'])
        self.assertEqual(first['relationship'], 'GUARDIAN')
        self.assertFalse(second['created'])
        self.assertEqual(StudentParent.objects.get().relationship, 'FATHER')

    def test_single_primary_contact(self):
        student = self.make_student()
        mother = Parent.objects.create(first_name='Efua', last_name='Owusu', phone_number='024')
        father = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='020')
        StudentParent.objects.create(student=student, parent=mother, is_primary=True)
        StudentParent.objects.create(student=student, parent=father, is_primary=True)

        self.assertEqual(
            list(StudentParent.objects.filter(is_primary=True).values_list('parent_id', flat=True)), [father.pk]
        )

    def test_unlink(self):
        student = self.make_student()
        parent = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='024')
        StudentParent.objects.create(student=student, parent=parent)

        ok = self.post_json(reverse('students:parent_unlink_student', args=[parent.pk, student.pk]))
        missing = self.post_json(reverse('students:parent_unlink_student', args=[parent.pk, student.pk]))

        self.assertEqual(ok.status_code, 200)
        self.assertEqual(missing.status_code, 404)

    def test_unlinked_students(self):
        linked = self.make_student()
        self.make_student(first='Kofi', admission='ADM/2024/0002')
        parent = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='024')
        StudentParent.objects.create(student=linked, parent=parent)

        data = self.client.get(reverse('students:unlinked_students')).json()['data']

        self.assertEqual([s['first_name'] for s in data['students']], ['Kofi'])

    def test_delete_disables_login(self):
        user = User.objects.create_parent(email='yaw@example.com', password='pass')
        parent = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='024', user=user)

        self.post_json(reverse('students:parent_delete', args=[parent.pk]))

        user.refresh_from_db()
        self.assertFalse(user.is_active)
        self.assertFalse(Parent.objects.exists())


class TransitionActionTests(StudentsTestCase):
    """Tests for moving students between class terms."""

    def setUp(self):
        super().setUp()
        self.next_term = Term.objects.create(
            academic_year=self.year, name='Second Term', term_number=2,
            start_date=date(2025, 1, 6), end_date=date(2025, 4, 4)
        )
        self.next_class_term = ClassTerm.objects.create(
            class_assigned=Class.objects.create(level_type='jhs', level_number=2, section='A'),
            term=self.next_term,
        )
        self.ama = self.make_student(class_term=self.class_term)
        self.kofi = self.make_student(first='Kofi', last='Boateng', admission='ADM/2024/0002',
                                      gender='M', class_term=self.class_term)

    def execute(self, student_ids, transition_type='PROMOTION'):
        return self.post_json(reverse('students:transition_execute'), {
            'from_class_term': self.class_term.pk,
            'to_class_term': self.next_class_term.pk,
            'transition_type': transition_type,
            'student_ids': student_ids,
        })

    def test_promote_students(self):
        response = self.execute([self.ama.pk, self.kofi.pk])

        data = response.json()['data']
        self.assertEqual(data['transitions_created'], 2)
        self.assertEqual(data['message'], 'Successfully transitioned 2 students from B7-A to B8-A')
        self.assertEqual(self.next_class_term.enrollments.count(), 2)
        # Source enrolments are kept as history
        self.assertEqual(self.class_term.enrollments.count(), 2)

    def test_batch_is_all_or_nothing(self):
        """Test one bad student aborts the whole batch."""
        outsider = self.make_student(first='Esi', admission='ADM/2024/0003')

        response = self.execute([self.ama.pk, outsider.pk])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], f"Student {outsider.pk} not found in source class")
        self.assertFalse(self.next_class_term.enrollments.exists())
        self.assertFalse(StudentTransition.objects.exists())

    def test_already_in_destination(self):
        StudentClassTerm.objects.create(student=self.ama, class_term=self.next_class_term)
        response = self.execute([self.ama.pk])
        self.assertEqual(response.json()['error'], f"Student {self.ama.pk} already exists in destination class")

    def test_same_class_term_rejected(self):
        response = self.post_json(reverse('students:transition_execute'), {
            'from_class_term': self.class_term.pk,
            'to_class_term': self.class_term.pk,
            'transition_type': 'REPETITION',
            'student_ids': [self.ama.pk],
        })
        self.assertEqual(response.status_code, 400)

    def test_unknown_class_term(self):
        response = self.post_json(reverse('students:transition_execute'), {
            'from_class_term': self.class_term.pk,
            'to_class_term': 9999,
            'transition_type': 'PROMOTION',
            'student_ids': [self.ama.pk],
        })
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Source or destination class term not found')

    def test_history_and_statistics(self):
        self.execute([self.ama.pk])

        history = self.client.get(reverse('students:transition_history'), {'student': self.ama.pk}).json()['data']
        self.assertEqual(len(history['transitions']), 1)
        self.assertEqual(history['transitions'][0]['to_term'], '2024/2025 - Second Term')

        stats = self.client.get(reverse('students:transition_statistics', args=[self.next_term.pk])).json()['data']
        self.assertEqual(stats['total_transitions'], 1)
        self.assertEqual(stats['by_type'], {'PROMOTION': 1})

    def test_candidates(self):
        """Test each student gets their average and an eligibility hint."""
        maths = Subject.objects.create(name='Mathematics')
        ClassTermSubject.objects.create(class_term=self.class_term, subject=maths)
        Assessment.objects.create(
            student_class_term=self.ama.get_class_term(self.term), subject=maths,
            ca1=10, ca2=10, ca3=10, exam=50,
        )
        Assessment.objects.create(
            student_class_term=self.kofi.get_class_term(self.term), subject=maths,
            ca1=5, ca2=5, ca3=5, exam=0,
        )

        data = self.client.get(reverse('students:transition_candidates', args=[self.class_term.pk])).json()['data']

        rows = {row['student_id']: row for row in data['students']}
        self.assertTrue(rows[self.ama.pk]['is_eligible'])
        self.assertEqual(rows[self.ama.pk]['average_score'], 80.0)
        self.assertEqual(rows[self.ama.pk]['position'], 1)
        self.assertFalse(rows[self.kofi.pk]['is_eligible'])
        self.assertEqual(rows[self.kofi.pk]['eligibility_reason'], 'Below minimum average score requirement')
        self.assertEqual(rows[self.kofi.pk]['subjects_failed'], 1)


class DashboardTests(StudentsTestCase):
    """Tests for the student and parent dashboards."""

    def setUp(self):
        super().setUp()
        self.student_user = User.objects.create_student(email='ama@school.com', password='testpass123')
        self.student = self.make_student(user=self.student_user, class_term=self.class_term)
        maths = Subject.objects.create(name='Mathematics')
        ClassTermSubject.objects.create(class_term=self.class_term, subject=maths)
        Assessment.objects.create(
            student_class_term=self.student.get_class_term(self.term), subject=maths,
            ca1=10, ca2=10, ca3=10, exam=60,
        )

        self.parent_user = User.objects.create_parent(email='yaw@example.com', password='testpass123')
        parent = Parent.objects.create(first_name='Yaw', last_name='Owusu', phone_number='024', user=self.parent_user)
        StudentParent.objects.create(student=self.student, parent=parent, relationship='FATHER', is_primary=True)

    def login(self, email):
        self.client.logout()
        self.client.login(email=email, password='testpass123')

    def test_unpublished_results_hidden(self):
        self.login('ama@school.com')
        data = self.client.get(reverse('students:student_dashboard')).json()['data']

        self.assertEqual(data['current_class']['class_name'], 'B7-A')
        self.assertIsNone(data['results'])
        self.assertEqual(data['message'], 'Results for this term have not been published yet.')

    def test_published_results_shown(self):
        Assessment.objects.update(is_published=True)
        self.login('ama@school.com')

        data = self.client.get(reverse('core:index')).json()['data']

        self.assertEqual(data['role'], 'student')
        self.assertEqual(data['results']['average_score'], 90.0)
        self.assertEqual(data['results']['position'], 1)

    def test_parent_sees_children(self):
        Assessment.objects.update(is_published=True)
        self.login('yaw@example.com')

        data = self.client.get(reverse('students:parent_dashboard')).json()['data']

        self.assertEqual(len(data['children']), 1)
        child = data['children'][0]
        self.assertEqual(child['relationship'], 'FATHER')
        self.assertTrue(child['is_primary'])
        self.assertEqual(child['results']['grade'], 'A1')

    def test_student_cannot_open_parent_dashboard(self):
        self.login('ama@school.com')
        self.assertEqual(self.client.get(reverse('students:parent_dashboard')).status_code, 403)
