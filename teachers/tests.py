import json
from datetime import date

from django.contrib.auth import get_user_model
from django.urls import reverse
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from academics.models import Class, Subject, ClassTerm, ClassTermSubject
from core.models import AcademicYear, Term
from students.models import Student, StudentClassTerm
from teachers.models import Teacher

User = get_user_model()


class TeachersTestCase(TenantTestCase):
    """Base test case for teachers app."""

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

    def teacher_payload(self, **overrides):
        payload = {
            'title': 'MR',
            'first_name': 'Kwame',
            'last_name': 'Asante',
            'gender': 'M',
            'staff_id': 't001',
            'status': 'active',
            'employment_date': '2020-09-01',
            'email': 'kwame@school.com',
        }
        payload.update(overrides)
        return payload


class TeacherModelTests(TeachersTestCase):
    """Tests for Teacher model."""

    def test_str_includes_title(self):
        """Test teacher string representation."""
        teacher = Teacher.objects.create(
            first_name='Ama', middle_name='Serwaa', last_name='Mensah', staff_id='T002', title='MRS'
        )
        self.assertEqual(str(teacher), 'Mrs. Ama Serwaa Mensah')
        self.assertEqual(teacher.to_dict()['full_name'], 'Ama Serwaa Mensah')


class TeacherActionTests(TeachersTestCase):
    """Tests for teacher CRUD actions."""

    def test_create_teacher_normalises_staff_id(self):
        """Test staff IDs are stored uppercase."""
        response = self.post_json(reverse('teachers:teacher_create'), self.teacher_payload())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['staff_id'], 'T001')
        self.assertTrue(Teacher.objects.filter(staff_id='T001').exists())

    def test_create_teacher_with_account(self):
        """Test an account with a temporary password is created on request."""
        response = self.post_json(
            reverse('teachers:teacher_create'), self.teacher_payload(create_account=True)
        )

        data = response.json()['data']
        self.assertTrue(data['temporary_password'])
        user = User.objects.get(email='kwame@school.com')
        self.assertTrue(user.is_teacher)
        self.assertTrue(user.must_change_password)
        self.assertEqual(Teacher.objects.get(staff_id='T001').user, user)

    def test_create_rolls_back_when_account_fails(self):
        """Test the teacher is not saved if the account email is taken."""
        User.objects.create_user(email='kwame@school.com', password='pass')

        response = self.post_json(
            reverse('teachers:teacher_create'), self.teacher_payload(create_account=True)
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Teacher.objects.exists())

    def test_duplicate_staff_id_rejected(self):
        Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001')
        response = self.post_json(reverse('teachers:teacher_create'), self.teacher_payload())
        self.assertEqual(response.status_code, 400)

    def test_list_search(self):
        Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001')
        Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T002')

        response = self.client.get(reverse('teachers:index'), {'search': 'boat'})

        teachers = response.json()['data']['teachers']
        self.assertEqual([t['staff_id'] for t in teachers], ['T002'])

    def test_update_syncs_account_name(self):
        """Test renaming a teacher renames their login."""
        user = User.objects.create_teacher(email='ama@school.com', password='pass', first_name='Ama')
        teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001', user=user)

        self.post_json(reverse('teachers:teacher_update', args=[teacher.pk]), {'first_name': 'Akosua'})

        user.refresh_from_db()
        self.assertEqual(user.first_name, 'Akosua')
        teacher.refresh_from_db()
        self.assertEqual(teacher.last_name, 'Mensah')

    def test_delete_blocked_while_assigned(self):
        """Test a teacher with subject assignments cannot be deleted."""
        teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001')
        year = AcademicYear.objects.create(name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31))
        term = Term.objects.create(academic_year=year, name='First Term', term_number=1,
                                   start_date=date(2024, 9, 1), end_date=date(2024, 12, 15))
        class_term = ClassTerm.objects.create(
            class_assigned=Class.objects.create(level_number=1, section='A'), term=term
        )
        ClassTermSubject.objects.create(
            class_term=class_term, subject=Subject.objects.create(name='Mathematics'), teacher=teacher
        )

        response = self.post_json(reverse('teachers:teacher_delete', args=[teacher.pk]))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Teacher.objects.filter(pk=teacher.pk).exists())

    def test_delete_deactivates_account(self):
        user = User.objects.create_teacher(email='ama@school.com', password='pass')
        teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001', user=user)

        response = self.post_json(reverse('teachers:teacher_delete', args=[teacher.pk]))

        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertFalse(user.is_active)

    def test_teacher_sees_only_own_profile(self):
        """Test a teacher can read their own profile but not a colleague's."""
        user = User.objects.create_teacher(email='ama@school.com', password='testpass123')
        own = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001', user=user)
        other = Teacher.objects.create(first_name='Kofi', last_name='Boateng', staff_id='T002')
        self.client.logout()
        self.client.login(email='ama@school.com', password='testpass123')

        self.assertEqual(self.client.get(reverse('teachers:teacher_detail', args=[own.pk])).status_code, 200)
        self.assertEqual(self.client.get(reverse('teachers:teacher_detail', args=[other.pk])).status_code, 403)


class TeacherDashboardTests(TeachersTestCase):
    """Tests for the teacher dashboard."""

    def setUp(self):
        super().setUp()
        self.user = User.objects.create_teacher(email='ama@school.com', password='testpass123')
        self.teacher = Teacher.objects.create(first_name='Ama', last_name='Mensah', staff_id='T001', user=self.user)

        year = AcademicYear.objects.create(
            name='2024/2025', start_date=date(2024, 9, 1), end_date=date(2025, 7, 31), is_current=True
        )
        self.term = Term.objects.create(academic_year=year, name='First Term', term_number=1,
                                        start_date=date(2024, 9, 1), end_date=date(2024, 12, 15), is_current=True)
        class_obj = Class.objects.create(level_number=2, section='B', class_teacher=self.teacher)
        self.class_term = ClassTerm.objects.create(class_assigned=class_obj, term=self.term)
        ClassTermSubject.objects.create(
            class_term=self.class_term, subject=Subject.objects.create(name='Mathematics'), teacher=self.teacher
        )
        ClassTermSubject.objects.create(class_term=self.class_term, subject=Subject.objects.create(name='English'))
        for i in range(2):
            student = Student.objects.create(first_name=f'S{i}', last_name='Test', gender='F', admission_number=f'A{i}')
            StudentClassTerm.objects.create(student=student, class_term=self.class_term)

        self.client.logout()
        self.client.login(email='ama@school.com', password='testpass123')

    def test_dashboard_lists_assigned_subjects(self):
        """Test only the teacher's own subjects are listed with progress."""
        response = self.client.get(reverse('teachers:dashboard'))

        data = response.json()['data']
        self.assertEqual([s['subject_name'] for s in data['subjects']], ['Mathematics'])
        self.assertEqual(data['subjects'][0]['completion']['not_started'], 2)
        self.assertEqual(data['workload']['total_students'], 2)
        self.assertEqual(data['workload']['homeroom_classes'], 1)

    def test_index_routes_to_teacher_dashboard(self):
        response = self.client.get(reverse('core:index'))
        self.assertEqual(response.json()['data']['role'], 'teacher')

    def test_dashboard_without_profile(self):
        User.objects.create_teacher(email='new@school.com', password='testpass123')
        self.client.logout()
        self.client.login(email='new@school.com', password='testpass123')

        data = self.client.get(reverse('teachers:dashboard')).json()['data']

        self.assertIsNone(data['teacher'])
