import json
import os
from unittest import mock

from django.test import RequestFactory, SimpleTestCase
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.http import Http404
from django.urls import reverse
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from .forms import SchoolCreationForm
from . import views
from .services import (
    clean_schema_name, create_school, create_school_admin, default_domain, delete_school_admin, role_counts,
    school_admin_detail, school_admins, school_performance, toggle_school_admin,
)

User = get_user_model()


class SchemaNameTests(SimpleTestCase):
    """Tests for schema name validation."""

    def test_valid_names_are_lowercased(self):
        self.assertEqual(clean_schema_name(' Accra_High '), 'accra_high')
        self.assertEqual(clean_schema_name('school2'), 'school2')

    def test_invalid_names(self):
        for name in ('accra-high', '2school', 'my school', '', None):
            with self.assertRaises(ValidationError, msg=name):
                clean_schema_name(name)

    def test_reserved_names(self):
        for name in ('public', 'admin', 'www'):
            with self.assertRaises(ValidationError):
                clean_schema_name(name)

    def test_default_domain(self):
        with mock.patch.dict(os.environ, {'BASE_DOMAIN': 'schools.example.com'}):
            self.assertEqual(default_domain('accra'), 'accra.schools.example.com')
        with mock.patch.dict(os.environ, {'BASE_DOMAIN': '127.0.0.1'}):
            self.assertEqual(default_domain('accra'), 'accra.localhost')


class SchoolCreationFormTests(TenantTestCase):
    """Tests for the new school form."""

    def test_hyphenated_schema_rejected(self):
        form = SchoolCreationForm({
            'name': 'Accra High', 'schema_name': 'accra-high', 'admin_email': 'head@accra.edu.gh',
        })
        self.assertFalse(form.is_valid())
        self.assertIn('schema_name', form.errors)


class SchoolTenantTests(TenantTestCase):
    """Tests that run against the test school's schema."""

    @classmethod
    def setup_tenant(cls, tenant):
        """Called when tenant is created."""
        tenant.name = 'Test School'
        tenant.short_name = 'TEST'

    def setUp(self):
        super().setUp()
        self.client = TenantClient(self.tenant)
        User.objects.create_user(email='admin@school.com', password='testpass123', is_school_admin=True)
        self.client.login(email='admin@school.com', password='testpass123')

    def test_role_counts(self):
        """Test active users are counted per role."""
        User.objects.create_teacher(email='t1@school.com', password='pass')
        User.objects.create_teacher(email='t2@school.com', password='pass', is_active=False)
        User.objects.create_parent(email='p1@school.com', password='pass')

        self.assertEqual(role_counts(self.tenant), {'admins': 1, 'teachers': 1, 'students': 0, 'parents': 1})

    def test_suspended_school_rejects_requests(self):
        """Test every request to a suspended school is refused."""
        self.assertEqual(self.client.get(reverse('core:index')).status_code, 200)

        self.tenant.is_active = False
        self.tenant.save()

        response = self.client.get(reverse('core:index'))
        self.assertEqual(response.status_code, 403)
        self.assertIn('suspended', response.json()['error'])

    def test_duplicate_schema_rejected(self):
        """Test a second school cannot reuse an existing schema."""
        with self.assertRaises(ValidationError):
            create_school('Copy School', self.tenant.schema_name, 'head@copy.edu.gh')

    def test_display_name(self):
        self.assertEqual(self.tenant.display_name, 'TEST')
        self.assertEqual(self.tenant.to_dict()['name'], 'Test School')

    def test_create_school_admin(self):
        """Test a second admin is created inside the school with a temporary password."""
        data, password = create_school_admin(self.tenant, ' Deputy@School.com ', first_name='Ama')

        self.assertEqual(data['email'], 'deputy@school.com')
        self.assertTrue(data['must_change_password'])
        user = User.objects.get(email='deputy@school.com')
        self.assertTrue(user.is_school_admin)
        self.assertTrue(user.check_password(password))
        self.assertEqual([a['email'] for a in school_admins(self.tenant)], ['admin@school.com', 'deputy@school.com'])

    def test_create_school_admin_duplicate_email(self):
        with self.assertRaises(ValidationError):
            create_school_admin(self.tenant, 'admin@school.com')

    def test_last_active_admin_kept(self):
        """Test the only active admin can be neither deactivated nor deleted."""
        admin = User.objects.get(email='admin@school.com')
        with self.assertRaises(ValidationError):
            toggle_school_admin(self.tenant, admin.pk)
        with self.assertRaises(ValidationError):
            delete_school_admin(self.tenant, admin.pk)

        admin.refresh_from_db()
        self.assertTrue(admin.is_active)

    def test_toggle_and_delete_school_admin(self):
        data, _ = create_school_admin(self.tenant, 'deputy@school.com')

        self.assertFalse(toggle_school_admin(self.tenant, data['id'])['is_active'])
        self.assertTrue(toggle_school_admin(self.tenant, data['id'])['is_active'])

        delete_school_admin(self.tenant, data['id'])
        self.assertFalse(User.objects.filter(email='deputy@school.com').exists())

    def test_admin_actions_ignore_other_roles(self):
        """Test teacher accounts cannot be managed as admins."""
        teacher = User.objects.create_teacher(email='t1@school.com', password='pass')
        with self.assertRaises(Http404):
            school_admin_detail(self.tenant, teacher.pk)
        with self.assertRaises(Http404):
            delete_school_admin(self.tenant, teacher.pk)

    def test_admin_detail(self):
        admin = User.objects.get(email='admin@school.com')
        data = school_admin_detail(self.tenant, admin.pk)
        self.assertEqual(data['email'], 'admin@school.com')
        self.assertEqual(data['school'], {'id': self.tenant.pk, 'name': 'Test School'})


class SchoolAdminActionTests(TenantTestCase):
    """Tests for the super admin actions on a school's admin accounts."""

    def setUp(self):
        super().setUp()
        self.factory = RequestFactory()
        self.owner = User.objects.create_superuser(email='owner@platform.com', password='testpass123')
        User.objects.create_user(email='admin@school.com', password='testpass123', is_school_admin=True)

    def post_json(self, view, data, user=None, **kwargs):
        request = self.factory.post('/', data=json.dumps(data), content_type='application/json')
        request.user = user or self.owner
        return view(request, **kwargs)

    def test_create_returns_temporary_password(self):
        response = self.post_json(
            views.school_admin_create, {'email': 'deputy@school.com', 'first_name': 'Ama'}, pk=self.tenant.pk,
        )
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.content)['data']
        self.assertEqual(data['first_name'], 'Ama')
        self.assertTrue(User.objects.get(email='deputy@school.com').check_password(data['temporary_password']))

    def test_create_requires_super_admin(self):
        school_admin = User.objects.get(email='admin@school.com')
        response = self.post_json(
            views.school_admin_create, {'email': 'deputy@school.com'}, user=school_admin, pk=self.tenant.pk,
        )
        self.assertEqual(response.status_code, 403)
        self.assertFalse(User.objects.filter(email='deputy@school.com').exists())

    def test_deactivating_last_admin_rejected(self):
        admin = User.objects.get(email='admin@school.com')
        response = self.post_json(views.school_admin_toggle_active, {}, pk=self.tenant.pk, user_id=admin.pk)
        self.assertEqual(response.status_code, 400)
        self.assertIn('at least one active admin', json.loads(response.content)['error'])

    def test_list_admins(self):
        request = self.factory.get('/')
        request.user = self.owner
        response = views.school_admin_list(request, pk=self.tenant.pk)
        admins = json.loads(response.content)['data']['admins']
        self.assertEqual([a['email'] for a in admins], ['admin@school.com'])

    def test_dashboard_top_schools(self):
        """Test the platform dashboard summarises students and teachers per school."""
        User.objects.create_teacher(email='t1@school.com', password='pass')

        data = views.platform_dashboard_data()
        top = [row for row in data['top_schools'] if row['id'] == self.tenant.pk]
        self.assertEqual(len(top), 1)
        self.assertEqual(top[0]['teachers'], 1)
        self.assertEqual(top[0]['students'], 0)


class SchoolPerformanceTests(SimpleTestCase):
    """Tests for ranking schools on the platform dashboard."""

    def test_ordered_by_students_then_teachers(self):
        rows = [
            {'id': 1, 'name': 'Small', 'admins': 1, 'teachers': 2, 'students': 10, 'parents': 0},
            {'id': 2, 'name': 'Large', 'admins': 1, 'teachers': 5, 'students': 300, 'parents': 40},
            {'id': 3, 'name': 'Staffed', 'admins': 2, 'teachers': 9, 'students': 10, 'parents': 3},
        ]
        summary = school_performance(rows)
        self.assertEqual([row['id'] for row in summary], [2, 3, 1])
        self.assertEqual(summary[0], {'id': 2, 'name': 'Large', 'students': 300, 'teachers': 5})

    def test_limit(self):
        rows = [
            {'id': i, 'name': f'School {i}', 'teachers': 0, 'students': i} for i in range(15)
        ]
        self.assertEqual([row['id'] for row in school_performance(rows, limit=3)], [14, 13, 12])
