import json

from django.test import TestCase
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.urls import reverse
from django_tenants.test.cases import TenantTestCase
from django_tenants.test.client import TenantClient

from .utils import create_account, generate_temp_password

User = get_user_model()


class UserManagerTests(TestCase):
    """Tests for the custom UserManager (public schema)."""

    def test_create_user(self):
        """Test creating a regular user with email."""
        user = User.objects.create_user(
            email='test@example.com',
            password='testpass123'
        )
        self.assertEqual(user.email, 'test@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_superuser)
        self.assertFalse(user.must_change_password)

    def test_create_user_without_email_raises_error(self):
        """Test that creating a user without email raises ValueError."""
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_create_superuser(self):
        """Test creating a superuser."""
        user = User.objects.create_superuser(
            email='admin@example.com',
            password='adminpass123'
        )
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertEqual(user.role, 'super_admin')

    def test_create_superuser_without_is_staff_raises_error(self):
        """Test that superuser must have is_staff=True."""
        with self.assertRaises(ValueError):
            User.objects.create_superuser(
                email='admin@example.com',
                password='adminpass123',
                is_staff=False
            )

    def test_username_field_is_email(self):
        """Test that USERNAME_FIELD is email."""
        self.assertEqual(User.USERNAME_FIELD, 'email')


class TenantUserRoleTests(TenantTestCase):
    """Tests for role helpers (tenant schema)."""

    def test_role_helpers(self):
        """Test each helper sets one role flag and the matching role."""
        cases = [
            (User.objects.create_school_admin, 'admin', 'School Admin'),
            (User.objects.create_teacher, 'teacher', 'Teacher'),
            (User.objects.create_student, 'student', 'Student'),
            (User.objects.create_parent, 'parent', 'Parent'),
        ]
        for i, (create, role, label) in enumerate(cases):
            user = create(email=f'user{i}@school.com', password='testpass123')
            self.assertEqual(user.role, role)
            self.assertEqual(user.role_label, label)

    def test_school_admin_is_not_staff(self):
        """Test school admins stay out of the platform admin site."""
        user = User.objects.create_school_admin(email='principal@school.com', password='pass')
        self.assertFalse(user.is_staff)

    def test_plain_user_role(self):
        user = User.objects.create_user(email='user@school.com', password='pass')
        self.assertEqual(user.role, 'user')
        self.assertEqual(user.role_label, 'User')


class CreateAccountTests(TenantTestCase):
    """Tests for create_account."""

    def test_generated_password_forces_change(self):
        """Test an account without a password gets a temporary one."""
        user, password = create_account('teacher', ' Kofi@School.com ', first_name='Kofi')

        self.assertEqual(user.email, 'kofi@school.com')
        self.assertTrue(user.is_teacher)
        self.assertTrue(user.must_change_password)
        self.assertTrue(user.check_password(password))

    def test_given_password_does_not_force_change(self):
        user, _ = create_account('parent', 'parent@example.com', password='chosenpass123')
        self.assertTrue(user.is_parent)
        self.assertFalse(user.must_change_password)

    def test_duplicate_email_rejected(self):
        User.objects.create_user(email='taken@school.com', password='pass')
        with self.assertRaises(ValidationError):
            create_account('student', 'TAKEN@school.com')

    def test_missing_email_rejected(self):
        with self.assertRaises(ValidationError):
            create_account('student', '')

    def test_temp_password_alphabet(self):
        password = generate_temp_password(12)
        self.assertEqual(len(password), 12)
        self.assertTrue(password.isalnum())


class AuthActionTests(TenantTestCase):
    """Tests for login, logout and password change actions."""

    @classmethod
    def setup_tenant(cls, tenant):
        """Called when tenant is created."""
        tenant.name = 'Test School'
        tenant.short_name = 'TEST'

    def setUp(self):
        super().setUp()
        self.client = TenantClient(self.tenant)
        self.user = User.objects.create_teacher(email='teacher@school.com', password='testpass123')

    def post_json(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type='application/json')

    def test_login_success(self):
        """Test a correct email and password signs in."""
        response = self.post_json(reverse('accounts:login'), {
            'email': 'teacher@school.com', 'password': 'testpass123',
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['role'], 'teacher')

    def test_login_wrong_password(self):
        response = self.post_json(reverse('accounts:login'), {
            'email': 'teacher@school.com', 'password': 'wrong',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('Invalid email or password', response.json()['error'])

    def test_logout(self):
        self.client.login(email='teacher@school.com', password='testpass123')
        self.post_json(reverse('accounts:logout'))
        response = self.client.get(reverse('accounts:me'))
        self.assertEqual(response.status_code, 302)

    def test_profile_update_keeps_other_fields(self):
        """Test a partial profile update leaves missing fields alone."""
        self.user.first_name = 'Kofi'
        self.user.save()
        self.client.login(email='teacher@school.com', password='testpass123')

        response = self.post_json(reverse('accounts:me'), {'phone_number': '0241234567'})

        data = response.json()['data']
        self.assertEqual(data['first_name'], 'Kofi')
        self.assertEqual(data['phone_number'], '0241234567')

    def test_must_change_password_blocks_other_actions(self):
        """Test a temporary password only allows the password change."""
        self.user.must_change_password = True
        self.user.save()
        self.client.login(email='teacher@school.com', password='testpass123')

        blocked = self.client.get(reverse('core:index'))
        self.assertEqual(blocked.status_code, 403)

        changed = self.post_json(reverse('accounts:password_change'), {
            'old_password': 'testpass123',
            'new_password1': 'N3w-secure-pass!',
            'new_password2': 'N3w-secure-pass!',
        })
        self.assertEqual(changed.status_code, 200)
        self.user.refresh_from_db()
        self.assertFalse(self.user.must_change_password)
        self.assertEqual(self.client.get(reverse('core:index')).status_code, 200)
