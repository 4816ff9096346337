"""
Creating and removing school tenants.

A school is a row in the public schema plus its own Postgres schema; the
first school admin account lives inside that schema.
"""
import logging
import os
import re

from django.core.exceptions import ValidationError
from django_tenants.utils import get_public_schema_name, schema_context

from core.utils import get_object_or_error
from .models import School, Domain

logger = logging.getLogger(__name__)

RESERVED_SCHEMA_NAMES = ('public', 'www', 'admin', 'postgres')


def clean_schema_name(schema_name):
    """
    Validate schema name to prevent 500 errors.
    Must be lowercase, alphanumeric, or underscore. No hyphens.
    """
    schema_name = (schema_name or '').strip().lower()
    if not re.match(r'^[a-z][a-z0-9_]*$', schema_name):
        raise ValidationError(
            "Invalid schema name. Use lowercase letters, numbers, and underscores, "
            "starting with a letter. NO hyphens (-) or spaces allowed."
        )
    if schema_name in RESERVED_SCHEMA_NAMES:
        raise ValidationError(f"The name '{schema_name}' is reserved.")
    return schema_name


def default_domain(schema_name):
    """``<schema>.<BASE_DOMAIN>``, with ``localhost`` for local development."""
    base_domain = os.getenv('BASE_DOMAIN', 'localhost')
    if base_domain == '127.0.0.1':
        base_domain = 'localhost'
    return f'{schema_name}.{base_domain}'


def create_school(name, schema_name, admin_email, admin_password=None, domain=None, **fields):
    """
    Create a school tenant, its primary domain and its first admin account.

    Returns ``(school, admin_user, password)``; ``password`` is the generated
    temporary password when ``admin_password`` is not given. If the admin
    account cannot be created the school and its schema are removed again.
    """
    from accounts.utils import create_account
    from core.models import SchoolSettings

    schema_name = clean_schema_name(schema_name)
    domain = (domain or default_domain(schema_name)).strip().lower()

    with schema_context(get_public_schema_name()):
        if School.objects.filter(schema_name=schema_name).exists():
            raise ValidationError(f'A school with schema "{schema_name}" already exists.')
        if Domain.objects.filter(domain=domain).exists():
            raise ValidationError(f'The domain "{domain}" is already in use.')

        # Saving runs the tenant migrations for the new schema
        school = School(schema_name=schema_name, name=name, **fields)
        school.save()
        Domain.objects.create(domain=domain, tenant=school, is_primary=True)
    logger.info(f"School {name} created with schema {schema_name} and domain {domain}")

    try:
        with schema_context(school.schema_name):
            SchoolSettings.load()
            admin_user, password = create_account(
                'admin', admin_email,
                first_name='School', last_name='Admin',
                password=admin_password,
            )
    except ValidationError:
        logger.error(f"Admin account for {schema_name} failed; removing the school")
        delete_school(school)
        raise

    return school, admin_user, password


def delete_school(school):
    """Delete a school and drop its schema."""
    with schema_context(get_public_schema_name()):
        schema_name = school.schema_name
        school.delete(force_drop=True)
    logger.warning(f"School schema {schema_name} dropped")


def role_counts(school):
    """User counts by role inside one school's schema."""
    from accounts.models import User

    with schema_context(school.schema_name):
        users = User.objects.filter(is_active=True)
        return {
            'admins': users.filter(is_school_admin=True).count(),
            'teachers': users.filter(is_teacher=True).count(),
            'students': users.filter(is_student=True).count(),
            'parents': users.filter(is_parent=True).count(),
        }


def school_performance(per_school, limit=10):
    """
    Schools with the most active students first.

    ``per_school`` rows carry ``role_counts`` keys; only students and teachers
    are kept in the summary.
    """
    ranked = sorted(per_school, key=lambda row: (-row['students'], -row['teachers'], row['name']))
    return [
        {'id': row['id'], 'name': row['name'], 'students': row['students'], 'teachers': row['teachers']}
        for row in ranked[:limit]
    ]


# School admin accounts, managed by super admins from the public schema

def _admins():
    from accounts.models import User
    return User.objects.filter(is_school_admin=True)


def _get_admin(user_id):
    return get_object_or_error(_admins(), "Admin account not found", pk=user_id)


def _is_last_active_admin(user):
    return user.is_active and not _admins().filter(is_active=True).exclude(pk=user.pk).exists()


def school_admins(school):
    with schema_context(school.schema_name):
        return [user.to_dict() for user in _admins().order_by('last_name', 'first_name', 'email')]


def school_admin_detail(school, user_id):
    with schema_context(school.schema_name):
        data = _get_admin(user_id).to_dict()
    data['school'] = {'id': school.pk, 'name': school.name}
    return data


def create_school_admin(school, email, first_name='', last_name='', password=None):
    """Add an admin account to a school. Returns ``(user_dict, password)``."""
    from accounts.utils import create_account

    with schema_context(school.schema_name):
        user, password = create_account(
            'admin', email, first_name=first_name, last_name=last_name, password=password,
        )
        data = user.to_dict()
    logger.info(f"Admin {data['email']} added to {school.schema_name}")
    return data, password


def toggle_school_admin(school, user_id):
    """Deactivate or reactivate an admin; the last active admin stays active."""
    with schema_context(school.schema_name):
        user = _get_admin(user_id)
        if _is_last_active_admin(user):
            raise ValidationError("A school must keep at least one active admin.")
        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])
        data = user.to_dict()
    logger.warning(
        f"Admin {data['email']} in {school.schema_name} {'activated' if data['is_active'] else 'deactivated'}"
    )
    return data


def delete_school_admin(school, user_id):
    with schema_context(school.schema_name):
        user = _get_admin(user_id)
        if _is_last_active_admin(user):
            raise ValidationError("A school must keep at least one active admin.")
        email = user.email
        user.delete()
    logger.warning(f"Admin {email} removed from {school.schema_name}")
