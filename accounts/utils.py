import logging
import secrets
import string

from django.core.exceptions import ValidationError
from django.db import transaction

from .models import User

logger = logging.getLogger(__name__)

ROLE_FLAGS = {
    'admin': 'is_school_admin',
    'teacher': 'is_teacher',
    'student': 'is_student',
    'parent': 'is_parent',
}


def generate_temp_password(length=10):
    """Generate a random temporary password."""
    chars = string.ascii_letters + string.digits
    return ''.join(secrets.choice(chars) for _ in range(length))


def create_account(role, email, first_name='', last_name='', password=None, phone_number=''):
    """
    Create a login for a person with one of the school roles.

    Without ``password`` a temporary one is generated and the user must
    change it on first login. Returns ``(user, password)``.
    """
    email = (email or '').strip().lower()
    if not email:
        raise ValidationError("Email address is required to create an account.")
    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError(f"An account with email '{email}' already exists.")

    temporary = not password
    password = password or generate_temp_password()

    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number or '',
            must_change_password=temporary,
            **{ROLE_FLAGS[role]: True},
        )

    logger.info(f"Created {role} account {email}")
    return user, password
