import logging

from django.contrib.auth import login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import PasswordChangeForm
from django.views.decorators.http import require_POST

from core.utils import json_action, get_payload, form_error, bind_form
from .forms import LoginForm, ProfileForm

logger = logging.getLogger(__name__)


@require_POST
@json_action
def login_view(request):
    """Sign in with email and password."""
    payload = get_payload(request)
    form = LoginForm(request, data={
        'username': payload.get('email') or payload.get('username'),
        'password': payload.get('password'),
    })
    if not form.is_valid():
        logger.warning(f"Failed login for {payload.get('email') or payload.get('username')}")
        return form_error(form)

    user = form.get_user()
    login(request, user)
    logger.info(f"{user} signed in")
    return user.to_dict()


@require_POST
@json_action
def logout_view(request):
    if request.user.is_authenticated:
        logger.info(f"{request.user} signed out")
    logout(request)
    return {'logged_out': True}


@login_required
@json_action
def me(request):
    """Read or update the signed-in user's profile."""
    user = request.user
    if request.method == 'POST':
        form = bind_form(ProfileForm, get_payload(request), instance=user)
        if not form.is_valid():
            return form_error(form)
        user = form.save()
    return user.to_dict()


@login_required
@require_POST
@json_action
def password_change(request):
    """
    Change the signed-in user's password and clear the must_change_password
    flag.
    """
    form = PasswordChangeForm(request.user, get_payload(request))
    if not form.is_valid():
        return form_error(form)

    user = form.save()
    if user.must_change_password:
        user.must_change_password = False
        user.save(update_fields=['must_change_password'])
    update_session_auth_hash(request, user)
    logger.info(f"{user} changed their password")
    return user.to_dict()
