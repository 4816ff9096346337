from django import forms
from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError

from .models import School
from .services import clean_schema_name


class SchoolForm(forms.ModelForm):
    """School details editable by the platform admin."""
    class Meta:
        model = School
        fields = [
            'name', 'short_name', 'email', 'phone', 'address', 'city', 'region',
            'headmaster_name', 'headmaster_title',
        ]


class SchoolCreationForm(SchoolForm):
    """New school: details plus schema, domain and the first admin user."""
    schema_name = forms.CharField(max_length=63)
    domain = forms.CharField(max_length=253, required=False)
    admin_email = forms.EmailField(label="Principal Email")
    admin_password = forms.CharField(required=False, strip=False, label="Principal Password")

    def clean_schema_name(self):
        return clean_schema_name(self.cleaned_data.get('schema_name'))

    def clean_admin_password(self):
        password = self.cleaned_data.get('admin_password')
        if password:
            try:
                validate_password(password)
            except ValidationError as e:
                # Development setups may use short passwords
                if not settings.DEBUG:
                    raise forms.ValidationError(e.messages)
        return password

    def create(self):
        from .services import create_school

        data = dict(self.cleaned_data)
        return create_school(
            name=data.pop('name'),
            schema_name=data.pop('schema_name'),
            admin_email=data.pop('admin_email'),
            admin_password=data.pop('admin_password') or None,
            domain=data.pop('domain') or None,
            **data
        )
