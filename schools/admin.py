import logging

from django import forms
from django.conf import settings
from django.contrib import admin
from django.core.exceptions import ValidationError
from django.utils.html import format_html
from django_tenants.utils import schema_context, get_public_schema_name

from .models import School, Domain
from .services import clean_schema_name

logger = logging.getLogger(__name__)


class SchoolAdminForm(forms.ModelForm):
    """School admin form; new schools also get their first admin user."""

    admin_email = forms.EmailField(required=False, label="Principal Email")
    admin_password = forms.CharField(required=False, label="Principal Password", widget=forms.PasswordInput)

    class Meta:
        model = School
        fields = '__all__'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.pk:
            self.fields['admin_email'].required = True

    def clean_schema_name(self):
        return clean_schema_name(self.cleaned_data.get('schema_name'))


class DomainInline(admin.TabularInline):
    model = Domain
    extra = 0
    max_num = 1
    min_num = 1
    fields = ('domain', 'is_primary')
    verbose_name = "School Domain"


@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    form = SchoolAdminForm
    inlines = [DomainInline]

    list_display = ('name', 'schema_name', 'get_domain_link', 'is_active', 'created_on')
    list_filter = ('is_active',)
    search_fields = ('name', 'schema_name')
    readonly_fields = ('created_on',)

    def get_domain_link(self, obj):
        domain = obj.domains.filter(is_primary=True).first() or obj.domains.first()
        if domain:
            # Handle standard ports for local dev vs prod
            port = ":8000" if settings.DEBUG else ""
            protocol = "http" if settings.DEBUG else "https"
            return format_html('<a href="{}://{}{}" target="_blank">{}</a>', protocol, domain.domain, port, domain.domain)
        return "-"
    get_domain_link.short_description = "Domain"

    def save_model(self, request, obj, form, change):
        """Save school in public schema and create admin user"""
        from accounts.utils import create_account

        with schema_context(get_public_schema_name()):
            is_new = obj.pk is None
            # This triggers the django-tenants 'create_schema' logic
            super().save_model(request, obj, form, change)

        if not is_new:
            return

        admin_email = form.cleaned_data.get('admin_email')
        try:
            with schema_context(obj.schema_name):
                _, password = create_account(
                    'admin', admin_email, first_name='School', last_name='Admin',
                    password=form.cleaned_data.get('admin_password') or None,
                )
        except ValidationError as e:
            logger.error(f"Failed to create admin for {obj.name}: {e}")
            self.message_user(request, f"School created, but Admin User failed: {'; '.join(e.messages)}", level='error')
            return

        if not form.cleaned_data.get('admin_password'):
            self.message_user(request, f"Admin {admin_email} created. Temporary password: {password}")
        else:
            self.message_user(request, f"Admin {admin_email} created successfully.")

    # Ensure deletions happen in public context
    def delete_model(self, request, obj):
        with schema_context(get_public_schema_name()):
            super().delete_model(request, obj)
