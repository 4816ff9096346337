from django.db import models
from django_tenants.models import TenantMixin, DomainMixin


class School(TenantMixin):
    # Basic Info
    name = models.CharField(max_length=100)
    short_name = models.CharField(max_length=20, blank=True, help_text="Short name for dashboard display")

    # Contact & Address
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    region = models.CharField(max_length=100, blank=True)

    # Administration
    headmaster_name = models.CharField(max_length=100, blank=True, verbose_name="Head's Name")
    headmaster_title = models.CharField(max_length=50, blank=True, default="Headmaster", verbose_name="Head's Title")

    # Suspended schools keep their schema but reject tenant requests
    is_active = models.BooleanField(default=True)

    # Metadata
    created_on = models.DateField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    auto_create_schema = True
    auto_drop_schema = True

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def display_name(self):
        """Return short_name if available, otherwise name."""
        return self.short_name or self.name

    @property
    def primary_domain(self):
        domain = self.domains.filter(is_primary=True).first()
        return domain.domain if domain else None

    def to_dict(self):
        return {
            'id': self.pk,
            'name': self.name,
            'short_name': self.short_name,
            'schema_name': self.schema_name,
            'domain': self.primary_domain,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'city': self.city,
            'region': self.region,
            'headmaster_name': self.headmaster_name,
            'headmaster_title': self.headmaster_title,
            'is_active': self.is_active,
            'created_on': self.created_on,
        }


class Domain(DomainMixin):
    pass
