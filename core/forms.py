from django import forms

from .models import SchoolSettings, AcademicYear, Term
from students.admission import validate_admission_format


class SchoolInformationForm(forms.Form):
    """School information (spans the School tenant row and SchoolSettings)."""
    name = forms.CharField(max_length=100, label='School Name')
    short_name = forms.CharField(max_length=20, required=False)
    display_name = forms.CharField(max_length=50, required=False)
    motto = forms.CharField(max_length=200, required=False)
    email = forms.EmailField(required=False)
    phone = forms.CharField(max_length=20, required=False)
    address = forms.CharField(required=False)
    city = forms.CharField(max_length=100, required=False)
    region = forms.CharField(max_length=100, required=False)
    headmaster_name = forms.CharField(max_length=100, required=False)
    headmaster_title = forms.CharField(max_length=50, required=False)
    academic_period_type = forms.ChoiceField(
        choices=SchoolSettings.PERIOD_TYPE_CHOICES, required=False
    )

    SCHOOL_FIELDS = (
        'name', 'short_name', 'email', 'phone', 'address', 'city', 'region',
        'headmaster_name', 'headmaster_title',
    )
    SETTINGS_FIELDS = ('display_name', 'motto', 'academic_period_type')

    def save(self, school, school_settings):
        for field in self.SCHOOL_FIELDS:
            setattr(school, field, self.cleaned_data[field])
        school.save()
        for field in self.SETTINGS_FIELDS:
            value = self.cleaned_data[field]
            if field == 'academic_period_type' and not value:
                continue
            setattr(school_settings, field, value)
        school_settings.save()
        return school, school_settings


class AdmissionSettingsForm(forms.ModelForm):
    """Admission number prefix, template and starting sequence."""
    class Meta:
        model = SchoolSettings
        fields = ['admission_prefix', 'admission_format', 'admission_sequence_start']

    def clean_admission_format(self):
        template = self.cleaned_data['admission_format']
        validate_admission_format(template)
        return template

    def clean_admission_sequence_start(self):
        start = self.cleaned_data['admission_sequence_start']
        if start < 1:
            raise forms.ValidationError("Sequence start must be at least 1.")
        return start


class AcademicYearForm(forms.ModelForm):
    """Form for creating/editing academic years."""
    class Meta:
        model = AcademicYear
        fields = ['name', 'start_date', 'end_date', 'is_current']

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')

        if start_date and end_date and start_date >= end_date:
            raise forms.ValidationError("End date must be after start date.")

        # Terms already inside this year must still fit
        if self.instance.pk and start_date and end_date:
            outside = self.instance.terms.exclude(start_date__gte=start_date, end_date__lte=end_date)
            if outside.exists():
                raise forms.ValidationError(
                    f"{outside.first().name} falls outside the new dates. Update its dates first."
                )

        return cleaned_data


class TermForm(forms.ModelForm):
    """Form for creating/editing terms/semesters."""
    class Meta:
        model = Term
        fields = ['academic_year', 'name', 'term_number', 'start_date', 'end_date', 'is_current']

    def __init__(self, *args, period_type='term', **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['academic_year'].queryset = AcademicYear.objects.all()
        period_label = 'Semester' if period_type == 'semester' else 'Term'
        self.fields['name'].label = f'{period_label} Name'
        self.fields['term_number'].label = f'{period_label} Number'

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        academic_year = cleaned_data.get('academic_year')

        if start_date and end_date and start_date >= end_date:
            raise forms.ValidationError("End date must be after start date.")

        # Validate term dates are within academic year
        if academic_year and start_date and end_date:
            if start_date < academic_year.start_date or end_date > academic_year.end_date:
                raise forms.ValidationError(
                    f"Dates must be within the academic year ({academic_year.start_date} - {academic_year.end_date})."
                )

        return cleaned_data


class DateRangeForm(forms.Form):
    """Start/end pair used by the calendar date updates."""
    start_date = forms.DateField()
    end_date = forms.DateField()

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')
        if start_date and end_date and start_date >= end_date:
            raise forms.ValidationError("End date must be after start date.")
        return cleaned_data
