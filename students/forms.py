from django import forms

from core.choices import RelationshipType
from .models import Student, Parent, StudentTransition


class StudentForm(forms.ModelForm):
    """Form for creating/editing individual students.

    ``admission_number`` may be left blank on create, in which case the next
    number from the admission sequence is allocated.
    """

    class Meta:
        model = Student
        fields = [
            # Personal info
            'first_name', 'last_name', 'other_names',
            'date_of_birth', 'gender',
            'address', 'phone',
            # Admission
            'admission_number', 'admission_date',
            # Status
            'status',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['admission_number'].required = False
        self.fields['admission_date'].required = False
        self.fields['status'].required = False

    def clean_admission_number(self):
        value = (self.cleaned_data.get('admission_number') or '').strip()
        if value:
            clash = Student.objects.filter(admission_number__iexact=value).exclude(pk=self.instance.pk)
            if clash.exists():
                raise forms.ValidationError(f"Admission number {value} is already in use.")
        return value

    def clean(self):
        cleaned_data = super().clean()
        # Blank optional fields fall back to model defaults
        if not cleaned_data.get('status'):
            cleaned_data['status'] = self.instance.status or Student.Status.ACTIVE
        if not cleaned_data.get('admission_date') and self.instance.admission_date:
            cleaned_data['admission_date'] = self.instance.admission_date
        return cleaned_data


class ParentForm(forms.ModelForm):
    """Form for creating/editing parents and guardians."""
    class Meta:
        model = Parent
        fields = [
            'first_name', 'middle_name', 'last_name', 'gender',
            'phone_number', 'email', 'occupation', 'address',
        ]

    def clean_phone_number(self):
        phone = (self.cleaned_data.get('phone_number') or '').strip()
        if not phone and not self.data.get('email'):
            raise forms.ValidationError("Provide a phone number or an email address.")
        return phone


class StudentParentForm(forms.Form):
    """Link a parent to a student."""
    student = forms.ModelChoiceField(queryset=Student.objects.all())
    parent = forms.ModelChoiceField(queryset=Parent.objects.all())
    relationship = forms.ChoiceField(
        choices=RelationshipType.choices,
        initial=RelationshipType.GUARDIAN,
        required=False,
    )
    is_primary = forms.BooleanField(required=False, initial=False)

    def clean_relationship(self):
        return self.cleaned_data.get('relationship') or RelationshipType.GUARDIAN


class TransitionForm(forms.Form):
    """Move a group of students from one class term to another."""
    from_class_term = forms.IntegerField()
    to_class_term = forms.IntegerField()
    transition_type = forms.ChoiceField(choices=StudentTransition.TransitionType.choices)
    notes = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if (cleaned_data.get('from_class_term') is not None
                and cleaned_data.get('from_class_term') == cleaned_data.get('to_class_term')):
            raise forms.ValidationError("Source and destination class terms must differ.")
        return cleaned_data
