from django import forms
from .models import Teacher


class TeacherForm(forms.ModelForm):
    class Meta:
        model = Teacher
        # We can list fields explicitly to control order
        fields = [
            'title', 'first_name', 'middle_name', 'last_name', 'gender',
            'date_of_birth', 'staff_id', 'status',
            'subject_specialization', 'qualification', 'employment_date',
            'phone_number', 'email', 'address',
        ]

    def clean_staff_id(self):
        return self.cleaned_data['staff_id'].strip().upper()
