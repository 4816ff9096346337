from django import forms

from .models import Class, Subject


class ClassForm(forms.ModelForm):
    """Form for creating/editing classes."""

    LEVEL_NUMBER_CHOICES = [('', 'Select level')] + [(i, str(i)) for i in range(1, 7)]

    level_number = forms.TypedChoiceField(choices=LEVEL_NUMBER_CHOICES, coerce=int)

    class Meta:
        model = Class
        fields = ['level_type', 'level_number', 'section', 'capacity', 'class_teacher', 'is_active']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        from teachers.models import Teacher
        self.fields['class_teacher'].queryset = Teacher.objects.filter(status='active')
        self.fields['class_teacher'].required = False
        self.fields['class_teacher'].label = "Form Tutor / Class Teacher"
        self.fields['is_active'].required = False

    def clean_section(self):
        return self.cleaned_data['section'].strip().upper()

    def clean_capacity(self):
        capacity = self.cleaned_data.get('capacity')
        if capacity is not None and capacity < 1:
            raise forms.ValidationError('Capacity must be at least 1.')
        return capacity

    def clean(self):
        cleaned_data = super().clean()
        level_type = cleaned_data.get('level_type')
        level_number = cleaned_data.get('level_number')

        if level_type == Class.LevelType.KG and level_number and level_number > 2:
            self.add_error('level_number', 'KG only has levels 1-2.')
        elif level_type == Class.LevelType.PRIMARY and level_number and level_number > 6:
            self.add_error('level_number', 'Primary only has levels 1-6.')
        elif level_type == Class.LevelType.JHS and level_number and level_number > 3:
            self.add_error('level_number', 'JHS only has levels 1-3.')
        elif level_type == Class.LevelType.SHS and level_number and level_number > 3:
            self.add_error('level_number', 'SHS only has levels 1-3.')

        return cleaned_data


class SubjectForm(forms.ModelForm):
    """Form for creating/editing subjects."""
    class Meta:
        model = Subject
        fields = ['name', 'short_name', 'code', 'description', 'is_core', 'is_active']
        labels = {
            'is_core': 'Core Subject',
        }

    def clean_name(self):
        return self.cleaned_data['name'].strip()

    def clean_short_name(self):
        return self.cleaned_data.get('short_name', '').strip().upper()
