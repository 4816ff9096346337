from django import forms
from decimal import Decimal

from .models import GradingSystem, GradeLevel
from . import config


class GradingSystemForm(forms.ModelForm):
    """Form for creating/editing grading systems."""

    class Meta:
        model = GradingSystem
        fields = ['name', 'description', 'pass_mark']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['pass_mark'].required = False

    def clean_name(self):
        return (self.cleaned_data.get('name') or '').strip()

    def clean_pass_mark(self):
        pass_mark = self.cleaned_data.get('pass_mark')
        if pass_mark is None:
            return self.instance.pass_mark if self.instance.pk else config.DEFAULT_PASS_MARK
        return pass_mark


class GradeLevelForm(forms.ModelForm):
    """Form for creating/editing one grade band of a grading system."""

    class Meta:
        model = GradeLevel
        fields = ['grade', 'min_score', 'max_score', 'remark']

    def __init__(self, *args, grading_system=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.grading_system = grading_system or getattr(self.instance, 'grading_system', None)
        # Set on instance for model validation in clean()
        if grading_system:
            self.instance.grading_system = grading_system

    def clean_grade(self):
        grade = (self.cleaned_data.get('grade') or '').strip().upper()
        if grade and self.grading_system:
            existing = GradeLevel.objects.filter(grading_system=self.grading_system, grade__iexact=grade)
            if self.instance.pk:
                existing = existing.exclude(pk=self.instance.pk)
            if existing.exists():
                raise forms.ValidationError(f'Grade "{grade}" already exists in this grading system')
        return grade

    def clean(self):
        # min <= max and overlap checks run in GradeLevel.clean()
        cleaned_data = super().clean()
        for name in ('min_score', 'max_score'):
            score = cleaned_data.get(name)
            if score is not None and not 0 <= score <= 100:
                raise forms.ValidationError('Scores must be between 0 and 100.')
        return cleaned_data


COMPONENT_LABELS = {'ca1': 'CA1', 'ca2': 'CA2', 'ca3': 'CA3', 'exam': 'Exam'}


class AssessmentEntryForm(forms.Form):
    """
    One student's row in a bulk score save.

    Components are optional; each CA is bounded by ``GRADEBOOK_CA_MAX_SCORE``
    and the exam by ``GRADEBOOK_EXAM_MAX_SCORE``.
    """
    student_id = forms.IntegerField()
    ca1 = forms.DecimalField(required=False, max_digits=5, decimal_places=2)
    ca2 = forms.DecimalField(required=False, max_digits=5, decimal_places=2)
    ca3 = forms.DecimalField(required=False, max_digits=5, decimal_places=2)
    exam = forms.DecimalField(required=False, max_digits=5, decimal_places=2)
    is_absent = forms.BooleanField(required=False)
    is_exempt = forms.BooleanField(required=False)

    @staticmethod
    def component_max(name) -> Decimal:
        return config.EXAM_MAX_SCORE if name == 'exam' else config.CA_MAX_SCORE

    def clean(self):
        cleaned_data = super().clean()
        for name, label in COMPONENT_LABELS.items():
            score = cleaned_data.get(name)
            if score is None:
                continue
            maximum = self.component_max(name)
            if score < 0 or score > maximum:
                raise forms.ValidationError(
                    f"{label} score must be between 0 and {float(maximum):g}, got {float(score):g}"
                )
        if cleaned_data.get('is_absent') and cleaned_data.get('is_exempt'):
            raise forms.ValidationError("A student cannot be both absent and exempt.")
        return cleaned_data
