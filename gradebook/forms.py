from django import forms
from django.core.exceptions import NON_FIELD_ERRORS

from core.utils import normalize_payload


class ApiRequestForm(forms.Form):
    """
    Validates a JSON request body. Keys may be camelCase or snake_case.

    When a required field is absent, error_message() returns the form's
    missing_message so callers get the plain message the API documents.
    """
    missing_message = 'Missing required parameters'

    def __init__(self, payload=None, **kwargs):
        super().__init__(data=normalize_payload(payload or {}), **kwargs)

    def error_message(self):
        for name, field in self.fields.items():
            if field.required and name in self.errors:
                if any(error.code == 'required' for error in self.errors.as_data()[name]):
                    return self.missing_message
        name, errors = next(iter(self.errors.items()))
        if name == NON_FIELD_ERRORS:
            return errors[0]
        return f"{name}: {errors[0]}"


class ReportCardRequestForm(ApiRequestForm):
    FORMAT_CHOICES = [
        ('json', 'JSON'),
        ('html', 'HTML'),
        ('pdf', 'PDF'),
        ('excel', 'Excel'),
    ]
    missing_message = 'Missing required parameters: termId, academicYearId'

    term_id = forms.IntegerField(min_value=1)
    academic_year_id = forms.IntegerField(min_value=1)
    student_id = forms.IntegerField(min_value=1, required=False)
    department_id = forms.IntegerField(min_value=1, required=False)
    level_id = forms.IntegerField(min_value=1, required=False)
    format = forms.ChoiceField(choices=FORMAT_CHOICES, required=False)

    def clean_format(self):
        return self.cleaned_data.get('format') or 'json'


class StatisticsRequestForm(ApiRequestForm):
    FORMAT_CHOICES = [
        ('json', 'JSON'),
        ('excel', 'Excel'),
    ]
    missing_message = 'Missing parameters'

    academic_year_id = forms.IntegerField(min_value=1)
    term_label = forms.CharField(max_length=20)
    department_id = forms.IntegerField(min_value=1, required=False)
    level_id = forms.IntegerField(min_value=1, required=False)
    class_id = forms.IntegerField(min_value=1, required=False)
    format = forms.ChoiceField(choices=FORMAT_CHOICES, required=False)

    def clean_format(self):
        return self.cleaned_data.get('format') or 'json'


class AnnualAveragesRequestForm(ApiRequestForm):
    missing_message = 'academic_year_id is required'

    academic_year_id = forms.IntegerField(min_value=1)
    student_id = forms.IntegerField(min_value=1, required=False)
    level_id = forms.IntegerField(min_value=1, required=False)


class RepeatersRequestForm(ApiRequestForm):
    academic_year_id = forms.IntegerField(min_value=1, required=False)
    level_id = forms.IntegerField(min_value=1, required=False)


class PromotionRequestForm(ApiRequestForm):
    missing_message = 'academic_year_id and next_academic_year_id are required'

    academic_year_id = forms.IntegerField(min_value=1)
    next_academic_year_id = forms.IntegerField(min_value=1)

    def clean(self):
        cleaned_data = super().clean()
        current = cleaned_data.get('academic_year_id')
        if current and current == cleaned_data.get('next_academic_year_id'):
            raise forms.ValidationError('The next academic year must differ from the current one')
        return cleaned_data


class StudentTermRequestForm(ApiRequestForm):
    missing_message = 'Missing required parameters: studentId, termId, academicYearId'

    student_id = forms.IntegerField(min_value=1)
    term_id = forms.IntegerField(min_value=1)
    academic_year_id = forms.IntegerField(min_value=1)


class StudentPositionRequestForm(StudentTermRequestForm):
    department_id = forms.IntegerField(min_value=1, required=False)
    level_id = forms.IntegerField(min_value=1, required=False)


class CourseMarksRequestForm(ApiRequestForm):
    missing_message = 'Missing required parameters: courseId, termId, academicYearId'

    course_id = forms.IntegerField(min_value=1)
    term_id = forms.IntegerField(min_value=1)
    academic_year_id = forms.IntegerField(min_value=1)
