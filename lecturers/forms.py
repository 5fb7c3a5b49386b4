from django import forms

from gradebook.forms import ApiRequestForm


class LecturerAccountRequestForm(ApiRequestForm):
    missing_message = 'Missing required fields: full_name, email, password, role'

    full_name = forms.CharField(max_length=200)
    email = forms.EmailField()
    password = forms.CharField(min_length=6)
    role = forms.CharField(max_length=20)
    phone = forms.CharField(max_length=20, required=False)

    def clean_role(self):
        role = self.cleaned_data['role']
        if role != 'lecturer':
            raise forms.ValidationError("Only the 'lecturer' role can be created here")
        return role
