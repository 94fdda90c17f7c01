"""Forms validating authentication API payloads."""

from django import forms
from django.contrib.auth import password_validation


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class RegisterForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)
    firstName = forms.CharField(max_length=150, required=False)
    lastName = forms.CharField(max_length=150, required=False)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get("password")
        if password:
            try:
                password_validation.validate_password(password)
            except forms.ValidationError as e:
                self.add_error("password", e)
        return cleaned_data


def first_error(form):
    """Return the first validation message of a bound form."""
    for field, errors in form.errors.items():
        if errors:
            if field == "__all__":
                return errors[0]
            return f"{field}: {errors[0]}"
    return "Invalid input"
