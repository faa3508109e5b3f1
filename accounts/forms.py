import re

from django import forms
from django.contrib.auth.password_validation import validate_password

from kitchen.choices import PlanType, TimePreference
from .models import User


def is_valid_phone(phone):
    """Checks if the phone number is a valid 10-digit number."""
    return re.fullmatch(r'\d{10}', phone or '') is not None


class RegistrationForm(forms.ModelForm):
    password = forms.CharField(widget=forms.PasswordInput(attrs={'class': 'form-control'}))

    class Meta:
        model = User
        fields = ['full_name', 'phone', 'email', 'address', 'latitude', 'longitude', 'time_preference']
        widgets = {
            'full_name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Full name'}),
            'phone': forms.TextInput(attrs={'class': 'form-control', 'placeholder': '10-digit phone'}),
            'email': forms.EmailInput(attrs={'class': 'form-control'}),
            'address': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
            'latitude': forms.HiddenInput(),
            'longitude': forms.HiddenInput(),
            'time_preference': forms.Select(attrs={'class': 'form-control'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('full_name', 'phone', 'email', 'address'):
            self.fields[name].required = True

    def clean_phone(self):
        phone = self.cleaned_data.get('phone')
        if not is_valid_phone(phone):
            raise forms.ValidationError("Please enter a valid 10-digit phone number.")
        return phone

    def clean_email(self):
        email = self.cleaned_data.get('email', '').lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("This email is already registered.")
        return email

    def clean_password(self):
        password = self.cleaned_data.get('password')
        validate_password(password)
        return password

    def save(self, commit=True):
        user = super().save(commit=False)
        user.username = user.email
        user.role = User.Role.MEMBER
        user.plan_type = PlanType.MONTHLY
        user.set_password(self.cleaned_data['password'])
        if commit:
            user.save()
        return user


class LoginForm(forms.Form):
    email = forms.EmailField(widget=forms.EmailInput(attrs={'class': 'form-control'}))
    password = forms.CharField(widget=forms.PasswordInput(attrs={'class': 'form-control'}))


class MemberEditForm(forms.ModelForm):
    """Admin edit of a member's details. Weekly plans cannot be priced, so they are not offered."""

    class Meta:
        model = User
        fields = [
            'full_name', 'phone', 'email', 'address', 'plan_type', 'payment_status',
            'time_preference', 'estimated_delivery_time', 'expiry_date',
        ]
        widgets = {
            'address': forms.Textarea(attrs={'rows': 3}),
            'expiry_date': forms.DateInput(attrs={'type': 'date'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in ('full_name', 'phone', 'email'):
            self.fields[name].required = True
        self.fields['estimated_delivery_time'].help_text = "e.g. 12:30 PM. Fixed at 01:00 PM / 09:00 PM for both times."

    def clean_phone(self):
        phone = self.cleaned_data.get('phone')
        if not is_valid_phone(phone):
            raise forms.ValidationError("Please enter a valid 10-digit phone number.")
        return phone

    def clean_plan_type(self):
        plan_type = self.cleaned_data.get('plan_type')
        if plan_type == PlanType.WEEKLY:
            raise forms.ValidationError("Weekly plans are not offered; choose monthly or yearly.")
        return plan_type

    def clean(self):
        cleaned_data = super().clean()
        preference = cleaned_data.get('time_preference')
        delivery_time = (cleaned_data.get('estimated_delivery_time') or '').strip()
        if preference != TimePreference.BOTH and not delivery_time:
            self.add_error('estimated_delivery_time', "Delivery time is required.")
        return cleaned_data
