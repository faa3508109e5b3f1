import datetime

from django import forms
from django.utils import timezone
from django_select2.forms import Select2MultipleWidget

from .models import Banner, DailyMenu, MenuItem, Notification, Payment


class MenuItemForm(forms.ModelForm):
    alternatives = forms.CharField(
        required=False,
        help_text="Comma-separated substitutes, only for optional dishes.",
        widget=forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'e.g. Chapati, Appam'}),
    )

    class Meta:
        model = MenuItem
        fields = ['name', 'description', 'is_optional', 'alternatives']
        widgets = {
            'name': forms.TextInput(attrs={'class': 'form-control', 'placeholder': 'Dish name'}),
            'description': forms.Textarea(attrs={'class': 'form-control', 'rows': 3, 'placeholder': 'Description'}),
            'is_optional': forms.CheckboxInput(attrs={'class': 'form-check-input', 'role': 'switch'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.initial['alternatives'] = ", ".join(self.instance.alternatives)

    def clean_alternatives(self):
        raw = self.cleaned_data.get('alternatives') or ''
        return [name.strip() for name in raw.split(',') if name.strip()]

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        clash = MenuItem.objects.filter(name__iexact=name).exclude(pk=self.instance.pk)
        if clash.exists():
            raise forms.ValidationError("Dish with this name already exists.")
        return name


class DailyMenuForm(forms.ModelForm):
    items = forms.ModelMultipleChoiceField(
        queryset=MenuItem.objects.all(),
        widget=Select2MultipleWidget,
        required=True,
        help_text="Search and select the dishes for this meal.",
    )

    class Meta:
        model = DailyMenu
        fields = ['date', 'time_slot', 'items', 'notes', 'cutoff_time']
        widgets = {
            'date': forms.DateInput(attrs={'type': 'date'}),
            'cutoff_time': forms.TimeInput(attrs={'type': 'time'}),
            'notes': forms.Textarea(attrs={'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['cutoff_time'].help_text = "Defaults to 12:00 for afternoon and 18:00 for night."
        tomorrow = timezone.localdate() + datetime.timedelta(days=1)
        self.fields['date'].widget.attrs['min'] = tomorrow.strftime('%Y-%m-%d')
        if not self.instance.pk:
            self.fields['date'].initial = tomorrow

    def clean_date(self):
        date = self.cleaned_data.get('date')
        if date and date <= timezone.localdate():
            raise forms.ValidationError(
                "You can only schedule menus for upcoming dates.",
                code='past_date'
            )
        return date


class BannerForm(forms.ModelForm):
    class Meta:
        model = Banner
        fields = ['title', 'content', 'type', 'is_active']
        widgets = {'content': forms.Textarea(attrs={'rows': 3})}


class NotificationForm(forms.ModelForm):
    class Meta:
        model = Notification
        fields = ['title', 'message', 'type', 'is_active']
        widgets = {'message': forms.Textarea(attrs={'rows': 3})}


class PaymentForm(forms.ModelForm):
    class Meta:
        model = Payment
        fields = ['amount', 'method', 'transaction_id']
