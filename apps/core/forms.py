# apps/core/forms.py

from django import forms
from django.conf import settings

from .models import TeamMember


class PartialUpdateForm(forms.Form):
    """
    Base form for PATCH payloads

    Every field is optional, but fields listed in `non_empty_fields`
    may not be blanked when they are present.
    """

    non_empty_fields = ()

    def clean(self):
        cleaned_data = super().clean()
        for name in self.non_empty_fields:
            if name in self.errors:
                continue
            if name in self.data and cleaned_data.get(name) in (None, ''):
                self.add_error(name, 'This field cannot be empty.')
        return cleaned_data


class RegisterForm(forms.Form):
    """Account registration"""

    email = forms.EmailField(max_length=254)
    name = forms.CharField(max_length=200)
    password = forms.CharField(min_length=settings.SPRINTBOARD_PASSWORD_MIN_LENGTH, strip=False)


class LoginForm(forms.Form):
    email = forms.EmailField(max_length=254)
    password = forms.CharField(strip=False)


class TeamForm(forms.Form):
    name = forms.CharField(max_length=200)
    slug = forms.SlugField(max_length=100)
    description = forms.CharField(required=False)

    def clean_slug(self):
        return self.cleaned_data['slug'].strip().lower()


class TeamUpdateForm(PartialUpdateForm):
    non_empty_fields = ('name',)

    name = forms.CharField(max_length=200, required=False)
    description = forms.CharField(required=False)


class AddMemberForm(forms.Form):
    email = forms.EmailField(max_length=254)
    role = forms.ChoiceField(choices=TeamMember.ROLE_CHOICES, required=False)

    def clean_role(self):
        return self.cleaned_data.get('role') or TeamMember.ROLE_MEMBER


class ProjectForm(forms.Form):
    team_id = forms.IntegerField()
    name = forms.CharField(max_length=200)
    key = forms.CharField(max_length=20)
    description = forms.CharField(required=False)

    def clean_key(self):
        """Keys are compared upper-case"""
        return self.cleaned_data['key'].strip().upper()


class ProjectUpdateForm(PartialUpdateForm):
    non_empty_fields = ('name',)

    name = forms.CharField(max_length=200, required=False)
    description = forms.CharField(required=False)
    is_archived = forms.BooleanField(required=False)
