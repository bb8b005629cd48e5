# apps/board/forms.py

from datetime import timedelta

from django import forms
from django.conf import settings

from apps.core.forms import PartialUpdateForm
from apps.core.models import Sprint, Task

from .kanban import VIEWS, VIEW_SPRINT


class SprintForm(forms.Form):
    """Sprint creation; end_date defaults to a standard sprint length"""

    name = forms.CharField(max_length=200)
    goal = forms.CharField(required=False)
    start_date = forms.DateTimeField()
    end_date = forms.DateTimeField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')

        if start_date and not end_date and 'end_date' not in self.errors:
            cleaned_data['end_date'] = start_date + timedelta(days=settings.SPRINTBOARD_DEFAULT_SPRINT_DAYS)
        elif start_date and end_date and end_date < start_date:
            self.add_error('end_date', 'End date must not be before start date.')

        return cleaned_data


class SprintUpdateForm(PartialUpdateForm):
    non_empty_fields = ('name', 'start_date', 'end_date', 'status')

    name = forms.CharField(max_length=200, required=False)
    goal = forms.CharField(required=False)
    start_date = forms.DateTimeField(required=False)
    end_date = forms.DateTimeField(required=False)
    status = forms.ChoiceField(choices=Sprint.STATUS_CHOICES, required=False)

    def __init__(self, *args, sprint=None, **kwargs):
        self.sprint = sprint
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date') if 'start_date' in self.data else None
        end_date = cleaned_data.get('end_date') if 'end_date' in self.data else None
        if self.sprint is not None:
            start_date = start_date or self.sprint.start_date
            end_date = end_date or self.sprint.end_date
        if start_date and end_date and end_date < start_date:
            self.add_error('end_date', 'End date must not be before start date.')

        return cleaned_data


class LabelsField(forms.JSONField):
    """JSON list of strings"""

    def clean(self, value):
        value = super().clean(value)
        if value in (None, ''):
            return []
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise forms.ValidationError('Labels must be a list of strings.')
        return value


class TaskForm(forms.Form):
    """Task creation"""

    title = forms.CharField(max_length=300)
    description = forms.CharField(required=False)
    type = forms.ChoiceField(choices=Task.TYPE_CHOICES, required=False)
    status = forms.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = forms.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    story_points = forms.IntegerField(min_value=0, required=False)
    labels = LabelsField(required=False)
    position = forms.IntegerField(required=False)
    sprint_id = forms.IntegerField(required=False)
    assignee_id = forms.IntegerField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        cleaned_data['type'] = cleaned_data.get('type') or 'TASK'
        cleaned_data['status'] = cleaned_data.get('status') or Task.STATUS_TODO
        cleaned_data['priority'] = cleaned_data.get('priority') or 'MEDIUM'
        if cleaned_data.get('position') is None:
            cleaned_data['position'] = 0
        return cleaned_data


class TaskUpdateForm(PartialUpdateForm):
    """Editable task fields; only keys present in the payload are applied"""

    non_empty_fields = ('title', 'type', 'status', 'priority', 'position')

    title = forms.CharField(max_length=300, required=False)
    description = forms.CharField(required=False)
    type = forms.ChoiceField(choices=Task.TYPE_CHOICES, required=False)
    status = forms.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = forms.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    story_points = forms.IntegerField(min_value=0, required=False)
    labels = LabelsField(required=False)
    position = forms.IntegerField(required=False)
    sprint_id = forms.IntegerField(required=False)
    assignee_id = forms.IntegerField(required=False)


class MoveForm(forms.Form):
    status = forms.ChoiceField(choices=Task.STATUS_CHOICES)
    position = forms.IntegerField(required=False)
    sprint_id = forms.IntegerField(required=False)
    assignee_id = forms.IntegerField(required=False)


class DropForm(forms.Form):
    over_id = forms.CharField(required=False)
    view = forms.ChoiceField(choices=[(view, view) for view in VIEWS], required=False)
    sprint_id = forms.IntegerField(required=False)

    def clean_view(self):
        return self.cleaned_data.get('view') or VIEW_SPRINT


class CommentForm(forms.Form):
    content = forms.CharField()
