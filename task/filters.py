import django_filters

from .models import Task, Priority


class TaskFilter(django_filters.FilterSet):
    """Narrow a task list by workflow status, priority or assignee."""

    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    priority = django_filters.ChoiceFilter(choices=Priority.choices)
    intern = django_filters.NumberFilter(field_name="intern_id")
    due_before = django_filters.IsoDateTimeFilter(field_name="due_date", lookup_expr="lte")

    class Meta:
        model = Task
        fields = ["status", "priority", "intern", "due_before"]
