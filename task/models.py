from django.conf import settings
from django.db import models


class Priority(models.TextChoices):
    LOW = "LOW", "Low"
    MEDIUM = "MEDIUM", "Medium"
    HIGH = "HIGH", "High"


class Task(models.Model):
    company = models.ForeignKey("company.Company", on_delete=models.CASCADE, related_name="tasks")

    # PROTECT: a user with tasks cannot be deleted until tasks are reassigned
    supervisor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_tasks",
    )
    intern = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assigned_tasks",
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    priority = models.CharField(max_length=10, choices=Priority.choices)
    category = models.CharField(max_length=100, blank=True, null=True)
    due_date = models.DateTimeField(blank=True, null=True)

    # Free-form workflow label (PENDING / IN_PROGRESS / DONE ...)
    status = models.CharField(max_length=30, default="PENDING", db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["intern", "-created_at"], name="task_intern_created_idx"),
            models.Index(fields=["supervisor", "-created_at"], name="task_supervisor_created_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"
