import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("company", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Task",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("priority", models.CharField(choices=[("LOW", "Low"), ("MEDIUM", "Medium"), ("HIGH", "High")], max_length=10)),
                ("category", models.CharField(blank=True, max_length=100, null=True)),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                ("status", models.CharField(db_index=True, default="PENDING", max_length=30)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="tasks", to="company.company")),
                ("intern", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="assigned_tasks", to=settings.AUTH_USER_MODEL)),
                ("supervisor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="created_tasks", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["intern", "-created_at"], name="task_intern_created_idx"),
                    models.Index(fields=["supervisor", "-created_at"], name="task_supervisor_created_idx"),
                ],
            },
        ),
    ]
