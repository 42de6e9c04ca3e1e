import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def score_field():
    return models.PositiveSmallIntegerField(
        validators=[
            django.core.validators.MinValueValidator(1),
            django.core.validators.MaxValueValidator(5),
        ]
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("company", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Evaluation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("technical_score", score_field()),
                ("communication_score", score_field()),
                ("teamwork_score", score_field()),
                ("comments", models.TextField(blank=True, null=True)),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evaluations", to="company.company")),
                ("intern", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="evaluations_received", to=settings.AUTH_USER_MODEL)),
                ("supervisor", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="evaluations_given", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-submitted_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("supervisor", "intern"), name="unique_evaluation_per_supervisor_intern"),
                ],
            },
        ),
    ]
