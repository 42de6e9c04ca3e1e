from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


SCORE_VALIDATORS = [MinValueValidator(1), MaxValueValidator(5)]


class Evaluation(models.Model):
    """
    End-of-internship evaluation of an intern by their supervisor.
    Immutable once submitted; one per (supervisor, intern) pair.
    """

    company = models.ForeignKey("company.Company", on_delete=models.CASCADE, related_name="evaluations")

    supervisor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="evaluations_given",
    )
    intern = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="evaluations_received",
    )

    technical_score = models.PositiveSmallIntegerField(validators=SCORE_VALIDATORS)
    communication_score = models.PositiveSmallIntegerField(validators=SCORE_VALIDATORS)
    teamwork_score = models.PositiveSmallIntegerField(validators=SCORE_VALIDATORS)
    comments = models.TextField(blank=True, null=True)

    submitted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-submitted_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["supervisor", "intern"],
                name="unique_evaluation_per_supervisor_intern",
            )
        ]

    def __str__(self):
        return f"Evaluation of {self.intern_id} by {self.supervisor_id}"
