import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction

from accounts.directory import IdentityDirectory
from core import gate
from core.engine import Intent, Operation, Resource, Scope, authorize
from core.exceptions import AlreadyEvaluated, NotFound, translate_storage_errors
from .models import Evaluation


logger = logging.getLogger(__name__)


@dataclass
class EvaluationSubmission:
    intern_id: int
    technical_score: int
    communication_score: int
    teamwork_score: int
    comments: str = None


class EvaluationService:
    """Evaluations are immutable once submitted: there is no update or delete."""

    def __init__(self, directory=None):
        self.directory = directory or IdentityDirectory()

    @translate_storage_errors
    def submit(self, actor, submission, now=None):
        authorize(
            actor,
            Intent(
                Operation.CREATE, Resource.EVALUATION,
                company_id=actor.company_id,
                intern_id=submission.intern_id,
                fields=frozenset(vars(submission)),
            ),
            "Forbidden: Only Supervisors can submit evaluations.",
        )

        intern = gate.check_evaluation_submission(
            actor,
            self.directory.get_user(submission.intern_id),
            already_evaluated=lambda: Evaluation.objects.filter(
                supervisor_id=actor.id, intern_id=submission.intern_id
            ).exists(),
            now=now,
        )

        # the unique constraint settles a race between two submissions
        try:
            with transaction.atomic():
                evaluation = Evaluation.objects.create(
                    company_id=actor.company_id,
                    supervisor_id=actor.id,
                    intern=intern,
                    technical_score=submission.technical_score,
                    communication_score=submission.communication_score,
                    teamwork_score=submission.teamwork_score,
                    comments=submission.comments,
                )
        except IntegrityError:
            raise AlreadyEvaluated()

        logger.info("Evaluation %s submitted by %s for intern %s", evaluation.id, actor.id, intern.id)
        return evaluation

    @translate_storage_errors
    def get_own(self, actor):
        """Intern view: the most recent evaluation received."""
        authorize(
            actor,
            Intent(Operation.READ, Resource.EVALUATION, company_id=actor.company_id, scope=Scope.OWN),
            "Forbidden: Only Interns can view their own evaluation.",
        )
        evaluation = (
            Evaluation.objects.filter(company_id=actor.company_id, intern_id=actor.id)
            .select_related("supervisor", "intern")
            .order_by("-submitted_at", "-id")
            .first()
        )
        if evaluation is None:
            raise NotFound("No evaluation found.")
        return evaluation

    @translate_storage_errors
    def list_supervised(self, actor):
        authorize(
            actor,
            Intent(Operation.READ_MANY, Resource.EVALUATION, company_id=actor.company_id, scope=Scope.SUPERVISED),
            "Forbidden: Only Supervisors can view submitted evaluations.",
        )
        return (
            Evaluation.objects.filter(company_id=actor.company_id, supervisor_id=actor.id)
            .select_related("intern")
            .order_by("-submitted_at", "-id")
        )
