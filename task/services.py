import logging
from dataclasses import dataclass, fields as dataclass_fields
from datetime import datetime

from accounts.directory import IdentityDirectory
from core import gate
from core.engine import Intent, Operation, Resource, Scope, authorize
from core.exceptions import NotFound, translate_storage_errors
from .models import Task


logger = logging.getLogger(__name__)


def _provided(request):
    return {f.name: getattr(request, f.name) for f in dataclass_fields(request) if getattr(request, f.name) is not None}


@dataclass
class NewTask:
    title: str
    priority: str
    intern_id: int
    description: str = None
    category: str = None
    due_date: datetime = None


@dataclass
class TaskChanges:
    """Partial task update; fields left as ``None`` are not being changed."""

    status: str = None
    title: str = None
    description: str = None
    due_date: datetime = None
    priority: str = None
    category: str = None
    intern_id: int = None

    def provided(self):
        return _provided(self)


def task_intent(operation, task, fields=frozenset()):
    return Intent(
        operation, Resource.TASK,
        company_id=task.company_id,
        supervisor_id=task.supervisor_id,
        intern_id=task.intern_id,
        fields=fields,
    )


class TaskService:

    def __init__(self, directory=None):
        self.directory = directory or IdentityDirectory()

    def _get_or_404(self, task_id):
        task = Task.objects.select_related("supervisor", "intern").filter(pk=task_id).first()
        if task is None:
            raise NotFound("Task not found.")
        return task

    @translate_storage_errors
    def create(self, actor, new_task):
        requested = _provided(new_task)
        allowed = authorize(
            actor,
            Intent(Operation.CREATE, Resource.TASK, company_id=actor.company_id, fields=frozenset(requested)),
            "Forbidden: Only Supervisors can create tasks.",
        )

        intern = gate.check_task_assignee(actor, self.directory.get_user(new_task.intern_id))

        data = {name: value for name, value in requested.items() if name in allowed and name != "intern_id"}
        task = Task.objects.create(
            company_id=actor.company_id,
            supervisor_id=actor.id,
            intern=intern,
            **data,
        )
        logger.info("Task %s created by supervisor %s for intern %s", task.id, actor.id, intern.id)
        return task

    @translate_storage_errors
    def list_assigned(self, actor):
        """Intern view: tasks assigned to the actor, newest first."""
        authorize(
            actor,
            Intent(Operation.READ_MANY, Resource.TASK, company_id=actor.company_id, scope=Scope.ASSIGNED),
            "Forbidden: This route is for Interns to view their tasks.",
        )
        return (
            Task.objects.filter(company_id=actor.company_id, intern_id=actor.id)
            .select_related("supervisor")
            .order_by("-created_at", "-id")
        )

    @translate_storage_errors
    def list_supervised(self, actor):
        """Supervisor view: tasks the actor created, newest first."""
        authorize(
            actor,
            Intent(Operation.READ_MANY, Resource.TASK, company_id=actor.company_id, scope=Scope.SUPERVISED),
            "Forbidden: Only Supervisors can access this route.",
        )
        return (
            Task.objects.filter(company_id=actor.company_id, supervisor_id=actor.id)
            .select_related("intern")
            .order_by("-created_at", "-id")
        )

    @translate_storage_errors
    def get(self, actor, task_id):
        task = self._get_or_404(task_id)
        authorize(
            actor,
            task_intent(Operation.READ, task),
            "Forbidden: You do not have permission to view this task.",
        )
        return task

    @translate_storage_errors
    def update(self, actor, task_id, changes):
        task = self._get_or_404(task_id)
        provided = changes.provided()

        allowed = authorize(actor, task_intent(Operation.UPDATE, task, frozenset(provided)))

        # fields outside the actor's allowance are dropped, not rejected
        updates = {name: value for name, value in provided.items() if name in allowed}

        if "intern_id" in updates:
            gate.check_task_assignee(actor, self.directory.get_user(updates["intern_id"]))

        for name, value in updates.items():
            setattr(task, name, value)
        task.save(update_fields=list(updates))

        return self._get_or_404(task.id)

    @translate_storage_errors
    def delete(self, actor, task_id):
        task = self._get_or_404(task_id)
        authorize(
            actor,
            task_intent(Operation.DELETE, task),
            "Forbidden: Only the supervisor who created this task can delete it.",
        )
        task.delete()
        logger.info("Task %s deleted by %s", task_id, actor.id)
