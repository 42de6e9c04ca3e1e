"""
Authorization engine.

``decide(actor, intent)`` is a pure function: it never touches storage and
never raises. It answers ``Allow(fields)`` or ``Deny(reason)``.

Authorization is role x relationship. Each (resource, operation, scope)
has a decision table keyed by ``(Role, Relation)``; ``ANY`` matches every
relationship. The table value is the set of fields the actor may supply or
change (empty for reads and deletes).

Rules are applied in this order, first match wins:

1. company scoping (resource company != actor company -> CROSS_COMPANY)
2. self-deletion (always SELF_DELETE, whatever the role)
3. the decision table
4. field filtering (updates whose allowed subset is empty -> NO_VALID_FIELDS)
"""
import enum
import logging
from dataclasses import dataclass, field

from accounts.models import Role
from core.exceptions import DenyReason, Forbidden, NoValidFields, SelfDeleteForbidden


logger = logging.getLogger(__name__)


class Operation(enum.Enum):
    CREATE = "create"
    READ = "read"
    READ_MANY = "read_many"
    UPDATE = "update"
    DELETE = "delete"


class Resource(enum.Enum):
    USER = "user"
    TASK = "task"
    EVALUATION = "evaluation"
    COMPANY = "company"
    STATISTICS = "statistics"


class Scope(enum.Enum):
    """Which slice of a collection a read-many (or own-read) targets."""

    ASSIGNED = "assigned"
    SUPERVISED = "supervised"
    OWN = "own"


class Relation(enum.Enum):
    SELF = "self"
    CREATOR = "creator"
    ASSIGNEE = "assignee"
    NONE = "none"


ANY = None


@dataclass(frozen=True)
class Intent:
    operation: Operation
    resource: Resource
    company_id: int = None
    target_id: int = None
    supervisor_id: int = None
    intern_id: int = None
    fields: frozenset = field(default_factory=frozenset)
    scope: Scope = None
    # role of the user being created (user creation only)
    subject_role: Role = None


@dataclass(frozen=True)
class Allow:
    fields: frozenset = frozenset()

    allowed = True


@dataclass(frozen=True)
class Deny:
    reason: DenyReason

    allowed = False


# ---------------------------------------------------------------------
# Field sets
# ---------------------------------------------------------------------

NOTHING = frozenset()

USER_FIELDS = frozenset({"full_name", "email", "role"})
INTERN_FIELDS = frozenset({"domain", "start_date", "end_date", "supervisor_id"})
PASSWORD_FIELDS = frozenset({"password"})

TASK_CREATE_FIELDS = frozenset({"title", "description", "priority", "category", "due_date", "intern_id"})
TASK_STATUS_FIELDS = frozenset({"status"})
TASK_EDIT_FIELDS = frozenset({"status", "title", "description", "due_date", "priority", "category", "intern_id"})

EVALUATION_FIELDS = frozenset({
    "intern_id", "comments", "technical_score", "communication_score", "teamwork_score",
})

COMPANY_FIELDS = frozenset({"name", "logo_url"})


# ---------------------------------------------------------------------
# Decision tables: (resource, operation, scope) -> {(role, relation): fields}
# ---------------------------------------------------------------------

RULES = {
    # Users
    (Resource.USER, Operation.CREATE, None): {
        (Role.ADMIN, ANY): USER_FIELDS | INTERN_FIELDS,
    },
    (Resource.USER, Operation.READ_MANY, None): {
        (Role.ADMIN, ANY): NOTHING,
        (Role.SUPERVISOR, ANY): NOTHING,
    },
    (Resource.USER, Operation.READ, None): {
        (Role.ADMIN, ANY): NOTHING,
        (Role.SUPERVISOR, ANY): NOTHING,
        (Role.INTERN, Relation.SELF): NOTHING,
    },
    (Resource.USER, Operation.UPDATE, None): {
        (Role.ADMIN, ANY): INTERN_FIELDS,
    },
    (Resource.USER, Operation.UPDATE, Scope.OWN): {
        (Role.ADMIN, Relation.SELF): PASSWORD_FIELDS,
        (Role.SUPERVISOR, Relation.SELF): PASSWORD_FIELDS,
        (Role.INTERN, Relation.SELF): PASSWORD_FIELDS,
    },
    (Resource.USER, Operation.DELETE, None): {
        (Role.ADMIN, ANY): NOTHING,
    },

    # Tasks
    (Resource.TASK, Operation.CREATE, None): {
        (Role.SUPERVISOR, ANY): TASK_CREATE_FIELDS,
    },
    (Resource.TASK, Operation.READ_MANY, Scope.ASSIGNED): {
        (Role.INTERN, ANY): NOTHING,
    },
    (Resource.TASK, Operation.READ_MANY, Scope.SUPERVISED): {
        (Role.SUPERVISOR, ANY): NOTHING,
    },
    (Resource.TASK, Operation.READ, None): {
        (Role.ADMIN, ANY): NOTHING,
        (Role.SUPERVISOR, Relation.CREATOR): NOTHING,
        (Role.INTERN, Relation.ASSIGNEE): NOTHING,
    },
    (Resource.TASK, Operation.UPDATE, None): {
        (Role.INTERN, Relation.ASSIGNEE): TASK_STATUS_FIELDS,
        (Role.SUPERVISOR, Relation.CREATOR): TASK_EDIT_FIELDS,
        (Role.ADMIN, ANY): TASK_EDIT_FIELDS,
    },
    # Admins may edit any task but not delete one
    (Resource.TASK, Operation.DELETE, None): {
        (Role.SUPERVISOR, Relation.CREATOR): NOTHING,
    },

    # Evaluations (immutable: no update/delete entries)
    (Resource.EVALUATION, Operation.CREATE, None): {
        (Role.SUPERVISOR, ANY): EVALUATION_FIELDS,
    },
    (Resource.EVALUATION, Operation.READ, Scope.OWN): {
        (Role.INTERN, ANY): NOTHING,
    },
    (Resource.EVALUATION, Operation.READ_MANY, Scope.SUPERVISED): {
        (Role.SUPERVISOR, ANY): NOTHING,
    },

    # Company
    (Resource.COMPANY, Operation.READ, None): {
        (Role.ADMIN, ANY): NOTHING,
        (Role.SUPERVISOR, ANY): NOTHING,
        (Role.INTERN, ANY): NOTHING,
    },
    (Resource.COMPANY, Operation.UPDATE, None): {
        (Role.ADMIN, ANY): COMPANY_FIELDS,
    },

    (Resource.STATISTICS, Operation.READ, None): {
        (Role.ADMIN, ANY): NOTHING,
    },
}


def relation_of(actor, intent):
    if intent.resource == Resource.USER:
        if intent.target_id is not None and intent.target_id == actor.id:
            return Relation.SELF
        return Relation.NONE

    if intent.supervisor_id is not None and intent.supervisor_id == actor.id:
        return Relation.CREATOR
    if intent.intern_id is not None and intent.intern_id == actor.id:
        return Relation.ASSIGNEE
    return Relation.NONE


def _permitted_fields(table, role, relation):
    for key in ((role, relation), (role, ANY)):
        if key in table:
            return table[key]
    return None


def decide(actor, intent):
    if intent.company_id is not None and intent.company_id != actor.company_id:
        return Deny(DenyReason.CROSS_COMPANY)

    if (
        intent.resource == Resource.USER
        and intent.operation == Operation.DELETE
        and intent.target_id == actor.id
    ):
        return Deny(DenyReason.SELF_DELETE)

    table = RULES.get((intent.resource, intent.operation, intent.scope))
    if table is None:
        # operation does not exist for this resource
        return Deny(DenyReason.WRONG_ROLE)

    relation = relation_of(actor, intent)
    permitted = _permitted_fields(table, actor.role, relation)

    if permitted is None:
        # right role, wrong relationship
        if any(role == actor.role for role, _ in table):
            return Deny(DenyReason.NOT_OWNER)
        return Deny(DenyReason.WRONG_ROLE)

    if intent.resource == Resource.USER and intent.operation == Operation.CREATE:
        if intent.subject_role != Role.INTERN:
            permitted = permitted - INTERN_FIELDS

    fields = permitted & frozenset(intent.fields)

    if intent.operation == Operation.UPDATE and not fields:
        return Deny(DenyReason.NO_VALID_FIELDS)

    return Allow(fields)


DENY_MESSAGES = {
    DenyReason.CROSS_COMPANY: "Forbidden: This resource belongs to another company.",
    DenyReason.WRONG_ROLE: "Forbidden: Your role is not allowed to perform this action.",
    DenyReason.NOT_OWNER: "Forbidden: Insufficient permissions or not the assigned user/supervisor.",
}


def authorize(actor, intent, message=None):
    """
    Run ``decide`` and raise the matching failure on Deny.

    Returns the allowed field subset on Allow.
    """
    decision = decide(actor, intent)
    if decision.allowed:
        return decision.fields

    logger.debug(
        "Denied %s %s for user %s (%s): %s",
        intent.operation.value, intent.resource.value, actor.id, actor.role, decision.reason.value,
    )

    if decision.reason == DenyReason.SELF_DELETE:
        raise SelfDeleteForbidden()
    if decision.reason == DenyReason.NO_VALID_FIELDS:
        raise NoValidFields()
    if decision.reason == DenyReason.CROSS_COMPANY or not message:
        message = DENY_MESSAGES[decision.reason]
    raise Forbidden(decision.reason, message)
