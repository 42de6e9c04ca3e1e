import logging
from dataclasses import dataclass, fields as dataclass_fields, replace
from datetime import datetime

from django.contrib.auth.hashers import check_password, make_password
from django.db import IntegrityError, transaction

from core import gate
from core.engine import Intent, Operation, Resource, Scope, authorize
from core.exceptions import (
    DuplicateEmail,
    InvalidCredentials,
    NotFound,
    ValidationFailed,
    translate_storage_errors,
)
from .directory import IdentityDirectory
from .mail import WelcomeNotifier
from .models import Role
from . import session


logger = logging.getLogger(__name__)


@dataclass
class NewUser:
    full_name: str
    email: str
    role: Role
    domain: str = None
    start_date: datetime = None
    end_date: datetime = None
    supervisor_id: int = None

    def requested_fields(self):
        return frozenset(f.name for f in dataclass_fields(self) if getattr(self, f.name) is not None)


@dataclass
class AssignmentChanges:
    """Partial update of an intern's assignment. ``None`` means "leave as is"."""

    domain: str = None
    start_date: datetime = None
    end_date: datetime = None
    supervisor_id: int = None

    def provided(self):
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self) if getattr(self, f.name) is not None}


@dataclass
class LoginResult:
    token: str
    role: Role
    user: object


def check_date_range(start_date, end_date):
    if start_date and end_date and start_date > end_date:
        raise ValidationFailed("start_date must be before end_date.", field="end_date")


class UserService:
    """
    User operations: login, profile lookup, creation by an Admin (with the
    welcome email), listing, assignment changes, password change and deletion.
    """

    def __init__(self, directory=None, notifier=None):
        self.directory = directory or IdentityDirectory()
        self.notifier = notifier or WelcomeNotifier()

    def _get_or_404(self, user_id):
        user = self.directory.get_user(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def _load_authorized(self, actor, operation, user_id, message, fields=frozenset()):
        """Role and relationship are checked on the bare id; company once the record is loaded."""
        intent = Intent(operation, Resource.USER, target_id=user_id, fields=fields)
        authorize(actor, intent, message)

        user = self._get_or_404(user_id)
        allowed = authorize(actor, replace(intent, company_id=user.company_id), message)
        return user, allowed

    # ---------------------------
    # Authentication
    # ---------------------------

    @translate_storage_errors
    def login(self, email, password):
        user = self.directory.get_user_by_email(email)
        if user is None:
            logger.info("Login failed for %s: unknown email", email)
            raise NotFound("User not found.")

        if not check_password(password, user.password):
            logger.info("Login failed for %s: bad password", email)
            raise InvalidCredentials()

        actor = session.Actor.from_user(user)
        return LoginResult(token=session.issue(actor), role=actor.role, user=user)

    @translate_storage_errors
    def change_password(self, actor, current_password, new_password):
        authorize(actor, Intent(
            Operation.UPDATE, Resource.USER,
            company_id=actor.company_id,
            target_id=actor.id,
            fields=frozenset({"password"}),
            scope=Scope.OWN,
        ))

        user = self._get_or_404(actor.id)
        if not check_password(current_password, user.password):
            raise InvalidCredentials("Current password is incorrect.")

        if len(new_password) < gate.MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {gate.MIN_PASSWORD_LENGTH} characters.", field="new_password"
            )

        self.directory.set_password_digest(user, make_password(new_password))

    # ---------------------------
    # Reads
    # ---------------------------

    @translate_storage_errors
    def get(self, actor, user_id):
        user, _ = self._load_authorized(actor, Operation.READ, user_id, "Forbidden: Interns can only view their own profile.")
        return user

    @translate_storage_errors
    def list(self, actor):
        authorize(
            actor,
            Intent(Operation.READ_MANY, Resource.USER, company_id=actor.company_id),
            "Forbidden: Interns cannot view all users.",
        )
        return self.directory.users_in_company(actor.company_id)

    # ---------------------------
    # Writes
    # ---------------------------

    @translate_storage_errors
    def create(self, actor, new_user):
        allowed = authorize(
            actor,
            Intent(
                Operation.CREATE, Resource.USER,
                company_id=actor.company_id,
                fields=new_user.requested_fields(),
                subject_role=new_user.role,
            ),
            "Forbidden: Only Admins can add users.",
        )

        # role-specific fields the engine dropped are stored as null
        data = {
            f.name: getattr(new_user, f.name) if f.name in allowed else None
            for f in dataclass_fields(new_user)
        }

        if data["supervisor_id"] is not None:
            gate.check_supervisor_assignment(actor.company_id, self.directory.get_user(data["supervisor_id"]))
        check_date_range(data["start_date"], data["end_date"])

        if self.directory.email_taken(new_user.email):
            raise DuplicateEmail()

        password = gate.generate_password()
        try:
            with transaction.atomic():
                user = self.directory.create_user(actor.company_id, make_password(password), **data)
        except IntegrityError:
            raise DuplicateEmail()

        logger.info("User %s (%s) created by %s in company %s", user.id, user.role, actor.id, actor.company_id)

        company = self.directory.get_company(actor.company_id)
        self.notifier.dispatch(
            full_name=user.full_name,
            email=user.email,
            password=password,
            role=Role(user.role),
            company_name=company.name,
        )
        return user

    @translate_storage_errors
    def update_assignment(self, actor, user_id, changes):
        provided = changes.provided()
        user, allowed = self._load_authorized(
            actor, Operation.UPDATE, user_id,
            "Forbidden: Only Admins can change user assignments.",
            fields=frozenset(provided),
        )

        if user.role != Role.INTERN:
            raise ValidationFailed("Only interns have a domain, dates and a supervisor.")

        updates = {name: value for name, value in provided.items() if name in allowed}

        if "supervisor_id" in updates:
            gate.check_supervisor_assignment(user.company_id, self.directory.get_user(updates["supervisor_id"]))
        check_date_range(
            updates.get("start_date", user.start_date),
            updates.get("end_date", user.end_date),
        )

        return self.directory.update_user(user, updates)

    @translate_storage_errors
    def delete(self, actor, user_id):
        user, _ = self._load_authorized(actor, Operation.DELETE, user_id, "Forbidden: Only Admins can delete users.")

        with gate.dependents_guard(
            "Cannot delete user. Please reassign or delete their associated tasks and evaluations first."
        ):
            self.directory.delete_user(user)

        logger.info("User %s deleted by %s", user_id, actor.id)
