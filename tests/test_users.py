from datetime import timedelta
from smtplib import SMTPException

import pytest
from django.contrib.auth.hashers import check_password, make_password
from django.core import mail
from django.utils import timezone

from accounts.directory import IdentityDirectory
from accounts.mail import WelcomeNotifier
from accounts.models import Role, User
from accounts.services import AssignmentChanges, NewUser, UserService
from accounts.session import Actor
from core.exceptions import (
    Conflict,
    DenyReason,
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    NoValidFields,
    NotFound,
    SelfDeleteForbidden,
    ValidationFailed,
)
from core.gate import MIN_PASSWORD_LENGTH
from .conftest import PASSWORD


pytestmark = pytest.mark.django_db


def new_intern(supervisor, **fields):
    now = timezone.now()
    data = {
        "full_name": "Ivan",
        "email": "ivan@acme.test",
        "role": Role.INTERN,
        "domain": "Data",
        "start_date": now,
        "end_date": now + timedelta(days=90),
        "supervisor_id": supervisor.id,
    }
    data.update(fields)
    return NewUser(**data)


# ---------------------------
# Login and passwords
# ---------------------------

def test_login_returns_token_and_role(sam):
    result = UserService().login("SAM@acme.test", PASSWORD)

    assert result.role == Role.SUPERVISOR
    assert result.user == sam
    assert result.token


def test_login_unknown_email(sam):
    with pytest.raises(NotFound):
        UserService().login("nobody@acme.test", PASSWORD)


def test_login_wrong_password(sam):
    with pytest.raises(InvalidCredentials):
        UserService().login("sam@acme.test", "wrong-password")


def test_change_password_then_login(sam):
    UserService().change_password(Actor.from_user(sam), PASSWORD, "a-brand-new-passphrase")

    UserService().login("sam@acme.test", "a-brand-new-passphrase")
    with pytest.raises(InvalidCredentials):
        UserService().login("sam@acme.test", PASSWORD)


def test_change_password_requires_current_password(sam):
    with pytest.raises(InvalidCredentials):
        UserService().change_password(Actor.from_user(sam), "not-it", "a-brand-new-passphrase")


def test_new_password_has_a_minimum_length(sam):
    with pytest.raises(ValidationFailed) as excinfo:
        UserService().change_password(Actor.from_user(sam), PASSWORD, "short")
    assert excinfo.value.field == "new_password"


# ---------------------------
# Creation
# ---------------------------

def test_admin_creates_intern_with_assignment(alice, sam, notifier):
    user = UserService(notifier=notifier).create(Actor.from_user(alice), new_intern(sam))

    assert user.company_id == alice.company_id
    assert user.role == Role.INTERN
    assert user.domain == "Data"
    assert user.supervisor_id == sam.id


def test_generated_password_is_mailed_and_stored_hashed(alice, sam, notifier):
    user = UserService(notifier=notifier).create(Actor.from_user(alice), new_intern(sam))

    [message] = notifier.messages
    assert message["email"] == "ivan@acme.test"
    assert message["company_name"] == "Acme"
    assert len(message["password"]) >= MIN_PASSWORD_LENGTH
    assert user.password != message["password"]
    assert check_password(message["password"], user.password)


def test_intern_fields_are_dropped_for_supervisors(alice, sam, notifier):
    request = new_intern(sam, full_name="Sue", email="sue@acme.test", role=Role.SUPERVISOR)
    user = UserService(notifier=notifier).create(Actor.from_user(alice), request)

    assert user.role == Role.SUPERVISOR
    assert user.domain is None
    assert user.start_date is None
    assert user.end_date is None
    assert user.supervisor_id is None


def test_welcome_email_is_delivered(alice, sam):
    UserService().create(Actor.from_user(alice), new_intern(sam))

    [message] = mail.outbox
    assert message.to == ["ivan@acme.test"]
    assert message.subject == "Welcome to Acme - Your Account Details"
    assert "ivan@acme.test" in message.body
    assert "Intern" in message.body


def test_mail_failure_does_not_fail_creation(alice, sam, monkeypatch):
    def refuse(self, fail_silently=False):
        raise SMTPException("relay refused")

    monkeypatch.setattr("django.core.mail.EmailMultiAlternatives.send", refuse)

    user = UserService().create(Actor.from_user(alice), new_intern(sam))

    assert User.objects.filter(pk=user.pk).exists()
    assert mail.outbox == []


def test_unqueued_mail_does_not_fail_creation(alice, sam):
    class ClosedExecutor:
        def submit(self, fn, *args, **kwargs):
            raise RuntimeError("cannot schedule new futures after shutdown")

    service = UserService(notifier=WelcomeNotifier(executor=ClosedExecutor()))
    user = service.create(Actor.from_user(alice), new_intern(sam))

    assert user.pk is not None


def test_duplicate_email_is_rejected(alice, sam, notifier):
    with pytest.raises(DuplicateEmail):
        UserService(notifier=notifier).create(Actor.from_user(alice), new_intern(sam, email="SAM@acme.test"))

    assert User.objects.filter(email__iexact="sam@acme.test").count() == 1
    assert notifier.messages == []


@pytest.mark.parametrize("role", [Role.SUPERVISOR, Role.INTERN])
def test_only_admins_create_users(role, acme, sam, make_user, notifier):
    creator = sam if role == Role.SUPERVISOR else make_user(acme, Role.INTERN, supervisor=sam)

    with pytest.raises(Forbidden) as excinfo:
        UserService(notifier=notifier).create(Actor.from_user(creator), new_intern(sam))
    assert excinfo.value.reason == DenyReason.WRONG_ROLE


def test_supervisor_must_belong_to_the_company(alice, globex, make_user, notifier):
    outsider = make_user(globex, Role.SUPERVISOR)

    with pytest.raises(ValidationFailed) as excinfo:
        UserService(notifier=notifier).create(Actor.from_user(alice), new_intern(outsider))
    assert excinfo.value.field == "supervisor_id"
    assert excinfo.value.message.startswith("supervisor_id must refer to")


def test_supervisor_must_be_a_supervisor(alice, ivy, notifier):
    with pytest.raises(ValidationFailed):
        UserService(notifier=notifier).create(Actor.from_user(alice), new_intern(ivy))


def test_start_date_must_precede_end_date(alice, sam, notifier):
    now = timezone.now()
    request = new_intern(sam, start_date=now, end_date=now - timedelta(days=1))

    with pytest.raises(ValidationFailed) as excinfo:
        UserService(notifier=notifier).create(Actor.from_user(alice), request)
    assert excinfo.value.message == "start_date must be before end_date."


# ---------------------------
# Reads
# ---------------------------

def test_intern_reads_own_profile(ivy):
    assert UserService().get(Actor.from_user(ivy), ivy.id) == ivy


def test_intern_cannot_read_other_profiles(ivy, sam):
    with pytest.raises(Forbidden) as excinfo:
        UserService().get(Actor.from_user(ivy), sam.id)
    assert excinfo.value.reason == DenyReason.NOT_OWNER


def test_profile_in_other_company_is_forbidden(gina, ivy):
    with pytest.raises(Forbidden) as excinfo:
        UserService().get(Actor.from_user(gina), ivy.id)
    assert excinfo.value.reason == DenyReason.CROSS_COMPANY


def test_missing_user(alice):
    with pytest.raises(NotFound):
        UserService().get(Actor.from_user(alice), 999999)


def test_list_is_scoped_to_the_company(alice, sam, ivy, gina):
    users = list(UserService().list(Actor.from_user(sam)))
    assert users == [alice, sam, ivy]


def test_interns_cannot_list_users(ivy):
    with pytest.raises(Forbidden):
        UserService().list(Actor.from_user(ivy))


# ---------------------------
# Assignment changes
# ---------------------------

def test_admin_reassigns_intern(alice, ivy, acme, make_user):
    other = make_user(acme, Role.SUPERVISOR, "Sue")

    user = UserService().update_assignment(
        Actor.from_user(alice), ivy.id, AssignmentChanges(domain="Frontend", supervisor_id=other.id)
    )

    user.refresh_from_db()
    assert user.domain == "Frontend"
    assert user.supervisor_id == other.id


def test_assignment_applies_only_to_interns(alice, sam):
    with pytest.raises(ValidationFailed):
        UserService().update_assignment(Actor.from_user(alice), sam.id, AssignmentChanges(domain="Data"))


def test_empty_assignment_change(alice, ivy):
    with pytest.raises(NoValidFields):
        UserService().update_assignment(Actor.from_user(alice), ivy.id, AssignmentChanges())


def test_supervisor_cannot_reassign(sam, ivy):
    with pytest.raises(Forbidden):
        UserService().update_assignment(Actor.from_user(sam), ivy.id, AssignmentChanges(domain="Data"))


# ---------------------------
# Deletion
# ---------------------------

def test_admin_deletes_user(alice, acme, make_user):
    intern = make_user(acme, Role.INTERN)

    UserService().delete(Actor.from_user(alice), intern.id)

    assert not User.objects.filter(pk=intern.pk).exists()


def test_deleting_a_supervisor_unassigns_their_interns(alice, sam, ivy):
    UserService().delete(Actor.from_user(alice), sam.id)

    ivy.refresh_from_db()
    assert ivy.supervisor_id is None


def test_admin_cannot_delete_themselves(alice):
    with pytest.raises(SelfDeleteForbidden):
        UserService().delete(Actor.from_user(alice), alice.id)

    assert User.objects.filter(pk=alice.pk).exists()


def test_user_with_tasks_cannot_be_deleted(alice, sam, ivy, make_task):
    make_task(sam, ivy)

    with pytest.raises(Conflict):
        UserService().delete(Actor.from_user(alice), ivy.id)

    assert User.objects.filter(pk=ivy.pk).exists()


def test_admin_cannot_delete_other_company_users(gina, ivy):
    with pytest.raises(Forbidden) as excinfo:
        UserService().delete(Actor.from_user(gina), ivy.id)
    assert excinfo.value.reason == DenyReason.CROSS_COMPANY


@pytest.mark.parametrize("who", ["sam", "ivy"])
def test_non_admin_delete_is_denied_before_lookup(who, request):
    user = request.getfixturevalue(who)

    with pytest.raises(Forbidden) as excinfo:
        UserService().delete(Actor.from_user(user), 999999)
    assert excinfo.value.reason == DenyReason.WRONG_ROLE


def test_intern_reading_unknown_id_is_denied_before_lookup(ivy):
    with pytest.raises(Forbidden) as excinfo:
        UserService().get(Actor.from_user(ivy), 999999)
    assert excinfo.value.reason == DenyReason.NOT_OWNER


def test_supervisor_reassigning_unknown_id_is_denied_before_lookup(sam):
    with pytest.raises(Forbidden):
        UserService().update_assignment(Actor.from_user(sam), 999999, AssignmentChanges(domain="Data"))


def test_admin_deleting_unknown_id_gets_not_found(alice):
    with pytest.raises(NotFound):
        UserService().delete(Actor.from_user(alice), 999999)


def test_created_admins_also_receive_credentials(alice, notifier):
    request = NewUser(full_name="Ada", email="ada@acme.test", role=Role.ADMIN)
    user = UserService(notifier=notifier).create(Actor.from_user(alice), request)

    [message] = notifier.messages
    assert message["role"] == Role.ADMIN
    assert check_password(message["password"], user.password)


def test_directory_stores_the_given_hash(acme):
    hashed = make_password("a-hashed-passphrase")

    user = IdentityDirectory().create_user(
        acme.id, hashed, full_name="Hal", email="hal@acme.test", role=Role.SUPERVISOR,
    )

    user.refresh_from_db()
    assert user.password == hashed
    assert user.check_password("a-hashed-passphrase")
    assert user.domain is None
    assert user.supervisor_id is None
