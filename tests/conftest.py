import itertools
from concurrent.futures import Future
from datetime import timedelta

import pytest
from django.contrib.auth.hashers import make_password
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Role, User
from accounts.session import Actor, issue
from company.models import Company
from task.models import Priority, Task


PASSWORD = "correct-horse-battery-staple"


class ImmediateExecutor:
    """Runs submitted work inline so mail assertions see the result."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args, **kwargs):
        self.submitted.append(kwargs)
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def dispatch(self, **message):
        self.messages.append(message)


@pytest.fixture(autouse=True)
def mail_executor(monkeypatch):
    executor = ImmediateExecutor()
    monkeypatch.setattr("accounts.mail._executor", executor)
    return executor


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ---------------------------
# Factories
# ---------------------------

@pytest.fixture
def make_company(db):
    def make(name="Acme"):
        return Company.objects.create(name=name)
    return make


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def make(company, role, full_name=None, **fields):
        n = next(counter)
        fields.setdefault("email", f"{role.value.lower()}{n}@{company.name.lower()}.test")
        user = User(company=company, full_name=full_name or f"{role.label} {n}", role=role, **fields)
        user.password = make_password(PASSWORD)
        user.save()
        return user

    return make


@pytest.fixture
def make_task(db):
    def make(supervisor, intern, **fields):
        fields.setdefault("title", "Write the onboarding guide")
        fields.setdefault("priority", Priority.MEDIUM)
        return Task.objects.create(
            company_id=supervisor.company_id,
            supervisor=supervisor,
            intern=intern,
            **fields,
        )
    return make


# ---------------------------
# Acme and Globex
# ---------------------------

@pytest.fixture
def acme(make_company):
    return make_company("Acme")


@pytest.fixture
def globex(make_company):
    return make_company("Globex")


@pytest.fixture
def alice(acme, make_user):
    return make_user(acme, Role.ADMIN, "Alice", email="alice@acme.test")


@pytest.fixture
def sam(acme, make_user):
    return make_user(acme, Role.SUPERVISOR, "Sam", email="sam@acme.test")


@pytest.fixture
def ivy(acme, sam, make_user):
    """Intern supervised by Sam whose internship ended yesterday."""
    now = timezone.now()
    return make_user(
        acme, Role.INTERN, "Ivy",
        email="ivy@acme.test",
        domain="Backend",
        supervisor=sam,
        start_date=now - timedelta(days=90),
        end_date=now - timedelta(days=1),
    )


@pytest.fixture
def gina(globex, make_user):
    return make_user(globex, Role.ADMIN, "Gina", email="gina@globex.test")


# ---------------------------
# HTTP
# ---------------------------

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_as(api_client):
    def login_as(user):
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue(Actor.from_user(user))}")
        return api_client
    return login_as
