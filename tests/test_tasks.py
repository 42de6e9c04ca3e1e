import pytest

from accounts.models import Role
from accounts.session import Actor
from core.exceptions import DenyReason, Forbidden, NoValidFields, NotFound, ValidationFailed
from task.models import Priority, Task
from task.services import NewTask, TaskChanges, TaskService


pytestmark = pytest.mark.django_db


def new_task(intern, **fields):
    data = {"title": "Build the CSV export", "priority": Priority.HIGH, "intern_id": intern.id}
    data.update(fields)
    return NewTask(**data)


@pytest.fixture
def sue(acme, make_user):
    return make_user(acme, Role.SUPERVISOR, "Sue")


@pytest.fixture
def ian(acme, sue, make_user):
    return make_user(acme, Role.INTERN, "Ian", supervisor=sue)


# ---------------------------
# Creation
# ---------------------------

def test_supervisor_creates_task(sam, ivy):
    task = TaskService().create(Actor.from_user(sam), new_task(ivy, category="Reporting"))

    assert task.company_id == sam.company_id
    assert task.supervisor_id == sam.id
    assert task.intern_id == ivy.id
    assert task.status == "PENDING"
    assert task.category == "Reporting"


def test_supervisor_may_assign_any_company_intern(sam, ian):
    task = TaskService().create(Actor.from_user(sam), new_task(ian))
    assert task.intern_id == ian.id


def test_assignee_must_be_an_intern(sam, alice):
    with pytest.raises(ValidationFailed) as excinfo:
        TaskService().create(Actor.from_user(sam), new_task(alice))
    assert excinfo.value.field == "intern_id"
    assert excinfo.value.message.startswith("intern_id must refer to")


def test_assignee_must_be_in_the_company(sam, globex, make_user):
    outsider = make_user(globex, Role.INTERN)

    with pytest.raises(ValidationFailed):
        TaskService().create(Actor.from_user(sam), new_task(outsider))
    assert not Task.objects.exists()


@pytest.mark.parametrize("creator", ["alice", "ivy"])
def test_only_supervisors_create_tasks(creator, request, ivy):
    user = request.getfixturevalue(creator)

    with pytest.raises(Forbidden) as excinfo:
        TaskService().create(Actor.from_user(user), new_task(ivy))
    assert excinfo.value.reason == DenyReason.WRONG_ROLE


# ---------------------------
# Lists
# ---------------------------

def test_intern_lists_assigned_tasks_newest_first(sam, sue, ivy, ian, make_task):
    first = make_task(sam, ivy, title="first")
    second = make_task(sue, ivy, title="second")
    make_task(sue, ian, title="someone else's")

    assert list(TaskService().list_assigned(Actor.from_user(ivy))) == [second, first]


def test_supervisor_lists_created_tasks(sam, sue, ivy, ian, make_task):
    mine = make_task(sam, ian)
    make_task(sue, ivy)

    assert list(TaskService().list_supervised(Actor.from_user(sam))) == [mine]


def test_supervisors_have_no_assigned_list(sam):
    with pytest.raises(Forbidden):
        TaskService().list_assigned(Actor.from_user(sam))


def test_interns_have_no_supervised_list(ivy):
    with pytest.raises(Forbidden):
        TaskService().list_supervised(Actor.from_user(ivy))


# ---------------------------
# Single task
# ---------------------------

@pytest.mark.parametrize("viewer", ["alice", "sam", "ivy"])
def test_task_visible_to_admin_creator_and_assignee(viewer, request, sam, ivy, make_task):
    task = make_task(sam, ivy)
    user = request.getfixturevalue(viewer)

    assert TaskService().get(Actor.from_user(user), task.id) == task


@pytest.mark.parametrize("viewer", ["sue", "ian"])
def test_task_hidden_from_unrelated_members(viewer, request, sam, ivy, make_task):
    task = make_task(sam, ivy)
    user = request.getfixturevalue(viewer)

    with pytest.raises(Forbidden) as excinfo:
        TaskService().get(Actor.from_user(user), task.id)
    assert excinfo.value.reason == DenyReason.NOT_OWNER


def test_task_in_other_company(gina, sam, ivy, make_task):
    task = make_task(sam, ivy)

    with pytest.raises(Forbidden) as excinfo:
        TaskService().get(Actor.from_user(gina), task.id)
    assert excinfo.value.reason == DenyReason.CROSS_COMPANY


def test_missing_task(alice):
    with pytest.raises(NotFound):
        TaskService().get(Actor.from_user(alice), 424242)


# ---------------------------
# Updates
# ---------------------------

def test_intern_changes_status_only(sam, ivy, make_task):
    task = make_task(sam, ivy, title="Original")

    updated = TaskService().update(Actor.from_user(ivy), task.id, TaskChanges(status="IN_PROGRESS", title="Hijacked"))

    assert updated.status == "IN_PROGRESS"
    assert updated.title == "Original"


def test_intern_without_status_has_nothing_to_change(sam, ivy, make_task):
    task = make_task(sam, ivy)

    with pytest.raises(NoValidFields):
        TaskService().update(Actor.from_user(ivy), task.id, TaskChanges(title="Hijacked"))


def test_creator_edits_and_reassigns(sam, ivy, ian, make_task):
    task = make_task(sam, ivy)

    updated = TaskService().update(
        Actor.from_user(sam), task.id,
        TaskChanges(title="Renamed", priority=Priority.LOW, intern_id=ian.id),
    )

    assert updated.title == "Renamed"
    assert updated.priority == Priority.LOW
    assert updated.intern_id == ian.id


def test_reassignment_must_target_a_company_intern(sam, ivy, alice, make_task):
    task = make_task(sam, ivy)

    with pytest.raises(ValidationFailed):
        TaskService().update(Actor.from_user(sam), task.id, TaskChanges(intern_id=alice.id))

    task.refresh_from_db()
    assert task.intern_id == ivy.id


def test_admin_edits_any_task(alice, sam, ivy, make_task):
    task = make_task(sam, ivy)

    updated = TaskService().update(Actor.from_user(alice), task.id, TaskChanges(category="Ops"))
    assert updated.category == "Ops"


def test_other_supervisor_cannot_edit(sue, sam, ivy, make_task):
    task = make_task(sam, ivy)

    with pytest.raises(Forbidden):
        TaskService().update(Actor.from_user(sue), task.id, TaskChanges(title="Mine now"))


# ---------------------------
# Deletion
# ---------------------------

def test_creator_deletes_task(sam, ivy, make_task):
    task = make_task(sam, ivy)

    TaskService().delete(Actor.from_user(sam), task.id)

    assert not Task.objects.filter(pk=task.pk).exists()


@pytest.mark.parametrize("who", ["alice", "sue", "ivy"])
def test_only_the_creator_deletes(who, request, sam, ivy, make_task):
    task = make_task(sam, ivy)
    user = request.getfixturevalue(who)

    with pytest.raises(Forbidden):
        TaskService().delete(Actor.from_user(user), task.id)
    assert Task.objects.filter(pk=task.pk).exists()


def test_task_update_from_other_company(gina, sam, ivy, make_task):
    task = make_task(sam, ivy, status="PENDING")

    with pytest.raises(Forbidden) as excinfo:
        TaskService().update(Actor.from_user(gina), task.id, TaskChanges(status="DONE"))
    assert excinfo.value.reason == DenyReason.CROSS_COMPANY

    task.refresh_from_db()
    assert task.status == "PENDING"


def test_task_delete_from_other_company(globex, sam, ivy, make_task, make_user):
    task = make_task(sam, ivy)
    outsider = make_user(globex, Role.SUPERVISOR)

    with pytest.raises(Forbidden) as excinfo:
        TaskService().delete(Actor.from_user(outsider), task.id)
    assert excinfo.value.reason == DenyReason.CROSS_COMPANY
    assert Task.objects.filter(pk=task.pk).exists()
