# tests/test_transitions.py

from __future__ import annotations

import pytest

from helpers import auth_headers, create_project, create_task
from taskboard.models.tasks import TaskStatus
from taskboard.services import transitions


def test_is_backlog():
    assert transitions.is_backlog("backlog")
    assert transitions.is_backlog(TaskStatus.BACKLOG)
    assert not transitions.is_backlog("todo")
    assert not transitions.is_backlog(TaskStatus.DONE)


@pytest.mark.parametrize("target", ["todo", "in_progress"])
def test_move_targets_accepted(target):
    assert transitions.ensure_move_target(target) == TaskStatus(target)


@pytest.mark.parametrize("target", ["backlog", "done"])
def test_move_targets_rejected(target):
    with pytest.raises(ValueError):
        transitions.ensure_move_target(target)


def test_resolve_move_assignee():
    owner, assignee, other = 1, 2, 3
    # No request keeps the current assignee
    assert transitions.resolve_move_assignee(owner, owner, assignee, None) == assignee
    # The owner may hand the task to anyone, themselves included
    assert transitions.resolve_move_assignee(owner, owner, assignee, other) == other
    assert transitions.resolve_move_assignee(owner, owner, assignee, owner) == owner
    # Anybody else is ignored
    assert transitions.resolve_move_assignee(assignee, owner, assignee, other) == assignee


async def test_move_backlog_task_to_todo(client, make_user):
    alice = await make_user("Alice")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="backlog")

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": "in_progress"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Task moved from backlog successfully"
    assert body["data"]["status"] == "in_progress"
    assert body["data"]["user_id"] == alice.id

    backlog = await client.get(f"/projects/{project['uuid']}/backlog", headers=auth_headers(alice))
    assert backlog.json()["data"] == []


async def test_move_requires_backlog_source(client, make_user):
    alice = await make_user("Alice")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="todo")

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": "in_progress"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Task not found in backlog"}


@pytest.mark.parametrize("target", ["done", "backlog", "archived"])
async def test_move_rejects_inactive_targets(client, make_user, target):
    alice = await make_user("Alice")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="backlog")

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": target},
        headers=auth_headers(alice),
    )
    assert response.status_code == 422
    assert "status" in response.json()["errors"]


async def test_move_by_non_owner_ignores_user_id(client, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    carol = await make_user("Carol")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="backlog", user_id=bob.id)

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": "todo", "user_id": carol.id},
        headers=auth_headers(bob),
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "todo"
    assert response.json()["data"]["user_id"] == bob.id


async def test_move_by_owner_reassigns(client, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="backlog")

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": "todo", "user_id": bob.id},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    assert response.json()["data"]["assignee"]["id"] == bob.id


async def test_move_with_unknown_user(client, make_user):
    alice = await make_user("Alice")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="backlog")

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": "todo", "user_id": 9999},
        headers=auth_headers(alice),
    )
    assert response.status_code == 422
    assert "user_id" in response.json()["errors"]


async def test_move_by_owner_naming_themselves_takes_over(client, make_user):
    """The owner's own id is a real reassignment, not a "keep current assignee" request"""
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    project = await create_project(client, alice)
    task = await create_task(client, alice, project["uuid"], status="backlog", user_id=bob.id)

    response = await client.patch(
        f"/projects/{project['uuid']}/tasks/{task['uuid']}/move",
        json={"status": "todo", "user_id": alice.id},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    assert response.json()["data"]["user_id"] == alice.id
