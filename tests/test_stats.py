# tests/test_stats.py

from __future__ import annotations

from datetime import date, timedelta

from helpers import auth_headers, create_project, create_task, next_week
from taskboard.services.stats import completion_rate


def test_completion_rate():
    assert completion_rate(0, 0) == 0.0
    assert completion_rate(2, 4) == 50.0
    assert completion_rate(1, 3) == 33.33
    assert completion_rate(3, 3) == 100.0


async def test_project_stats(client, make_user, insert_task):
    alice = await make_user("Alice")
    project = await create_project(client, alice)
    await create_task(client, alice, project["uuid"], status="done", type="bug", priority="high")
    await create_task(client, alice, project["uuid"], status="done", type="bug", priority="low")
    await create_task(client, alice, project["uuid"], status="todo", due_date=next_week())
    await create_task(client, alice, project["uuid"], status="in_progress", type="chore")

    response = await client.get(f"/projects/{project['uuid']}/stats", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["total_tasks"] == 4
    assert data["completed_tasks"] == 2
    assert data["overdue_tasks"] == 0
    assert data["completion_rate"] == 50.0
    assert data["status_stats"] == {"backlog": 0, "todo": 1, "in_progress": 1, "done": 2}
    assert data["type_stats"] == {"feature": 1, "bug": 2, "chore": 1, "enhancement": 0}
    assert data["priority_stats"] == {"low": 1, "medium": 2, "high": 1, "critical": 0}


async def test_project_stats_empty(client, make_user):
    alice = await make_user("Alice")
    project = await create_project(client, alice)

    data = (await client.get(f"/projects/{project['uuid']}/stats", headers=auth_headers(alice))).json()["data"]
    assert data["total_tasks"] == 0
    assert data["completion_rate"] == 0
    assert set(data["status_stats"].values()) == {0}


async def test_overdue_counts_open_tasks_due_today_or_earlier(client, make_user, insert_task):
    alice = await make_user("Alice")
    project = await create_project(client, alice)
    yesterday = date.today() - timedelta(days=1)

    await insert_task(project["id"], alice.id, status="todo", due_date=yesterday)
    await insert_task(project["id"], alice.id, status="in_progress", due_date=date.today())
    await insert_task(project["id"], alice.id, status="done", due_date=yesterday)
    await insert_task(project["id"], alice.id, status="todo", due_date=yesterday, is_deleted=True)
    await create_task(client, alice, project["uuid"], status="todo", due_date=next_week())

    data = (await client.get(f"/projects/{project['uuid']}/stats", headers=auth_headers(alice))).json()["data"]
    assert data["overdue_tasks"] == 2
    assert data["total_tasks"] == 4


async def test_stats_hidden_from_outsiders(client, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    project = await create_project(client, alice)

    response = await client.get(f"/projects/{project['uuid']}/stats", headers=auth_headers(bob))
    assert response.status_code == 404


async def test_dashboard_aggregates_visible_projects(client, make_user, insert_task):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    alpha = await create_project(client, alice, name="Alpha")
    beta = await create_project(client, bob, name="Beta")
    await create_project(client, bob, name="Hidden")

    await create_task(client, alice, alpha["uuid"], status="done")
    await create_task(client, alice, alpha["uuid"], status="in_progress")
    await create_task(client, bob, beta["uuid"], status="todo", user_id=alice.id)
    await insert_task(beta["id"], bob.id, status="todo", due_date=date.today() - timedelta(days=3))

    response = await client.get("/dashboard/stats", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()["data"]

    assert data["project_count"] == 2
    assert data["total_tasks"] == 4
    assert data["completed"] == 1
    assert data["in_progress"] == 1
    assert data["overdue"] == 1
    assert data["completion_rate"] == 25.0
    assert data["status_stats"]["todo"] == 2


async def test_dashboard_for_user_without_projects(client, make_user):
    loner = await make_user("Loner")

    data = (await client.get("/dashboard/stats", headers=auth_headers(loner))).json()["data"]
    assert data["project_count"] == 0
    assert data["total_tasks"] == 0
    assert data["completion_rate"] == 0
    assert data["type_stats"] == {"feature": 0, "bug": 0, "chore": 0, "enhancement": 0}


async def test_recent_tasks(client, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    project = await create_project(client, alice)
    await create_project(client, bob, name="Elsewhere")
    for title in ["first", "second", "third"]:
        await create_task(client, alice, project["uuid"], title=title)

    response = await client.get("/dashboard/recent-tasks", params={"limit": 2}, headers=auth_headers(alice))
    assert response.status_code == 200
    recent = response.json()["data"]
    assert [t["title"] for t in recent] == ["third", "second"]
    assert recent[0]["project_name"] == "Alpha"
    assert recent[0]["project_uuid"] == project["uuid"]
    assert recent[0]["assignee"]["id"] == alice.id

    empty = await client.get("/dashboard/recent-tasks", headers=auth_headers(bob))
    assert empty.json()["data"] == []

    too_small = await client.get("/dashboard/recent-tasks", params={"limit": 0}, headers=auth_headers(alice))
    assert too_small.status_code == 422
