# tests/helpers.py

from __future__ import annotations

from datetime import date, timedelta

from httpx import AsyncClient

from taskboard.models.user import User
from taskboard.utils.security import create_access_token


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


async def create_project(client: AsyncClient, user: User, name: str = "Alpha", description: str | None = None) -> dict:
    response = await client.post(
        "/projects", json={"name": name, "description": description}, headers=auth_headers(user)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def create_task(client: AsyncClient, user: User, project_uuid: str, **overrides) -> dict:
    payload = {
        "title": "Write docs",
        "type": "feature",
        "status": "todo",
        "priority": "medium",
    }
    payload.update(overrides)
    response = await client.post(
        f"/projects/{project_uuid}/tasks", json=payload, headers=auth_headers(user)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def next_week() -> str:
    return (date.today() + timedelta(days=7)).isoformat()
