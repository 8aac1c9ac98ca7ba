from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field, field_validator
from taskboard.utils.sanitization import sanitize_string
from taskboard.schemas.user import UserResponse
from taskboard.schemas.task import Task


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class ProjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("name")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("The name field may not be null.")
        return v


class Project(BaseModel):
    id: int
    uuid: str
    name: str
    description: str | None = None
    owner_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    owner: UserResponse | None = None

    class Config:
        from_attributes = True


class ProjectListItem(Project):
    tasks_count: int = 0
    backlog_tasks_count: int = 0


class ProjectSummaryStats(BaseModel):
    total_tasks: int
    backlog_tasks: int
    todo_tasks: int
    in_progress_tasks: int
    done_tasks: int
    completion_rate: float


class ProjectDetail(BaseModel):
    project: Project
    tasks_by_status: dict[str, list[Task]]
    stats: ProjectSummaryStats


# ── Members ─────────────────────────────────────────────

class MembersAdd(BaseModel):
    user_ids: list[int] = Field(..., min_length=1)
    role: Literal["member", "admin"] = "member"


class Member(BaseModel):
    id: int
    name: str
    email: str
    role: str
    joined_at: datetime | None = None
