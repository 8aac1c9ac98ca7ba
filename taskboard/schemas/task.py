from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from taskboard.models.tasks import TaskStatus, TaskPriority, TaskType
from taskboard.services import transitions
from taskboard.utils.sanitization import sanitize_string
from taskboard.schemas.user import UserResponse


def _ensure_future(v: date | None) -> date | None:
    if v is not None and v <= date.today():
        raise ValueError("The due date must be a date after today.")
    return v


# ── Input schemas ───────────────────────────────────────

class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: TaskType
    priority: TaskPriority
    story_points: int | None = Field(None, ge=1, le=20)

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class TaskCreate(TaskBase):
    status: TaskStatus
    due_date: date | None = None
    user_id: int | None = None

    @field_validator("due_date")
    @classmethod
    def future_due_date(cls, v):
        return _ensure_future(v)


class BacklogTaskCreate(TaskBase):
    """Backlog entries always start in `backlog` and belong to their author."""


class TaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    type: TaskType | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    story_points: int | None = Field(None, ge=1, le=20)
    due_date: date | None = None
    user_id: int | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    # Only validated when supplied; an explicit null would blank a required column
    @field_validator("title", "type", "status", "priority")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("This field may not be null.")
        return v

    @field_validator("due_date")
    @classmethod
    def future_due_date(cls, v):
        return _ensure_future(v)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskMove(BaseModel):
    status: TaskStatus
    user_id: int | None = None

    @field_validator("status")
    @classmethod
    def active_target(cls, v):
        return transitions.ensure_move_target(v)


# ── Output schemas ──────────────────────────────────────

class ProjectBrief(BaseModel):
    id: int
    uuid: str
    name: str

    class Config:
        from_attributes = True


class Task(BaseModel):
    id: int
    uuid: str
    project_id: int
    user_id: int
    title: str
    description: str | None = None
    type: TaskType
    status: TaskStatus
    priority: TaskPriority
    story_points: int | None = None
    due_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    assignee: UserResponse | None = None
    project: ProjectBrief | None = None

    class Config:
        from_attributes = True


class BacklogListing(BaseModel):
    success: bool = True
    data: list[Task]
    project: ProjectBrief


class RecentTask(BaseModel):
    id: int
    uuid: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    project_name: str
    project_uuid: str
    assignee: UserResponse | None = None
    updated_at: datetime | None = None
