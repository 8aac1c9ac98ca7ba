import enum
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy import case, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from taskboard.errors import validation_error
from taskboard.models.projects import Project
from taskboard.models.tasks import Task, TaskStatus, TaskPriority
from taskboard.models.user import User
from taskboard.schemas.task import BacklogTaskCreate, TaskCreate, TaskMove, TaskUpdate
from taskboard.services import access, transitions
from taskboard.utils.pagination import paginate
from taskboard.utils.sanitization import escape_like

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"

PRIORITY_ORDER = (
    TaskPriority.CRITICAL,
    TaskPriority.HIGH,
    TaskPriority.MEDIUM,
    TaskPriority.LOW,
)

SORTABLE_FIELDS = {
    "id": Task.id,
    "title": Task.title,
    "type": Task.type,
    "status": Task.status,
    "priority": Task.priority,
    "story_points": Task.story_points,
    "due_date": Task.due_date,
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
}


def priority_rank():
    """critical=0 ... low=3, for "most urgent first" ordering."""
    return case(
        {p.value: rank for rank, p in enumerate(PRIORITY_ORDER)},
        value=Task.priority,
        else_=len(PRIORITY_ORDER),
    )


def task_options():
    return (joinedload(Task.assignee), joinedload(Task.project))


def _live_tasks(project_id: int):
    return select(Task).filter(Task.project_id == project_id, Task.is_deleted == False)


async def _ensure_user_exists(db: AsyncSession, user_id: int) -> None:
    result = await db.execute(select(User.id).filter(User.id == user_id))
    if result.scalars().first() is None:
        raise validation_error({"user_id": "The selected user id is invalid."})


async def _find_task(db: AsyncSession, project: Project, task_uuid: str) -> Task:
    result = await db.execute(
        _live_tasks(project.id)
        .options(*task_options())
        .filter(Task.uuid == task_uuid)
        .execution_options(populate_existing=True)
    )
    task = result.scalars().unique().first()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return task


async def get_task(db: AsyncSession, actor_id: int, project_uuid: str, task_uuid: str) -> Task:
    project = await access.get_visible_project(db, project_uuid, actor_id)
    return await _find_task(db, project, task_uuid)


async def list_tasks(
    db: AsyncSession,
    actor_id: int,
    project_uuid: str,
    *,
    status_filter: str | None = None,
    type_filter: str | None = None,
    priority_filter: str | None = None,
    assignee: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    per_page: int = 15,
) -> dict:
    project = await access.get_visible_project(db, project_uuid, actor_id)
    query = _live_tasks(project.id)

    # "all" (or nothing) means no filter
    if status_filter and status_filter != "all":
        query = query.filter(Task.status == status_filter)
    if type_filter and type_filter != "all":
        query = query.filter(Task.type == type_filter)
    if priority_filter and priority_filter != "all":
        query = query.filter(Task.priority == priority_filter)
    if assignee and assignee != "all":
        try:
            assignee_id = int(assignee)
        except ValueError:
            raise validation_error({"assignee": "The assignee must be a user id or 'all'."}, location="query")
        query = query.filter(Task.user_id == assignee_id)

    column = SORTABLE_FIELDS.get(sort_by)
    if column is None:
        raise validation_error({"sort_by": f"Cannot sort by '{sort_by}'."}, location="query")
    if sort_order == "asc":
        query = query.order_by(column.asc(), Task.id.asc())
    else:
        query = query.order_by(column.desc(), Task.id.desc())

    return await paginate(db, query, page, per_page, options=task_options())


async def search_tasks(
    db: AsyncSession,
    actor_id: int,
    project_uuid: str,
    q: str | None,
    page: int = 1,
    per_page: int = 15,
) -> dict:
    project = await access.get_visible_project(db, project_uuid, actor_id)
    query = _live_tasks(project.id)

    if q:
        pattern = f"%{escape_like(q)}%"
        query = query.filter(or_(
            Task.title.ilike(pattern, escape="\\"),
            Task.description.ilike(pattern, escape="\\"),
        ))

    query = query.order_by(Task.created_at.desc(), Task.id.desc())
    return await paginate(db, query, page, per_page, options=task_options())


async def create_task(db: AsyncSession, actor_id: int, project_uuid: str, data: TaskCreate) -> Task:
    project = await access.get_visible_project(db, project_uuid, actor_id)

    if data.user_id is not None:
        await _ensure_user_exists(db, data.user_id)
        if data.user_id != actor_id and project.owner_id != actor_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only project owner can assign tasks to other users",
            )

    task = Task(
        uuid=str(uuid.uuid4()),
        project_id=project.id,
        user_id=data.user_id if data.user_id is not None else actor_id,
        title=data.title,
        description=data.description,
        type=data.type.value,
        status=data.status.value,
        priority=data.priority.value,
        story_points=data.story_points,
        due_date=data.due_date,
    )
    db.add(task)
    await db.flush()
    logger.info("User %s created task %s in project %s", actor_id, task.uuid, project.uuid)
    return task


async def list_backlog(db: AsyncSession, actor_id: int, project_uuid: str) -> tuple[Project, list[Task]]:
    """Backlog ordered most urgent first, then oldest first; id breaks exact ties."""
    project = await access.get_visible_project(db, project_uuid, actor_id)
    result = await db.execute(
        _live_tasks(project.id)
        .options(*task_options())
        .filter(Task.status == TaskStatus.BACKLOG.value)
        .order_by(priority_rank(), Task.created_at.asc(), Task.id.asc())
    )
    return project, result.scalars().unique().all()


async def add_to_backlog(db: AsyncSession, actor_id: int, project_uuid: str, data: BacklogTaskCreate) -> Task:
    project = await access.get_visible_project(db, project_uuid, actor_id)
    task = Task(
        uuid=str(uuid.uuid4()),
        project_id=project.id,
        user_id=actor_id,
        title=data.title,
        description=data.description,
        type=data.type.value,
        status=TaskStatus.BACKLOG.value,
        priority=data.priority.value,
        story_points=data.story_points,
    )
    db.add(task)
    await db.flush()
    return task


async def update_task(
    db: AsyncSession, actor_id: int, project_uuid: str, task_uuid: str, data: TaskUpdate
) -> Task:
    task = await get_task(db, actor_id, project_uuid, task_uuid)
    changes = data.model_dump(exclude_unset=True)

    # Assignee column is required; a null user_id leaves it alone
    new_user_id = changes.pop("user_id", None)
    if new_user_id is not None:
        await _ensure_user_exists(db, new_user_id)
        if new_user_id != task.user_id:
            if task.project.owner_id != actor_id:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="Only project owner can reassign tasks",
                )
            task.user_id = new_user_id

    for key, value in changes.items():
        if isinstance(value, enum.Enum):
            value = value.value
        setattr(task, key, value)
    return task


async def update_status(
    db: AsyncSession, actor_id: int, project_uuid: str, task_uuid: str, new_status: TaskStatus
) -> Task:
    task = await get_task(db, actor_id, project_uuid, task_uuid)
    task.status = new_status.value
    return task


async def move_from_backlog(
    db: AsyncSession, actor_id: int, project_uuid: str, task_uuid: str, data: TaskMove
) -> Task:
    task = await get_task(db, actor_id, project_uuid, task_uuid)
    if not transitions.is_backlog(task.status):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found in backlog")

    if data.user_id is not None:
        await _ensure_user_exists(db, data.user_id)

    task.status = transitions.ensure_move_target(data.status).value
    task.user_id = transitions.resolve_move_assignee(
        actor_id=actor_id,
        owner_id=task.project.owner_id,
        current_user_id=task.user_id,
        requested_user_id=data.user_id,
    )
    return task


async def delete_task(db: AsyncSession, actor_id: int, project_uuid: str, task_uuid: str) -> None:
    """Soft delete, project owner only."""
    project = await access.get_owned_project(db, project_uuid, actor_id)
    task = await _find_task(db, project, task_uuid)
    task.is_deleted = True
    task.deleted_at = datetime.now(timezone.utc)
    logger.info("User %s deleted task %s", actor_id, task_uuid)


async def reload_task(db: AsyncSession, task_id: int) -> Task:
    """Fresh copy with relations, after a commit."""
    result = await db.execute(
        select(Task)
        .options(*task_options())
        .filter(Task.id == task_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().unique().first()
