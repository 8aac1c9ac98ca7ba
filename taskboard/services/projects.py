import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from taskboard.errors import validation_error
from taskboard.models.projects import Project, ProjectMember
from taskboard.models.tasks import Task, TaskStatus
from taskboard.models.user import User
from taskboard.schemas.project import ProjectCreate, ProjectUpdate
from taskboard.services import access, stats
from taskboard.services.tasks import priority_rank, task_options

logger = logging.getLogger(__name__)


def _task_count(*conditions):
    return (
        select(func.count(Task.id))
        .where(Task.project_id == Project.id, Task.is_deleted == False, *conditions)
        .correlate(Project)
        .scalar_subquery()
    )


async def list_projects(db: AsyncSession, actor_id: int) -> list[tuple[Project, int, int]]:
    """Visible projects, newest first, with (tasks_count, backlog_tasks_count)."""
    result = await db.execute(
        select(
            Project,
            _task_count().label("tasks_count"),
            _task_count(Task.status == TaskStatus.BACKLOG.value).label("backlog_tasks_count"),
        )
        .options(joinedload(Project.owner))
        .where(access.visible_projects_clause(actor_id))
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    return [(row.Project, row.tasks_count, row.backlog_tasks_count) for row in result.all()]


async def create_project(db: AsyncSession, actor_id: int, data: ProjectCreate) -> Project:
    project = Project(
        uuid=str(uuid.uuid4()),
        name=data.name,
        description=data.description,
        owner_id=actor_id,
    )
    db.add(project)
    await db.flush()
    logger.info("User %s created project %s", actor_id, project.uuid)
    return project


async def get_project_detail(db: AsyncSession, actor_id: int, project_uuid: str) -> dict:
    project = await access.get_visible_project(db, project_uuid, actor_id)

    result = await db.execute(
        select(Task)
        .options(*task_options())
        .filter(Task.project_id == project.id, Task.is_deleted == False)
        .order_by(priority_rank(), Task.created_at.asc(), Task.id.asc())
    )
    tasks = result.scalars().unique().all()

    tasks_by_status = {s.value: [] for s in TaskStatus}
    for task in tasks:
        tasks_by_status[task.status].append(task)

    total = len(tasks)
    done = len(tasks_by_status[TaskStatus.DONE.value])
    return {
        "project": project,
        "tasks_by_status": tasks_by_status,
        "stats": {
            "total_tasks": total,
            "backlog_tasks": len(tasks_by_status[TaskStatus.BACKLOG.value]),
            "todo_tasks": len(tasks_by_status[TaskStatus.TODO.value]),
            "in_progress_tasks": len(tasks_by_status[TaskStatus.IN_PROGRESS.value]),
            "done_tasks": done,
            "completion_rate": stats.completion_rate(done, total),
        },
    }


async def update_project(db: AsyncSession, actor_id: int, project_uuid: str, data: ProjectUpdate) -> Project:
    project = await access.get_owned_project(db, project_uuid, actor_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(project, key, value)
    return project


async def delete_project(db: AsyncSession, actor_id: int, project_uuid: str) -> None:
    """Hard delete; takes every task (soft-deleted ones included) and member row with it."""
    project = await access.get_owned_project(db, project_uuid, actor_id)
    await db.execute(delete(Task).where(Task.project_id == project.id))
    await db.execute(delete(ProjectMember).where(ProjectMember.project_id == project.id))
    await db.delete(project)
    logger.info("User %s deleted project %s", actor_id, project_uuid)


# ── Members ─────────────────────────────────────────────

async def _member_rows(db: AsyncSession, project_id: int) -> list[dict]:
    result = await db.execute(
        select(User, ProjectMember.role, ProjectMember.created_at)
        .join(ProjectMember, ProjectMember.user_id == User.id)
        .where(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.id)
    )
    return [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "role": role,
            "joined_at": joined_at,
        }
        for user, role, joined_at in result.all()
    ]


async def list_members(db: AsyncSession, actor_id: int, project_uuid: str) -> list[dict]:
    project = await access.get_member_readable_project(db, project_uuid, actor_id)
    return await _member_rows(db, project.id)


async def add_members(
    db: AsyncSession, actor_id: int, project_uuid: str, user_ids: list[int], role: str
) -> list[dict]:
    """Attach users with `role`; existing members get the new role, nobody is detached."""
    project = await access.get_member_writable_project(db, project_uuid, actor_id)

    result = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    known = set(result.scalars().all())
    missing = {
        f"user_ids.{i}": f"The selected user_ids.{i} is invalid."
        for i, uid in enumerate(user_ids)
        if uid not in known
    }
    if missing:
        raise validation_error(missing)

    result = await db.execute(
        select(ProjectMember).where(
            ProjectMember.project_id == project.id,
            ProjectMember.user_id.in_(user_ids),
        )
    )
    existing = {m.user_id: m for m in result.scalars().all()}

    for uid in dict.fromkeys(user_ids):
        if uid in existing:
            existing[uid].role = role
        else:
            db.add(ProjectMember(project_id=project.id, user_id=uid, role=role))
    await db.flush()

    logger.info("User %s added %s member(s) to project %s", actor_id, len(user_ids), project_uuid)
    return await _member_rows(db, project.id)
