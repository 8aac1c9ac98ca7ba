from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.projects import Project
from taskboard.models.tasks import Task, TaskStatus, TaskType, TaskPriority
from taskboard.services import access
from taskboard.services.tasks import task_options


def completion_rate(done: int, total: int) -> float:
    """Percentage of done tasks, 2 decimals; 0 for an empty set."""
    if total == 0:
        return 0.0
    return round(done / total * 100, 2)


async def _count_by(db: AsyncSession, column, enum_cls, scope) -> dict[str, int]:
    result = await db.execute(
        select(column, func.count(Task.id)).where(*scope).group_by(column)
    )
    counts = {member.value: 0 for member in enum_cls}
    for value, count in result.all():
        counts[value] = count
    return counts


async def summarize(db: AsyncSession, scope: list, today: date | None = None) -> dict:
    """
    Aggregate the live tasks matched by `scope` (a list of WHERE clauses).

    A task is overdue once its due day has started and it is not done.
    """
    today = today or date.today()
    scope = [Task.is_deleted == False, *scope]

    status_stats = await _count_by(db, Task.status, TaskStatus, scope)
    type_stats = await _count_by(db, Task.type, TaskType, scope)
    priority_stats = await _count_by(db, Task.priority, TaskPriority, scope)

    overdue = (await db.execute(
        select(func.count(Task.id)).where(
            *scope,
            Task.due_date.is_not(None),
            Task.due_date <= today,
            Task.status != TaskStatus.DONE.value,
        )
    )).scalar_one()

    total = sum(status_stats.values())
    done = status_stats[TaskStatus.DONE.value]
    return {
        "status_stats": status_stats,
        "type_stats": type_stats,
        "priority_stats": priority_stats,
        "total": total,
        "done": done,
        "overdue": overdue,
        "completion_rate": completion_rate(done, total),
    }


async def project_stats(db: AsyncSession, actor_id: int, project_uuid: str) -> dict:
    project = await access.get_visible_project(db, project_uuid, actor_id)
    summary = await summarize(db, [Task.project_id == project.id])
    return {
        "status_stats": summary["status_stats"],
        "type_stats": summary["type_stats"],
        "priority_stats": summary["priority_stats"],
        "total_tasks": summary["total"],
        "completed_tasks": summary["done"],
        "overdue_tasks": summary["overdue"],
        "completion_rate": summary["completion_rate"],
    }


async def dashboard_stats(db: AsyncSession, actor_id: int) -> dict:
    project_count = (await db.execute(
        select(func.count(Project.id)).where(access.visible_projects_clause(actor_id))
    )).scalar_one()

    summary = await summarize(db, [Task.project_id.in_(access.visible_project_ids(actor_id))])
    return {
        "project_count": project_count,
        "total_tasks": summary["total"],
        "completed": summary["done"],
        "in_progress": summary["status_stats"][TaskStatus.IN_PROGRESS.value],
        "overdue": summary["overdue"],
        "completion_rate": summary["completion_rate"],
        "status_stats": summary["status_stats"],
        "type_stats": summary["type_stats"],
        "priority_stats": summary["priority_stats"],
    }


async def recent_tasks(db: AsyncSession, actor_id: int, limit: int = 5) -> list[dict]:
    result = await db.execute(
        select(Task)
        .options(*task_options())
        .where(
            Task.is_deleted == False,
            Task.project_id.in_(access.visible_project_ids(actor_id)),
        )
        .order_by(Task.updated_at.desc(), Task.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": task.id,
            "uuid": task.uuid,
            "title": task.title,
            "status": task.status,
            "priority": task.priority,
            "project_name": task.project.name,
            "project_uuid": task.project.uuid,
            "assignee": task.assignee,
            "updated_at": task.updated_at,
        }
        for task in result.scalars().unique().all()
    ]
