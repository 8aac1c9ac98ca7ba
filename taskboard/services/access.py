"""
Project visibility.

Every lookup of a project by its public UUID goes through one of the
predicates below. They are rebuilt on every call from the explicit actor id.
A project that exists but fails the predicate is reported exactly like a
missing one (404), so outsiders cannot probe for project UUIDs.
"""
from fastapi import HTTPException, status
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, joinedload

from taskboard.models.projects import Project, ProjectMember, MemberRole
from taskboard.models.tasks import Task

PROJECT_NOT_FOUND = "Project not found"

MEMBER_WRITE_ROLES = (MemberRole.OWNER.value, MemberRole.ADMIN.value)


def _has_assigned_task(actor_id: int):
    # Aliased so an enclosing query over tasks is never correlated into this check
    assigned = aliased(Task)
    return (
        select(assigned.id)
        .where(
            assigned.project_id == Project.id,
            assigned.user_id == actor_id,
            assigned.is_deleted == False,
        )
        .correlate(Project)
        .exists()
    )


def _has_member_row(actor_id: int, roles: tuple[str, ...] | None = None):
    conditions = [ProjectMember.project_id == Project.id, ProjectMember.user_id == actor_id]
    if roles is not None:
        conditions.append(ProjectMember.role.in_(roles))
    return select(ProjectMember.id).where(and_(*conditions)).correlate(Project).exists()


def visible_projects_clause(actor_id: int):
    """owner OR has at least one live task in the project."""
    return or_(Project.owner_id == actor_id, _has_assigned_task(actor_id))


def member_read_clause(actor_id: int):
    return or_(visible_projects_clause(actor_id), _has_member_row(actor_id))


def member_write_clause(actor_id: int):
    # Narrower than visibility: task assignees without an admin role cannot add members
    return or_(Project.owner_id == actor_id, _has_member_row(actor_id, MEMBER_WRITE_ROLES))


def owner_clause(actor_id: int):
    return Project.owner_id == actor_id


def visible_project_ids(actor_id: int):
    return select(Project.id).where(visible_projects_clause(actor_id))


async def _get_project(db: AsyncSession, project_uuid: str, clause) -> Project:
    result = await db.execute(
        select(Project)
        .options(joinedload(Project.owner))
        .filter(Project.uuid == project_uuid, clause)
        .execution_options(populate_existing=True)
    )
    project = result.scalars().first()
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=PROJECT_NOT_FOUND)
    return project


async def get_visible_project(db: AsyncSession, project_uuid: str, actor_id: int) -> Project:
    return await _get_project(db, project_uuid, visible_projects_clause(actor_id))


async def get_owned_project(db: AsyncSession, project_uuid: str, actor_id: int) -> Project:
    return await _get_project(db, project_uuid, owner_clause(actor_id))


async def get_member_readable_project(db: AsyncSession, project_uuid: str, actor_id: int) -> Project:
    return await _get_project(db, project_uuid, member_read_clause(actor_id))


async def get_member_writable_project(db: AsyncSession, project_uuid: str, actor_id: int) -> Project:
    return await _get_project(db, project_uuid, member_write_clause(actor_id))
