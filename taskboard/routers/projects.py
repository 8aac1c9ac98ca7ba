from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.dependencies import get_db, get_actor_id
from taskboard.schemas.common import ApiResponse, MessageResponse
from taskboard.schemas.project import (
    Member,
    MembersAdd,
    Project as ProjectSchema,
    ProjectCreate,
    ProjectDetail,
    ProjectListItem,
    ProjectUpdate,
)
from taskboard.schemas.stats import ProjectStats
from taskboard.schemas.task import BacklogListing, BacklogTaskCreate, Task as TaskSchema
from taskboard.services import access, stats as stats_service
from taskboard.services import projects as project_service
from taskboard.services import tasks as task_service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ApiResponse[list[ProjectListItem]])
async def list_projects(db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    rows = await project_service.list_projects(db, actor_id)
    return {
        "data": [
            ProjectListItem.model_validate(project).model_copy(
                update={"tasks_count": tasks_count, "backlog_tasks_count": backlog_count}
            )
            for project, tasks_count, backlog_count in rows
        ]
    }


@router.post("", response_model=ApiResponse[ProjectSchema], status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    project = await project_service.create_project(db, actor_id, data)
    await db.commit()
    project = await access.get_owned_project(db, project.uuid, actor_id)
    return {"data": project, "message": "Project created successfully"}


@router.get("/{project_uuid}", response_model=ApiResponse[ProjectDetail])
async def get_project(project_uuid: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    return {"data": await project_service.get_project_detail(db, actor_id, project_uuid)}


@router.put("/{project_uuid}", response_model=ApiResponse[ProjectSchema])
async def update_project(
    project_uuid: str,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    await project_service.update_project(db, actor_id, project_uuid, data)
    await db.commit()
    project = await access.get_owned_project(db, project_uuid, actor_id)
    return {"data": project, "message": "Project updated successfully"}


@router.delete("/{project_uuid}", response_model=MessageResponse)
async def delete_project(project_uuid: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    await project_service.delete_project(db, actor_id, project_uuid)
    await db.commit()
    return {"message": "Project deleted successfully"}


# ── Backlog ─────────────────────────────────────────────

@router.get("/{project_uuid}/backlog", response_model=BacklogListing)
async def get_backlog(project_uuid: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    project, tasks = await task_service.list_backlog(db, actor_id, project_uuid)
    return {"data": tasks, "project": project}


@router.post("/{project_uuid}/backlog", response_model=ApiResponse[TaskSchema], status_code=status.HTTP_201_CREATED)
async def add_to_backlog(
    project_uuid: str,
    data: BacklogTaskCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    task = await task_service.add_to_backlog(db, actor_id, project_uuid, data)
    await db.commit()
    return {"data": await task_service.reload_task(db, task.id), "message": "Task added to backlog successfully"}


# ── Stats & members ─────────────────────────────────────

@router.get("/{project_uuid}/stats", response_model=ApiResponse[ProjectStats])
async def get_project_stats(project_uuid: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    return {"data": await stats_service.project_stats(db, actor_id, project_uuid)}


@router.get("/{project_uuid}/members", response_model=ApiResponse[list[Member]])
async def get_members(project_uuid: str, db: AsyncSession = Depends(get_db), actor_id: int = Depends(get_actor_id)):
    return {"data": await project_service.list_members(db, actor_id, project_uuid)}


@router.post("/{project_uuid}/members", response_model=ApiResponse[list[Member]], status_code=status.HTTP_201_CREATED)
async def add_members(
    project_uuid: str,
    data: MembersAdd,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    members = await project_service.add_members(db, actor_id, project_uuid, data.user_ids, data.role)
    await db.commit()
    return {"data": members, "message": "Members added successfully"}
