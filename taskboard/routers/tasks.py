from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import settings
from taskboard.dependencies import get_db, get_actor_id
from taskboard.schemas.common import ApiResponse, MessageResponse, Page
from taskboard.schemas.task import (
    Task as TaskSchema,
    TaskCreate,
    TaskMove,
    TaskStatusUpdate,
    TaskUpdate,
)
from taskboard.services import tasks as task_service

router = APIRouter(prefix="/projects/{project_uuid}", tags=["tasks"])


@router.get("/tasks", response_model=ApiResponse[Page[TaskSchema]])
async def list_tasks(
    project_uuid: str,
    status_filter: str | None = Query(None, alias="status"),
    type_filter: str | None = Query(None, alias="type"),
    priority_filter: str | None = Query(None, alias="priority"),
    assignee: str | None = None,
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern=r"^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    result = await task_service.list_tasks(
        db,
        actor_id,
        project_uuid,
        status_filter=status_filter,
        type_filter=type_filter,
        priority_filter=priority_filter,
        assignee=assignee,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        per_page=per_page,
    )
    return {"data": result}


@router.post("/tasks", response_model=ApiResponse[TaskSchema], status_code=status.HTTP_201_CREATED)
async def create_task(
    project_uuid: str,
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    task = await task_service.create_task(db, actor_id, project_uuid, data)
    await db.commit()
    return {"data": await task_service.reload_task(db, task.id), "message": "Task created successfully"}


@router.get("/tasks-search", response_model=ApiResponse[Page[TaskSchema]])
async def search_tasks(
    project_uuid: str,
    q: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    return {"data": await task_service.search_tasks(db, actor_id, project_uuid, q, page, per_page)}


@router.get("/tasks/{task_uuid}", response_model=ApiResponse[TaskSchema])
async def get_task(
    project_uuid: str,
    task_uuid: str,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    return {"data": await task_service.get_task(db, actor_id, project_uuid, task_uuid)}


@router.put("/tasks/{task_uuid}", response_model=ApiResponse[TaskSchema])
async def update_task(
    project_uuid: str,
    task_uuid: str,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    task = await task_service.update_task(db, actor_id, project_uuid, task_uuid, data)
    await db.commit()
    return {"data": await task_service.reload_task(db, task.id), "message": "Task updated successfully"}


@router.patch("/tasks/{task_uuid}/status", response_model=ApiResponse[TaskSchema])
async def update_task_status(
    project_uuid: str,
    task_uuid: str,
    data: TaskStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    task = await task_service.update_status(db, actor_id, project_uuid, task_uuid, data.status)
    await db.commit()
    return {"data": await task_service.reload_task(db, task.id), "message": "Task status updated successfully"}


@router.patch("/tasks/{task_uuid}/move", response_model=ApiResponse[TaskSchema])
async def move_from_backlog(
    project_uuid: str,
    task_uuid: str,
    data: TaskMove,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    task = await task_service.move_from_backlog(db, actor_id, project_uuid, task_uuid, data)
    await db.commit()
    return {"data": await task_service.reload_task(db, task.id), "message": "Task moved from backlog successfully"}


@router.delete("/tasks/{task_uuid}", response_model=MessageResponse)
async def delete_task(
    project_uuid: str,
    task_uuid: str,
    db: AsyncSession = Depends(get_db),
    actor_id: int = Depends(get_actor_id),
):
    await task_service.delete_task(db, actor_id, project_uuid, task_uuid)
    await db.commit()
    return {"message": "Task deleted successfully"}
